from .canvas import Canvas, parse_color, save_png
from .coverage import CoverageMask
from .shapes import PrimitivePainter, substitute_text
from .layers import LayerRasterizer
from .composite import composite_bottom, composite_top

__all__ = [
    "Canvas", "parse_color", "save_png",
    "CoverageMask",
    "PrimitivePainter", "substitute_text",
    "LayerRasterizer",
    "composite_bottom", "composite_top",
]
