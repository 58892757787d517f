"""EAGLE BRD board translation into layer textures and depth geometry."""
from .board import BoardRender, BrdRenderer, render_brd_file, render_brd_string
from .config import RenderOptions
from .errors import BrdError, DegenerateBoundsError, MissingNodeError

__all__ = [
    "BoardRender", "BrdRenderer", "render_brd_file", "render_brd_string",
    "RenderOptions",
    "BrdError", "DegenerateBoundsError", "MissingNodeError",
]
