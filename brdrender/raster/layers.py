"""Per-layer texture passes."""
import logging

import numpy as np

from brdrender.brd.models import Layer, PlacedElement, Primitive
from brdrender.brd.rules import DesignRules
from brdrender.config import RenderOptions
from brdrender.geometry.bounds import PixelGrid
from brdrender.geometry.wires import WireLoop

from .canvas import Canvas
from .coverage import CoverageMask
from .shapes import PrimitivePainter
from .styles import SILKSCREEN_BOTTOM, SILKSCREEN_TOP, STOP_BOTTOM, STOP_TOP

logger = logging.getLogger(__name__)


class LayerRasterizer:
    """
    Renders every layer buffer of a board.

    The Bounds layer must be rendered first: all other passes are
    clipped to its silhouette.
    """

    def __init__(
        self,
        layers: list[Layer],
        grid: PixelGrid,
        elements: dict[str, PlacedElement],
        rules: DesignRules,
        options: RenderOptions,
        loops: list[WireLoop],
        board_wires: list[Primitive],
    ):
        self.layers = layers
        self.grid = grid
        self.elements = elements
        self.rules = rules
        self.options = options
        self.loops = loops
        self.board_wires = board_wires
        self.scale = grid.coord_scale
        self.bounds_alpha: np.ndarray | None = None

    def _canvas(self) -> Canvas:
        return Canvas(self.grid.width, self.grid.height)

    def _painter(self) -> PrimitivePainter:
        mask = CoverageMask(self.grid, self.options.supersample)
        return PrimitivePainter(mask, self.elements, self.rules, self.options.font_path)

    def _finish(self, layer: Layer, canvas: Canvas) -> np.ndarray:
        if self.bounds_alpha is not None:
            canvas.clip(self.bounds_alpha)
        layer.buffer = canvas.buffer
        return layer.buffer

    def _bounds_layer(self) -> Layer:
        return next(layer for layer in self.layers if layer.has_tag("Bounds"))

    def render_bounds(self, layer: Layer) -> np.ndarray:
        """Board silhouette: outline loops, minus hole and pad drills."""
        canvas = self._canvas()

        outline = self._painter()
        outline.outline(self.loops)
        canvas.fill(outline.mask.coverage(), self.options.color("bounds"))

        drills = self._painter()
        drills.holes(layer.get_elements("hole", "pad"))
        canvas.erase(drills.mask.coverage())

        self.bounds_alpha = canvas.alpha.copy()
        layer.buffer = canvas.buffer
        return layer.buffer

    def render_copper_layer(self, layer: Layer) -> np.ndarray:
        canvas = self._canvas()
        color = self.options.color("copper")
        margin = self.rules.distance_mm("slThermalIsolate") * self.scale
        dimension = self.rules.distance_mm("mdCopperDimension") * self.scale
        pads = layer.get_elements("pad")
        smds = layer.get_elements("smd")
        vias = layer.get_elements("via")
        wires = layer.get_elements("wire")

        # Polygons go down first; everything else carves into them
        fill = self._painter()
        fill.polygons(layer.get_elements("polygon"))
        canvas.fill(fill.mask.coverage(), color)

        clearance = self._painter()
        clearance.wires(wires, width_offset=margin * 2)
        clearance.pads(pads, layer.tags, offset=margin)
        clearance.smds(smds, offset=margin)
        clearance.via_rings(vias, layer.tags, offset=margin)
        clearance.wires(self.board_wires, width_offset=dimension, framed=False)
        clearance.holes(self._bounds_layer().get_elements("hole"), offset=dimension)
        canvas.erase(clearance.mask.coverage())

        traces = self._painter()
        traces.wires(wires)
        traces.pads(pads, layer.tags)
        traces.smds(smds)
        traces.via_rings(vias, layer.tags)
        canvas.fill(traces.mask.coverage(), color)

        bores = self._painter()
        bores.holes(vias)
        canvas.erase(bores.mask.coverage())

        return self._finish(layer, canvas)

    def face_copper(self, layer: Layer) -> Layer | None:
        """Copper layer on the same face as a mask layer."""
        side = "Top" if layer.has_tag("Top") else "Bottom"
        return next(
            (copper for copper in self.layers if copper.has_tag("Copper") and copper.has_tag(side)),
            None,
        )

    def render_mask_layer(self, layer: Layer) -> np.ndarray:
        """Solder mask bearing the silkscreen legend."""
        canvas = self._canvas()
        opacity = self.options.mask_opacity
        margin = self.rules.distance_mm("mlMinStopFrame") * self.scale
        top = layer.has_tag("Top")
        copper = self.face_copper(layer)

        sheet = self._painter()
        sheet.mask.fill_all()
        canvas.fill(sheet.mask.coverage(), self.options.color("solderMask"), opacity)

        # Copper shows through the mask
        if copper is not None and copper.buffer is not None:
            canvas.erase(copper.buffer[..., 3], opacity / 2)

        silk = self._painter()
        for number in SILKSCREEN_TOP if top else SILKSCREEN_BOTTOM:
            silk.polygons(layer.get_elements("polygon"), layer_match=number)
            silk.rectangles(layer.get_elements("rectangle"), layer_match=number)
            silk.circles(layer.get_elements("circle"), layer_match=number, stroke=True)
            silk.wires(layer.get_elements("wire"), layer_match=number)
            silk.texts(layer.get_elements("text"), layer_match=number)
        canvas.fill(silk.mask.coverage(), self.options.color("silkscreen"))

        stop = STOP_TOP if top else STOP_BOTTOM
        cut = self._painter()
        cut.polygons(layer.get_elements("polygon"), layer_match=stop)
        cut.rectangles(layer.get_elements("rectangle"), layer_match=stop)
        cut.circles(layer.get_elements("circle"), layer_match=stop, fill=True)
        cut.pads(layer.get_elements("pad"), layer.tags, offset=margin)
        cut.wires(layer.get_elements("wire"), layer_match=stop)
        if copper is not None:
            cut.holes(copper.get_elements("via"))
            cut.smds(copper.get_elements("smd"), offset=margin)
        canvas.erase(cut.mask.coverage())

        return self._finish(layer, canvas)

    def render_paste_layer(self, layer: Layer) -> np.ndarray:
        canvas = self._canvas()
        paste = self._painter()
        paste.rectangles(layer.get_elements("rectangle"))
        paste.circles(layer.get_elements("circle"), stroke=True)
        paste.polygons(layer.get_elements("polygon"))
        canvas.fill(paste.mask.coverage(), self.options.color("solderPaste"))
        return self._finish(layer, canvas)

    def render_isolate_layer(self, layer: Layer, via_source: Layer | None) -> np.ndarray:
        """
        Core or prepreg sheet.

        Thicker sheets pass less light: alpha is 1 - 1 / (1 + thickness),
        a rough stand-in for scattering in resin-impregnated material.
        """
        canvas = self._canvas()
        sheet = self._painter()
        sheet.mask.fill_all()
        canvas.fill(
            sheet.mask.coverage(),
            self.options.color("prepreg"),
            1 - 1 / (1 + layer.thickness),
        )

        if via_source is not None:
            bores = self._painter()
            bores.holes(via_source.get_elements("via"))
            canvas.erase(bores.mask.coverage())

        return self._finish(layer, canvas)

    def render_all(self):
        """Bounds, then copper, mask, solderpaste and isolate layers."""
        self.render_bounds(self._bounds_layer())

        for layer in self.layers:
            if layer.has_tag("Copper"):
                logger.debug("Rendering copper layer %s", layer.name)
                self.render_copper_layer(layer)
        for layer in self.layers:
            if layer.has_tag("Mask"):
                logger.debug("Rendering mask layer %s", layer.name)
                self.render_mask_layer(layer)
        for layer in self.layers:
            if layer.has_tag("Solderpaste"):
                logger.debug("Rendering solderpaste layer %s", layer.name)
                self.render_paste_layer(layer)
        for index, layer in enumerate(self.layers):
            if layer.has_tag("Isolate"):
                logger.debug("Rendering isolate layer %s", layer.name)
                self.render_isolate_layer(layer, self.layers[index - 1] if index else None)
