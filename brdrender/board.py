"""Board translation pipeline: BRD document in, textures and geometry out."""
import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from brdrender.brd.classify import ElementClassifier
from brdrender.brd.document import BrdDocument
from brdrender.brd.models import Layer, PlacedElement
from brdrender.brd.rules import DesignRules
from brdrender.brd.stack import build_layer_stack
from brdrender.config import RenderOptions
from brdrender.depth.connector import Anchor, Connector
from brdrender.depth.drills import build_drills, element_connector
from brdrender.depth.mesh import MeshData, board_plates, edge_bevel_texture, ghost_package
from brdrender.depth.walls import build_walls
from brdrender.geometry.bounds import BoardBounds, PixelGrid, resolve_bounds
from brdrender.geometry.wires import WireLoop, build_loops
from brdrender.raster.composite import composite_bottom, composite_top
from brdrender.raster.layers import LayerRasterizer

logger = logging.getLogger(__name__)


@dataclass
class BoardRender:
    """Everything produced from one board."""
    rules: DesignRules
    layers: list[Layer]
    bounds: BoardBounds
    grid: PixelGrid
    thickness: float  # Pixels
    elements: dict[str, PlacedElement]
    loops: list[WireLoop]  # Board outline, board mm
    root: Anchor
    composite_top: np.ndarray | None = None
    composite_bottom: np.ndarray | None = None
    walls: list[MeshData] = field(default_factory=list)
    drills: list[MeshData] = field(default_factory=list)
    plates: list[MeshData] = field(default_factory=list)
    ghosts: list[MeshData] = field(default_factory=list)
    edge_texture: np.ndarray | None = None
    hole_connectors: list[Connector] = field(default_factory=list)
    element_connectors: list[Connector] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def coord_scale(self) -> float:
        return self.grid.coord_scale

    def get_layer(self, name: str) -> Layer | None:
        return next((layer for layer in self.layers if layer.name == name), None)


class BrdRenderer:
    """Translate a parsed BRD document into layer textures and depth geometry."""

    def __init__(self, document: BrdDocument, options: RenderOptions | None = None):
        self.document = document
        self.options = options or RenderOptions()

    def render(self) -> BoardRender:
        """
        Run the full pipeline.

        Raises:
            MissingNodeError: The document lacks designrules or board
            DegenerateBoundsError: The outline is missing or too small
        """
        options = self.options
        scale = options.coord_scale
        logger.info("EAGLE version %s", self.document.version or "unknown")

        rules = DesignRules.from_document(self.document)
        stack = build_layer_stack(rules, scale, options.thickness)
        layers = stack.layers

        elements = ElementClassifier(self.document, layers).classify()

        bounds_layer = next(layer for layer in layers if layer.has_tag("Bounds"))
        bounds, grid, board_wires = resolve_bounds(bounds_layer, elements, scale)
        loops = build_loops(board_wires)

        root = Anchor("board")
        render = BoardRender(
            rules=rules,
            layers=layers,
            bounds=bounds,
            grid=grid,
            thickness=stack.thickness,
            elements=elements,
            loops=loops,
            root=root,
        )

        rasterizer = LayerRasterizer(layers, grid, elements, rules, options, loops, board_wires)
        rasterizer.render_all()
        render.composite_top = composite_top(layers, rasterizer.bounds_alpha)
        render.composite_bottom = composite_bottom(layers, rasterizer.bounds_alpha)

        self._build_depth(render)
        logger.info(
            "Rendered %d layer(s), %d wall(s), %d drill(s)",
            len(layers), len(render.walls), len(render.drills),
        )
        return render

    def _build_depth(self, render: BoardRender):
        grid, thickness = render.grid, render.thickness

        render.edge_texture = edge_bevel_texture(thickness)
        render.walls = build_walls(render.loops, grid, thickness)
        render.drills, render.hole_connectors = build_drills(
            render.layers, render.elements, grid, thickness, render.root)
        render.element_connectors = [
            element_connector(element, grid, thickness, render.root)
            for element in render.elements.values()
        ]
        render.plates = board_plates(grid, render.layers, thickness, self.options.composite)

        if self.options.view_ghosts:
            ghosts = (ghost_package(el, grid, thickness) for el in render.elements.values())
            render.ghosts = [ghost for ghost in ghosts if ghost is not None]

        if self.options.view_connectors:
            for connector in render.hole_connectors + render.element_connectors:
                logger.info(
                    "Connector at (%.1f, %.1f, %.1f) normal %s",
                    *connector.position, np.round(connector.normal, 3).tolist(),
                )


def render_brd_string(text: str | bytes, options: RenderOptions | None = None) -> BoardRender:
    """Render a board from BRD XML text."""
    return BrdRenderer(BrdDocument.from_string(text), options).render()


def render_brd_file(path: str | Path, options: RenderOptions | None = None) -> BoardRender:
    """Render a board from a .brd file."""
    return BrdRenderer(BrdDocument.from_file(path), options).render()
