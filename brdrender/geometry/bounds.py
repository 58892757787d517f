"""Board outline resolution: outline wires, extents and the pixel grid."""
import logging
import math
from dataclasses import dataclass

from brdrender.brd.models import Layer, PlacedElement, Primitive
from brdrender.brd.transform import wire_to_board
from brdrender.errors import DegenerateBoundsError

from .chord import ChordData, cardinal_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardBounds:
    """Physical extent of the board surface (mm)."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class PixelGrid:
    """Texture raster shared by every layer buffer."""
    coord_scale: float  # Pixels per mm
    width: int
    height: int
    offset_x: int  # Added to scaled X to reach the buffer origin
    offset_y: int

    @classmethod
    def from_bounds(cls, bounds: BoardBounds, coord_scale: float) -> "PixelGrid":
        width = math.ceil(bounds.width * coord_scale)
        height = math.ceil(bounds.height * coord_scale)
        if not (width > 1 and height > 1):
            raise DegenerateBoundsError(width, height)
        return cls(
            coord_scale=coord_scale,
            width=width,
            height=height,
            offset_x=-math.ceil(bounds.min_x * coord_scale),
            offset_y=-math.ceil(bounds.min_y * coord_scale),
        )

    @property
    def center_offset(self) -> tuple[float, float]:
        """Shift that centers scaled board coordinates on the origin."""
        return self.offset_x - self.width / 2, self.offset_y - self.height / 2


def _wire(source: Primitive, x1, y1, x2, y2, curve: float | None = None) -> Primitive:
    attrs = {
        "x1": repr(float(x1)), "y1": repr(float(y1)),
        "x2": repr(float(x2)), "y2": repr(float(y2)),
        "width": source.get("width", "0"),
    }
    if source.has("layer"):
        attrs["layer"] = source.get("layer")
    if curve is not None:
        attrs["curve"] = repr(float(curve))
    return Primitive("wire", attrs, parent=source.parent)


def circle_to_wires(circle: Primitive) -> list[Primitive]:
    """Four quarter arcs, counterclockwise from the west point."""
    x, y, r = circle.num("x"), circle.num("y"), circle.num("radius")
    return [
        _wire(circle, x - r, y, x, y - r, 90),
        _wire(circle, x, y - r, x + r, y, 90),
        _wire(circle, x + r, y, x, y + r, 90),
        _wire(circle, x, y + r, x - r, y, 90),
    ]


def _vertex_xy(vertex: dict[str, str]) -> tuple[float, float]:
    return float(vertex.get("x", 0)), float(vertex.get("y", 0))


def polygon_to_wires(polygon: Primitive) -> list[Primitive]:
    """
    One wire per polygon edge; each carries its start vertex's curve.

    The edge from the last vertex back to the first is implied, unless
    the vertex list already repeats its start point.
    """
    verts = polygon.vertices
    if len(verts) < 3:
        return []
    edges = list(zip(verts, verts[1:]))
    if _vertex_xy(verts[-1]) != _vertex_xy(verts[0]):
        edges.append((verts[-1], verts[0]))
    wires = []
    for a, b in edges:
        curve = float(a["curve"]) if a.get("curve") else None
        wires.append(_wire(polygon, *_vertex_xy(a), *_vertex_xy(b), curve))
    return wires


def rectangle_to_wires(rect: Primitive) -> list[Primitive]:
    x1, y1, x2, y2 = (rect.num(k) for k in ("x1", "y1", "x2", "y2"))
    return [
        _wire(rect, x1, y1, x2, y1),
        _wire(rect, x2, y1, x2, y2),
        _wire(rect, x2, y2, x1, y2),
        _wire(rect, x1, y2, x1, y1),
    ]


def synthesize_outline_wires(layer: Layer) -> list[Primitive]:
    """
    Turn circle, polygon and rectangle outlines into wires.

    The new wires are appended to the layer and returned.
    """
    wires: list[Primitive] = []
    for circle in layer.get_elements("circle"):
        wires.extend(circle_to_wires(circle))
    for polygon in layer.get_elements("polygon"):
        wires.extend(polygon_to_wires(polygon))
    for rect in layer.get_elements("rectangle"):
        wires.extend(rectangle_to_wires(rect))
    layer.elements.extend(wires)
    return wires


def wire_extremes(wire: Primitive) -> list[tuple[float, float]]:
    """Endpoints plus any arc cardinal points."""
    points = [(wire.num("x1"), wire.num("y1")), (wire.num("x2"), wire.num("y2"))]
    if wire.curve:
        points.extend(cardinal_points(ChordData.from_wire(wire)))
    return points


def scan_bounds(wires: list[Primitive]) -> BoardBounds:
    """Min/max over all wire extremes (board mm)."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for wire in wires:
        for x, y in wire_extremes(wire):
            min_x = min(x, min_x)
            min_y = min(y, min_y)
            max_x = max(x, max_x)
            max_y = max(y, max_y)
    if min_x == math.inf:
        raise DegenerateBoundsError(0, 0)
    return BoardBounds(min_x, min_y, max_x, max_y)


def resolve_bounds(
    layer: Layer,
    elements: dict[str, PlacedElement],
    coord_scale: float,
) -> tuple[BoardBounds, PixelGrid, list[Primitive]]:
    """
    Resolve the board outline.

    Args:
        layer: The Bounds layer, already classified
        elements: Placed elements by name
        coord_scale: Pixels per mm

    Returns:
        Tuple of (bounds in mm, pixel grid, outline wires in board mm)
    """
    synthesize_outline_wires(layer)
    wires = [wire_to_board(w, elements.get(w.parent)) for w in layer.get_elements("wire")]
    bounds = scan_bounds(wires)
    grid = PixelGrid.from_bounds(bounds, coord_scale)
    logger.info(
        "Board bounds %.3f x %.3f mm -> %d x %d px",
        bounds.width, bounds.height, grid.width, grid.height,
    )
    return bounds, grid, wires
