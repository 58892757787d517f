"""Draw BRD primitives into coverage masks."""
import logging
import math
import re

import numpy as np
from PIL import ImageFont

from brdrender.brd.models import AngleData, PlacedElement, Primitive
from brdrender.brd.rules import DesignRules, land_radius, rest_ring
from brdrender.brd.transform import (
    element_matrix, primitive_matrix, rotation, scaling, translation,
)
from brdrender.geometry.chord import ChordData, arc_points
from brdrender.geometry.wires import WireLoop

from .coverage import CoverageMask
from .styles import ANCHOR_X, ANCHOR_Y, DEFAULT_ALIGN

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r">\w*")


def substitute_text(text: str, element: PlacedElement | None) -> str:
    """Fill >NAME and >VALUE from the placed element; drop other >TOKENs."""
    if element is not None:
        text = text.replace(">NAME", element.name).replace(">VALUE", element.value)
    return _TOKEN_PATTERN.sub("", text)


def is_upside_down(angle: float) -> bool:
    """True for net text rotations that would read upside-down."""
    angle = math.fmod(angle, 2 * math.pi)
    return (
        -3 * math.pi / 2 <= angle < -math.pi / 2
        or math.pi / 2 < angle <= 3 * math.pi / 2
    )


def octagon_points(radius: float) -> list[tuple[float, float]]:
    step = radius * math.sin(math.pi / 8)
    return [
        (radius, step), (step, radius), (-step, radius), (-radius, step),
        (-radius, -step), (-step, -radius), (step, -radius), (radius, -step),
    ]


class PrimitivePainter:
    """
    Draws primitives onto a coverage mask.

    Primitive coordinates are BRD millimetres; placed-element children
    are drawn in their element's frame.
    """

    def __init__(
        self,
        mask: CoverageMask,
        elements: dict[str, PlacedElement],
        rules: DesignRules,
        font_path: str | None = None,
    ):
        self.mask = mask
        self.elements = elements
        self.rules = rules
        self.scale = mask.grid.coord_scale
        self.font_path = font_path
        self._fonts: dict[int, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}

    def frame(self, primitive: Primitive) -> np.ndarray:
        return element_matrix(self.elements.get(primitive.parent), self.scale)

    def _coord(self, primitive: Primitive, name: str) -> float:
        return primitive.num(name) * self.scale

    @staticmethod
    def matching(primitives: list[Primitive], layer_match: int | None) -> list[Primitive]:
        if layer_match is None:
            return primitives
        return [p for p in primitives if p.layer == layer_match]

    def wire_points(self, wire: Primitive, matrix: np.ndarray) -> list[tuple[float, float]]:
        if wire.curve:
            chord = ChordData.from_wire(wire, self.scale)
            full_turn = self.mask.segments_for(chord.radius, matrix)
            return arc_points(chord, segments=full_turn)
        return [
            (self._coord(wire, "x1"), self._coord(wire, "y1")),
            (self._coord(wire, "x2"), self._coord(wire, "y2")),
        ]

    def wires(self, wires: list[Primitive], width_offset: float = 0.0,
              layer_match: int | None = None, framed: bool = True):
        """
        Stroke wires with round caps.

        Args:
            wires: Wire primitives
            width_offset: Added to each wire's width (pixels)
            layer_match: Only draw wires on this BRD layer
            framed: False for wires already in board coordinates
        """
        for wire in self.matching(wires, layer_match):
            matrix = self.frame(wire) if framed else np.eye(3)
            width = self._coord(wire, "width") + width_offset
            self.mask.stroke(self.wire_points(wire, matrix), width, matrix)

    def holes(self, holes: list[Primitive], offset: float = 0.0):
        """Drill circles of holes, pads or vias."""
        for hole in holes:
            radius = self._coord(hole, "drill") / 2 + offset
            self.mask.circle(self._coord(hole, "x"), self._coord(hole, "y"), radius, self.frame(hole))

    def _land(self, matrix: np.ndarray, shape: str, radius: float, offset: float,
              elongation: str | None = None) -> bool:
        if shape == "round":
            self.mask.circle(0.0, 0.0, radius, matrix)
        elif shape == "square":
            self.mask.rect(-radius, -radius, radius, radius, matrix)
        elif shape == "octagon":
            self.mask.polygon(octagon_points(radius), matrix)
        elif shape == "long" and elongation:
            step = (radius - offset) * 0.01 * self.rules.number(elongation)
            self.mask.stroke([(-step, 0.0), (step, 0.0)], radius * 2, matrix)
        elif shape == "offset" and elongation:
            step = (radius - offset) * 0.01 * self.rules.number(elongation)
            self.mask.stroke([(0.0, 0.0), (step * 2, 0.0)], radius * 2, matrix)
        else:
            return False
        return True

    def pads(self, pads: list[Primitive], tags: list[str], offset: float = 0.0):
        percent, minimum, maximum = self.rules.pad_ring(tags)
        for pad in pads:
            drill = pad.num("drill") / 2
            ring = rest_ring(drill, percent, minimum, maximum)
            radius = land_radius(pad.num("diameter") / 2, drill, ring) * self.scale + offset

            shape = pad.get("shape") or "round"
            elongation = {"long": "psElongationLong", "offset": "psElongationOffset"}.get(shape)
            matrix = self.frame(pad) @ primitive_matrix(
                self._coord(pad, "x"), self._coord(pad, "y"), pad.rot)
            if not self._land(matrix, shape, radius, offset, elongation):
                logger.warning("Unknown pad shape %r on %s", shape, pad.parent or "board")

    def via_rings(self, vias: list[Primitive], tags: list[str], offset: float = 0.0):
        percent, minimum, maximum = self.rules.via_ring(tags)
        for via in vias:
            drill = via.num("drill") / 2
            ring = rest_ring(drill, percent, minimum, maximum)
            radius = land_radius(via.num("diameter") / 2, drill, ring) * self.scale + offset

            shape = via.get("shape") or "round"
            matrix = self.frame(via) @ translation(self._coord(via, "x"), self._coord(via, "y"))
            if shape in ("long", "offset") or not self._land(matrix, shape, radius, offset):
                logger.warning("Unknown via shape %r", shape)

    def smds(self, smds: list[Primitive], offset: float = 0.0):
        for smd in smds:
            dx = self._coord(smd, "dx") + offset * 2
            dy = self._coord(smd, "dy") + offset * 2
            matrix = self.frame(smd) @ primitive_matrix(
                self._coord(smd, "x"), self._coord(smd, "y"), smd.rot)
            roundness = smd.num("roundness") / 100
            if roundness > 0:
                self._rounded_rect(dx, dy, roundness * min(dx, dy) / 2, matrix)
            else:
                self.mask.rect(-dx / 2, -dy / 2, dx / 2, dy / 2, matrix)

    def _rounded_rect(self, dx: float, dy: float, corner: float, matrix: np.ndarray):
        hx, hy = dx / 2 - corner, dy / 2 - corner
        self.mask.rect(-dx / 2, -hy, dx / 2, hy, matrix)
        self.mask.rect(-hx, -dy / 2, hx, dy / 2, matrix)
        for cx, cy in ((hx, hy), (-hx, hy), (-hx, -hy), (hx, -hy)):
            self.mask.circle(cx, cy, corner, matrix)

    def polygon_points(self, polygon: Primitive, matrix: np.ndarray) -> list[tuple[float, float]]:
        """Outline of a polygon; curved edges run to the next vertex."""
        verts = polygon.vertices
        points: list[tuple[float, float]] = []
        for index, vert in enumerate(verts):
            x, y = float(vert.get("x", 0)) * self.scale, float(vert.get("y", 0)) * self.scale
            curve = float(vert.get("curve") or 0)
            if not curve:
                points.append((x, y))
                continue
            nxt = verts[(index + 1) % len(verts)]
            chord = ChordData.from_points(
                x, y, float(nxt.get("x", 0)) * self.scale, float(nxt.get("y", 0)) * self.scale, curve)
            points.extend(arc_points(chord, self.mask.segments_for(chord.radius, matrix))[:-1])
        return points

    def polygons(self, polygons: list[Primitive], offset: float = 0.0,
                 layer_match: int | None = None):
        for polygon in self.matching(polygons, layer_match):
            if len(polygon.vertices) < 3:
                continue
            matrix = self.frame(polygon)
            points = self.polygon_points(polygon, matrix)
            self.mask.polygon(points, matrix)
            if offset:
                self.mask.stroke(points, offset, matrix, closed=True)

    def rectangles(self, rects: list[Primitive], offset: float = 0.0,
                   layer_match: int | None = None):
        for rect in self.matching(rects, layer_match):
            x1, y1 = self._coord(rect, "x1"), self._coord(rect, "y1")
            x2, y2 = self._coord(rect, "x2"), self._coord(rect, "y2")
            # Rectangles rotate about their center
            cx, cy = (x1 + x2) / 2, (y1 + y2) / 2
            matrix = self.frame(rect) @ translation(cx, cy) @ rotation(rect.rot.angle)
            hx, hy = abs(x2 - x1) / 2, abs(y2 - y1) / 2
            corners = [(-hx, -hy), (hx, -hy), (hx, hy), (-hx, hy)]
            self.mask.polygon(corners, matrix)
            if offset:
                self.mask.stroke(corners, offset, matrix, closed=True)

    def circles(self, circles: list[Primitive], offset: float = 0.0,
                layer_match: int | None = None, fill: bool = False, stroke: bool = False):
        for circle in self.matching(circles, layer_match):
            matrix = self.frame(circle)
            x, y = self._coord(circle, "x"), self._coord(circle, "y")
            radius = self._coord(circle, "radius") + offset
            width = self._coord(circle, "width") + offset
            # A zero-width circle is a filled disc in EAGLE
            if fill or circle.num("width") == 0:
                self.mask.circle(x, y, radius, matrix)
            elif stroke:
                segments = self.mask.segments_for(radius, matrix)
                ring = [(x + radius * math.cos(2 * math.pi * i / segments),
                         y + radius * math.sin(2 * math.pi * i / segments))
                        for i in range(segments)]
                self.mask.stroke(ring, width, matrix, closed=True)

    def font(self, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        if size not in self._fonts:
            if self.font_path:
                self._fonts[size] = ImageFont.truetype(self.font_path, size)
            else:
                self._fonts[size] = ImageFont.load_default(size)
        return self._fonts[size]

    def texts(self, texts: list[Primitive], layer_match: int | None = None):
        for text in self.matching(texts, layer_match):
            element = self.elements.get(text.parent)
            content = substitute_text(text.text, element)
            if not content:
                continue
            font_size = round(self._coord(text, "size"))
            if font_size <= 0:
                continue

            rot = AngleData.parse(text.get("rot")) if text.has("rot") else AngleData()
            local_rot = rot.angle + (element.rot.angle if element else 0.0)
            flip = not rot.spin if is_upside_down(local_rot) else False

            align_y, _, align_x = (text.get("align") or DEFAULT_ALIGN).partition("-")
            if align_x == "":
                align_y, align_x = "center", align_y
            if flip:
                align_y = {"top": "bottom", "bottom": "top"}.get(align_y, align_y)
                align_x = {"left": "right", "right": "left"}.get(align_x, align_x)
            anchor = ANCHOR_X.get(align_x, "l") + ANCHOR_Y.get(align_y, "d")

            lines = content.split("\n")
            matrix = (
                self.frame(text)
                @ translation(self._coord(text, "x"), self._coord(text, "y"))
                @ scaling(1.0, -1.0)
                @ scaling(-1.0 if rot.mirror else 1.0, 1.0)
                @ scaling(-1.0 if flip else 1.0, -1.0 if flip else 1.0)
                @ rotation(-rot.angle)
                @ translation(0.0, -(len(lines) - 1) * font_size / 2)
            )
            device_size = max(1, round(font_size * self.mask.device_scale(matrix)))
            self.mask.text(lines, self.font(device_size), font_size, anchor, matrix)

    def outline(self, loops: list[WireLoop]):
        """Even-odd fill of board outline loops given in board mm."""
        self.mask.evenodd([loop.points(self.scale) for loop in loops])
