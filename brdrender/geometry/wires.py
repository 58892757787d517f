"""Stitching unordered outline wires into continuous loops."""
import logging
from collections import deque
from dataclasses import dataclass, field

from brdrender.brd.models import Primitive
from brdrender.config import ARC_SEGMENTS, POINT_KEY_DIGITS

from .chord import ChordData, arc_points

logger = logging.getLogger(__name__)

PointKey = tuple[float, float]


def point_key(x: float, y: float) -> PointKey:
    """Hashable endpoint, tolerant of float noise."""
    return round(x, POINT_KEY_DIGITS) + 0.0, round(y, POINT_KEY_DIGITS) + 0.0


def wire_ends(wire: Primitive) -> tuple[PointKey, PointKey]:
    return (
        point_key(wire.num("x1"), wire.num("y1")),
        point_key(wire.num("x2"), wire.num("y2")),
    )


@dataclass
class WireLoop:
    """A run of end-to-end wires."""
    wires: list[Primitive] = field(default_factory=list)
    parent: str | None = None  # Placed element the outline came from

    @property
    def closed(self) -> bool:
        if not self.wires:
            return False
        return wire_ends(self.wires[0])[0] == wire_ends(self.wires[-1])[1]

    def points(self, scale: float = 1.0, segments: int = ARC_SEGMENTS) -> list[tuple[float, float]]:
        """Polyline through the loop; arcs are tessellated."""
        points: list[tuple[float, float]] = []
        for wire in self.wires:
            if wire.curve:
                segment = arc_points(ChordData.from_wire(wire, scale), segments)
            else:
                segment = [
                    (wire.num("x1") * scale, wire.num("y1") * scale),
                    (wire.num("x2") * scale, wire.num("y2") * scale),
                ]
            points.extend(segment if not points else segment[1:])
        return points


def dedupe_wires(wires: list[Primitive]) -> list[Primitive]:
    """
    Drop wires repeating an earlier wire, in either direction.

    Curvature is part of the identity: two half circles sharing both
    endpoints are distinct, a wire and its reversal are not.
    """
    seen: set[tuple[PointKey, PointKey, float]] = set()
    unique = []
    for wire in wires:
        start, end = wire_ends(wire)
        curve = round(wire.curve, POINT_KEY_DIGITS) + 0.0
        key = (start, end, curve) if start <= end else (end, start, -curve + 0.0)
        if key in seen:
            logger.debug("Removed duplicate wire %s -> %s", start, end)
            continue
        seen.add(key)
        unique.append(wire)
    return unique


def sort_wires(wires: list[Primitive]) -> list[Primitive]:
    """
    Order wires so that each one starts where the previous ended.

    Loops grow greedily from an arbitrary seed, at either end; wires are
    reversed (curvature negated) where that lets them fit. When nothing
    more connects, a new loop is seeded. The result is one flat list;
    see `split_loops`.
    """
    pending = dedupe_wires(wires)
    ordered: list[Primitive] = []

    while pending:
        loop = deque([pending.pop(0)])
        while True:
            start = wire_ends(loop[0])[0]
            end = wire_ends(loop[-1])[1]
            if start == end:
                break

            for index, wire in enumerate(pending):
                a, b = wire_ends(wire)
                if a == end:
                    loop.append(pending.pop(index))
                elif b == end:
                    loop.append(pending.pop(index).reversed())
                elif a == start:
                    loop.appendleft(pending.pop(index).reversed())
                elif b == start:
                    loop.appendleft(pending.pop(index))
                else:
                    continue
                break
            else:
                break
        ordered.extend(loop)

    return ordered


def split_loops(wires: list[Primitive]) -> list[WireLoop]:
    """Cut a sorted wire list wherever a wire does not start at the previous end."""
    loops: list[WireLoop] = []
    previous_end = None
    for wire in wires:
        start, end = wire_ends(wire)
        if not loops or start != previous_end:
            loops.append(WireLoop(parent=wire.parent))
        loops[-1].wires.append(wire)
        previous_end = end
    return loops


def group_wires_by_parent(wires: list[Primitive]) -> dict[str | None, list[Primitive]]:
    """Group wires by source element, keeping first-seen order."""
    groups: dict[str | None, list[Primitive]] = {}
    for wire in wires:
        groups.setdefault(wire.parent, []).append(wire)
    return groups


def build_loops(wires: list[Primitive]) -> list[WireLoop]:
    """
    Sort outline wires per source element and split them into loops.

    Open loops are kept; a fill closes them implicitly.
    """
    loops: list[WireLoop] = []
    for parent, group in group_wires_by_parent(wires).items():
        for loop in split_loops(sort_wires(group)):
            if not loop.closed:
                logger.warning(
                    "Board outline loop of %d wire(s) from %s is not closed",
                    len(loop.wires), parent or "plain",
                )
            loops.append(loop)
    return loops
