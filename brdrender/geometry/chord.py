"""Circular-arc geometry for curved wires and polygon edges."""
import math
from dataclasses import dataclass

from brdrender.config import ARC_SEGMENTS

ANGLE_EPSILON = 1e-9


@dataclass(frozen=True)
class ChordData:
    """
    Circle through a curved wire.

    EAGLE stores an arc as two endpoints plus a signed sweep angle
    (positive = counterclockwise). Bearings are measured from the center;
    bearing2 is unwrapped so that travelling from bearing1 to bearing2 in
    the direction of the curve covers exactly the sweep.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    curve: float  # Radians, signed
    chord: float  # Straight-line endpoint distance
    bearing: float  # Direction of the chord
    x: float  # Center
    y: float
    radius: float  # Always positive
    bearing1: float  # Center -> start
    bearing2: float  # Center -> end, unwrapped

    @classmethod
    def from_points(
        cls, x1: float, y1: float, x2: float, y2: float, curve_degrees: float
    ) -> "ChordData":
        curve = math.radians(curve_degrees)
        dx = x2 - x1
        dy = y2 - y1
        chord = math.hypot(dx, dy)
        bearing = math.atan2(dy, dx)

        # Center lies off the chord at this bearing from the start point
        angle = bearing + math.pi / 2 - curve / 2
        radius = chord / (2 * math.sin(curve / 2))
        x = x1 + radius * math.cos(angle)
        y = y1 + radius * math.sin(angle)

        bearing1 = math.atan2(y1 - y, x1 - x)
        bearing2 = math.atan2(y2 - y, x2 - x)
        if curve > 0 and bearing2 < bearing1:
            bearing2 += 2 * math.pi
        elif curve < 0 and bearing2 > bearing1:
            bearing2 -= 2 * math.pi

        return cls(x1, y1, x2, y2, curve, chord, bearing, x, y, abs(radius), bearing1, bearing2)

    @classmethod
    def from_wire(cls, wire, scale: float = 1.0) -> "ChordData":
        """Chord of a wire primitive, optionally scaled to pixels."""
        return cls.from_points(
            wire.num("x1") * scale, wire.num("y1") * scale,
            wire.num("x2") * scale, wire.num("y2") * scale,
            wire.curve,
        )

    @property
    def sweep(self) -> float:
        return self.bearing2 - self.bearing1

    def point_at(self, bearing: float) -> tuple[float, float]:
        return (
            self.x + self.radius * math.cos(bearing),
            self.y + self.radius * math.sin(bearing),
        )


def cardinal_points(chord: ChordData) -> list[tuple[float, float]]:
    """
    Axis-extreme points of the circle that fall strictly inside the sweep.

    These are the only places an arc can extend past its endpoints.
    """
    # Bearings carry float noise; an endpoint on a cardinal angle is not inside
    low = min(chord.bearing1, chord.bearing2) + ANGLE_EPSILON
    high = max(chord.bearing1, chord.bearing2) - ANGLE_EPSILON
    points = []
    quarter = math.pi / 2
    k = math.floor(low / quarter) + 1
    while k * quarter < high:
        points.append(chord.point_at(k * quarter))
        k += 1
    return points


def arc_points(chord: ChordData, segments: int = ARC_SEGMENTS) -> list[tuple[float, float]]:
    """
    Tessellate an arc, start and end included.

    A full turn gets `segments` steps; shorter sweeps get proportionally
    fewer, at least one.
    """
    steps = max(1, math.ceil(segments * abs(chord.sweep) / (2 * math.pi) - ANGLE_EPSILON))
    points = [(chord.x1, chord.y1)]
    for i in range(1, steps):
        points.append(chord.point_at(chord.bearing1 + chord.sweep * i / steps))
    points.append((chord.x2, chord.y2))
    return points
