"""Coordinate transformation utilities."""
import math

import numpy as np

from .models import AngleData, PlacedElement, Primitive


def translation(x: float, y: float) -> np.ndarray:
    return np.array([[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]])


def rotation(angle: float) -> np.ndarray:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array([[cos_a, -sin_a, 0.0], [sin_a, cos_a, 0.0], [0.0, 0.0, 1.0]])


def scaling(sx: float, sy: float) -> np.ndarray:
    return np.diag([sx, sy, 1.0])


def frame_matrix(x: float, y: float, rot: AngleData) -> np.ndarray:
    """
    Affine matrix of an element frame.

    Applied to local points as: rotate, spin (flip Y), mirror (flip X),
    then translate.
    """
    flip = scaling(-1.0 if rot.mirror else 1.0, -1.0 if rot.spin else 1.0)
    return translation(x, y) @ flip @ rotation(rot.angle)


def primitive_matrix(x: float, y: float, rot: AngleData) -> np.ndarray:
    """
    Own frame of a pad or SMD: rotate first, then mirror and spin.
    """
    flip = scaling(-1.0 if rot.mirror else 1.0, -1.0 if rot.spin else 1.0)
    return translation(x, y) @ rotation(rot.angle) @ flip


def element_matrix(element: PlacedElement | None, scale: float = 1.0) -> np.ndarray:
    """Frame of a placed element, or identity for board-level primitives."""
    if element is None:
        return np.eye(3)
    return frame_matrix(element.x * scale, element.y * scale, element.rot)


def apply_matrix(matrix: np.ndarray, x: float, y: float) -> tuple[float, float]:
    px, py, _ = matrix @ np.array([x, y, 1.0])
    return float(px), float(py)


def is_reflection(matrix: np.ndarray) -> bool:
    return float(np.linalg.det(matrix[:2, :2])) < 0


def wire_to_board(wire: Primitive, element: PlacedElement | None) -> Primitive:
    """
    Express a wire in board coordinates (mm).

    Circular arcs survive rigid motions; a reflection reverses the
    winding, so the curvature changes sign.
    """
    if element is None:
        return wire.clone()

    matrix = element_matrix(element)
    x1, y1 = apply_matrix(matrix, wire.num("x1"), wire.num("y1"))
    x2, y2 = apply_matrix(matrix, wire.num("x2"), wire.num("y2"))
    board = wire.clone()
    board.attrs.update({"x1": repr(x1), "y1": repr(y1), "x2": repr(x2), "y2": repr(y2)})
    if wire.has("curve") and is_reflection(matrix):
        board.attrs["curve"] = repr(-wire.curve)
    return board
