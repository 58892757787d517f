"""Merging layer buffers into top and bottom board images."""
import numpy as np

from brdrender.brd.models import Layer

from .canvas import Canvas


def _composite(layers: list[Layer], bounds_alpha: np.ndarray | None) -> np.ndarray:
    buffers = [layer.buffer for layer in layers if layer.visible and layer.buffer is not None]
    if not buffers:
        raise ValueError("No rendered layers to composite")

    height, width = buffers[0].shape[:2]
    canvas = Canvas(width, height)
    for buffer in buffers:
        canvas.draw(buffer)
    if bounds_alpha is not None:
        canvas.clip(bounds_alpha)
    return canvas.buffer


def composite_top(layers: list[Layer], bounds_alpha: np.ndarray | None = None) -> np.ndarray:
    """The board seen from above: bottom layers first, top layers last."""
    return _composite(list(reversed(layers)), bounds_alpha)


def composite_bottom(layers: list[Layer], bounds_alpha: np.ndarray | None = None) -> np.ndarray:
    """
    The board seen from below.

    Pixels stay in board orientation; the bottom plate's geometry
    accounts for viewing from underneath.
    """
    return _composite(layers, bounds_alpha)
