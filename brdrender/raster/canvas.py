"""RGBA layer buffers and the compositing operators used on them."""
from pathlib import Path

import numpy as np
from PIL import Image, ImageColor


def parse_color(value: str) -> np.ndarray:
    """CSS colour string -> RGB floats in [0, 1]."""
    rgb = ImageColor.getrgb(value)[:3]
    return np.array(rgb, dtype=np.float32) / 255.0


class Canvas:
    """
    Premultiplied RGBA float buffer, shape (height, width, 4).

    Row 0 is the north edge of the board. Operators follow the 2D canvas
    compositing model with a coverage mask as the source shape.
    """

    def __init__(self, width: int, height: int, buffer: np.ndarray | None = None):
        self.width = width
        self.height = height
        if buffer is None:
            buffer = np.zeros((height, width, 4), dtype=np.float32)
        self.buffer = buffer

    @property
    def alpha(self) -> np.ndarray:
        return self.buffer[..., 3]

    def fill(self, coverage: np.ndarray, color: str, opacity: float = 1.0) -> "Canvas":
        """source-over: paint a colour through a coverage mask."""
        src_alpha = (coverage * opacity)[..., None]
        src = np.concatenate([src_alpha * parse_color(color), src_alpha], axis=-1)
        self.buffer = src + self.buffer * (1.0 - src_alpha)
        return self

    def draw(self, other: np.ndarray, opacity: float = 1.0) -> "Canvas":
        """source-over: paint another premultiplied buffer on top."""
        src = other * opacity
        self.buffer = src + self.buffer * (1.0 - src[..., 3:4])
        return self

    def erase(self, coverage: np.ndarray, opacity: float = 1.0) -> "Canvas":
        """destination-out: remove paint where the mask covers."""
        self.buffer = self.buffer * (1.0 - coverage * opacity)[..., None]
        return self

    def clip(self, coverage: np.ndarray) -> "Canvas":
        """destination-in: keep paint only where the mask covers."""
        self.buffer = self.buffer * coverage[..., None]
        return self

    def to_image(self) -> Image.Image:
        """Straight-alpha 8-bit RGBA image."""
        alpha = self.alpha
        rgb = np.divide(
            self.buffer[..., :3], alpha[..., None],
            out=np.zeros_like(self.buffer[..., :3]), where=alpha[..., None] > 0,
        )
        data = np.concatenate([rgb, alpha[..., None]], axis=-1)
        return Image.fromarray(np.round(np.clip(data, 0.0, 1.0) * 255).astype(np.uint8))


def save_png(buffer: np.ndarray, output_path: str | Path) -> Image.Image:
    """
    Save a premultiplied layer buffer as a PNG file.

    Args:
        buffer: Array of shape (height, width, 4)
        output_path: Destination file

    Returns:
        PIL Image object
    """
    height, width = buffer.shape[:2]
    image = Canvas(width, height, buffer).to_image()
    image.save(str(output_path))
    return image
