"""Supersampled coverage masks drawn with Pillow."""
import math

import numpy as np
from PIL import Image, ImageChops, ImageDraw, ImageFont

from brdrender.geometry.bounds import PixelGrid

Point = tuple[float, float]

# Longest chord, in device pixels, when flattening circles
MAX_CHORD = 2.0
MIN_CIRCLE_SEGMENTS = 16


def circle_points(cx: float, cy: float, radius: float, segments: int) -> list[Point]:
    return [
        (cx + radius * math.cos(2 * math.pi * i / segments),
         cy + radius * math.sin(2 * math.pi * i / segments))
        for i in range(segments)
    ]


class CoverageMask:
    """
    One drawing pass: shapes accumulate as coverage in [0, 1] per pixel.

    Shapes are given in board pixels (Y up, before the grid offset) and
    an optional local affine matrix. The mask is drawn `supersample`
    times larger, then box-filtered down.
    """

    def __init__(self, grid: PixelGrid, supersample: int = 2):
        self.grid = grid
        self.k = supersample
        self.size = (grid.width * supersample, grid.height * supersample)
        self.image = Image.new("L", self.size, 0)
        self.draw = ImageDraw.Draw(self.image)

        # Board px -> device px, row 0 at the north edge
        k = float(supersample)
        self.base = np.array([
            [k, 0.0, k * grid.offset_x],
            [0.0, -k, k * (grid.height - grid.offset_y)],
            [0.0, 0.0, 1.0],
        ])

    def _device(self, matrix: np.ndarray | None) -> np.ndarray:
        return self.base if matrix is None else self.base @ matrix

    def _project(self, points: list[Point], matrix: np.ndarray | None) -> list[Point]:
        m = self._device(matrix)
        pts = np.asarray(points, dtype=float)
        xs = m[0, 0] * pts[:, 0] + m[0, 1] * pts[:, 1] + m[0, 2]
        ys = m[1, 0] * pts[:, 0] + m[1, 1] * pts[:, 1] + m[1, 2]
        return list(zip(xs.tolist(), ys.tolist()))

    def device_scale(self, matrix: np.ndarray | None = None) -> float:
        """Device pixels per local unit."""
        return math.sqrt(abs(np.linalg.det(self._device(matrix)[:2, :2])))

    def segments_for(self, radius: float, matrix: np.ndarray | None = None) -> int:
        circumference = 2 * math.pi * radius * self.device_scale(matrix)
        return max(MIN_CIRCLE_SEGMENTS, math.ceil(circumference / MAX_CHORD))

    def polygon(self, points: list[Point], matrix: np.ndarray | None = None):
        if len(points) < 3:
            return
        self.draw.polygon(self._project(points, matrix), fill=255)

    def circle(self, cx: float, cy: float, radius: float, matrix: np.ndarray | None = None):
        if radius <= 0:
            return
        self.polygon(circle_points(cx, cy, radius, self.segments_for(radius, matrix)), matrix)

    def rect(self, x0: float, y0: float, x1: float, y1: float, matrix: np.ndarray | None = None):
        self.polygon([(x0, y0), (x1, y0), (x1, y1), (x0, y1)], matrix)

    def stroke(self, points: list[Point], width: float, matrix: np.ndarray | None = None,
               closed: bool = False):
        """Polyline of the given width with round caps and joins."""
        if width <= 0 or not points:
            return
        half = width / 2
        path = list(points) + ([points[0]] if closed else [])
        for (x0, y0), (x1, y1) in zip(path, path[1:]):
            length = math.hypot(x1 - x0, y1 - y0)
            if length == 0:
                continue
            nx = -(y1 - y0) / length * half
            ny = (x1 - x0) / length * half
            self.polygon([(x0 + nx, y0 + ny), (x1 + nx, y1 + ny),
                          (x1 - nx, y1 - ny), (x0 - nx, y0 - ny)], matrix)
        for x, y in path:
            self.circle(x, y, half, matrix)

    def fill_all(self):
        self.draw.rectangle([0, 0, self.size[0], self.size[1]], fill=255)

    def evenodd(self, loops: list[list[Point]], matrix: np.ndarray | None = None):
        """Fill loops so that nested loops cut holes."""
        parity = np.zeros((self.size[1], self.size[0]), dtype=bool)
        for loop in loops:
            if len(loop) < 3:
                continue
            scratch = Image.new("1", self.size, 0)
            ImageDraw.Draw(scratch).polygon(self._project(loop, matrix), fill=1)
            parity ^= np.asarray(scratch, dtype=bool)
        filled = Image.fromarray(parity.astype(np.uint8) * 255)
        self.image = ImageChops.lighter(self.image, filled)
        self.draw = ImageDraw.Draw(self.image)

    def text(self, lines: list[str], font: ImageFont.ImageFont | ImageFont.FreeTypeFont,
             line_height: float, anchor: str, matrix: np.ndarray):
        """
        Stamp text given in a Y-down local frame.

        Args:
            lines: Lines of text, stacked downwards from the local origin
            font: Font sized in device pixels
            line_height: Distance between baselines, local units
            anchor: Pillow anchor, e.g. "ls" for left/baseline
            matrix: Local frame (Y down) -> board px
        """
        device = self._device(matrix)
        k = self.device_scale(matrix)
        for index, line in enumerate(lines):
            if not line:
                continue
            left, top, right, bottom = font.getbbox(line, anchor=anchor)
            if right <= left or bottom <= top:
                continue
            stamp = Image.new("L", (int(right - left) + 2, int(bottom - top) + 2), 0)
            ImageDraw.Draw(stamp).text((1 - left, 1 - top), line, fill=255, font=font, anchor=anchor)

            # Stamp px -> local: scale down, shift to the line's origin
            to_local = np.array([
                [1 / k, 0.0, (left - 1) / k],
                [0.0, 1 / k, (top - 1) / k + index * line_height],
                [0.0, 0.0, 1.0],
            ])
            self._paste(stamp, device @ to_local)

    def _paste(self, stamp: Image.Image, to_device: np.ndarray):
        w, h = stamp.size
        corners = to_device @ np.array([[0, w, w, 0], [0, 0, h, h], [1, 1, 1, 1]], dtype=float)
        x0 = max(0, math.floor(corners[0].min()))
        y0 = max(0, math.floor(corners[1].min()))
        x1 = min(self.size[0], math.ceil(corners[0].max()) + 1)
        y1 = min(self.size[1], math.ceil(corners[1].max()) + 1)
        if x1 <= x0 or y1 <= y0:
            return

        # Pillow wants the inverse map: output px -> stamp px.
        # Its pixel centers sit at +0.5; device pixel centers sit on integers.
        shift = np.array([[1.0, 0.0, x0 - 0.5], [0.0, 1.0, y0 - 0.5], [0.0, 0.0, 1.0]])
        inverse = np.linalg.inv(to_device) @ shift
        coeffs = tuple(inverse[:2].reshape(-1).tolist())
        warped = stamp.transform((x1 - x0, y1 - y0), Image.Transform.AFFINE, coeffs,
                                 resample=Image.Resampling.BILINEAR)
        region = self.image.crop((x0, y0, x1, y1))
        self.image.paste(ImageChops.lighter(region, warped), (x0, y0))
        self.draw = ImageDraw.Draw(self.image)

    def coverage(self) -> np.ndarray:
        """Per-pixel coverage, shape (height, width), float32 in [0, 1]."""
        reduced = self.image.reduce(self.k) if self.k > 1 else self.image
        return np.asarray(reduced, dtype=np.float32) / 255.0
