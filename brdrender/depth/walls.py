"""Board edge walls extruded from the outline loops."""
import logging

import numpy as np

from brdrender.config import ARC_SEGMENTS
from brdrender.geometry.bounds import PixelGrid
from brdrender.geometry.wires import WireLoop

from .mesh import MeshData

logger = logging.getLogger(__name__)


def extrude_loop(points: list[tuple[float, float]], thickness: float, name: str = "") -> MeshData:
    """
    Side walls of a polyline swept from z = -thickness to z = 0.

    No caps. Every vertex carries u = 0 and v = its height above the
    bottom face as a fraction of the thickness, for the bevel texture.
    """
    if len(points) > 1 and points[0] != points[-1]:
        points = list(points) + [points[0]]

    vertices = []
    faces = []
    uvs = []
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if (x0, y0) == (x1, y1):
            continue
        base = len(vertices)
        vertices.extend([
            (x0, y0, -thickness), (x1, y1, -thickness),
            (x1, y1, 0.0), (x0, y0, 0.0),
        ])
        uvs.extend([(0.0, 0.0), (0.0, 0.0), (0.0, 1.0), (0.0, 1.0)])
        faces.extend([(base, base + 1, base + 2), (base, base + 2, base + 3)])

    if not faces:
        return MeshData.empty(name)
    return MeshData(np.array(vertices), np.array(faces), np.array(uvs), name)


def build_walls(loops: list[WireLoop], grid: PixelGrid, thickness: float) -> list[MeshData]:
    """
    One wall mesh per outline loop, in centered pixel space.

    Loops are in board millimetres, so element frames are already applied.
    """
    cx, cy = grid.center_offset
    walls = []
    for loop in loops:
        points = [
            (x + cx, y + cy)
            for x, y in loop.points(grid.coord_scale, segments=ARC_SEGMENTS)
        ]
        mesh = extrude_loop(points, thickness, name=loop.parent or "")
        if len(mesh):
            walls.append(mesh)
    logger.debug("Built %d wall mesh(es)", len(walls))
    return walls
