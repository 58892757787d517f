"""Drill bores and their connectors."""
import logging
import math

import numpy as np
from scipy.spatial.transform import Rotation

from brdrender.brd.models import Layer, PlacedElement, Primitive
from brdrender.brd.transform import element_matrix
from brdrender.config import DRILL_SEGMENTS
from brdrender.geometry.bounds import PixelGrid

from .connector import Anchor, Connector
from .mesh import MeshData

logger = logging.getLogger(__name__)

DRILL_TAGS = ("hole", "pad", "via")

# Connector orientations: rotate `up` (+y) onto +z or -z
FACE_UP = Rotation.from_euler("x", 90, degrees=True)
FACE_DOWN = Rotation.from_euler("x", -90, degrees=True)


def collect_drills(layers: list[Layer]) -> list[Primitive]:
    """
    Every hole, pad and via over all layers, one per bore.

    A bore is identified by its parent element and its x/y attributes;
    the first primitive seen for a bore is kept.
    """
    seen: set[tuple[str | None, str | None, str | None]] = set()
    drills = []
    for layer in layers:
        for primitive in layer.get_elements(*DRILL_TAGS):
            key = (primitive.parent, primitive.get("x"), primitive.get("y"))
            if key in seen:
                continue
            seen.add(key)
            drills.append(primitive)
    logger.debug("Collected %d unique drill(s)", len(drills))
    return drills


def drill_center(drill: Primitive, element: PlacedElement | None, grid: PixelGrid) -> tuple[float, float]:
    """Bore center in centered pixel space."""
    matrix = element_matrix(element, grid.coord_scale)
    x, y, _ = matrix @ np.array([drill.num("x") * grid.coord_scale, drill.num("y") * grid.coord_scale, 1.0])
    cx, cy = grid.center_offset
    return float(x) + cx, float(y) + cy


def drill_cylinder(drill: Primitive, element: PlacedElement | None, grid: PixelGrid,
                   thickness: float, segments: int = DRILL_SEGMENTS) -> MeshData:
    """
    Open cylinder lining a bore, spanning the full board thickness.

    Faces point into the bore. The cylinder is built in the element's
    frame; a mirrored frame would turn it inside out, so winding is
    reversed to compensate.
    """
    scale = grid.coord_scale
    radius = drill.num("drill") * scale / 2
    x, y = drill.num("x") * scale, drill.num("y") * scale

    vertices = []
    uvs = []
    for i in range(segments + 1):
        theta = 2 * math.pi * i / segments
        px, py = x + radius * math.cos(theta), y + radius * math.sin(theta)
        vertices.extend([(px, py, -thickness), (px, py, 0.0)])
        uvs.extend([(i / segments, 0.0), (i / segments, 1.0)])

    faces = []
    for i in range(segments):
        a, b, c, d = 2 * i, 2 * i + 1, 2 * i + 2, 2 * i + 3
        faces.extend([(a, b, c), (c, b, d)])
    vertices = np.array(vertices)
    faces = np.array(faces)

    matrix = element_matrix(element, scale)
    xy = vertices[:, :2] @ matrix[:2, :2].T + matrix[:2, 2]
    cx, cy = grid.center_offset
    vertices = np.column_stack([xy[:, 0] + cx, xy[:, 1] + cy, vertices[:, 2]])
    if np.linalg.det(matrix[:2, :2]) < 0:
        faces = faces[:, ::-1].copy()

    return MeshData(vertices, faces, np.array(uvs), name=drill.tag, user_data={"drill": drill})


def drill_connectors(drill: Primitive, element: PlacedElement | None, grid: PixelGrid,
                     thickness: float, root: Anchor) -> list[Connector]:
    """Top and bottom connectors at a hole or pad bore."""
    x, y = drill_center(drill, element, grid)
    user_data = {"drill": drill}
    if element is not None:
        user_data["element"] = element
    return [
        Connector(np.array([x, y, 0.0]), FACE_UP, root, dict(user_data)),
        Connector(np.array([x, y, -thickness]), FACE_DOWN, root, dict(user_data)),
    ]


def build_drills(
    layers: list[Layer],
    elements: dict[str, PlacedElement],
    grid: PixelGrid,
    thickness: float,
    root: Anchor,
) -> tuple[list[MeshData], list[Connector]]:
    """
    Bores for every unique drill.

    Returns:
        Tuple of (cylinder meshes, connectors for holes and pads)
    """
    meshes = []
    connectors = []
    for drill in collect_drills(layers):
        element = elements.get(drill.parent)
        meshes.append(drill_cylinder(drill, element, grid, thickness))
        if drill.tag in ("hole", "pad"):
            connectors.extend(drill_connectors(drill, element, grid, thickness, root))
    return meshes, connectors


def element_connector(element: PlacedElement, grid: PixelGrid, thickness: float,
                      root: Anchor) -> Connector:
    """
    Connector at a placed element's origin, facing away from its board face.

    Mirrored elements sit on the bottom face and point down.
    """
    scale = grid.coord_scale
    cx, cy = grid.center_offset
    flip = math.pi if element.mirrored else 0.0
    orientation = Rotation.from_euler("XYZ", [math.pi / 2 + flip, element.rot.angle + flip, 0.0])
    z = -thickness if element.mirrored else 0.0
    return Connector(
        np.array([element.x * scale + cx, element.y * scale + cy, z]),
        orientation,
        root,
        {"element": element, "package": element.package_node},
    )
