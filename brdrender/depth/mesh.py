"""Plain mesh data and the flat board plates."""
import math
from dataclasses import dataclass, field

import numpy as np

from brdrender.brd.models import Layer, PlacedElement
from brdrender.brd.transform import element_matrix
from brdrender.config import EDGE_BEVEL_ROWS, GHOST_HEIGHT
from brdrender.geometry.bounds import PixelGrid


@dataclass
class MeshData:
    """Triangle mesh: vertices (n, 3), faces (m, 3) indexing them, uvs (n, 2)."""
    vertices: np.ndarray
    faces: np.ndarray
    uvs: np.ndarray
    name: str = ""
    user_data: dict = field(default_factory=dict)

    @classmethod
    def empty(cls, name: str = "") -> "MeshData":
        return cls(np.zeros((0, 3)), np.zeros((0, 3), dtype=int), np.zeros((0, 2)), name)

    def __len__(self) -> int:
        return len(self.faces)

    def flipped(self) -> "MeshData":
        """Same surface facing the other way."""
        return MeshData(self.vertices, self.faces[:, ::-1].copy(), self.uvs, self.name, self.user_data)

    def translated(self, dx: float, dy: float, dz: float = 0.0) -> "MeshData":
        return MeshData(
            self.vertices + np.array([dx, dy, dz]), self.faces, self.uvs, self.name, self.user_data,
        )


def merge_meshes(meshes: list[MeshData], name: str = "") -> MeshData:
    """Concatenate meshes into one, re-indexing faces."""
    if not meshes:
        return MeshData.empty(name)
    offsets = np.cumsum([0] + [len(m.vertices) for m in meshes[:-1]])
    return MeshData(
        np.concatenate([m.vertices for m in meshes]),
        np.concatenate([m.faces + offset for m, offset in zip(meshes, offsets)]),
        np.concatenate([m.uvs for m in meshes]),
        name,
    )


def quad(corners: np.ndarray, uvs: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Two triangles over four corners given counterclockwise."""
    return corners, np.array([[0, 1, 2], [0, 2, 3]]), uvs


def plate(grid: PixelGrid, z: float, facing_up: bool, name: str) -> MeshData:
    """
    Board-sized rectangle at depth z, centered on the origin.

    UVs follow board orientation from either side, v = 1 at the north edge.
    """
    hw, hh = grid.width / 2, grid.height / 2
    corners = np.array([[-hw, -hh, z], [hw, -hh, z], [hw, hh, z], [-hw, hh, z]])
    uvs = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    mesh = MeshData(*quad(corners, uvs), name=name)
    return mesh if facing_up else mesh.flipped()


def layer_plate(grid: PixelGrid, layer: Layer) -> MeshData:
    """Top and bottom faces of one layer's slab."""
    top = plate(grid, -layer.height, True, layer.name)
    bottom = plate(grid, -(layer.height + layer.thickness), False, layer.name)
    return merge_meshes([top, bottom], layer.name)


def board_plates(grid: PixelGrid, layers: list[Layer], thickness: float,
                 composite: bool = True) -> list[MeshData]:
    """
    Textured plates.

    Composite mode gives two: the top face at z = 0 and the bottom face at
    z = -thickness. Otherwise each visible layer gets its own slab.
    """
    if composite:
        return [
            plate(grid, 0.0, True, "Composite Top"),
            plate(grid, -thickness, False, "Composite Bottom"),
        ]
    return [layer_plate(grid, layer) for layer in layers if layer.visible]


def edge_bevel_texture(thickness: float) -> np.ndarray:
    """
    Grey ramp across the board edge: dark at both faces, light inside.

    Returns:
        uint8 array of shape (rows, 1), one row per pixel of thickness
    """
    rows = max(1, round(thickness))
    texture = np.zeros((rows, 1), dtype=np.uint8)
    for i in range(EDGE_BEVEL_ROWS):
        if rows - i <= i:
            break
        level = 1 - (EDGE_BEVEL_ROWS - i) / EDGE_BEVEL_ROWS
        texture[i:rows - i] = round(255 * math.cos((1 - level) * math.pi / 2))
    return texture


def box(x0: float, y0: float, x1: float, y1: float, z0: float, z1: float) -> MeshData:
    """Closed axis-aligned box."""
    vertices = np.array([
        [x0, y0, z0], [x1, y0, z0], [x1, y1, z0], [x0, y1, z0],
        [x0, y0, z1], [x1, y0, z1], [x1, y1, z1], [x0, y1, z1],
    ])
    faces = np.array([
        [0, 2, 1], [0, 3, 2],  # bottom
        [4, 5, 6], [4, 6, 7],  # top
        [0, 1, 5], [0, 5, 4],
        [1, 2, 6], [1, 6, 5],
        [2, 3, 7], [2, 7, 6],
        [3, 0, 4], [3, 4, 7],
    ])
    uvs = np.zeros((8, 2))
    return MeshData(vertices, faces, uvs)


def ghost_package(element: PlacedElement, grid: PixelGrid, thickness: float) -> MeshData | None:
    """
    Stand-in box over an element's pads and SMDs.

    The box rises GHOST_HEIGHT pixels from the element's face, downwards
    for mirrored (bottom side) elements. None when the package has no
    lands or they line up on one axis.
    """
    if element.package_node is None:
        return None
    lands = [node for node in element.package_node if node.tag in ("pad", "smd")]
    if not lands:
        return None

    scale = grid.coord_scale
    xs = [float(node.get("x", 0)) * scale for node in lands]
    ys = [float(node.get("y", 0)) * scale for node in lands]
    if max(xs) == min(xs) or max(ys) == min(ys):
        return None

    if element.mirrored:
        z0, z1 = -thickness - GHOST_HEIGHT, -thickness
    else:
        z0, z1 = 0.0, float(GHOST_HEIGHT)
    mesh = box(min(xs), min(ys), max(xs), max(ys), z0, z1)

    matrix = element_matrix(element, scale)
    xy = mesh.vertices[:, :2] @ matrix[:2, :2].T + matrix[:2, 2]
    cx, cy = grid.center_offset
    mesh.vertices = np.column_stack([xy[:, 0] + cx, xy[:, 1] + cy, mesh.vertices[:, 2]])
    if np.linalg.det(matrix[:2, :2]) < 0:
        mesh.faces = mesh.faces[:, ::-1].copy()
    mesh.name = element.name
    mesh.user_data = {"element": element}
    return mesh
