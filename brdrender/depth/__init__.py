from .connector import Anchor, Connector
from .mesh import MeshData, board_plates, edge_bevel_texture, ghost_package, merge_meshes
from .walls import build_walls, extrude_loop
from .drills import build_drills, collect_drills, drill_cylinder, element_connector

__all__ = [
    "Anchor", "Connector",
    "MeshData", "board_plates", "edge_bevel_texture", "ghost_package", "merge_meshes",
    "build_walls", "extrude_loop",
    "build_drills", "collect_drills", "drill_cylinder", "element_connector",
]
