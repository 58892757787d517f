"""Tests for walls, drill bores, plates and ghost packages."""
from xml.etree import ElementTree

import numpy as np
import pytest

from brdrender.brd.models import AngleData, Layer, PlacedElement, Primitive
from brdrender.depth import (
    Anchor, MeshData, board_plates, build_drills, build_walls, collect_drills, drill_cylinder,
    edge_bevel_texture, element_connector, extrude_loop, ghost_package, merge_meshes,
)
from brdrender.geometry import BoardBounds, PixelGrid, build_loops

SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


@pytest.fixture
def grid():
    """20 x 10 mm board at 20 px/mm, origin at the south-west corner."""
    return PixelGrid.from_bounds(BoardBounds(0, 0, 20, 10), coord_scale=20)


def face_normals(mesh: MeshData) -> np.ndarray:
    a, b, c = (mesh.vertices[mesh.faces[:, i]] for i in range(3))
    return np.cross(b - a, c - a)


def layer_with(*primitives: Primitive, name: str = "Layer1") -> Layer:
    layer = Layer(name, (1,), ["Copper"], 1.0)
    layer.elements.extend(primitives)
    return layer


def test_extrude_square():
    mesh = extrude_loop(SQUARE, 2.0)

    assert len(mesh.vertices) == 16
    assert len(mesh) == 8
    assert mesh.vertices[:, 2].min() == -2.0
    assert mesh.vertices[:, 2].max() == 0.0
    assert set(mesh.uvs[:, 1]) == {0.0, 1.0}
    assert set(mesh.uvs[:, 0]) == {0.0}


def test_extruded_walls_face_outwards():
    mesh = extrude_loop(SQUARE, 2.0)
    center = np.array([5.0, 5.0])

    normals = face_normals(mesh)
    midpoints = mesh.vertices[mesh.faces].mean(axis=1)[:, :2]
    assert np.all(np.einsum("ij,ij->i", normals[:, :2], midpoints - center) > 0)


def test_extrude_ignores_closing_point_and_repeats():
    closed = SQUARE + [SQUARE[0]]
    with_repeat = [SQUARE[0], SQUARE[1], SQUARE[1], SQUARE[2], SQUARE[3]]

    assert len(extrude_loop(closed, 1.0)) == 8
    assert len(extrude_loop(with_repeat, 1.0)) == 8


def test_extrude_degenerate_loop_is_empty():
    assert len(extrude_loop([(1.0, 1.0)], 1.0)) == 0


def test_walls_are_centered(grid):
    outline = [
        Primitive("wire", {"x1": "0", "y1": "0", "x2": "20", "y2": "0"}),
        Primitive("wire", {"x1": "20", "y1": "0", "x2": "20", "y2": "10"}),
        Primitive("wire", {"x1": "20", "y1": "10", "x2": "0", "y2": "10"}),
        Primitive("wire", {"x1": "0", "y1": "10", "x2": "0", "y2": "0"}),
    ]
    walls = build_walls(build_loops(outline), grid, 3.0)

    assert len(walls) == 1
    vertices = walls[0].vertices
    assert (vertices[:, 0].min(), vertices[:, 0].max()) == pytest.approx((-200, 200))
    assert (vertices[:, 1].min(), vertices[:, 1].max()) == pytest.approx((-100, 100))


def test_collect_drills_once_per_bore():
    pad = Primitive("pad", {"x": "1", "y": "1", "drill": "0.8"}, parent="J1")
    via = Primitive("via", {"x": "3", "y": "3", "drill": "0.4", "extent": "1-16"})
    layers = [
        layer_with(pad.clone(), via.clone()),
        layer_with(pad.clone(), via.clone(), name="Layer16"),
        layer_with(pad.clone(), name="Top Mask"),
    ]

    drills = collect_drills(layers)

    assert [d.tag for d in drills] == ["pad", "via"]


def test_same_spot_different_parents_are_distinct():
    layers = [layer_with(
        Primitive("pad", {"x": "0", "y": "0", "drill": "1"}, parent="J1"),
        Primitive("pad", {"x": "0", "y": "0", "drill": "1"}, parent="J2"),
    )]
    assert len(collect_drills(layers)) == 2


@pytest.mark.parametrize("rot", ["R0", "MR0", "MR45"])
def test_drill_cylinder_faces_into_bore(grid, rot):
    element = PlacedElement("J1", "", "lib", "pkg", x=5, y=5, rot=AngleData.parse(rot))
    drill = Primitive("pad", {"x": "1", "y": "0", "drill": "0.8"}, parent="J1")

    mesh = drill_cylinder(drill, element, grid, 3.0, segments=12)

    assert len(mesh.vertices) == 26
    assert len(mesh) == 24
    xy = mesh.vertices[:, :2]
    center = (xy.max(axis=0) + xy.min(axis=0)) / 2
    assert np.linalg.norm(xy - center, axis=1) == pytest.approx(np.full(26, 8.0), abs=1e-6)

    normals = face_normals(mesh)[:, :2]
    radial = mesh.vertices[mesh.faces[:, 0]][:, :2] - center
    assert np.all(np.einsum("ij,ij->i", normals, radial) < 0)


def test_mirrored_drill_lands_on_flipped_side(grid):
    element = PlacedElement("J1", "", "lib", "pkg", x=5, y=5, rot=AngleData.parse("MR0"))
    drill = Primitive("pad", {"x": "1", "y": "0", "drill": "0.8"}, parent="J1")

    xy = drill_cylinder(drill, element, grid, 3.0).vertices[:, :2]
    center = (xy.max(axis=0) + xy.min(axis=0)) / 2
    cx, cy = grid.center_offset
    assert center == pytest.approx((4 * 20 + cx, 5 * 20 + cy))


def test_build_drills_connectors_for_holes_and_pads_only(grid):
    root = Anchor("board")
    layers = [layer_with(
        Primitive("hole", {"x": "10", "y": "5", "drill": "1"}),
        Primitive("via", {"x": "3", "y": "3", "drill": "0.4", "extent": "1-16"}),
    )]

    meshes, connectors = build_drills(layers, {}, grid, 3.0, root)

    assert len(meshes) == 2
    assert len(connectors) == 2
    top, bottom = connectors
    assert top.position == pytest.approx((0, 0, 0))
    assert bottom.position == pytest.approx((0, 0, -3))
    assert top.normal == pytest.approx((0, 0, 1))
    assert bottom.normal == pytest.approx((0, 0, -1))
    assert top.master is root and bottom.master is root
    assert top.user_data["drill"].tag == "hole"
    assert "element" not in top.user_data


def test_element_connector_faces(grid):
    root = Anchor("board")
    top = PlacedElement("U1", "", "lib", "pkg", x=10, y=5)
    bottom = PlacedElement("U2", "", "lib", "pkg", x=10, y=5, rot=AngleData.parse("MR90"))

    up = element_connector(top, grid, 3.0, root)
    down = element_connector(bottom, grid, 3.0, root)

    assert up.position == pytest.approx((0, 0, 0))
    assert up.normal == pytest.approx((0, 0, 1))
    assert down.position == pytest.approx((0, 0, -3))
    assert down.normal == pytest.approx((0, 0, -1))
    assert down.user_data["element"] is bottom


def test_composite_plates(grid):
    top, bottom = board_plates(grid, [], 3.0)

    assert (top.name, bottom.name) == ("Composite Top", "Composite Bottom")
    assert set(top.vertices[:, 2]) == {0.0}
    assert set(bottom.vertices[:, 2]) == {-3.0}
    assert face_normals(top)[:, 2] == pytest.approx([400 * 200] * 2)
    assert np.all(face_normals(bottom)[:, 2] < 0)
    assert top.vertices[:, 0].min() == -200


def test_plate_per_visible_layer(grid):
    layers = [
        Layer("Top Mask", (21,), ["Mask", "Top"], 0.3, height=1.0),
        Layer("Layer1", (1,), ["Copper"], 0.7, height=1.3),
        Layer("Bounds", (20,), ["Bounds"], 1.0, visible=False),
    ]

    plates = board_plates(grid, layers, 2.0, composite=False)

    assert [p.name for p in plates] == ["Top Mask", "Layer1"]
    mask = plates[0]
    assert len(mask) == 4
    assert sorted(set(mask.vertices[:, 2])) == pytest.approx([-1.3, -1.0])


def test_edge_bevel_ramp():
    texture = edge_bevel_texture(40)

    assert texture.shape == (40, 1)
    assert texture.dtype == np.uint8
    assert texture[0, 0] == 0 and texture[-1, 0] == 0
    assert texture[20, 0] == 250
    column = texture[:20, 0].astype(int)
    assert np.all(np.diff(column) >= 0)


def test_edge_bevel_thin_board():
    assert edge_bevel_texture(3.3)[:, 0].tolist() == [0, 50, 0]
    assert edge_bevel_texture(0.2).shape == (1, 1)


def package(*lands: str) -> ElementTree.Element:
    return ElementTree.fromstring(f"<package name='P'>{''.join(lands)}</package>")


def test_ghost_box_over_lands():
    grid = PixelGrid.from_bounds(BoardBounds(0, 0, 10, 10), coord_scale=10)
    node = package('<smd x="-1" y="-1" dx="1" dy="1" layer="1"/>', '<pad x="1" y="1" drill="0.8"/>')
    element = PlacedElement("U1", "", "lib", "P", x=5, y=5, package_node=node)

    ghost = ghost_package(element, grid, 3.0)

    assert ghost.name == "U1"
    assert ghost.user_data["element"] is element
    assert (ghost.vertices[:, 0].min(), ghost.vertices[:, 0].max()) == pytest.approx((-10, 10))
    assert (ghost.vertices[:, 2].min(), ghost.vertices[:, 2].max()) == (0.0, 20.0)


@pytest.mark.parametrize("rot, z_top", [("R0", 20.0), ("MR0", -3.0)])
def test_ghost_top_face_points_up(rot, z_top):
    grid = PixelGrid.from_bounds(BoardBounds(0, 0, 10, 10), coord_scale=10)
    node = package('<smd x="-1" y="-1" dx="1" dy="1" layer="1"/>', '<smd x="2" y="1" dx="1" dy="1" layer="1"/>')
    element = PlacedElement("U1", "", "lib", "P", x=5, y=5, rot=AngleData.parse(rot), package_node=node)

    ghost = ghost_package(element, grid, 3.0)

    top_faces = np.all(ghost.vertices[ghost.faces][:, :, 2] == z_top, axis=1)
    assert top_faces.sum() == 2
    assert np.all(face_normals(ghost)[top_faces][:, 2] > 0)


def test_no_ghost_without_extent():
    grid = PixelGrid.from_bounds(BoardBounds(0, 0, 10, 10), coord_scale=10)
    single = PlacedElement("J1", "", "lib", "P", x=5, y=5, package_node=package('<pad x="0" y="0" drill="1"/>'))
    bare = PlacedElement("J2", "", "lib", "P", x=5, y=5, package_node=package('<wire x1="0" y1="0" x2="1" y2="0"/>'))

    assert ghost_package(single, grid, 3.0) is None
    assert ghost_package(bare, grid, 3.0) is None


def test_merge_reindexes_faces():
    a = extrude_loop(SQUARE, 1.0)
    b = extrude_loop(SQUARE, 1.0).translated(20, 0)

    merged = merge_meshes([a, b], "walls")

    assert len(merged.vertices) == 32
    assert merged.faces.max() == 31
    assert merged.faces[8:].min() == 16
    assert merged.vertices[16:, 0].min() == 20
