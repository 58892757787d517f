"""Tests for connector alignment."""
import logging

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from brdrender.depth import Anchor, Connector

FACE_UP = Rotation.from_euler("x", 90, degrees=True)


@pytest.fixture
def target():
    """Connector on a master that is itself rotated and moved."""
    master = Anchor("world", Rotation.from_euler("y", 20, degrees=True), np.array([0.0, 5.0, 0.0]))
    return Connector([10.0, 0.0, 0.0], Rotation.from_euler("x", 45, degrees=True), master)


@pytest.fixture
def plug():
    """Top-face connector on its own board root."""
    return Connector([1.0, 2.0, 3.0], FACE_UP * Rotation.from_euler("z", 30, degrees=True))


def test_default_normal_is_up():
    assert Connector([0, 0, 0]).normal == pytest.approx([0, 1, 0])


def test_face_up_normal():
    assert Connector([0, 0, 0], FACE_UP).normal == pytest.approx([0, 0, 1])


def test_world_pose_follows_master():
    master = Anchor("m", Rotation.from_euler("z", 90, degrees=True), np.array([1.0, 1.0, 0.0]))
    connector = Connector([2.0, 0.0, 0.0], master=master)

    assert connector.world_position == pytest.approx([1, 3, 0])
    assert connector.world_rotation.apply([1, 0, 0]) == pytest.approx([0, 1, 0])


def test_connect_lands_on_target(plug, target):
    plug.connect_to(target)

    assert plug.world_position == pytest.approx(target.world_position)
    assert plug.world_rotation.as_matrix() == pytest.approx(target.world_rotation.as_matrix())


def test_alignment_leaves_master_alone(plug, target):
    rotation, position = plug.alignment_to(target)

    assert plug.master.position == pytest.approx([0, 0, 0])
    assert (rotation * plug.orientation).as_matrix() == pytest.approx(target.world_rotation.as_matrix())
    assert position + rotation.apply(plug.position) == pytest.approx(target.world_position)


def test_mirror_faces_target(plug, target):
    plug.connect_to(target, mirror=True)

    world_normal = plug.world_rotation.apply(plug.up)
    target_normal = target.world_rotation.apply(target.up)
    assert plug.world_position == pytest.approx(target.world_position)
    assert world_normal == pytest.approx(-target_normal)


def test_extra_rotation_keeps_normal(plug, target):
    plain, _ = plug.alignment_to(target)
    turned, _ = plug.alignment_to(target, rotation=np.pi / 2)

    normal = (turned * plug.orientation).apply(plug.up)
    assert normal == pytest.approx(target.world_rotation.apply(target.up))
    assert not np.allclose(turned.as_matrix(), plain.as_matrix())


def test_degenerate_mirror_warns(target, caplog):
    # Identity orientation: the normal is the up axis itself
    connector = Connector([0.0, 0.0, 0.0])
    with caplog.at_level(logging.WARNING):
        connector.connect_to(target, mirror=True)

    assert "parallel" in caplog.text
    assert connector.world_rotation.as_matrix() == pytest.approx(target.world_rotation.as_matrix())


def test_shared_master_moves_together(target):
    root = Anchor("board")
    top = Connector([0.0, 0.0, 0.0], FACE_UP, root)
    bottom = Connector([0.0, 0.0, -3.0], FACE_UP.inv(), root)

    assert top.connect_to(target) is top
    assert np.linalg.norm(top.world_position - bottom.world_position) == pytest.approx(3.0)
    assert bottom.world_rotation.apply(bottom.up) == pytest.approx(-target.world_rotation.apply(target.up))
