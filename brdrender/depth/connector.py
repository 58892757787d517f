"""Anchor points for docking a board into a larger assembly."""
import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from scipy.spatial.transform import Rotation

logger = logging.getLogger(__name__)

UP = (0.0, 1.0, 0.0)


def _vector(values) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(3)


@dataclass
class Anchor:
    """A rigid frame that connectors move, typically the board root."""
    name: str
    rotation: Rotation = field(default_factory=Rotation.identity)
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass
class Connector:
    """
    Oriented point fixed to a master frame.

    `position` and `orientation` are relative to the master. The connector
    points along `normal`, its `up` axis rotated by the orientation.
    """
    position: np.ndarray
    orientation: Rotation = field(default_factory=Rotation.identity)
    master: Anchor = field(default_factory=lambda: Anchor("root"))
    user_data: dict[str, Any] = field(default_factory=dict)
    up: tuple[float, float, float] = UP

    def __post_init__(self):
        self.position = _vector(self.position)

    @property
    def normal(self) -> np.ndarray:
        return self.orientation.apply(self.up)

    @property
    def world_rotation(self) -> Rotation:
        return self.master.rotation * self.orientation

    @property
    def world_position(self) -> np.ndarray:
        return self.master.position + self.master.rotation.apply(self.position)

    def alignment_to(
        self,
        target: "Connector",
        mirror: bool = False,
        rotation: float | None = None,
    ) -> tuple[Rotation, np.ndarray]:
        """
        Master pose that makes this connector coincide with another.

        Args:
            target: Connector to align to
            mirror: Face the opposite way, rotating half a turn about an
                axis perpendicular to both the normal and `up`
            rotation: Extra turn about the normal (radians)

        Returns:
            Tuple of (master rotation, master position) in world space
        """
        slave = self.orientation.inv()
        normal = self.normal
        up = _vector(self.up)

        if mirror:
            axis = np.cross(normal, up)
            norm = np.linalg.norm(axis)
            if norm < 1e-9:
                logger.warning(
                    "Cannot mirror a connector whose normal is parallel to its up axis; "
                    "re-orient it so they differ"
                )
            else:
                slave = slave * Rotation.from_rotvec(axis / norm * np.pi)

        if rotation is not None:
            slave = slave * Rotation.from_rotvec(normal / np.linalg.norm(normal) * rotation)

        master_rotation = target.world_rotation * slave
        master_position = target.world_position - master_rotation.apply(self.position)
        return master_rotation, master_position

    def connect_to(
        self,
        target: "Connector",
        mirror: bool = False,
        rotation: float | None = None,
    ) -> "Connector":
        """Move the master so this connector sits on `target`."""
        self.master.rotation, self.master.position = self.alignment_to(target, mirror, rotation)
        return self
