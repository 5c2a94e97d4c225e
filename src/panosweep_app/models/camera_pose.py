"""Pose models for the rig and its virtual cameras."""
from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Dict, List

import numpy as np


def _identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


def _origin() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


@dataclass(slots=True, frozen=True)
class RigPose:
    """World transform of the host node the rig follows."""

    position: np.ndarray = field(default_factory=_origin)
    rotation: np.ndarray = field(default_factory=_identity)

    @classmethod
    def from_yaw(cls, position: tuple[float, float, float], yaw_rad: float) -> "RigPose":
        """Build a pose rotated about the vertical axis."""
        cos_y = math.cos(yaw_rad)
        sin_y = math.sin(yaw_rad)
        rotation = np.array(
            [
                [cos_y, 0.0, sin_y],
                [0.0, 1.0, 0.0],
                [-sin_y, 0.0, cos_y],
            ],
            dtype=np.float64,
        )
        return cls(np.asarray(position, dtype=np.float64).reshape(3), rotation)


@dataclass(slots=True, frozen=True)
class CameraPose:
    """World pose of one virtual camera.

    ``rotation`` columns are the camera's local X, Y and Z axes expressed in
    world space. The camera looks along local +Z with +Y up, so image-right is
    local -X.
    """

    position: np.ndarray
    rotation: np.ndarray

    @property
    def forward(self) -> np.ndarray:
        return self.rotation[:, 2]

    @property
    def up(self) -> np.ndarray:
        return self.rotation[:, 1]

    @property
    def right(self) -> np.ndarray:
        return -self.rotation[:, 0]

    def to_dict(self) -> Dict[str, List[float]]:
        """Return a serialisable mapping."""
        return {
            "position": [float(v) for v in self.position],
            "rotation": [[float(v) for v in row] for row in self.rotation],
        }
