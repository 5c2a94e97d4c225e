"""Pose geometry for the rotating stereo camera rig.

Every logical camera sits on a circle of radius ``eye_separation`` around the
rig centre and looks tangentially outwards, so that the camera pair for each
lane reproduces what a viewer's eyes would see when turning their head.
Angles decrease as the scan advances so the panorama is swept left to right.
"""
from __future__ import annotations

import math
from typing import Dict, Tuple

import numpy as np

from ..models.camera_pose import CameraPose, RigPose
from ..models.logical_camera import Half, LogicalCamera
from ..models.rig_config import RigConfig

TWO_PI = 2.0 * math.pi

# Tilt about the camera's local horizontal axis. Each camera only covers 90
# degrees vertically, so each eye is stitched from an upward and a downward view.
HALF_TILT: Dict[Half, float] = {
    Half.UPPER: -math.pi / 4.0,
    Half.LOWER: math.pi / 4.0,
}


def rotation_about_x(angle: float) -> np.ndarray:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, cos_a, -sin_a],
            [0.0, sin_a, cos_a],
        ],
        dtype=np.float64,
    )


def rotation_about_y(angle: float) -> np.ndarray:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array(
        [
            [cos_a, 0.0, sin_a],
            [0.0, 1.0, 0.0],
            [-sin_a, 0.0, cos_a],
        ],
        dtype=np.float64,
    )


def lane_angle(lane_index: int, lane_count: int) -> float:
    """Base angle of a lane; lanes tile the full turn in equal sectors."""
    return (lane_count - lane_index) * (TWO_PI / lane_count)


def column_angle(column: int, lane_count: int, columns_per_lane: int, start_phase: float = 0.0) -> float:
    """Angular sub-step within a lane for the given scan position."""
    return ((lane_count - column) / float(columns_per_lane)) * (TWO_PI / lane_count) + start_phase


def sweep_angle(
    lane_index: int,
    column: int,
    lane_count: int,
    texture_size: int,
    start_phase: float = 0.0,
) -> float:
    """Combined lane and column angle for one camera at one scan position."""
    columns_per_lane = texture_size // lane_count
    return lane_angle(lane_index, lane_count) + column_angle(
        column, lane_count, columns_per_lane, start_phase
    )


def baseline_offset(angle: float, sign: float, eye_separation: float) -> np.ndarray:
    """Eye offset from the rig centre, perpendicular to the viewing direction."""
    return np.array(
        [-math.cos(angle), 0.0, math.sin(angle)],
        dtype=np.float64,
    ) * (sign * eye_separation)


def camera_rotation(angle: float, half: Half) -> np.ndarray:
    """Orientation relative to the rig: yaw to the sweep angle, then tilt."""
    return rotation_about_y(-math.pi + angle) @ rotation_about_x(HALF_TILT[half])


def camera_offset(
    camera: LogicalCamera,
    column: int,
    lane_count: int,
    texture_size: int,
    eye_separation: float,
    start_phase: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(position_offset, rotation)`` of a camera relative to the rig.

    Pure and deterministic: identical inputs always give identical arrays.
    """
    angle = sweep_angle(camera.lane_index, column, lane_count, texture_size, start_phase)
    offset = baseline_offset(angle, camera.eye.sign, eye_separation)
    return offset, camera_rotation(angle, camera.half)


def camera_pose(
    camera: LogicalCamera,
    column: int,
    config: RigConfig,
    rig_pose: RigPose | None = None,
) -> CameraPose:
    """World pose of ``camera`` at scan position ``column`` for a rig at ``rig_pose``."""
    rig_pose = rig_pose or RigPose()
    offset, rotation = camera_offset(
        camera,
        column,
        config.lane_count,
        config.texture_size,
        config.eye_separation,
        config.start_phase,
    )
    base_rotation = np.asarray(rig_pose.rotation, dtype=np.float64)
    position = np.asarray(rig_pose.position, dtype=np.float64) + base_rotation @ offset
    return CameraPose(position=position, rotation=base_rotation @ rotation)
