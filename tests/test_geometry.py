import math

import numpy as np
import pytest

from panosweep_app.math import geometry
from panosweep_app.models.camera_pose import RigPose
from panosweep_app.models.logical_camera import Eye, Half, LogicalCamera
from panosweep_app.models.rig_config import RigConfig


def _offset(camera: LogicalCamera, column: int, start_phase: float = 0.0):
    return geometry.camera_offset(camera, column, 8, 64, 0.05, start_phase)


def test_camera_offset_is_deterministic():
    camera = LogicalCamera(Eye.RIGHT, Half.LOWER, 3)
    offset_a, rotation_a = _offset(camera, 5)
    offset_b, rotation_b = _offset(camera, 5)
    assert np.array_equal(offset_a, offset_b)
    assert np.array_equal(rotation_a, rotation_b)


def test_rotations_are_proper():
    for half in Half:
        for column in range(8):
            _, rotation = _offset(LogicalCamera(Eye.LEFT, half, 2), column)
            np.testing.assert_allclose(rotation @ rotation.T, np.eye(3), atol=1e-12)
            assert math.isclose(np.linalg.det(rotation), 1.0, abs_tol=1e-12)


def test_eyes_are_offset_in_opposite_directions():
    left, _ = _offset(LogicalCamera(Eye.LEFT, Half.UPPER, 1), 4)
    right, _ = _offset(LogicalCamera(Eye.RIGHT, Half.UPPER, 1), 4)
    np.testing.assert_allclose(left, -right)
    assert math.isclose(float(np.linalg.norm(left)), 0.05, rel_tol=1e-12)
    assert left[1] == 0.0


def test_baseline_is_perpendicular_to_viewing_direction():
    for lane in range(8):
        for column in (0, 3, 7):
            offset, rotation = _offset(LogicalCamera(Eye.LEFT, Half.UPPER, lane), column)
            forward = rotation[:, 2]
            horizontal = np.array([forward[0], 0.0, forward[2]])
            assert math.isclose(float(offset @ horizontal), 0.0, abs_tol=1e-12)


def test_left_eye_sits_left_of_viewing_direction():
    offset, rotation = _offset(LogicalCamera(Eye.LEFT, Half.LOWER, 0), 2)
    right = -rotation[:, 0]
    assert float(offset @ right) < 0.0


def test_upper_half_tilts_up_and_lower_half_tilts_down():
    _, upper = _offset(LogicalCamera(Eye.LEFT, Half.UPPER, 5), 1)
    _, lower = _offset(LogicalCamera(Eye.LEFT, Half.LOWER, 5), 1)
    assert math.isclose(upper[1, 2], math.sin(math.pi / 4), abs_tol=1e-12)
    assert math.isclose(lower[1, 2], -math.sin(math.pi / 4), abs_tol=1e-12)
    # Both halves share the same heading.
    np.testing.assert_allclose(upper[[0, 2], 2], lower[[0, 2], 2], atol=1e-12)


def test_sweep_advances_one_output_column_per_step_across_lanes():
    step = 2.0 * math.pi / 64
    previous = geometry.sweep_angle(0, 0, 8, 64)
    for x in range(1, 64):
        lane, column = divmod(x, 8)
        angle = geometry.sweep_angle(lane, column, 8, 64)
        assert math.isclose(previous - angle, step, rel_tol=1e-9)
        previous = angle


def test_lane_angle_tiles_full_turn():
    angles = [geometry.lane_angle(lane, 4) for lane in range(4)]
    assert angles == pytest.approx([2 * math.pi, 1.5 * math.pi, math.pi, 0.5 * math.pi])


def test_start_phase_of_half_turn_mirrors_offset():
    camera = LogicalCamera(Eye.LEFT, Half.UPPER, 2)
    offset, rotation = _offset(camera, 3)
    flipped_offset, flipped_rotation = _offset(camera, 3, start_phase=math.pi)
    np.testing.assert_allclose(flipped_offset, -offset, atol=1e-12)
    np.testing.assert_allclose(flipped_rotation[[0, 2], 2], -rotation[[0, 2], 2], atol=1e-12)


def test_camera_pose_follows_rig_transform():
    config = RigConfig(texture_size=64, lane_count=8, eye_separation=0.05)
    camera = LogicalCamera(Eye.RIGHT, Half.UPPER, 6)
    offset, rotation = geometry.camera_offset(camera, 2, 8, 64, 0.05)
    rig = RigPose.from_yaw((1.0, 2.0, 3.0), math.pi / 2)

    pose = geometry.camera_pose(camera, 2, config, rig)

    np.testing.assert_allclose(pose.position, np.array([1.0, 2.0, 3.0]) + rig.rotation @ offset)
    np.testing.assert_allclose(pose.rotation, rig.rotation @ rotation)


def test_camera_pose_defaults_to_origin():
    config = RigConfig(texture_size=64, lane_count=8, eye_separation=0.05)
    camera = LogicalCamera(Eye.LEFT, Half.LOWER, 0)
    offset, rotation = geometry.camera_offset(camera, 0, 8, 64, 0.05)
    pose = geometry.camera_pose(camera, 0, config)
    np.testing.assert_allclose(pose.position, offset)
    np.testing.assert_allclose(pose.rotation, rotation)
    np.testing.assert_allclose(pose.forward, rotation[:, 2])
