"""
Unit tests for pose accuracy gating.

Tests cover:
- Threshold boundaries (inclusive)
- Either threshold failing rejects the pose
- Rejection reason ordering
- Quality classification for the debug overlay
"""

import pytest

from arnav_core.proto import GeospatialPose
from arnav_core.localization import PoseAccuracyConfig, PoseAccuracyGate, PoseQuality


def make_pose(horizontal: float, yaw: float) -> GeospatialPose:
    return GeospatialPose(
        latitude=22.29,
        longitude=114.17,
        horizontal_accuracy_m=horizontal,
        orientation_yaw_accuracy_deg=yaw,
    )


class TestPoseAccuracyGate:
    """Tests for PoseAccuracyGate."""

    def test_thresholds_are_inclusive(self):
        gate = PoseAccuracyGate()
        assert gate.is_good(make_pose(20.0, 25.0))

    def test_horizontal_over_threshold(self):
        gate = PoseAccuracyGate()
        pose = make_pose(20.01, 5.0)

        assert not gate.is_good(pose)
        assert gate.rejection_reason(pose) == 'horizontal_accuracy'

    def test_yaw_over_threshold(self):
        """Good horizontal accuracy alone is not enough."""
        gate = PoseAccuracyGate()
        pose = make_pose(1.0, 25.5)

        assert not gate.is_good(pose)
        assert gate.rejection_reason(pose) == 'yaw_accuracy'

    def test_horizontal_reported_first(self):
        gate = PoseAccuracyGate()
        assert gate.rejection_reason(make_pose(50.0, 50.0)) == 'horizontal_accuracy'

    def test_custom_thresholds(self):
        gate = PoseAccuracyGate(PoseAccuracyConfig(max_horizontal_accuracy_m=5.0, max_yaw_accuracy_deg=10.0))

        assert gate.is_good(make_pose(5.0, 10.0))
        assert not gate.is_good(make_pose(6.0, 10.0))

    def test_invalid_config(self):
        with pytest.raises(AssertionError):
            PoseAccuracyConfig(max_horizontal_accuracy_m=0.0)


class TestPoseQualityClassification:
    """Tests for classify()."""

    def test_no_pose(self):
        assert PoseAccuracyGate().classify(None) == PoseQuality.NONE

    def test_poor(self):
        assert PoseAccuracyGate().classify(make_pose(30.0, 5.0)) == PoseQuality.POOR

    def test_good(self):
        assert PoseAccuracyGate().classify(make_pose(10.0, 10.0)) == PoseQuality.GOOD

    def test_excellent(self):
        # 25% of 20 m and 25 deg
        assert PoseAccuracyGate().classify(make_pose(5.0, 6.0)) == PoseQuality.EXCELLENT


class TestGeospatialPoseValidation:
    """Tests for GeospatialPose validation."""

    def test_negative_accuracy_rejected(self):
        with pytest.raises(ValueError):
            make_pose(-1.0, 5.0)

    def test_latitude_out_of_range(self):
        with pytest.raises(ValueError):
            GeospatialPose(latitude=91.0, longitude=0.0,
                           horizontal_accuracy_m=1.0, orientation_yaw_accuracy_deg=1.0)

    def test_position(self):
        assert make_pose(1.0, 1.0).position == (22.29, 114.17)
