"""
Geospatial pose accuracy gating.

A pose is good only if BOTH accuracy thresholds pass. Yaw accuracy governs
heading-dependent anchor orientation; horizontal accuracy governs placement
precision. Either one alone is not enough.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arnav_core.proto.geospatial_pose import GeospatialPose


class PoseQuality(Enum):
    """Coarse pose quality label for the debug overlay."""

    NONE = 0          # No pose this tick
    POOR = 1          # Fails at least one threshold
    GOOD = 2          # Passes both thresholds
    EXCELLENT = 3     # Passes both thresholds with wide margin


@dataclass
class PoseAccuracyConfig:
    """
    Accuracy thresholds for localization.

    Attributes:
        max_horizontal_accuracy_m: Largest acceptable horizontal accuracy (m)
        max_yaw_accuracy_deg: Largest acceptable yaw accuracy (degrees)
        excellent_fraction: Fraction of each threshold under which a pose is
            labelled EXCELLENT
    """

    max_horizontal_accuracy_m: float = 20.0
    max_yaw_accuracy_deg: float = 25.0
    excellent_fraction: float = 0.25

    def __post_init__(self):
        assert self.max_horizontal_accuracy_m > 0, "horizontal threshold must be positive"
        assert self.max_yaw_accuracy_deg > 0, "yaw threshold must be positive"
        assert 0 < self.excellent_fraction <= 1, "excellent_fraction must be in (0, 1]"


class PoseAccuracyGate:
    """
    Dual-threshold accuracy gate.

    Usage:
        gate = PoseAccuracyGate()

        if gate.is_good(pose):
            ...
        else:
            reason = gate.rejection_reason(pose)  # 'yaw_accuracy', ...
    """

    def __init__(self, config: Optional[PoseAccuracyConfig] = None):
        self.config = config or PoseAccuracyConfig()

    def is_good(self, pose: GeospatialPose) -> bool:
        """True iff both horizontal and yaw accuracy are within thresholds."""
        return self.rejection_reason(pose) is None

    def rejection_reason(self, pose: GeospatialPose) -> Optional[str]:
        """
        Reason a pose fails the gate, or None if it passes.

        Horizontal accuracy is reported first when both fail.
        """
        if pose.horizontal_accuracy_m > self.config.max_horizontal_accuracy_m:
            return 'horizontal_accuracy'
        if pose.orientation_yaw_accuracy_deg > self.config.max_yaw_accuracy_deg:
            return 'yaw_accuracy'
        return None

    def classify(self, pose: Optional[GeospatialPose]) -> PoseQuality:
        """Coarse quality label."""
        if pose is None:
            return PoseQuality.NONE

        if not self.is_good(pose):
            return PoseQuality.POOR

        fraction = self.config.excellent_fraction
        if (pose.horizontal_accuracy_m <= self.config.max_horizontal_accuracy_m * fraction and
                pose.orientation_yaw_accuracy_deg <= self.config.max_yaw_accuracy_deg * fraction):
            return PoseQuality.EXCELLENT

        return PoseQuality.GOOD
