"""
Localization Module: session gating, geospatial enablement, localization.

Per-tick chain:
    SessionStatus -> session_gate -> FeatureEnablementCoordinator
                  -> LocalizationTracker

Key classes:
- FeatureEnablementCoordinator: Enable geospatial mode and wait out the settle timer
- LocalizationTracker: Dual-threshold accuracy gating with advisory timeout
- PoseAccuracyGate: Horizontal + yaw accuracy thresholds
- CoordinateConverter: WGS84 <-> ENU <-> placement world frame
"""

from .session_gate import (
    is_tick_meaningful,
    is_session_ready,
    keep_screen_awake,
)
from .feature_enablement import (
    EnablementPhase,
    EnablementState,
    EnablementConfig,
    EnablementStep,
    advance_enablement,
    FeatureEnablementCoordinator,
    create_default_coordinator,
)
from .pose_quality import (
    PoseQuality,
    PoseAccuracyConfig,
    PoseAccuracyGate,
)
from .localization_tracker import (
    LocalizationPhase,
    LocalizationState,
    LocalizationConfig,
    LocalizationStep,
    advance_localization,
    LocalizationTracker,
    create_default_tracker,
)
from .coordinate_converter import (
    CoordinateConverter,
    GeodeticCoordinate,
    WorldPosition,
    offset_coordinate,
)

__all__ = [
    # Session gate
    'is_tick_meaningful',
    'is_session_ready',
    'keep_screen_awake',
    # Enablement
    'EnablementPhase',
    'EnablementState',
    'EnablementConfig',
    'EnablementStep',
    'advance_enablement',
    'FeatureEnablementCoordinator',
    'create_default_coordinator',
    # Pose quality
    'PoseQuality',
    'PoseAccuracyConfig',
    'PoseAccuracyGate',
    # Localization
    'LocalizationPhase',
    'LocalizationState',
    'LocalizationConfig',
    'LocalizationStep',
    'advance_localization',
    'LocalizationTracker',
    'create_default_tracker',
    # Coordinates
    'CoordinateConverter',
    'GeodeticCoordinate',
    'WorldPosition',
    'offset_coordinate',
]
