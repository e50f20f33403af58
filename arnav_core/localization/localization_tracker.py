"""
Localization Tracker.

Consumes earth state, session readiness and the current pose every tick and
maintains a LOCALIZING/LOCALIZED state with an advisory timeout.

Policy, evaluated in order:
1. Pose is untrustworthy if earth is not ENABLED, no pose, or session not ready.
2. Accuracy gate: horizontal <= 20 m AND yaw <= 25 deg.
3. Untrustworthy or poor:
   - LOCALIZED  -> LOCALIZING(0) + LOCALIZATION_LOST
   - LOCALIZING -> elapsed += dt; TIMED_OUT on every tick with elapsed > 180 s
4. Good:
   - LOCALIZING -> LOCALIZED + LOCALIZATION_ACHIEVED
   - LOCALIZED  -> no event

The tracker keeps no pose between ticks. Missing evidence this tick always
counts against localization.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from arnav_core.proto.device_status import EarthStatus
from arnav_core.proto.geospatial_pose import GeospatialPose
from arnav_core.proto.session_event import SessionEvent, EventKind
from arnav_core.metrics import get_metrics
from .pose_quality import PoseAccuracyConfig, PoseAccuracyGate

logger = logging.getLogger(__name__)


class LocalizationPhase(Enum):
    """Localization phase."""

    LOCALIZING = "localizing"
    LOCALIZED = "localized"


@dataclass(frozen=True)
class LocalizationState:
    """
    Localization state.

    Attributes:
        phase: Current phase
        elapsed_s: Time spent in LOCALIZING since the last entry (s)
    """

    phase: LocalizationPhase = LocalizationPhase.LOCALIZING
    elapsed_s: float = 0.0

    @property
    def is_localized(self) -> bool:
        return self.phase == LocalizationPhase.LOCALIZED


@dataclass
class LocalizationConfig:
    """
    Configuration for the localization tracker.

    Attributes:
        timeout_s: LOCALIZING time after which timeouts are reported (s)
        accuracy: Pose accuracy thresholds
    """

    timeout_s: float = 180.0
    accuracy: PoseAccuracyConfig = field(default_factory=PoseAccuracyConfig)

    def __post_init__(self):
        assert self.timeout_s > 0, "timeout must be positive"


@dataclass
class LocalizationStep:
    """Outcome of one localization transition."""

    state: LocalizationState
    event: Optional[SessionEvent] = None
    reject_reason: Optional[str] = None


def advance_localization(
    state: LocalizationState,
    earth: EarthStatus,
    session_ready: bool,
    pose: Optional[GeospatialPose],
    dt: float,
    gate: PoseAccuracyGate,
    timeout_s: float,
) -> LocalizationStep:
    """
    Pure localization transition.

    Args:
        state: Current state
        earth: Earth status this tick
        session_ready: Session tracking and location service running
        pose: Pose this tick (None when tracking is not confident)
        dt: Seconds since previous tick
        gate: Accuracy gate
        timeout_s: Advisory timeout

    Returns:
        LocalizationStep with next state, optional event and the reason the
        pose was rejected (None if accepted)
    """
    if not earth.is_enabled:
        reason = 'earth_not_enabled'
    elif pose is None:
        reason = 'no_pose'
    elif not session_ready:
        reason = 'session_not_ready'
    else:
        reason = gate.rejection_reason(pose)

    if reason is None:
        if state.is_localized:
            return LocalizationStep(state)
        return LocalizationStep(
            LocalizationState(LocalizationPhase.LOCALIZED),
            event=SessionEvent(EventKind.LOCALIZATION_ACHIEVED),
        )

    if state.is_localized:
        return LocalizationStep(
            LocalizationState(LocalizationPhase.LOCALIZING, 0.0),
            event=SessionEvent(EventKind.LOCALIZATION_LOST, data={'reason': reason}),
            reject_reason=reason,
        )

    elapsed = state.elapsed_s + max(dt, 0.0)
    next_state = LocalizationState(LocalizationPhase.LOCALIZING, elapsed)
    event = None
    if elapsed > timeout_s:
        event = SessionEvent(
            EventKind.LOCALIZATION_TIMED_OUT,
            data={'elapsed_s': elapsed, 'reason': reason},
        )
    return LocalizationStep(next_state, event=event, reject_reason=reason)


class LocalizationTracker:
    """
    Stateful localization tracker.

    Usage:
        tracker = LocalizationTracker()

        step = tracker.advance(earth, session_ready, pose, dt)
        if step.event is not None:
            emit(step.event)
        if tracker.is_localized:
            # route requests allowed
            ...
    """

    def __init__(self, config: Optional[LocalizationConfig] = None):
        self.config = config or LocalizationConfig()
        self.gate = PoseAccuracyGate(self.config.accuracy)
        self.metrics = get_metrics()
        self._state = LocalizationState()

    @property
    def state(self) -> LocalizationState:
        return self._state

    @property
    def is_localized(self) -> bool:
        return self._state.is_localized

    def advance(
        self,
        earth: EarthStatus,
        session_ready: bool,
        pose: Optional[GeospatialPose],
        dt: float,
    ) -> LocalizationStep:
        """Run one tick of localization and store the new state."""
        step = advance_localization(
            self._state, earth, session_ready, pose, dt,
            self.gate, self.config.timeout_s,
        )
        self._state = step.state

        self.metrics.increment('poses_evaluated')
        if pose is not None:
            self.metrics.record_histogram('horizontal_accuracy_m', pose.horizontal_accuracy_m)
            self.metrics.record_histogram('yaw_accuracy_deg', pose.orientation_yaw_accuracy_deg)

        if step.reject_reason is None:
            self.metrics.increment('poses_accepted')
        else:
            self.metrics.increment_reject(step.reject_reason)

        if step.event is not None:
            kind = step.event.kind
            if kind == EventKind.LOCALIZATION_ACHIEVED:
                self.metrics.increment('localization_achieved')
                logger.info("Geospatial localization achieved")
            elif kind == EventKind.LOCALIZATION_LOST:
                self.metrics.increment('localization_lost')
                logger.warning(f"Geospatial localization lost ({step.reject_reason})")
            elif kind == EventKind.LOCALIZATION_TIMED_OUT:
                self.metrics.increment('localization_timeouts')
                logger.error(f"Geospatial localization timed out "
                             f"(elapsed={step.state.elapsed_s:.1f}s)")

        return step

    def reset(self):
        """Return to LOCALIZING(0) (session activation/deactivation)."""
        self._state = LocalizationState()


def create_default_tracker() -> LocalizationTracker:
    """
    Create localization tracker with default thresholds for walking navigation.

    Returns:
        Configured LocalizationTracker instance
    """
    config = LocalizationConfig(
        timeout_s=180.0,                   # advisory only, never stops the session
        accuracy=PoseAccuracyConfig(
            max_horizontal_accuracy_m=20.0,
            max_yaw_accuracy_deg=25.0,
        ),
    )
    return LocalizationTracker(config)
