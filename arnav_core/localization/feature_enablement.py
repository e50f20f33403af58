"""
Geospatial Feature Enablement.

Turns the geospatial capability on once the tracking subsystem reports it as
supported, then waits out a fixed settle window before trusting it. Feature
flags can report "supported" before the backend serves valid poses; the
settle timer absorbs that warm-up.

State machine:

    DISABLED --(SUPPORTED, not enabled)--> REQUESTED (request_enable, seed 3.0s)
    DISABLED --(SUPPORTED, enabled)------> ENABLED
    REQUESTED/SETTLING --(dt)------------> SETTLING(remaining - dt)
    SETTLING --(remaining <= 0)----------> ENABLED
    any --(UNSUPPORTED)------------------> UNSUPPORTED (terminal for session)
    any --(UNKNOWN)----------------------> unchanged
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arnav_core.proto.device_status import FeatureSupport
from arnav_core.proto.session_event import SessionEvent, EventKind
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)

# Absorbs float drift from repeated dt subtraction
_TIMER_EPSILON_S = 1e-9


class EnablementPhase(Enum):
    """Phase of geospatial enablement."""

    DISABLED = "disabled"
    REQUESTED = "requested"
    SETTLING = "settling"
    ENABLED = "enabled"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class EnablementState:
    """
    Enablement state.

    Attributes:
        phase: Current phase
        remaining_s: Settle time left (REQUESTED/SETTLING only)
    """

    phase: EnablementPhase = EnablementPhase.DISABLED
    remaining_s: float = 0.0

    @property
    def is_enabled(self) -> bool:
        return self.phase == EnablementPhase.ENABLED

    @property
    def is_settling(self) -> bool:
        return self.phase in (EnablementPhase.REQUESTED, EnablementPhase.SETTLING)

    @property
    def is_terminal(self) -> bool:
        return self.phase == EnablementPhase.UNSUPPORTED


@dataclass
class EnablementConfig:
    """
    Configuration for feature enablement.

    Attributes:
        settle_time_s: Time to wait after requesting the capability (s)
    """

    settle_time_s: float = 3.0

    def __post_init__(self):
        assert self.settle_time_s >= 0, "settle_time must be non-negative"


@dataclass
class EnablementStep:
    """Outcome of one enablement transition."""

    state: EnablementState
    request_enable: bool = False
    event: Optional[SessionEvent] = None


def advance_enablement(
    state: EnablementState,
    support: FeatureSupport,
    currently_enabled: bool,
    dt: float,
    config: EnablementConfig,
) -> EnablementStep:
    """
    Pure enablement transition.

    Args:
        state: Current state
        support: Feature support reported this tick
        currently_enabled: Whether the capability is switched on right now
        dt: Seconds since previous tick
        config: Enablement configuration

    Returns:
        EnablementStep with the next state, whether the caller must switch
        the capability on, and an optional event
    """
    if state.is_terminal:
        return EnablementStep(state)

    if support == FeatureSupport.UNKNOWN:
        return EnablementStep(state)

    if support == FeatureSupport.UNSUPPORTED:
        return EnablementStep(
            EnablementState(EnablementPhase.UNSUPPORTED),
            event=SessionEvent(EventKind.FEATURE_UNSUPPORTED),
        )

    if state.phase == EnablementPhase.DISABLED:
        if currently_enabled:
            return EnablementStep(EnablementState(EnablementPhase.ENABLED))
        return EnablementStep(
            EnablementState(EnablementPhase.REQUESTED, config.settle_time_s),
            request_enable=True,
        )

    if state.is_settling:
        remaining = state.remaining_s - dt
        if remaining <= _TIMER_EPSILON_S:
            return EnablementStep(EnablementState(EnablementPhase.ENABLED))
        return EnablementStep(EnablementState(EnablementPhase.SETTLING, remaining))

    return EnablementStep(state)


class FeatureEnablementCoordinator:
    """
    Stateful wrapper around advance_enablement().

    Usage:
        coordinator = FeatureEnablementCoordinator()

        step = coordinator.advance(support, tracking.geospatial_enabled(), dt)
        if step.request_enable:
            tracking.enable_geospatial()
        if not coordinator.is_enabled:
            return  # downstream must not run yet
    """

    def __init__(self, config: Optional[EnablementConfig] = None):
        self.config = config or EnablementConfig()
        self.metrics = get_metrics()
        self._state = EnablementState()

    @property
    def state(self) -> EnablementState:
        return self._state

    @property
    def is_enabled(self) -> bool:
        return self._state.is_enabled

    def advance(
        self,
        support: FeatureSupport,
        currently_enabled: bool,
        dt: float,
    ) -> EnablementStep:
        """Run one tick of enablement and store the new state."""
        previous = self._state
        step = advance_enablement(previous, support, currently_enabled, dt, self.config)
        self._state = step.state

        if step.state.phase != previous.phase:
            logger.info(f"Geospatial enablement: {previous.phase.name} -> {step.state.phase.name}")

        if step.request_enable:
            self.metrics.increment('enable_requests')
        if step.state.is_settling:
            self.metrics.increment('settle_ticks')
        if step.event is not None:
            logger.warning("Geospatial feature is not supported on this device")

        return step

    def reset(self):
        """Return to DISABLED (session deactivation)."""
        self._state = EnablementState()


def create_default_coordinator() -> FeatureEnablementCoordinator:
    """
    Create enablement coordinator with the default settle window.

    Returns:
        Configured FeatureEnablementCoordinator instance
    """
    config = EnablementConfig(
        settle_time_s=3.0,   # backend warm-up after the feature flag flips
    )
    return FeatureEnablementCoordinator(config)
