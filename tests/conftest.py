"""
Pytest configuration and shared fixtures for ARNav core tests.

This module provides reusable fixtures for poses, virtual device backends
and a ready-to-run geospatial session.
"""

import sys
from pathlib import Path
from typing import List

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from arnav_core.metrics import reset_metrics
from arnav_core.proto import (
    GeospatialPose,
    SessionEvent,
    SessionStatus,
    EARTH_ENABLED,
)
from arnav_core.localization import (
    EnablementConfig,
    GeodeticCoordinate,
)
from arnav_core.domain import GeospatialSession, SessionConfig
from arnav_core.io import (
    SimulatedTrackingSubsystem,
    SimulatedLocationService,
    SimulatedPermissions,
    SimulatedRouteService,
)


BASE_LAT = 22.2900
BASE_LON = 114.1700


# =============================================================================
# Metrics
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """Give every test its own global metrics collector."""
    reset_metrics()
    yield
    reset_metrics()


# =============================================================================
# Pose Fixtures
# =============================================================================


@pytest.fixture
def good_pose() -> GeospatialPose:
    """Pose that passes both accuracy thresholds."""
    return GeospatialPose(
        latitude=BASE_LAT,
        longitude=BASE_LON,
        horizontal_accuracy_m=4.0,
        orientation_yaw_accuracy_deg=6.0,
        altitude_m=2.0,
        vertical_accuracy_m=3.0,
    )


@pytest.fixture
def poor_yaw_pose() -> GeospatialPose:
    """Pose with good horizontal accuracy but yaw accuracy above 25 deg."""
    return GeospatialPose(
        latitude=BASE_LAT,
        longitude=BASE_LON,
        horizontal_accuracy_m=4.0,
        orientation_yaw_accuracy_deg=40.0,
    )


@pytest.fixture
def poor_horizontal_pose() -> GeospatialPose:
    """Pose with horizontal accuracy above 20 m."""
    return GeospatialPose(
        latitude=BASE_LAT,
        longitude=BASE_LON,
        horizontal_accuracy_m=35.0,
        orientation_yaw_accuracy_deg=6.0,
    )


# =============================================================================
# Virtual Device Fixtures
# =============================================================================


@pytest.fixture
def origin() -> GeodeticCoordinate:
    """Standard origin (Hong Kong area)."""
    return GeodeticCoordinate(lat=BASE_LAT, lon=BASE_LON, alt=2.0)


@pytest.fixture
def tracking(origin: GeodeticCoordinate) -> SimulatedTrackingSubsystem:
    return SimulatedTrackingSubsystem(origin)


@pytest.fixture
def location() -> SimulatedLocationService:
    return SimulatedLocationService(reading=(BASE_LAT, BASE_LON), startup_polls=1)


@pytest.fixture
def permissions() -> SimulatedPermissions:
    return SimulatedPermissions()


@pytest.fixture
def route_service() -> SimulatedRouteService:
    """
    Routing service with two destinations.

    Destination 1 runs north 10 m then east 10 m; destination 2 is a single
    stop 20 m north.
    """
    return SimulatedRouteService({
        1: [("Corner", 0.0, 10.0), ("Boathouse", 10.0, 10.0)],
        2: [("Jetty", 0.0, 20.0)],
    })


@pytest.fixture
def fast_config() -> SessionConfig:
    """Session config with no permission grace and a short settle window."""
    return SessionConfig(
        permission_grace_s=0.0,
        poll_interval_s=0.01,
        enablement=EnablementConfig(settle_time_s=0.5),
    )


@pytest.fixture
def event_log() -> List[SessionEvent]:
    return []


@pytest.fixture
def session(tracking, location, permissions, route_service, fast_config, event_log) -> GeospatialSession:
    """Geospatial session wired to virtual backends; deactivated on teardown."""
    sess = GeospatialSession(
        tracking, location, permissions, route_service,
        config=fast_config, on_event=event_log.append,
    )
    yield sess
    sess.deactivate()


# =============================================================================
# Helper Functions
# =============================================================================


def wait_for_startup(session: GeospatialSession, timeout: float = 5.0):
    """Block until the startup tasks have finished (tests only)."""
    for task in (session.location_task, session.availability_task):
        if task is not None:
            assert task.wait(timeout), f"task {task.name} did not finish"


def localize(
    session: GeospatialSession,
    tracking: SimulatedTrackingSubsystem,
    pose: GeospatialPose,
    dt: float = 0.1,
    max_ticks: int = 100,
) -> List[SessionEvent]:
    """
    Activate (if needed) and tick until the session is localized.

    Returns:
        All events produced along the way
    """
    if not session.active:
        session.activate()
    wait_for_startup(session)

    tracking.status = SessionStatus.TRACKING
    tracking.earth = EARTH_ENABLED
    tracking.pose = pose

    events: List[SessionEvent] = []
    for _ in range(max_ticks):
        events.extend(session.tick(dt))
        if session.tracker.is_localized:
            return events
    raise AssertionError(f"session did not localize in {max_ticks} ticks: {events}")


def kinds(events: List[SessionEvent]) -> List:
    return [event.kind for event in events]
