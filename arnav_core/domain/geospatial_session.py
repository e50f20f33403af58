"""
Geospatial Session.

Owns the per-tick control loop and every piece of mutable session state:
enablement state, localization state and the handles of the background
tasks (location-service startup, availability check, route lookup).

Per tick:
    poll startup tasks
    SessionStatus --is_tick_meaningful--> stop here if not
    FeatureSupport --FeatureEnablementCoordinator--> stop here unless ENABLED
    EarthStatus (report errors once) + pose --LocalizationTracker
    poll route task --RouteAnchoringWorkflow--> anchors

External collaborators are duck-typed:

    tracking:     session_status(), check_availability(), install(),
                  feature_support(), geospatial_enabled(), enable_geospatial(),
                  earth_status(), camera_pose(), check_vps_availability(lat, lon),
                  create_anchor(lat, lon, altitude_offset, heading)
    location:     start(), stop(), status(), is_enabled_by_user(), last_reading()
    permissions:  has_permission(Permission), request_permission(Permission)
    route_client: fetch_route(origin_lat, origin_lon, destination_id)

Background task threads only call collaborators; results are applied to
session state by tick() on the loop's own thread.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from arnav_core.errors import SessionSetupError, RouteLookupError
from arnav_core.proto.device_status import (
    SessionStatus,
    LocationServiceStatus,
    Permission,
)
from arnav_core.proto.geospatial_pose import GeospatialPose
from arnav_core.proto.waypoint import RouteLayout, UNSET_DESTINATION_ID
from arnav_core.proto.session_event import SessionEvent, EventKind
from arnav_core.localization.session_gate import (
    is_tick_meaningful,
    is_session_ready,
    keep_screen_awake,
)
from arnav_core.localization.feature_enablement import (
    EnablementConfig,
    FeatureEnablementCoordinator,
)
from arnav_core.localization.localization_tracker import (
    LocalizationConfig,
    LocalizationTracker,
)
from arnav_core.io.tasks import BackgroundTask, TaskCancelled, check_cancelled
from arnav_core.metrics import get_metrics
from .route_anchoring import AnchoringConfig, RouteAnchoringWorkflow

logger = logging.getLogger(__name__)


@dataclass
class SessionConfig:
    """
    Configuration for a geospatial session.

    Attributes:
        permission_grace_s: Wait after a permission request before
            re-checking the grant (s)
        poll_interval_s: Polling interval of background tasks (s)
        enablement: Feature enablement configuration
        localization: Localization tracker configuration
        anchoring: Route anchoring configuration
    """

    permission_grace_s: float = 3.0
    poll_interval_s: float = 0.05
    enablement: EnablementConfig = field(default_factory=EnablementConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)
    anchoring: AnchoringConfig = field(default_factory=AnchoringConfig)

    def __post_init__(self):
        assert self.permission_grace_s >= 0, "permission grace must be non-negative"
        assert self.poll_interval_s > 0, "poll interval must be positive"


class GeospatialSession:
    """
    Session controller for geospatial localization and route anchoring.

    Usage:
        session = GeospatialSession(tracking, location, permissions, route_client,
                                    on_event=show_toast)
        session.activate()

        # every frame
        events = session.tick(dt)

        # on "start" button
        session.request_route(selected_destination_id)

        session.deactivate()
    """

    def __init__(
        self,
        tracking,
        location,
        permissions,
        route_client,
        config: Optional[SessionConfig] = None,
        on_event: Optional[Callable[[SessionEvent], None]] = None,
    ):
        """
        Initialize session.

        Raises:
            SessionSetupError: if a required collaborator is missing
        """
        missing = [
            name for name, ref in (
                ('tracking', tracking),
                ('location', location),
                ('permissions', permissions),
                ('route_client', route_client),
            ) if ref is None
        ]
        if missing:
            for name in missing:
                logger.error(f"Cannot find {name} collaborator")
            raise SessionSetupError(f"Missing required collaborators: {', '.join(missing)}")

        self.tracking = tracking
        self.location = location
        self.permissions = permissions
        self.route_client = route_client
        self.config = config or SessionConfig()
        self.on_event = on_event
        self.metrics = get_metrics()

        self.enablement = FeatureEnablementCoordinator(self.config.enablement)
        self.tracker = LocalizationTracker(self.config.localization)
        self.anchoring = RouteAnchoringWorkflow(tracking.create_anchor, self.config.anchoring)

        self.active = False
        self.layout: Optional[RouteLayout] = None

        self._location_task: Optional[BackgroundTask] = None
        self._availability_task: Optional[BackgroundTask] = None
        self._route_task: Optional[BackgroundTask] = None
        self._route_destination: Optional[int] = None
        self._reported_earth_errors = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(self):
        """Create fresh state and start the startup tasks (no-op if active)."""
        if self.active:
            return

        self.enablement.reset()
        self.tracker.reset()
        self._reported_earth_errors.clear()
        self.layout = None
        self.active = True

        self.start_location_service()
        self.start_availability_check()
        logger.info("Geospatial session activated")

    def deactivate(self):
        """Cancel outstanding tasks, reset both state machines, stop location."""
        for task in (self._availability_task, self._location_task, self._route_task):
            if task is not None:
                task.cancel()

        self._availability_task = None
        self._location_task = None
        self._route_task = None
        self._route_destination = None

        self.enablement.reset()
        self.tracker.reset()
        self._reported_earth_errors.clear()

        if self.active:
            logger.info("Stop location services.")
            self.location.stop()

        self.active = False
        logger.info("Geospatial session deactivated")

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    @property
    def location_task(self) -> Optional[BackgroundTask]:
        return self._location_task

    @property
    def availability_task(self) -> Optional[BackgroundTask]:
        return self._availability_task

    @property
    def route_task(self) -> Optional[BackgroundTask]:
        return self._route_task

    @property
    def route_pending(self) -> bool:
        return self._route_task is not None

    def start_location_service(self) -> BackgroundTask:
        """Start the location-service startup task (idempotent)."""
        if self._location_task is None:
            self._location_task = BackgroundTask(
                "location_service", self._run_location_startup
            ).start()
        return self._location_task

    def start_availability_check(self) -> BackgroundTask:
        """Start the availability check task (idempotent)."""
        if self._availability_task is None:
            location_task = self._location_task
            self._availability_task = BackgroundTask(
                "availability_check",
                lambda cancel: self._run_availability_check(cancel, location_task),
            ).start()
        return self._availability_task

    def _wait_grace(self, cancel: threading.Event):
        if cancel.wait(self.config.permission_grace_s):
            raise TaskCancelled()

    def _run_location_startup(self, cancel: threading.Event) -> List[SessionEvent]:
        """Request location permission, start the service, wait for it to settle."""
        if not self.permissions.has_permission(Permission.FINE_LOCATION):
            logger.info("Requesting the fine location permission.")
            self.permissions.request_permission(Permission.FINE_LOCATION)
            self._wait_grace(cancel)

        if not self.location.is_enabled_by_user():
            logger.info("Location service is disabled by the user.")
            return [SessionEvent(EventKind.LOCATION_SERVICE_UNAVAILABLE, message="disabled_by_user")]

        check_cancelled(cancel)
        logger.info("Starting location service.")
        self.location.start()

        while self.location.status() == LocationServiceStatus.INITIALIZING:
            if cancel.wait(self.config.poll_interval_s):
                raise TaskCancelled()

        status = self.location.status()
        if status != LocationServiceStatus.RUNNING:
            logger.warning(f"Location service ended with {status.name} status.")
            self.location.stop()
            return [SessionEvent(EventKind.LOCATION_SERVICE_UNAVAILABLE, message=status.name)]

        return []

    def _run_availability_check(
        self,
        cancel: threading.Event,
        location_task: Optional[BackgroundTask],
    ) -> List[SessionEvent]:
        """Availability, install, camera permission, then VPS availability."""
        if self.tracking.session_status() == SessionStatus.NONE:
            self.tracking.check_availability()
        check_cancelled(cancel)

        if self.tracking.session_status() == SessionStatus.NEEDS_INSTALL:
            self.tracking.install()
        check_cancelled(cancel)

        if not self.permissions.has_permission(Permission.CAMERA):
            logger.info("Requesting camera permission.")
            self.permissions.request_permission(Permission.CAMERA)
            self._wait_grace(cancel)

        if not self.permissions.has_permission(Permission.CAMERA):
            logger.warning("Failed to get the camera permission. VPS availability check isn't available.")
            return [SessionEvent(EventKind.PERMISSION_DENIED, message=Permission.CAMERA.value)]

        while location_task is not None and not location_task.done:
            if cancel.wait(self.config.poll_interval_s):
                raise TaskCancelled()

        if self.location.status() != LocationServiceStatus.RUNNING:
            logger.warning("Location services aren't running. VPS availability check is not available.")
            return [SessionEvent(EventKind.LOCATION_SERVICE_UNAVAILABLE, message="not_running")]

        reading = self.location.last_reading()
        if reading is None:
            logger.warning("No location reading yet. VPS availability check skipped.")
            return []

        lat, lon = reading
        availability = self.tracking.check_vps_availability(lat, lon)
        check_cancelled(cancel)

        logger.info(f"VPS Availability at ({lat}, {lon}): {availability}")
        return [SessionEvent(
            EventKind.VPS_AVAILABILITY,
            message=str(availability),
            data={'latitude': lat, 'longitude': lon},
        )]

    def _collect_startup_task(self, task: BackgroundTask, events: List[SessionEvent]):
        try:
            events.extend(task.result())
        except Exception as e:
            logger.error(f"Task {task.name} failed: {e}", exc_info=True)

    def _poll_startup_tasks(self, events: List[SessionEvent]):
        if self._location_task is not None and self._location_task.done:
            task, self._location_task = self._location_task, None
            self._collect_startup_task(task, events)

        if self._availability_task is not None and self._availability_task.done:
            task, self._availability_task = self._availability_task, None
            self._collect_startup_task(task, events)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> List[SessionEvent]:
        """
        Run one control-loop step.

        Args:
            dt: Seconds since previous tick

        Returns:
            Events produced during this tick (also sent to on_event)
        """
        if not self.active:
            return []

        events: List[SessionEvent] = []
        self.metrics.increment('ticks')

        self._poll_startup_tasks(events)

        status = self.tracking.session_status()
        if not is_tick_meaningful(status):
            self.metrics.increment('ticks_gated')
            return self._emit(events)

        support = self.tracking.feature_support()
        step = self.enablement.advance(support, self.tracking.geospatial_enabled(), dt)
        if step.request_enable:
            logger.info("Geospatial switched to ENABLED mode.")
            self.tracking.enable_geospatial()
        if step.event is not None:
            events.append(step.event)

        if not self.enablement.is_enabled:
            return self._emit(events)

        earth = self.tracking.earth_status()
        if earth.is_error and earth.error_code not in self._reported_earth_errors:
            self._reported_earth_errors.add(earth.error_code)
            logger.warning(f"Geospatial earth error: {earth.error_code}")
            events.append(SessionEvent(EventKind.EARTH_ERROR, message=earth.error_code))

        session_ready = is_session_ready(status, self.location.status())
        pose = self.tracking.camera_pose()
        loc_step = self.tracker.advance(earth, session_ready, pose, dt)
        if loc_step.event is not None:
            events.append(loc_step.event)

        self._poll_route_task(events)
        return self._emit(events)

    def _emit(self, events: List[SessionEvent]) -> List[SessionEvent]:
        if self.on_event is not None:
            for event in events:
                self.on_event(event)
        return events

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def request_route(self, destination_id: Optional[int]) -> List[SessionEvent]:
        """
        Start a route lookup to the selected destination.

        Preconditions (checked before any network call, never retried):
        a destination is selected, the session is localized, and the last
        tick still passed the gate with geospatial ENABLED.

        Args:
            destination_id: Selected destination, UNSET_DESTINATION_ID if none

        Returns:
            Rejection events; empty if the lookup was started or is
            already outstanding
        """
        if destination_id is None or destination_id == UNSET_DESTINATION_ID:
            logger.warning("Route requested without a destination")
            return self._emit([SessionEvent(EventKind.NO_DESTINATION_SELECTED)])

        if not self.active or not self.tracker.is_localized:
            logger.warning("Route requested while not localized")
            return self._emit([SessionEvent(EventKind.NOT_LOCALIZED)])

        # Localization only counts while the pipeline is still evaluating poses
        if not is_tick_meaningful(self.tracking.session_status()) or not self.enablement.is_enabled:
            logger.warning("Route requested while localization is stale")
            return self._emit([SessionEvent(EventKind.NOT_LOCALIZED)])

        if self._route_task is not None:
            logger.debug(f"Route lookup to {self._route_destination} already outstanding")
            return []

        origin = self._route_origin()
        if origin is None:
            logger.warning("Route requested with no position available")
            return self._emit([SessionEvent(EventKind.NOT_LOCALIZED)])

        origin_lat, origin_lon = origin
        self.metrics.increment('route_requests')
        self._route_destination = destination_id
        self._route_task = BackgroundTask(
            "route_lookup",
            lambda cancel: self.route_client.fetch_route(origin_lat, origin_lon, destination_id),
        ).start()
        return []

    def _route_origin(self) -> Optional[Tuple[float, float]]:
        pose = self.tracking.camera_pose()
        if pose is not None:
            return pose.position
        return self.location.last_reading()

    def _poll_route_task(self, events: List[SessionEvent]):
        task = self._route_task
        if task is None or not task.done:
            return

        self._route_task = None
        destination = self._route_destination
        self._route_destination = None

        try:
            waypoints = task.result()
        except RouteLookupError as e:
            self.metrics.increment('route_failures')
            logger.warning(f"Route to {destination} failed ({e.reason}): {e.message}")
            events.append(SessionEvent(
                EventKind.ROUTE_FAILED, message=e.message,
                data={'reason': e.reason, 'destination_id': destination},
            ))
            return
        except Exception as e:
            self.metrics.increment('route_failures')
            logger.error(f"Route to {destination} failed unexpectedly: {e}", exc_info=True)
            events.append(SessionEvent(
                EventKind.ROUTE_FAILED, message=str(e),
                data={'reason': 'unexpected', 'destination_id': destination},
            ))
            return

        self.layout, placement_events = self.anchoring.place_route(waypoints)
        events.extend(placement_events)

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------

    @property
    def keep_screen_awake(self) -> bool:
        return keep_screen_awake(self.tracking.session_status())

    def debug_info(self) -> dict:
        """Snapshot for the debug overlay."""
        earth = self.tracking.earth_status()
        pose: Optional[GeospatialPose] = self.tracking.camera_pose() if earth.is_enabled else None
        state = self.tracker.state

        return {
            'is_localizing': not state.is_localized,
            'localizing_elapsed_s': state.elapsed_s,
            'session_status': self.tracking.session_status().name,
            'location_status': self.location.status().name,
            'feature_support': self.tracking.feature_support().name,
            'enablement': self.enablement.state.phase.name,
            'earth_state': earth.describe(),
            'pose_quality': self.tracker.gate.classify(pose).name,
            'pose': pose.to_dict() if pose is not None else None,
            'route_pending': self.route_pending,
            'anchors_placed': self.layout.num_placed if self.layout else 0,
        }
