"""
Virtual device backends for testing without AR hardware.

Provides in-process stand-ins for the tracking subsystem, location service,
permission subsystem and routing service. A simulated route is a list of
(east, north) offsets in meters from the user's position, so test layouts
can be written in ENU and still go through the geodetic path.

The tracking simulator can also run a scripted warm-up via step(dt):
session initializing -> tracking, earth warm-up, and pose accuracy that
converges from a poor start toward a good final value.
"""

import logging
import threading
import time
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from arnav_core.errors import RouteLookupError
from arnav_core.proto.device_status import (
    SessionStatus,
    LocationServiceStatus,
    FeatureSupport,
    EarthStatus,
    EARTH_NOT_READY,
    EARTH_ENABLED,
    Permission,
)
from arnav_core.proto.geospatial_pose import GeospatialPose
from arnav_core.proto.waypoint import Waypoint, PlacedAnchor
from arnav_core.localization.coordinate_converter import (
    CoordinateConverter,
    GeodeticCoordinate,
    offset_coordinate,
)

logger = logging.getLogger(__name__)


class SimulatedTrackingSubsystem:
    """
    Virtual AR tracking subsystem.

    Every attribute can be set directly by tests; step(dt) drives a scripted
    warm-up for demos.
    """

    def __init__(
        self,
        origin: GeodeticCoordinate,
        support: FeatureSupport = FeatureSupport.SUPPORTED,
        needs_install: bool = False,
        init_time_s: float = 0.5,
        earth_warmup_s: float = 1.0,
        start_accuracy: Tuple[float, float] = (60.0, 70.0),
        final_accuracy: Tuple[float, float] = (3.0, 5.0),
        convergence_s: float = 5.0,
        vps_availability: str = "AVAILABLE",
    ):
        self.converter = CoordinateConverter(origin)
        self.status = SessionStatus.NONE
        self.support = support
        self.needs_install = needs_install
        self.geospatial_on = False
        self.earth = EARTH_NOT_READY
        self.pose: Optional[GeospatialPose] = None
        self.tracking_confident = True
        self.vps_availability = vps_availability

        self.init_time_s = init_time_s
        self.earth_warmup_s = earth_warmup_s
        self.start_accuracy = start_accuracy
        self.final_accuracy = final_accuracy
        self.convergence_s = convergence_s

        # (round(lat, 7), round(lon, 7)) of anchors that should fail
        self.failing_anchor_coords: Set[Tuple[float, float]] = set()
        self.anchors: List[PlacedAnchor] = []
        self.enable_requests = 0

        self._lock = threading.Lock()
        self._session_time = 0.0
        self._geospatial_time = 0.0

    # -- session ---------------------------------------------------------

    def session_status(self) -> SessionStatus:
        return self.status

    def check_availability(self):
        self.status = SessionStatus.CHECKING_AVAILABILITY
        self.status = SessionStatus.NEEDS_INSTALL if self.needs_install else SessionStatus.INITIALIZING

    def install(self):
        self.status = SessionStatus.INSTALLING
        self.needs_install = False
        self.status = SessionStatus.INITIALIZING

    # -- geospatial ------------------------------------------------------

    def feature_support(self) -> FeatureSupport:
        return self.support

    def geospatial_enabled(self) -> bool:
        return self.geospatial_on

    def enable_geospatial(self):
        self.enable_requests += 1
        self.geospatial_on = True
        self._geospatial_time = 0.0

    def earth_status(self) -> EarthStatus:
        return self.earth

    def camera_pose(self) -> Optional[GeospatialPose]:
        if not self.tracking_confident:
            return None
        return self.pose

    def check_vps_availability(self, lat: float, lon: float) -> str:
        return self.vps_availability

    # -- anchors ---------------------------------------------------------

    def create_anchor(
        self,
        lat: float,
        lon: float,
        altitude_offset: float,
        heading_deg: float,
    ) -> Optional[PlacedAnchor]:
        if (round(lat, 7), round(lon, 7)) in self.failing_anchor_coords:
            logger.debug(f"Simulated anchor failure at ({lat:.7f}, {lon:.7f})")
            return None

        world = self.converter.geodetic_to_world(lat, lon, self.converter.origin.alt + altitude_offset)
        with self._lock:
            anchor = PlacedAnchor(
                anchor_id=f"anchor-{len(self.anchors)}",
                latitude=lat,
                longitude=lon,
                world_position=world.as_tuple(),
            )
            self.anchors.append(anchor)
        return anchor

    def fail_anchor_at(self, waypoint: Waypoint):
        self.failing_anchor_coords.add((round(waypoint.latitude, 7), round(waypoint.longitude, 7)))

    # -- scripted warm-up ------------------------------------------------

    def step(self, dt: float):
        """Advance the scripted warm-up by dt seconds."""
        self._session_time += dt
        if self.status == SessionStatus.INITIALIZING and self._session_time >= self.init_time_s:
            self.status = SessionStatus.TRACKING

        if not self.geospatial_on or self.status != SessionStatus.TRACKING:
            return

        self._geospatial_time += dt
        if self._geospatial_time < self.earth_warmup_s:
            self.earth = EARTH_NOT_READY
            self.pose = None
            return

        self.earth = EARTH_ENABLED
        progress = min(1.0, (self._geospatial_time - self.earth_warmup_s) / self.convergence_s)
        horizontal = self.start_accuracy[0] + (self.final_accuracy[0] - self.start_accuracy[0]) * progress
        yaw = self.start_accuracy[1] + (self.final_accuracy[1] - self.start_accuracy[1]) * progress
        origin = self.converter.origin
        self.pose = GeospatialPose(
            latitude=origin.lat,
            longitude=origin.lon,
            horizontal_accuracy_m=horizontal,
            orientation_yaw_accuracy_deg=yaw,
            altitude_m=origin.alt,
            vertical_accuracy_m=horizontal * 1.5,
        )


class SimulatedLocationService:
    """Virtual OS location service."""

    def __init__(
        self,
        reading: Optional[Tuple[float, float]] = None,
        enabled_by_user: bool = True,
        startup_polls: int = 2,
        fail_on_start: bool = False,
    ):
        self.reading = reading
        self.enabled_by_user = enabled_by_user
        self.startup_polls = startup_polls
        self.fail_on_start = fail_on_start
        self.start_calls = 0
        self.stop_calls = 0
        self._status = LocationServiceStatus.STOPPED
        self._polls_left = 0

    def start(self):
        self.start_calls += 1
        self._status = LocationServiceStatus.INITIALIZING
        self._polls_left = self.startup_polls

    def stop(self):
        self.stop_calls += 1
        self._status = LocationServiceStatus.STOPPED

    def status(self) -> LocationServiceStatus:
        if self._status == LocationServiceStatus.INITIALIZING:
            if self._polls_left <= 0:
                self._status = (LocationServiceStatus.FAILED if self.fail_on_start
                                else LocationServiceStatus.RUNNING)
            else:
                self._polls_left -= 1
        return self._status

    def is_enabled_by_user(self) -> bool:
        return self.enabled_by_user

    def last_reading(self) -> Optional[Tuple[float, float]]:
        if self._status != LocationServiceStatus.RUNNING:
            return None
        return self.reading


class SimulatedPermissions:
    """Virtual permission subsystem; requests are granted per policy."""

    def __init__(self, granted: Iterable[Permission] = (), grant_on_request: Iterable[Permission] = (
            Permission.CAMERA, Permission.FINE_LOCATION)):
        self.granted: Set[Permission] = set(granted)
        self.grant_on_request: Set[Permission] = set(grant_on_request)
        self.requests: List[Permission] = []

    def has_permission(self, permission: Permission) -> bool:
        return permission in self.granted

    def request_permission(self, permission: Permission):
        self.requests.append(permission)
        if permission in self.grant_on_request:
            self.granted.add(permission)


class SimulatedRouteService:
    """
    Virtual routing service.

    Destinations map an id to a list of (name, east_m, north_m) stops
    relative to the origin passed to fetch_route(). The origin itself is
    returned as the first waypoint.
    """

    def __init__(
        self,
        destinations: Dict[int, Sequence[Tuple[str, float, float]]],
        latency_s: float = 0.0,
        origin_name: str = "Current location",
    ):
        self.destinations = dict(destinations)
        self.latency_s = latency_s
        self.origin_name = origin_name
        self.calls: List[Tuple[float, float, int]] = []

    def fetch_route(self, origin_lat: float, origin_lon: float, destination_id: int) -> List[Waypoint]:
        self.calls.append((origin_lat, origin_lon, destination_id))
        if self.latency_s > 0:
            time.sleep(self.latency_s)

        stops = self.destinations.get(destination_id)
        if stops is None:
            raise RouteLookupError("invalid destination", reason="invalid_destination")

        origin = GeodeticCoordinate(origin_lat, origin_lon)
        total = len(stops) + 1
        waypoints = [Waypoint(0, self.origin_name, origin_lat, origin_lon, total)]
        for index, (name, east_m, north_m) in enumerate(stops, start=1):
            coord = offset_coordinate(origin, east_m, north_m)
            waypoints.append(Waypoint(index, name, coord.lat, coord.lon, total))
        return waypoints


def create_virtual_device(config: Dict):
    """
    Build a full set of virtual backends from a SIMULATION_CONFIG-style dict.

    Returns:
        (tracking, location, permissions, route_service)
    """
    origin = GeodeticCoordinate(config["base_lat"], config["base_lon"], config.get("base_alt", 0.0))
    tracking = SimulatedTrackingSubsystem(
        origin,
        init_time_s=config.get("init_time_s", 0.5),
        earth_warmup_s=config.get("earth_warmup_s", 1.0),
        convergence_s=config.get("convergence_s", 5.0),
    )
    location = SimulatedLocationService(reading=(origin.lat, origin.lon))
    permissions = SimulatedPermissions()
    destinations = {
        int(dest_id): [tuple(stop) for stop in stops]
        for dest_id, stops in config.get("destinations", {}).items()
    }
    route_service = SimulatedRouteService(destinations, latency_s=config.get("route_latency_s", 0.0))
    logger.info(f"Virtual device at ({origin.lat:.6f}, {origin.lon:.6f}) with {len(destinations)} destinations")
    return tracking, location, permissions, route_service
