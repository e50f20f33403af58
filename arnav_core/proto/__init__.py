"""
Protocol Module: Status enums, pose, waypoint and event schemas.

Everything crossing the boundary between the core and its external
collaborators (tracking subsystem, location service, routing service,
presentation layer) is defined here.
"""

from .device_status import (
    SessionStatus,
    LocationServiceStatus,
    FeatureSupport,
    EarthStateKind,
    EarthStatus,
    EARTH_NOT_READY,
    EARTH_ENABLED,
    earth_error,
    Permission,
)
from .geospatial_pose import GeospatialPose
from .waypoint import (
    Waypoint,
    PlacedAnchor,
    AnchorPlacement,
    RouteLayout,
    UNSET_DESTINATION_ID,
    parse_route_response,
)
from .session_event import (
    SessionEvent,
    EventKind,
    WARNING_KINDS,
)

__all__ = [
    # Device status
    'SessionStatus',
    'LocationServiceStatus',
    'FeatureSupport',
    'EarthStateKind',
    'EarthStatus',
    'EARTH_NOT_READY',
    'EARTH_ENABLED',
    'earth_error',
    'Permission',
    # Pose
    'GeospatialPose',
    # Route
    'Waypoint',
    'PlacedAnchor',
    'AnchorPlacement',
    'RouteLayout',
    'UNSET_DESTINATION_ID',
    'parse_route_response',
    # Events
    'SessionEvent',
    'EventKind',
    'WARNING_KINDS',
]
