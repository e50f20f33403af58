"""
Session Event Schema.

Semantic events produced for the presentation layer. The core never formats
toast text; it only hands over the event kind and its payload.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import time


class EventKind(Enum):
    """Kind of session event."""

    FEATURE_UNSUPPORTED = "feature_unsupported"
    EARTH_ERROR = "earth_error"
    LOCALIZATION_LOST = "localization_lost"
    LOCALIZATION_TIMED_OUT = "localization_timed_out"
    LOCALIZATION_ACHIEVED = "localization_achieved"
    NO_DESTINATION_SELECTED = "no_destination_selected"
    NOT_LOCALIZED = "not_localized"
    ROUTE_FAILED = "route_failed"
    ROUTE_PLACED = "route_placed"
    ANCHOR_PLACEMENT_FAILED = "anchor_placement_failed"
    PERMISSION_DENIED = "permission_denied"
    LOCATION_SERVICE_UNAVAILABLE = "location_service_unavailable"
    VPS_AVAILABILITY = "vps_availability"


# Kinds the presentation layer should show as warnings rather than info
WARNING_KINDS = frozenset({
    EventKind.FEATURE_UNSUPPORTED,
    EventKind.EARTH_ERROR,
    EventKind.LOCALIZATION_LOST,
    EventKind.LOCALIZATION_TIMED_OUT,
    EventKind.NO_DESTINATION_SELECTED,
    EventKind.NOT_LOCALIZED,
    EventKind.ROUTE_FAILED,
    EventKind.ANCHOR_PLACEMENT_FAILED,
    EventKind.PERMISSION_DENIED,
    EventKind.LOCATION_SERVICE_UNAVAILABLE,
})


@dataclass
class SessionEvent:
    """
    Event emitted by the geospatial session.

    Attributes:
        kind: Event kind
        message: Optional payload text (earth error code, route error string)
        data: Extra structured payload (waypoint, counts, ...)
        timestamp: Wall-clock time the event was created
    """

    kind: EventKind
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    @property
    def is_warning(self) -> bool:
        return self.kind in WARNING_KINDS

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'message': self.message,
            'data': self.data,
            'timestamp': self.timestamp,
        }
