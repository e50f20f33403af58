"""
Device and tracking-subsystem status enumerations.

These statuses are owned by external collaborators (AR tracking subsystem,
OS location service). The core only reads them; it never mutates them.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class SessionStatus(IntEnum):
    """Lifecycle state of the AR tracking session."""

    NONE = 0                   # Not yet initialized
    CHECKING_AVAILABILITY = 1
    NEEDS_INSTALL = 2
    INSTALLING = 3
    INITIALIZING = 4
    TRACKING = 5
    ERROR_FATAL = 6


class LocationServiceStatus(IntEnum):
    """Status of the OS location service."""

    STOPPED = 0
    INITIALIZING = 1
    RUNNING = 2
    FAILED = 3


class FeatureSupport(IntEnum):
    """Geospatial feature support reported by the tracking subsystem."""

    UNKNOWN = 0        # Not known yet, ask again next tick
    UNSUPPORTED = 1
    SUPPORTED = 2


class EarthStateKind(Enum):
    """Readiness of the geospatial tracking backend."""

    NOT_READY = "not_ready"
    ENABLED = "enabled"
    ERROR = "error"


@dataclass(frozen=True)
class EarthStatus:
    """
    Earth state snapshot.

    Attributes:
        state: Readiness kind
        error_code: Backend error code, only set when state is ERROR
    """

    state: EarthStateKind
    error_code: Optional[str] = None

    def __post_init__(self):
        if self.state == EarthStateKind.ERROR and not self.error_code:
            raise ValueError("EarthStatus ERROR requires an error code")
        if self.state != EarthStateKind.ERROR and self.error_code is not None:
            raise ValueError(f"Error code given for non-error earth state: {self.state.name}")

    @property
    def is_enabled(self) -> bool:
        return self.state == EarthStateKind.ENABLED

    @property
    def is_error(self) -> bool:
        return self.state == EarthStateKind.ERROR

    def describe(self) -> str:
        """Short label for logs and the debug overlay."""
        if self.is_error:
            return f"ERROR({self.error_code})"
        return self.state.name


EARTH_NOT_READY = EarthStatus(EarthStateKind.NOT_READY)
EARTH_ENABLED = EarthStatus(EarthStateKind.ENABLED)


def earth_error(code: str) -> EarthStatus:
    """Build an ERROR earth status for the given backend code."""
    return EarthStatus(EarthStateKind.ERROR, code)


class Permission(str, Enum):
    """Device permissions the session depends on."""

    CAMERA = "camera"
    FINE_LOCATION = "fine_location"
