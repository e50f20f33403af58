"""
Session Gate.

Maps raw tracking-session status into "is this tick worth evaluating".
Every other state is startup or fatal error and short-circuits the loop.
"""

from arnav_core.proto.device_status import SessionStatus, LocationServiceStatus


_MEANINGFUL_STATUSES = frozenset({
    SessionStatus.CHECKING_AVAILABILITY,
    SessionStatus.TRACKING,
})


def is_tick_meaningful(status: SessionStatus) -> bool:
    """True only for CHECKING_AVAILABILITY or TRACKING."""
    return status in _MEANINGFUL_STATUSES


def is_session_ready(status: SessionStatus, location_status: LocationServiceStatus) -> bool:
    """
    Session readiness input for the localization tracker.

    Poses are only usable while the AR session is tracking and the location
    service is running.
    """
    return (status == SessionStatus.TRACKING and
            location_status == LocationServiceStatus.RUNNING)


def keep_screen_awake(status: SessionStatus) -> bool:
    """Screen may only sleep while the session is not tracking."""
    return status == SessionStatus.TRACKING
