"""Exception types raised by arnav_core."""


class ArnavError(Exception):
    """Base class for arnav_core errors."""


class SessionSetupError(ArnavError):
    """A required collaborator is missing; the session cannot start."""


class RouteLookupError(ArnavError):
    """
    Route lookup failed.

    Attributes:
        message: Human-readable reason (for structured service errors this is
            the service's own error string, unchanged)
        reason: Failure class: 'transport', 'invalid_destination',
            'malformed' or 'empty_route'
    """

    def __init__(self, message: str, reason: str = "transport"):
        super().__init__(message)
        self.message = message
        self.reason = reason
