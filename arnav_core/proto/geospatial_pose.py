"""
Geospatial Pose Schema.

Camera pose reported by the geospatial tracking backend. A pose only exists
while tracking confidence is TRACKING; at any other time the tracking
subsystem reports None rather than a stale value.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeospatialPose:
    """
    Camera geospatial pose with accuracy estimates.

    Attributes:
        latitude: WGS84 latitude (degrees)
        longitude: WGS84 longitude (degrees)
        horizontal_accuracy_m: Horizontal position accuracy (m, 68% radius)
        orientation_yaw_accuracy_deg: Yaw accuracy (degrees)
        altitude_m: Altitude above the WGS84 ellipsoid (m)
        vertical_accuracy_m: Altitude accuracy (m)
        heading_deg: Camera heading, clockwise from north (degrees)
    """

    latitude: float
    longitude: float
    horizontal_accuracy_m: float
    orientation_yaw_accuracy_deg: float
    altitude_m: float = 0.0
    vertical_accuracy_m: float = 0.0
    heading_deg: float = 0.0

    def __post_init__(self):
        """Validate pose."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")

        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")

        if self.horizontal_accuracy_m < 0:
            raise ValueError(f"Horizontal accuracy cannot be negative: {self.horizontal_accuracy_m}")

        if self.orientation_yaw_accuracy_deg < 0:
            raise ValueError(f"Yaw accuracy cannot be negative: {self.orientation_yaw_accuracy_deg}")

        if self.vertical_accuracy_m < 0:
            raise ValueError(f"Vertical accuracy cannot be negative: {self.vertical_accuracy_m}")

    @property
    def position(self):
        """(latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and the debug overlay."""
        return {
            'latitude': self.latitude,
            'longitude': self.longitude,
            'horizontal_accuracy_m': self.horizontal_accuracy_m,
            'orientation_yaw_accuracy_deg': self.orientation_yaw_accuracy_deg,
            'altitude_m': self.altitude_m,
            'vertical_accuracy_m': self.vertical_accuracy_m,
            'heading_deg': self.heading_deg,
        }
