"""
Coordinate conversion: WGS84 geodetic <-> local ENU <-> placement world frame.

The ENU projection is a local tangent-plane linearization around an origin,
accurate for the few hundred meters a walking route spans.

World frame used for anchor placement:
    x = east, y = up, z = north
"""

import math
import logging
from typing import Tuple, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class GeodeticCoordinate:
    """WGS84 geodetic coordinate."""
    lat: float      # degrees
    lon: float      # degrees
    alt: float = 0.0  # meters above ellipsoid


@dataclass
class WorldPosition:
    """Position in the placement world frame (meters)."""
    x: float  # east
    y: float  # up
    z: float  # north

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class CoordinateConverter:
    """Converts between geodetic, ENU and world coordinates around an origin."""

    # WGS84 ellipsoid
    WGS84_A = 6378137.0
    WGS84_F = 1.0 / 298.257223563
    WGS84_E2 = 2 * WGS84_F - WGS84_F ** 2

    def __init__(self, origin: Optional[GeodeticCoordinate] = None):
        self.origin: Optional[GeodeticCoordinate] = None
        self._n0 = 0.0
        self._m0 = 0.0
        if origin is not None:
            self.set_origin(origin)

    @property
    def has_origin(self) -> bool:
        return self.origin is not None

    def set_origin(self, origin: GeodeticCoordinate):
        """
        Set the tangent-plane origin and cache its curvature radii.

        Args:
            origin: Geodetic origin
        """
        self.origin = origin

        sin_lat0 = math.sin(math.radians(origin.lat))
        denom = 1 - self.WGS84_E2 * sin_lat0 ** 2
        self._n0 = self.WGS84_A / math.sqrt(denom)                       # prime vertical
        self._m0 = self.WGS84_A * (1 - self.WGS84_E2) / (denom ** 1.5)   # meridional

        logger.info(f"ENU origin set: lat={origin.lat:.6f}, lon={origin.lon:.6f}, alt={origin.alt:.2f}")

    def geodetic_to_enu(self, coord: GeodeticCoordinate) -> Tuple[float, float, float]:
        """
        Project a geodetic coordinate into ENU relative to the origin.

        Returns:
            (e, n, u) in meters

        Raises:
            ValueError: if no origin is set
        """
        if self.origin is None:
            raise ValueError("ENU origin not set")

        lat0 = math.radians(self.origin.lat)
        dlat = math.radians(coord.lat - self.origin.lat)
        dlon = math.radians(coord.lon - self.origin.lon)

        e = (self._n0 + self.origin.alt) * math.cos(lat0) * dlon
        n = (self._m0 + self.origin.alt) * dlat
        u = coord.alt - self.origin.alt

        return (e, n, u)

    def enu_to_geodetic(self, e: float, n: float, u: float) -> GeodeticCoordinate:
        """Inverse of geodetic_to_enu()."""
        if self.origin is None:
            raise ValueError("ENU origin not set")

        lat0 = math.radians(self.origin.lat)
        dlat = n / (self._m0 + self.origin.alt)
        dlon = e / ((self._n0 + self.origin.alt) * math.cos(lat0))

        return GeodeticCoordinate(
            lat=self.origin.lat + math.degrees(dlat),
            lon=self.origin.lon + math.degrees(dlon),
            alt=self.origin.alt + u,
        )

    @staticmethod
    def enu_to_world(e: float, n: float, u: float) -> WorldPosition:
        """ENU -> placement world frame (x=east, y=up, z=north)."""
        return WorldPosition(x=e, y=u, z=n)

    def geodetic_to_world(self, lat: float, lon: float, alt: float = 0.0) -> WorldPosition:
        """Geodetic -> placement world frame."""
        e, n, u = self.geodetic_to_enu(GeodeticCoordinate(lat, lon, alt))
        return self.enu_to_world(e, n, u)


def offset_coordinate(origin: GeodeticCoordinate, east_m: float, north_m: float) -> GeodeticCoordinate:
    """
    Coordinate displaced from origin by (east_m, north_m).

    Uses a flat 111 km-per-degree approximation; for building virtual
    test layouts only.
    """
    lat_per_meter = 1.0 / 111000.0
    lon_per_meter = 1.0 / (111000.0 * math.cos(math.radians(origin.lat)))

    return GeodeticCoordinate(
        lat=origin.lat + north_m * lat_per_meter,
        lon=origin.lon + east_m * lon_per_meter,
        alt=origin.alt,
    )
