"""
Unit tests for coordinate conversion.

Tests cover:
- Geodetic to ENU projection around an origin
- ENU to placement world frame axis mapping
- Inverse projection
- Virtual layout offsets

Reference geometry: WGS84 ellipsoid with Hong Kong area coordinates.
"""

import pytest

from arnav_core.localization import (
    CoordinateConverter,
    GeodeticCoordinate,
    WorldPosition,
    offset_coordinate,
)


class TestCoordinateConverterInitialization:
    """Tests for CoordinateConverter initialization."""

    def test_converter_initial_state(self):
        converter = CoordinateConverter()

        assert converter.origin is None
        assert converter.has_origin is False

    def test_projection_requires_origin(self):
        with pytest.raises(ValueError):
            CoordinateConverter().geodetic_to_enu(GeodeticCoordinate(22.29, 114.17))

    def test_set_origin(self, origin: GeodeticCoordinate):
        converter = CoordinateConverter(origin)

        assert converter.has_origin
        assert converter.origin.lat == origin.lat


class TestGeodeticToENU:
    """Tests for geodetic -> ENU projection."""

    def test_origin_maps_to_zero(self, origin: GeodeticCoordinate):
        e, n, u = CoordinateConverter(origin).geodetic_to_enu(origin)

        assert abs(e) < 1e-6
        assert abs(n) < 1e-6
        assert abs(u) < 1e-6

    def test_north_offset(self, origin: GeodeticCoordinate):
        """0.0001 deg of latitude is ~11 m north."""
        converter = CoordinateConverter(origin)
        e, n, u = converter.geodetic_to_enu(GeodeticCoordinate(origin.lat + 0.0001, origin.lon, origin.alt))

        assert abs(e) < 1e-6
        assert 10.5 < n < 11.5

    def test_east_offset(self, origin: GeodeticCoordinate):
        """0.0001 deg of longitude at 22.29 N is ~10.3 m east."""
        converter = CoordinateConverter(origin)
        e, n, u = converter.geodetic_to_enu(GeodeticCoordinate(origin.lat, origin.lon + 0.0001, origin.alt))

        assert 9.8 < e < 10.8
        assert abs(n) < 1e-6

    def test_inverse(self, origin: GeodeticCoordinate):
        converter = CoordinateConverter(origin)
        coord = converter.enu_to_geodetic(25.0, -40.0, 1.5)
        e, n, u = converter.geodetic_to_enu(coord)

        assert e == pytest.approx(25.0, abs=1e-6)
        assert n == pytest.approx(-40.0, abs=1e-6)
        assert u == pytest.approx(1.5)


class TestWorldFrame:
    """Tests for ENU -> placement world frame."""

    def test_axis_mapping(self):
        assert CoordinateConverter.enu_to_world(1.0, 2.0, 3.0) == WorldPosition(x=1.0, y=3.0, z=2.0)

    def test_geodetic_to_world(self, origin: GeodeticCoordinate):
        converter = CoordinateConverter(origin)
        world = converter.geodetic_to_world(origin.lat + 0.0001, origin.lon, origin.alt + 0.5)

        assert world.x == pytest.approx(0.0, abs=1e-6)
        assert world.y == pytest.approx(0.5)
        assert 10.5 < world.z < 11.5


class TestOffsetCoordinate:
    """Tests for offset_coordinate()."""

    def test_offset_round_trip_close(self, origin: GeodeticCoordinate):
        coord = offset_coordinate(origin, 10.0, 20.0)
        e, n, _ = CoordinateConverter(origin).geodetic_to_enu(coord)

        # flat-earth approximation vs ellipsoid, well under 1%
        assert e == pytest.approx(10.0, rel=0.01)
        assert n == pytest.approx(20.0, rel=0.01)
