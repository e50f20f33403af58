"""
Unit tests for route anchoring.

Tests cover:
- Planar bearing and heading chain
- Colinear route orientation
- Anchor placement failures skip the waypoint, not the route
- Placement through the virtual tracking subsystem (geodetic -> world)
"""

from typing import Dict, List, Optional, Tuple

import pytest

from arnav_core.proto import Waypoint, PlacedAnchor, EventKind
from arnav_core.domain import (
    AnchoringConfig,
    RouteAnchoringWorkflow,
    chain_headings,
    planar_bearing_deg,
)
from arnav_core.metrics import get_metrics


class FixedPositionFactory:
    """Anchor factory returning preset world positions keyed by latitude."""

    def __init__(self, positions: Dict[float, Tuple[float, float, float]], fail: Tuple[float, ...] = ()):
        self.positions = positions
        self.fail = set(fail)
        self.calls: List[Tuple[float, float, float, float]] = []

    def __call__(self, lat, lon, altitude_offset, heading) -> Optional[PlacedAnchor]:
        self.calls.append((lat, lon, altitude_offset, heading))
        if lat in self.fail:
            return None
        return PlacedAnchor(f"a{len(self.calls)}", lat, lon, self.positions[lat])


def waypoints(count: int) -> List[Waypoint]:
    return [Waypoint(i, f"W{i}", float(i), 0.0, count) for i in range(count)]


# =============================================================================
# Bearing Chain
# =============================================================================


class TestBearings:
    """Tests for planar_bearing_deg() and chain_headings()."""

    def test_bearing_axes(self):
        assert planar_bearing_deg((0, 0, 0), (1, 0, 0)) == pytest.approx(0.0)
        assert planar_bearing_deg((0, 0, 0), (0, 0, 1)) == pytest.approx(90.0)
        assert planar_bearing_deg((0, 0, 0), (-1, 0, 0)) == pytest.approx(180.0)

    def test_bearing_ignores_height(self):
        assert planar_bearing_deg((0, 0, 0), (1, 5, 1)) == pytest.approx(45.0)

    def test_colinear_chain(self):
        """A(0,0) -> B(0,10) -> C(0,20): A and B face +z, C gets the arrival heading."""
        headings = chain_headings([(0, 0, 0), (0, 0, 10), (0, 0, 20)])

        assert headings[0] == pytest.approx(-90.0)
        assert headings[1] == pytest.approx(headings[0])
        assert headings[2] == 90.0

    def test_single_position(self):
        assert chain_headings([(3, 0, 4)]) == [90.0]

    def test_empty(self):
        assert chain_headings([]) == []


# =============================================================================
# Workflow
# =============================================================================


class TestRouteAnchoringWorkflow:
    """Tests for RouteAnchoringWorkflow.place_route()."""

    def test_places_and_orients_every_waypoint(self):
        factory = FixedPositionFactory({0.0: (0, 0, 0), 1.0: (0, 0, 10), 2.0: (10, 0, 10)})
        layout, events = RouteAnchoringWorkflow(factory).place_route(waypoints(3))

        assert layout.num_placed == 3
        assert layout.num_failed == 0
        headings = [p.heading_deg for p in layout.placements]
        assert headings == pytest.approx([-90.0, 0.0, 90.0])
        assert [e.kind for e in events] == [EventKind.ROUTE_PLACED]
        assert events[0].data == {'placed': 3, 'failed': 0}

    def test_anchor_request_parameters(self):
        factory = FixedPositionFactory({0.0: (0, 0, 0)})
        RouteAnchoringWorkflow(factory, AnchoringConfig(altitude_offset_m=0.5)).place_route(waypoints(1))

        assert factory.calls == [(0.0, 0.0, 0.5, 0.0)]

    def test_failed_anchor_skipped(self):
        factory = FixedPositionFactory(
            {0.0: (0, 0, 0), 1.0: (0, 0, 10), 2.0: (0, 0, 20)},
            fail=(1.0,),
        )
        layout, events = RouteAnchoringWorkflow(factory).place_route(waypoints(3))

        assert [p.waypoint.id for p in layout.placements] == [0, 2]
        assert [w.id for w in layout.failed] == [1]
        assert [e.kind for e in events] == [EventKind.ANCHOR_PLACEMENT_FAILED, EventKind.ROUTE_PLACED]
        assert events[0].message == "W1"
        assert events[0].data == {'index': 1, 'waypoint_id': 1}
        # chain continues over placed anchors
        assert layout.placements[0].heading_deg == pytest.approx(-90.0)
        assert layout.placements[1].heading_deg == 90.0

    def test_factory_exception_is_reported(self):
        def broken(lat, lon, altitude_offset, heading):
            raise RuntimeError("anchor quota exceeded")

        layout, events = RouteAnchoringWorkflow(broken).place_route(waypoints(2))

        assert layout.num_placed == 0
        assert layout.num_failed == 2
        assert get_metrics().get_counter('anchor_failures') == 2
        assert events[-1].data == {'placed': 0, 'failed': 2}

    def test_virtual_tracking_placement(self, tracking, route_service):
        """Route 1 runs 10 m north then 10 m east of the origin."""
        route = route_service.fetch_route(tracking.converter.origin.lat, tracking.converter.origin.lon, 1)
        layout, _ = RouteAnchoringWorkflow(tracking.create_anchor).place_route(route)

        assert layout.num_placed == 3
        start, corner, end = [p.anchor.world_position for p in layout.placements]
        assert start[0] == pytest.approx(0.0, abs=1e-6)
        assert start[1] == pytest.approx(0.5)
        assert corner[2] == pytest.approx(10.0, abs=0.1)
        assert end[0] == pytest.approx(10.0, abs=0.1)

        headings = [p.heading_deg for p in layout.placements]
        assert headings[0] == pytest.approx(-90.0, abs=0.5)
        assert headings[1] == pytest.approx(0.0, abs=0.5)
        assert headings[2] == 90.0
