"""
Route Anchoring.

Places one anchor per waypoint and orients each marker toward the next one.

Placement:
- Every waypoint gets an anchor at (lat, lon) with a 0.5 m altitude offset
  and neutral heading. A failed anchor is reported and skipped; the rest of
  the route is still placed.

Orientation (over the anchors that were placed, in route order):
- bearing_i = atan2(z_{i+1} - z_i, x_{i+1} - x_i) in the world frame
- heading_i = -degrees(bearing_i)  (clockwise from the frame's forward axis)
- the final anchor (the destination) always gets ARRIVAL_HEADING_DEG

The first waypoint is the user's own location and is oriented like any
other waypoint.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from arnav_core.proto.waypoint import (
    Waypoint,
    PlacedAnchor,
    AnchorPlacement,
    RouteLayout,
)
from arnav_core.proto.session_event import SessionEvent, EventKind
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)

# (lat, lon, altitude_offset_m, heading_deg) -> anchor or None
AnchorFactory = Callable[[float, float, float, float], Optional[PlacedAnchor]]

ARRIVAL_HEADING_DEG = 90.0


@dataclass
class AnchoringConfig:
    """
    Configuration for route anchoring.

    Attributes:
        altitude_offset_m: Vertical offset of each marker (m)
        neutral_heading_deg: Heading used at creation time (degrees)
        arrival_heading_deg: Fixed heading of the destination marker (degrees)
    """

    altitude_offset_m: float = 0.5
    neutral_heading_deg: float = 0.0
    arrival_heading_deg: float = ARRIVAL_HEADING_DEG


def planar_bearing_deg(
    from_position: Tuple[float, float, float],
    to_position: Tuple[float, float, float],
) -> float:
    """
    Planar bearing between two world positions.

    Args:
        from_position: (x, y, z) of the current anchor
        to_position: (x, y, z) of the next anchor

    Returns:
        atan2(dz, dx) in degrees; 90 means +z (north)
    """
    delta = np.asarray(to_position, dtype=float) - np.asarray(from_position, dtype=float)
    return float(np.degrees(np.arctan2(delta[2], delta[0])))


def chain_headings(
    positions: Sequence[Tuple[float, float, float]],
    arrival_heading_deg: float = ARRIVAL_HEADING_DEG,
) -> List[float]:
    """
    Marker headings for an ordered list of world positions.

    Args:
        positions: World positions in route order
        arrival_heading_deg: Heading of the last marker

    Returns:
        One heading per position: -bearing toward the next position, and
        arrival_heading_deg for the last one
    """
    if len(positions) == 0:
        return []

    points = np.asarray(positions, dtype=float).reshape(-1, 3)
    deltas = np.diff(points, axis=0)
    bearings = np.degrees(np.arctan2(deltas[:, 2], deltas[:, 0]))

    headings = [float(-b) for b in bearings]
    headings.append(float(arrival_heading_deg))
    return headings


class RouteAnchoringWorkflow:
    """
    Turns an ordered waypoint list into oriented anchors.

    Usage:
        workflow = RouteAnchoringWorkflow(tracking.create_anchor)
        layout, events = workflow.place_route(waypoints)
        for placement in layout.placements:
            renderer.orient(placement.anchor, placement.heading_deg)
    """

    def __init__(self, create_anchor: AnchorFactory, config: Optional[AnchoringConfig] = None):
        self.create_anchor = create_anchor
        self.config = config or AnchoringConfig()
        self.metrics = get_metrics()

    def place_route(self, waypoints: Sequence[Waypoint]) -> Tuple[RouteLayout, List[SessionEvent]]:
        """
        Place and orient anchors for a route.

        Args:
            waypoints: Waypoints in traversal order

        Returns:
            (RouteLayout, events). Events include one ANCHOR_PLACEMENT_FAILED
            per failed waypoint and a closing ROUTE_PLACED summary.
        """
        layout = RouteLayout()
        events: List[SessionEvent] = []
        placed: List[Tuple[Waypoint, PlacedAnchor]] = []

        for index, waypoint in enumerate(waypoints):
            anchor = self._try_create(waypoint)
            if anchor is None:
                layout.failed.append(waypoint)
                self.metrics.increment('anchor_failures')
                events.append(SessionEvent(
                    EventKind.ANCHOR_PLACEMENT_FAILED,
                    message=waypoint.name,
                    data={'index': index, 'waypoint_id': waypoint.id},
                ))
                continue
            placed.append((waypoint, anchor))

        headings = chain_headings(
            [anchor.world_position for _, anchor in placed],
            self.config.arrival_heading_deg,
        )

        for (waypoint, anchor), heading in zip(placed, headings):
            layout.placements.append(AnchorPlacement(waypoint, heading, anchor))

        self.metrics.increment('anchors_placed', layout.num_placed)
        logger.info(f"Route placed: {layout.num_placed} anchors, {layout.num_failed} failed")

        events.append(SessionEvent(
            EventKind.ROUTE_PLACED,
            data={'placed': layout.num_placed, 'failed': layout.num_failed},
        ))
        return layout, events

    def _try_create(self, waypoint: Waypoint) -> Optional[PlacedAnchor]:
        """Create one anchor; any failure is reported, not raised."""
        try:
            anchor = self.create_anchor(
                waypoint.latitude,
                waypoint.longitude,
                self.config.altitude_offset_m,
                self.config.neutral_heading_deg,
            )
        except Exception as e:
            logger.warning(f"Anchor creation raised for waypoint {waypoint.id} ({waypoint.name}): {e}")
            return None

        if anchor is None:
            logger.warning(f"Anchor creation failed for waypoint {waypoint.id} ({waypoint.name})")
        return anchor
