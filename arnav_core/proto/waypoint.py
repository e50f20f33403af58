"""
Route Waypoint and Anchor Schemas.

Defines the waypoint list returned by the routing service, the anchor handle
returned by the tracking subsystem, and the oriented placement derived from
consecutive anchors.

Routing service response body:
    {"nodes": [{"id": 1, "places_name": "...", "latitude": .., "longitude": ..,
                "total_nodes": 4}, ...]}
or
    {"error": "invalid destination"}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from arnav_core.errors import RouteLookupError


UNSET_DESTINATION_ID = -1


@dataclass(frozen=True)
class Waypoint:
    """
    One stop along a computed route.

    Attributes:
        id: Node identifier from the routing service
        name: Place name
        latitude: WGS84 latitude (degrees)
        longitude: WGS84 longitude (degrees)
        total_nodes: Route length as reported by the service (optional)
    """

    id: int
    name: str
    latitude: float
    longitude: float
    total_nodes: Optional[int] = None

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Waypoint {self.id} latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Waypoint {self.id} longitude out of range: {self.longitude}")

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Waypoint":
        """
        Build a waypoint from one routing-service node.

        Raises:
            KeyError, TypeError, ValueError: if the node is malformed
        """
        total = node.get('total_nodes')
        return cls(
            id=int(node['id']),
            name=str(node.get('places_name') or ''),
            latitude=float(node['latitude']),
            longitude=float(node['longitude']),
            total_nodes=int(total) if total is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'places_name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'total_nodes': self.total_nodes,
        }


@dataclass
class PlacedAnchor:
    """
    Anchor handle returned by the tracking subsystem.

    Attributes:
        anchor_id: Subsystem anchor identifier
        latitude, longitude: Requested geographic position
        world_position: Resolved position in the placement frame (x=east,
            y=up, z=north), meters
    """

    anchor_id: str
    latitude: float
    longitude: float
    world_position: Tuple[float, float, float]


@dataclass
class AnchorPlacement:
    """Waypoint marker with its final heading."""

    waypoint: Waypoint
    heading_deg: float
    anchor: Optional[PlacedAnchor] = None

    def to_dict(self) -> dict:
        return {
            'waypoint': self.waypoint.to_dict(),
            'heading_deg': self.heading_deg,
            'anchor_id': self.anchor.anchor_id if self.anchor else None,
        }


@dataclass
class RouteLayout:
    """Result of placing a whole route."""

    placements: List[AnchorPlacement] = field(default_factory=list)
    failed: List[Waypoint] = field(default_factory=list)

    @property
    def num_placed(self) -> int:
        return len(self.placements)

    @property
    def num_failed(self) -> int:
        return len(self.failed)


def parse_route_response(body: Any) -> List[Waypoint]:
    """
    Parse a routing-service response body into ordered waypoints.

    Args:
        body: Decoded JSON body

    Returns:
        Waypoints in traversal order (service order is kept)

    Raises:
        RouteLookupError: structured service error ('invalid_destination'),
            malformed body ('malformed') or no nodes ('empty_route')
    """
    if not isinstance(body, dict):
        raise RouteLookupError("Route response is not a JSON object", reason="malformed")

    if body.get('error'):
        raise RouteLookupError(str(body['error']), reason="invalid_destination")

    nodes = body.get('nodes')
    if not isinstance(nodes, list):
        raise RouteLookupError("Route response has no node list", reason="malformed")

    if not nodes:
        raise RouteLookupError("Route contains no waypoints", reason="empty_route")

    for index, node in enumerate(nodes):
        if not isinstance(node, dict):
            raise RouteLookupError(f"Route node {index} is not an object", reason="malformed")

    try:
        return [Waypoint.from_node(node) for node in nodes]
    except (KeyError, TypeError, ValueError) as e:
        raise RouteLookupError(f"Malformed route node: {e}", reason="malformed") from e
