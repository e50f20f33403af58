"""
Routing service HTTP client.

GET {base_url}{route_path}?latitude=..&longitude=..&destination_id=..

Success body: {"nodes": [{id, places_name, latitude, longitude, total_nodes}]}
Error body:   {"error": "..."}
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import requests

from arnav_core.errors import RouteLookupError
from arnav_core.proto.waypoint import Waypoint, parse_route_response
from arnav_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class RouteClientConfig:
    """
    Configuration for the routing client.

    Attributes:
        base_url: Routing service base URL
        route_path: Route lookup path
        timeout_s: Request timeout (s)
    """

    base_url: str = "http://127.0.0.1:8080"
    route_path: str = "/route"
    timeout_s: float = 10.0

    def __post_init__(self):
        assert self.base_url, "base_url must be set"
        assert self.timeout_s > 0, "timeout must be positive"

    @property
    def url(self) -> str:
        return self.base_url.rstrip('/') + '/' + self.route_path.lstrip('/')


class RouteClient:
    """
    Blocking route lookup. Run it inside a BackgroundTask, never on the tick.

    Usage:
        client = RouteClient(RouteClientConfig(base_url="https://nav.example"))
        try:
            waypoints = client.fetch_route(lat, lon, destination_id)
        except RouteLookupError as e:
            print(e.reason, e.message)
    """

    def __init__(self, config: Optional[RouteClientConfig] = None,
                 http: Optional[requests.Session] = None):
        self.config = config or RouteClientConfig()
        self.http = http or requests.Session()
        self.metrics = get_metrics()

    def fetch_route(self, origin_lat: float, origin_lon: float, destination_id: int) -> List[Waypoint]:
        """
        Look up the route from an origin to a destination.

        Args:
            origin_lat: Origin latitude (degrees)
            origin_lon: Origin longitude (degrees)
            destination_id: Destination place id

        Returns:
            Waypoints in traversal order; the first is the user's location

        Raises:
            RouteLookupError: transport failure, structured service error,
                malformed or empty response
        """
        params = {
            'latitude': origin_lat,
            'longitude': origin_lon,
            'destination_id': destination_id,
        }
        logger.info(f"Requesting route to destination {destination_id} "
                    f"from ({origin_lat:.6f}, {origin_lon:.6f})")

        t_start = time.time()
        try:
            response = self.http.get(self.config.url, params=params, timeout=self.config.timeout_s)
        except requests.RequestException as e:
            self.metrics.increment('route_transport_errors')
            raise RouteLookupError(f"Route lookup failed: {e}", reason="transport") from e
        finally:
            self.metrics.record_histogram('route_lookup_ms', (time.time() - t_start) * 1000.0)

        try:
            body = response.json()
        except ValueError as e:
            if not response.ok:
                raise RouteLookupError(
                    f"Route lookup failed: HTTP {response.status_code}", reason="transport"
                ) from e
            raise RouteLookupError("Route response is not valid JSON", reason="malformed") from e

        # A structured error wins over the HTTP status
        if isinstance(body, dict) and body.get('error'):
            return parse_route_response(body)

        if not response.ok:
            raise RouteLookupError(f"Route lookup failed: HTTP {response.status_code}", reason="transport")

        waypoints = parse_route_response(body)
        logger.info(f"Route received: {len(waypoints)} waypoints")
        return waypoints

    def close(self):
        self.http.close()
