"""
Domain Module: Session control loop and route anchoring.

Implements:
- Geospatial session lifecycle (activate/tick/deactivate)
- Route request preconditions
- Waypoint anchor placement and marker orientation
"""

from .route_anchoring import (
    AnchoringConfig,
    AnchorFactory,
    ARRIVAL_HEADING_DEG,
    RouteAnchoringWorkflow,
    chain_headings,
    planar_bearing_deg,
)
from .geospatial_session import (
    GeospatialSession,
    SessionConfig,
)

__all__ = [
    'AnchoringConfig',
    'AnchorFactory',
    'ARRIVAL_HEADING_DEG',
    'RouteAnchoringWorkflow',
    'chain_headings',
    'planar_bearing_deg',
    'GeospatialSession',
    'SessionConfig',
]
