"""
AR Navigation (ARNav) Core Package.

Geospatial localization and route anchoring for outdoor AR wayfinding.

Package structure:
- proto: Status enums, pose/waypoint/event schemas, route response parsing
- localization: Session gate, feature enablement, pose accuracy, localization tracking
- domain: Session control loop, route anchoring
- io: Background tasks, routing client, virtual devices
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
__author__ = "ARNav Team"

from .errors import ArnavError, SessionSetupError, RouteLookupError
from .metrics import get_metrics
