"""
I/O Module: Background tasks, routing service client, virtual devices.

- Cancellable background tasks polled from the tick loop
- HTTP route lookup (never on the tick)
- Simulated tracking/location/permission/routing backends for tests and demos
"""

from .tasks import BackgroundTask, TaskCancelled, check_cancelled
from .route_client import RouteClient, RouteClientConfig
from .simulated_device import (
    SimulatedTrackingSubsystem,
    SimulatedLocationService,
    SimulatedPermissions,
    SimulatedRouteService,
    create_virtual_device,
)

__all__ = [
    'BackgroundTask',
    'TaskCancelled',
    'check_cancelled',
    'RouteClient',
    'RouteClientConfig',
    'SimulatedTrackingSubsystem',
    'SimulatedLocationService',
    'SimulatedPermissions',
    'SimulatedRouteService',
    'create_virtual_device',
]
