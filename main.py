"""
ARNav session driver.

Runs a geospatial session against virtual device backends, requests a route
once localized, and prints session events and the debug overlay.
"""

import sys
import time
import signal
import logging
import argparse
from typing import Optional

import config
from arnav_core.domain import GeospatialSession, SessionConfig, AnchoringConfig
from arnav_core.io import RouteClient, RouteClientConfig, create_virtual_device
from arnav_core.localization import (
    EnablementConfig,
    LocalizationConfig,
    PoseAccuracyConfig,
)
from arnav_core.metrics import get_metrics
from arnav_core.proto import SessionEvent, EventKind

# Logging setup
logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


def build_session_config() -> SessionConfig:
    """SessionConfig from the config module."""
    return SessionConfig(
        permission_grace_s=config.SESSION_CONFIG["permission_grace_s"],
        poll_interval_s=config.SESSION_CONFIG["poll_interval_s"],
        enablement=EnablementConfig(settle_time_s=config.SESSION_CONFIG["settle_time_s"]),
        localization=LocalizationConfig(
            timeout_s=config.LOCALIZATION_CONFIG["timeout_s"],
            accuracy=PoseAccuracyConfig(
                max_horizontal_accuracy_m=config.LOCALIZATION_CONFIG["max_horizontal_accuracy_m"],
                max_yaw_accuracy_deg=config.LOCALIZATION_CONFIG["max_yaw_accuracy_deg"],
            ),
        ),
        anchoring=AnchoringConfig(
            altitude_offset_m=config.SESSION_CONFIG["anchor_altitude_offset_m"],
        ),
    )


def format_debug_info(info: dict) -> str:
    """Debug overlay text."""
    lines = [
        f"IsLocalizing: {info['is_localizing']} ({info['localizing_elapsed_s']:.1f}s)",
        f"SessionState: {info['session_status']}",
        f"LocationServiceStatus: {info['location_status']}",
        f"FeatureSupported: {info['feature_support']}",
        f"Enablement: {info['enablement']}",
        f"EarthState: {info['earth_state']}",
        f"PoseQuality: {info['pose_quality']}",
    ]

    pose = info['pose']
    if pose is None:
        lines.append("GeospatialPose: not tracking")
    else:
        lines.extend([
            f"Latitude/Longitude: {pose['latitude']:.6f}, {pose['longitude']:.6f}",
            f"Horizontal Accuracy: {pose['horizontal_accuracy_m']:.2f}m",
            f"Altitude: {pose['altitude_m']:.2f}m",
            f"Vertical Accuracy: {pose['vertical_accuracy_m']:.2f}m",
            f"Heading Yaw Accuracy: {pose['orientation_yaw_accuracy_deg']:.1f}",
        ])

    lines.append(f"Route: {'pending' if info['route_pending'] else 'idle'}, "
                 f"{info['anchors_placed']} anchors placed")
    return "\n".join(lines)


class SessionSimulator:
    """Drives a GeospatialSession tick by tick against a virtual device."""

    def __init__(self, destination_id: int, fps: float = 30.0, route_url: Optional[str] = None):
        self.running = False
        self.destination_id = destination_id
        self.fps = fps
        self.metrics = get_metrics()

        self.tracking, self.location, self.permissions, route_service = create_virtual_device(
            config.SIMULATION_CONFIG
        )

        if route_url:
            self.route_client = RouteClient(RouteClientConfig(
                base_url=route_url,
                route_path=config.ROUTING_CONFIG["route_path"],
                timeout_s=config.ROUTING_CONFIG["timeout_s"],
            ))
        else:
            self.route_client = route_service

        self.session = GeospatialSession(
            self.tracking,
            self.location,
            self.permissions,
            self.route_client,
            config=build_session_config(),
            on_event=self._on_event,
        )

        self.route_requested = False
        self.route_done = False
        self.tick_count = 0

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        logger.info("Session simulator initialized")

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        self.running = False

    def _on_event(self, event: SessionEvent):
        level = "WARN" if event.is_warning else "INFO"
        detail = f": {event.message}" if event.message else ""
        print(f"[{level}] {event.kind.value}{detail} {event.data if event.data else ''}".rstrip())

        if event.kind in (EventKind.ROUTE_PLACED, EventKind.ROUTE_FAILED):
            self.route_done = True

    def run(self, max_ticks: int, print_interval: int = 30):
        """
        Run the tick loop.

        Args:
            max_ticks: Stop after this many ticks
            print_interval: Print the debug overlay every N ticks
        """
        dt = 1.0 / self.fps
        self.session.activate()
        self.running = True

        try:
            while self.running and self.tick_count < max_ticks:
                self.tracking.step(dt)
                self.session.tick(dt)
                self.tick_count += 1

                if self.session.tracker.is_localized and not self.route_requested:
                    self.route_requested = True
                    self.session.request_route(self.destination_id)

                if self.tick_count % print_interval == 0:
                    print(format_debug_info(self.session.debug_info()))
                    print()

                if self.route_done:
                    break

                time.sleep(dt)
        finally:
            self.stop()

    def stop(self):
        self.running = False
        self.session.deactivate()

        layout = self.session.layout
        print("\n" + "=" * 60)
        print("               Session stopped")
        print("=" * 60)
        print(f"Ticks run: {self.tick_count}")
        if layout is not None:
            for placement in layout.placements:
                print(f"  {placement.waypoint.name:20s} heading={placement.heading_deg:7.1f}"
                      f"  world={tuple(round(v, 2) for v in placement.anchor.world_position)}")
            for waypoint in layout.failed:
                print(f"  {waypoint.name:20s} FAILED")
        print("=" * 60)

        self.metrics.print_summary()
        logger.info("Session simulator stopped")


def build_parser() -> argparse.ArgumentParser:
    """Command-line parser for the simulator."""
    parser = argparse.ArgumentParser(description='ARNav geospatial session simulator')
    parser.add_argument('--destination', '-D', type=int, default=1,
                        help='Destination id to route to')
    parser.add_argument('--ticks', '-n', type=int, default=600,
                        help='Maximum number of ticks')
    parser.add_argument('--fps', type=float, default=30.0,
                        help='Tick rate')
    parser.add_argument('--route-url', type=str, nargs='?', default=None,
                        const=config.ROUTING_CONFIG["base_url"],
                        help='Use the routing service at this base URL '
                             '(bare flag: ROUTING_CONFIG base_url; omitted: virtual routing)')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.fps <= 0:
        parser.error("--fps must be positive")

    simulator = SessionSimulator(args.destination, fps=args.fps, route_url=args.route_url)
    simulator.run(args.ticks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
