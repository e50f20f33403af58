"""
Unit tests for the simulator command line.

Tests cover:
- Routing backend selection from --route-url
"""

import config
from main import build_parser


# =============================================================================
# Argument Parsing
# =============================================================================


class TestRouteUrlArgument:
    """Tests for the --route-url option."""

    def test_omitted_uses_virtual_routing(self):
        args = build_parser().parse_args([])
        assert args.route_url is None

    def test_bare_flag_uses_configured_base_url(self):
        args = build_parser().parse_args(['--route-url'])
        assert args.route_url == config.ROUTING_CONFIG["base_url"]

    def test_explicit_url(self):
        args = build_parser().parse_args(['--route-url', 'http://nav.test:9000'])
        assert args.route_url == 'http://nav.test:9000'
