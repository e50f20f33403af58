"""
Unit tests for the session gate.

Tests cover:
- Which session statuses make a tick meaningful
- Session readiness (tracking + location running)
- Screen sleep policy
"""

import pytest

from arnav_core.proto import SessionStatus, LocationServiceStatus
from arnav_core.localization import (
    is_tick_meaningful,
    is_session_ready,
    keep_screen_awake,
)


class TestIsTickMeaningful:
    """Tests for is_tick_meaningful()."""

    @pytest.mark.parametrize("status", [
        SessionStatus.CHECKING_AVAILABILITY,
        SessionStatus.TRACKING,
    ])
    def test_meaningful_statuses(self, status):
        assert is_tick_meaningful(status) is True

    @pytest.mark.parametrize("status", [
        SessionStatus.NONE,
        SessionStatus.NEEDS_INSTALL,
        SessionStatus.INSTALLING,
        SessionStatus.INITIALIZING,
        SessionStatus.ERROR_FATAL,
    ])
    def test_gated_statuses(self, status):
        assert is_tick_meaningful(status) is False


class TestIsSessionReady:
    """Tests for is_session_ready()."""

    def test_ready_when_tracking_and_running(self):
        assert is_session_ready(SessionStatus.TRACKING, LocationServiceStatus.RUNNING)

    def test_not_ready_while_location_initializing(self):
        assert not is_session_ready(SessionStatus.TRACKING, LocationServiceStatus.INITIALIZING)

    def test_not_ready_while_checking_availability(self):
        """Checking availability passes the gate but is not ready for poses."""
        assert not is_session_ready(SessionStatus.CHECKING_AVAILABILITY, LocationServiceStatus.RUNNING)


class TestKeepScreenAwake:
    """Tests for the screen sleep policy."""

    def test_awake_only_while_tracking(self):
        for status in SessionStatus:
            assert keep_screen_awake(status) == (status == SessionStatus.TRACKING)
