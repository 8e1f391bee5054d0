"""
Tests for distance, duration, ETA and status formatting.
"""
from datetime import datetime

import pytest

from delivery_tracking.schemas.tracking import TrackingStatus
from delivery_tracking.services.geo.formatting import (
    DEFAULT_STATUS_MESSAGE,
    format_distance,
    format_duration,
    format_eta,
    get_status_message,
)


class TestFormatDistance:
    """Tests for format_distance."""

    @pytest.mark.parametrize("meters,expected", [
        (850, "850 m"),
        (1500, "1.5 km"),
        (1000, "1.0 km"),
        (0, "0 m"),
        (849.5, "850 m"),
        (1050, "1.1 km"),
        (12345, "12.3 km"),
    ])
    def test_format_distance(self, meters, expected):
        """Test meters below 1 km and one-decimal kilometers above."""
        assert format_distance(meters) == expected


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize("seconds,expected", [
        (45, "45 sec"),
        (720, "12 min"),
        (3900, "1 hr 5 min"),
        (7200, "2 hr 0 min"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestFormatETA:
    """Tests for the two-bucket ETA policy."""

    NOW = datetime(2024, 1, 1, 22, 0, 0)

    def test_same_day(self):
        """Test an arrival later today renders the clock time."""
        assert format_eta(3600, now=self.NOW) == "11:00 PM"

    def test_crossing_midnight(self):
        """Test an arrival after midnight renders as tomorrow."""
        assert format_eta(7200, now=self.NOW) == "Tomorrow at 12:00 AM"

    def test_noon(self):
        """Test noon renders as 12 PM."""
        assert format_eta(1800, now=datetime(2024, 1, 1, 11, 30)) == "12:00 PM"

    def test_morning_minutes_padded(self):
        """Test minutes are zero-padded and hours are not."""
        assert format_eta(300, now=datetime(2024, 1, 1, 8, 0)) == "8:05 AM"

    def test_multi_day_still_tomorrow(self):
        """Test arrivals more than a day out stay in the tomorrow bucket."""
        assert format_eta(3 * 86400, now=self.NOW) == "Tomorrow at 10:00 PM"


class TestStatusMessage:
    """Tests for get_status_message."""

    @pytest.mark.parametrize("status,expected", [
        (TrackingStatus.PREPARING, "Your order is being prepared"),
        ("ready_for_pickup", "Your order is ready for pickup"),
        ("in_transit", "Your order is on the way"),
        (TrackingStatus.DELIVERED, "Your order has been delivered"),
    ])
    def test_known_status(self, status, expected):
        assert get_status_message(status) == expected

    @pytest.mark.parametrize("status", [None, "", "lost"])
    def test_unknown_status(self, status):
        """Test unknown or missing status falls back to the default text."""
        assert get_status_message(status) == DEFAULT_STATUS_MESSAGE
