"""
Tests for device location lookup.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from delivery_tracking.core.exceptions import LocationPermissionError, LocationUnavailableError
from delivery_tracking.schemas.tracking import Coordinate
from delivery_tracking.services.geo.location import get_current_location


@pytest.fixture
def provider():
    """Create mock location provider with permission granted."""
    provider = MagicMock()
    provider.request_permission = AsyncMock(return_value=True)
    provider.get_position = AsyncMock(
        return_value=SimpleNamespace(latitude=12.9716, longitude=77.5946)
    )
    return provider


class TestGetCurrentLocation:
    """Tests for get_current_location."""

    @pytest.mark.asyncio
    async def test_high_accuracy_fix(self, provider):
        coordinate = await get_current_location(provider)

        assert coordinate == Coordinate(latitude=12.9716, longitude=77.5946)
        provider.get_position.assert_awaited_once_with(high_accuracy=True)

    @pytest.mark.asyncio
    async def test_permission_denied(self, provider):
        provider.request_permission.return_value = False

        with pytest.raises(LocationPermissionError):
            await get_current_location(provider)

        provider.get_position.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_default_accuracy(self, provider):
        """Test a failed high-accuracy fix is retried once at default accuracy."""
        provider.get_position.side_effect = [
            TimeoutError("GPS timeout"),
            {"latitude": 12.97, "longitude": 77.59},
        ]

        coordinate = await get_current_location(provider)

        assert coordinate == Coordinate(latitude=12.97, longitude=77.59)
        assert provider.get_position.await_args_list[1].kwargs == {"high_accuracy": False}

    @pytest.mark.asyncio
    async def test_invalid_fix_falls_back(self, provider):
        provider.get_position.side_effect = [
            {"latitude": float("nan"), "longitude": 0},
            {"latitude": 1.0, "longitude": 2.0},
        ]

        assert await get_current_location(provider) == Coordinate(latitude=1.0, longitude=2.0)

    @pytest.mark.asyncio
    async def test_unavailable(self, provider):
        provider.get_position.side_effect = [
            TimeoutError("GPS timeout"),
            TimeoutError("GPS timeout"),
        ]

        with pytest.raises(LocationUnavailableError):
            await get_current_location(provider)

    @pytest.mark.asyncio
    async def test_invalid_fallback_fix(self, provider):
        provider.get_position.side_effect = [None, {"latitude": 95, "longitude": 0}]

        with pytest.raises(LocationUnavailableError):
            await get_current_location(provider)
