"""
Device location lookup.

The host application owns the platform geolocation API; it is handed to
get_current_location as a LocationProvider.
"""
import logging
from typing import Any, Protocol

from delivery_tracking.core.exceptions import (
    LocationPermissionError,
    LocationUnavailableError,
)
from delivery_tracking.schemas.tracking import Coordinate
from delivery_tracking.services.geo.coordinates import to_coordinate

logger = logging.getLogger(__name__)


class LocationProvider(Protocol):
    """Platform geolocation capability."""

    async def request_permission(self) -> bool:
        """Ask for foreground location permission; True when granted."""
        ...

    async def get_position(self, high_accuracy: bool = True) -> Any:
        """Return the current position (anything with latitude/longitude)."""
        ...


async def get_current_location(provider: LocationProvider) -> Coordinate:
    """
    Get the device's current coordinate.

    Tries a high-accuracy fix first and falls back to default accuracy once
    when that fails or yields an invalid position.

    Raises:
        LocationPermissionError: If permission was denied
        LocationUnavailableError: If no valid position could be obtained
    """
    if not await provider.request_permission():
        raise LocationPermissionError()

    try:
        coordinate = to_coordinate(await provider.get_position(high_accuracy=True))
    except Exception as e:
        logger.warning(f"High accuracy location failed, trying default accuracy: {e}")
        coordinate = None

    if coordinate is not None:
        return coordinate

    try:
        position = await provider.get_position(high_accuracy=False)
    except Exception as e:
        logger.error(f"Error getting current location: {e}")
        raise LocationUnavailableError(details={"reason": str(e)}) from e

    coordinate = to_coordinate(position)
    if coordinate is None:
        raise LocationUnavailableError(details={"reason": f"invalid position {position!r}"})
    return coordinate
