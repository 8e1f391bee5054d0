"""
Coordinate validation and plain geodesy helpers.
"""
import math
from collections.abc import Mapping
from typing import Any, Optional

from delivery_tracking.schemas.tracking import Coordinate
from delivery_tracking.schemas.validators import validate_latitude, validate_longitude

EARTH_RADIUS_KM = 6371.0


def _components(c: Any) -> tuple[Any, Any]:
    if isinstance(c, Mapping):
        return c.get("latitude"), c.get("longitude")
    return getattr(c, "latitude", None), getattr(c, "longitude", None)


def is_valid_coordinate(c: Any) -> bool:
    """
    Check that c holds finite, in-range latitude and longitude.

    Accepts a Coordinate, a mapping with latitude/longitude keys, or any
    object with latitude/longitude attributes. Used to filter values,
    never to reject a whole update.
    """
    if c is None:
        return False

    latitude, longitude = _components(c)
    try:
        validate_latitude(latitude)
        validate_longitude(longitude)
    except ValueError:
        return False
    return True


def to_coordinate(c: Any) -> Optional[Coordinate]:
    """Return c as a Coordinate, or None when it is not a valid coordinate."""
    if isinstance(c, Coordinate):
        return c
    if not is_valid_coordinate(c):
        return None
    latitude, longitude = _components(c)
    return Coordinate(latitude=latitude, longitude=longitude)


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def parse_coordinate_string(text: str) -> Optional[Coordinate]:
    """Parse a "lat,lng" literal; None when text is not a valid coordinate pair."""
    if not text or "," not in text:
        return None

    parts = [part.strip() for part in text.split(",")]
    try:
        latitude = float(parts[0])
        longitude = float(parts[1])
    except ValueError:
        return None

    return to_coordinate({"latitude": latitude, "longitude": longitude})
