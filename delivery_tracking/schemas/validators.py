"""
Shared Pydantic validators for geodata.
"""

import math
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def _finite_float(v: Any, name: str) -> float:
    """Coerce to a finite float, rejecting booleans, strings and other non-numbers."""
    if v is None:
        raise ValueError(f"{name} is required")
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"Invalid {name.lower()} value: {v!r}")

    value = float(v)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {v!r}")
    return value


def validate_latitude(v: Any) -> float:
    """
    Validate latitude value.

    Latitude must be a finite number between -90 and 90 degrees.
    """
    lat = _finite_float(v, "Latitude")
    if lat < -90 or lat > 90:
        raise ValueError(f"Latitude must be between -90 and 90, got {lat}")
    return lat


def validate_longitude(v: Any) -> float:
    """
    Validate longitude value.

    Longitude must be a finite number between -180 and 180 degrees.
    """
    lon = _finite_float(v, "Longitude")
    if lon < -180 or lon > 180:
        raise ValueError(f"Longitude must be between -180 and 180, got {lon}")
    return lon


# Annotated types for use in Pydantic models
Latitude = Annotated[
    float,
    BeforeValidator(validate_latitude),
    Field(description="Latitude in degrees (-90 to 90)"),
]

Longitude = Annotated[
    float,
    BeforeValidator(validate_longitude),
    Field(description="Longitude in degrees (-180 to 180)"),
]
