"""
Pydantic schemas for tracking payloads and provider responses.
"""

from delivery_tracking.schemas.directions import (
    Address,
    DirectionsLeg,
    DirectionsResult,
    DirectionsRoute,
    DistanceMatrixResponse,
    GeocodeResult,
    MatrixElement,
    MatrixRow,
    OverviewPolyline,
    TextValue,
)
from delivery_tracking.schemas.tracking import (
    Coordinate,
    Destination,
    GeoPoint,
    OrderStatus,
    OrderTrackingSnapshot,
    TrackingInfo,
    TrackingStatus,
)

__all__ = [
    # Tracking
    "Coordinate",
    "GeoPoint",
    "TrackingStatus",
    "OrderStatus",
    "TrackingInfo",
    "Destination",
    "OrderTrackingSnapshot",
    # Provider responses
    "TextValue",
    "MatrixElement",
    "MatrixRow",
    "DistanceMatrixResponse",
    "DirectionsLeg",
    "OverviewPolyline",
    "DirectionsRoute",
    "DirectionsResult",
    "Address",
    "GeocodeResult",
]
