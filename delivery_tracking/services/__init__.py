"""
Services module.

Provides the delivery tracking services:
- Geo route service for polylines, distances, directions and geocoding
- Subscription hub for live order tracking
"""
from delivery_tracking.services.geo import (
    GeoRouteService,
    MatrixResult,
    decode_polyline,
    format_distance,
    format_eta,
    is_valid_coordinate,
)
from delivery_tracking.services.realtime import (
    ConnectionState,
    RouteSummary,
    TrackingSubscriptionHub,
    create_tracking_hub,
)

__all__ = [
    # Geo
    "GeoRouteService",
    "MatrixResult",
    "decode_polyline",
    "is_valid_coordinate",
    "format_distance",
    "format_eta",
    # Realtime
    "TrackingSubscriptionHub",
    "ConnectionState",
    "RouteSummary",
    "create_tracking_hub",
]
