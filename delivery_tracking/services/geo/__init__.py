"""
Geo sub-package.

Contains geodata services:
- Polyline codec for route geometry
- Coordinate validation and haversine distance
- Distance, duration and ETA formatting
- Route service for distance matrix, directions and geocoding
- Device location lookup
"""

from delivery_tracking.services.geo.coordinates import (
    haversine_distance,
    is_valid_coordinate,
    parse_coordinate_string,
    to_coordinate,
)
from delivery_tracking.services.geo.formatting import (
    format_distance,
    format_duration,
    format_eta,
    get_status_message,
)
from delivery_tracking.services.geo.location import LocationProvider, get_current_location
from delivery_tracking.services.geo.matrix_cache import MatrixCache, create_matrix_cache
from delivery_tracking.services.geo.polyline import (
    PolylineDecodeResult,
    decode,
    decode_polyline,
    encode_polyline,
)
from delivery_tracking.services.geo.route_service import (
    GeoRouteService,
    MatrixEntry,
    MatrixResult,
)

__all__ = [
    # Polyline
    "PolylineDecodeResult",
    "decode",
    "decode_polyline",
    "encode_polyline",
    # Coordinates
    "is_valid_coordinate",
    "to_coordinate",
    "haversine_distance",
    "parse_coordinate_string",
    # Formatting
    "format_distance",
    "format_duration",
    "format_eta",
    "get_status_message",
    # Route service
    "GeoRouteService",
    "MatrixEntry",
    "MatrixResult",
    "MatrixCache",
    "create_matrix_cache",
    # Location
    "LocationProvider",
    "get_current_location",
]
