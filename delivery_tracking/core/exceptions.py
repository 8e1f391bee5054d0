"""
Typed errors for the delivery tracking subsystem.

Network failures surface to the immediate caller as one of the FetchError
subclasses. Decode anomalies and partial distance-matrix failures are never
raised; they are reported through result objects instead.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Standardized error format for hosts that surface tracking errors."""
    code: str
    message: str
    timestamp: str
    status_code: Optional[int] = None
    order_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Wrapper for error responses."""
    error: ErrorDetail


# =============================================================================
# Base Exception
# =============================================================================

class TrackingException(Exception):
    """Base exception for all tracking errors."""

    error_code: str = "TRACKING_ERROR"
    message: str = "An unexpected tracking error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message or self.message
        self.details = details
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_response(self, order_id: Optional[str] = None) -> ErrorResponse:
        """Convert exception to standardized error response."""
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                status_code=getattr(self, "status_code", None),
                order_id=order_id,
                details=self.details,
            )
        )


class ConfigurationException(TrackingException):
    """Configuration error - should fail at startup."""
    error_code = "CONFIGURATION_ERROR"
    message = "Tracking configuration error"


# =============================================================================
# Transport
# =============================================================================

class TransportError(TrackingException):
    """Shared real-time connection could not be established or maintained."""
    error_code = "TRANSPORT_ERROR"
    message = "Real-time tracking connection unavailable"


# =============================================================================
# Pull path (HTTP)
# =============================================================================

class FetchError(TrackingException):
    """A request against the backend failed (network or non-2xx)."""
    error_code = "FETCH_ERROR"
    message = "Request to tracking backend failed"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.status_code = status_code
        self.cause = cause
        super().__init__(message=message, details=details)


class ApiRequestError(FetchError):
    """Raised by the HTTP capability for any failed request."""
    error_code = "API_REQUEST_FAILED"
    message = "API request failed"


class TrackingFetchError(FetchError):
    """Tracking snapshot could not be fetched."""
    error_code = "TRACKING_FETCH_FAILED"
    message = "Failed to get order tracking information"

    def __init__(self, order_id: str, cause: Optional[BaseException] = None):
        super().__init__(
            message=f"Failed to get tracking information for order '{order_id}'",
            status_code=getattr(cause, "status_code", None),
            details={"order_id": order_id},
            cause=cause,
        )
        self.order_id = order_id


class DirectionsError(FetchError):
    """Directions could not be retrieved."""
    error_code = "DIRECTIONS_FAILED"
    message = "Failed to get directions"


class DistanceMatrixError(FetchError):
    """A distance-matrix batch failed."""
    error_code = "DISTANCE_MATRIX_FAILED"
    message = "Failed to calculate distance"


class GeocodeError(FetchError):
    """Geocoding request failed."""
    error_code = "GEOCODE_FAILED"
    message = "Failed to geocode address"


class GeocodeNoResultsError(GeocodeError):
    """Geocoding provider found no match for the address."""
    error_code = "GEOCODE_NO_RESULTS"
    message = "No results found for address"

    def __init__(self, address: str, cause: Optional[BaseException] = None):
        super().__init__(
            message=f"No geocoding results for address '{address}'",
            details={"address": address},
            cause=cause,
        )


# =============================================================================
# Geodata
# =============================================================================

class InvalidCoordinateError(TrackingException):
    """Coordinate outside latitude/longitude range or not numeric."""
    error_code = "INVALID_COORDINATE"
    message = "Invalid coordinates provided"


class LocationPermissionError(TrackingException):
    """Device location permission was denied."""
    error_code = "LOCATION_PERMISSION_DENIED"
    message = "Permission to access location was denied"


class LocationUnavailableError(TrackingException):
    """Device did not produce a usable position."""
    error_code = "LOCATION_UNAVAILABLE"
    message = "Failed to get current location"
