"""
Directions, distance-matrix and geocoding schemas.

These mirror the provider (Google Maps) response shapes proxied by the
backend, so their field names stay snake_case as on the wire.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from delivery_tracking.schemas.tracking import GeoPoint


class TextValue(BaseModel):
    """Provider measurement: display text plus raw value (meters or seconds)."""

    text: str = ""
    value: float


class MatrixElement(BaseModel):
    """One origin/destination pair of a distance-matrix row."""

    status: str
    distance: Optional[TextValue] = None
    duration: Optional[TextValue] = None

    @property
    def ok(self) -> bool:
        return self.status == "OK" and self.distance is not None


class MatrixRow(BaseModel):
    elements: list[MatrixElement] = Field(default_factory=list)


class DistanceMatrixResponse(BaseModel):
    """Distance-matrix payload for one origin and a batch of destinations."""

    status: Optional[str] = None
    rows: list[MatrixRow] = Field(default_factory=list)


class DirectionsLeg(BaseModel):
    distance: TextValue
    duration: TextValue


class OverviewPolyline(BaseModel):
    points: str = ""


class DirectionsRoute(BaseModel):
    legs: list[DirectionsLeg] = Field(default_factory=list)
    overview_polyline: Optional[OverviewPolyline] = None


class DirectionsResult(BaseModel):
    """Directions payload. Callers pick routes[0].legs[0]."""

    status: Optional[str] = None
    routes: list[DirectionsRoute] = Field(default_factory=list)


class Address(BaseModel):
    """Structured delivery address used for geocoding."""

    street: str = ""
    village: str = ""
    district: str = ""
    state: str = ""
    pincode: str = ""

    def __str__(self) -> str:
        return ", ".join(
            part for part in (self.street, self.village, self.district, self.state, self.pincode)
            if part
        )


class GeocodeResult(BaseModel):
    """Geocoding payload returned by the backend proxy."""

    location: Optional[GeoPoint] = None
    formatted_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("formattedAddress", "formatted_address"),
    )
