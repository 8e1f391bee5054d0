"""
Order tracking schemas.

Wire JSON is camelCase; the legacy backend field names (`_id`,
`shippingAddress`, `distance`, `route`) are accepted as input aliases.
Invalid optional sub-fields are dropped to None so a single bad value
never discards a whole tracking update.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

from delivery_tracking.schemas.validators import Latitude, Longitude

logger = logging.getLogger(__name__)


class TrackingStatus(str, Enum):
    """Delivery progress reported by the backend."""

    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"

    @property
    def is_terminal(self) -> bool:
        return self is TrackingStatus.DELIVERED


class OrderStatus(str, Enum):
    """Order lifecycle status owned by the backend."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Coordinate(BaseModel):
    """A validated (latitude, longitude) pair."""

    latitude: Latitude
    longitude: Longitude

    class Config:
        frozen = True


class GeoPoint(BaseModel):
    """GeoJSON point. Axis order is (longitude, latitude)."""

    type: Literal["Point"] = "Point"
    coordinates: tuple[Longitude, Latitude]

    class Config:
        frozen = True

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate) -> "GeoPoint":
        return cls(coordinates=(coordinate.longitude, coordinate.latitude))


def _drop_invalid(
    value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
) -> Any:
    """Validate an optional sub-field, replacing an invalid value with None."""
    try:
        return handler(value)
    except ValidationError as e:
        logger.warning(
            f"Dropping invalid tracking field '{info.field_name}': "
            f"{e.errors()[0]['msg']} (value={value!r})"
        )
        return None


class TrackingInfo(BaseModel):
    """Live delivery data attached to an order."""

    current_location: Optional[GeoPoint] = None
    status: Optional[TrackingStatus] = None
    eta: Optional[str] = None
    distance_meters: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("distanceMeters", "distance_meters", "distance"),
    )
    encoded_route: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("encodedRoute", "encoded_route", "route"),
    )
    last_updated: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @field_validator(
        "current_location",
        "status",
        "eta",
        "distance_meters",
        "encoded_route",
        "last_updated",
        mode="wrap",
    )
    @classmethod
    def drop_invalid_fields(cls, value, handler, info):
        return _drop_invalid(value, handler, info)


class Destination(BaseModel):
    """Delivery destination; only the location matters for tracking."""

    location: Optional[GeoPoint] = None

    class Config:
        frozen = True

    @field_validator("location", mode="wrap")
    @classmethod
    def drop_invalid_location(cls, value, handler, info):
        return _drop_invalid(value, handler, info)


class OrderTrackingSnapshot(BaseModel):
    """
    Authoritative tracking state of one order.

    Owned by the backend. Instances are frozen and never re-sent.
    """

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    order_number: str = Field(validation_alias=AliasChoices("orderNumber", "order_number"))
    # Statuses outside OrderStatus are kept as plain strings
    status: Optional[Union[OrderStatus, str]] = Field(default=None, union_mode="left_to_right")
    tracking: Optional[TrackingInfo] = None
    destination: Destination = Field(
        default_factory=Destination,
        validation_alias=AliasChoices("destination", "shippingAddress", "shipping_address"),
    )

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @field_validator("status", "tracking", mode="wrap")
    @classmethod
    def drop_invalid_fields(cls, value, handler, info):
        return _drop_invalid(value, handler, info)

    @property
    def current_coordinate(self) -> Optional[Coordinate]:
        """Courier position, when known."""
        if self.tracking and self.tracking.current_location:
            return self.tracking.current_location.to_coordinate()
        return None

    @property
    def destination_coordinate(self) -> Optional[Coordinate]:
        """Delivery address position, when known."""
        if self.destination.location:
            return self.destination.location.to_coordinate()
        return None
