"""
Geo route service: distance matrix, directions and geocoding.

Features:
- Distance-matrix lookups chunked to the provider limit of 25 destinations
- Concurrent batches bounded by a semaphore; a failed batch degrades to
  empty slots and is never retried
- Optional Redis cache for matrix batches
- Directions and geocoding through the backend's maps proxy
"""
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union

from pydantic import ValidationError

from delivery_tracking.core.config import settings
from delivery_tracking.core.exceptions import (
    ApiRequestError,
    DirectionsError,
    DistanceMatrixError,
    GeocodeError,
    GeocodeNoResultsError,
    InvalidCoordinateError,
)
from delivery_tracking.core.http import ApiClient, unwrap_data
from delivery_tracking.core.metrics import track_external_request, track_matrix_batch
from delivery_tracking.schemas.directions import (
    Address,
    DirectionsResult,
    DistanceMatrixResponse,
    GeocodeResult,
)
from delivery_tracking.schemas.tracking import Coordinate, GeoPoint
from delivery_tracking.services.geo.coordinates import (
    is_valid_coordinate,
    parse_coordinate_string,
    to_coordinate,
)
from delivery_tracking.services.geo.formatting import format_distance, format_eta
from delivery_tracking.services.geo.matrix_cache import MatrixCache
from delivery_tracking.services.geo.polyline import decode_polyline

logger = logging.getLogger(__name__)

MAX_DESTINATIONS_PER_REQUEST = 25  # provider limit

CoordinateLike = Union[Coordinate, dict[str, Any]]


@dataclass
class MatrixEntry:
    """Distance and duration from the origin to one destination."""
    distance_meters: float
    distance_text: str
    duration_seconds: Optional[float] = None
    duration_text: Optional[str] = None


@dataclass
class MatrixResult:
    """
    Positional distance-matrix result.

    entries has one slot per requested destination; a slot is None when
    the destination was invalid, unreachable, or its batch failed.
    """
    entries: list[Optional[MatrixEntry]]
    failed_batches: list[int] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(entry is not None for entry in self.entries)

    def distances(self) -> list[Optional[float]]:
        return [entry.distance_meters if entry else None for entry in self.entries]


def _require_coordinate(value: CoordinateLike, name: str) -> Coordinate:
    coordinate = to_coordinate(value)
    if coordinate is None:
        raise InvalidCoordinateError(
            message=f"Invalid {name} coordinates: {value!r}",
            details={name: repr(value)},
        )
    return coordinate


def _latlng(coordinate: Coordinate) -> str:
    return f"{coordinate.latitude},{coordinate.longitude}"


class GeoRouteService:
    """
    Geodata utilities for delivery tracking.

    Pure helpers (polyline decoding, validation, formatting) are exposed as
    static methods; network lookups go through the injected ApiClient.
    """

    decode_polyline = staticmethod(decode_polyline)
    is_valid_coordinate = staticmethod(is_valid_coordinate)
    format_distance = staticmethod(format_distance)
    format_eta = staticmethod(format_eta)

    def __init__(
        self,
        api_client: ApiClient,
        batch_size: Optional[int] = None,
        max_concurrent: Optional[int] = None,
        cache: Optional[MatrixCache] = None,
    ):
        """
        Initialize geo route service.

        Args:
            api_client: Authenticated backend client
            batch_size: Destinations per distance-matrix request (max 25)
            max_concurrent: Maximum concurrent distance-matrix requests
            cache: Optional distance-matrix batch cache
        """
        self.api = api_client
        self.batch_size = min(
            batch_size or settings.DISTANCE_MATRIX_BATCH_SIZE,
            MAX_DESTINATIONS_PER_REQUEST,
        )
        self.max_concurrent = max_concurrent or settings.DISTANCE_MATRIX_MAX_CONCURRENT
        self.semaphore = asyncio.Semaphore(self.max_concurrent)
        self.cache = cache

    # ------------------------------------------------------------------
    # Distance matrix
    # ------------------------------------------------------------------

    async def get_distance_matrix(
        self,
        origin: CoordinateLike,
        destinations: list[CoordinateLike],
    ) -> MatrixResult:
        """
        Get distances from one origin to many destinations.

        Destinations are sent in batches of at most batch_size. Each batch
        is independent: a failure is logged and leaves that batch's slots
        empty without affecting the others.

        Args:
            origin: Origin coordinate
            destinations: Destination coordinates

        Returns:
            MatrixResult with one positional slot per destination

        Raises:
            InvalidCoordinateError: If origin is not a valid coordinate
        """
        origin = _require_coordinate(origin, "origin")
        entries: list[Optional[MatrixEntry]] = [None] * len(destinations)

        valid: list[tuple[int, Coordinate]] = []
        for position, destination in enumerate(destinations):
            coordinate = to_coordinate(destination)
            if coordinate is None:
                logger.warning(f"Skipping invalid destination at position {position}: {destination!r}")
                continue
            valid.append((position, coordinate))

        if not valid:
            return MatrixResult(entries=entries)

        batches = [
            valid[i:i + self.batch_size]
            for i in range(0, len(valid), self.batch_size)
        ]
        if len(batches) > 1:
            logger.info(
                f"Batching distance matrix: {len(valid)} destinations "
                f"in {len(batches)} batches of {self.batch_size}"
            )

        results = await asyncio.gather(
            *(
                self._compute_batch(index, origin, [coordinate for _, coordinate in batch])
                for index, batch in enumerate(batches)
            )
        )

        failed_batches = []
        for index, (batch, batch_entries) in enumerate(zip(batches, results)):
            if batch_entries is None:
                failed_batches.append(index)
                continue
            for (position, _), entry in zip(batch, batch_entries):
                entries[position] = entry

        return MatrixResult(entries=entries, failed_batches=failed_batches)

    async def _compute_batch(
        self,
        index: int,
        origin: Coordinate,
        destinations: list[Coordinate],
    ) -> Optional[list[Optional[MatrixEntry]]]:
        """Resolve one batch; None when it failed."""
        async with self.semaphore:
            if self.cache:
                cached = await self.cache.get(origin, destinations)
                if cached is not None:
                    return [MatrixEntry(**entry) if entry else None for entry in cached]

            try:
                batch_entries = await self._request_matrix(origin, destinations)
            except DistanceMatrixError as e:
                logger.error(f"Distance matrix batch {index} ({len(destinations)} destinations) failed: {e}")
                track_matrix_batch(success=False)
                return None

            track_matrix_batch(success=True)
            if self.cache:
                await self.cache.set(
                    origin,
                    destinations,
                    [asdict(entry) if entry else None for entry in batch_entries],
                )
            return batch_entries

    @track_external_request("backend", "distance_matrix")
    async def _request_matrix(
        self,
        origin: Coordinate,
        destinations: list[Coordinate],
    ) -> list[Optional[MatrixEntry]]:
        """POST one batch to the distance proxy and flatten its first row."""
        body = {
            "origin": origin.model_dump(),
            "destinations": [d.model_dump() for d in destinations],
        }
        try:
            payload = await self.api.post("/location/distance", json=body)
            matrix = DistanceMatrixResponse.model_validate(unwrap_data(payload))
        except ApiRequestError as e:
            raise DistanceMatrixError(str(e), status_code=e.status_code, cause=e) from e
        except ValidationError as e:
            raise DistanceMatrixError(f"Invalid distance matrix response: {e}", cause=e) from e

        if matrix.status and matrix.status != "OK":
            raise DistanceMatrixError(f"Distance calculation failed: {matrix.status}")
        if not matrix.rows:
            raise DistanceMatrixError("Invalid response structure - missing rows")

        elements = matrix.rows[0].elements
        if len(elements) != len(destinations):
            logger.warning(
                f"Distance matrix returned {len(elements)} elements for {len(destinations)} destinations"
            )

        entries: list[Optional[MatrixEntry]] = []
        for position in range(len(destinations)):
            element = elements[position] if position < len(elements) else None
            if element is None or not element.ok:
                entries.append(None)
                continue
            entries.append(
                MatrixEntry(
                    distance_meters=element.distance.value,
                    distance_text=element.distance.text,
                    duration_seconds=element.duration.value if element.duration else None,
                    duration_text=element.duration.text if element.duration else None,
                )
            )
        return entries

    # ------------------------------------------------------------------
    # Directions
    # ------------------------------------------------------------------

    @track_external_request("backend", "directions")
    async def get_directions(
        self,
        origin: CoordinateLike,
        destination: CoordinateLike,
        waypoints: Optional[list[CoordinateLike]] = None,
    ) -> DirectionsResult:
        """
        Get directions between two points.

        Args:
            origin: Start coordinate
            destination: End coordinate
            waypoints: Optional intermediate coordinates

        Returns:
            DirectionsResult; callers select routes[0].legs[0]

        Raises:
            InvalidCoordinateError: If an endpoint is not a valid coordinate
            DirectionsError: If the request fails
        """
        origin = _require_coordinate(origin, "origin")
        destination = _require_coordinate(destination, "destination")

        params = {
            "origin": _latlng(origin),
            "destination": _latlng(destination),
        }
        if waypoints:
            params["waypoints"] = "|".join(
                _latlng(_require_coordinate(wp, "waypoint")) for wp in waypoints
            )

        try:
            payload = await self.api.get("/location/directions", params=params)
            return DirectionsResult.model_validate(unwrap_data(payload))
        except ApiRequestError as e:
            logger.error(f"Error getting directions: {e}")
            raise DirectionsError(str(e), status_code=e.status_code, cause=e) from e
        except ValidationError as e:
            logger.error(f"Invalid directions response: {e}")
            raise DirectionsError(f"Invalid directions response: {e}", cause=e) from e

    # ------------------------------------------------------------------
    # Geocoding
    # ------------------------------------------------------------------

    @track_external_request("backend", "geocode")
    async def geocode_address(self, address: Union[Address, dict[str, Any]]) -> GeoPoint:
        """
        Forward-geocode a structured address.

        Raises:
            GeocodeNoResultsError: If the provider found no match
            GeocodeError: If the request fails
        """
        address = Address.model_validate(address)

        try:
            payload = await self.api.post("/location/geocode", json={"address": address.model_dump()})
        except ApiRequestError as e:
            if "ZERO_RESULTS" in str(e):
                raise GeocodeNoResultsError(str(address), cause=e) from e
            logger.error(f"Error geocoding address: {e}")
            raise GeocodeError(str(e), status_code=e.status_code, cause=e) from e

        try:
            result = GeocodeResult.model_validate(unwrap_data(payload))
        except ValidationError as e:
            raise GeocodeError(f"Invalid geocoding response: {e}", cause=e) from e

        if result.location is None:
            raise GeocodeNoResultsError(str(address))
        return result.location

    async def geocode_string_address(self, text: str) -> Optional[Coordinate]:
        """
        Resolve a free-text address to a coordinate.

        "lat,lng" literals are parsed directly; anything else is split on
        commas into street, village, district, state, pincode and geocoded.
        Returns None when nothing usable was found.
        """
        literal = parse_coordinate_string(text)
        if literal is not None:
            return literal

        parts = [part.strip() for part in (text or "").split(",")]
        parts += [""] * (5 - len(parts))
        address = Address(
            street=parts[0],
            village=parts[1],
            district=parts[2],
            state=parts[3],
            pincode=parts[4],
        )

        try:
            location = await self.geocode_address(address)
        except GeocodeError as e:
            logger.warning(f"Geocoding failed for {text!r}: {e}")
            return None
        return location.to_coordinate()
