"""
Encoded polyline codec (precision 1e5).

Each point is stored as two signed deltas (latitude, longitude) from the
previous point. A delta is zigzag-encoded and split into 5-bit groups,
least significant first; every group except the last carries the 0x20
continuation bit, and each group is offset by 63 into printable ASCII.

Route geometry is decorative, so decoding never raises. Out-of-range
points are skipped; malformed input yields whatever points were decoded
before the anomaly.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from delivery_tracking.schemas.tracking import Coordinate

logger = logging.getLogger(__name__)

PRECISION = 1e5
_CHAR_OFFSET = 63
_CONTINUATION_BIT = 0x20
_DATA_MASK = 0x1F


class _DecodeAnomaly(Exception):
    pass


@dataclass
class PolylineDecodeResult:
    """Outcome of decoding: ok=False means points is a partial result."""
    ok: bool
    points: list[Coordinate] = field(default_factory=list)
    reason: Optional[str] = None


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zigzag-encoded value starting at index; return (delta, next_index)."""
    result = 0
    shift = 0

    while True:
        if index >= len(encoded):
            raise _DecodeAnomaly(f"truncated group at offset {index}")

        b = ord(encoded[index]) - _CHAR_OFFSET
        if b < 0 or b > 63:
            raise _DecodeAnomaly(f"invalid character {encoded[index]!r} at offset {index}")

        index += 1
        result |= (b & _DATA_MASK) << shift
        shift += 5
        if b < _CONTINUATION_BIT:
            break

    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode(encoded: str) -> PolylineDecodeResult:
    """
    Decode an encoded polyline, reporting anomalies instead of raising.

    Args:
        encoded: Encoded polyline string

    Returns:
        PolylineDecodeResult; on anomaly ok is False, points holds every
        valid point decoded and reason describes what went wrong
    """
    if not isinstance(encoded, str):
        return PolylineDecodeResult(ok=False, reason=f"expected str, got {type(encoded).__name__}")

    points: list[Coordinate] = []
    problems: list[str] = []
    decoded = 0
    index = 0
    lat = 0
    lng = 0

    try:
        while index < len(encoded):
            dlat, index = _decode_value(encoded, index)
            dlng, index = _decode_value(encoded, index)
            lat += dlat
            lng += dlng
            decoded += 1

            latitude = lat / PRECISION
            longitude = lng / PRECISION
            # The accumulators stay valid, so later points still decode
            if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
                problems.append(f"point {decoded - 1} out of range ({latitude}, {longitude})")
                continue
            points.append(Coordinate(latitude=latitude, longitude=longitude))
    except _DecodeAnomaly as e:
        problems.append(str(e))

    if problems:
        return PolylineDecodeResult(ok=False, points=points, reason="; ".join(problems))
    return PolylineDecodeResult(ok=True, points=points)


def decode_polyline(encoded: str) -> list[Coordinate]:
    """Decode an encoded polyline into coordinates; best-effort on malformed input."""
    result = decode(encoded)
    if not result.ok:
        logger.warning(
            f"Malformed polyline ({result.reason}); "
            f"returning {len(result.points)} decoded points"
        )
    return result.points


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while value >= _CONTINUATION_BIT:
        chunks.append(chr((_CONTINUATION_BIT | (value & _DATA_MASK)) + _CHAR_OFFSET))
        value >>= 5
    chunks.append(chr(value + _CHAR_OFFSET))
    return "".join(chunks)


def encode_polyline(coordinates: Iterable[Coordinate]) -> str:
    """Encode coordinates with the standard polyline algorithm."""
    parts = []
    prev_lat = 0
    prev_lng = 0

    for coordinate in coordinates:
        lat = int(round(coordinate.latitude * PRECISION))
        lng = int(round(coordinate.longitude * PRECISION))
        parts.append(_encode_value(lat - prev_lat))
        parts.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng

    return "".join(parts)
