"""
Human-facing distance, duration and ETA text.
"""
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from delivery_tracking.schemas.tracking import TrackingStatus

STATUS_MESSAGES = {
    TrackingStatus.PREPARING: "Your order is being prepared",
    TrackingStatus.READY_FOR_PICKUP: "Your order is ready for pickup",
    TrackingStatus.IN_TRANSIT: "Your order is on the way",
    TrackingStatus.DELIVERED: "Your order has been delivered",
}
DEFAULT_STATUS_MESSAGE = "Tracking your order..."


def _round_half_up(value: float, places: str) -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_distance(meters: float) -> str:
    """
    Format a distance for display.

    Below 1000 m: "<N> m" rounded to the nearest meter.
    Otherwise: "<N.N> km" rounded to one decimal.
    """
    if meters < 1000:
        return f"{_round_half_up(meters, '1')} m"
    return f"{_round_half_up(meters / 1000, '0.1')} km"


def format_duration(seconds: float) -> str:
    """Format a duration as "45 sec", "12 min" or "1 hr 5 min"."""
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds} sec"
    if seconds < 3600:
        return f"{seconds // 60} min"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours} hr {minutes} min"


def _clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    period = "PM" if moment.hour >= 12 else "AM"
    return f"{hour}:{moment.minute:02d} {period}"


def format_eta(duration_seconds: float, now: Optional[datetime] = None) -> str:
    """
    Format the arrival time for a remaining travel duration.

    Same local calendar day as now: "H:MM AM/PM". Any later day:
    "Tomorrow at H:MM AM/PM" (arrivals more than a day out are not
    distinguished).

    Args:
        duration_seconds: Remaining travel time
        now: Reference wall-clock time (defaults to local now)
    """
    now = now or datetime.now()
    arrival = now + timedelta(seconds=duration_seconds)

    if arrival.date() == now.date():
        return _clock(arrival)
    return f"Tomorrow at {_clock(arrival)}"


def get_status_message(status: Union[TrackingStatus, str, None]) -> str:
    """Human-readable message for a tracking status."""
    try:
        return STATUS_MESSAGES[TrackingStatus(status)]
    except ValueError:
        return DEFAULT_STATUS_MESSAGE
