"""
Realtime sub-package.

Contains real-time tracking services:
- Transport abstraction and socket.io client
- Subscription hub multiplexing order rooms
"""

from delivery_tracking.services.realtime.hub import (
    ConnectionState,
    OrderDirections,
    RouteSummary,
    TrackingSubscriptionHub,
    create_tracking_hub,
)
from delivery_tracking.services.realtime.transport import (
    RealtimeTransport,
    SocketIOTransport,
)

__all__ = [
    # Hub
    "TrackingSubscriptionHub",
    "ConnectionState",
    "RouteSummary",
    "OrderDirections",
    "create_tracking_hub",
    # Transport
    "RealtimeTransport",
    "SocketIOTransport",
]
