"""
Pytest configuration and fixtures.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from delivery_tracking.core.exceptions import TransportError
from delivery_tracking.core.http import ApiClient
from delivery_tracking.services.geo.route_service import GeoRouteService
from delivery_tracking.services.realtime.hub import UPDATE_EVENT, TrackingSubscriptionHub
from delivery_tracking.services.realtime.transport import RealtimeTransport


class FakeTransport(RealtimeTransport):
    """In-memory transport recording emits and firing events on demand."""

    def __init__(self, auto_connect: bool = True):
        self.auto_connect = auto_connect
        self.handlers = {}
        self.emitted = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def on(self, event, handler):
        self.handlers[event] = handler

    async def connect(self):
        self.connect_calls += 1
        if self.auto_connect:
            self.simulate_connect()

    async def disconnect(self):
        self.disconnect_calls += 1
        if self._connected:
            self.simulate_disconnect()

    def emit(self, event, data):
        self.emitted.append((event, data))

    # Test helpers

    def simulate_connect(self):
        # python-socketio runs the connect handler before it reports connected
        self.handlers["connect"]()
        self._connected = True

    def simulate_disconnect(self):
        self._connected = False
        self.handlers["disconnect"]()

    def deliver(self, payload):
        self.handlers[UPDATE_EVENT](payload)

    def emits(self, event):
        return [data for name, data in self.emitted if name == event]


class FailingTransport(FakeTransport):
    """Transport whose connection attempt always fails."""

    async def connect(self):
        self.connect_calls += 1
        raise TransportError("Connection refused")


# Courier in central Bangalore, destination in Koramangala
COURIER_LOCATION = {"type": "Point", "coordinates": [77.5946, 12.9716]}
DESTINATION_LOCATION = {"type": "Point", "coordinates": [77.6101, 12.9352]}


@pytest.fixture
def snapshot_payload():
    """Factory for wire-shaped tracking snapshots (legacy `_id` and `shippingAddress` names)."""

    def make(order_id="order-1", tracking=None, location=DESTINATION_LOCATION):
        if tracking is None:
            tracking = {
                "currentLocation": COURIER_LOCATION,
                "status": "in_transit",
                "eta": "15 mins",
            }
        payload = {
            "_id": order_id,
            "orderNumber": f"ORD-{order_id}",
            "status": "shipped",
            "tracking": tracking,
            "shippingAddress": {
                "street": "80 Feet Road",
                "district": "Bangalore Urban",
                "state": "Karnataka",
                "pincode": "560034",
            },
        }
        if location is not None:
            payload["shippingAddress"]["location"] = location
        return payload

    return make


@pytest.fixture
def mock_api_client():
    """Create mock backend API client."""
    client = MagicMock(spec=ApiClient)
    client.get = AsyncMock()
    client.post = AsyncMock()
    return client


@pytest.fixture
def geo_service(mock_api_client):
    """Create GeoRouteService over the mock API client."""
    return GeoRouteService(mock_api_client, batch_size=25, max_concurrent=4)


@pytest.fixture
def transports():
    """Every FakeTransport created by the hub, in creation order."""
    return []


@pytest.fixture
def hub(mock_api_client, geo_service, transports):
    """Create hub whose transports are FakeTransports."""

    def factory():
        transport = FakeTransport()
        transports.append(transport)
        return transport

    return TrackingSubscriptionHub(
        mock_api_client,
        geo_service,
        transport_factory=factory,
    )


@pytest.fixture
def failing_hub(mock_api_client, geo_service):
    """Create hub whose connection attempts fail."""
    return TrackingSubscriptionHub(
        mock_api_client,
        geo_service,
        transport_factory=FailingTransport,
    )
