"""
Tests for the socket.io transport.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from delivery_tracking.core.config import Settings
from delivery_tracking.core.exceptions import TransportError
from delivery_tracking.services.realtime.transport import SocketIOTransport


@pytest.fixture
def transport():
    """Create transport with a mocked socket.io client."""
    transport = SocketIOTransport("http://backend.test", reconnection_attempts=5)
    transport.sio = MagicMock()
    transport.sio.connect = AsyncMock()
    transport.sio.disconnect = AsyncMock()
    transport.sio.emit = AsyncMock()
    return transport


class TestSocketIOTransport:
    """Tests for SocketIOTransport."""

    def test_reconnection_configured(self):
        transport = SocketIOTransport(
            "http://backend.test",
            reconnection_attempts=3,
            reconnection_delay=2.0,
            reconnection_delay_max=10.0,
        )

        assert transport.sio.reconnection is True
        assert transport.sio.reconnection_attempts == 3
        assert transport.sio.reconnection_delay == 2.0
        assert transport.sio.reconnection_delay_max == 10.0
        assert transport.connected is False

    def test_from_settings(self):
        settings = Settings(_env_file=None, API_URL="https://shop.example.com/api/v1", SOCKET_PATH="ws")

        transport = SocketIOTransport.from_settings(settings)

        assert transport.url == "https://shop.example.com"
        assert transport.path == "ws"

    @pytest.mark.asyncio
    async def test_connect(self, transport):
        await transport.connect()

        transport.sio.connect.assert_awaited_once_with(
            "http://backend.test", socketio_path="socket.io", retry=True
        )

    @pytest.mark.asyncio
    async def test_connect_failure(self, transport):
        transport.sio.connect.side_effect = SocketConnectionError("refused")

        with pytest.raises(TransportError) as exc_info:
            await transport.connect()

        assert exc_info.value.details == {"url": "http://backend.test"}

    @pytest.mark.asyncio
    async def test_emit_flushed_on_disconnect(self, transport):
        """Test pending emits are delivered before disconnecting."""
        transport.emit("leave-order-tracking", "order-1")

        await transport.disconnect()

        transport.sio.emit.assert_awaited_once_with("leave-order-tracking", "order-1")
        transport.sio.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_emit_failure_is_logged(self, transport):
        transport.sio.emit.side_effect = SocketIOError("not connected")

        transport.emit("join-order-tracking", "order-1")
        await transport.disconnect()

        transport.sio.disconnect.assert_awaited_once()

    def test_on_registers_handler(self, transport):
        handler = MagicMock()
        transport.on("order-tracking-update", handler)
        transport.sio.on.assert_called_once_with("order-tracking-update", handler)
