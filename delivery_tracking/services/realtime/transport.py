"""
Real-time transport for tracking rooms.

RealtimeTransport is the seam the subscription hub talks to. The
production implementation wraps python-socketio's asyncio client, which
owns reconnection and backoff. Room membership does not survive a
reconnect, so the hub re-joins on every connect event.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from delivery_tracking.core.exceptions import TransportError

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class RealtimeTransport(ABC):
    """Named-event pub/sub connection with server-side rooms."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True while the connection is up."""

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        """Register a handler for an inbound event (including connect/disconnect)."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. Raises TransportError when it cannot."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection."""

    @abstractmethod
    def emit(self, event: str, data: Any) -> None:
        """Send an event without waiting for delivery."""


class SocketIOTransport(RealtimeTransport):
    """
    socket.io client transport.

    Emits are fire-and-forget: each one runs as a task on the running loop.
    Pending tasks are kept referenced until done and are flushed on
    disconnect.
    """

    def __init__(
        self,
        url: str,
        path: str = "socket.io",
        reconnection_attempts: int = 0,
        reconnection_delay: float = 1.0,
        reconnection_delay_max: float = 5.0,
    ):
        """
        Initialize socket.io transport.

        Args:
            url: Server URL (scheme and host)
            path: socket.io endpoint path
            reconnection_attempts: Reconnect attempts (0 = unlimited)
            reconnection_delay: Initial reconnect delay in seconds
            reconnection_delay_max: Maximum reconnect delay in seconds
        """
        self.url = url
        self.path = path
        self.sio = socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=reconnection_attempts,
            reconnection_delay=reconnection_delay,
            reconnection_delay_max=reconnection_delay_max,
        )
        self._pending: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings) -> "SocketIOTransport":
        return cls(
            url=settings.socket_url,
            path=settings.SOCKET_PATH,
            reconnection_attempts=settings.SOCKET_RECONNECTION_ATTEMPTS,
            reconnection_delay=settings.SOCKET_RECONNECTION_DELAY,
            reconnection_delay_max=settings.SOCKET_RECONNECTION_DELAY_MAX,
        )

    @property
    def connected(self) -> bool:
        return self.sio.connected

    def on(self, event: str, handler: EventHandler) -> None:
        self.sio.on(event, handler)

    async def connect(self) -> None:
        logger.info(f"Connecting to tracking socket at {self.url}")
        try:
            await self.sio.connect(
                self.url,
                socketio_path=self.path,
                retry=True,
            )
        except SocketConnectionError as e:
            raise TransportError(
                message=f"Could not connect to {self.url}: {e}",
                details={"url": self.url},
            ) from e

    async def disconnect(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self.sio.disconnect()
        logger.info("Tracking socket disconnected")

    def emit(self, event: str, data: Any) -> None:
        task = asyncio.get_running_loop().create_task(self._emit(event, data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _emit(self, event: str, data: Any) -> None:
        try:
            await self.sio.emit(event, data)
        except SocketIOError as e:
            logger.warning(f"Failed to emit '{event}' ({data!r}): {e}")

