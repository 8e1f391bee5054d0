"""
Tracking subscription hub.

Handles:
- One shared real-time connection per hub instance, opened lazily
- Per-order listener lists multiplexed over socket.io rooms
- Room re-join after every reconnect
- Pull snapshots and best-effort route resolution
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from delivery_tracking.core.config import Settings, get_settings
from delivery_tracking.core.exceptions import (
    ApiRequestError,
    DirectionsError,
    TrackingFetchError,
)
from delivery_tracking.core.http import ApiClient, TokenProvider, unwrap_data
from delivery_tracking.core.logging import order_id_var
from delivery_tracking.core.metrics import (
    track_external_request,
    track_listener_error,
    track_tracking_event,
    update_connection_state,
    update_subscription_count,
)
from delivery_tracking.schemas.tracking import Coordinate, OrderTrackingSnapshot
from delivery_tracking.services.geo.formatting import format_distance, format_eta
from delivery_tracking.services.geo.matrix_cache import create_matrix_cache
from delivery_tracking.services.geo.route_service import GeoRouteService
from delivery_tracking.services.realtime.transport import (
    RealtimeTransport,
    SocketIOTransport,
)

logger = logging.getLogger(__name__)

JOIN_EVENT = "join-order-tracking"
LEAVE_EVENT = "leave-order-tracking"
UPDATE_EVENT = "order-tracking-update"

Listener = Callable[[OrderTrackingSnapshot], None]
TransportFactory = Callable[[], RealtimeTransport]


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DEGRADED = "degraded"
    CLOSED = "closed"


@dataclass
class RouteSummary:
    """Renderable route for an order; empty when tracking has not started."""
    route: List[Coordinate] = field(default_factory=list)
    distance: Optional[str] = None
    eta: Optional[str] = None
    source: str = "none"  # encoded, directions, none


@dataclass
class OrderDirections:
    """Route between courier and destination with raw leg measurements."""
    route: List[Coordinate]
    distance_meters: float
    duration_seconds: float


class TrackingSubscriptionHub:
    """
    Multiplexes per-order tracking subscriptions over one shared connection.

    All subscription bookkeeping runs on the event loop thread, so no
    locking is needed. Dispatch iterates a copy of each listener list,
    which lets a listener unsubscribe itself mid-dispatch.
    """

    def __init__(
        self,
        api_client: ApiClient,
        geo_service: GeoRouteService,
        transport_factory: Optional[TransportFactory] = None,
        settings: Optional[Settings] = None,
    ):
        self.api = api_client
        self.geo = geo_service
        self.settings = settings or get_settings()
        self.transport_factory = transport_factory or (
            lambda: SocketIOTransport.from_settings(self.settings)
        )

        # listeners: dict[order_id, list[Listener]]
        self.listeners: Dict[str, List[Listener]] = {}

        self._transport: Optional[RealtimeTransport] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._state = ConnectionState.UNINITIALIZED
        # Bumped by shutdown() so stale unsubscribe closures become no-ops
        self._generation = 0

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.debug(f"Tracking connection {self._state.value} -> {state.value}")
        self._state = state
        update_connection_state(state.value, [s.value for s in ConnectionState])

    def initialize(self) -> None:
        """
        Open the shared connection on first call; later calls are no-ops.

        Must be called from a running event loop. The connection attempt
        runs as a background task.
        """
        if self._transport is not None:
            return

        loop = asyncio.get_running_loop()
        transport = self.transport_factory()
        transport.on("connect", self._on_connect)
        transport.on("disconnect", self._on_disconnect)
        transport.on(UPDATE_EVENT, self._on_tracking_update)

        self._transport = transport
        self._set_state(ConnectionState.CONNECTING)
        self._connect_task = loop.create_task(self._connect(transport))

    async def _connect(self, transport: RealtimeTransport) -> None:
        try:
            await transport.connect()
        except Exception as e:
            logger.error(f"Tracking connection failed: {e}")
            if transport is self._transport:
                self._set_state(ConnectionState.DEGRADED)

    def _on_connect(self) -> None:
        if self._transport is None:
            return

        self._set_state(ConnectionState.CONNECTED)
        order_ids = list(self.listeners)
        logger.info(f"Tracking socket connected, joining {len(order_ids)} rooms")
        for order_id in order_ids:
            self._transport.emit(JOIN_EVENT, order_id)

    def _is_live(self) -> bool:
        # The connect handler fires before the socket.io client reports
        # connected, so room traffic follows the hub state instead.
        return self._transport is not None and self._state is ConnectionState.CONNECTED

    def _on_disconnect(self, *args) -> None:
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            logger.warning("Tracking socket disconnected, waiting for reconnect")
            self._set_state(ConnectionState.DEGRADED)

    async def shutdown(self) -> None:
        """
        Leave every room, close the connection and drop all listeners.

        A later subscribe() opens a fresh connection.
        """
        transport = self._transport
        was_live = self._is_live()
        self._transport = None
        self._generation += 1
        self._set_state(ConnectionState.CLOSED)

        if transport is not None and was_live:
            for order_id in list(self.listeners):
                transport.emit(LEAVE_EVENT, order_id)

        self.listeners.clear()
        update_subscription_count(0)

        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
            await asyncio.gather(self._connect_task, return_exceptions=True)
        self._connect_task = None

        if transport is not None:
            try:
                await transport.disconnect()
            except Exception as e:
                logger.warning(f"Error closing tracking socket: {e}")
        logger.info("Tracking hub shut down")

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, order_id: str, listener: Listener) -> Callable[[], None]:
        """
        Register listener for tracking updates of one order.

        The room join is sent now when connected, otherwise by the connect
        handler. Returns an idempotent unsubscribe function.
        """
        self.initialize()

        if self._is_live():
            self._transport.emit(JOIN_EVENT, order_id)

        if order_id not in self.listeners:
            self.listeners[order_id] = []
        self.listeners[order_id].append(listener)
        update_subscription_count(self._total_listeners())
        logger.debug(f"Subscribed listener to order {order_id}")

        generation = self._generation
        unsubscribed = False

        def unsubscribe() -> None:
            nonlocal unsubscribed
            if unsubscribed:
                return
            unsubscribed = True
            if generation == self._generation:
                self._remove_listener(order_id, listener)

        return unsubscribe

    def _remove_listener(self, order_id: str, listener: Listener) -> None:
        listeners = self.listeners.get(order_id)
        if not listeners or listener not in listeners:
            return

        listeners.remove(listener)
        if not listeners:
            del self.listeners[order_id]
            if self._is_live():
                self._transport.emit(LEAVE_EVENT, order_id)
            logger.debug(f"Left tracking room for order {order_id}")
        update_subscription_count(self._total_listeners())

    def _total_listeners(self) -> int:
        return sum(len(listeners) for listeners in self.listeners.values())

    def listener_count(self, order_id: str) -> int:
        return len(self.listeners.get(order_id, []))

    @property
    def subscribed_orders(self) -> List[str]:
        return list(self.listeners)

    def _on_tracking_update(self, payload) -> None:
        """Validate an inbound snapshot and fan it out to that order's listeners."""
        try:
            snapshot = OrderTrackingSnapshot.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Dropping invalid tracking update ({e.error_count()} errors): {e}")
            track_tracking_event("invalid_payload")
            return

        listeners = self.listeners.get(snapshot.id)
        if not listeners:
            logger.debug(f"No listeners for order {snapshot.id}, dropping update")
            track_tracking_event("dropped_unsubscribed")
            return

        token = order_id_var.set(snapshot.id)
        try:
            for listener in list(listeners):
                try:
                    listener(snapshot)
                except Exception as e:
                    logger.error(f"Tracking listener failed: {e}", exc_info=True)
                    track_listener_error()
        finally:
            order_id_var.reset(token)

        track_tracking_event("dispatched")

    # ------------------------------------------------------------------
    # Pull path
    # ------------------------------------------------------------------

    @track_external_request("backend", "tracking_snapshot")
    async def fetch_snapshot(self, order_id: str) -> OrderTrackingSnapshot:
        """
        Fetch the current tracking snapshot of an order.

        Raises:
            TrackingFetchError: If the request fails or the payload is invalid
        """
        try:
            payload = await self.api.get(f"/orders/{order_id}/tracking")
            return OrderTrackingSnapshot.model_validate(unwrap_data(payload))
        except (ApiRequestError, ValidationError) as e:
            logger.error(f"Error getting order tracking for {order_id}: {e}")
            raise TrackingFetchError(order_id, cause=e) from e

    async def get_order_directions(self, snapshot: OrderTrackingSnapshot) -> OrderDirections:
        """
        Get directions from the courier to the delivery address.

        Raises:
            DirectionsError: If either endpoint is unknown, the request fails
                or no route exists
        """
        origin = snapshot.current_coordinate
        destination = snapshot.destination_coordinate
        if origin is None or destination is None:
            raise DirectionsError(
                "Order has no current location or destination",
                details={"order_id": snapshot.id},
            )

        result = await self.geo.get_directions(origin, destination)
        if not result.routes or not result.routes[0].legs:
            raise DirectionsError(
                f"No route found ({result.status or 'empty response'})",
                details={"order_id": snapshot.id},
            )

        route = result.routes[0]
        leg = route.legs[0]
        points = route.overview_polyline.points if route.overview_polyline else ""
        return OrderDirections(
            route=self.geo.decode_polyline(points),
            distance_meters=leg.distance.value,
            duration_seconds=leg.duration.value,
        )

    async def resolve_route(self, snapshot: OrderTrackingSnapshot) -> RouteSummary:
        """
        Build the renderable route for a snapshot. Never raises.

        Prefers the snapshot's own encoded route; falls back to directions
        between the courier and the destination; otherwise returns an empty
        summary.
        """
        try:
            return await self._resolve_route(snapshot)
        except Exception as e:
            logger.error(
                f"Route resolution failed for order {getattr(snapshot, 'id', None)}: {e}"
            )
            return RouteSummary()

    async def _resolve_route(self, snapshot: OrderTrackingSnapshot) -> RouteSummary:
        tracking = snapshot.tracking

        if tracking is not None and tracking.encoded_route:
            distance = None
            if tracking.distance_meters is not None:
                distance = format_distance(tracking.distance_meters)
            return RouteSummary(
                route=self.geo.decode_polyline(tracking.encoded_route),
                distance=distance,
                eta=tracking.eta,
                source="encoded",
            )

        if snapshot.current_coordinate and snapshot.destination_coordinate:
            directions = await self.get_order_directions(snapshot)
            return RouteSummary(
                route=directions.route,
                distance=format_distance(directions.distance_meters),
                eta=format_eta(directions.duration_seconds),
                source="directions",
            )

        return RouteSummary()


def create_tracking_hub(
    token_provider: Optional[TokenProvider] = None,
    settings: Optional[Settings] = None,
) -> TrackingSubscriptionHub:
    """
    Build a hub with the production HTTP client, geo service and transport.

    Raises:
        ConfigurationException: If the settings are unusable
    """
    settings = settings or get_settings()
    settings.validate_settings()
    api_client = ApiClient(base_url=settings.API_URL, token_provider=token_provider)
    geo_service = GeoRouteService(
        api_client,
        batch_size=settings.DISTANCE_MATRIX_BATCH_SIZE,
        max_concurrent=settings.DISTANCE_MATRIX_MAX_CONCURRENT,
        cache=create_matrix_cache(settings),
    )
    return TrackingSubscriptionHub(api_client, geo_service, settings=settings)
