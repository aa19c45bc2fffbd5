"""
Albatross WebSocket Subscription Client

One persistent WebSocket per client instance, shared by every subscription:
  - subscribe envelopes correlated to their acknowledgement by request id
  - pushes routed by the server-assigned subscription id
  - per-subscription filter and one-shot delivery
  - one terminal delivery per open subscription when the transport dies

Connection management:
  - Opening serialized by an asyncio lock
  - One reader task per connection, dispatching pushes in arrival order
  - Optional teardown when the last subscription closes
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple
from urllib.parse import urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..constants import (
    DEFAULT_OPEN_TIMEOUT,
    DEFAULT_PING_INTERVAL,
    DEFAULT_SUBSCRIBE_TIMEOUT,
    WS_PATH,
)
from ..exceptions import TransportNotReadyError
from ..logger import get_logger
from .messages import (
    RPCError,
    RPCErrorCode,
    RPCRequest,
    StreamMessage,
    SubscriptionError,
    SubscriptionState,
    TraceContext,
    strip_query,
)

logger = get_logger(__name__)

StreamCallback = Callable[[StreamMessage], Any]
FilterFn = Callable[[Any], bool]
Connector = Callable[..., Awaitable[Any]]


# ---------------------------------------------------------------------------
# Options and helpers
# ---------------------------------------------------------------------------

@dataclass
class StreamOptions:
    """Per-subscription options. ``timeout=None`` waits for the ack forever."""
    once: bool = False
    filter: Optional[FilterFn] = None
    timeout: Optional[float] = DEFAULT_SUBSCRIBE_TIMEOUT
    with_metadata: bool = False


def to_ws_url(url: str, path: str = WS_PATH) -> str:
    """Map ``http(s)://host`` to ``ws(s)://host/ws``."""
    parts = urlsplit(str(url))
    scheme = {"https": "wss", "wss": "wss"}.get(parts.scheme, "ws")
    return urlunsplit((scheme, parts.netloc, path, parts.query, ""))


async def connect_websocket(
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    open_timeout: Optional[float] = DEFAULT_OPEN_TIMEOUT,
    ping_interval: Optional[float] = DEFAULT_PING_INTERVAL,
):
    """Default connector: returns once the socket is open."""
    return await websockets.connect(
        url,
        additional_headers=dict(headers) if headers else None,
        open_timeout=open_timeout,
        ping_interval=ping_interval,
    )


# ---------------------------------------------------------------------------
# Subscription handle
# ---------------------------------------------------------------------------

class Subscription:
    """Handle returned by `WebSocketClient.subscribe`."""

    def __init__(
        self,
        channel: "WebSocketClient",
        request: RPCRequest,
        context: TraceContext,
        options: StreamOptions,
        callback: Optional[StreamCallback] = None,
    ):
        self._channel = channel
        self.request = request
        self.context = context
        self.options = options
        self._callback = callback
        self._subscription_id: Any = None
        self._state = SubscriptionState.PENDING
        self.created_at = time.time()

    def __repr__(self) -> str:
        return (
            f"Subscription(method={self.request.method!r}, "
            f"id={self._subscription_id!r}, state={self._state.value})"
        )

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SubscriptionState.OPEN

    def get_subscription_id(self) -> Any:
        """Server-assigned id, or ``None`` while the ack is pending."""
        return self._subscription_id

    def is_connection_open(self) -> bool:
        return self._channel.is_connected

    def next(self, callback: StreamCallback) -> "Subscription":
        """Replace the delivery callback. Takes effect for the next push."""
        with self._channel._lock:
            self._callback = callback
        return self

    def close(self) -> None:
        """Stop deliveries. Idempotent; no unsubscribe request is sent."""
        self._channel._deregister(self)


# ---------------------------------------------------------------------------
# Subscription channel
# ---------------------------------------------------------------------------

class WebSocketClient:
    """
    Subscription channel over one shared WebSocket connection.

    The pending-ack and routing tables are guarded by a `threading.Lock`;
    every update to them is a single critical section.
    """

    def __init__(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        connector: Optional[Connector] = None,
        path: str = WS_PATH,
        open_timeout: Optional[float] = DEFAULT_OPEN_TIMEOUT,
        ping_interval: Optional[float] = DEFAULT_PING_INTERVAL,
        close_when_idle: bool = False,
    ):
        self.url = to_ws_url(url, path)
        self.headers: Dict[str, str] = dict(headers or {})
        self.open_timeout = open_timeout
        self.ping_interval = ping_interval
        self.close_when_idle = close_when_idle
        self._connector = connector or connect_websocket

        self._connection: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._connect_lock = asyncio.Lock()
        self._teardowns: Set[asyncio.Task] = set()

        self._ids = itertools.count()
        self._id_lock = threading.Lock()
        self._lock = threading.Lock()

        # request id -> (subscription, ack future)
        self._pending: Dict[int, Tuple[Subscription, asyncio.Future]] = {}
        # subscription id -> subscription
        self._routes: Dict[Any, Subscription] = {}

        # Stats
        self.total_connections_opened: int = 0
        self.total_subscriptions_created: int = 0
        self.total_pushes_received: int = 0
        self.total_pushes_delivered: int = 0
        self.total_pushes_dropped: int = 0

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    # -- Connection lifecycle -----------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> Any:
        """
        Open the shared connection if needed and start its reader task.

        Raises:
            SubscriptionError: if the connection cannot be opened
        """
        async with self._connect_lock:
            if self._connection is not None:
                return self._connection
            try:
                connection = await self._connector(
                    self.url,
                    headers=self.headers,
                    open_timeout=self.open_timeout,
                    ping_interval=self.ping_interval,
                )
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                logger.warning("WS connect failed: %s (%s)", self.url, exc)
                raise SubscriptionError(
                    RPCErrorCode.SERVICE_UNAVAILABLE, f"Could not connect to {self.context_url}: {exc}"
                ) from exc

            self._loop = asyncio.get_running_loop()
            self._connection = connection
            self._reader = self._loop.create_task(self._read_loop(connection))
            self.total_connections_opened += 1
            logger.info("WS connected: %s", self.context_url)
            return connection

    @property
    def context_url(self) -> str:
        return strip_query(self.url)

    async def send(self, payload: str) -> None:
        """
        Send one text frame.

        Raises:
            TransportNotReadyError: if no open connection exists
        """
        connection = self._connection
        if connection is None:
            raise TransportNotReadyError("WebSocket connection is not open")
        try:
            await connection.send(payload)
        except (ConnectionClosed, OSError) as exc:
            raise TransportNotReadyError(f"WebSocket send failed: {exc}") from exc

    async def disconnect(self) -> None:
        """Close the transport; open subscriptions get a terminal delivery."""
        for task in list(self._teardowns):
            await task
        connection = self._connection
        if connection is None:
            return
        reader = self._reader
        await connection.close()
        if reader is not None and reader is not asyncio.current_task():
            await reader

    async def close_all(self) -> None:
        """Close every subscription, then the transport."""
        with self._lock:
            subscriptions = list(self._routes.values())
            self._routes.clear()
            for subscription in subscriptions:
                subscription._state = SubscriptionState.CLOSED
        logger.debug("WS close_all: closed %d subscription(s)", len(subscriptions))
        await self.disconnect()

    # -- Subscriptions ------------------------------------------------------

    async def subscribe(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        options: Optional[StreamOptions] = None,
        callback: Optional[StreamCallback] = None,
    ) -> Subscription:
        """
        Open a subscription and wait for its acknowledgement.

        Args:
            method: Subscription method (e.g. "subscribeForHeadBlock")
            params: Positional parameters
            options: StreamOptions; defaults apply when omitted
            callback: Delivery callback; may also be set later with `next()`

        Returns:
            Subscription in the OPEN state

        Raises:
            SubscriptionError: on error ack, ack timeout, connection failure
                or transport closure during setup
            TransportNotReadyError: if the transport went away before sending
        """
        options = options or StreamOptions()
        request = RPCRequest.build(method, params, self._next_id())
        try:
            payload = request.to_json()
        except (TypeError, ValueError) as exc:
            raise SubscriptionError(
                RPCErrorCode.INVALID_PARAMS, f"Params are not JSON serializable: {exc}"
            ) from exc
        await self.connect()

        context = TraceContext.capture(request, self.url, self.headers)
        subscription = Subscription(self, request, context, options, callback)

        ack: asyncio.Future = asyncio.get_running_loop().create_future()
        with self._lock:
            self._pending[request.id] = (subscription, ack)

        timed_out = False
        try:
            await self.send(payload)
            await asyncio.wait_for(ack, timeout=options.timeout)
        except asyncio.TimeoutError:
            timed_out = True
        finally:
            with self._lock:
                self._pending.pop(request.id, None)
                if subscription._state is SubscriptionState.PENDING:
                    subscription._state = SubscriptionState.CLOSED

        if timed_out:
            # The ack may have raced the timeout and registered a route
            subscription.close()
            logger.warning("WS subscribe TIMEOUT: method=%s id=%s", method, request.id)
            raise SubscriptionError(
                RPCErrorCode.TIMEOUT,
                f"No acknowledgement for {method} within {options.timeout}s",
            )

        self.total_subscriptions_created += 1
        logger.debug(
            "WS subscribe: method=%s id=%s sub=%s",
            method, request.id, subscription.get_subscription_id(),
        )
        return subscription

    def _deregister(self, subscription: Subscription) -> None:
        with self._lock:
            sub_id = subscription._subscription_id
            if sub_id is not None and self._routes.get(sub_id) is subscription:
                del self._routes[sub_id]
            subscription._state = SubscriptionState.CLOSED
            idle = not self._routes and not self._pending
        self._maybe_teardown(idle)

    def _maybe_teardown(self, idle: bool) -> None:
        if not (idle and self.close_when_idle and self._connection is not None):
            return
        if self._loop is None or self._loop.is_closed():
            return
        with self._lock:
            if self._routes or self._pending:
                return
            # Detached first so the next subscribe opens a fresh connection
            connection, self._connection = self._connection, None
            self._reader = None
        if connection is None:
            return
        logger.debug("WS idle: closing %s", self.context_url)
        task = self._loop.create_task(self._close_quietly(connection))
        self._teardowns.add(task)
        task.add_done_callback(self._teardowns.discard)

    async def _close_quietly(self, connection: Any) -> None:
        try:
            await connection.close()
        except (ConnectionClosed, OSError) as exc:
            logger.debug("WS close failed: %s (%s)", self.context_url, exc)

    # -- Diagnostics --------------------------------------------------------

    def pending_subscriptions(self) -> List[int]:
        """Request ids still waiting for their acknowledgement."""
        with self._lock:
            return list(self._pending)

    def active_subscriptions(self) -> List[Subscription]:
        with self._lock:
            return list(self._routes.values())

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            pending = len(self._pending)
            active = len(self._routes)
        return {
            "url": self.context_url,
            "connected": self.is_connected,
            "pending_subscriptions": pending,
            "active_subscriptions": active,
            "total_connections_opened": self.total_connections_opened,
            "total_subscriptions_created": self.total_subscriptions_created,
            "total_pushes_received": self.total_pushes_received,
            "total_pushes_delivered": self.total_pushes_delivered,
            "total_pushes_dropped": self.total_pushes_dropped,
        }

    # -- Reader -------------------------------------------------------------

    async def _read_loop(self, connection: Any) -> None:
        reason = "Connection closed"
        crashed = False
        try:
            async for raw in connection:
                await self._handle_frame(raw)
        except ConnectionClosed as exc:
            reason = f"Connection closed: {exc}"
            logger.warning("WS connection lost: %s (%s)", self.context_url, exc)
        except OSError as exc:
            reason = f"Connection error: {exc}"
            logger.warning("WS connection error: %s (%s)", self.context_url, exc)
        except Exception as exc:
            crashed = True
            reason = f"Reader failed: {exc}"
            logger.exception("WS reader failed: %s", self.context_url)
        finally:
            with self._lock:
                current = self._connection is connection
                if current:
                    self._connection = None
                    self._reader = None
            if crashed:
                await self._close_quietly(connection)
            # A connection detached by the idle teardown has nothing left to fail
            if current:
                await self._fail_all(RPCErrorCode.CONNECTION_CLOSED, reason)

    async def _handle_frame(self, raw: Any) -> None:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError):
            logger.warning("WS dropped malformed frame: %r", raw[:200] if isinstance(raw, (str, bytes)) else raw)
            return
        if not isinstance(message, dict):
            logger.debug("WS dropped non-object frame")
            return

        if "method" in message and isinstance(message.get("params"), dict):
            await self._dispatch_push(message["params"])
        elif "id" in message:
            self._resolve_ack(message)
        else:
            logger.debug("WS dropped unrecognized frame")

    def _resolve_ack(self, message: Dict[str, Any]) -> None:
        request_id = message.get("id")
        if not _is_key(request_id):
            logger.debug("WS dropped ack with unusable id: %r", request_id)
            return
        with self._lock:
            entry = self._pending.pop(request_id, None)
            if entry is None:
                logger.debug("WS ack for unknown request id=%s", request_id)
                return
            subscription, ack = entry

            error: Optional[RPCError] = None
            if message.get("error") is not None:
                error = RPCError.from_dict(message["error"])
            else:
                sub_id = _ack_subscription_id(message.get("result"))
                if sub_id is None:
                    error = RPCError(
                        RPCErrorCode.UNEXPECTED_FORMAT,
                        f"Unexpected subscription ack: {json.dumps(message.get('result'))}",
                    )
                elif subscription._state is SubscriptionState.PENDING:
                    subscription._subscription_id = sub_id
                    subscription._state = SubscriptionState.OPEN
                    self._routes[sub_id] = subscription

        if ack.done():
            return
        if error is not None:
            subscription._state = SubscriptionState.CLOSED
            ack.set_exception(SubscriptionError(error.code, error.message, error.data))
        else:
            ack.set_result(subscription.get_subscription_id())

    async def _dispatch_push(self, params: Dict[str, Any]) -> None:
        self.total_pushes_received += 1
        sub_id = params.get("subscription")
        if not _is_key(sub_id):
            self.total_pushes_dropped += 1
            logger.debug("WS push dropped: unusable subscription %r", sub_id)
            return
        with self._lock:
            subscription = self._routes.get(sub_id)
            callback = subscription._callback if subscription is not None else None

        if subscription is None or callback is None:
            self.total_pushes_dropped += 1
            logger.debug("WS push dropped: sub=%s", sub_id)
            return

        options = subscription.options
        message = StreamMessage.from_push(params, options.with_metadata)

        if message.ok and options.filter is not None:
            try:
                accepted = options.filter(message.data)
            except Exception as exc:
                logger.warning("WS filter raised for sub=%s: %s", sub_id, exc)
                accepted = False
            if not accepted:
                return

        with self._lock:
            if self._routes.get(sub_id) is not subscription:
                return
            if options.once:
                del self._routes[sub_id]
                subscription._state = SubscriptionState.CLOSED
            callback = subscription._callback
            idle = not self._routes and not self._pending

        await self._deliver(subscription, callback, message)
        if options.once:
            self._maybe_teardown(idle)

    async def _deliver(self, subscription: Subscription, callback: Optional[StreamCallback],
                       message: StreamMessage) -> None:
        if callback is None:
            return
        try:
            result = callback(message)
            if inspect.isawaitable(result):
                await result
            self.total_pushes_delivered += 1
        except Exception:
            logger.exception("WS callback failed for %r", subscription)

    async def _fail_all(self, code: int, message: str) -> None:
        """Fail pending acks and give every open subscription one terminal delivery."""
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
            subscriptions = list(self._routes.values())
            self._routes.clear()
            callbacks = []
            for subscription in subscriptions:
                subscription._state = SubscriptionState.CLOSED
                callbacks.append(subscription._callback)

        for subscription, ack in pending:
            subscription._state = SubscriptionState.CLOSED
            if not ack.done():
                ack.set_exception(SubscriptionError(code, message))

        if subscriptions:
            logger.info("WS closing %d open subscription(s): %s", len(subscriptions), message)
        for subscription, callback in zip(subscriptions, callbacks):
            await self._deliver(subscription, callback, StreamMessage.failure(code, message))


def _is_key(value: Any) -> bool:
    """Request and subscription ids are integers or strings."""
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def _ack_subscription_id(result: Any) -> Any:
    """Accepts a scalar id, ``{"subscriptionId": id}`` or ``{"data": id}``."""
    if _is_key(result):
        return result
    if isinstance(result, dict):
        for key in ("subscriptionId", "data"):
            value = result.get(key)
            if _is_key(value):
                return value
    return None
