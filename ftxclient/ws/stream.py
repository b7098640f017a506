"""High-level streaming API.

``Stream`` opens one logical stream per ``subscribe_to_*`` call and returns a
``Subscription``, an async iterator over that stream's events:

    stream = Stream()
    async with await stream.subscribe_to_tickers("BTC/USD", "ETH/USD") as sub:
        async for event in sub:
            ...

Iteration ends when the stream ends: caller cancellation, ``close()``,
acknowledged ``unsubscribe()``, a normal server close, or exhausted
reconnects. ``Subscription.termination_error`` tells these apart.

Configuration is a frozen ``StreamConfig`` snapshot. Changes made with
``configure`` or the ``set_*`` helpers apply to connect attempts that start
afterwards, including reconnects of streams that are already running.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import threading
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from ..core.config import Credentials, Region, StreamConfig, get_ws_url
from ..core.enums import Channel
from ..core.exceptions import AuthRequiredError, StreamError
from ..models import WSRequest
from .channel import EventChannel
from .dispatcher import Dispatcher
from .registry import SubscriptionRegistry
from .supervisor import StreamState, StreamSupervisor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription(Generic[T]):
    """Caller-facing handle of one logical stream."""

    def __init__(
        self,
        supervisor: StreamSupervisor,
        events: EventChannel[T],
        dispatcher_task: asyncio.Task,
    ) -> None:
        self._supervisor = supervisor
        self._events = events
        self._dispatcher_task = dispatcher_task

    @property
    def state(self) -> StreamState:
        return self._supervisor.state

    @property
    def termination_error(self) -> StreamError | None:
        """Why the stream ended; ``None`` while running or after a graceful end."""
        return self._supervisor.termination_error

    @property
    def reconnects(self) -> int:
        return self._supervisor.reconnects

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._supervisor.registry

    @property
    def closed(self) -> bool:
        return self._events.closed and self._events.qsize() == 0

    async def unsubscribe(self) -> None:
        """Ask the server to drop every subscription of this stream.

        Iteration ends once all of them are acknowledged.
        """
        await self._supervisor.unsubscribe()

    async def close(self) -> None:
        """Close the connection and wait for every task of this stream to exit."""
        await self._supervisor.aclose()
        if not self._dispatcher_task.done():
            await asyncio.wait({self._dispatcher_task}, timeout=self._supervisor.close_grace)
        if not self._dispatcher_task.done():
            self._dispatcher_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._dispatcher_task

    async def wait_closed(self) -> None:
        await self._supervisor.wait_closed()
        with contextlib.suppress(asyncio.CancelledError):
            await self._dispatcher_task

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        return await self._events.__anext__()

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Subscription({self.registry!r}, state={self.state.value})"


class Stream:
    """Factory for logical streams against one deployment."""

    def __init__(
        self,
        config: StreamConfig | None = None,
        credentials: Credentials | None = None,
        region: Region = Region.COM,
        *,
        url: str | None = None,
    ) -> None:
        self._config = config or StreamConfig()
        self._config_lock = threading.Lock()
        self.credentials = credentials
        self.region = Region(region)
        self.url = url or get_ws_url(self.region)
        # Seconds to add to local time when signing; set from the server clock.
        self.server_time_offset = 0.0

    # ----------------------
    # Configuration
    # ----------------------
    @property
    def config(self) -> StreamConfig:
        with self._config_lock:
            return self._config

    def configure(self, **changes: Any) -> StreamConfig:
        """Replace fields of the current config; returns the new snapshot."""
        with self._config_lock:
            self._config = dataclasses.replace(self._config, **changes)
            return self._config

    def set_stream_timeout(self, seconds: float) -> None:
        self.configure(timeout=seconds)

    def set_reconnection_count(self, count: int) -> None:
        self.configure(reconnect_count=count)

    def set_reconnection_interval(self, seconds: float) -> None:
        self.configure(reconnect_interval=seconds)

    def set_debug_mode(self, enabled: bool) -> None:
        self.configure(debug=enabled)

    # ----------------------
    # Public channels
    # ----------------------
    async def subscribe_to_tickers(
        self, *symbols: str, cancel: asyncio.Event | None = None
    ) -> Subscription:
        """Best bid/offer and last price per market.

        Yields ``TickerEvent`` and ``NoticeEvent``.
        """
        return await self._serve(_symbol_requests(Channel.TICKER, symbols), cancel)

    async def subscribe_to_trades(
        self, *symbols: str, cancel: asyncio.Event | None = None
    ) -> Subscription:
        """Yields one ``TradeEvent`` per trade (batches are split in order) and ``NoticeEvent``."""
        return await self._serve(_symbol_requests(Channel.TRADES, symbols), cancel)

    async def subscribe_to_order_books(
        self, *symbols: str, cancel: asyncio.Event | None = None
    ) -> Subscription:
        """Order book snapshot (``partial``) followed by deltas (``update``).

        Yields ``OrderBookEvent`` and ``NoticeEvent``.
        """
        return await self._serve(_symbol_requests(Channel.ORDER_BOOK, symbols), cancel)

    async def subscribe_to_markets(self, cancel: asyncio.Event | None = None) -> Subscription:
        """Yields each ``Market`` of every markets frame, and ``NoticeEvent``."""
        return await self._serve([WSRequest(channel=Channel.MARKETS)], cancel)

    # ----------------------
    # Private channels
    # ----------------------
    async def subscribe_to_fills(self, cancel: asyncio.Event | None = None) -> Subscription:
        """Own fills; requires credentials. Yields ``FillEvent`` and ``NoticeEvent``."""
        return await self._serve([WSRequest(channel=Channel.FILLS)], cancel)

    async def subscribe_to_orders(self, cancel: asyncio.Event | None = None) -> Subscription:
        """Own order updates; requires credentials. Yields ``OrderEvent`` and ``NoticeEvent``."""
        return await self._serve([WSRequest(channel=Channel.ORDERS)], cancel)

    # ----------------------
    # Internals
    # ----------------------
    async def _serve(
        self, requests: Iterable[WSRequest], cancel: asyncio.Event | None
    ) -> Subscription:
        registry = SubscriptionRegistry(requests)
        if registry.is_private and self.credentials is None:
            raise AuthRequiredError("credentials is required")

        supervisor = StreamSupervisor(
            self.url,
            registry,
            lambda: self.config,
            credentials=self.credentials,
            cancel=cancel,
            time_offset=lambda: self.server_time_offset,
        )
        await supervisor.start()
        logger.info(f"streaming {registry!r} from {self.url}")

        conf = self.config
        sink: EventChannel[Any] = EventChannel(conf.queue_size)
        dispatcher = Dispatcher(supervisor.events, sink, registry, supervisor.stop_event)
        task = asyncio.create_task(dispatcher.run())
        return Subscription(supervisor, sink, task)

    def __repr__(self) -> str:
        return f"Stream(url={self.url}, authenticated={self.credentials is not None})"


def _symbol_requests(channel: Channel, symbols: Iterable[str]) -> list[WSRequest]:
    symbols = list(symbols)
    if not symbols:
        raise ValueError("symbols is missing")
    return [WSRequest(channel=channel, market=symbol) for symbol in symbols]
