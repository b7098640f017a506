"""Logical stream supervision: read loop, keepalive and reconnection.

One ``StreamSupervisor`` owns one logical stream. It runs two tasks:

- the read loop, sole reader of the current ``Connection``; it decodes frames
  into ``events`` and, on a transient read failure, reconnects and replays
  the registry before reading again;
- the keepalive loop, which pings every ``0.9 * timeout`` and watches the
  stop event. On stop it stops pinging, sends the close frame, waits at most
  ``close_grace`` for the read loop and cancels it if it has not exited.

The ``events`` channel is closed when the read loop exits, whatever the reason.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections.abc import Callable
from enum import Enum

from ..core.config import Credentials, StreamConfig
from ..core.enums import Channel, Operation, ResponseType
from ..core.exceptions import (
    DecodeError,
    DialFailedError,
    ReadFailedError,
    ReconnectExhaustedError,
    StreamClosedError,
    StreamError,
)
from ..models import DecodedEvent, Envelope
from .channel import EventChannel, race_stop, sleep_or_stop
from .decoder import decode_envelope
from .registry import SubscriptionRegistry
from .transport import Connection

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"
    FAILED = "failed"


def backoff_delay(conf: StreamConfig, attempt: int) -> float:
    """Delay before reconnect attempt ``attempt`` (0-based).

    ``reconnect_interval * 2**attempt``, optionally capped by
    ``max_reconnect_delay`` and spread by ``+/- jitter``.
    """
    delay = conf.reconnect_interval * (2**attempt)
    if conf.max_reconnect_delay is not None:
        delay = min(delay, conf.max_reconnect_delay)
    if conf.jitter:
        delay *= random.uniform(1 - conf.jitter, 1 + conf.jitter)
    return delay


class StreamSupervisor:
    """Keeps one logical stream alive across physical reconnects."""

    def __init__(
        self,
        url: str,
        registry: SubscriptionRegistry,
        config_source: Callable[[], StreamConfig],
        *,
        credentials: Credentials | None = None,
        cancel: asyncio.Event | None = None,
        time_offset: Callable[[], float] | None = None,
    ) -> None:
        self.url = url
        self.registry = registry
        self._config_source = config_source
        self._credentials = credentials
        self._time_offset = time_offset or (lambda: 0.0)
        self._cancel = cancel

        self.events: EventChannel[DecodedEvent] = EventChannel(config_source().queue_size)
        self.stop_event = asyncio.Event()
        self.termination_error: StreamError | None = None
        self.reconnects = 0

        self._state = StreamState.IDLE
        self._conn: Connection | None = None
        self._done = asyncio.Event()
        self._read_task: asyncio.Task | None = None
        self._keepalive_task: asyncio.Task | None = None
        self._cancel_link: asyncio.Task | None = None
        self._pending_unsubscribe: set[tuple[Channel, str | None]] = set()
        self._unsubscribing = False

    # ----------------------
    # Properties
    # ----------------------
    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def connection(self) -> Connection | None:
        return self._conn

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def close_grace(self) -> float:
        return self._config_source().close_grace

    # ----------------------
    # Lifecycle
    # ----------------------
    async def start(self) -> None:
        """Open the first connection and launch the read and keepalive tasks.

        Raises:
            DialFailedError: The initial connection failed; no tasks are started.
            AuthRequiredError: Private channels were requested without credentials.
        """
        if self._state != StreamState.IDLE:
            raise RuntimeError(f"stream already started (state={self._state.value})")
        self._state = StreamState.CONNECTING
        try:
            self._conn = await self._dial(self._config_source())
        except BaseException:
            self._state = StreamState.FAILED
            self.events.close()
            self._done.set()
            raise
        self._state = StreamState.CONNECTED

        if self._cancel is not None:
            self._cancel_link = asyncio.create_task(self._link_cancel(self._cancel))
        self._read_task = asyncio.create_task(self._read_loop())
        self._keepalive_task = asyncio.create_task(self._keepalive_loop())

    def stop(self) -> None:
        """Request shutdown; the keepalive task performs it."""
        self.stop_event.set()

    async def wait_closed(self) -> None:
        await self._done.wait()
        if self._keepalive_task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._keepalive_task

    async def aclose(self) -> None:
        """Stop and wait until every task of this stream has exited."""
        self.stop()
        if self._keepalive_task is None:
            return
        await self.wait_closed()

    async def unsubscribe(self) -> None:
        """Send unsubscribe frames for the whole registry.

        The stream ends gracefully once every request is acknowledged with an
        ``unsubscribed`` envelope.
        """
        conn = self._conn
        if conn is None or self.done or self._unsubscribing:
            return
        self._unsubscribing = True
        self._pending_unsubscribe = {r.key for r in self.registry.snapshot()}
        for request in self.registry.snapshot():
            await conn.send_request(request.with_op(Operation.UNSUBSCRIBE))
        logger.info(f"unsubscribe sent for {len(self._pending_unsubscribe)} subscription(s)")

    async def _link_cancel(self, cancel: asyncio.Event) -> None:
        await cancel.wait()
        self.stop_event.set()

    async def _dial(self, conf: StreamConfig) -> Connection:
        return await Connection.open(
            self.url,
            self.registry.snapshot(),
            config=conf,
            credentials=self._credentials,
            time_offset=self._time_offset(),
        )

    # ----------------------
    # Read loop
    # ----------------------
    async def _read_loop(self) -> None:
        try:
            while True:
                conn = self._conn
                try:
                    envelope = await conn.read_frame()
                except DecodeError as exc:
                    logger.warning(f"dropping undecodable frame: {exc}")
                    continue
                except StreamClosedError:
                    logger.info(f"connection to {self.url} closed normally")
                    break
                except ReadFailedError as exc:
                    if self.stop_event.is_set() or self._unsubscribing:
                        break
                    logger.warning(f"read failed on {self.url}: {exc}")
                    await conn.abort()
                    if not await self._reconnect():
                        break
                    continue

                if envelope.type == ResponseType.UNSUBSCRIBED:
                    if self._acknowledge_unsubscribe(envelope):
                        logger.info("all subscriptions acknowledged as unsubscribed")
                        await conn.abort()
                        break
                    continue

                try:
                    event = decode_envelope(envelope)
                except DecodeError as exc:
                    logger.warning(f"dropping frame: {exc}")
                    continue
                if event is None:
                    continue

                delivered, _ = await race_stop(self.events.put(event), self.stop_event)
                if not delivered:
                    break
        except ReconnectExhaustedError as exc:
            logger.error(f"stream {self.registry!r} terminated: {exc}")
            self.termination_error = exc
            self._state = StreamState.FAILED
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"read loop for {self.registry!r} crashed")
            self.termination_error = StreamError(f"read loop crashed: {exc!r}")
            self._state = StreamState.FAILED
            if self._conn is not None:
                await self._conn.abort()
        finally:
            if self._state != StreamState.FAILED:
                self._state = StreamState.CLOSED
            self.events.close()
            self._done.set()
            if self._cancel_link is not None:
                self._cancel_link.cancel()

    def _acknowledge_unsubscribe(self, envelope: Envelope) -> bool:
        """Track an ``unsubscribed`` ack; True once all pending acks arrived.

        Acks that do not answer a caller-initiated unsubscribe are ignored.
        """
        if not self._unsubscribing:
            return False
        self._pending_unsubscribe.discard((envelope.channel, envelope.market))
        return not self._pending_unsubscribe

    async def _reconnect(self) -> bool:
        """Re-dial with exponential backoff and replay the registry.

        Returns False if the stop event fired during the backoff.

        Raises:
            ReconnectExhaustedError: ``reconnect_count`` attempts all failed.
        """
        self._state = StreamState.RECONNECTING
        loop = asyncio.get_running_loop()
        started = loop.time()
        conf = self._config_source()
        attempts = conf.reconnect_count

        for attempt in range(attempts):
            delay = backoff_delay(conf, attempt)
            logger.info(
                f"reconnecting to {self.url} in {delay:.2f}s (attempt {attempt + 1}/{attempts})"
            )
            if await sleep_or_stop(delay, self.stop_event):
                return False

            conf = self._config_source()
            try:
                conn = await self._dial(conf)
            except DialFailedError as exc:
                logger.warning(f"reconnect attempt {attempt + 1} failed: {exc}")
                continue

            if self.stop_event.is_set():
                await conn.abort()
                return False
            self._conn = conn
            self.reconnects += 1
            self._state = StreamState.CONNECTED
            logger.info(f"reconnected to {self.url} (reconnects={self.reconnects})")
            return True

        raise ReconnectExhaustedError(
            f"reconnection failed after {loop.time() - started:.1f}s", attempts=attempts
        )

    # ----------------------
    # Keepalive
    # ----------------------
    async def _keepalive_loop(self) -> None:
        stopper = asyncio.ensure_future(self.stop_event.wait())
        finished = asyncio.ensure_future(self._done.wait())
        try:
            while True:
                conf = self._config_source()
                await asyncio.wait(
                    {stopper, finished},
                    timeout=conf.ping_interval,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if stopper.done():
                    await self._shutdown(conf)
                    return
                if finished.done():
                    return
                if self._state != StreamState.CONNECTED:
                    continue
                try:
                    await self._conn.ping()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    logger.warning(f"write ping: {exc}")
        finally:
            stopper.cancel()
            finished.cancel()

    async def _shutdown(self, conf: StreamConfig) -> None:
        conn = self._conn
        if conn is not None and not self._done.is_set() and self._state == StreamState.CONNECTED:
            try:
                await conn.close()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"write close msg: {exc}")

        try:
            await asyncio.wait_for(self._done.wait(), timeout=conf.close_grace)
        except asyncio.TimeoutError:
            if self._read_task is not None and not self._read_task.done():
                logger.info("read loop did not exit within close grace; cancelling")
                self._read_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._read_task
                if self._conn is not None:
                    await self._conn.abort()

    def __repr__(self) -> str:
        return (
            f"StreamSupervisor(url={self.url}, state={self._state.value}, "
            f"reconnects={self.reconnects})"
        )
