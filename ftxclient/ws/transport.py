"""One physical WebSocket connection.

A ``Connection`` dials the endpoint, authenticates at most once, writes the
subscription frames it was opened with, and exposes a deadline-bounded
``read_frame``. The read deadline starts at ``now + timeout`` and is pushed to
``now + timeout`` again by every pong; when it passes, the pending read fails
with ``ReadFailedError``.

Only the owner task reads. Writes (subscriptions, pings, close) may come from
other tasks and are serialised by a single write lock.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Iterable
from typing import Any

import websockets
from pydantic import ValidationError as PydanticValidationError
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..core.config import Credentials, StreamConfig
from ..core.exceptions import (
    AuthRequiredError,
    DecodeError,
    DialFailedError,
    ReadFailedError,
    StreamClosedError,
)
from ..models import Envelope, LoginArgs, LoginRequest, WSRequest
from ..utils.signing import sign, timestamp_ms, ws_login_payload

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000


def parse_envelope(raw: str | bytes) -> Envelope:
    """Parse one text frame into an ``Envelope``; raises ``DecodeError``."""
    try:
        return Envelope.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise DecodeError(f"invalid envelope: {exc.error_count()} error(s)", raw=raw) from exc


class Connection:
    """A single WebSocket session with its own authentication state."""

    def __init__(
        self,
        ws: Any,
        url: str,
        config: StreamConfig,
        credentials: Credentials | None = None,
        time_offset: float = 0.0,
    ) -> None:
        self._ws = ws
        self.url = url
        self._conf = config
        self._credentials = credentials
        self._time_offset = time_offset
        self._write_lock = asyncio.Lock()
        self._pending_recv: asyncio.Future | None = None
        self._close_sent = False
        self.authenticated = False
        self.subscribed: tuple[WSRequest, ...] = ()
        self.deadline = self._now() + config.timeout

    # ----------------------
    # Lifecycle
    # ----------------------
    @classmethod
    async def open(
        cls,
        url: str,
        requests: Iterable[WSRequest],
        *,
        config: StreamConfig,
        credentials: Credentials | None = None,
        time_offset: float = 0.0,
    ) -> Connection:
        """Dial ``url`` and send the subscription frames for ``requests``.

        Raises:
            AuthRequiredError: A private channel was requested without credentials.
            DialFailedError: The socket could not be opened or the frames not written.
        """
        requests = tuple(requests)
        if any(r.is_private for r in requests) and credentials is None:
            raise AuthRequiredError("credentials is required")

        try:
            ws = await websockets.connect(url, **_connect_kwargs(config))
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise DialFailedError(f"Failed to connect to {url}: {exc}", url=url) from exc

        conn = cls(ws, url, config, credentials=credentials, time_offset=time_offset)
        logger.info(f"connected to {url}")
        try:
            await conn.subscribe(requests)
        except (ConnectionClosed, WebSocketException, OSError) as exc:
            await conn.abort()
            raise DialFailedError(f"Failed to subscribe on {url}: {exc}", url=url) from exc
        return conn

    async def close(self) -> None:
        """Send a normal-closure frame and wait (bounded by close_timeout) for the handshake.

        The frame is sent at most once per connection.
        """
        if self._close_sent:
            return
        self._close_sent = True
        if self._conf.debug:
            logger.debug("CLOSE")
        async with self._write_lock:
            await self._ws.close(code=NORMAL_CLOSURE, reason="")

    async def abort(self) -> None:
        """Close without raising; used on connections that already failed."""
        with contextlib.suppress(Exception):
            await self.close()
        if self._pending_recv is not None and not self._pending_recv.done():
            self._pending_recv.cancel()

    # ----------------------
    # Writes
    # ----------------------
    async def send_json(self, frame: dict[str, Any]) -> None:
        data = json.dumps(frame)
        async with self._write_lock:
            await asyncio.wait_for(self._ws.send(data), timeout=self._conf.write_wait)

    async def send_request(self, request: WSRequest) -> None:
        await self.send_json(request.to_frame())

    async def authenticate(self) -> None:
        """Send the login frame unless this connection already did.

        Raises:
            AuthRequiredError: No credentials configured.
        """
        if self.authenticated:
            return
        if self._credentials is None:
            raise AuthRequiredError("credentials is required")

        logger.info("authenticating websocket connection")
        ts = timestamp_ms(self._time_offset)
        login = LoginRequest(
            args=LoginArgs(
                key=self._credentials.api_key,
                sign=sign(self._credentials.api_secret, ws_login_payload(ts)),
                time=ts,
                subaccount=self._credentials.subaccount,
            )
        )
        await self.send_json(login.to_frame())
        self.authenticated = True

    async def subscribe(self, requests: Iterable[WSRequest]) -> None:
        """Write one frame per request, logging in first if any is private."""
        sent = list(self.subscribed)
        for request in requests:
            if request.is_private:
                await self.authenticate()
            await self.send_request(request)
            sent.append(request)
        self.subscribed = tuple(sent)

    async def ping(self) -> None:
        """Write a ping control frame; the matching pong extends the read deadline."""
        if self._conf.debug:
            logger.debug("PING")
        async with self._write_lock:
            waiter = await asyncio.wait_for(self._ws.ping(), timeout=self._conf.write_wait)
        asyncio.ensure_future(waiter).add_done_callback(self._on_pong)

    def _on_pong(self, fut: asyncio.Future) -> None:
        if fut.cancelled() or fut.exception() is not None:
            return
        if self._conf.debug:
            logger.debug("PONG")
        self.extend_deadline()

    def extend_deadline(self) -> None:
        self.deadline = self._now() + self._conf.timeout

    # ----------------------
    # Reads
    # ----------------------
    async def read_frame(self) -> Envelope:
        """Block until the next frame arrives or the read deadline passes.

        Raises:
            StreamClosedError: Normal closure (code 1000).
            ReadFailedError: Abnormal closure, network error or deadline expiry.
            DecodeError: The frame was not a valid envelope (connection still usable).
        """
        raw = await self._recv()
        if self._conf.debug:
            logger.debug(f"frame: {raw!r}")
        return parse_envelope(raw)

    async def _recv(self) -> str | bytes:
        if self._pending_recv is None:
            self._pending_recv = asyncio.ensure_future(self._ws.recv())
        pending = self._pending_recv
        while True:
            remaining = self.deadline - self._now()
            if remaining <= 0:
                self._pending_recv = None
                pending.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await pending
                raise ReadFailedError(
                    f"read deadline exceeded ({self._conf.timeout}s without pong)"
                )
            # The deadline may move while we wait, so re-check instead of cancelling.
            done, _ = await asyncio.wait({pending}, timeout=remaining)
            if done:
                break

        self._pending_recv = None
        try:
            return pending.result()
        except ConnectionClosed as exc:
            code = exc.rcvd.code if exc.rcvd is not None else None
            if code == NORMAL_CLOSURE:
                raise StreamClosedError("connection closed normally", code=code) from exc
            raise ReadFailedError(f"connection closed: {exc}", code=code) from exc
        except (WebSocketException, OSError) as exc:
            raise ReadFailedError(f"read failed: {exc}") from exc

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    def __repr__(self) -> str:
        return (
            f"Connection(url={self.url}, authenticated={self.authenticated}, "
            f"subscriptions={len(self.subscribed)})"
        )


def _connect_kwargs(conf: StreamConfig) -> dict[str, Any]:
    """websockets.connect options: library keepalive off, we ping ourselves."""
    kwargs: dict[str, Any] = {
        "ping_interval": None,
        "ping_timeout": None,
        "close_timeout": conf.close_grace,
    }
    if conf.max_size is not None:
        kwargs["max_size"] = conf.max_size
    if conf.max_queue is not None:
        kwargs["max_queue"] = conf.max_queue
    return kwargs
