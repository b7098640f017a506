"""Fixtures for streaming tests: a scripted in-memory WebSocket."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close


class FakeWebSocket:
    """Stands in for a websockets client connection.

    Server frames are queued with ``push``; ``drop`` simulates an abrupt
    socket loss and ``close_normally`` a server-side normal closure. Frames
    written by the client are kept, decoded, in ``sent``.
    """

    def __init__(
        self,
        frames: list[Any] | None = None,
        *,
        auto_pong: bool = True,
        echo_close: bool = True,
    ) -> None:
        self.sent: list[dict[str, Any]] = []
        self.pings = 0
        self.close_codes: list[int] = []
        self.auto_pong = auto_pong
        self.echo_close = echo_close
        self.pending_pongs: list[asyncio.Future] = []
        self._inbox: asyncio.Queue = asyncio.Queue()
        self._closed = False
        for frame in frames or []:
            self.push(frame)

    def push(self, frame: Any) -> None:
        self._inbox.put_nowait(frame if isinstance(frame, (str, bytes)) else json.dumps(frame))

    def drop(self) -> None:
        self._inbox.put_nowait(ConnectionClosedError(None, None))

    def close_normally(self) -> None:
        close = Close(1000, "")
        self._inbox.put_nowait(ConnectionClosedOK(close, close, True))

    def answer_pongs(self) -> None:
        for fut in self.pending_pongs:
            if not fut.done():
                fut.set_result(0.0)
        self.pending_pongs.clear()

    async def recv(self) -> Any:
        item = await self._inbox.get()
        if isinstance(item, BaseException):
            # A closed socket keeps failing
            self._inbox.put_nowait(item)
            raise item
        return item

    async def send(self, data: str) -> None:
        if self._closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(json.loads(data))

    async def ping(self) -> asyncio.Future:
        self.pings += 1
        fut = asyncio.get_running_loop().create_future()
        if self.auto_pong:
            fut.set_result(0.0)
        else:
            self.pending_pongs.append(fut)
        return fut

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_codes.append(code)
        if self._closed:
            return
        self._closed = True
        if self.echo_close:
            close = Close(code, reason)
            self._inbox.put_nowait(ConnectionClosedOK(close, close, True))

    @property
    def ops(self) -> list[tuple[str, str | None, str | None]]:
        """Sent frames as ``(op, channel, market)`` tuples."""
        return [(f["op"], f.get("channel"), f.get("market")) for f in self.sent]


@pytest.fixture
def fake_ws():
    """Factory for ``FakeWebSocket`` instances."""
    return FakeWebSocket


def ticker_frame(market: str, bid: str = "1.0", ask: str = "1.1") -> dict[str, Any]:
    return {
        "channel": "ticker",
        "market": market,
        "type": "update",
        "data": {"bid": bid, "ask": ask, "last": bid, "time": 1616581210.5},
    }


@pytest.fixture
def ticker():
    """Builder for ticker update frames."""
    return ticker_frame


async def wait_until(predicate, timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def eventually():
    """Poll a predicate until it holds (bounded)."""
    return wait_until
