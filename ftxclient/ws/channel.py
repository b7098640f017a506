"""Closable async event channel used between the streaming tasks.

End of stream is signalled by closing the channel; consumers see
``ChannelClosed`` from ``get`` (or the end of ``async for``) once the
buffered items are drained. Nothing is ever enqueued to mark the end.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised by ``get`` on a closed, drained channel and by ``put`` on a closed channel."""


class EventChannel(Generic[T]):
    """Bounded FIFO with an explicit closed state."""

    def __init__(self, maxsize: int = 1) -> None:
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize)
        self._closed = asyncio.Event()
        # Items taken off the queue by a get that was cancelled before returning
        self._held: list[T] = []

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        return self._queue.qsize() + len(self._held)

    def close(self) -> None:
        """Close the channel. Idempotent; buffered items stay readable."""
        self._closed.set()

    async def put(self, item: T) -> None:
        if self.closed:
            raise ChannelClosed("put on closed channel")
        await self._queue.put(item)

    async def get(self) -> T:
        if self._held:
            return self._held.pop()
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self.closed:
            raise ChannelClosed("channel closed")

        getter = asyncio.ensure_future(self._queue.get())
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({getter, closed}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            if getter.done() and not getter.cancelled():
                self._held.append(getter.result())
            raise
        finally:
            closed.cancel()
            if not getter.done():
                getter.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await getter
        if getter.done() and not getter.cancelled():
            return getter.result()
        # Closed while waiting; drain anything that slipped in.
        if not self._queue.empty():
            return self._queue.get_nowait()
        raise ChannelClosed("channel closed")

    def __aiter__(self) -> EventChannel[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except ChannelClosed:
            raise StopAsyncIteration from None


async def race_stop(aw: Awaitable[T], stop: asyncio.Event) -> tuple[bool, T | None]:
    """Await ``aw`` unless ``stop`` fires first.

    Returns ``(True, result)`` when ``aw`` completed, ``(False, None)`` when
    the stop event won (``aw`` is cancelled).
    """
    task = asyncio.ensure_future(aw)
    if stop.is_set():
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        return False, None
    stopper = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopper.cancel()
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    if task.cancelled():
        return False, None
    return True, task.result()


async def sleep_or_stop(delay: float, stop: asyncio.Event) -> bool:
    """Sleep for ``delay`` seconds; return True if ``stop`` fired during the wait."""
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True
