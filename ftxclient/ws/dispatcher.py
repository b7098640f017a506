"""Fan-out from a stream's decoded events to one caller-facing channel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from ..models import DecodedEvent, MarketsEvent, TradeEvent, TradesEvent
from .channel import ChannelClosed, EventChannel, race_stop
from .registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


def expand(event: DecodedEvent) -> Iterable[Any]:
    """Split batched payloads into the items callers receive.

    Trades frames yield one ``TradeEvent`` per trade in array order; markets
    frames yield each ``Market`` in map order. Everything else passes through.
    """
    if isinstance(event, TradesEvent):
        return [
            TradeEvent(channel=event.channel, market=event.market, type=event.type, trade=trade)
            for trade in event.trades
        ]
    if isinstance(event, MarketsEvent):
        return list(event.markets.values())
    return (event,)


class Dispatcher:
    """Forwards matching events from ``source`` to ``sink`` until either side ends."""

    def __init__(
        self,
        source: EventChannel[DecodedEvent],
        sink: EventChannel[Any],
        registry: SubscriptionRegistry,
        stop: asyncio.Event,
        expand: Callable[[DecodedEvent], Iterable[Any]] = expand,
    ) -> None:
        self.source = source
        self.sink = sink
        self.registry = registry
        self._stop = stop
        self._expand = expand
        self.forwarded = 0

    async def run(self) -> None:
        try:
            while True:
                ok, event = await race_stop(self.source.get(), self._stop)
                if not ok:
                    break
                if not self.registry.matches(event):
                    logger.debug(f"ignoring event for unsubscribed {event.channel}:{event.market}")
                    continue
                for item in self._expand(event):
                    ok, _ = await race_stop(self.sink.put(item), self._stop)
                    if not ok:
                        return
                    self.forwarded += 1
        except ChannelClosed:
            pass
        finally:
            self.sink.close()
