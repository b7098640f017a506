"""Inbound envelope and the decoded stream events.

``DecodedEvent`` is the closed set of values the decoder can produce for one
frame. Batched payloads (trades, markets) are delivered to callers one item at
a time as ``TradeEvent`` and ``Market`` respectively.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import Channel, ResponseType
from .fill import Fill
from .market import Market, OrderBook, Ticker, Trade
from .order import Order

_MODEL_CONFIG = ConfigDict(frozen=True)


class Envelope(BaseModel):
    """Outer wrapper of every inbound streaming message."""

    channel: Channel | None = None
    market: str | None = None
    type: ResponseType
    code: int = 0
    msg: str = ""
    data: Any = None

    model_config = _MODEL_CONFIG


class StreamEvent(BaseModel):
    """Routing metadata copied from the envelope a payload arrived in."""

    channel: Channel
    market: str | None = None
    type: ResponseType

    model_config = _MODEL_CONFIG


class TickerEvent(StreamEvent):
    ticker: Ticker


class TradesEvent(StreamEvent):
    trades: list[Trade] = Field(default_factory=list)


class TradeEvent(StreamEvent):
    trade: Trade


class OrderBookEvent(StreamEvent):
    """Order book frame; ``type`` is ``partial`` for snapshots and ``update`` for deltas."""

    order_book: OrderBook

    @property
    def is_snapshot(self) -> bool:
        return self.type == ResponseType.PARTIAL


class FillEvent(StreamEvent):
    fill: Fill


class OrderEvent(StreamEvent):
    order: Order


class MarketsEvent(StreamEvent):
    markets: dict[str, Market] = Field(default_factory=dict)


class NoticeEvent(StreamEvent):
    """Server ``error`` or ``info`` message.

    Subscription rejections arrive as notices with ``type == error``.
    """

    channel: Channel | None = None
    code: int = 0
    msg: str = ""

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR


DecodedEvent = Union[
    TickerEvent,
    TradesEvent,
    OrderBookEvent,
    FillEvent,
    OrderEvent,
    MarketsEvent,
    NoticeEvent,
]
