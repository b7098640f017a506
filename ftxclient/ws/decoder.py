"""Envelope classification and payload decoding."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.enums import Channel, ResponseType
from ..core.exceptions import DecodeError
from ..models import (
    DecodedEvent,
    Envelope,
    Fill,
    FillEvent,
    Market,
    MarketsEvent,
    NoticeEvent,
    Order,
    OrderBook,
    OrderBookEvent,
    OrderEvent,
    Ticker,
    TickerEvent,
    Trade,
    TradesEvent,
)

_TRADES = TypeAdapter(list[Trade])
_MARKETS = TypeAdapter(dict[str, Market])


def _ticker(env: Envelope, data: Any) -> TickerEvent:
    return TickerEvent(
        channel=env.channel, market=env.market, type=env.type, ticker=Ticker.model_validate(data)
    )


def _trades(env: Envelope, data: Any) -> TradesEvent:
    return TradesEvent(
        channel=env.channel, market=env.market, type=env.type, trades=_TRADES.validate_python(data)
    )


def _order_book(env: Envelope, data: Any) -> OrderBookEvent:
    return OrderBookEvent(
        channel=env.channel,
        market=env.market,
        type=env.type,
        order_book=OrderBook.model_validate(data),
    )


def _fill(env: Envelope, data: Any) -> FillEvent:
    fill = Fill.model_validate(data)
    return FillEvent(
        channel=env.channel, market=env.market or fill.market, type=env.type, fill=fill
    )


def _order(env: Envelope, data: Any) -> OrderEvent:
    order = Order.model_validate(data)
    return OrderEvent(
        channel=env.channel, market=env.market or order.market, type=env.type, order=order
    )


def _markets(env: Envelope, data: Any) -> MarketsEvent:
    # The markets channel nests the map one level down: {"action": ..., "data": {name: market}}
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    return MarketsEvent(
        channel=env.channel,
        market=env.market,
        type=env.type,
        markets=_MARKETS.validate_python(data),
    )


_DECODERS: dict[Channel, Callable[[Envelope, Any], DecodedEvent]] = {
    Channel.TICKER: _ticker,
    Channel.TRADES: _trades,
    Channel.ORDER_BOOK: _order_book,
    Channel.FILLS: _fill,
    Channel.ORDERS: _order,
    Channel.MARKETS: _markets,
}


def decode_envelope(envelope: Envelope) -> DecodedEvent | None:
    """Turn one envelope into a typed event.

    Returns ``None`` for subscription acknowledgements. ``error`` and ``info``
    envelopes become ``NoticeEvent``.

    Raises:
        DecodeError: The payload does not match the channel's schema.
    """
    if envelope.type.is_control:
        return None
    if envelope.type in (ResponseType.ERROR, ResponseType.INFO):
        return NoticeEvent(
            channel=envelope.channel,
            market=envelope.market,
            type=envelope.type,
            code=envelope.code,
            msg=envelope.msg,
        )
    if envelope.channel is None:
        raise DecodeError(f"{envelope.type.value} envelope without channel")
    if envelope.data is None:
        raise DecodeError(f"{envelope.channel.value} {envelope.type.value} envelope without data")

    decoder = _DECODERS[envelope.channel]
    try:
        return decoder(envelope, envelope.data)
    except (PydanticValidationError, ValueError, ArithmeticError) as exc:
        count = exc.error_count() if isinstance(exc, PydanticValidationError) else 1
        raise DecodeError(
            f"malformed {envelope.channel.value} payload for {envelope.market or '-'}: "
            f"{count} error(s)"
        ) from exc
