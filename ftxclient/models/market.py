"""Market data models: markets, tickers, trades, order books, candles."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import Side
from .types import FTXTime

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)


class Market(BaseModel):
    """Tradable market description.

    The markets channel omits live prices, so price and volume fields are optional.
    """

    name: str = Field(..., min_length=1)
    type: str | None = None
    underlying: str | None = None
    base_currency: str | None = Field(None, alias="baseCurrency")
    quote_currency: str | None = Field(None, alias="quoteCurrency")
    enabled: bool = True
    post_only: bool = Field(False, alias="postOnly")
    restricted: bool = False
    high_leverage_fee_exempt: bool = Field(False, alias="highLeverageFeeExempt")
    ask: Decimal | None = None
    bid: Decimal | None = None
    last: Decimal | None = None
    price_increment: Decimal | None = Field(None, alias="priceIncrement")
    size_increment: Decimal | None = Field(None, alias="sizeIncrement")
    min_provide_size: Decimal | None = Field(None, alias="minProvideSize")
    volume_usd_24h: Decimal | None = Field(None, alias="volumeUsd24h")
    quote_volume_24h: Decimal | None = Field(None, alias="quoteVolume24h")
    change_1h: Decimal | None = Field(None, alias="change1h")
    change_24h: Decimal | None = Field(None, alias="change24h")
    change_bod: Decimal | None = Field(None, alias="changeBod")

    model_config = _MODEL_CONFIG


class Ticker(BaseModel):
    """Best bid/offer and last trade price."""

    bid: Decimal | None = None
    ask: Decimal | None = None
    bid_size: Decimal | None = Field(None, alias="bidSize")
    ask_size: Decimal | None = Field(None, alias="askSize")
    last: Decimal | None = None
    time: FTXTime

    model_config = _MODEL_CONFIG

    @property
    def spread(self) -> Decimal | None:
        if self.bid is None or self.ask is None:
            return None
        return self.ask - self.bid


class Trade(BaseModel):
    """Public trade print."""

    id: int | None = None
    price: Decimal
    size: Decimal = Field(..., ge=0)
    side: Side
    liquidation: bool = False
    time: FTXTime

    model_config = _MODEL_CONFIG


class OrderBook(BaseModel):
    """Order book snapshot or delta.

    Levels are ``(price, size)`` pairs, best first. In a delta a size of zero
    removes the level. ``checksum`` is the exchange's CRC32 over the first 100
    levels of the resulting book; it is passed through unvalidated.
    """

    bids: list[tuple[Decimal, Decimal]] = Field(default_factory=list)
    asks: list[tuple[Decimal, Decimal]] = Field(default_factory=list)
    checksum: int | None = None
    action: str | None = None
    time: FTXTime | None = None

    model_config = _MODEL_CONFIG

    @property
    def best_bid(self) -> tuple[Decimal, Decimal] | None:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> tuple[Decimal, Decimal] | None:
        return self.asks[0] if self.asks else None


class HistoricalPrice(BaseModel):
    """OHLCV candle from the historical prices endpoint."""

    start_time: datetime = Field(..., alias="startTime")
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal | None = None

    model_config = _MODEL_CONFIG
