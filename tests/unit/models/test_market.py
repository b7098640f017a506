"""Unit tests for market data models."""

from decimal import Decimal

import pytest

from ftxclient.core import Side
from ftxclient.models import HistoricalPrice, Market, OrderBook, Ticker, Trade


def test_market_from_wire():
    """Test camelCase aliases decode into snake_case fields."""
    market = Market.model_validate(
        {
            "name": "BTC-PERP",
            "type": "future",
            "underlying": "BTC",
            "baseCurrency": None,
            "quoteCurrency": None,
            "priceIncrement": 1.0,
            "sizeIncrement": 0.0001,
            "postOnly": False,
            "volumeUsd24h": 123456.7,
        }
    )
    assert market.name == "BTC-PERP"
    assert market.underlying == "BTC"
    assert market.price_increment == Decimal("1.0")
    assert float(market.volume_usd_24h) == 123456.7
    assert market.bid is None


def test_market_requires_name():
    with pytest.raises(Exception):  # ValidationError
        Market(name="")


def test_ticker_spread():
    ticker = Ticker(bid=Decimal("100"), ask=Decimal("100.5"), time=1616581210.5)
    assert ticker.spread == Decimal("0.5")


def test_ticker_spread_missing_side():
    assert Ticker(bid=Decimal("100"), time=0).spread is None


def test_ticker_frozen():
    ticker = Ticker(bid=Decimal("100"), time=0)
    with pytest.raises(Exception):  # ValidationError
        ticker.bid = Decimal("1")


def test_trade_from_wire():
    trade = Trade.model_validate(
        {
            "id": 7,
            "price": 50000.5,
            "size": 0.01,
            "side": "sell",
            "liquidation": False,
            "time": "2021-03-24T10:20:10.500000+00:00",
        }
    )
    assert trade.side is Side.SELL
    assert trade.price == Decimal("50000.5")
    assert trade.time.microsecond == 500000


def test_trade_negative_size_rejected():
    with pytest.raises(Exception):  # ValidationError
        Trade(price=Decimal("1"), size=Decimal("-1"), side=Side.BUY, time=0)


def test_order_book_best_levels():
    book = OrderBook.model_validate(
        {
            "bids": [[5000.5, 1.0], [5000.0, 2.0]],
            "asks": [[5001.0, 0.5]],
            "action": "partial",
            "time": 1616581210.5,
            "checksum": 1234,
        }
    )
    assert book.best_bid == (Decimal("5000.5"), Decimal("1.0"))
    assert book.best_ask == (Decimal("5001.0"), Decimal("0.5"))
    assert book.checksum == 1234


def test_order_book_empty():
    book = OrderBook()
    assert book.best_bid is None
    assert book.best_ask is None


def test_historical_price():
    candle = HistoricalPrice.model_validate(
        {
            "startTime": "2021-03-24T10:00:00+00:00",
            "open": 50000,
            "high": 51000,
            "low": 49000,
            "close": 50500,
            "volume": 12.5,
        }
    )
    assert candle.start_time.hour == 10
    assert candle.close == Decimal("50500")
