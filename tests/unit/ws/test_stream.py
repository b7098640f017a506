"""End-to-end tests for Stream and Subscription over a scripted socket."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from ftxclient.core import (
    AuthRequiredError,
    Credentials,
    ReconnectExhaustedError,
    Region,
    StreamConfig,
)
from ftxclient.models import Market, NoticeEvent, TickerEvent, TradeEvent
from ftxclient.ws import Stream, StreamState

FAST = StreamConfig(reconnect_interval=0.001, close_grace=0.05)


async def _collect(subscription, timeout: float = 1.0) -> list:
    async def run():
        return [item async for item in subscription]

    return await asyncio.wait_for(run(), timeout=timeout)


class TestScenarios:
    """Test the public subscribe calls end to end."""

    @pytest.mark.asyncio
    async def test_ticker_update(self, fake_ws):
        """Test one ticker frame yields exactly one ticker event."""
        ws = fake_ws(
            [
                {"channel": "ticker", "market": "ETH/BTC", "type": "subscribed"},
                {
                    "channel": "ticker",
                    "market": "ETH/BTC",
                    "type": "update",
                    "data": {"bid": "1.0", "ask": "1.1", "bidSize": "5", "askSize": "4",
                             "last": "1.05", "time": 1616581210.5},
                },
            ]
        )
        ws.close_normally()

        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_tickers("ETH/BTC")
            events = await _collect(sub)

        assert len(events) == 1
        event = events[0]
        assert isinstance(event, TickerEvent)
        assert event.market == "ETH/BTC"
        assert event.ticker.bid == Decimal("1.0")
        assert event.ticker.ask == Decimal("1.1")
        assert ws.sent == [{"channel": "ticker", "market": "ETH/BTC", "op": "subscribe"}]

    @pytest.mark.asyncio
    async def test_reconnect_exhausted(self, fake_ws):
        """Test an abrupt close with three failing re-dials ends iteration."""
        ws = fake_ws()
        ws.drop()
        connect = AsyncMock(side_effect=[ws, OSError("x"), OSError("x"), OSError("x")])
        stream = Stream(FAST)
        stream.set_reconnection_count(3)

        with patch("websockets.connect", new=connect):
            sub = await stream.subscribe_to_trades("BTC/USD")
            events = await _collect(sub)
            await sub.wait_closed()

        assert events == []
        assert connect.await_count == 4
        assert sub.state == StreamState.FAILED
        assert isinstance(sub.termination_error, ReconnectExhaustedError)

    @pytest.mark.asyncio
    async def test_private_channel_without_credentials(self):
        """Test fills without credentials fail before any connection attempt."""
        connect = AsyncMock()
        with patch("websockets.connect", new=connect):
            with pytest.raises(AuthRequiredError):
                await Stream().subscribe_to_fills()
            with pytest.raises(AuthRequiredError):
                await Stream().subscribe_to_orders()
        connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_markets_split_per_symbol(self, fake_ws):
        """Test a markets frame with two symbols yields two Market items."""
        ws = fake_ws(
            [
                {
                    "channel": "markets",
                    "type": "partial",
                    "data": {
                        "action": "partial",
                        "data": {
                            "BTC/USD": {"name": "BTC/USD", "type": "spot", "enabled": True},
                            "BTC-PERP": {"name": "BTC-PERP", "type": "future", "enabled": True},
                        },
                    },
                }
            ]
        )
        ws.close_normally()

        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_markets()
            items = await _collect(sub)

        assert len(items) == 2
        assert all(isinstance(item, Market) for item in items)
        assert {item.name for item in items} == {"BTC/USD", "BTC-PERP"}


class TestSubscribeCalls:
    """Test argument handling of the subscribe calls."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method", ["subscribe_to_tickers", "subscribe_to_trades", "subscribe_to_order_books"]
    )
    async def test_symbols_required(self, method):
        with pytest.raises(ValueError, match="symbols is missing"):
            await getattr(Stream(), method)()

    @pytest.mark.asyncio
    async def test_trades_expand_to_single_events(self, fake_ws):
        trades = [
            {"id": i, "price": "100", "size": "1", "side": "sell", "liquidation": False,
             "time": "2021-03-24T10:20:10+00:00"}
            for i in range(4)
        ]
        ws = fake_ws([{"channel": "trades", "market": "BTC/USD", "type": "update", "data": trades}])
        ws.close_normally()

        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_trades("BTC/USD")
            items = await _collect(sub)

        assert [item.trade.id for item in items] == [0, 1, 2, 3]
        assert all(isinstance(item, TradeEvent) and item.market == "BTC/USD" for item in items)

    @pytest.mark.asyncio
    async def test_rejected_subscription_is_a_notice(self, fake_ws):
        ws = fake_ws(
            [{"channel": "orderbook", "market": "NOPE", "type": "error", "code": 400,
              "msg": "No such market: NOPE"}]
        )
        ws.close_normally()

        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_order_books("NOPE")
            items = await _collect(sub)

        assert len(items) == 1
        assert isinstance(items[0], NoticeEvent)
        assert items[0].is_error

    @pytest.mark.asyncio
    async def test_private_login_uses_server_time_offset(self, fake_ws):
        ws = fake_ws()
        stream = Stream(FAST, credentials=Credentials(api_key="k", api_secret="s"))
        stream.server_time_offset = 2.5

        with (
            patch("websockets.connect", new=AsyncMock(return_value=ws)),
            patch("ftxclient.ws.transport.timestamp_ms", return_value=1000) as ts,
        ):
            async with await stream.subscribe_to_fills():
                pass

        ts.assert_called_with(2.5)
        assert ws.ops == [("login", None, None), ("subscribe", "fills", None)]


class TestCancellation:
    """Test bounded shutdown of a subscription."""

    @pytest.mark.asyncio
    async def test_cancel_token_ends_iteration(self, fake_ws):
        """Test the caller's channel closes within the grace window."""
        ws = fake_ws(echo_close=False)
        cancel = asyncio.Event()

        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_tickers("BTC/USD", cancel=cancel)
            asyncio.get_running_loop().call_later(0.01, cancel.set)
            items = await _collect(sub, timeout=1.0)
            await asyncio.wait_for(sub.wait_closed(), timeout=1.0)

        assert items == []
        assert ws.close_codes == [1000]
        assert sub.closed

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, fake_ws):
        ws = fake_ws()
        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            async with await Stream(FAST).subscribe_to_tickers("BTC/USD") as sub:
                assert sub.state == StreamState.CONNECTED
        assert sub.state == StreamState.CLOSED
        assert sub.closed

    @pytest.mark.asyncio
    async def test_unsubscribe_ends_iteration(self, fake_ws):
        ws = fake_ws()
        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_tickers("BTC/USD")
            await sub.unsubscribe()
            ws.push({"channel": "ticker", "market": "BTC/USD", "type": "unsubscribed"})
            items = await _collect(sub)

        assert items == []
        assert ws.ops[-1] == ("unsubscribe", "ticker", "BTC/USD")
        assert sub.termination_error is None

    @pytest.mark.asyncio
    async def test_unsubscribe_delivers_pending_updates(self, fake_ws, ticker):
        """Test updates sent ahead of the ack all reach the caller."""
        ws = fake_ws()
        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            sub = await Stream(FAST).subscribe_to_tickers("BTC/USD")
            await sub.unsubscribe()
            for bid in ("1.0", "2.0", "3.0"):
                ws.push(ticker("BTC/USD", bid=bid))
            ws.push({"channel": "ticker", "market": "BTC/USD", "type": "unsubscribed"})
            items = await _collect(sub)

        assert [str(item.ticker.bid) for item in items] == ["1.0", "2.0", "3.0"]
        assert sub.termination_error is None
        assert sub.state == StreamState.CLOSED


class TestConfiguration:
    """Test the configuration cell."""

    def test_defaults(self):
        stream = Stream()
        assert stream.config == StreamConfig()
        assert stream.url == "wss://ftx.com/ws/"
        assert Stream(region=Region.US).url == "wss://ftx.us/ws/"

    def test_setters_replace_snapshot(self):
        stream = Stream()
        before = stream.config
        stream.set_stream_timeout(30.0)
        stream.set_reconnection_count(5)
        stream.set_reconnection_interval(0.5)
        stream.set_debug_mode(True)

        after = stream.config
        assert before.timeout == 60.0
        assert (after.timeout, after.reconnect_count, after.reconnect_interval, after.debug) == (
            30.0,
            5,
            0.5,
            True,
        )
        assert after.ping_interval == 27.0

    def test_configure_validates(self):
        stream = Stream()
        with pytest.raises(ValueError):
            stream.configure(timeout=0)
        with pytest.raises(TypeError):
            stream.configure(not_a_field=1)
        assert stream.config == StreamConfig()
