"""Integration tests for public REST market data."""

import os

import pytest

from ftxclient import RESTClient

pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_FTX_NETWORK_TESTS") != "1",
    reason="Requires network access to test REST market data",
)


class TestRESTMarketsIntegration:
    """Test public market endpoints against the live API."""

    @pytest.mark.asyncio
    async def test_get_markets(self):
        async with RESTClient() as client:
            markets = await client.get_markets()
        assert any(m.name == "BTC/USD" for m in markets)

    @pytest.mark.asyncio
    async def test_get_order_book(self):
        async with RESTClient() as client:
            book = await client.get_order_book("BTC/USD", depth=5)
        assert 0 < len(book.bids) <= 5
        assert book.best_bid[0] < book.best_ask[0]

    @pytest.mark.asyncio
    async def test_server_time(self):
        async with RESTClient() as client:
            offset = await client.sync_server_time()
        assert abs(offset) < 60
