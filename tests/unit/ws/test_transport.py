"""Unit tests for Connection.

Tests focus on authentication, subscription frames, the pong-driven read
deadline and how read failures are classified.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from ftxclient.core import (
    AuthRequiredError,
    Channel,
    Credentials,
    DecodeError,
    DialFailedError,
    ReadFailedError,
    StreamClosedError,
    StreamConfig,
)
from ftxclient.models import WSRequest
from ftxclient.utils.signing import sign
from ftxclient.ws.transport import Connection, _connect_kwargs, parse_envelope

URL = "wss://example.com/ws/"
CREDS = Credentials(api_key="key", api_secret="secret")


class TestConnectKwargs:
    """Test websockets.connect options."""

    def test_library_keepalive_disabled(self):
        """Test keepalive is left to the connection's own pings."""
        kwargs = _connect_kwargs(StreamConfig())
        assert kwargs["ping_interval"] is None
        assert kwargs["ping_timeout"] is None
        assert kwargs["close_timeout"] == 1.0
        assert kwargs["max_queue"] == 1024
        assert "max_size" not in kwargs

    def test_max_size_included_when_set(self):
        kwargs = _connect_kwargs(StreamConfig(max_size=2**20, max_queue=None))
        assert kwargs["max_size"] == 2**20
        assert "max_queue" not in kwargs


class TestOpen:
    """Test Connection.open."""

    @pytest.mark.asyncio
    async def test_sends_subscriptions_in_order(self, fake_ws):
        """Test one subscribe frame per request, in request order."""
        ws = fake_ws()
        requests = [
            WSRequest(channel=Channel.TICKER, market="BTC/USD"),
            WSRequest(channel=Channel.TICKER, market="ETH/USD"),
        ]
        with patch("websockets.connect", new=AsyncMock(return_value=ws)) as connect:
            conn = await Connection.open(URL, requests, config=StreamConfig())

        connect.assert_awaited_once()
        assert connect.await_args.args[0] == URL
        assert ws.sent == [
            {"channel": "ticker", "market": "BTC/USD", "op": "subscribe"},
            {"channel": "ticker", "market": "ETH/USD", "op": "subscribe"},
        ]
        assert conn.authenticated is False
        assert len(conn.subscribed) == 2

    @pytest.mark.asyncio
    async def test_private_channel_logs_in_first(self, fake_ws):
        """Test the login frame precedes the private subscription."""
        ws = fake_ws()
        with (
            patch("websockets.connect", new=AsyncMock(return_value=ws)),
            patch("ftxclient.ws.transport.timestamp_ms", return_value=1557246346499),
        ):
            await Connection.open(
                URL, [WSRequest(channel=Channel.FILLS)], config=StreamConfig(), credentials=CREDS
            )

        login, subscribe = ws.sent
        assert login == {
            "op": "login",
            "args": {
                "key": "key",
                "sign": sign("secret", "1557246346499websocket_login"),
                "time": 1557246346499,
            },
        }
        assert subscribe == {"channel": "fills", "op": "subscribe"}

    @pytest.mark.asyncio
    async def test_login_carries_subaccount(self, fake_ws):
        ws = fake_ws()
        creds = Credentials(api_key="key", api_secret="secret", subaccount="bot")
        with patch("websockets.connect", new=AsyncMock(return_value=ws)):
            await Connection.open(
                URL, [WSRequest(channel=Channel.ORDERS)], config=StreamConfig(), credentials=creds
            )
        assert ws.sent[0]["args"]["subaccount"] == "bot"

    @pytest.mark.asyncio
    async def test_private_without_credentials_never_dials(self):
        """Test AuthRequiredError is raised before any connection attempt."""
        connect = AsyncMock()
        with patch("websockets.connect", new=connect), pytest.raises(AuthRequiredError):
            await Connection.open(URL, [WSRequest(channel=Channel.FILLS)], config=StreamConfig())
        connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dial_failure(self):
        """Test connect errors surface as DialFailedError."""
        connect = AsyncMock(side_effect=OSError("connection refused"))
        with patch("websockets.connect", new=connect), pytest.raises(DialFailedError) as info:
            await Connection.open(
                URL, [WSRequest(channel=Channel.MARKETS)], config=StreamConfig()
            )
        assert info.value.url == URL


class TestAuthenticate:
    """Test login idempotence."""

    @pytest.mark.asyncio
    async def test_login_sent_once_per_connection(self, fake_ws):
        """Test authenticate twice writes exactly one login frame."""
        ws = fake_ws()
        conn = Connection(ws, URL, StreamConfig(), credentials=CREDS)

        await conn.authenticate()
        await conn.authenticate()
        await conn.subscribe([WSRequest(channel=Channel.FILLS), WSRequest(channel=Channel.ORDERS)])

        assert [op for op, _, _ in ws.ops].count("login") == 1
        assert ws.ops[1:] == [("subscribe", "fills", None), ("subscribe", "orders", None)]

    @pytest.mark.asyncio
    async def test_new_connection_logs_in_again(self, fake_ws):
        ws1, ws2 = fake_ws(), fake_ws()
        for ws in (ws1, ws2):
            conn = Connection(ws, URL, StreamConfig(), credentials=CREDS)
            await conn.subscribe([WSRequest(channel=Channel.FILLS)])
        assert ws1.ops[0][0] == "login"
        assert ws2.ops[0][0] == "login"

    @pytest.mark.asyncio
    async def test_without_credentials(self, fake_ws):
        conn = Connection(fake_ws(), URL, StreamConfig())
        with pytest.raises(AuthRequiredError):
            await conn.authenticate()


class TestLiveness:
    """Test ping frames and the read deadline."""

    @pytest.mark.asyncio
    async def test_initial_deadline(self, fake_ws):
        with patch.object(Connection, "_now", return_value=50.0):
            conn = Connection(fake_ws(), URL, StreamConfig(timeout=7.0))
        assert conn.deadline == 57.0

    @pytest.mark.asyncio
    async def test_pong_sets_deadline_to_now_plus_timeout(self, fake_ws):
        """Test each pong moves the deadline to exactly now + timeout."""
        ws = fake_ws(auto_pong=False)
        conn = Connection(ws, URL, StreamConfig(timeout=5.0))

        with patch.object(conn, "_now", return_value=100.0):
            await conn.ping()
            assert ws.pings == 1
            ws.answer_pongs()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert conn.deadline == 105.0

    @pytest.mark.asyncio
    async def test_unanswered_ping_leaves_deadline(self, fake_ws):
        ws = fake_ws(auto_pong=False)
        conn = Connection(ws, URL, StreamConfig(timeout=5.0))
        before = conn.deadline
        await conn.ping()
        await asyncio.sleep(0)
        assert conn.deadline == before

    @pytest.mark.asyncio
    async def test_read_fails_when_deadline_passes(self, fake_ws):
        """Test a silent server makes the blocking read fail."""
        conn = Connection(fake_ws(auto_pong=False), URL, StreamConfig(timeout=0.05))
        with pytest.raises(ReadFailedError) as info:
            await asyncio.wait_for(conn.read_frame(), timeout=1.0)
        assert not isinstance(info.value, StreamClosedError)

    @pytest.mark.asyncio
    async def test_deadline_extended_while_waiting(self, fake_ws):
        """Test a pong during a pending read keeps the read alive."""
        ws = fake_ws(auto_pong=False)
        conn = Connection(ws, URL, StreamConfig(timeout=0.1))
        reader = asyncio.create_task(conn.read_frame())

        await asyncio.sleep(0.06)
        conn.extend_deadline()
        await asyncio.sleep(0.06)
        assert not reader.done()

        ws.push({"type": "subscribed", "channel": "ticker", "market": "BTC/USD"})
        envelope = await asyncio.wait_for(reader, timeout=1.0)
        assert envelope.type == "subscribed"


class TestReadFrame:
    """Test frame parsing and closure classification."""

    @pytest.mark.asyncio
    async def test_returns_envelope(self, fake_ws, ticker):
        ws = fake_ws([ticker("ETH/BTC")])
        conn = Connection(ws, URL, StreamConfig())
        envelope = await conn.read_frame()
        assert envelope.channel == Channel.TICKER
        assert envelope.market == "ETH/BTC"
        assert envelope.data["bid"] == "1.0"

    @pytest.mark.asyncio
    async def test_invalid_frame_keeps_connection(self, fake_ws, ticker):
        """Test a malformed frame raises DecodeError and the next read works."""
        ws = fake_ws(["not json", ticker("ETH/BTC")])
        conn = Connection(ws, URL, StreamConfig())
        with pytest.raises(DecodeError):
            await conn.read_frame()
        envelope = await conn.read_frame()
        assert envelope.market == "ETH/BTC"

    @pytest.mark.asyncio
    async def test_normal_closure(self, fake_ws):
        ws = fake_ws()
        ws.close_normally()
        conn = Connection(ws, URL, StreamConfig())
        with pytest.raises(StreamClosedError) as info:
            await conn.read_frame()
        assert info.value.code == 1000

    @pytest.mark.asyncio
    async def test_abrupt_closure(self, fake_ws):
        ws = fake_ws()
        ws.drop()
        conn = Connection(ws, URL, StreamConfig())
        with pytest.raises(ReadFailedError) as info:
            await conn.read_frame()
        assert not isinstance(info.value, StreamClosedError)
        assert info.value.code is None

    @pytest.mark.asyncio
    async def test_close_sends_normal_closure(self, fake_ws):
        ws = fake_ws()
        conn = Connection(ws, URL, StreamConfig())
        await conn.close()
        assert ws.close_codes == [1000]


class TestParseEnvelope:
    def test_error_envelope(self):
        envelope = parse_envelope('{"type": "error", "code": 400, "msg": "Invalid channel"}')
        assert envelope.type == "error"
        assert envelope.code == 400
        assert envelope.channel is None

    def test_unknown_type_rejected(self):
        with pytest.raises(DecodeError):
            parse_envelope('{"type": "pong"}')
