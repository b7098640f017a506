"""Data models for REST payloads and streaming events.

Architecture:
    All models are Pydantic v2 and immutable (frozen=True). Field names are
    snake_case with camelCase aliases matching the exchange JSON, and
    ``populate_by_name`` lets callers construct them either way.

Design Decisions:
    - Decimal for prices and sizes: no float rounding drift
    - FTXTime: timestamps accepted as epoch seconds or ISO-8601
    - Decoded stream events form a closed union (DecodedEvent)

Model Categories:
    - Market Data: Market, Ticker, Trade, OrderBook, HistoricalPrice
    - Account: AccountInformation, Position, Balance, Fill, Order
    - Requests: WSRequest, LoginRequest, order and wallet payloads, query params
    - Streaming: Envelope, DecodedEvent members, TradeEvent
"""

from .account import AccountInformation, Position
from .events import (
    DecodedEvent,
    Envelope,
    FillEvent,
    MarketsEvent,
    NoticeEvent,
    OrderBookEvent,
    OrderEvent,
    StreamEvent,
    TickerEvent,
    TradeEvent,
    TradesEvent,
)
from .fill import Fill, GetFillsParams
from .market import HistoricalPrice, Market, OrderBook, Ticker, Trade
from .order import (
    CancelAllOrdersPayload,
    GetOrdersHistoryParams,
    ModifyOrderPayload,
    Order,
    PlaceOrderPayload,
)
from .params import GetHistoricalPricesParams, GetTradesParams
from .requests import LoginArgs, LoginRequest, WSRequest
from .types import FTXTime, parse_ftx_time
from .wallet import Balance, CreateWithdrawPayload, CreateWithdrawResult

__all__ = [
    "AccountInformation",
    "Balance",
    "CancelAllOrdersPayload",
    "CreateWithdrawPayload",
    "CreateWithdrawResult",
    "DecodedEvent",
    "Envelope",
    "FTXTime",
    "Fill",
    "FillEvent",
    "GetFillsParams",
    "GetHistoricalPricesParams",
    "GetOrdersHistoryParams",
    "GetTradesParams",
    "HistoricalPrice",
    "LoginArgs",
    "LoginRequest",
    "Market",
    "MarketsEvent",
    "ModifyOrderPayload",
    "NoticeEvent",
    "Order",
    "OrderBook",
    "OrderBookEvent",
    "OrderEvent",
    "PlaceOrderPayload",
    "Position",
    "StreamEvent",
    "Ticker",
    "TickerEvent",
    "Trade",
    "TradeEvent",
    "TradesEvent",
    "WSRequest",
    "parse_ftx_time",
]
