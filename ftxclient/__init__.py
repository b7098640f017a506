"""ftxclient - Async REST and WebSocket client for the FTX exchange API."""

from .client import Client
from .core import (
    APIError,
    AuthRequiredError,
    Channel,
    Credentials,
    DecodeError,
    DialFailedError,
    FTXError,
    OrderStatus,
    OrderType,
    ReadFailedError,
    ReconnectExhaustedError,
    Region,
    Resolution,
    ResponseType,
    Side,
    StreamClosedError,
    StreamConfig,
    StreamError,
    ValidationError,
)
from .models import (
    AccountInformation,
    Balance,
    Fill,
    FillEvent,
    HistoricalPrice,
    Market,
    NoticeEvent,
    Order,
    OrderBook,
    OrderBookEvent,
    OrderEvent,
    PlaceOrderPayload,
    Position,
    Ticker,
    TickerEvent,
    Trade,
    TradeEvent,
)
from .rest import RESTClient
from .ws import Stream, StreamState, Subscription

__version__ = "0.1.0"

__all__ = [
    # Clients
    "Client",
    "RESTClient",
    "Stream",
    "Subscription",
    "StreamState",
    # Configuration
    "Credentials",
    "Region",
    "StreamConfig",
    # Enums
    "Channel",
    "OrderStatus",
    "OrderType",
    "Resolution",
    "ResponseType",
    "Side",
    # Models
    "AccountInformation",
    "Balance",
    "Fill",
    "HistoricalPrice",
    "Market",
    "Order",
    "OrderBook",
    "PlaceOrderPayload",
    "Position",
    "Ticker",
    "Trade",
    # Stream events
    "FillEvent",
    "NoticeEvent",
    "OrderBookEvent",
    "OrderEvent",
    "TickerEvent",
    "TradeEvent",
    # Exceptions
    "FTXError",
    "APIError",
    "AuthRequiredError",
    "ValidationError",
    "StreamError",
    "DialFailedError",
    "ReadFailedError",
    "StreamClosedError",
    "DecodeError",
    "ReconnectExhaustedError",
]
