"""Core enumerations for exchange wire values.

Architecture:
    Every enum is a string (or integer) enum whose values are exactly what the
    exchange puts on the wire, so models can validate raw JSON directly and
    requests serialise without a mapping table.

Key Types:
    - Channel: Streaming channel names (public and private)
    - Operation: WebSocket request operations
    - ResponseType: Inbound envelope types
    - Side, OrderType, OrderStatus, Liquidity: Trading vocabulary
    - Resolution: Candle resolutions in seconds
"""

from enum import Enum, IntEnum


class Channel(str, Enum):
    """Streaming channel names."""

    ORDER_BOOK = "orderbook"
    TRADES = "trades"
    TICKER = "ticker"
    MARKETS = "markets"
    FILLS = "fills"
    ORDERS = "orders"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    @property
    def is_private(self) -> bool:
        """Whether the channel carries account data and requires login."""
        return self in _PRIVATE_CHANNELS

    @property
    def is_symbol_scoped(self) -> bool:
        """Whether subscriptions on this channel name a market."""
        return self in _SYMBOL_CHANNELS


_PRIVATE_CHANNELS = frozenset({Channel.FILLS, Channel.ORDERS})
_SYMBOL_CHANNELS = frozenset({Channel.ORDER_BOOK, Channel.TRADES, Channel.TICKER})


class Operation(str, Enum):
    """WebSocket request operations."""

    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    LOGIN = "login"

    def __str__(self) -> str:
        return self.value


class ResponseType(str, Enum):
    """Type field of inbound envelopes."""

    ERROR = "error"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    INFO = "info"
    PARTIAL = "partial"
    UPDATE = "update"

    def __str__(self) -> str:
        return self.value

    @property
    def is_control(self) -> bool:
        """Subscription acknowledgements carry no caller-visible data."""
        return self in (ResponseType.SUBSCRIBED, ResponseType.UNSUBSCRIBED)


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    LIMIT = "limit"
    MARKET = "market"


class OrderStatus(str, Enum):
    NEW = "new"
    OPEN = "open"
    CLOSED = "closed"


class Liquidity(str, Enum):
    MAKER = "maker"
    TAKER = "taker"


class Resolution(IntEnum):
    """Candle window length in seconds accepted by the historical prices endpoint."""

    SEC15 = 15
    MINUTE = 60
    MINUTE5 = 300
    MINUTE15 = 900
    HOUR = 3600
    HOUR4 = 14400
    DAY = 86400
