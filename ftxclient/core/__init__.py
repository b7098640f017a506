"""Core components."""

from .config import (
    Credentials,
    Region,
    StreamConfig,
    get_header_prefix,
    get_otc_url,
    get_rest_url,
    get_ws_url,
)
from .enums import (
    Channel,
    Liquidity,
    Operation,
    OrderStatus,
    OrderType,
    Resolution,
    ResponseType,
    Side,
)
from .exceptions import (
    APIError,
    AuthRequiredError,
    DecodeError,
    DialFailedError,
    FTXError,
    ReadFailedError,
    ReconnectExhaustedError,
    StreamClosedError,
    StreamError,
    ValidationError,
)

__all__ = [
    "Channel",
    "Operation",
    "ResponseType",
    "Side",
    "OrderType",
    "OrderStatus",
    "Liquidity",
    "Resolution",
    "Region",
    "Credentials",
    "StreamConfig",
    "get_rest_url",
    "get_otc_url",
    "get_ws_url",
    "get_header_prefix",
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
