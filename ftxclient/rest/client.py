"""REST client for market data, account, order, fill and wallet endpoints.

Authenticated calls are signed over ``ts + METHOD + path[?query][body]``
where ``path`` includes the ``/api`` prefix and ``query`` is exactly the
encoded query string that is sent. Timestamps are shifted by
``server_time_offset`` (see ``sync_server_time``).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from urllib.parse import quote, urlsplit

from pydantic import BaseModel, TypeAdapter

from ..core.config import Credentials, Region, get_header_prefix, get_otc_url, get_rest_url
from ..core.exceptions import AuthRequiredError, ValidationError
from ..models import (
    AccountInformation,
    Balance,
    CancelAllOrdersPayload,
    CreateWithdrawPayload,
    CreateWithdrawResult,
    Fill,
    GetFillsParams,
    GetHistoricalPricesParams,
    GetOrdersHistoryParams,
    GetTradesParams,
    HistoricalPrice,
    Market,
    ModifyOrderPayload,
    Order,
    OrderBook,
    PlaceOrderPayload,
    Position,
    Trade,
)
from ..models.types import FTXTime
from ..utils.http import HTTPClient
from ..utils.params import encode_query, prepare_query_params
from ..utils.signing import auth_headers, rest_signature_payload, sign, timestamp_ms

logger = logging.getLogger(__name__)

_MARKETS = TypeAdapter(list[Market])
_TRADES = TypeAdapter(list[Trade])
_CANDLES = TypeAdapter(list[HistoricalPrice])
_POSITIONS = TypeAdapter(list[Position])
_ORDERS = TypeAdapter(list[Order])
_FILLS = TypeAdapter(list[Fill])
_BALANCES = TypeAdapter(list[Balance])
_SERVER_TIME = TypeAdapter(FTXTime)


def _json_default(value: Any) -> Any:
    # Prices and sizes go out as JSON numbers
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(payload: BaseModel | dict[str, Any]) -> bytes:
    """Serialise a request body with wire field names, dropping ``None``."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(payload, default=_json_default, separators=(",", ":")).encode("utf-8")


class RESTClient:
    """Async client for the exchange REST API.

    Public endpoints work without credentials; account, order, fill and
    wallet endpoints raise ``AuthRequiredError`` when none are configured.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        region: Region = Region.COM,
        *,
        server_time_offset: float = 0.0,
        timeout: float = 30.0,
        http: HTTPClient | None = None,
    ) -> None:
        self.credentials = credentials
        self.region = Region(region)
        self.base_url = get_rest_url(self.region)
        self.server_time_offset = server_time_offset
        self._header_prefix = get_header_prefix(self.region)
        self._http = http or HTTPClient(timeout=timeout)

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> RESTClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ----------------------
    # Request plumbing
    # ----------------------
    def _url(self, path: str, params: BaseModel | dict[str, Any] | None = None) -> str:
        query = encode_query(prepare_query_params(params))
        url = f"{self.base_url}{path}"
        return f"{url}?{query}" if query else url

    def _sign_headers(self, method: str, url: str, body: bytes | None) -> dict[str, str]:
        if self.credentials is None:
            raise AuthRequiredError("credentials is required")
        parts = urlsplit(url)
        ts = timestamp_ms(self.server_time_offset)
        payload = rest_signature_payload(ts, method, parts.path, parts.query, body)
        signature = sign(self.credentials.api_secret, payload)
        headers = auth_headers(self.credentials, ts, signature, prefix=self._header_prefix)
        headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: BaseModel | dict[str, Any] | None = None,
        body: BaseModel | dict[str, Any] | None = None,
        auth: bool = False,
    ) -> Any:
        url = self._url(path, params)
        data = encode_body(body) if body is not None else None
        headers = self._sign_headers(method, url, data) if auth else None
        logger.debug(f"{method} {url}")
        return await self._http.request(method, url, data=data, headers=headers)

    # ----------------------
    # Markets
    # ----------------------
    async def get_markets(self) -> list[Market]:
        return _MARKETS.validate_python(await self._request("GET", "/markets"))

    async def get_market(self, name: str) -> Market:
        result = await self._request("GET", f"/markets/{_segment(name)}")
        return Market.model_validate(result)

    async def get_order_book(self, market: str, depth: int | None = None) -> OrderBook:
        """Fetch the top of the order book.

        Args:
            market: Market name (e.g., "BTC/USD")
            depth: Levels per side; the exchange default (20) when omitted

        Returns:
            OrderBook with bids descending and asks ascending
        """
        if depth is not None and not 1 <= depth <= 100:
            raise ValidationError("depth must be between 1 and 100")
        params = {"depth": depth} if depth is not None else None
        result = await self._request("GET", f"/markets/{_segment(market)}/orderbook", params=params)
        return OrderBook.model_validate(result)

    async def get_trades(self, market: str, params: GetTradesParams | None = None) -> list[Trade]:
        result = await self._request("GET", f"/markets/{_segment(market)}/trades", params=params)
        return _TRADES.validate_python(result)

    async def get_historical_prices(
        self, market: str, params: GetHistoricalPricesParams
    ) -> list[HistoricalPrice]:
        result = await self._request("GET", f"/markets/{_segment(market)}/candles", params=params)
        return _CANDLES.validate_python(result)

    # ----------------------
    # Account
    # ----------------------
    async def get_account_information(self) -> AccountInformation:
        result = await self._request("GET", "/account", auth=True)
        return AccountInformation.model_validate(result)

    async def get_positions(self, show_avg_price: bool = False) -> list[Position]:
        params = {"showAvgPrice": True} if show_avg_price else None
        return _POSITIONS.validate_python(
            await self._request("GET", "/positions", params=params, auth=True)
        )

    async def change_account_leverage(self, leverage: int) -> None:
        if leverage <= 0:
            raise ValidationError("leverage must be positive")
        await self._request("POST", "/account/leverage", body={"leverage": leverage}, auth=True)

    # ----------------------
    # Orders
    # ----------------------
    async def get_open_orders(self, market: str | None = None) -> list[Order]:
        params = {"market": market} if market else None
        return _ORDERS.validate_python(
            await self._request("GET", "/orders", params=params, auth=True)
        )

    async def get_orders_history(self, params: GetOrdersHistoryParams | None = None) -> list[Order]:
        return _ORDERS.validate_python(
            await self._request("GET", "/orders/history", params=params, auth=True)
        )

    async def get_order(self, order_id: int) -> Order:
        return Order.model_validate(await self._request("GET", f"/orders/{order_id}", auth=True))

    async def get_order_by_client_id(self, client_id: str) -> Order:
        path = f"/orders/by_client_id/{_segment(client_id)}"
        result = await self._request("GET", path, auth=True)
        return Order.model_validate(result)

    async def place_order(self, payload: PlaceOrderPayload) -> Order:
        """Place a limit or market order.

        Raises:
            APIError: The exchange rejected the order
        """
        result = await self._request("POST", "/orders", body=payload, auth=True)
        order = Order.model_validate(result)
        logger.info(
            f"placed {order.side.value} {order.type.value} order {order.id} on {order.market}"
        )
        return order

    async def modify_order(self, order_id: int, payload: ModifyOrderPayload) -> Order:
        """Modify price and/or size; the exchange replaces the order and returns the new one."""
        result = await self._request(
            "POST", f"/orders/{order_id}/modify", body=payload, auth=True
        )
        return Order.model_validate(result)

    async def modify_order_by_client_id(self, client_id: str, payload: ModifyOrderPayload) -> Order:
        result = await self._request(
            "POST", f"/orders/by_client_id/{_segment(client_id)}/modify", body=payload, auth=True
        )
        return Order.model_validate(result)

    async def cancel_order(self, order_id: int) -> None:
        await self._request("DELETE", f"/orders/{order_id}", auth=True)

    async def cancel_order_by_client_id(self, client_id: str) -> None:
        await self._request("DELETE", f"/orders/by_client_id/{_segment(client_id)}", auth=True)

    async def cancel_all_orders(self, payload: CancelAllOrdersPayload | None = None) -> None:
        await self._request(
            "DELETE", "/orders", body=payload or CancelAllOrdersPayload(), auth=True
        )

    # ----------------------
    # Fills and wallet
    # ----------------------
    async def get_fills(self, params: GetFillsParams | None = None) -> list[Fill]:
        return _FILLS.validate_python(
            await self._request("GET", "/fills", params=params, auth=True)
        )

    async def get_balances(self) -> list[Balance]:
        return _BALANCES.validate_python(
            await self._request("GET", "/wallet/balances", auth=True)
        )

    async def withdraw(self, payload: CreateWithdrawPayload) -> CreateWithdrawResult:
        result = await self._request("POST", "/wallet/withdrawals", body=payload, auth=True)
        return CreateWithdrawResult.model_validate(result)

    # ----------------------
    # Server time
    # ----------------------
    async def get_server_time(self) -> datetime:
        result = await self._http.request("GET", f"{get_otc_url(self.region)}/time")
        return _SERVER_TIME.validate_python(result)

    async def sync_server_time(self) -> float:
        """Measure the server clock and use it for signing timestamps.

        Returns:
            The new offset in seconds (server minus local)
        """
        server_time = await self.get_server_time()
        self.server_time_offset = (server_time - datetime.now(timezone.utc)).total_seconds()
        logger.info(f"server time offset set to {self.server_time_offset:.3f}s")
        return self.server_time_offset


def _segment(value: str) -> str:
    # Market names contain "/" which must stay literal in the path
    return quote(value, safe="/")
