"""Order models and order-entry payloads."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.enums import OrderStatus, OrderType, Side

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class Order(BaseModel):
    """Account order as reported by REST and the orders channel."""

    id: int
    client_id: str | None = Field(None, alias="clientId")
    market: str
    future: str | None = None
    type: OrderType
    side: Side
    price: Decimal | None = None  # null for market orders
    size: Decimal
    filled_size: Decimal = Field(Decimal("0"), alias="filledSize")
    remaining_size: Decimal = Field(Decimal("0"), alias="remainingSize")
    avg_fill_price: Decimal | None = Field(None, alias="avgFillPrice")
    status: OrderStatus
    created_at: datetime | None = Field(None, alias="createdAt")
    reduce_only: bool = Field(False, alias="reduceOnly")
    ioc: bool = False
    post_only: bool = Field(False, alias="postOnly")

    model_config = _MODEL_CONFIG

    @property
    def is_closed(self) -> bool:
        return self.status == OrderStatus.CLOSED


class PlaceOrderPayload(BaseModel):
    """Body of a new order request."""

    market: str = Field(..., min_length=1)
    side: Side
    type: OrderType
    size: Decimal = Field(..., gt=0)
    price: Decimal | None = None
    reduce_only: bool | None = Field(None, alias="reduceOnly")
    ioc: bool | None = None
    post_only: bool | None = Field(None, alias="postOnly")
    client_id: str | None = Field(None, alias="clientId")

    model_config = _MODEL_CONFIG

    @model_validator(mode="after")
    def validate_price(self) -> PlaceOrderPayload:
        """Limit orders need a price; market orders must not carry one."""
        if self.type == OrderType.LIMIT and self.price is None:
            raise ValueError("price is required for limit orders")
        if self.type == OrderType.MARKET and self.price is not None:
            raise ValueError("price must be omitted for market orders")
        return self


class ModifyOrderPayload(BaseModel):
    price: Decimal | None = None
    size: Decimal | None = None
    client_id: str | None = Field(None, alias="clientId")

    model_config = _MODEL_CONFIG

    @model_validator(mode="after")
    def validate_change(self) -> ModifyOrderPayload:
        if self.price is None and self.size is None:
            raise ValueError("price or size is required")
        return self


class CancelAllOrdersPayload(BaseModel):
    market: str | None = None
    conditional_orders_only: bool | None = Field(None, alias="conditionalOrdersOnly")
    limit_orders_only: bool | None = Field(None, alias="limitOrdersOnly")

    model_config = _MODEL_CONFIG


class GetOrdersHistoryParams(BaseModel):
    market: str | None = None
    limit: int | None = Field(None, gt=0)
    start_time: int | None = None
    end_time: int | None = None

    model_config = _MODEL_CONFIG
