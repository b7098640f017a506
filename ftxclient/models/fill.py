"""Fill (own trade execution) models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import Liquidity, Side
from .types import FTXTime


class Fill(BaseModel):
    """Execution of one of the account's orders."""

    id: int
    market: str | None = None
    future: str | None = None
    base_currency: str | None = Field(None, alias="baseCurrency")
    quote_currency: str | None = Field(None, alias="quoteCurrency")
    type: str | None = None
    side: Side
    price: Decimal
    size: Decimal
    order_id: int | None = Field(None, alias="orderId")
    trade_id: int | None = Field(None, alias="tradeId")
    fee: Decimal | None = None
    fee_currency: str | None = Field(None, alias="feeCurrency")
    fee_rate: Decimal | None = Field(None, alias="feeRate")
    liquidity: Liquidity | None = None
    time: FTXTime

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def notional(self) -> Decimal:
        return self.price * self.size


class GetFillsParams(BaseModel):
    """Query parameters for the fills endpoint."""

    market: str | None = None
    limit: int | None = Field(None, gt=0)
    start_time: int | None = None
    end_time: int | None = None
    order: str | None = None
    order_id: int | None = Field(None, alias="orderId")

    model_config = ConfigDict(frozen=True, populate_by_name=True)
