"""Wallet models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class Balance(BaseModel):
    coin: str
    free: Decimal
    total: Decimal
    usd_value: Decimal | None = Field(None, alias="usdValue")
    spot_borrow: Decimal | None = Field(None, alias="spotBorrow")
    available_without_borrow: Decimal | None = Field(None, alias="availableWithoutBorrow")

    model_config = _MODEL_CONFIG


class CreateWithdrawPayload(BaseModel):
    coin: str = Field(..., min_length=1)
    size: Decimal = Field(..., gt=0)
    address: str = Field(..., min_length=1)
    tag: str | None = None
    method: str | None = None
    password: str | None = None
    code: str | None = None

    model_config = _MODEL_CONFIG


class CreateWithdrawResult(BaseModel):
    id: int
    coin: str
    address: str | None = None
    tag: str | None = None
    fee: Decimal | None = None
    size: Decimal
    status: str
    txid: str | None = None
    time: datetime | None = None

    model_config = _MODEL_CONFIG
