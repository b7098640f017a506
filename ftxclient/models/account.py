"""Account and position models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class Position(BaseModel):
    future: str
    side: str
    size: Decimal
    net_size: Decimal = Field(..., alias="netSize")
    cost: Decimal | None = None
    entry_price: Decimal | None = Field(None, alias="entryPrice")
    estimated_liquidation_price: Decimal | None = Field(None, alias="estimatedLiquidationPrice")
    initial_margin_requirement: Decimal | None = Field(None, alias="initialMarginRequirement")
    maintenance_margin_requirement: Decimal | None = Field(
        None, alias="maintenanceMarginRequirement"
    )
    long_order_size: Decimal | None = Field(None, alias="longOrderSize")
    short_order_size: Decimal | None = Field(None, alias="shortOrderSize")
    open_size: Decimal | None = Field(None, alias="openSize")
    realized_pnl: Decimal | None = Field(None, alias="realizedPnl")
    unrealized_pnl: Decimal | None = Field(None, alias="unrealizedPnl")
    collateral_used: Decimal | None = Field(None, alias="collateralUsed")
    recent_average_open_price: Decimal | None = Field(None, alias="recentAverageOpenPrice")

    model_config = _MODEL_CONFIG


class AccountInformation(BaseModel):
    username: str
    collateral: Decimal
    free_collateral: Decimal = Field(..., alias="freeCollateral")
    total_account_value: Decimal = Field(..., alias="totalAccountValue")
    total_position_size: Decimal | None = Field(None, alias="totalPositionSize")
    initial_margin_requirement: Decimal | None = Field(None, alias="initialMarginRequirement")
    maintenance_margin_requirement: Decimal | None = Field(
        None, alias="maintenanceMarginRequirement"
    )
    margin_fraction: Decimal | None = Field(None, alias="marginFraction")
    open_margin_fraction: Decimal | None = Field(None, alias="openMarginFraction")
    maker_fee: Decimal | None = Field(None, alias="makerFee")
    taker_fee: Decimal | None = Field(None, alias="takerFee")
    leverage: Decimal | None = None
    liquidating: bool = False
    backstop_provider: bool = Field(False, alias="backstopProvider")
    positions: list[Position] = Field(default_factory=list)

    model_config = _MODEL_CONFIG
