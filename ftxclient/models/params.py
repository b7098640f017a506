"""Query parameter models for public market endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import Resolution


class GetTradesParams(BaseModel):
    limit: int | None = Field(None, gt=0)
    start_time: int | None = None
    end_time: int | None = None

    model_config = ConfigDict(frozen=True)


class GetHistoricalPricesParams(BaseModel):
    resolution: Resolution
    limit: int | None = Field(None, gt=0)
    start_time: int | None = None
    end_time: int | None = None

    model_config = ConfigDict(frozen=True)
