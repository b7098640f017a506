"""Outbound WebSocket request frames."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.enums import Channel, Operation


class WSRequest(BaseModel):
    """Subscribe/unsubscribe request for one channel, optionally for one market.

    Requests are immutable and hashable; ``key`` identifies a subscription
    independent of its operation.
    """

    channel: Channel
    market: str | None = None
    op: Operation = Operation.SUBSCRIBE

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_scope(self) -> WSRequest:
        if self.op == Operation.LOGIN:
            raise ValueError("login frames are built with LoginRequest")
        if self.channel.is_symbol_scoped and not self.market:
            raise ValueError(f"market is required for the {self.channel.value} channel")
        return self

    @property
    def key(self) -> tuple[Channel, str | None]:
        return (self.channel, self.market)

    @property
    def is_private(self) -> bool:
        return self.channel.is_private

    def with_op(self, op: Operation) -> WSRequest:
        return self.model_copy(update={"op": op})

    def to_frame(self) -> dict[str, Any]:
        """JSON-ready frame; ``market`` is omitted for account-scoped channels."""
        return self.model_dump(mode="json", exclude_none=True)


class LoginArgs(BaseModel):
    key: str
    sign: str
    time: int
    subaccount: str | None = None

    model_config = ConfigDict(frozen=True)


class LoginRequest(BaseModel):
    """Authentication frame sent before the first private subscription."""

    op: Operation = Field(default=Operation.LOGIN, frozen=True)
    args: LoginArgs

    model_config = ConfigDict(frozen=True)

    def to_frame(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
