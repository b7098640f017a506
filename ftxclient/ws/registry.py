"""Subscription intent of one logical stream.

The registry is fixed at construction and outlives every physical
connection; its snapshot is what gets replayed after each reconnect.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..core.enums import Channel, Operation
from ..models import StreamEvent, WSRequest


class SubscriptionRegistry:
    """Ordered, de-duplicated set of subscription requests.

    Duplicates by ``(channel, market, op)`` collapse to the latest request
    while keeping the position of the first occurrence.
    """

    def __init__(self, requests: Iterable[WSRequest]) -> None:
        entries: dict[tuple[Channel, str | None, Operation], WSRequest] = {}
        for request in requests:
            entries[(request.channel, request.market, request.op)] = request
        if not entries:
            raise ValueError("at least one subscription request is required")
        self._requests: tuple[WSRequest, ...] = tuple(entries.values())
        self._channels = frozenset(r.channel for r in self._requests)

    def snapshot(self) -> tuple[WSRequest, ...]:
        """Requests in insertion order."""
        return self._requests

    @property
    def channels(self) -> frozenset[Channel]:
        return self._channels

    @property
    def is_private(self) -> bool:
        return any(r.is_private for r in self._requests)

    def matches(self, event: StreamEvent) -> bool:
        """Whether an event belongs to one of the registered subscriptions.

        Events without a channel (server-wide notices) always match.
        """
        if event.channel is None:
            return True
        for request in self._requests:
            if request.channel != event.channel:
                continue
            if request.market is None or event.market is None or request.market == event.market:
                return True
        return False

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self):
        return iter(self._requests)

    def __repr__(self) -> str:
        keys = ", ".join(f"{r.channel.value}:{r.market or '*'}" for r in self._requests)
        return f"SubscriptionRegistry([{keys}])"
