"""Endpoint tables and client configuration.

This module centralizes deployment URLs, authentication header prefixes and
the streaming configuration so the REST and WebSocket layers share a single
source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Region(str, Enum):
    """Exchange deployment."""

    COM = "com"
    US = "us"

    def __str__(self) -> str:
        return self.value


# REST base URLs (all endpoint paths are appended to these)
REST_URLS = {
    Region.COM: "https://ftx.com/api",
    Region.US: "https://ftx.us/api",
}

# Server time lives on the OTC host
OTC_URLS = {
    Region.COM: "https://otc.ftx.com/api",
    Region.US: "https://otc.ftx.us/api",
}

WS_URLS = {
    Region.COM: "wss://ftx.com/ws/",
    Region.US: "wss://ftx.us/ws/",
}

# Authentication headers are <prefix>-KEY, <prefix>-SIGN, <prefix>-TS, <prefix>-SUBACCOUNT
HEADER_PREFIXES = {
    Region.COM: "FTX",
    Region.US: "FTXUS",
}


def get_rest_url(region: Region = Region.COM) -> str:
    """Get the REST base URL for a deployment.

    Examples:
        >>> get_rest_url(Region.COM)
        'https://ftx.com/api'
        >>> get_rest_url(Region.US)
        'https://ftx.us/api'
    """
    return REST_URLS[Region(region)]


def get_otc_url(region: Region = Region.COM) -> str:
    return OTC_URLS[Region(region)]


def get_ws_url(region: Region = Region.COM) -> str:
    """Get the WebSocket endpoint for a deployment.

    Examples:
        >>> get_ws_url(Region.US)
        'wss://ftx.us/ws/'
    """
    return WS_URLS[Region(region)]


def get_header_prefix(region: Region = Region.COM) -> str:
    return HEADER_PREFIXES[Region(region)]


@dataclass(frozen=True)
class Credentials:
    """API key pair plus optional sub-account.

    The secret is excluded from ``repr`` so credentials can be logged safely.
    """

    api_key: str
    api_secret: str = field(repr=False)
    subaccount: str | None = None

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_secret:
            raise ValueError("api_key and api_secret are required")


@dataclass(frozen=True)
class StreamConfig:
    """Streaming settings, read once per connect attempt.

    ``max_reconnect_delay`` and ``jitter`` are off by default, which gives the
    plain ``reconnect_interval * 2**attempt`` schedule.
    """

    timeout: float = 60.0
    reconnect_count: int = 10
    reconnect_interval: float = 1.0
    max_reconnect_delay: float | None = None
    jitter: float = 0.0  # fraction, e.g. 0.2 = +/-20%
    close_grace: float = 1.0
    write_wait: float = 10.0
    max_size: int | None = None  # bytes; None = websockets default
    max_queue: int | None = 1024  # frames buffered by websockets
    queue_size: int = 1  # events buffered per stage
    debug: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.reconnect_count < 0:
            raise ValueError("reconnect_count must be >= 0")
        if self.reconnect_interval < 0:
            raise ValueError("reconnect_interval must be >= 0")
        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")
        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

    @property
    def ping_interval(self) -> float:
        """Pings go out at 9/10 of the read timeout."""
        return self.timeout * 9 / 10
