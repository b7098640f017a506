"""Unified client combining the REST API and WebSocket streams.

Both halves share credentials, region and the measured server-time offset,
so after ``sync_server_time`` REST signatures and the stream login use the
same clock.
"""

from __future__ import annotations

from .core.config import Credentials, Region, StreamConfig
from .rest.client import RESTClient
from .ws.stream import Stream


class Client:
    """REST and streaming access for one account on one deployment."""

    def __init__(
        self,
        api_key: str | None = None,
        api_secret: str | None = None,
        *,
        subaccount: str | None = None,
        region: Region = Region.COM,
        stream_config: StreamConfig | None = None,
        rest: RESTClient | None = None,
        stream: Stream | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key; omit together with api_secret for public data only
            api_secret: API secret
            subaccount: Optional sub-account name sent with every private call
            region: Deployment (ftx.com or ftx.us)
            stream_config: Initial streaming configuration
            rest: Optional REST client instance
            stream: Optional Stream instance
        """
        if (api_key is None) != (api_secret is None):
            raise ValueError("api_key and api_secret must be given together")
        self.credentials = (
            Credentials(api_key, api_secret, subaccount) if api_key is not None else None
        )
        self.region = Region(region)
        self.rest = rest or RESTClient(self.credentials, self.region)
        self.stream = stream or Stream(stream_config, self.credentials, self.region)
        self._owns_rest = rest is None

    @property
    def server_time_offset(self) -> float:
        return self.rest.server_time_offset

    async def sync_server_time(self) -> float:
        """Measure the server clock and apply the offset to REST and streams."""
        offset = await self.rest.sync_server_time()
        self.stream.server_time_offset = offset
        return offset

    async def close(self) -> None:
        if self._owns_rest:
            await self.rest.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Client(region={self.region.value}, authenticated={self.credentials is not None})"
