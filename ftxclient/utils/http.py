"""HTTP client helper."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..core.exceptions import APIError

logger = logging.getLogger(__name__)


class HTTPClient:
    """Async HTTP client wrapper.

    Unwraps the exchange's ``{"success": ..., "result": ..., "error": ...}``
    response envelope and raises ``APIError`` when ``success`` is false.
    """

    def __init__(self, base_url: str | None = None, timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def build_url(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def request(
        self,
        method: str,
        url: str,
        *,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the ``result`` field of the response.

        ``url`` must already carry its encoded query string, so that what is
        signed is exactly what is sent.
        """
        url = self.build_url(url)
        try:
            async with self.session.request(method, url, data=data, headers=headers) as response:
                status = response.status
                try:
                    payload = await response.json(content_type=None)
                except ValueError as exc:
                    raise APIError(
                        f"Status Code: {status}\tError: invalid JSON response", status_code=status
                    ) from exc
        except aiohttp.ClientError as exc:
            logger.warning(f"{method} {url} failed: {exc}")
            raise APIError(f"request failed: {exc}") from exc

        if not isinstance(payload, dict) or not payload.get("success"):
            error = payload.get("error") if isinstance(payload, dict) else payload
            raise APIError(f"Status Code: {status}\tError: {error}", status_code=status)
        return payload.get("result")

    async def get(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """GET request."""
        return await self.request("GET", url, headers=headers)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
