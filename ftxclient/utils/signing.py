"""HMAC-SHA256 request signing for REST calls and WebSocket login."""

from __future__ import annotations

import hashlib
import hmac
import time

from ..core.config import Credentials

WS_LOGIN_SUFFIX = "websocket_login"


def sign(secret: str, payload: str | bytes) -> str:
    """Return the hex HMAC-SHA256 of ``payload`` keyed with ``secret``.

    The payload is signed exactly as given; no validation is performed.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def timestamp_ms(offset: float = 0.0) -> int:
    """Current UTC epoch time in milliseconds, shifted by ``offset`` seconds.

    ``offset`` is the measured server-minus-local clock difference.
    """
    return int((time.time() + offset) * 1000)


def rest_signature_payload(
    ts: int,
    method: str,
    path: str,
    query: str = "",
    body: bytes | str | None = None,
) -> str:
    """Build ``ts + METHOD + path [+ '?' + query] [+ body]``."""
    payload = f"{ts}{method.upper()}{path}"
    if query:
        payload += f"?{query}"
    if body:
        payload += body.decode("utf-8") if isinstance(body, bytes) else body
    return payload


def ws_login_payload(ts: int) -> str:
    return f"{ts}{WS_LOGIN_SUFFIX}"


def auth_headers(
    credentials: Credentials,
    ts: int,
    signature: str,
    prefix: str = "FTX",
) -> dict[str, str]:
    """The logical KEY/SIGN/TS[/SUBACCOUNT] headers under a deployment prefix."""
    headers = {
        f"{prefix}-KEY": credentials.api_key,
        f"{prefix}-SIGN": signature,
        f"{prefix}-TS": str(ts),
    }
    if credentials.subaccount:
        headers[f"{prefix}-SUBACCOUNT"] = credentials.subaccount
    return headers
