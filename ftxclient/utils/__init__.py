"""Utility helpers."""

from .http import HTTPClient
from .params import encode_query, prepare_query_params
from .signing import (
    auth_headers,
    rest_signature_payload,
    sign,
    timestamp_ms,
    ws_login_payload,
)

__all__ = [
    "HTTPClient",
    "auth_headers",
    "encode_query",
    "prepare_query_params",
    "rest_signature_payload",
    "sign",
    "timestamp_ms",
    "ws_login_payload",
]
