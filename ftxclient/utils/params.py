"""Query-string helpers."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def prepare_query_params(params: BaseModel | dict[str, Any] | None) -> dict[str, str]:
    """Flatten a params model (or dict) to string query parameters.

    ``None`` values are dropped, enums become their wire values and field
    aliases are used as parameter names.
    """
    if params is None:
        return {}
    if isinstance(params, BaseModel):
        raw = params.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        raw = {k: v for k, v in params.items() if v is not None}
    return {key: _format_value(value) for key, value in raw.items()}


def encode_query(params: dict[str, str]) -> str:
    """Encode parameters sorted by key so the signed and sent query are identical."""
    return urlencode(sorted(params.items()))
