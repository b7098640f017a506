"""Shared field types for exchange payloads."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_epoch(value: Decimal) -> datetime:
    try:
        seconds, fraction = divmod(value, 1)
        return _EPOCH + timedelta(seconds=int(seconds), microseconds=int(fraction * 1_000_000))
    except (ArithmeticError, ValueError) as exc:
        raise ValueError(f"epoch timestamp out of range: {value}") from exc


def parse_ftx_time(value: Any) -> Any:
    """Decode a timestamp sent either as epoch seconds or as ISO-8601.

    Numeric decoding is tried first; the integer part gives whole seconds and
    the fractional part the sub-second component (truncated to microseconds).
    Anything else is left for pydantic's own datetime parsing to reject.
    Epoch values outside the datetime range raise ``ValueError``.

    Examples:
        >>> parse_ftx_time(1616581210.5)
        datetime.datetime(2021, 3, 24, 10, 20, 10, 500000, tzinfo=datetime.timezone.utc)
        >>> parse_ftx_time("2021-03-24T10:20:10.500000+00:00")
        datetime.datetime(2021, 3, 24, 10, 20, 10, 500000, tzinfo=datetime.timezone.utc)
    """
    if value is None or isinstance(value, (datetime, bool)):
        return value
    if isinstance(value, (int, float, Decimal)):
        return _from_epoch(Decimal(str(value)))
    if isinstance(value, str):
        try:
            number = Decimal(value)
        except InvalidOperation:
            number = None
        if number is not None:
            return _from_epoch(number)
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return value
    return value


FTXTime = Annotated[datetime, BeforeValidator(parse_ftx_time)]
