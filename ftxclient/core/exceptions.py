"""Custom exception hierarchy."""

from __future__ import annotations


class FTXError(Exception):
    """Base exception for all library errors."""

    pass


class APIError(FTXError):
    """REST call rejected by the exchange or failed in transport."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthRequiredError(FTXError):
    """A private endpoint or channel was requested without credentials."""

    pass


class ValidationError(FTXError):
    """Client-side request validation failure."""

    pass


class StreamError(FTXError):
    """Base exception for the streaming layer."""

    pass


class DialFailedError(StreamError):
    """The WebSocket connection could not be established."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ReadFailedError(StreamError):
    """Reading from an established connection failed.

    Transient: the supervisor answers it with a reconnect.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class StreamClosedError(ReadFailedError):
    """The peer ended the connection with a normal closure (code 1000)."""

    pass


class DecodeError(StreamError):
    """A single inbound frame could not be decoded.

    Never fatal to the connection; the frame is dropped.
    """

    def __init__(self, message: str, raw: str | bytes | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ReconnectExhaustedError(StreamError):
    """The reconnection budget was spent without re-establishing the stream."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
