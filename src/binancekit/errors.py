"""
Error taxonomy for the Binance client.

Every fallible operation raises one of these. The core never retries:
callers branch on the exception type (back off on RateLimitError, abort on
ExchangeError) instead of matching error text.
"""

from __future__ import annotations


class BinanceError(Exception):
    """Base class for all client errors."""


class TransportError(BinanceError):
    """Connect/send/receive failure. The original exception is kept in __cause__."""


class HandshakeError(TransportError):
    """WebSocket upgrade failed. Terminal: the caller must reconnect from scratch."""


class DisconnectedError(TransportError):
    """Server sent a close frame."""

    def __init__(self, message: str, code: int | None = None, reason: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.reason = reason


class ConnectionClosedError(TransportError):
    """Stream ended without a close frame."""


class HttpStatusError(BinanceError):
    """Non-200 HTTP response."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class UnauthorizedError(HttpStatusError):
    """HTTP 401."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status=401)


class RateLimitError(HttpStatusError):
    """HTTP 429. Distinct from other status errors so callers can back off."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        used_weight: int | None = None,
        retry_after_ms: int | None = None,
    ) -> None:
        super().__init__(message, status=429)
        self.used_weight = used_weight
        self.retry_after_ms = retry_after_ms


class ServerError(HttpStatusError):
    """HTTP 500."""

    def __init__(self, message: str = "Internal Server Error") -> None:
        super().__init__(message, status=500)


class ServiceUnavailableError(HttpStatusError):
    """HTTP 503."""

    def __init__(self, message: str = "Service Unavailable") -> None:
        super().__init__(message, status=503)


class UnexpectedStatusError(HttpStatusError):
    """Any status without a dedicated error type."""

    def __init__(self, status: int) -> None:
        super().__init__(f"Received response: {status}", status=status)


class ExchangeError(HttpStatusError):
    """Structured business-rule rejection (HTTP 400 with {code, msg})."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"({code}) {message}", status=400)
        self.code = code
        self.message = message


class DecodeError(BinanceError):
    """Response body did not match the expected shape."""


class UnrecognizedEventError(BinanceError):
    """Streaming payload matched no known event shape."""

    def __init__(self, raw: str, message: str = "Unrecognized event") -> None:
        super().__init__(message)
        self.raw = raw


class NoCacheError(BinanceError):
    """Exchange info cache is empty or stale; call refresh()."""


class SymbolNotFoundError(BinanceError):
    """Symbol is absent from the cached exchange info."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Symbol not found: {symbol}")
        self.symbol = symbol


class ClockError(BinanceError):
    """Time source could not produce a duration since the epoch."""
