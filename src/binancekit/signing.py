"""
Request signing for SIGNED (TRADE / USER_DATA) endpoints.

Binance verifies an HMAC-SHA256 of the query string exactly as transmitted,
so parameters are serialized once, in lexicographic key order, and the
signature is appended to that same string.

Usage:
    query = build_signed_request({"symbol": "BTCUSDT"}, recv_window=5000)
    url = f"{host}{path}?{query}&signature={signature(query, secret)}"
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from urllib.parse import quote

from binancekit.clock import Clock, timestamp_ms

RECV_WINDOW_KEY = "recvWindow"
TIMESTAMP_KEY = "timestamp"
SIGNATURE_KEY = "signature"


def _escape(text: str) -> str:
    # Unreserved characters (RFC 3986) pass through, so plain values stay literal.
    return quote(text, safe="-_.~")


def build_request(parameters: Mapping[str, str]) -> str:
    """Serialize parameters as ``k1=v1&k2=v2`` in sorted key order."""
    return "&".join(
        f"{_escape(key)}={_escape(str(value))}" for key, value in sorted(parameters.items())
    )


def build_signed_request(
    parameters: Mapping[str, str],
    recv_window: int = 0,
    clock: Clock | None = None,
) -> str:
    """
    Build the query string that will be signed.

    Args:
        parameters: Request parameters. Not mutated.
        recv_window: Server-side validity window in ms; omitted when 0.
        clock: Time source for the ``timestamp`` parameter (default: wall clock).

    Returns:
        Canonical query string including ``recvWindow`` and ``timestamp``.

    Raises:
        ClockError: If the clock cannot produce a time since the epoch.
    """
    signed = dict(parameters)
    if recv_window > 0:
        signed[RECV_WINDOW_KEY] = str(recv_window)
    signed[TIMESTAMP_KEY] = str(timestamp_ms(clock))
    return build_request(signed)


def signature(query: str, secret: str) -> str:
    """Hex-encoded HMAC-SHA256 of ``query`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256).hexdigest()


def append_signature(query: str, secret: str) -> str:
    """Append ``signature=<hex>`` to an already serialized query."""
    digest = signature(query, secret)
    if not query:
        return f"{SIGNATURE_KEY}={digest}"
    return f"{query}&{SIGNATURE_KEY}={digest}"


def sign(parameters: Mapping[str, str], secret: str) -> str:
    """Serialize ``parameters`` and append their signature."""
    return append_signature(build_request(parameters), secret)
