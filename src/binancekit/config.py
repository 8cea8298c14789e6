"""
Client configuration and credentials.

Credentials can come from the environment (BINANCE_API_KEY /
BINANCE_SECRET_KEY); without them only public endpoints are usable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

API_KEY_ENV = "BINANCE_API_KEY"
SECRET_KEY_ENV = "BINANCE_SECRET_KEY"

MAX_RECV_WINDOW_MS = 60000


@dataclass(frozen=True)
class Credentials:
    """
    API credentials, immutable for the lifetime of a client.

    Attributes:
        api_key: Value for the X-MBX-APIKEY header ("" when absent).
        secret_key: HMAC key for signed requests ("" when absent).
    """

    api_key: str = ""
    secret_key: str = field(default="", repr=False)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def can_sign(self) -> bool:
        return bool(self.secret_key)

    @classmethod
    def from_env(cls) -> Credentials:
        """Read credentials from BINANCE_API_KEY / BINANCE_SECRET_KEY."""
        return cls(
            api_key=os.environ.get(API_KEY_ENV, ""),
            secret_key=os.environ.get(SECRET_KEY_ENV, ""),
        )


@dataclass
class ClientConfig:
    """
    Endpoints and request defaults.

    Attributes:
        rest_api_endpoint: Spot REST base URL.
        ws_endpoint: Spot WebSocket base URL.
        futures_rest_api_endpoint: USD-M futures REST base URL.
        futures_ws_endpoint: USD-M futures WebSocket base URL.
        recv_window: recvWindow for signed requests (ms, 0 disables).
        cache_ttl_s: Exchange info cache freshness window.
        ws_close_timeout_s: How long disconnect() waits for the close ack.
    """

    rest_api_endpoint: str = "https://api.binance.com"
    ws_endpoint: str = "wss://stream.binance.com:9443"
    futures_rest_api_endpoint: str = "https://fapi.binance.com"
    futures_ws_endpoint: str = "wss://fstream.binance.com"
    recv_window: int = 5000
    cache_ttl_s: float = 600.0
    ws_close_timeout_s: float = 0.0

    def __post_init__(self) -> None:
        for name in ("rest_api_endpoint", "futures_rest_api_endpoint"):
            value = getattr(self, name)
            if not value.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL, got {value!r}")
        for name in ("ws_endpoint", "futures_ws_endpoint"):
            value = getattr(self, name)
            if not value.startswith(("ws://", "wss://")):
                raise ValueError(f"{name} must be a ws(s) URL, got {value!r}")
        if not 0 <= self.recv_window <= MAX_RECV_WINDOW_MS:
            raise ValueError(
                f"recv_window must be in [0, {MAX_RECV_WINDOW_MS}], got {self.recv_window}"
            )
        if self.cache_ttl_s <= 0:
            raise ValueError(f"cache_ttl_s must be > 0, got {self.cache_ttl_s}")
        if self.ws_close_timeout_s < 0:
            raise ValueError(f"ws_close_timeout_s must be >= 0, got {self.ws_close_timeout_s}")

    @classmethod
    def testnet(cls, **overrides: object) -> ClientConfig:
        """Configuration pointing at the Binance test networks."""
        values: dict[str, object] = {
            "rest_api_endpoint": "https://testnet.binance.vision",
            "ws_endpoint": "wss://testnet.binance.vision",
            "futures_rest_api_endpoint": "https://testnet.binancefuture.com",
            "futures_ws_endpoint": "wss://fstream.binancefuture.com",
        }
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
