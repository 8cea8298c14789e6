"""
binancekit: asyncio client for the Binance REST and WebSocket APIs.

REST calls go through RestClient (signing, dispatch, error classification);
trading rules are cached in ExchangeInfoCache; push data arrives through
StreamSession as typed events.
"""

from binancekit.config import ClientConfig, Credentials
from binancekit.endpoints import DownloadLink, Futures, Sapi, Spot
from binancekit.errors import (
    BinanceError,
    ClockError,
    ConnectionClosedError,
    DecodeError,
    DisconnectedError,
    ExchangeError,
    HandshakeError,
    HttpStatusError,
    NoCacheError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
    SymbolNotFoundError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
    UnrecognizedEventError,
)
from binancekit.metrics import ClientMetrics
from binancekit.rest import (
    Account,
    ExchangeInfoCache,
    General,
    HistoricalData,
    Market,
    RestClient,
    UserStream,
)
from binancekit.websocket import SessionState, StreamMarket, StreamSession, decode

__all__ = [
    "Account",
    "BinanceError",
    "ClientConfig",
    "ClientMetrics",
    "ClockError",
    "ConnectionClosedError",
    "Credentials",
    "DecodeError",
    "DisconnectedError",
    "DownloadLink",
    "ExchangeError",
    "ExchangeInfoCache",
    "Futures",
    "General",
    "HandshakeError",
    "HistoricalData",
    "HttpStatusError",
    "Market",
    "NoCacheError",
    "RateLimitError",
    "RestClient",
    "Sapi",
    "ServerError",
    "ServiceUnavailableError",
    "SessionState",
    "Spot",
    "StreamMarket",
    "StreamSession",
    "SymbolNotFoundError",
    "TransportError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "UnrecognizedEventError",
    "UserStream",
    "decode",
]
