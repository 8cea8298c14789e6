"""
Stream name builders.

Stream names are what connect() and connect_multi() take:
``btcusdt@aggTrade``, ``btcusdt@kline_1m``, ``!miniTicker@arr``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StreamType(str, Enum):
    """Per-symbol stream kinds."""

    AGG_TRADE = "aggTrade"
    TRADE = "trade"
    KLINE = "kline"
    DEPTH = "depth"
    PARTIAL_DEPTH = "partialDepth"
    BOOK_TICKER = "bookTicker"
    MINI_TICKER = "miniTicker"
    TICKER = "ticker"
    MARK_PRICE = "markPrice"
    FORCE_ORDER = "forceOrder"
    CONTINUOUS_KLINE = "continuousKline"
    INDEX_PRICE_KLINE = "indexPriceKline"
    INDEX_PRICE = "indexPrice"


# All-market broadcasts (no symbol)
ALL_MARKET_TICKERS = "!ticker@arr"
ALL_MARKET_MINI_TICKERS = "!miniTicker@arr"
ALL_MARKET_MARK_PRICES = "!markPrice@arr"
ALL_MARKET_BOOK_TICKERS = "!bookTicker"
ALL_MARKET_FORCE_ORDERS = "!forceOrder@arr"

_PARTIAL_DEPTH_LEVELS = frozenset({5, 10, 20})


@dataclass(frozen=True)
class StreamSubscription:
    """
    One stream subscription.

    Attributes:
        symbol: Trading pair (e.g. "BTCUSDT") or pair for continuous/index streams.
        stream_type: Stream kind.
        interval: Kline interval (kline streams only, default "1m").
        levels: Book depth for partial depth streams (5, 10 or 20).
        update_speed: Optional update speed suffix, e.g. "100ms" or "1s".
        contract_type: Contract type for continuous klines (default "perpetual").
    """

    symbol: str
    stream_type: StreamType
    interval: str | None = None
    levels: int | None = None
    update_speed: str | None = None
    contract_type: str | None = None

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol must not be empty")
        if self.stream_type == StreamType.PARTIAL_DEPTH and self.levels not in _PARTIAL_DEPTH_LEVELS:
            raise ValueError(f"levels must be one of {sorted(_PARTIAL_DEPTH_LEVELS)}, got {self.levels}")

    def to_stream_name(self) -> str:
        """
        Convert to the exchange stream name.

        Examples:
            - bnbbtc@aggTrade
            - bnbbtc@kline_1m
            - bnbbtc@depth20@100ms
            - btcusdt_perpetual@continuousKline_1m
        """
        name = self.symbol.lower()
        interval = self.interval or "1m"

        if self.stream_type == StreamType.KLINE:
            stream = f"{name}@kline_{interval}"
        elif self.stream_type == StreamType.CONTINUOUS_KLINE:
            contract = (self.contract_type or "perpetual").lower()
            stream = f"{name}_{contract}@continuousKline_{interval}"
        elif self.stream_type == StreamType.INDEX_PRICE_KLINE:
            stream = f"{name}@indexPriceKline_{interval}"
        elif self.stream_type == StreamType.PARTIAL_DEPTH:
            stream = f"{name}@depth{self.levels}"
        else:
            stream = f"{name}@{self.stream_type.value}"

        if self.update_speed:
            stream = f"{stream}@{self.update_speed}"
        return stream


def stream_names(subscriptions: list[StreamSubscription]) -> list[str]:
    """Stream names in subscription order, duplicates removed."""
    return list(dict.fromkeys(sub.to_stream_name() for sub in subscriptions))
