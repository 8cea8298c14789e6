"""
Exchange info cache.

Holds one ``(snapshot, fetched_at)`` entry. The entry is replaced wholesale by
``refresh()`` and never mutated, so readers see either the old or the new
snapshot, never a mix. Nothing refreshes automatically: once the TTL has
elapsed reads fail with NoCacheError until the caller refreshes.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import NamedTuple

from binancekit.clock import Clock, utc_now
from binancekit.endpoints import Endpoint, Spot
from binancekit.errors import NoCacheError, SymbolNotFoundError
from binancekit.models.exchange_info import ExchangeInformation, Symbol
from binancekit.rest.client import RestClient

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 600.0


class CacheEntry(NamedTuple):
    snapshot: ExchangeInformation
    fetched_at: datetime


class ExchangeInfoCache:
    """TTL-bounded exchange info snapshot."""

    def __init__(
        self,
        client: RestClient,
        endpoint: Endpoint = Spot.EXCHANGE_INFO,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize an empty cache.

        Args:
            client: Dispatcher used by refresh().
            endpoint: Exchange info route (spot or futures).
            ttl_s: Freshness window in seconds.
            clock: Time source (default: wall clock).
        """
        if ttl_s <= 0:
            raise ValueError(f"ttl_s must be > 0, got {ttl_s}")
        self._client = client
        self._endpoint = endpoint
        self._ttl = timedelta(seconds=ttl_s)
        self._clock = clock or utc_now
        self._entry: CacheEntry | None = None
        self._lock = asyncio.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def fetched_at(self) -> datetime | None:
        entry = self._entry
        return entry.fetched_at if entry is not None else None

    async def refresh(self) -> ExchangeInformation:
        """
        Fetch a new snapshot and replace the entry.

        Concurrent calls are serialized. On failure the previous entry stays.

        Raises:
            BinanceError: Whatever the dispatcher raised.
        """
        async with self._lock:
            snapshot = await self._client.dispatch(
                self._endpoint, response_type=ExchangeInformation
            )
            fetched_at = self._clock()
            self._entry = CacheEntry(snapshot, fetched_at)

        logger.info(
            "Exchange info refreshed",
            extra={"symbol_count": len(snapshot.symbols), "server_time": snapshot.server_time},
        )
        return snapshot

    def invalidate(self) -> None:
        self._entry = None

    def is_fresh(self) -> bool:
        entry = self._entry
        if entry is None:
            return False
        # A clock that went backwards yields a negative age, still fresh
        return self._clock() - entry.fetched_at < self._ttl

    def snapshot(self) -> ExchangeInformation:
        """
        Current snapshot.

        Raises:
            NoCacheError: Cache is empty or older than the TTL.
        """
        entry = self._entry
        if entry is None:
            raise NoCacheError("Exchange info cache is empty")
        if self._clock() - entry.fetched_at >= self._ttl:
            raise NoCacheError(
                f"Exchange info cache is stale (fetched at {entry.fetched_at.isoformat()})"
            )
        return entry.snapshot

    def lookup_symbol(self, name: str) -> Symbol:
        """
        Find a symbol by name, case-insensitively.

        Raises:
            NoCacheError: Cache is empty or stale.
            SymbolNotFoundError: Name is not in the snapshot.
        """
        wanted = name.upper()
        for symbol in self.snapshot().symbols:
            if symbol.symbol == wanted:
                return symbol
        raise SymbolNotFoundError(wanted)
