"""General endpoints: connectivity, server time and the exchange info cache."""

from __future__ import annotations

from binancekit.config import ClientConfig
from binancekit.endpoints import Futures, Spot
from binancekit.models.exchange_info import ExchangeInformation, Symbol
from binancekit.models.market import ServerTime
from binancekit.rest.cache import DEFAULT_TTL_S, ExchangeInfoCache
from binancekit.rest.client import RestClient


class General:
    """
    Spot or USD-M futures general endpoints.

    Symbol metadata is served from an ExchangeInfoCache; call update_cache()
    before the first lookup and whenever the cache goes stale.
    """

    def __init__(
        self,
        client: RestClient,
        cache: ExchangeInfoCache | None = None,
        *,
        futures: bool = False,
        ttl_s: float = DEFAULT_TTL_S,
    ) -> None:
        self._client = client
        self._futures = futures
        exchange_info = Futures.EXCHANGE_INFO if futures else Spot.EXCHANGE_INFO
        self._cache = cache or ExchangeInfoCache(client, exchange_info, ttl_s=ttl_s)

    @classmethod
    def from_config(
        cls, client: RestClient, config: ClientConfig, *, futures: bool = False
    ) -> General:
        """General endpoints whose cache uses ``config.cache_ttl_s``."""
        return cls(client, futures=futures, ttl_s=config.cache_ttl_s)

    @property
    def cache(self) -> ExchangeInfoCache:
        return self._cache

    async def ping(self) -> str:
        """Test connectivity. Returns "pong" on success."""
        await self._client.get(Futures.PING if self._futures else Spot.PING)
        return "pong"

    async def get_server_time(self) -> ServerTime:
        endpoint = Futures.TIME if self._futures else Spot.TIME
        return await self._client.get(endpoint, response_type=ServerTime)

    async def update_cache(self) -> None:
        await self._cache.refresh()

    def has_cache(self) -> bool:
        return self._cache.is_fresh()

    def exchange_info(self) -> ExchangeInformation:
        return self._cache.snapshot()

    def get_symbol_info(self, symbol: str) -> Symbol:
        return self._cache.lookup_symbol(symbol)
