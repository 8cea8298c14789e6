"""Tests for the exchange info cache."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from binancekit.config import ClientConfig
from binancekit.endpoints import Futures, Spot
from binancekit.errors import NoCacheError, ServerError, SymbolNotFoundError
from binancekit.models.exchange_info import ExchangeInformation
from binancekit.rest.cache import ExchangeInfoCache
from binancekit.rest.client import RestClient
from binancekit.rest.general import General

FIXTURE = Path(__file__).parent.parent / "fixtures" / "exchange_info.json"
T0 = datetime(2024, 1, 1, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def snapshot() -> ExchangeInformation:
    return ExchangeInformation.model_validate_json(FIXTURE.read_bytes())


@pytest.fixture
def client(snapshot: ExchangeInformation) -> MagicMock:
    """Dispatcher stub that returns the fixture snapshot."""
    client = MagicMock(spec=RestClient)
    client.dispatch = AsyncMock(return_value=snapshot)
    return client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestFreshness:
    """TTL boundaries."""

    def test_empty_cache(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        assert not cache.is_fresh()
        assert cache.fetched_at is None
        with pytest.raises(NoCacheError):
            cache.snapshot()

    @pytest.mark.asyncio
    async def test_fresh_until_ttl(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()

        assert cache.is_fresh()
        assert cache.fetched_at == T0
        clock.advance(seconds=599.999)
        assert cache.is_fresh()
        assert cache.snapshot().server_time == 1614694549948

    @pytest.mark.asyncio
    async def test_stale_at_ttl(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()

        clock.advance(seconds=600)
        assert not cache.is_fresh()
        with pytest.raises(NoCacheError, match="stale"):
            cache.snapshot()

    @pytest.mark.asyncio
    async def test_refresh_restores_freshness(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()
        clock.advance(seconds=3600)
        await cache.refresh()

        assert cache.is_fresh()
        assert cache.fetched_at == T0 + timedelta(seconds=3600)

    @pytest.mark.asyncio
    async def test_clock_going_backwards_stays_fresh(
        self, client: MagicMock, clock: FakeClock
    ) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()
        clock.advance(seconds=-30)

        assert cache.is_fresh()
        cache.snapshot()

    @pytest.mark.asyncio
    async def test_custom_ttl(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, ttl_s=5, clock=clock)
        await cache.refresh()
        clock.advance(seconds=5)
        assert not cache.is_fresh()

    @pytest.mark.parametrize("ttl_s", [0, -1])
    def test_ttl_must_be_positive(self, client: MagicMock, ttl_s: float) -> None:
        with pytest.raises(ValueError, match="ttl_s"):
            ExchangeInfoCache(client, ttl_s=ttl_s)


class TestRefresh:
    """Refresh semantics."""

    @pytest.mark.asyncio
    async def test_requests_configured_endpoint(
        self, client: MagicMock, clock: FakeClock
    ) -> None:
        cache = ExchangeInfoCache(client, Futures.EXCHANGE_INFO, clock=clock)
        await cache.refresh()

        client.dispatch.assert_awaited_once_with(
            Futures.EXCHANGE_INFO, response_type=ExchangeInformation
        )

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_entry(
        self, client: MagicMock, clock: FakeClock, snapshot: ExchangeInformation
    ) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()
        clock.advance(seconds=10)

        client.dispatch = AsyncMock(side_effect=ServerError())
        with pytest.raises(ServerError):
            await cache.refresh()

        assert cache.snapshot() is snapshot
        assert cache.fetched_at == T0

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_serialized(
        self, client: MagicMock, clock: FakeClock, snapshot: ExchangeInformation
    ) -> None:
        in_flight = 0
        max_in_flight = 0

        async def slow_dispatch(*args: object, **kwargs: object) -> ExchangeInformation:
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return snapshot

        client.dispatch = AsyncMock(side_effect=slow_dispatch)
        cache = ExchangeInfoCache(client, clock=clock)
        await asyncio.gather(cache.refresh(), cache.refresh(), cache.refresh())

        assert max_in_flight == 1
        assert client.dispatch.await_count == 3

    @pytest.mark.asyncio
    async def test_invalidate(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()
        cache.invalidate()

        assert not cache.is_fresh()
        with pytest.raises(NoCacheError, match="empty"):
            cache.snapshot()


class TestLookup:
    """Symbol lookup."""

    @pytest.mark.asyncio
    async def test_case_insensitive(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()

        assert cache.lookup_symbol("bnbbtc").symbol == "BNBBTC"
        assert cache.lookup_symbol("ETHBTC").base_asset == "ETH"

    @pytest.mark.asyncio
    async def test_unknown_symbol(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()

        with pytest.raises(SymbolNotFoundError) as exc_info:
            cache.lookup_symbol("dogebtc")
        assert exc_info.value.symbol == "DOGEBTC"

    def test_lookup_without_cache(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        with pytest.raises(NoCacheError):
            cache.lookup_symbol("BNBBTC")

    @pytest.mark.asyncio
    async def test_lookup_after_ttl(self, client: MagicMock, clock: FakeClock) -> None:
        cache = ExchangeInfoCache(client, clock=clock)
        await cache.refresh()
        clock.advance(seconds=601)

        with pytest.raises(NoCacheError):
            cache.lookup_symbol("BNBBTC")


class TestGeneralCache:
    """General delegates to its cache."""

    @pytest.mark.asyncio
    async def test_update_then_lookup(self, client: MagicMock) -> None:
        general = General(client)
        assert not general.has_cache()

        await general.update_cache()

        assert general.has_cache()
        assert general.get_symbol_info("bnbbtc").status == "TRADING"
        assert len(general.exchange_info().symbols) == 2
        client.dispatch.assert_awaited_once_with(
            Spot.EXCHANGE_INFO, response_type=ExchangeInformation
        )

    @pytest.mark.asyncio
    async def test_futures_endpoint(self, client: MagicMock) -> None:
        general = General(client, futures=True)
        await general.update_cache()
        client.dispatch.assert_awaited_once_with(
            Futures.EXCHANGE_INFO, response_type=ExchangeInformation
        )

    def test_from_config_uses_cache_ttl(self, client: MagicMock) -> None:
        general = General.from_config(client, ClientConfig(cache_ttl_s=30.0), futures=True)
        assert general.cache.ttl == timedelta(seconds=30)

