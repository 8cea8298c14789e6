"""Market data endpoints."""

from __future__ import annotations

from binancekit.endpoints import DownloadLink, Futures, Spot
from binancekit.models.events import OrderBook
from binancekit.models.market import (
    BookTicker,
    HistoricalDataDownloadLink,
    KlineSummary,
    SymbolPrice,
)
from binancekit.rest.client import RestClient


class Market:
    """Public market data for spot or USD-M futures."""

    def __init__(self, client: RestClient, *, futures: bool = False) -> None:
        self._client = client
        self._futures = futures

    async def get_depth(self, symbol: str, limit: int | None = None) -> OrderBook:
        params = {"symbol": symbol}
        if limit is not None:
            params["limit"] = str(limit)
        endpoint = Futures.DEPTH if self._futures else Spot.DEPTH
        return await self._client.get(endpoint, params, response_type=OrderBook)

    async def get_price(self, symbol: str) -> SymbolPrice:
        endpoint = Futures.TICKER_PRICE if self._futures else Spot.PRICE
        return await self._client.get(endpoint, {"symbol": symbol}, response_type=SymbolPrice)

    async def get_all_prices(self) -> list[SymbolPrice]:
        endpoint = Futures.TICKER_PRICE if self._futures else Spot.PRICE
        return await self._client.get(endpoint, response_type=list[SymbolPrice])

    async def get_book_ticker(self, symbol: str) -> BookTicker:
        endpoint = Futures.BOOK_TICKER if self._futures else Spot.BOOK_TICKER
        return await self._client.get(endpoint, {"symbol": symbol}, response_type=BookTicker)

    async def get_klines(
        self,
        symbol: str,
        interval: str,
        *,
        limit: int | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
    ) -> list[KlineSummary]:
        """
        Candlesticks for a symbol.

        Args:
            symbol: Trading pair, e.g. "BNBBTC".
            interval: Kline interval, e.g. "1m", "1h".
            limit: Maximum rows (exchange default 500).
            start_time: Inclusive start, ms since epoch.
            end_time: Inclusive end, ms since epoch.
        """
        params = {"symbol": symbol, "interval": interval}
        if limit is not None:
            params["limit"] = str(limit)
        if start_time is not None:
            params["startTime"] = str(start_time)
        if end_time is not None:
            params["endTime"] = str(end_time)
        endpoint = Futures.KLINES if self._futures else Spot.KLINES
        return await self._client.get(endpoint, params, response_type=list[KlineSummary])


class HistoricalData:
    """Futures historical data downloads (signed)."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def get_download_link(self, download_id: int) -> DownloadLink:
        result = await self._client.get_signed(
            Futures.HISTORICAL_DATA_DOWNLOAD_LINK,
            {"downloadId": str(download_id)},
            response_type=HistoricalDataDownloadLink,
        )
        return DownloadLink(result.link)

    async def download(self, link: DownloadLink) -> bytes:
        """Fetch the archive behind a download link; the URL is used verbatim."""
        return await self._client.dispatch_bytes(link)
