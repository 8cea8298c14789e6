"""Market data REST responses."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field, model_validator

from binancekit.models.base import CamelModel, WireModel

_KLINE_COLUMNS = (
    "open_time",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "close_time",
    "quote_asset_volume",
    "number_of_trades",
    "taker_buy_base_asset_volume",
    "taker_buy_quote_asset_volume",
)


class ServerTime(CamelModel):
    server_time: int = Field(..., ge=0)


class SymbolPrice(CamelModel):
    symbol: str
    price: Decimal


class BookTicker(CamelModel):
    """Best bid/ask from GET /api/v3/ticker/bookTicker."""

    symbol: str
    bid_price: Decimal
    bid_qty: Decimal
    ask_price: Decimal
    ask_qty: Decimal


class KlineSummary(WireModel):
    """
    One row of GET /api/v3/klines.

    The exchange sends each kline as a positional array; trailing columns
    beyond the documented eleven are ignored.
    """

    open_time: int
    open: str
    high: str
    low: str
    close: str
    volume: str
    close_time: int
    quote_asset_volume: str
    number_of_trades: int
    taker_buy_base_asset_volume: str
    taker_buy_quote_asset_volume: str

    @model_validator(mode="before")
    @classmethod
    def _from_row(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) < len(_KLINE_COLUMNS):
                raise ValueError(
                    f"kline row has {len(data)} columns, expected at least {len(_KLINE_COLUMNS)}"
                )
            return dict(zip(_KLINE_COLUMNS, data, strict=False))
        return data


class HistoricalDataDownloadId(WireModel):
    id: int


class HistoricalDataDownloadLink(WireModel):
    link: str
