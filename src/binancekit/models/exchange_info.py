"""
Exchange trading rules (GET /api/v3/exchangeInfo, /fapi/v1/exchangeInfo).

Symbol filters are a union tagged by ``filterType``. Each filter kind is
validated on its own; a ``filterType`` this client does not know decodes to
``UnknownFilter`` so a new exchange rule never breaks the whole snapshot.
Price and quantity limits stay strings: they are exact decimal literals
("0.00000010") and callers compare them as such.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypeVar

from pydantic import ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel

from binancekit.models.base import CamelModel


class _Filter(CamelModel):
    pass


class PriceFilter(_Filter):
    filter_type: Literal["PRICE_FILTER"] = "PRICE_FILTER"
    min_price: str
    max_price: str
    tick_size: str


class PercentPrice(_Filter):
    filter_type: Literal["PERCENT_PRICE"] = "PERCENT_PRICE"
    multiplier_up: str
    multiplier_down: str
    avg_price_mins: float | None = None


class PercentPriceBySide(_Filter):
    filter_type: Literal["PERCENT_PRICE_BY_SIDE"] = "PERCENT_PRICE_BY_SIDE"
    bid_multiplier_up: str
    bid_multiplier_down: str
    ask_multiplier_up: str
    ask_multiplier_down: str
    avg_price_mins: float | None = None


class LotSize(_Filter):
    filter_type: Literal["LOT_SIZE"] = "LOT_SIZE"
    min_qty: str
    max_qty: str
    step_size: str


class MinNotional(_Filter):
    filter_type: Literal["MIN_NOTIONAL"] = "MIN_NOTIONAL"
    notional: str | None = None
    min_notional: str | None = None
    apply_to_market: bool | None = None
    avg_price_mins: float | None = None


class Notional(_Filter):
    filter_type: Literal["NOTIONAL"] = "NOTIONAL"
    notional: str | None = None
    min_notional: str | None = None
    apply_to_market: bool | None = None
    avg_price_mins: float | None = None


class IcebergParts(_Filter):
    filter_type: Literal["ICEBERG_PARTS"] = "ICEBERG_PARTS"
    limit: int | None = Field(default=None, ge=0)


class MaxNumOrders(_Filter):
    filter_type: Literal["MAX_NUM_ORDERS"] = "MAX_NUM_ORDERS"
    max_num_orders: int | None = Field(default=None, ge=0)


class MaxNumAlgoOrders(_Filter):
    filter_type: Literal["MAX_NUM_ALGO_ORDERS"] = "MAX_NUM_ALGO_ORDERS"
    max_num_algo_orders: int | None = Field(default=None, ge=0)


class MaxNumIcebergOrders(_Filter):
    filter_type: Literal["MAX_NUM_ICEBERG_ORDERS"] = "MAX_NUM_ICEBERG_ORDERS"
    max_num_iceberg_orders: int = Field(..., ge=0)


class MaxPosition(_Filter):
    filter_type: Literal["MAX_POSITION"] = "MAX_POSITION"
    max_position: str


class MarketLotSize(_Filter):
    filter_type: Literal["MARKET_LOT_SIZE"] = "MARKET_LOT_SIZE"
    min_qty: str
    max_qty: str
    step_size: str


class TrailingDelta(_Filter):
    filter_type: Literal["TRAILING_DELTA"] = "TRAILING_DELTA"
    min_trailing_above_delta: int | None = None
    max_trailing_above_delta: int | None = None
    min_trailing_below_delta: int | None = None
    max_trailing_below_delta: int | None = None


class UnknownFilter(_Filter):
    """Filter kind without a dedicated model; all wire keys are kept."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    filter_type: str


_KNOWN_FILTERS: dict[str, type[_Filter]] = {
    "PRICE_FILTER": PriceFilter,
    "PERCENT_PRICE": PercentPrice,
    "PERCENT_PRICE_BY_SIDE": PercentPriceBySide,
    "LOT_SIZE": LotSize,
    "MIN_NOTIONAL": MinNotional,
    "NOTIONAL": Notional,
    "ICEBERG_PARTS": IcebergParts,
    "MAX_NUM_ORDERS": MaxNumOrders,
    "MAX_NUM_ALGO_ORDERS": MaxNumAlgoOrders,
    "MAX_NUM_ICEBERG_ORDERS": MaxNumIcebergOrders,
    "MAX_POSITION": MaxPosition,
    "MARKET_LOT_SIZE": MarketLotSize,
    "TRAILING_DELTA": TrailingDelta,
}

_UNKNOWN_TAG = "UNKNOWN"


def _filter_tag(value: Any) -> str:
    if isinstance(value, dict):
        tag = value.get("filterType", value.get("filter_type"))
    else:
        tag = getattr(value, "filter_type", None)
    return tag if tag in _KNOWN_FILTERS else _UNKNOWN_TAG


Filter = Annotated[
    Annotated[PriceFilter, Tag("PRICE_FILTER")]
    | Annotated[PercentPrice, Tag("PERCENT_PRICE")]
    | Annotated[PercentPriceBySide, Tag("PERCENT_PRICE_BY_SIDE")]
    | Annotated[LotSize, Tag("LOT_SIZE")]
    | Annotated[MinNotional, Tag("MIN_NOTIONAL")]
    | Annotated[Notional, Tag("NOTIONAL")]
    | Annotated[IcebergParts, Tag("ICEBERG_PARTS")]
    | Annotated[MaxNumOrders, Tag("MAX_NUM_ORDERS")]
    | Annotated[MaxNumAlgoOrders, Tag("MAX_NUM_ALGO_ORDERS")]
    | Annotated[MaxNumIcebergOrders, Tag("MAX_NUM_ICEBERG_ORDERS")]
    | Annotated[MaxPosition, Tag("MAX_POSITION")]
    | Annotated[MarketLotSize, Tag("MARKET_LOT_SIZE")]
    | Annotated[TrailingDelta, Tag("TRAILING_DELTA")]
    | Annotated[UnknownFilter, Tag(_UNKNOWN_TAG)],
    Discriminator(_filter_tag),
]

F = TypeVar("F", bound=_Filter)


class RateLimit(CamelModel):
    rate_limit_type: str
    interval: str
    interval_num: int = Field(..., ge=0)
    limit: int = Field(..., ge=0)


class Symbol(CamelModel):
    """
    Trading rules of one symbol.

    Spot symbols carry asset precisions and trading flags; futures symbols
    carry price/quantity precision and the contract type. Fields the other
    market does not send are None.
    """

    symbol: str = Field(..., min_length=1)
    status: str
    base_asset: str
    quote_asset: str
    base_asset_precision: int | None = None
    quote_precision: int | None = None
    price_precision: int | None = None
    quantity_precision: int | None = None
    contract_type: str | None = None
    order_types: list[str] = Field(default_factory=list)
    iceberg_allowed: bool | None = None
    is_spot_trading_allowed: bool | None = None
    is_margin_trading_allowed: bool | None = None
    filters: list[Filter] = Field(default_factory=list)

    def find_filter(self, kind: type[F]) -> F | None:
        """First filter of the given kind, or None."""
        for item in self.filters:
            if isinstance(item, kind):
                return item
        return None

    @property
    def price_filter(self) -> PriceFilter | None:
        return self.find_filter(PriceFilter)

    @property
    def lot_size(self) -> LotSize | None:
        return self.find_filter(LotSize)


class ExchangeInformation(CamelModel):
    """Full exchange info snapshot."""

    timezone: str
    server_time: int = Field(..., ge=0)
    rate_limits: list[RateLimit] = Field(default_factory=list)
    symbols: list[Symbol] = Field(default_factory=list)
