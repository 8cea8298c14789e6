"""Wire models (pydantic v2) for REST responses and stream events."""

from binancekit.models.account import (
    AccountInformation,
    Balance,
    ExchangeErrorBody,
    Order,
    OrderCanceled,
    UserDataStream,
)
from binancekit.models.events import Event, EventKind, OrderBook
from binancekit.models.exchange_info import (
    ExchangeInformation,
    Filter,
    LotSize,
    PriceFilter,
    RateLimit,
    Symbol,
    UnknownFilter,
)
from binancekit.models.market import BookTicker, KlineSummary, ServerTime, SymbolPrice

__all__ = [
    "AccountInformation",
    "Balance",
    "BookTicker",
    "Event",
    "EventKind",
    "ExchangeErrorBody",
    "ExchangeInformation",
    "Filter",
    "KlineSummary",
    "LotSize",
    "Order",
    "OrderBook",
    "OrderCanceled",
    "PriceFilter",
    "RateLimit",
    "ServerTime",
    "Symbol",
    "SymbolPrice",
    "UnknownFilter",
    "UserDataStream",
]
