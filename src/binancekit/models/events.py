"""
Stream event models.

Stream payloads carry no type tag the decoder can rely on, only short
single/double-letter keys. Each model maps those keys to readable field names
through aliases; documented "ignore" keys (M, B, I, w, ...) are dropped by
``extra="ignore"``. All-market broadcasts are lists and are modelled as
``RootModel`` sequences.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import ClassVar, Literal

from pydantic import ConfigDict, Field, RootModel

from binancekit.models.base import CamelModel, WireModel


class EventKind(str, Enum):
    """Stable event names, also used as the metrics label."""

    ORDER_TRADE = "order_trade"
    DAY_TICKER = "day_ticker"
    DAY_TICKER_ALL = "day_ticker_all"
    FUTURES_ORDER_UPDATE = "futures_order_update"
    ACCOUNT_UPDATE = "account_update"
    BALANCE_UPDATE = "balance_update"
    DEPTH_ORDER_BOOK = "depth_order_book"
    BOOK_TICKER = "book_ticker"
    AGGR_TRADES = "aggr_trades"
    TRADE = "trade"
    MARK_PRICE = "mark_price"
    MARK_PRICE_ALL = "mark_price_all"
    MINI_TICKER = "mini_ticker"
    MINI_TICKER_ALL = "mini_ticker_all"
    CONTINUOUS_KLINE = "continuous_kline"
    INDEX_KLINE = "index_kline"
    KLINE = "kline"
    INDEX_PRICE = "index_price"
    LIQUIDATION = "liquidation"
    ORDER_BOOK = "order_book"
    USER_DATA_STREAM_EXPIRED = "user_data_stream_expired"


PriceLevel = tuple[Decimal, Decimal]


# === User data ===


class OrderTradeEvent(WireModel):
    """Spot ``executionReport``."""

    kind: ClassVar[EventKind] = EventKind.ORDER_TRADE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    new_client_order_id: str = Field(..., alias="c")
    side: str = Field(..., alias="S")
    order_type: str = Field(..., alias="o")
    time_in_force: str = Field(..., alias="f")
    qty: str = Field(..., alias="q")
    price: str = Field(..., alias="p")
    execution_type: str = Field(..., alias="x")
    order_status: str = Field(..., alias="X")
    order_reject_reason: str = Field(..., alias="r")
    order_id: int = Field(..., alias="i")
    qty_last_filled_trade: str = Field(..., alias="l")
    accumulated_qty_filled_trades: str = Field(..., alias="z")
    price_last_filled_trade: str = Field(..., alias="L")
    commission: str = Field(..., alias="n")
    trade_order_time: int = Field(..., alias="T")
    trade_id: int = Field(..., alias="t")
    is_buyer_maker: bool = Field(..., alias="m")


class FuturesOrder(WireModel):
    symbol: str = Field(..., alias="s")
    client_order_id: str = Field(..., alias="c")
    side: str = Field(..., alias="S")
    order_type: str = Field(..., alias="o")
    time_in_force: str = Field(..., alias="f")
    original_qty: str = Field(..., alias="q")
    original_price: str = Field(..., alias="p")
    average_price: str = Field(..., alias="ap")
    stop_price: str = Field(..., alias="sp")
    execution_type: str = Field(..., alias="x")
    order_status: str = Field(..., alias="X")
    order_id: int = Field(..., alias="i")
    qty_last_filled: str = Field(..., alias="l")
    accumulated_qty_filled: str = Field(..., alias="z")
    price_last_filled: str = Field(..., alias="L")
    commission_asset: str | None = Field(default=None, alias="N")
    commission: str | None = Field(default=None, alias="n")
    trade_time: int = Field(..., alias="T")
    trade_id: int = Field(..., alias="t")
    is_maker: bool = Field(..., alias="m")
    is_reduce_only: bool = Field(..., alias="R")
    position_side: str = Field(..., alias="ps")
    realized_profit: str | None = Field(default=None, alias="rp")


class FuturesOrderUpdateEvent(WireModel):
    """Futures ``ORDER_TRADE_UPDATE``."""

    kind: ClassVar[EventKind] = EventKind.FUTURES_ORDER_UPDATE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    transaction_time: int = Field(..., alias="T")
    order: FuturesOrder = Field(..., alias="o")


class EventBalance(WireModel):
    asset: str = Field(..., alias="a")
    wallet_balance: str = Field(..., alias="wb")
    cross_wallet_balance: str = Field(..., alias="cw")
    balance_change: str = Field(..., alias="bc")


class EventPosition(WireModel):
    symbol: str = Field(..., alias="s")
    position_amount: str = Field(..., alias="pa")
    entry_price: str = Field(..., alias="ep")
    accumulated_realized: str = Field(..., alias="cr")
    unrealized_pnl: str = Field(..., alias="up")
    margin_type: str = Field(..., alias="mt")
    isolated_wallet: str = Field(..., alias="iw")
    position_side: str = Field(..., alias="ps")


class AccountUpdateData(WireModel):
    reason: str = Field(..., alias="m")
    balances: list[EventBalance] = Field(..., alias="B")
    positions: list[EventPosition] = Field(..., alias="P")


class AccountUpdateEvent(WireModel):
    """Futures ``ACCOUNT_UPDATE``."""

    kind: ClassVar[EventKind] = EventKind.ACCOUNT_UPDATE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    transaction_time: int | None = Field(default=None, alias="T")
    data: AccountUpdateData = Field(..., alias="a")


class AccountBalance(WireModel):
    asset: str = Field(..., alias="a")
    free: str = Field(..., alias="f")
    locked: str = Field(..., alias="l")


class BalanceUpdateEvent(WireModel):
    """Spot ``outboundAccountPosition``."""

    kind: ClassVar[EventKind] = EventKind.BALANCE_UPDATE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    last_account_update_time: int = Field(..., alias="u")
    balances: list[AccountBalance] = Field(..., alias="B")


class UserDataStreamExpiredEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.USER_DATA_STREAM_EXPIRED

    event_type: Literal["listenKeyExpired"] = Field(..., alias="e")
    event_time: int = Field(..., alias="E")


# === Tickers ===


class DayTickerEvent(WireModel):
    """24h rolling window ticker (``<symbol>@ticker``)."""

    kind: ClassVar[EventKind] = EventKind.DAY_TICKER

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    price_change: str = Field(..., alias="p")
    price_change_percent: str = Field(..., alias="P")
    average_price: str = Field(..., alias="w")
    prev_close: str | None = Field(default=None, alias="x")
    current_close: str = Field(..., alias="c")
    current_close_qty: str = Field(..., alias="Q")
    best_bid: str | None = Field(default=None, alias="b")
    best_bid_qty: str | None = Field(default=None, alias="B")
    best_ask: str | None = Field(default=None, alias="a")
    best_ask_qty: str | None = Field(default=None, alias="A")
    open: str = Field(..., alias="o")
    high: str = Field(..., alias="h")
    low: str = Field(..., alias="l")
    volume: str = Field(..., alias="v")
    quote_volume: str = Field(..., alias="q")
    open_time: int = Field(..., alias="O")
    close_time: int = Field(..., alias="C")
    first_trade_id: int = Field(..., alias="F")
    last_trade_id: int = Field(..., alias="L")
    num_trades: int = Field(..., alias="n")


class MiniTickerEvent(WireModel):
    """24h mini ticker (``<symbol>@miniTicker``)."""

    kind: ClassVar[EventKind] = EventKind.MINI_TICKER

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    close: str = Field(..., alias="c")
    open: str = Field(..., alias="o")
    high: str = Field(..., alias="h")
    low: str = Field(..., alias="l")
    volume: str = Field(..., alias="v")
    quote_volume: str = Field(..., alias="q")


class BookTickerEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.BOOK_TICKER

    update_id: int = Field(..., alias="u")
    symbol: str = Field(..., alias="s")
    best_bid: str = Field(..., alias="b")
    best_bid_qty: str = Field(..., alias="B")
    best_ask: str = Field(..., alias="a")
    best_ask_qty: str = Field(..., alias="A")


# === Trades and depth ===


class DepthOrderBookEvent(WireModel):
    """Diff depth update. ``pu`` is only sent on futures streams."""

    kind: ClassVar[EventKind] = EventKind.DEPTH_ORDER_BOOK

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    first_update_id: int = Field(..., alias="U")
    final_update_id: int = Field(..., alias="u")
    previous_final_update_id: int | None = Field(default=None, alias="pu")
    bids: list[PriceLevel] = Field(..., alias="b")
    asks: list[PriceLevel] = Field(..., alias="a")


class OrderBook(CamelModel):
    """Partial depth snapshot; also the REST depth response."""

    kind: ClassVar[EventKind] = EventKind.ORDER_BOOK

    last_update_id: int
    bids: list[PriceLevel]
    asks: list[PriceLevel]


class AggrTradesEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.AGGR_TRADES

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    aggregated_trade_id: int = Field(..., alias="a")
    price: Decimal = Field(..., alias="p")
    qty: Decimal = Field(..., alias="q")
    first_break_trade_id: int = Field(..., alias="f")
    last_break_trade_id: int = Field(..., alias="l")
    trade_order_time: int = Field(..., alias="T")
    is_buyer_maker: bool = Field(..., alias="m")


class TradeEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.TRADE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    trade_id: int = Field(..., alias="t")
    price: str = Field(..., alias="p")
    qty: str = Field(..., alias="q")
    buyer_order_id: int = Field(..., alias="b")
    seller_order_id: int = Field(..., alias="a")
    trade_order_time: int = Field(..., alias="T")
    is_buyer_maker: bool = Field(..., alias="m")


# === Futures prices ===


class MarkPriceEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.MARK_PRICE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    mark_price: str = Field(..., alias="p")
    index_price: str | None = Field(default=None, alias="i")
    estimate_settle_price: str = Field(..., alias="P")
    funding_rate: str = Field(..., alias="r")
    next_funding_time: int = Field(..., alias="T")


class IndexPriceEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.INDEX_PRICE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    pair: str = Field(..., alias="i")
    price: str = Field(..., alias="p")


class LiquidationOrder(WireModel):
    symbol: str = Field(..., alias="s")
    side: str = Field(..., alias="S")
    order_type: str = Field(..., alias="o")
    time_in_force: str = Field(..., alias="f")
    original_quantity: str = Field(..., alias="q")
    price: str = Field(..., alias="p")
    average_price: str = Field(..., alias="ap")
    order_status: str = Field(..., alias="X")
    order_last_filled_quantity: str = Field(..., alias="l")
    order_filled_accumulated_quantity: str = Field(..., alias="z")
    order_trade_time: int = Field(..., alias="T")


class LiquidationEvent(WireModel):
    """Futures ``forceOrder``."""

    kind: ClassVar[EventKind] = EventKind.LIQUIDATION

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    liquidation_order: LiquidationOrder = Field(..., alias="o")


# === Klines ===


class Kline(WireModel):
    open_time: int = Field(..., alias="t")
    close_time: int = Field(..., alias="T")
    symbol: str = Field(..., alias="s")
    interval: str = Field(..., alias="i")
    first_trade_id: int = Field(..., alias="f")
    last_trade_id: int = Field(..., alias="L")
    open: str = Field(..., alias="o")
    close: str = Field(..., alias="c")
    high: str = Field(..., alias="h")
    low: str = Field(..., alias="l")
    volume: str = Field(..., alias="v")
    number_of_trades: int = Field(..., alias="n")
    is_final_bar: bool = Field(..., alias="x")
    quote_asset_volume: str = Field(..., alias="q")
    taker_buy_base_asset_volume: str = Field(..., alias="V")
    taker_buy_quote_asset_volume: str = Field(..., alias="Q")


class KlineEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.KLINE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    symbol: str = Field(..., alias="s")
    kline: Kline = Field(..., alias="k")


class ContinuousKline(WireModel):
    start_time: int = Field(..., alias="t")
    end_time: int = Field(..., alias="T")
    interval: str = Field(..., alias="i")
    first_trade_id: int = Field(..., alias="f")
    last_trade_id: int = Field(..., alias="L")
    open: str = Field(..., alias="o")
    close: str = Field(..., alias="c")
    high: str = Field(..., alias="h")
    low: str = Field(..., alias="l")
    volume: str = Field(..., alias="v")
    number_of_trades: int = Field(..., alias="n")
    is_final_bar: bool = Field(..., alias="x")
    quote_volume: str = Field(..., alias="q")
    active_buy_volume: str = Field(..., alias="V")
    active_volume_buy_quote: str = Field(..., alias="Q")


class ContinuousKlineEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.CONTINUOUS_KLINE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    pair: str = Field(..., alias="ps")
    contract_type: str = Field(..., alias="ct")
    kline: ContinuousKline = Field(..., alias="k")


class IndexKline(WireModel):
    start_time: int = Field(..., alias="t")
    end_time: int = Field(..., alias="T")
    interval: str = Field(..., alias="i")
    first_trade_id: int = Field(..., alias="f")
    last_trade_id: int = Field(..., alias="L")
    open: str = Field(..., alias="o")
    close: str = Field(..., alias="c")
    high: str = Field(..., alias="h")
    low: str = Field(..., alias="l")
    volume: str = Field(..., alias="v")
    number_of_trades: int = Field(..., alias="n")
    is_final_bar: bool = Field(..., alias="x")


class IndexKlineEvent(WireModel):
    kind: ClassVar[EventKind] = EventKind.INDEX_KLINE

    event_type: str = Field(..., alias="e")
    event_time: int = Field(..., alias="E")
    pair: str = Field(..., alias="ps")
    kline: IndexKline = Field(..., alias="k")


# === All-market broadcasts ===


class DayTickerAll(RootModel[list[DayTickerEvent]]):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EventKind] = EventKind.DAY_TICKER_ALL


class MiniTickerAll(RootModel[list[MiniTickerEvent]]):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EventKind] = EventKind.MINI_TICKER_ALL


class MarkPriceAll(RootModel[list[MarkPriceEvent]]):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EventKind] = EventKind.MARK_PRICE_ALL


Event = (
    OrderTradeEvent
    | DayTickerEvent
    | DayTickerAll
    | FuturesOrderUpdateEvent
    | AccountUpdateEvent
    | BalanceUpdateEvent
    | DepthOrderBookEvent
    | BookTickerEvent
    | AggrTradesEvent
    | TradeEvent
    | MarkPriceEvent
    | MarkPriceAll
    | MiniTickerEvent
    | MiniTickerAll
    | ContinuousKlineEvent
    | IndexKlineEvent
    | KlineEvent
    | IndexPriceEvent
    | LiquidationEvent
    | OrderBook
    | UserDataStreamExpiredEvent
)
