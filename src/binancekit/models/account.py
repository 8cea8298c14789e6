"""Account, order and user-stream REST responses."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from binancekit.models.base import CamelModel, WireModel


class Balance(CamelModel):
    asset: str
    free: str
    locked: str


class AccountInformation(CamelModel):
    maker_commission: float
    taker_commission: float
    buyer_commission: float
    seller_commission: float
    can_trade: bool
    can_withdraw: bool
    can_deposit: bool
    balances: list[Balance] = Field(default_factory=list)

    def balance(self, asset: str) -> Balance | None:
        asset = asset.upper()
        for item in self.balances:
            if item.asset == asset:
                return item
        return None


class Order(CamelModel):
    symbol: str
    order_id: int
    order_list_id: int
    client_order_id: str
    price: Decimal
    orig_qty: str
    executed_qty: str
    cummulative_quote_qty: str
    status: str
    time_in_force: str
    type_name: str = Field(..., alias="type")
    side: str
    stop_price: Decimal
    iceberg_qty: str
    time: int
    update_time: int
    is_working: bool
    orig_quote_order_qty: str


class OrderCanceled(CamelModel):
    symbol: str
    orig_client_order_id: str | None = None
    order_id: int | None = None
    client_order_id: str | None = None


class UserDataStream(CamelModel):
    listen_key: str = Field(..., min_length=1)


class ExchangeErrorBody(WireModel):
    """Body of an HTTP 400 rejection: ``{"code": -1121, "msg": "Invalid symbol."}``."""

    code: int = Field(..., ge=-32768, le=32767)
    msg: str
