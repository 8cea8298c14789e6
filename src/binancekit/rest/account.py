"""Signed account and order endpoints (spot)."""

from __future__ import annotations

from typing import Any

from binancekit.endpoints import Spot
from binancekit.models.account import AccountInformation, Order, OrderCanceled
from binancekit.rest.client import RestClient


class Account:
    """USER_DATA / TRADE endpoints. Every call is signed."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def get_account(self) -> AccountInformation:
        return await self._client.get_signed(Spot.ACCOUNT, response_type=AccountInformation)

    async def get_open_orders(self, symbol: str | None = None) -> list[Order]:
        params = {"symbol": symbol} if symbol is not None else {}
        return await self._client.get_signed(Spot.OPEN_ORDERS, params, response_type=list[Order])

    async def cancel_all_open_orders(self, symbol: str) -> list[OrderCanceled]:
        return await self._client.delete_signed(
            Spot.OPEN_ORDERS, {"symbol": symbol}, response_type=list[OrderCanceled]
        )

    async def test_order(self, params: dict[str, str]) -> dict[str, Any]:
        """
        Validate a new order without sending it to the matching engine.

        The exchange answers ``{}`` on success; rejections surface as ExchangeError.
        """
        return await self._client.post_signed(
            Spot.ORDER_TEST, params, response_type=dict[str, Any]
        )
