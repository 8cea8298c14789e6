"""
REST side of the client.

- RestClient signs, sends and classifies requests
- ExchangeInfoCache holds the trading rules snapshot
- General / Market / Account / UserStream are thin endpoint wrappers
"""

from binancekit.rest.account import Account
from binancekit.rest.cache import CacheEntry, ExchangeInfoCache
from binancekit.rest.client import RestClient
from binancekit.rest.general import General
from binancekit.rest.market import HistoricalData, Market
from binancekit.rest.user_stream import UserStream

__all__ = [
    "Account",
    "CacheEntry",
    "ExchangeInfoCache",
    "General",
    "HistoricalData",
    "Market",
    "RestClient",
    "UserStream",
]
