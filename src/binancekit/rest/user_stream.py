"""Listen key lifecycle for the private user data stream."""

from __future__ import annotations

import logging
from typing import Any

from binancekit.endpoints import Futures, Spot
from binancekit.models.account import UserDataStream
from binancekit.rest.client import RestClient

logger = logging.getLogger(__name__)


class UserStream:
    """
    Create, keep alive and close a listen key.

    Listen keys expire 60 minutes after the last keep_alive(); the stream then
    emits a UserDataStreamExpiredEvent.
    """

    def __init__(self, client: RestClient, *, futures: bool = False) -> None:
        self._client = client
        self._endpoint = Futures.USER_DATA_STREAM if futures else Spot.USER_DATA_STREAM

    async def start(self) -> UserDataStream:
        stream = await self._client.post(self._endpoint, response_type=UserDataStream)
        logger.info("User data stream started")
        return stream

    async def keep_alive(self, listen_key: str) -> dict[str, Any]:
        return await self._client.put(self._endpoint, listen_key, response_type=dict[str, Any])

    async def close(self, listen_key: str) -> dict[str, Any]:
        result = await self._client.delete(
            self._endpoint, listen_key, response_type=dict[str, Any]
        )
        logger.info("User data stream closed")
        return result
