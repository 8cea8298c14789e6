"""
WebSocket side of the client.

- decoder: untagged JSON payload -> typed event
- session: one connection, one frame per recv(), inline ping replies
- streams: stream name builders
"""

from binancekit.websocket.decoder import (
    EVENT_PRECEDENCE,
    LIST_PRECEDENCE,
    MAX_ENVELOPE_DEPTH,
    decode,
    decode_value,
)
from binancekit.websocket.session import SessionState, StreamMarket, StreamSession
from binancekit.websocket.streams import StreamSubscription, StreamType, stream_names

__all__ = [
    "EVENT_PRECEDENCE",
    "LIST_PRECEDENCE",
    "MAX_ENVELOPE_DEPTH",
    "SessionState",
    "StreamMarket",
    "StreamSession",
    "StreamSubscription",
    "StreamType",
    "decode",
    "decode_value",
    "stream_names",
]
