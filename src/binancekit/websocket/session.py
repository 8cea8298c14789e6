"""
Streaming session over one WebSocket connection.

recv() reads exactly one frame per call and returns the decoded event, or
None for control frames. Server pings are answered inline (the exchange drops
connections that leave pings unanswered), so the caller's loop only has to
keep calling recv(). Terminal outcomes raise and leave the session CLOSED;
there is no reconnect.

Usage:
    async with StreamSession(StreamMarket.SPOT) as session:
        await session.connect("bnbbtc@aggTrade")
        while True:
            event = await session.recv()
            if event is not None:
                handle(event)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

import aiohttp

from binancekit.config import ClientConfig
from binancekit.errors import (
    ConnectionClosedError,
    DisconnectedError,
    HandshakeError,
    TransportError,
    UnrecognizedEventError,
)
from binancekit.metrics import ClientMetrics
from binancekit.models.events import Event
from binancekit.websocket.decoder import decode

logger = logging.getLogger(__name__)

# aiohttp treats a non-positive close timeout as "wait forever"
_MIN_CLOSE_WAIT_S = 0.001


class StreamMarket(str, Enum):
    """WebSocket base URL per market."""

    SPOT = "wss://stream.binance.com:9443"
    USDM = "wss://fstream.binance.com"
    COINM = "wss://dstream.binance.com"
    VANILLA = "wss://vstream.binance.com"


class SessionState(str, Enum):
    """Connection lifecycle: IDLE -> CONNECTING -> OPEN -> CLOSING -> CLOSED."""

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSING = "CLOSING"
    CLOSED = "CLOSED"


class StreamSession:
    """
    One WebSocket connection to a stream endpoint.

    recv() and disconnect() must not be called concurrently.
    """

    def __init__(
        self,
        market: StreamMarket | str = StreamMarket.SPOT,
        *,
        session: aiohttp.ClientSession | None = None,
        metrics: ClientMetrics | None = None,
        close_timeout_s: float = 0.0,
    ) -> None:
        """
        Initialize an unconnected session.

        Args:
            market: StreamMarket or an explicit base URL (e.g. a testnet host).
            session: Externally owned aiohttp session. Not closed by close().
            metrics: Optional metrics sink.
            close_timeout_s: How long disconnect() waits for the close ack.
        """
        base = market.value if isinstance(market, StreamMarket) else market
        self._base_url = base.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._metrics = metrics
        self._close_timeout_s = max(close_timeout_s, _MIN_CLOSE_WAIT_S)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._state = SessionState.IDLE
        self._url: str | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        futures: bool = False,
        metrics: ClientMetrics | None = None,
    ) -> StreamSession:
        """Session for the spot (or futures) WebSocket host of ``config``."""
        base = config.futures_ws_endpoint if futures else config.ws_endpoint
        return cls(base, metrics=metrics, close_timeout_s=config.ws_close_timeout_s)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def url(self) -> str | None:
        """URL of the current (or last) connection."""
        return self._url

    def _set_state(self, state: SessionState) -> None:
        if self._state != state:
            logger.debug(
                "Session state changed",
                extra={"old_state": self._state.value, "new_state": state.value},
            )
            self._state = state

    # === Connect ===

    async def connect(self, stream: str) -> None:
        """Connect to a single raw stream: ``{base}/ws/{stream}``."""
        await self._connect_wss(f"{self._base_url}/ws/{stream}")

    async def connect_multi(self, streams: Sequence[str]) -> None:
        """Connect to a combined stream: ``{base}/stream?streams=a/b/c``."""
        if not streams:
            raise ValueError("streams must not be empty")
        await self._connect_wss(f"{self._base_url}/stream?streams={'/'.join(streams)}")

    async def connect_custom(self, url: str) -> None:
        """Connect to a full URL, used verbatim."""
        await self._connect_wss(url)

    async def _connect_wss(self, url: str) -> None:
        if self._state in (SessionState.CONNECTING, SessionState.OPEN):
            raise RuntimeError(f"Session already {self._state.value}")

        self._set_state(SessionState.CONNECTING)
        self._url = url
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        try:
            self._ws = await self._session.ws_connect(
                url,
                autoping=False,
                timeout=aiohttp.ClientWSTimeout(ws_close=self._close_timeout_s),
            )
        except aiohttp.ClientError as e:
            self._set_state(SessionState.CLOSED)
            if self._metrics is not None:
                self._metrics.record_handshake_failure()
            logger.error("WebSocket handshake failed", extra={"url": url, "error": str(e)})
            raise HandshakeError(f"Error during handshake: {e}") from e
        except BaseException:
            # Cancelled or failed mid-handshake
            self._set_state(SessionState.CLOSED)
            raise

        self._set_state(SessionState.OPEN)
        if self._metrics is not None:
            self._metrics.record_connect()
        logger.info("WebSocket handshake completed", extra={"url": url})

    # === Receive ===

    async def recv(self) -> Event | None:
        """
        Read one frame.

        Returns:
            The decoded event for a text frame, None for ping/pong/binary.

        Raises:
            UnrecognizedEventError: Text frame matched no event shape. The
                session stays open.
            DisconnectedError: Server sent a close frame.
            ConnectionClosedError: Stream ended without a close frame.
            TransportError: Read failed.
        """
        ws = self._ws
        if ws is None or self._state != SessionState.OPEN:
            raise ConnectionClosedError("Session is not open")

        try:
            msg = await ws.receive()
        except aiohttp.ClientError as e:
            await self._terminate("transport_error")
            raise TransportError(f"WebSocket receive failed: {e}") from e

        return await self._handle_frame(ws, msg)

    async def _handle_frame(
        self, ws: aiohttp.ClientWebSocketResponse, msg: aiohttp.WSMessage
    ) -> Event | None:
        if msg.type == aiohttp.WSMsgType.TEXT:
            self._record_frame("text")
            try:
                event = decode(msg.data)
            except UnrecognizedEventError:
                if self._metrics is not None:
                    self._metrics.record_unrecognized()
                logger.warning("Unrecognized event", extra={"size": len(msg.data)})
                raise
            if self._metrics is not None:
                self._metrics.record_event(event.kind.value)
            return event

        if msg.type == aiohttp.WSMsgType.PING:
            self._record_frame("ping")
            logger.debug("Ping received")
            try:
                await ws.pong(msg.data)
            except (aiohttp.ClientError, ConnectionError) as e:
                await self._terminate("transport_error")
                raise TransportError(f"Failed to answer ping: {e}") from e
            return None

        if msg.type in (aiohttp.WSMsgType.PONG, aiohttp.WSMsgType.BINARY):
            self._record_frame("pong" if msg.type == aiohttp.WSMsgType.PONG else "binary")
            return None

        if msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING):
            self._record_frame("close")
            code = msg.data if isinstance(msg.data, int) else ws.close_code
            reason = msg.extra if isinstance(msg.extra, str) else None
            await self._terminate("disconnected")
            logger.info("WebSocket closed by server", extra={"code": code, "reason": reason})
            raise DisconnectedError(f"Disconnected (code={code})", code=code, reason=reason)

        if msg.type == aiohttp.WSMsgType.ERROR:
            self._record_frame("error")
            error = ws.exception() or msg.data
            await self._terminate("transport_error")
            logger.error("WebSocket error", extra={"error": str(error)})
            cause = error if isinstance(error, BaseException) else None
            raise TransportError(f"WebSocket error: {error}") from cause

        # WSMsgType.CLOSED: stream ended
        self._record_frame("closed")
        await self._terminate("closed")
        logger.info("WebSocket connection closed")
        raise ConnectionClosedError("WebSocket connection closed")

    def _record_frame(self, kind: str) -> None:
        if self._metrics is not None:
            self._metrics.record_frame(kind)

    async def _terminate(self, reason: str) -> None:
        ws, self._ws = self._ws, None
        if ws is not None and not ws.closed:
            await ws.close()
        self._set_state(SessionState.CLOSED)
        if self._metrics is not None:
            self._metrics.record_termination(reason)

    # === Shutdown ===

    async def disconnect(self) -> None:
        """Send a close frame without waiting for the server's acknowledgement."""
        ws, self._ws = self._ws, None
        if ws is None:
            self._set_state(SessionState.CLOSED)
            return
        self._set_state(SessionState.CLOSING)
        await ws.close()
        self._set_state(SessionState.CLOSED)
        logger.info("WebSocket disconnected")

    async def close(self) -> None:
        """Disconnect and release the HTTP session if this session created it."""
        await self.disconnect()
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> StreamSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
