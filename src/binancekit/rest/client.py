"""
REST request dispatcher.

Builds the request URL (signing it when required), sends it over one pooled
aiohttp session and maps the response to either a decoded value or one error
type per failure kind. The dispatcher never retries; callers decide what to do
with RateLimitError, ExchangeError and the rest.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from typing import Any, TypeVar, overload

import aiohttp
import orjson
import yarl
from pydantic import TypeAdapter, ValidationError

from binancekit.clock import Clock
from binancekit.config import ClientConfig, Credentials
from binancekit.endpoints import Endpoint, endpoint_path, is_absolute
from binancekit.errors import (
    DecodeError,
    ExchangeError,
    HttpStatusError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from binancekit.metrics import ClientMetrics
from binancekit.models.account import ExchangeErrorBody
from binancekit.signing import append_signature, build_request, build_signed_request

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "binancekit"
API_KEY_HEADER = "X-MBX-APIKEY"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
# Checked in order; the first parseable value wins
USED_WEIGHT_HEADERS = ("X-MBX-USED-WEIGHT-1M", "X-MBX-USED-WEIGHT")


@functools.cache
def _adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def _parse_int_header(headers: Mapping[str, str], name: str) -> int | None:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class RestClient:
    """
    Async client for one REST host.

    Safe to share between tasks. The only mutable state besides the pooled
    session is ``used_weight``, the last request weight the exchange reported.
    """

    def __init__(
        self,
        host: str,
        credentials: Credentials | None = None,
        *,
        recv_window: int = 0,
        clock: Clock | None = None,
        metrics: ClientMetrics | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            host: Base URL, e.g. "https://api.binance.com".
            credentials: API key and secret. Public endpoints only if None.
            recv_window: Default recvWindow for signed requests (0 omits it).
            clock: Time source for request timestamps (default: wall clock).
            metrics: Optional metrics sink.
            session: Externally owned aiohttp session. Not closed by close().
        """
        self._host = host.rstrip("/")
        self._credentials = credentials or Credentials()
        self._recv_window = recv_window
        self._clock = clock
        self._metrics = metrics
        self._session = session
        self._owns_session = session is None
        self.used_weight: int | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        credentials: Credentials | None = None,
        *,
        futures: bool = False,
        metrics: ClientMetrics | None = None,
    ) -> RestClient:
        """Client for the spot (or futures) REST host of ``config``."""
        host = config.futures_rest_api_endpoint if futures else config.rest_api_endpoint
        return cls(host, credentials, recv_window=config.recv_window, metrics=metrics)

    @property
    def host(self) -> str:
        return self._host

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> RestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # === Request building ===

    def build_url(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        *,
        signed: bool = False,
        recv_window: int | None = None,
    ) -> str:
        """
        Full request URL.

        Signed URLs carry the canonical query with ``timestamp`` (and
        ``recvWindow``) followed by ``signature``. The string is sent as is,
        without requoting.
        """
        path = endpoint_path(endpoint)
        base = path if is_absolute(path) else f"{self._host}{path}"

        if signed:
            window = self._recv_window if recv_window is None else recv_window
            query = build_signed_request(params or {}, recv_window=window, clock=self._clock)
            return f"{base}?{append_signature(query, self._credentials.secret_key)}"

        query = build_request(params or {})
        return f"{base}?{query}" if query else base

    def _headers(self, *, signed: bool) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if self._credentials.has_api_key:
            headers[API_KEY_HEADER] = self._credentials.api_key
        if signed:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return headers

    # === Dispatch ===

    @overload
    async def dispatch(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = ...,
        *,
        method: str = ...,
        signed: bool = ...,
        listen_key: str | None = ...,
        response_type: type[T],
        recv_window: int | None = ...,
    ) -> T: ...

    @overload
    async def dispatch(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = ...,
        *,
        method: str = ...,
        signed: bool = ...,
        listen_key: str | None = ...,
        response_type: None = ...,
        recv_window: int | None = ...,
    ) -> Any: ...

    async def dispatch(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        *,
        method: str = "GET",
        signed: bool = False,
        listen_key: str | None = None,
        response_type: Any = None,
        recv_window: int | None = None,
    ) -> Any:
        """
        Send one request and decode the 200 body.

        Args:
            endpoint: Route, or a DownloadLink used verbatim.
            params: Query parameters.
            method: HTTP verb.
            signed: Add timestamp/recvWindow and the HMAC signature.
            listen_key: Sent as the form body ``listenKey=<key>``.
            response_type: Type to validate the JSON body into; raw JSON if None.
            recv_window: Overrides the client's recvWindow for this call.

        Raises:
            TransportError: Connection or read failure.
            HttpStatusError: Any non-200 status (see subclasses).
            DecodeError: 200 body does not match ``response_type``.
        """
        body = await self._send(
            endpoint,
            params,
            method=method,
            signed=signed,
            listen_key=listen_key,
            recv_window=recv_window,
        )
        return self._decode(body, response_type)

    async def dispatch_bytes(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        *,
        method: str = "GET",
        signed: bool = False,
        recv_window: int | None = None,
    ) -> bytes:
        """Same as dispatch() but returns the raw 200 body."""
        return await self._send(
            endpoint, params, method=method, signed=signed, recv_window=recv_window
        )

    async def _send(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None,
        *,
        method: str,
        signed: bool,
        listen_key: str | None = None,
        recv_window: int | None = None,
    ) -> bytes:
        url = self.build_url(endpoint, params, signed=signed, recv_window=recv_window)
        data = {"listenKey": listen_key} if listen_key is not None else None
        session = await self._get_session()

        try:
            async with session.request(
                method,
                yarl.URL(url, encoded=True),
                headers=self._headers(signed=signed),
                data=data,
            ) as response:
                self._record_used_weight(response.headers)
                body = await response.read()
                status = response.status
                headers = response.headers
        except aiohttp.ClientError as e:
            if self._metrics is not None:
                self._metrics.record_transport_error()
            logger.warning(
                "Request failed",
                extra={"method": method, "url": url, "error": str(e)},
            )
            raise TransportError(f"{method} request failed: {e}") from e

        if status == 200:
            self._record_outcome("ok")
            return body

        try:
            error = self._classify(status, body, headers)
        except DecodeError:
            self._record_outcome(DecodeError.__name__)
            logger.warning(
                "Request rejected with undecodable body",
                extra={"method": method, "url": url, "status": status},
            )
            raise

        self._record_outcome(type(error).__name__)
        logger.warning(
            "Request rejected",
            extra={
                "method": method,
                "url": url,
                "status": status,
                "error_type": type(error).__name__,
            },
        )
        raise error

    def _classify(self, status: int, body: bytes, headers: Mapping[str, str]) -> HttpStatusError:
        if status == 400:
            try:
                payload = ExchangeErrorBody.model_validate_json(body)
            except ValidationError as e:
                raise DecodeError(f"Undecodable 400 body: {e.error_count()} errors") from e
            return ExchangeError(payload.code, payload.msg)
        if status == 401:
            return UnauthorizedError()
        if status == 429:
            retry_after_ms = None
            retry_after_s = _parse_int_header(headers, "Retry-After")
            if retry_after_s is not None:
                retry_after_ms = retry_after_s * 1000
            return RateLimitError(used_weight=self.used_weight, retry_after_ms=retry_after_ms)
        if status == 500:
            return ServerError()
        if status == 503:
            return ServiceUnavailableError()
        return UnexpectedStatusError(status)

    def _decode(self, body: bytes, response_type: Any) -> Any:
        try:
            if response_type is None:
                return orjson.loads(body)
            return _adapter(response_type).validate_json(body)
        except orjson.JSONDecodeError as e:
            raise DecodeError(f"Response is not valid JSON: {e}") from e
        except ValidationError as e:
            raise DecodeError(
                f"Response does not match {getattr(response_type, '__name__', response_type)}: "
                f"{e.error_count()} errors"
            ) from e

    def _record_used_weight(self, headers: Mapping[str, str]) -> None:
        for name in USED_WEIGHT_HEADERS:
            weight = _parse_int_header(headers, name)
            if weight is not None:
                self.used_weight = weight
                logger.debug("Used weight", extra={"used_weight": weight})
                if self._metrics is not None:
                    self._metrics.set_used_weight(weight)
                return

    def _record_outcome(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_response(outcome)

    # === Verb helpers ===

    async def get(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        response_type: Any = None,
    ) -> Any:
        return await self.dispatch(endpoint, params, response_type=response_type)

    async def get_signed(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        response_type: Any = None,
    ) -> Any:
        return await self.dispatch(endpoint, params, signed=True, response_type=response_type)

    async def get_signed_bytes(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
    ) -> bytes:
        return await self.dispatch_bytes(endpoint, params, signed=True)

    async def post_signed(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        response_type: Any = None,
    ) -> Any:
        return await self.dispatch(
            endpoint, params, method="POST", signed=True, response_type=response_type
        )

    async def delete_signed(
        self,
        endpoint: Endpoint,
        params: Mapping[str, str] | None = None,
        response_type: Any = None,
    ) -> Any:
        return await self.dispatch(
            endpoint, params, method="DELETE", signed=True, response_type=response_type
        )

    async def post(self, endpoint: Endpoint, response_type: Any = None) -> Any:
        return await self.dispatch(endpoint, method="POST", response_type=response_type)

    async def put(self, endpoint: Endpoint, listen_key: str, response_type: Any = None) -> Any:
        return await self.dispatch(
            endpoint, method="PUT", listen_key=listen_key, response_type=response_type
        )

    async def delete(self, endpoint: Endpoint, listen_key: str, response_type: Any = None) -> Any:
        return await self.dispatch(
            endpoint, method="DELETE", listen_key=listen_key, response_type=response_type
        )
