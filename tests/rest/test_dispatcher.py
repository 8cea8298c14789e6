"""Tests for the REST dispatcher."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qsl, urlsplit

import aiohttp
import orjson
import pytest
import yarl
from prometheus_client.registry import CollectorRegistry

from binancekit.config import ClientConfig, Credentials
from binancekit.endpoints import DownloadLink, Futures, Spot
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
from binancekit.models.market import ServerTime
from binancekit.rest.client import RestClient
from binancekit.signing import signature

FIXED_MS = 1704067200000
SECRET = "test-secret"


def fixed_clock() -> datetime:
    return datetime(2024, 1, 1, tzinfo=UTC)


def _body(payload: Any) -> bytes:
    return orjson.dumps(payload)


def _sent_url(request: MagicMock) -> str:
    return str(request.call_args.args[1])


class TestRestClient:
    """Tests for RestClient dispatch."""

    @pytest.fixture
    def client(self) -> RestClient:
        """Create a client with credentials and a fixed clock."""
        return RestClient(
            "https://api.binance.com/",
            Credentials(api_key="test-key", secret_key=SECRET),
            recv_window=5000,
            clock=fixed_clock,
        )

    @pytest.fixture
    def mock_response(self) -> MagicMock:
        """Create mock aiohttp response."""
        response = MagicMock()
        response.status = 200
        response.headers = {}
        response.read = AsyncMock(return_value=b"{}")
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    @pytest.mark.asyncio
    async def test_success_decodes_typed(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """200 body is validated into the response type."""
        mock_response.read = AsyncMock(return_value=_body({"serverTime": 1499827319559}))

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            result = await client.get(Spot.TIME, response_type=ServerTime)

        assert result == ServerTime(server_time=1499827319559)
        await client.close()

    @pytest.mark.asyncio
    async def test_success_raw_json(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """Without a response type the parsed JSON is returned."""
        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            result = await client.get(Spot.PING)

        assert result == {}
        await client.close()

    @pytest.mark.asyncio
    async def test_unsigned_url_and_headers(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """Unsigned GET carries the sorted query and the API key header."""
        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            await client.get(Spot.DEPTH, {"symbol": "BNBBTC", "limit": "5"})

        method = request.call_args.args[0]
        url = _sent_url(request)
        assert method == "GET"
        assert url == "https://api.binance.com/api/v3/depth?limit=5&symbol=BNBBTC"
        headers = request.call_args.kwargs["headers"]
        assert headers["X-MBX-APIKEY"] == "test-key"
        assert headers["User-Agent"] == "binancekit"
        assert "Content-Type" not in headers
        assert request.call_args.kwargs["data"] is None
        await client.close()

    @pytest.mark.asyncio
    async def test_signed_url(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """Signed GET appends timestamp, recvWindow and a valid signature."""
        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            await client.get_signed(Spot.ACCOUNT)

        url = _sent_url(request)
        query = urlsplit(url).query
        unsigned, _, digest = query.rpartition("&signature=")
        assert unsigned == f"recvWindow=5000&timestamp={FIXED_MS}"
        assert digest == signature(unsigned, SECRET)
        assert request.call_args.kwargs["headers"]["Content-Type"] == (
            "application/x-www-form-urlencoded"
        )
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["a,b", "x:y", "a@b", "a/b", '["BTCUSDT","BNBBTC"]'])
    async def test_signed_query_not_requoted(
        self,
        client: RestClient,
        mock_response: MagicMock,
        value: str,
    ) -> None:
        """Escaped reserved characters reach aiohttp exactly as signed."""
        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            await client.post_signed(Spot.ORDER_TEST, {"note": value})

        sent = request.call_args.args[1]
        assert isinstance(sent, yarl.URL)
        query = sent.raw_query_string
        unsigned, _, digest = query.rpartition("&signature=")
        assert "%" in unsigned.split("&")[0]
        assert digest == signature(unsigned, SECRET)
        assert str(sent) == client.build_url(Spot.ORDER_TEST, {"note": value}, signed=True)
        await client.close()

    @pytest.mark.asyncio
    async def test_per_call_recv_window(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """recv_window=0 on a call omits recvWindow."""
        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            await client.dispatch(Spot.ACCOUNT, signed=True, recv_window=0)

        url = _sent_url(request)
        params = dict(parse_qsl(urlsplit(url).query))
        assert "recvWindow" not in params
        assert params["timestamp"] == str(FIXED_MS)
        await client.close()

    @pytest.mark.asyncio
    async def test_listen_key_form_body(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """PUT with a listen key sends it as the form body."""
        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            await client.put(Spot.USER_DATA_STREAM, "lk-123")

        method = request.call_args.args[0]
        url = _sent_url(request)
        assert method == "PUT"
        assert url == "https://api.binance.com/api/v3/userDataStream"
        assert request.call_args.kwargs["data"] == {"listenKey": "lk-123"}
        await client.close()

    @pytest.mark.asyncio
    async def test_download_link_used_verbatim(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """Absolute download links bypass the host and return raw bytes."""
        link = DownloadLink("https://bucket.s3.amazonaws.com/data.tar.gz?X-Amz-Signature=abc")
        mock_response.read = AsyncMock(return_value=b"\x1f\x8b archive")

        with patch.object(
            aiohttp.ClientSession, "request", return_value=mock_response
        ) as request:
            body = await client.dispatch_bytes(link)

        assert body == b"\x1f\x8b archive"
        assert _sent_url(request) == link.url
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_type"),
        [
            (401, UnauthorizedError),
            (429, RateLimitError),
            (500, ServerError),
            (503, ServiceUnavailableError),
            (418, UnexpectedStatusError),
            (599, UnexpectedStatusError),
        ],
    )
    async def test_status_classification(
        self,
        client: RestClient,
        mock_response: MagicMock,
        status: int,
        error_type: type[HttpStatusError],
    ) -> None:
        """Each non-200 status maps to exactly one error type."""
        mock_response.status = status
        mock_response.read = AsyncMock(return_value=b"")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(error_type) as exc_info,
        ):
            await client.get(Spot.PING)

        assert type(exc_info.value) is error_type
        assert exc_info.value.status == status
        await client.close()

    @pytest.mark.asyncio
    async def test_exchange_error(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """400 with {code, msg} becomes ExchangeError."""
        mock_response.status = 400
        mock_response.read = AsyncMock(
            return_value=_body({"code": -1121, "msg": "Invalid symbol."})
        )

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(ExchangeError) as exc_info,
        ):
            await client.get(Spot.DEPTH, {"symbol": "NOPE"})

        assert exc_info.value.code == -1121
        assert exc_info.value.message == "Invalid symbol."
        assert exc_info.value.status == 400
        await client.close()

    @pytest.mark.asyncio
    async def test_exchange_error_on_signed_post(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """Classification does not depend on the verb or on signing."""
        mock_response.status = 400
        mock_response.read = AsyncMock(return_value=_body({"code": -1000, "msg": "x"}))

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(ExchangeError) as exc_info,
        ):
            await client.post_signed(Spot.ORDER_TEST, {"symbol": "BNBBTC"})

        assert (exc_info.value.code, exc_info.value.message) == (-1000, "x")
        await client.close()

    @pytest.mark.asyncio
    async def test_undecodable_400(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """400 without the structured body is a decode failure."""
        mock_response.status = 400
        mock_response.read = AsyncMock(return_value=b"<html>Bad Request</html>")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(DecodeError),
        ):
            await client.get(Spot.PING)

        await client.close()

    @pytest.mark.asyncio
    async def test_undecodable_400_counted(
        self,
        mock_response: MagicMock,
    ) -> None:
        """Undecodable 400 still shows up in the response counter."""
        registry = CollectorRegistry()
        client = RestClient("https://api.binance.com", metrics=ClientMetrics(registry=registry))
        mock_response.status = 400
        mock_response.read = AsyncMock(return_value=b"<html>Bad Request</html>")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(DecodeError),
        ):
            await client.get(Spot.PING)

        assert registry.get_sample_value(
            "binancekit_rest_responses_total", {"outcome": "DecodeError"}
        ) == 1.0
        await client.close()

    @pytest.mark.asyncio
    async def test_rate_limit_details(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """429 reports used weight and Retry-After in ms."""
        mock_response.status = 429
        mock_response.headers = {"X-MBX-USED-WEIGHT-1M": "1250", "Retry-After": "7"}
        mock_response.read = AsyncMock(return_value=b"")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(RateLimitError) as exc_info,
        ):
            await client.get(Spot.PING)

        assert exc_info.value.used_weight == 1250
        assert exc_info.value.retry_after_ms == 7000
        await client.close()

    @pytest.mark.asyncio
    async def test_used_weight_recorded(
        self,
        mock_response: MagicMock,
    ) -> None:
        """Used weight header updates the client and the gauge."""
        registry = CollectorRegistry()
        client = RestClient("https://api.binance.com", metrics=ClientMetrics(registry=registry))
        mock_response.headers = {"X-MBX-USED-WEIGHT": "17"}

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            await client.get(Spot.PING)

        assert client.used_weight == 17
        assert registry.get_sample_value("binancekit_rest_used_weight") == 17.0
        assert registry.get_sample_value(
            "binancekit_rest_responses_total", {"outcome": "ok"}
        ) == 1.0
        await client.close()

    @pytest.mark.asyncio
    async def test_garbage_used_weight_ignored(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        mock_response.headers = {"X-MBX-USED-WEIGHT-1M": "lots"}

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            await client.get(Spot.PING)

        assert client.used_weight is None
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        """Connection failures surface as TransportError with the cause kept."""
        registry = CollectorRegistry()
        client = RestClient("https://api.binance.com", metrics=ClientMetrics(registry=registry))
        cause = aiohttp.ClientConnectionError("refused")

        with (
            patch.object(aiohttp.ClientSession, "request", side_effect=cause),
            pytest.raises(TransportError) as exc_info,
        ):
            await client.get(Spot.PING)

        assert exc_info.value.__cause__ is cause
        assert registry.get_sample_value("binancekit_rest_transport_errors_total") == 1.0
        await client.close()

    @pytest.mark.asyncio
    async def test_body_shape_mismatch(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        """200 body that does not fit the response type is a DecodeError."""
        mock_response.read = AsyncMock(return_value=_body({"unexpected": True}))

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(DecodeError),
        ):
            await client.get(Spot.TIME, response_type=ServerTime)

        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json(
        self,
        client: RestClient,
        mock_response: MagicMock,
    ) -> None:
        mock_response.read = AsyncMock(return_value=b"not json")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(DecodeError),
        ):
            await client.get(Spot.PING)

        await client.close()


class TestBuildUrl:
    """URL construction without I/O."""

    def test_host_trailing_slash_trimmed(self) -> None:
        client = RestClient("https://api.binance.com/")
        assert client.build_url(Spot.PING) == "https://api.binance.com/api/v3/ping"

    def test_signed_without_params(self) -> None:
        client = RestClient(
            "https://api.binance.com", Credentials(secret_key=SECRET), clock=fixed_clock
        )
        url = client.build_url(Spot.ACCOUNT, signed=True)
        expected_query = f"timestamp={FIXED_MS}"
        assert url == (
            "https://api.binance.com/api/v3/account?"
            f"{expected_query}&signature={signature(expected_query, SECRET)}"
        )

    def test_from_config_futures(self) -> None:
        config = ClientConfig(recv_window=1000)
        client = RestClient.from_config(config, Credentials(secret_key=SECRET), futures=True)
        assert client.host == "https://fapi.binance.com"
        url = client.build_url(Futures.ACCOUNT, signed=True)
        assert url.startswith("https://fapi.binance.com/fapi/v2/account?recvWindow=1000&")

    def test_no_api_key_header_without_credentials(self) -> None:
        client = RestClient("https://api.binance.com")
        assert "X-MBX-APIKEY" not in client._headers(signed=False)
