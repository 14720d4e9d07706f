"""
NBP Client Unit Tests

The upstream is replaced by httpx.MockTransport; backoff is disabled.
"""

import httpx
import pytest

from ratebook.models import CurrencyInfo, TableType
from ratebook.providers.base import TransportError
from ratebook.providers.nbp import NbpClient, normalize_count
from ratebook.providers.transport import HttpxTransport
from tests.conftest import series_payload

BASE_URL = "https://api.nbp.pl/api/exchangerates"


class RecordingHandler:
    """MockTransport handler replaying queued responses and recording requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def make_client(cache, handler, max_attempts=3) -> NbpClient:
    return NbpClient(
        cache,
        transport=HttpxTransport(httpx.MockTransport(handler)),
        base_url=BASE_URL,
        max_attempts=max_attempts,
        backoff_multiplier=0,
    )


class TestNormalizeCount:

    def test_clamps_range(self):
        assert normalize_count(0) == 1
        assert normalize_count(-5) == 1
        assert normalize_count(30) == 30
        assert normalize_count(1000) == 255


class TestNbpClient:
    """Tests for NbpClient."""

    @pytest.mark.asyncio
    async def test_get_currency_rates_builds_url_and_caches(self, cache):
        """Second identical call is served from cache."""
        payload = series_payload()
        handler = RecordingHandler(httpx.Response(200, json=payload))
        client = make_client(cache, handler)

        first = await client.get_currency_rates("usd", "a", 30)
        second = await client.get_currency_rates("USD", TableType.A, 30)

        assert first == payload
        assert second == payload
        assert len(handler.requests) == 1
        request = handler.requests[0]
        assert request.url.path == "/api/exchangerates/rates/A/USD/last/30/"
        assert request.url.params["format"] == "json"
        assert request.headers["Accept"] == "application/json"
        assert cache.has("currency_USD_A_last_30")

    @pytest.mark.asyncio
    async def test_get_table_clamps_count(self, cache):
        handler = RecordingHandler(httpx.Response(200, json=[{"table": "B", "rates": []}]))
        client = make_client(cache, handler)

        await client.get_table("B", 999)

        assert handler.requests[0].url.path == "/api/exchangerates/tables/B/last/255/"
        assert cache.has("table_B_last_255")

    @pytest.mark.asyncio
    async def test_get_current_rate(self, cache):
        handler = RecordingHandler(httpx.Response(200, json=series_payload("EUR", "C")))
        client = make_client(cache, handler)

        result = await client.get_current_rate("EUR", "C")

        assert result["code"] == "EUR"
        assert handler.requests[0].url.path == "/api/exchangerates/rates/C/EUR/"
        assert cache.has("current_EUR_C")

    @pytest.mark.asyncio
    async def test_not_found_returns_none_without_retry_or_cache(self, cache):
        """404 means no data: one request, nothing cached."""
        handler = RecordingHandler(httpx.Response(404))
        client = make_client(cache, handler)

        assert await client.get_currency_rates("XYZ") is None
        assert len(handler.requests) == 1
        assert not cache.has("currency_XYZ_A_last_30")

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self, cache):
        handler = RecordingHandler(
            httpx.Response(503),
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json=series_payload()),
        )
        client = make_client(cache, handler)

        result = await client.get_currency_rates("USD")

        assert result["code"] == "USD"
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_return_none(self, cache):
        """Three failed attempts are reported as no data."""
        handler = RecordingHandler(httpx.Response(500))
        client = make_client(cache, handler)

        assert await client.get_currency_rates("USD") is None
        assert len(handler.requests) == 3
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_malformed_json_is_retried_then_none(self, cache):
        handler = RecordingHandler(httpx.Response(200, content=b"<html>not json"))
        client = make_client(cache, handler, max_attempts=2)

        assert await client.get_table("A") is None
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_undecodable_body_is_retried_then_none(self, cache):
        handler = RecordingHandler(httpx.Response(200, content=b'{"code": "\xff\xfe"}'))
        client = make_client(cache, handler, max_attempts=2)

        assert await client.get_currency_rates("USD") is None
        assert len(handler.requests) == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_invalid_table_type_makes_no_request(self, cache):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = make_client(cache, handler)

        assert await client.get_table("D") is None
        assert await client.get_currency_rates("USD", "X") is None
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_get_available_currencies(self, cache):
        table = [{
            "table": "A",
            "no": "001/A/NBP/2024",
            "effectiveDate": "2024-01-02",
            "rates": [
                {"currency": "dolar amerykański", "code": "USD", "mid": 3.9432},
                {"currency": "euro", "code": "EUR", "mid": 4.3434},
            ],
        }]
        handler = RecordingHandler(httpx.Response(200, json=table))
        client = make_client(cache, handler)

        currencies = await client.get_available_currencies("A")

        assert currencies == [
            CurrencyInfo(code="USD", name="dolar amerykański"),
            CurrencyInfo(code="EUR", name="euro"),
        ]
        assert handler.requests[0].url.path == "/api/exchangerates/tables/A/last/1/"

    @pytest.mark.asyncio
    async def test_get_available_currencies_empty_on_failure(self, cache):
        handler = RecordingHandler(httpx.Response(404))
        client = make_client(cache, handler)

        assert await client.get_available_currencies("B") == []


class TestHttpxTransport:
    """Tests for error mapping in HttpxTransport."""

    @pytest.mark.asyncio
    async def test_http_error_type(self):
        transport = HttpxTransport(httpx.MockTransport(lambda r: httpx.Response(502)))

        with pytest.raises(TransportError) as exc_info:
            await transport.get(f"{BASE_URL}/tables/A/")

        assert exc_info.value.error_type == "HTTP_502"
        assert exc_info.value.provider == "nbp"

    @pytest.mark.asyncio
    async def test_timeout_error_type(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = HttpxTransport(httpx.MockTransport(handler))

        with pytest.raises(TransportError) as exc_info:
            await transport.get(f"{BASE_URL}/tables/A/", timeout=1.0)

        assert exc_info.value.error_type == "TIMEOUT"

    @pytest.mark.asyncio
    async def test_parse_error_type(self):
        transport = HttpxTransport(
            httpx.MockTransport(lambda r: httpx.Response(200, content=b"{broken"))
        )

        with pytest.raises(TransportError) as exc_info:
            await transport.get(f"{BASE_URL}/tables/A/")

        assert exc_info.value.error_type == "PARSE_ERROR"

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_parse_error(self):
        transport = HttpxTransport(
            httpx.MockTransport(lambda r: httpx.Response(200, content=b'{"code": "\xff\xfe"}'))
        )

        with pytest.raises(TransportError) as exc_info:
            await transport.get(f"{BASE_URL}/rates/A/USD/")

        assert exc_info.value.error_type == "PARSE_ERROR"
