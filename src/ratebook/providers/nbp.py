"""
National Bank of Poland (NBP) Exchange Rate Client

API Documentation: https://api.nbp.pl/

Three lookups are supported: a whole table, a currency's recent series and a
currency's current rate. Successful responses are cached; a 404 means "no
data" and is never cached. Transport failures are retried with exponential
backoff and then reported as no data.
"""

import logging
from typing import Any

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ratebook.cache import RateCache
from ratebook.models import CurrencyInfo, TableType
from ratebook.providers.base import Transport, TransportError
from ratebook.providers.transport import HttpxTransport

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.nbp.pl/api/exchangerates"
DEFAULT_COUNT = 30
MAX_RATES_COUNT = 255


def normalize_count(count: int) -> int:
    """Clamp the requested series length into [1, 255]."""
    return min(MAX_RATES_COUNT, max(1, int(count)))


class NbpClient:
    """
    Cached, retrying client for the NBP exchange rate API.

    Table response:  [{"table": "A", "no": "...", "effectiveDate": "...", "rates": [...]}]
    Series response: {"table": "A", "currency": "...", "code": "USD", "rates": [...]}
    """

    def __init__(
        self,
        cache: RateCache,
        transport: Transport | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_multiplier: float = 2.0,
        cache_ttl: int | None = None,
    ):
        self.cache = cache
        self.transport = transport or HttpxTransport()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self.cache_ttl = cache_ttl

    async def get_table(
        self,
        table_type: str | TableType = TableType.A,
        count: int = DEFAULT_COUNT
    ) -> list[dict[str, Any]] | None:
        """Fetch the last ``count`` publications of a whole table."""
        table = self._table_type(table_type)
        if table is None:
            return None

        count = normalize_count(count)
        return await self._cached_fetch(
            f"table_{table.value}_last_{count}",
            f"/tables/{table.value}/last/{count}/"
        )

    async def get_currency_rates(
        self,
        currency_code: str,
        table_type: str | TableType = TableType.A,
        count: int = DEFAULT_COUNT
    ) -> dict[str, Any] | None:
        """Fetch the last ``count`` rates of one currency."""
        table = self._table_type(table_type)
        if table is None:
            return None

        code = currency_code.strip().upper()
        count = normalize_count(count)
        return await self._cached_fetch(
            f"currency_{code}_{table.value}_last_{count}",
            f"/rates/{table.value}/{code}/last/{count}/"
        )

    async def get_current_rate(
        self,
        currency_code: str,
        table_type: str | TableType = TableType.A
    ) -> dict[str, Any] | None:
        """Fetch the most recent rate of one currency."""
        table = self._table_type(table_type)
        if table is None:
            return None

        code = currency_code.strip().upper()
        return await self._cached_fetch(
            f"current_{code}_{table.value}",
            f"/rates/{table.value}/{code}/"
        )

    async def get_available_currencies(
        self,
        table_type: str | TableType = TableType.A
    ) -> list[CurrencyInfo]:
        """List the currencies quoted in the latest publication of a table."""
        tables = await self.get_table(table_type, 1)
        if not tables or not isinstance(tables, list) or not isinstance(tables[0], dict):
            return []

        return [
            CurrencyInfo(code=rate["code"], name=rate["currency"])
            for rate in tables[0].get("rates") or []
            if isinstance(rate, dict) and "code" in rate and "currency" in rate
        ]

    def _table_type(self, table_type: str | TableType) -> TableType | None:
        try:
            return TableType.coerce(table_type)
        except ValueError:
            logger.error(f"Invalid table type: {table_type}")
            return None

    async def _cached_fetch(self, cache_key: str, path: str) -> Any | None:
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        response = await self._request(f"{self.base_url}{path}")
        if response is None:
            return None

        self.cache.set(cache_key, response, self.cache_ttl)
        return response

    async def _request(self, url: str) -> Any | None:
        """
        GET with retry. Backoff between attempts is
        ``backoff_multiplier * 2^(attempt-1)`` seconds (2s, 4s by default).
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, exp_base=2),
            retry=retry_if_exception_type(TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self.transport.get(
                        url,
                        timeout=self.timeout,
                        params={"format": "json"}
                    )
        except TransportError as e:
            logger.error(
                f"❌ NBP API request failed after {self.max_attempts} attempts: "
                f"{e} ({e.error_type}, {url})"
            )
        return None
