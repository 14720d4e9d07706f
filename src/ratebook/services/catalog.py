"""
Currency Catalog - currencies a table type can be configured with.
"""

import logging

from ratebook.cache import RateCache
from ratebook.currencies import default_currencies
from ratebook.models import CurrencyInfo, TableType
from ratebook.providers.nbp import NbpClient

logger = logging.getLogger(__name__)

CATALOG_TTL = 604800  # 7 days


class CurrencyCatalog:
    """Upstream currency list per table, cached, with built-in fallback."""

    def __init__(self, client: NbpClient, cache: RateCache, ttl: int = CATALOG_TTL):
        self.client = client
        self.cache = cache
        self.ttl = ttl

    @staticmethod
    def cache_key(table_type: TableType) -> str:
        return f"currencies_table_{table_type.value}"

    async def available(self, table_type: str | TableType = TableType.A) -> list[CurrencyInfo]:
        table = TableType.coerce(table_type)
        key = self.cache_key(table)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        currencies = await self.client.get_available_currencies(table)
        if not currencies:
            logger.warning(f"Upstream currency list for table {table.value} unavailable, using defaults")
            return default_currencies(table)

        catalog = [
            CurrencyInfo(code=c.code, name=f"{c.code} - {c.name}")
            for c in currencies
        ]
        self.cache.set(key, catalog, self.ttl)
        return catalog
