"""
History Service - validated, paginated access to stored rates.
"""

import logging
from typing import Any

from ratebook.models import (
    HistoryFilters,
    HistoryPage,
    ModuleSettings,
    Pagination,
    RateFilters,
)
from ratebook.store.base import BaseRateStore
from ratebook.store.query import (
    DEFAULT_SORT_FIELD,
    coerce_positive_int,
    page_count,
    validate_sort_field,
)

logger = logging.getLogger(__name__)

ALLOWED_ORDER_WAY = ("asc", "desc")


def validate_order_way(order_way: Any) -> str:
    order_way = str(order_way or "").strip().lower()
    return order_way if order_way in ALLOWED_ORDER_WAY else "desc"


class HistoryService:
    """Rate history of the active table type."""

    def __init__(self, store: BaseRateStore, settings: ModuleSettings):
        self.store = store
        self.settings = settings

    def build_filters(self, currency: str, search: str) -> RateFilters:
        """Scope to the active table; honor only enabled currency filters."""
        filters = RateFilters(table_type=self.settings.table_type)

        currency = (currency or "").strip()
        if currency and currency in self.settings.enabled_currencies:
            filters.currency_code = currency

        search = (search or "").strip()
        if search:
            filters.search = search

        return filters

    async def get_history(
        self,
        page: Any = 1,
        order_by: Any = DEFAULT_SORT_FIELD,
        order_way: Any = "desc",
        currency: str = "",
        search: str = "",
    ) -> HistoryPage:
        page = coerce_positive_int(page, 1)
        order_by = validate_sort_field(order_by)
        order_way = validate_order_way(order_way)
        items_per_page = self.settings.items_per_page
        filters = self.build_filters(currency, search)

        rates = await self.store.query(filters, page, items_per_page, order_by, order_way)
        total = await self.store.count(filters)
        available = await self.store.distinct_currencies(self.settings.table_type)

        return HistoryPage(
            rates=rates,
            pagination=Pagination(
                current_page=page,
                total_pages=page_count(total, items_per_page),
                items_per_page=items_per_page,
                total_rates=total,
            ),
            filters=HistoryFilters(
                order_by=order_by,
                order_way=order_way,
                currency_filter=currency or "",
                search_query=search or "",
            ),
            available_currencies=available,
            table_type=self.settings.table_type,
        )
