"""
Currency Converter

Stored rates are quoted as "units of the quotation currency per 1 unit of
foreign currency". An amount is therefore converted in two hops:

    source --(PivotExchange)--> pivot --(pivot rate)--> quotation unit
    quotation unit / target rate --> target

Targets without a usable rate are omitted, never raised.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Protocol

from ratebook.models import (
    ConversionPage,
    ConvertedPrice,
    ModuleSettings,
    Pagination,
    TableType,
)
from ratebook.store.base import BaseRateStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
PRICE_PRECISION = 60


class PivotExchange(Protocol):
    """Capability converting an amount into the pivot currency."""

    async def to_pivot(self, amount: Decimal, source: str, pivot: str) -> Decimal | None:
        ...


def divide_to_cents(amount: Decimal, rate: Decimal) -> Decimal | None:
    """amount / rate rounded half-up to cents, or None when it cannot be represented."""
    with localcontext() as ctx:
        ctx.prec = PRICE_PRECISION
        try:
            return (amount / rate).quantize(CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None


async def latest_rate_value(
    store: BaseRateStore,
    currency_code: str,
    table_type: TableType
) -> Decimal | None:
    """Latest usable (> 0) rate value of a currency, or None."""
    record = await store.find_latest(currency_code, table_type)
    if record is None:
        return None
    value = record.value()
    if value is None or value <= 0:
        return None
    return value


class StoredRateExchange:
    """PivotExchange crossing through the stored quotation-unit rates."""

    def __init__(self, store: BaseRateStore, table_type: TableType, quotation_unit: str):
        self.store = store
        self.table_type = table_type
        self.quotation_unit = quotation_unit

    async def _unit_rate(self, currency_code: str) -> Decimal | None:
        if currency_code == self.quotation_unit:
            return Decimal(1)
        return await latest_rate_value(self.store, currency_code, self.table_type)

    async def to_pivot(self, amount: Decimal, source: str, pivot: str) -> Decimal | None:
        if source == pivot:
            return amount
        source_rate = await self._unit_rate(source)
        pivot_rate = await self._unit_rate(pivot)
        if source_rate is None or pivot_rate is None:
            return None
        return amount * source_rate / pivot_rate


class CurrencyConverter:
    """
    Converts an amount into every enabled currency.

    Args:
        store: Rate store read for the latest rates.
        settings: Module settings (enabled currencies, table type,
            base/pivot currency, quotation unit, page size).
        exchange: Source → pivot conversion; defaults to stored rates.
    """

    def __init__(
        self,
        store: BaseRateStore,
        settings: ModuleSettings,
        exchange: PivotExchange | None = None,
    ):
        self.store = store
        self.settings = settings
        self.exchange = exchange or StoredRateExchange(
            store, settings.table_type, settings.quotation_unit
        )

    async def to_quotation_unit(self, amount: Decimal, source_currency: str) -> Decimal | None:
        """Amount expressed in the quotation unit, or None when not convertible."""
        pivot = self.settings.base_currency
        source = source_currency.strip().upper()

        pivot_amount = amount
        if source != pivot:
            pivot_amount = await self.exchange.to_pivot(amount, source, pivot)
            if pivot_amount is None:
                logger.warning(f"Cannot convert {source} to pivot currency {pivot}")
                return None

        if pivot == self.settings.quotation_unit:
            return pivot_amount

        pivot_rate = await latest_rate_value(self.store, pivot, self.settings.table_type)
        if pivot_rate is None:
            logger.warning(f"No usable rate stored for pivot currency {pivot}")
            return None
        return pivot_amount * pivot_rate

    async def convert(self, amount: Decimal | float | str, source_currency: str) -> list[ConvertedPrice]:
        amount = Decimal(str(amount))
        if amount <= 0:
            return []

        amount_in_unit = await self.to_quotation_unit(amount, source_currency)
        if amount_in_unit is None:
            return []

        converted: list[ConvertedPrice] = []
        for currency_code in self.settings.enabled_currencies:
            currency_code = currency_code.strip()
            if not currency_code:
                continue

            record = await self.store.find_latest(currency_code, self.settings.table_type)
            rate = record.value() if record else None
            if rate is None or rate <= 0:
                logger.debug(f"Skipping {currency_code}: no usable rate")
                continue

            price = divide_to_cents(amount_in_unit, rate)
            if price is None:
                logger.warning(f"Skipping {currency_code}: converted amount out of range")
                continue

            converted.append(ConvertedPrice(
                currency_code=currency_code,
                currency_name=record.currency_name,
                rate=rate,
                converted_price=price,
            ))

        return converted

    async def convert_paginated(
        self,
        amount: Decimal | float | str,
        source_currency: str,
        page: int = 1,
        items_per_page: int | None = None
    ) -> ConversionPage:
        all_rates = await self.convert(amount, source_currency)
        per_page = max(1, int(items_per_page or self.settings.items_per_page))

        total = len(all_rates)
        total_pages = math.ceil(total / per_page) if total else 1
        page = max(1, min(int(page), total_pages))
        offset = (page - 1) * per_page

        return ConversionPage(
            rates=all_rates[offset:offset + per_page],
            all_rates=all_rates,
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                items_per_page=per_page,
            ),
            total_rates=total,
        )
