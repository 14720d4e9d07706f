"""
Currency Converter Tests
"""

from datetime import date
from decimal import Decimal

import pytest

from ratebook.models import ModuleSettings, TableType
from ratebook.services.converter import CurrencyConverter, StoredRateExchange
from tests.conftest import FakeRateStore, make_record


class FixedExchange:
    """PivotExchange returning a fixed multiple of the amount."""

    def __init__(self, factor: Decimal | None):
        self.factor = factor
        self.calls = []

    async def to_pivot(self, amount, source, pivot):
        self.calls.append((amount, source, pivot))
        return None if self.factor is None else amount * self.factor


async def seed(store: FakeRateStore) -> None:
    await store.upsert(make_record("EUR", mid="4.30", name="euro"))
    await store.upsert(make_record("USD", mid="4.10", effective=date(2024, 1, 1), name="US dollar"))
    await store.upsert(make_record("USD", mid="3.95", name="US dollar"))
    await store.upsert(make_record("GBP", mid="5.00", name="pound sterling"))


class TestCurrencyConverter:
    """Tests for CurrencyConverter."""

    def setup_method(self):
        self.store = FakeRateStore()
        self.settings = ModuleSettings(
            enabled_currencies=["EUR", "USD", "GBP"],
            base_currency="EUR",
            quotation_unit="PLN",
            items_per_page=2,
        )

    @pytest.mark.asyncio
    async def test_converts_through_pivot(self):
        """100 EUR at 4.30 PLN is 430 PLN, 430 / 3.95 = 108.86 USD."""
        await seed(self.store)
        converter = CurrencyConverter(self.store, self.settings)

        converted = {c.currency_code: c for c in await converter.convert(100, "EUR")}

        assert converted["USD"].converted_price == Decimal("108.86")
        assert converted["USD"].rate == Decimal("3.95")
        assert converted["USD"].currency_name == "US dollar"
        assert converted["EUR"].converted_price == Decimal("100.00")
        assert converted["GBP"].converted_price == Decimal("86.00")

    @pytest.mark.asyncio
    async def test_uses_latest_rate(self):
        await seed(self.store)
        converter = CurrencyConverter(self.store, self.settings)

        usd = [c for c in await converter.convert("100", "EUR") if c.currency_code == "USD"][0]

        assert usd.rate == Decimal("3.95")

    @pytest.mark.asyncio
    async def test_rounds_half_up(self):
        settings = self.settings.model_copy(update={
            "base_currency": "PLN", "enabled_currencies": ["USD"]
        })
        await self.store.upsert(make_record("USD", mid="8"))
        converter = CurrencyConverter(self.store, settings)

        converted = await converter.convert("0.20", "PLN")

        assert converted[0].converted_price == Decimal("0.03")

    @pytest.mark.asyncio
    async def test_large_amount_keeps_cent_precision(self):
        settings = self.settings.model_copy(update={
            "base_currency": "PLN", "enabled_currencies": ["USD"]
        })
        await self.store.upsert(make_record("USD", mid="8"))
        converter = CurrencyConverter(self.store, settings)

        converted = await converter.convert(Decimal("1e30"), "PLN")

        assert converted[0].converted_price == Decimal("125000000000000000000000000000.00")

    @pytest.mark.asyncio
    async def test_unrepresentable_amount_is_skipped(self):
        settings = self.settings.model_copy(update={
            "base_currency": "PLN", "enabled_currencies": ["USD"]
        })
        await self.store.upsert(make_record("USD", mid="3.95"))
        converter = CurrencyConverter(self.store, settings)

        assert await converter.convert(Decimal("1e80"), "PLN") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5, "0.00"])
    async def test_non_positive_amount_is_empty(self, amount):
        await seed(self.store)
        converter = CurrencyConverter(self.store, self.settings)

        assert await converter.convert(amount, "EUR") == []

    @pytest.mark.asyncio
    async def test_missing_target_rate_is_skipped(self):
        await seed(self.store)
        settings = self.settings.model_copy(update={"enabled_currencies": ["USD", "JPY", "GBP"]})
        converter = CurrencyConverter(self.store, settings)

        converted = await converter.convert(100, "EUR")

        assert [c.currency_code for c in converted] == ["USD", "GBP"]

    @pytest.mark.asyncio
    async def test_missing_pivot_rate_is_empty(self):
        await self.store.upsert(make_record("USD", mid="3.95"))
        converter = CurrencyConverter(self.store, self.settings)

        assert await converter.convert(100, "EUR") == []

    @pytest.mark.asyncio
    async def test_pivot_equal_to_quotation_unit_skips_pivot_rate(self):
        await self.store.upsert(make_record("USD", mid="4.00"))
        settings = self.settings.model_copy(update={
            "base_currency": "PLN", "enabled_currencies": ["USD"]
        })
        converter = CurrencyConverter(self.store, settings)

        converted = await converter.convert(100, "PLN")

        assert converted[0].converted_price == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_table_c_uses_bid_ask_midpoint(self):
        await self.store.upsert(make_record("USD", table_type=TableType.C, bid="3.90", ask="4.10"))
        await self.store.upsert(make_record("GBP", table_type=TableType.C, bid="5.00"))
        settings = self.settings.model_copy(update={
            "table_type": TableType.C, "base_currency": "PLN", "enabled_currencies": ["USD", "GBP"]
        })
        converter = CurrencyConverter(self.store, settings)

        converted = await converter.convert(100, "PLN")

        assert [c.currency_code for c in converted] == ["USD"]
        assert converted[0].rate == Decimal("4.00")
        assert converted[0].converted_price == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_injected_exchange_for_foreign_source(self):
        """Source differing from pivot goes through the PivotExchange."""
        await seed(self.store)
        exchange = FixedExchange(Decimal("0.5"))
        converter = CurrencyConverter(self.store, self.settings, exchange=exchange)

        converted = {c.currency_code: c for c in await converter.convert(200, "chf")}

        assert exchange.calls == [(Decimal("200"), "CHF", "EUR")]
        assert converted["EUR"].converted_price == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_unconvertible_source_is_empty(self):
        await seed(self.store)
        converter = CurrencyConverter(self.store, self.settings, exchange=FixedExchange(None))

        assert await converter.convert(100, "CHF") == []

    @pytest.mark.asyncio
    async def test_paginated(self):
        await seed(self.store)
        converter = CurrencyConverter(self.store, self.settings)

        first = await converter.convert_paginated(100, "EUR", page=1)
        second = await converter.convert_paginated(100, "EUR", page=2)
        clamped = await converter.convert_paginated(100, "EUR", page=99)

        assert first.total_rates == 3
        assert first.pagination.total_pages == 2
        assert [c.currency_code for c in first.rates] == ["EUR", "USD"]
        assert [c.currency_code for c in second.rates] == ["GBP"]
        assert len(second.all_rates) == 3
        assert clamped.pagination.current_page == 2

    @pytest.mark.asyncio
    async def test_paginated_empty(self):
        converter = CurrencyConverter(self.store, self.settings)

        page = await converter.convert_paginated(100, "EUR", page=0, items_per_page=5)

        assert page.rates == []
        assert page.total_rates == 0
        assert page.pagination.total_pages == 1
        assert page.pagination.current_page == 1
        assert page.pagination.items_per_page == 5


class TestStoredRateExchange:

    @pytest.mark.asyncio
    async def test_crosses_through_quotation_unit(self):
        store = FakeRateStore()
        await seed(store)
        exchange = StoredRateExchange(store, TableType.A, "PLN")

        assert await exchange.to_pivot(Decimal("86"), "EUR", "PLN") == Decimal("369.80")
        assert await exchange.to_pivot(Decimal("5"), "GBP", "GBP") == Decimal("5")
        assert await exchange.to_pivot(Decimal("5"), "JPY", "EUR") is None
