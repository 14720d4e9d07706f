"""Test fixtures and in-memory fakes."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from ratebook.cache import RateCache
from ratebook.models import (
    BidAskRate,
    CurrencyInfo,
    MidRate,
    ModuleSettings,
    RateFilters,
    RateRecord,
    TableType,
)
from ratebook.settings_store import BaseConfigStore, ConfigurationError
from ratebook.store.base import BaseRateStore, StorageError
from ratebook.store.query import (
    coerce_positive_int,
    validate_sort_direction,
    validate_sort_field,
)


def make_record(
    code: str = "USD",
    effective: date = date(2024, 1, 2),
    mid: str | None = "3.95",
    bid: str | None = None,
    ask: str | None = None,
    table_type: TableType = TableType.A,
    name: str | None = None,
    table_number: str = "001/A/NBP/2024",
) -> RateRecord:
    if table_type is TableType.C:
        rate = BidAskRate(
            bid=Decimal(bid) if bid else None,
            ask=Decimal(ask) if ask else None,
        )
    else:
        rate = MidRate(mid=Decimal(mid) if mid else None)
    return RateRecord(
        currency_code=code,
        currency_name=name or f"{code} currency",
        table_type=table_type,
        rate=rate,
        effective_date=effective,
        table_number=table_number,
    )


def series_payload(
    code: str = "USD",
    table: str = "A",
    rates: list[dict[str, Any]] | None = None,
    currency: str = "dolar amerykański",
) -> dict[str, Any]:
    """Upstream single-currency series envelope."""
    if rates is None:
        rates = [
            {"no": "001/A/NBP/2024", "effectiveDate": "2024-01-02", "mid": 3.9432},
            {"no": "002/A/NBP/2024", "effectiveDate": "2024-01-03", "mid": 3.9909},
        ]
    return {"table": table, "currency": currency, "code": code, "rates": rates}


class FakeRateStore(BaseRateStore):
    """Dict-backed rate store with the same semantics as the SQL store."""

    def __init__(self):
        self.records: dict[tuple[str, TableType, date], RateRecord] = {}
        self.fail_upsert_for: set[str] = set()
        self.fail_all = False
        self._next_id = 1

    def _check(self) -> None:
        if self.fail_all:
            raise StorageError("connection lost")

    async def ensure_schema(self) -> None:
        self._check()

    async def upsert(self, record: RateRecord) -> RateRecord:
        self._check()
        if record.currency_code in self.fail_upsert_for:
            raise StorageError(f"write failed for {record.currency_code}")

        now = datetime.now(timezone.utc)
        existing = self.records.get(record.natural_key)
        stored = record.model_copy(update={
            "id": existing.id if existing else self._next_id,
            "created_at": existing.created_at if existing else now,
            "updated_at": now,
        })
        if existing is None:
            self._next_id += 1
        self.records[record.natural_key] = stored
        return stored

    async def find_by_key(self, currency_code, table_type, effective_date):
        self._check()
        return self.records.get((currency_code, table_type, effective_date))

    async def find_latest(self, currency_code, table_type):
        self._check()
        matching = [
            r for r in self.records.values()
            if r.currency_code == currency_code and r.table_type == table_type
        ]
        return max(matching, key=lambda r: r.effective_date, default=None)

    def _filtered(self, filters: RateFilters | None) -> list[RateRecord]:
        records = list(self.records.values())
        if filters is None:
            return records
        if filters.currency_code:
            records = [r for r in records if r.currency_code == filters.currency_code]
        if filters.table_type:
            records = [r for r in records if r.table_type == filters.table_type]
        if filters.date_from:
            records = [r for r in records if r.effective_date >= filters.date_from]
        if filters.date_to:
            records = [r for r in records if r.effective_date <= filters.date_to]
        if filters.search:
            term = filters.search.lower()
            records = [
                r for r in records
                if term in r.currency_code.lower() or term in r.currency_name.lower()
            ]
        return records

    async def query(self, filters=None, page=1, page_size=10,
                    sort_field="effective_date", sort_direction="DESC"):
        self._check()
        field = validate_sort_field(sort_field)
        reverse = validate_sort_direction(sort_direction) == "DESC"
        limit = coerce_positive_int(page_size, 10)
        offset = (coerce_positive_int(page, 1) - 1) * limit

        def sort_key(record: RateRecord):
            value = getattr(record, field)
            return (value is not None, value if value is not None else 0, record.id)

        records = sorted(self._filtered(filters), key=sort_key, reverse=reverse)
        return records[offset:offset + limit]

    async def count(self, filters=None):
        self._check()
        return len(self._filtered(filters))

    async def delete_older_than(self, cutoff):
        self._check()
        old = [k for k, r in self.records.items() if r.effective_date < cutoff]
        for key in old:
            del self.records[key]
        return len(old)

    async def delete_by_table_type(self, table_type):
        self._check()
        old = [k for k, r in self.records.items() if r.table_type == table_type]
        for key in old:
            del self.records[key]
        return len(old)

    async def distinct_currencies(self, table_type=None):
        self._check()
        pairs = {
            (r.currency_code, r.currency_name)
            for r in self.records.values()
            if table_type is None or r.table_type == table_type
        }
        return [CurrencyInfo(code=c, name=n) for c, n in sorted(pairs)]

    async def rates_for_period(self, currency_code, table_type, date_from, date_to):
        self._check()
        return sorted(
            (
                r for r in self.records.values()
                if r.currency_code == currency_code
                and r.table_type == table_type
                and date_from <= r.effective_date <= date_to
            ),
            key=lambda r: r.effective_date,
        )

    async def latest_effective_date(self):
        self._check()
        return max((r.effective_date for r in self.records.values()), default=None)


class FakeConfigStore(BaseConfigStore):
    """In-memory settings holder."""

    def __init__(self, settings: ModuleSettings | None = None):
        self.settings = settings
        self.saves = 0

    async def load(self) -> ModuleSettings:
        if self.settings is None:
            raise ConfigurationError("Module settings have not been initialised")
        return self.settings

    async def save(self, settings: ModuleSettings) -> None:
        self.settings = settings
        self.saves += 1


class FakeClock:
    """Controllable time source for the cache."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> FakeRateStore:
    return FakeRateStore()


@pytest.fixture
def module_settings() -> ModuleSettings:
    return ModuleSettings(
        enabled_currencies=["EUR", "USD", "GBP"],
        table_type=TableType.A,
        items_per_page=10,
        cron_token="s3cret",
    )


@pytest.fixture
def config_store(module_settings) -> FakeConfigStore:
    return FakeConfigStore(module_settings)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> RateCache:
    return RateCache(ttl=3600, clock=clock)
