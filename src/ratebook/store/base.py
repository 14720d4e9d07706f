"""
Rate Store Interface

Persistence of RateRecords keyed by the natural key
(currency_code, table_type, effective_date).
"""

from abc import ABC, abstractmethod
from datetime import date

from ratebook.models import CurrencyInfo, RateFilters, RateRecord, TableType


class StorageError(Exception):
    """Storage layer failure (constraint violation, lost connection, ...)."""


class BaseRateStore(ABC):
    """Common interface implemented by every rate store."""

    @abstractmethod
    async def ensure_schema(self) -> None:
        """Create required tables and indexes."""

    @abstractmethod
    async def upsert(self, record: RateRecord) -> RateRecord:
        """
        Insert a record or update the one sharing its natural key.

        Returns the stored record with id and timestamps.

        Raises:
            StorageError: If the write fails.
        """

    @abstractmethod
    async def find_by_key(
        self,
        currency_code: str,
        table_type: TableType,
        effective_date: date
    ) -> RateRecord | None:
        """Exact natural-key lookup."""

    @abstractmethod
    async def find_latest(self, currency_code: str, table_type: TableType) -> RateRecord | None:
        """Most recent record by effective date."""

    @abstractmethod
    async def query(
        self,
        filters: RateFilters | None = None,
        page: int = 1,
        page_size: int = 10,
        sort_field: str = "effective_date",
        sort_direction: str = "DESC"
    ) -> list[RateRecord]:
        """Filtered, sorted page of records."""

    @abstractmethod
    async def count(self, filters: RateFilters | None = None) -> int:
        """Total number of records matching the filters."""

    @abstractmethod
    async def delete_older_than(self, cutoff: date) -> int:
        """Delete records with effective_date < cutoff; returns rows removed."""

    @abstractmethod
    async def delete_by_table_type(self, table_type: TableType) -> int:
        """Delete every record of a table type; returns rows removed."""

    @abstractmethod
    async def distinct_currencies(self, table_type: TableType | None = None) -> list[CurrencyInfo]:
        """Unique (code, name) pairs ordered by code."""

    @abstractmethod
    async def rates_for_period(
        self,
        currency_code: str,
        table_type: TableType,
        date_from: date,
        date_to: date
    ) -> list[RateRecord]:
        """Records of one currency within an inclusive date range, oldest first."""

    @abstractmethod
    async def latest_effective_date(self) -> date | None:
        """Most recent effective date across all records."""
