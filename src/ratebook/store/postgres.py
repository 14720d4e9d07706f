"""
PostgreSQL Rate Store (asyncpg)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

import asyncpg
from asyncpg import Connection, Pool

from ratebook.models import CurrencyInfo, RateFilters, RateRecord, TableType
from ratebook.store.base import BaseRateStore, StorageError
from ratebook.store.query import (
    SELECT_COLUMNS,
    TABLE_NAME,
    build_count,
    build_select,
)
from ratebook.store.schema import apply_migrations

logger = logging.getLogger(__name__)

UPSERT_SQL = f"""
INSERT INTO {TABLE_NAME} (
    currency_code, currency_name, table_type,
    rate_mid, rate_bid, rate_ask,
    effective_date, table_number, created_at, updated_at
) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, NOW(), NOW())
ON CONFLICT (currency_code, table_type, effective_date) DO UPDATE SET
    currency_name = EXCLUDED.currency_name,
    rate_mid = EXCLUDED.rate_mid,
    rate_bid = EXCLUDED.rate_bid,
    rate_ask = EXCLUDED.rate_ask,
    table_number = EXCLUDED.table_number,
    updated_at = NOW()
RETURNING {SELECT_COLUMNS}
"""


def _affected_rows(status: str) -> int:
    """Parse asyncpg command status such as 'DELETE 12'."""
    try:
        return int(status.split()[-1])
    except (IndexError, ValueError):
        return 0


def row_to_record(row: Any) -> RateRecord:
    """Convert a database row to a RateRecord."""
    table_type = TableType(row["table_type"].strip())
    return RateRecord(
        id=row["id"],
        currency_code=row["currency_code"],
        currency_name=row["currency_name"],
        table_type=table_type,
        rate=table_type.make_rate({
            "mid": row["rate_mid"],
            "bid": row["rate_bid"],
            "ask": row["rate_ask"],
        }),
        effective_date=row["effective_date"],
        table_number=row["table_number"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresRateStore(BaseRateStore):
    """Rate store on a PostgreSQL table with a unique natural key."""

    def __init__(self, pool: Pool):
        self._pool = pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Connection]:
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise StorageError(f"{type(e).__name__}: {e}") from e

    async def ensure_schema(self) -> None:
        """Apply the packaged migrations (rate and module settings tables)."""
        async with self._connection() as conn:
            executed = await apply_migrations(conn)
        logger.info(f"Schema ensured for {TABLE_NAME}: {executed} statements")

    async def upsert(self, record: RateRecord) -> RateRecord:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                UPSERT_SQL,
                record.currency_code,
                record.currency_name,
                record.table_type.value,
                record.rate_mid,
                record.rate_bid,
                record.rate_ask,
                record.effective_date,
                record.table_number,
            )
        return row_to_record(row)

    async def find_by_key(
        self,
        currency_code: str,
        table_type: TableType,
        effective_date: date
    ) -> RateRecord | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {SELECT_COLUMNS} FROM {TABLE_NAME}
                WHERE currency_code = $1 AND table_type = $2 AND effective_date = $3
                """,
                currency_code,
                TableType.coerce(table_type).value,
                effective_date
            )
        return row_to_record(row) if row else None

    async def find_latest(self, currency_code: str, table_type: TableType) -> RateRecord | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {SELECT_COLUMNS} FROM {TABLE_NAME}
                WHERE currency_code = $1 AND table_type = $2
                ORDER BY effective_date DESC
                LIMIT 1
                """,
                currency_code,
                TableType.coerce(table_type).value
            )
        return row_to_record(row) if row else None

    async def query(
        self,
        filters: RateFilters | None = None,
        page: int = 1,
        page_size: int = 10,
        sort_field: str = "effective_date",
        sort_direction: str = "DESC"
    ) -> list[RateRecord]:
        sql, params = build_select(filters, page, page_size, sort_field, sort_direction)
        async with self._connection() as conn:
            rows = await conn.fetch(sql, *params)
        return [row_to_record(row) for row in rows]

    async def count(self, filters: RateFilters | None = None) -> int:
        sql, params = build_count(filters)
        async with self._connection() as conn:
            total = await conn.fetchval(sql, *params)
        return int(total or 0)

    async def delete_older_than(self, cutoff: date) -> int:
        async with self._connection() as conn:
            status = await conn.execute(
                f"DELETE FROM {TABLE_NAME} WHERE effective_date < $1",
                cutoff
            )
        deleted = _affected_rows(status)
        logger.info(f"Deleted {deleted} rates older than {cutoff}")
        return deleted

    async def delete_by_table_type(self, table_type: TableType) -> int:
        table = TableType.coerce(table_type)
        async with self._connection() as conn:
            status = await conn.execute(
                f"DELETE FROM {TABLE_NAME} WHERE table_type = $1",
                table.value
            )
        deleted = _affected_rows(status)
        logger.info(f"Deleted {deleted} rates of table {table.value}")
        return deleted

    async def distinct_currencies(self, table_type: TableType | None = None) -> list[CurrencyInfo]:
        sql = f"SELECT DISTINCT currency_code, currency_name FROM {TABLE_NAME}"
        params: list[Any] = []
        if table_type is not None:
            sql += " WHERE table_type = $1"
            params.append(TableType.coerce(table_type).value)
        sql += " ORDER BY currency_code ASC"

        async with self._connection() as conn:
            rows = await conn.fetch(sql, *params)
        return [CurrencyInfo(code=row["currency_code"], name=row["currency_name"]) for row in rows]

    async def rates_for_period(
        self,
        currency_code: str,
        table_type: TableType,
        date_from: date,
        date_to: date
    ) -> list[RateRecord]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {SELECT_COLUMNS} FROM {TABLE_NAME}
                WHERE currency_code = $1 AND table_type = $2
                  AND effective_date BETWEEN $3 AND $4
                ORDER BY effective_date ASC
                """,
                currency_code,
                TableType.coerce(table_type).value,
                date_from,
                date_to
            )
        return [row_to_record(row) for row in rows]

    async def latest_effective_date(self) -> date | None:
        async with self._connection() as conn:
            return await conn.fetchval(f"SELECT MAX(effective_date) FROM {TABLE_NAME}")
