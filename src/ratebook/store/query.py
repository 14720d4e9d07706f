"""
SQL assembly for the rate store.

Only identifiers from fixed allow-lists are interpolated into SQL text.
Every user-supplied value travels as an asyncpg ``$n`` parameter.
"""

import math
from typing import Any

from ratebook.models import RateFilters

TABLE_NAME = "currency_rate"

SELECT_COLUMNS = (
    "id, currency_code, currency_name, table_type, rate_mid, rate_bid, rate_ask, "
    "effective_date, table_number, created_at, updated_at"
)

SORTABLE_FIELDS = (
    "effective_date",
    "currency_code",
    "rate_mid",
    "rate_bid",
    "rate_ask",
    "table_type",
)
DEFAULT_SORT_FIELD = "effective_date"


def validate_sort_field(sort_field: Any) -> str:
    """Return the field if allow-listed, else the default sort field."""
    if isinstance(sort_field, str) and sort_field in SORTABLE_FIELDS:
        return sort_field
    return DEFAULT_SORT_FIELD


def validate_sort_direction(direction: Any) -> str:
    """ASC only when explicitly requested, DESC otherwise."""
    if isinstance(direction, str) and direction.strip().upper() == "ASC":
        return "ASC"
    return "DESC"


def coerce_positive_int(value: Any, default: int = 1) -> int:
    """Coerce to int >= 1; unparseable values fall back to ``default``."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, number)


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / coerce_positive_int(page_size, 10))


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_where(filters: RateFilters | None, params: list[Any]) -> str:
    """
    Build a WHERE clause (without the keyword) and append its values to
    ``params``. Returns an empty string when no filter applies.
    """
    if filters is None:
        return ""

    conditions: list[str] = []

    def bind(value: Any) -> str:
        params.append(value)
        return f"${len(params)}"

    if filters.currency_code:
        conditions.append(f"currency_code = {bind(filters.currency_code)}")
    if filters.table_type:
        conditions.append(f"table_type = {bind(filters.table_type.value)}")
    if filters.date_from:
        conditions.append(f"effective_date >= {bind(filters.date_from)}")
    if filters.date_to:
        conditions.append(f"effective_date <= {bind(filters.date_to)}")
    if filters.search:
        placeholder = bind(f"%{escape_like(filters.search)}%")
        conditions.append(
            f"(currency_code ILIKE {placeholder} ESCAPE '\\' "
            f"OR currency_name ILIKE {placeholder} ESCAPE '\\')"
        )

    return " AND ".join(conditions)


def build_select(
    filters: RateFilters | None,
    page: Any = 1,
    page_size: Any = 10,
    sort_field: Any = DEFAULT_SORT_FIELD,
    sort_direction: Any = "DESC"
) -> tuple[str, list[Any]]:
    params: list[Any] = []
    where = build_where(filters, params)

    order_by = validate_sort_field(sort_field)
    direction = validate_sort_direction(sort_direction)
    limit = coerce_positive_int(page_size, 10)
    offset = (coerce_positive_int(page, 1) - 1) * limit

    sql = f"SELECT {SELECT_COLUMNS} FROM {TABLE_NAME}"
    if where:
        sql += f" WHERE {where}"
    sql += f" ORDER BY {order_by} {direction}, id {direction}"
    params.extend([limit, offset])
    sql += f" LIMIT ${len(params) - 1} OFFSET ${len(params)}"
    return sql, params


def build_count(filters: RateFilters | None) -> tuple[str, list[Any]]:
    params: list[Any] = []
    where = build_where(filters, params)
    sql = f"SELECT COUNT(*) FROM {TABLE_NAME}"
    if where:
        sql += f" WHERE {where}"
    return sql, params
