"""
Rate Store SQL Assembly Tests
"""

from datetime import date

import pytest

from ratebook.models import RateFilters, TableType
from ratebook.store.query import (
    build_count,
    build_select,
    build_where,
    coerce_positive_int,
    escape_like,
    page_count,
    validate_sort_direction,
    validate_sort_field,
)


class TestSortValidation:

    @pytest.mark.parametrize("field", ["effective_date", "currency_code", "rate_mid", "rate_bid", "rate_ask", "table_type"])
    def test_allowed_fields_pass(self, field):
        assert validate_sort_field(field) == field

    @pytest.mark.parametrize("field", ["id; DROP TABLE currency_rate", "created_at", "", None, 1])
    def test_unknown_fields_fall_back(self, field):
        assert validate_sort_field(field) == "effective_date"

    @pytest.mark.parametrize("direction,expected", [
        ("asc", "ASC"), ("ASC", "ASC"), (" Asc ", "ASC"),
        ("desc", "DESC"), ("sideways", "DESC"), (None, "DESC"),
    ])
    def test_direction(self, direction, expected):
        assert validate_sort_direction(direction) == expected


class TestHelpers:

    def test_coerce_positive_int(self):
        assert coerce_positive_int("3") == 3
        assert coerce_positive_int(0) == 1
        assert coerce_positive_int(-4) == 1
        assert coerce_positive_int("abc") == 1
        assert coerce_positive_int(None, 10) == 10

    def test_page_count(self):
        assert page_count(0, 10) == 0
        assert page_count(10, 10) == 1
        assert page_count(11, 10) == 2

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


class TestBuildSelect:

    def test_no_filters(self):
        sql, params = build_select(None)

        assert "WHERE" not in sql
        assert sql.endswith("ORDER BY effective_date DESC, id DESC LIMIT $1 OFFSET $2")
        assert params == [10, 0]

    def test_filters_are_parameterized(self):
        filters = RateFilters(
            currency_code="USD",
            table_type=TableType.A,
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
            search="dol'lar",
        )

        sql, params = build_select(filters, page=3, page_size=20, sort_field="currency_code", sort_direction="asc")

        assert "currency_code = $1" in sql
        assert "table_type = $2" in sql
        assert "effective_date >= $3" in sql
        assert "effective_date <= $4" in sql
        assert "currency_code ILIKE $5 ESCAPE '\\'" in sql
        assert "currency_name ILIKE $5" in sql
        assert "dol'lar" not in sql
        assert "ORDER BY currency_code ASC, id ASC LIMIT $6 OFFSET $7" in sql
        assert params == ["USD", "A", date(2024, 1, 1), date(2024, 1, 31), "%dol'lar%", 20, 40]

    def test_injected_sort_field_never_reaches_sql(self):
        sql, _ = build_select(RateFilters(), sort_field="rate_mid; DELETE FROM currency_rate")

        assert "DELETE" not in sql
        assert "ORDER BY effective_date DESC" in sql

    def test_invalid_paging_is_coerced(self):
        _, params = build_select(None, page="x", page_size=-5)
        assert params == [1, 0]

    def test_count_shares_where_clause(self):
        filters = RateFilters(table_type=TableType.C, search="eu")
        sql, params = build_count(filters)

        params_where: list = []
        where = build_where(filters, params_where)

        assert sql == f"SELECT COUNT(*) FROM currency_rate WHERE {where}"
        assert params == ["C", "%eu%"]
