"""
Ratebook Data Models

Canonical rate records, the module settings collaborator and the result
objects returned by the ingestion, history and conversion services.

All rates are stored and computed as decimal.Decimal.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator


# === Rate schema (tagged variant) ===

class MidRate(BaseModel):
    """Average (mid) rate published in tables A and B."""
    kind: Literal["mid"] = "mid"
    mid: Decimal | None = None

    def value(self) -> Decimal | None:
        """Rate usable for conversion, or None when unusable."""
        return self.mid if self.mid else None

    def columns(self) -> tuple[Decimal | None, Decimal | None, Decimal | None]:
        return self.mid, None, None


class BidAskRate(BaseModel):
    """Buy/sell quotes published in table C."""
    kind: Literal["bid_ask"] = "bid_ask"
    bid: Decimal | None = None
    ask: Decimal | None = None

    def value(self) -> Decimal | None:
        """Midpoint of bid and ask, or None unless both are quoted."""
        if self.bid and self.ask:
            return (self.bid + self.ask) / 2
        return None

    def columns(self) -> tuple[Decimal | None, Decimal | None, Decimal | None]:
        return None, self.bid, self.ask


RateSchema = Annotated[Union[MidRate, BidAskRate], Field(discriminator="kind")]


# === Enums ===

class TableType(str, Enum):
    """
    Upstream rate publication.

    A: average rates of major currencies
    B: average rates of minor currencies
    C: bid/ask rates
    """
    A = "A"
    B = "B"
    C = "C"

    @classmethod
    def coerce(cls, value: Any) -> "TableType":
        """Parse a case-insensitive table type, raising ValueError when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Invalid table type: {value!r}") from None

    @property
    def rate_model(self) -> type[MidRate] | type[BidAskRate]:
        return BidAskRate if self is TableType.C else MidRate

    @property
    def rate_fields(self) -> tuple[str, ...]:
        """Upstream entry keys carrying the rate values of this table."""
        return ("bid", "ask") if self.rate_model is BidAskRate else ("mid",)

    def make_rate(self, values: Mapping[str, Decimal | None]) -> MidRate | BidAskRate:
        """Build the rate variant of this table from already validated values."""
        return self.rate_model(**{name: values.get(name) for name in self.rate_fields})


# === Rate Record ===

class RateRecord(BaseModel):
    """
    One published rate of one currency on one day.

    Natural key: (currency_code, table_type, effective_date).
    id, created_at and updated_at are assigned by the store.
    """
    currency_code: str = Field(pattern=r"^[A-Z]{3}$")
    currency_name: str = Field(max_length=100)
    table_type: TableType
    rate: RateSchema
    effective_date: date
    table_number: str = Field(default="", max_length=20)

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def validate_rate_matches_table(self) -> "RateRecord":
        """Table C records carry bid/ask, tables A/B carry mid."""
        if not isinstance(self.rate, self.table_type.rate_model):
            raise ValueError(
                f"Table {self.table_type.value} requires "
                f"{self.table_type.rate_model.__name__}, got {type(self.rate).__name__}"
            )
        return self

    @property
    def natural_key(self) -> tuple[str, TableType, date]:
        return self.currency_code, self.table_type, self.effective_date

    @property
    def rate_mid(self) -> Decimal | None:
        return self.rate.columns()[0]

    @property
    def rate_bid(self) -> Decimal | None:
        return self.rate.columns()[1]

    @property
    def rate_ask(self) -> Decimal | None:
        return self.rate.columns()[2]

    def value(self) -> Decimal | None:
        return self.rate.value()


class CurrencyInfo(BaseModel):
    """Currency code with its display name."""
    code: str
    name: str


# === Module Settings ===

class ModuleSettings(BaseModel):
    """
    Runtime configuration injected into the ingestion, history and
    conversion services. Persisted by the config store as key/value text.
    """
    enabled_currencies: list[str] = Field(
        default_factory=lambda: ["EUR", "USD", "GBP", "CHF"]
    )
    table_type: TableType = TableType.A
    cache_ttl: int = Field(default=86400, ge=1)
    items_per_page: int = Field(default=10, ge=1)
    auto_cleanup: bool = True
    retention_days: int = Field(default=30, ge=1)
    last_update: datetime | None = None
    cron_token: str = ""
    base_currency: str = "PLN"
    quotation_unit: str = "PLN"

    @staticmethod
    def split_currencies(value: str) -> list[str]:
        return [code.strip().upper() for code in value.split(",") if code.strip()]

    @field_validator("enabled_currencies", mode="before")
    @classmethod
    def parse_currencies(cls, v: Any) -> Any:
        """Accept the comma-joined form used by the config store."""
        if isinstance(v, str):
            return cls.split_currencies(v)
        return v

    @field_validator("table_type", mode="before")
    @classmethod
    def parse_table_type(cls, v: Any) -> TableType:
        return TableType.coerce(v)

    @field_validator("last_update", mode="before")
    @classmethod
    def parse_last_update(cls, v: Any) -> Any:
        return v or None

    @field_validator("base_currency", "quotation_unit")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()

    def to_mapping(self) -> dict[str, str]:
        """Serialize to the flat text mapping stored by the config store."""
        return {
            "enabled_currencies": ",".join(self.enabled_currencies),
            "table_type": self.table_type.value,
            "cache_ttl": str(self.cache_ttl),
            "items_per_page": str(self.items_per_page),
            "auto_cleanup": "1" if self.auto_cleanup else "0",
            "retention_days": str(self.retention_days),
            "last_update": self.last_update.isoformat() if self.last_update else "",
            "cron_token": self.cron_token,
            "base_currency": self.base_currency,
            "quotation_unit": self.quotation_unit,
        }

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, str],
        defaults: "ModuleSettings | None" = None
    ) -> "ModuleSettings":
        """Build settings from stored text values, falling back to defaults."""
        data = (defaults or cls()).to_mapping()
        data.update({k: v for k, v in mapping.items() if k in data})
        return cls.model_validate(data)


# === Query Filters ===

class RateFilters(BaseModel):
    """Filters for history queries. Empty values are ignored."""
    currency_code: str | None = None
    table_type: TableType | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None


# === Service Results ===

class IngestionResult(BaseModel):
    """Outcome of one ingestion run."""
    success: bool = False
    message: str = ""
    updated_count: int = 0
    errors: list[str] = Field(default_factory=list)


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    items_per_page: int
    total_rates: int | None = None


class ConvertedPrice(BaseModel):
    """Amount converted into one target currency."""
    currency_code: str
    currency_name: str
    rate: Decimal
    converted_price: Decimal


class ConversionPage(BaseModel):
    rates: list[ConvertedPrice]
    all_rates: list[ConvertedPrice]
    pagination: Pagination
    total_rates: int


class HistoryFilters(BaseModel):
    order_by: str
    order_way: str
    currency_filter: str
    search_query: str


class HistoryPage(BaseModel):
    rates: list[RateRecord]
    pagination: Pagination
    filters: HistoryFilters
    available_currencies: list[CurrencyInfo]
    table_type: TableType
