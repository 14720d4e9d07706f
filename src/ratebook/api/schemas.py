"""
Ratebook API Response Schemas

Decimal values are serialized as exact strings.
"""

from datetime import date as DateType, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ratebook.models import (
    CurrencyInfo,
    HistoryFilters,
    HistoryPage,
    Pagination,
    RateRecord,
    TableType,
)


class RateResponse(BaseModel):
    """One stored rate in the flat column layout."""
    id: int | None = None
    currency_code: str
    currency_name: str
    table_type: TableType
    rate_mid: Decimal | None = None
    rate_bid: Decimal | None = None
    rate_ask: Decimal | None = None
    effective_date: DateType
    table_number: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: RateRecord) -> "RateResponse":
        return cls(
            id=record.id,
            currency_code=record.currency_code,
            currency_name=record.currency_name,
            table_type=record.table_type,
            rate_mid=record.rate_mid,
            rate_bid=record.rate_bid,
            rate_ask=record.rate_ask,
            effective_date=record.effective_date,
            table_number=record.table_number,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class HistoryResponse(BaseModel):
    """Response schema for /api/v1/history"""
    rates: list[RateResponse]
    pagination: Pagination
    filters: HistoryFilters
    available_currencies: list[CurrencyInfo]
    table_type: TableType

    @classmethod
    def from_page(cls, page: HistoryPage) -> "HistoryResponse":
        return cls(
            rates=[RateResponse.from_record(r) for r in page.rates],
            pagination=page.pagination,
            filters=page.filters,
            available_currencies=page.available_currencies,
            table_type=page.table_type,
        )


class PeriodRatesResponse(BaseModel):
    """Response schema for /api/v1/rates/{currency_code}"""
    currency_code: str
    table_type: TableType
    date_from: DateType
    date_to: DateType
    rates: list[RateResponse]


class OperationResponse(BaseModel):
    """Generic success/failure payload of token-gated operations."""
    success: bool
    message: str


class CronResponse(OperationResponse):
    """Response schema for /api/v1/cron"""
    updated_count: int = 0
    errors: list[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": True,
                "message": "Updated with some errors",
                "updated_count": 90,
                "errors": ["No data available for XYZ"]
            }
        }
    }


class TableSwitchResponse(OperationResponse):
    table_type: TableType | None = None
    purged: bool = False


class HealthResponse(BaseModel):
    """Health check response for /api/v1/health"""
    status: str = Field(description="Service health status")
    version: str = Field(description="API version")
    database: str = Field(description="Database connection status")
    latest_data_date: str | None = Field(
        default=None,
        description="Most recent effective date stored"
    )
    last_update: datetime | None = Field(
        default=None,
        description="Time of the last successful ingestion run"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "version": "1.2.0",
                "database": "connected",
                "latest_data_date": "2026-01-15",
                "last_update": "2026-01-15T12:30:02+00:00"
            }
        }
    }
