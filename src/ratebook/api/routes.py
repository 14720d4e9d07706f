"""
Ratebook API Routes

API base URL: /api/v1/
"""

import logging
import secrets
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from ratebook import __version__
from ratebook.api.schemas import (
    CronResponse,
    HealthResponse,
    HistoryResponse,
    PeriodRatesResponse,
    RateResponse,
    TableSwitchResponse,
)
from ratebook.container import RateServices
from ratebook.models import ConversionPage, CurrencyInfo, ModuleSettings
from ratebook.settings_store import ConfigurationError
from ratebook.store.base import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Ratebook"])

INVALID_TOKEN_MESSAGE = "Invalid or missing token"
DEFAULT_PERIOD_DAYS = 30
MAX_CONVERT_AMOUNT = Decimal("1000000000000000")


def get_services(request: Request) -> RateServices:
    return request.app.state.services


def is_valid_token(provided: str | None, expected: str) -> bool:
    """An empty configured token leaves the endpoint open."""
    if not expected:
        return True
    if not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def _forbidden() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"success": False, "message": INVALID_TOKEN_MESSAGE}
    )


def _internal_error(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


async def _load_settings(services: RateServices) -> ModuleSettings:
    try:
        return await services.load_settings()
    except ConfigurationError as e:
        logger.error(f"Module settings unavailable: {e}")
        raise _internal_error("RATEBOOK_CONFIG_ERROR", "Module settings unavailable")


@router.api_route(
    "/cron",
    methods=["GET", "POST"],
    response_model=CronResponse,
    summary="Run rate ingestion",
    description="Fetch, validate and store rates of every enabled currency",
    responses={403: {"description": "Invalid or missing token"}}
)
async def run_cron(
    token: str | None = Query(default=None),
    services: RateServices = Depends(get_services),
):
    try:
        settings = await services.load_settings()
    except ConfigurationError as e:
        logger.error(f"Cron aborted, settings unavailable: {e}")
        return CronResponse(success=False, message=f"Error executing cron: {e}")

    if not is_valid_token(token, settings.cron_token):
        logger.warning("Cron request rejected: invalid or missing token")
        return _forbidden()

    try:
        result = await services.orchestrator.update_rates()
    except Exception as e:
        logger.error(f"Error executing cron: {e}")
        return CronResponse(success=False, message=f"Error executing cron: {e}")

    return CronResponse(**result.model_dump())


@router.get(
    "/history",
    response_model=HistoryResponse,
    summary="Rate history",
    description="Paginated, filterable history of the active table type"
)
async def get_history(
    p: str = Query(default="1", description="Page number"),
    orderby: str = Query(default="effective_date"),
    orderway: str = Query(default="desc"),
    currency: str = Query(default=""),
    search: str = Query(default=""),
    services: RateServices = Depends(get_services),
) -> HistoryResponse:
    settings = await _load_settings(services)
    try:
        page = await services.history(settings).get_history(
            page=p,
            order_by=orderby,
            order_way=orderway,
            currency=currency,
            search=search,
        )
    except StorageError as e:
        logger.error(f"Error fetching history: {e}")
        raise _internal_error("RATEBOOK_STORAGE_ERROR", "Failed to fetch rate history")

    return HistoryResponse.from_page(page)


@router.get(
    "/convert",
    response_model=ConversionPage,
    summary="Convert an amount",
    description="Convert an amount into every enabled currency through the base currency"
)
async def convert_amount(
    amount: Decimal = Query(le=MAX_CONVERT_AMOUNT, description="Amount in the source currency"),
    currency: str | None = Query(default=None, description="Source currency, defaults to the base currency"),
    page: int = Query(default=1),
    services: RateServices = Depends(get_services),
) -> ConversionPage:
    settings = await _load_settings(services)
    try:
        return await services.converter(settings).convert_paginated(
            amount,
            currency or settings.base_currency,
            page=page,
        )
    except StorageError as e:
        logger.error(f"Error converting {amount} {currency}: {e}")
        raise _internal_error("RATEBOOK_STORAGE_ERROR", "Failed to convert amount")


@router.get(
    "/rates/{currency_code}",
    response_model=PeriodRatesResponse,
    summary="Rates of one currency",
    description="Rates of one currency in the active table within a date range"
)
async def get_rates_for_period(
    currency_code: str,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    services: RateServices = Depends(get_services),
) -> PeriodRatesResponse:
    settings = await _load_settings(services)
    code = currency_code.strip().upper()
    date_to = date_to or date.today()
    date_from = date_from or date_to - timedelta(days=DEFAULT_PERIOD_DAYS)

    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"date_from {date_from} is after date_to {date_to}"
        )

    try:
        records = await services.store.rates_for_period(
            code, settings.table_type, date_from, date_to
        )
    except StorageError as e:
        logger.error(f"Error fetching rates for {code}: {e}")
        raise _internal_error("RATEBOOK_STORAGE_ERROR", f"Failed to fetch rates for {code}")

    return PeriodRatesResponse(
        currency_code=code,
        table_type=settings.table_type,
        date_from=date_from,
        date_to=date_to,
        rates=[RateResponse.from_record(r) for r in records],
    )


@router.get(
    "/currencies/available",
    response_model=list[CurrencyInfo],
    summary="Currencies of the active table"
)
async def get_available_currencies(
    services: RateServices = Depends(get_services),
) -> list[CurrencyInfo]:
    settings = await _load_settings(services)
    return await services.catalog.available(settings.table_type)


@router.post(
    "/config/table-type",
    response_model=TableSwitchResponse,
    summary="Switch the active table type",
    description="Purges rates of the previous table and resets enabled currencies",
    responses={403: {"description": "Invalid or missing token"}}
)
async def switch_table_type(
    table_type: str = Query(),
    token: str | None = Query(default=None),
    services: RateServices = Depends(get_services),
):
    settings = await _load_settings(services)
    if not is_valid_token(token, settings.cron_token):
        return _forbidden()

    try:
        purged = await services.switcher.switch(table_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        logger.error(f"Error switching table type: {e}")
        raise _internal_error("RATEBOOK_STORAGE_ERROR", "Failed to switch table type")

    settings = await _load_settings(services)
    return TableSwitchResponse(
        success=True,
        message="Table type changed" if purged else "Table type unchanged",
        table_type=settings.table_type,
        purged=purged,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Health check for load balancers and monitoring",
    responses={503: {"description": "Service unavailable"}}
)
async def health_check(
    services: RateServices = Depends(get_services),
) -> HealthResponse:
    try:
        latest = await services.store.latest_effective_date()
        settings = await services.load_settings()
    except (StorageError, ConfigurationError) as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": {
                    "code": "RATEBOOK_UNHEALTHY",
                    "message": "Service is not healthy",
                    "details": {"database": "disconnected"},
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            }
        )

    return HealthResponse(
        status="healthy",
        version=__version__,
        database="connected",
        latest_data_date=latest.isoformat() if latest else None,
        last_update=settings.last_update,
    )
