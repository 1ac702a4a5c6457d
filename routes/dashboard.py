"""
Dashboard API routes.

Every endpoint takes a `period` query parameter: daily, weekly, mtd, ytd,
all, or a YYYY-MM month key. An unknown period returns 422.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.metrics import (
    DashboardOverview,
    MetricSummary,
    TimeSeries,
    TopVariantsResult,
)
from services.dashboard_service import get_dashboard_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

PERIOD_DESCRIPTION = "daily, weekly, mtd, ytd, all, or YYYY-MM"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# SUMMARY ROUTES
# ===================

@router.get("/overview", response_model=DashboardOverview)
def get_overview(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """
    Orders, sales and units with comparisons, top variants, and weekly
    series for the three best sellers.
    """
    try:
        service = get_dashboard_service()
        return service.get_overview(period)
    except Exception as e:
        return handle_error(e)


@router.get("/orders", response_model=MetricSummary)
def get_orders(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """Order count vs the previous period of equal length."""
    try:
        service = get_dashboard_service()
        return service.get_orders_summary(period)
    except Exception as e:
        return handle_error(e)


@router.get("/sales", response_model=MetricSummary)
def get_sales(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """Revenue vs the previous period of equal length."""
    try:
        service = get_dashboard_service()
        return service.get_sales_summary(period)
    except Exception as e:
        return handle_error(e)


@router.get("/units", response_model=MetricSummary)
def get_units(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """Units sold vs the previous period of equal length."""
    try:
        service = get_dashboard_service()
        return service.get_units(period)
    except Exception as e:
        return handle_error(e)


# ===================
# RANKING / SERIES ROUTES
# ===================

@router.get("/top-variants", response_model=TopVariantsResult)
def get_top_variants(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
    limit: Optional[int] = Query(None, ge=0, le=100, description="Number of variants"),
):
    """Best-selling variants by units for the period."""
    try:
        service = get_dashboard_service()
        return service.get_top_variants(period, n=limit)
    except Exception as e:
        return handle_error(e)


@router.get("/timeseries", response_model=TimeSeries)
def get_store_time_series(
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """Daily, weekly, monthly and quarterly totals across all products."""
    try:
        service = get_dashboard_service()
        return service.get_product_time_series(None, period)
    except Exception as e:
        return handle_error(e)


@router.get("/products/{sku}/timeseries", response_model=TimeSeries)
def get_product_time_series(
    sku: str,
    period: str = Query("mtd", description=PERIOD_DESCRIPTION),
):
    """Daily, weekly, monthly and quarterly totals for one SKU."""
    try:
        service = get_dashboard_service()
        return service.get_product_time_series(sku, period)
    except Exception as e:
        return handle_error(e)
