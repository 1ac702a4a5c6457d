"""
Metrics models: time-series buckets, rankings and period comparisons.

These are the plain structures returned to the presentation layer.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import BaseSchema
from models.periods import Granularity, PeriodWindow


class TrendDirection(str, Enum):
    """Direction of a period-over-period change."""

    UP = "up"
    DOWN = "down"


class DailyBucket(BaseSchema):
    """Facts for one calendar day (business timezone)."""

    date: date
    units: int = Field(default=0, ge=0)
    gross_sales: Decimal = Field(default=Decimal("0"), ge=0)
    order_count: int = Field(default=0, ge=0)


class Bucket(BaseSchema):
    """Facts rolled up to a coarser period. date is the period's first day."""

    date: date
    granularity: Granularity
    units: int = Field(default=0, ge=0)
    gross_sales: Decimal = Field(default=Decimal("0"), ge=0)
    order_count: int = Field(default=0, ge=0)


class TimeSeries(BaseSchema):
    """Daily buckets plus every rollup for one window (optionally one SKU)."""

    sku: Optional[str] = None
    window: PeriodWindow
    daily: List[DailyBucket] = Field(default_factory=list)
    by_week: List[Bucket] = Field(default_factory=list)
    by_month: List[Bucket] = Field(default_factory=list)
    by_quarter: List[Bucket] = Field(default_factory=list)
    total_units: int = 0
    total_gross_sales: Decimal = Decimal("0")
    total_orders: int = 0
    failed: bool = Field(default=False, description="True when the fetch failed")


class VariantRanking(BaseSchema):
    """Units and sales for one SKU inside a window."""

    sku: str
    product_title: str = ""
    variant_title: str = ""
    units_sold: int = Field(default=0, ge=0)
    gross_sales: Decimal = Field(default=Decimal("0"), ge=0)
    orders_count: int = Field(default=0, ge=0)


class Comparison(BaseSchema):
    """
    Current vs previous value.

    pct_change is 100 (or 0) when the previous value is zero; that is an
    approximation, not a true percentage.
    """

    trend: TrendDirection
    pct_change: int
    raw: Decimal


class MetricSummary(BaseSchema):
    """A scalar metric for a window with its comparison to the prior window."""

    period: str
    label: str
    current: Decimal
    previous: Decimal
    comparison: Comparison
    failed: bool = Field(default=False, description="True when the current fetch failed")
    comparison_failed: bool = Field(
        default=False, description="True when the comparison fetch failed"
    )


class TopVariantsResult(BaseSchema):
    """Top variants for a window."""

    period: str
    label: str
    variants: List[VariantRanking] = Field(default_factory=list)
    failed: bool = False


class DashboardOverview(BaseSchema):
    """Everything the overview page shows for one period."""

    period: str
    label: str
    window: PeriodWindow
    comparison_window: PeriodWindow
    orders: MetricSummary
    sales: MetricSummary
    units: MetricSummary
    top_variants: List[VariantRanking] = Field(default_factory=list)
    top_series: List[TimeSeries] = Field(
        default_factory=list, description="Weekly series for the top 3 variants"
    )


class MonthlyAggregate(BaseSchema):
    """Month-level summary row used when daily data is not available."""

    month: date = Field(..., description="First day of the month")
    orders: int = Field(default=0, ge=0)
    aov: Decimal = Field(default=Decimal("0"), ge=0, description="Average order value")
    qty_per_order: Decimal = Field(default=Decimal("0"), ge=0)
    returns: Decimal = Field(default=Decimal("0"))


class PeriodTotals(BaseSchema):
    """Totals derived from monthly aggregates."""

    total_orders: int = 0
    total_revenue: Decimal = Decimal("0")
    total_units: Decimal = Decimal("0")
    avg_order_value: Decimal = Decimal("0")
    total_returns: int = 0
