"""
Time-series aggregation.

Buckets order facts by calendar day in the business timezone, then rolls
daily buckets up into ISO weeks, months and quarters. All output is sorted
ascending by date; charts and CSV exports rely on that ordering.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

import structlog

from models.metrics import (
    Bucket,
    DailyBucket,
    MonthlyAggregate,
    PeriodTotals,
    TimeSeries,
)
from models.orders import OrderRecord
from models.periods import Granularity, PeriodWindow
from services.period_service import business_date, get_business_timezone
from utils.number_utils import round_decimal, round_half_up

logger = structlog.get_logger(__name__)


def period_start(day: date, granularity: Granularity) -> date:
    """
    First day of the bucket containing `day`.

    - WEEK: the Monday of the ISO week
    - MONTH: the 1st of the month
    - QUARTER: the 1st of Jan/Apr/Jul/Oct
    """
    if granularity == Granularity.DAY:
        return day
    if granularity == Granularity.WEEK:
        return day - timedelta(days=day.weekday())
    if granularity == Granularity.MONTH:
        return day.replace(day=1)
    if granularity == Granularity.QUARTER:
        return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)
    raise ValueError(f"Unsupported granularity: {granularity}")


def bucket_daily(
    orders: Iterable[OrderRecord],
    window: PeriodWindow,
    sku: Optional[str] = None,
    tz: Optional[ZoneInfo] = None,
) -> List[DailyBucket]:
    """
    Group orders inside `window` by business-local calendar day.

    Without a SKU filter each order contributes its total_amount, all of
    its units, and one order. With a SKU filter only matching line items
    count, and an order containing the SKU counts once.

    Args:
        orders: Order records (any order)
        window: Only orders inside this window are counted
        sku: Optional exact-match SKU filter
        tz: Override for the business timezone

    Returns:
        DailyBucket list ascending by date; empty when nothing matched
    """
    tz = tz or get_business_timezone()

    units: Dict[date, int] = defaultdict(int)
    sales: Dict[date, Decimal] = defaultdict(Decimal)
    counts: Dict[date, int] = defaultdict(int)

    for order in orders:
        if not window.contains(order.created_at):
            continue

        day = business_date(order.created_at, tz)

        if sku is None:
            units[day] += order.units
            sales[day] += order.total_amount
            counts[day] += 1
            continue

        matching = order.items_for_sku(sku)
        if not matching:
            continue
        units[day] += sum(item.quantity for item in matching)
        sales[day] += sum((item.amount for item in matching), Decimal("0"))
        counts[day] += 1

    return [
        DailyBucket(
            date=day,
            units=units[day],
            gross_sales=sales[day],
            order_count=counts[day],
        )
        for day in sorted(counts)
    ]


def rollup(
    buckets: Sequence[Union[DailyBucket, Bucket]],
    granularity: Union[Granularity, str],
) -> List[Bucket]:
    """
    Sum buckets into coarser periods.

    Each input bucket lands in exactly one output bucket, so totals are
    preserved. Output is ascending by period start.
    """
    granularity = Granularity(granularity)

    units: Dict[date, int] = defaultdict(int)
    sales: Dict[date, Decimal] = defaultdict(Decimal)
    counts: Dict[date, int] = defaultdict(int)

    for bucket in buckets:
        key = period_start(bucket.date, granularity)
        units[key] += bucket.units
        sales[key] += bucket.gross_sales
        counts[key] += bucket.order_count

    return [
        Bucket(
            date=key,
            granularity=granularity,
            units=units[key],
            gross_sales=sales[key],
            order_count=counts[key],
        )
        for key in sorted(units)
    ]


def build_time_series(
    orders: Iterable[OrderRecord],
    window: PeriodWindow,
    sku: Optional[str] = None,
    tz: Optional[ZoneInfo] = None,
) -> TimeSeries:
    """Daily buckets plus week/month/quarter rollups for one window."""
    daily = bucket_daily(orders, window, sku=sku, tz=tz)

    series = TimeSeries(
        sku=sku,
        window=window,
        daily=daily,
        by_week=rollup(daily, Granularity.WEEK),
        by_month=rollup(daily, Granularity.MONTH),
        by_quarter=rollup(daily, Granularity.QUARTER),
        total_units=sum(b.units for b in daily),
        total_gross_sales=sum((b.gross_sales for b in daily), Decimal("0")),
        total_orders=sum(b.order_count for b in daily),
    )

    logger.debug(
        "time_series_built",
        sku=sku,
        days=len(daily),
        total_units=series.total_units,
    )
    return series


def filter_monthly_aggregates(
    rows: Iterable[MonthlyAggregate],
    window: Optional[PeriodWindow] = None,
) -> List[MonthlyAggregate]:
    """Rows whose month start falls inside the window's calendar dates."""
    rows = list(rows)
    if window is None:
        return rows
    start, end = window.start.date(), window.end.date()
    return [row for row in rows if start <= row.month <= end]


def summarize_monthly_aggregates(
    rows: Iterable[MonthlyAggregate],
    window: Optional[PeriodWindow] = None,
) -> PeriodTotals:
    """
    Totals over month-level summary rows.

    revenue = Σ orders × aov, units = Σ orders × qty_per_order,
    AOV = revenue / orders (0 without orders), returns = Σ |returns|.
    """
    selected = filter_monthly_aggregates(rows, window)
    if not selected:
        return PeriodTotals()

    total_orders = sum(row.orders for row in selected)
    total_revenue = sum((row.orders * row.aov for row in selected), Decimal("0"))
    total_units = sum((row.orders * row.qty_per_order for row in selected), Decimal("0"))
    total_returns = sum((abs(row.returns) for row in selected), Decimal("0"))
    avg_order_value = total_revenue / total_orders if total_orders > 0 else Decimal("0")

    return PeriodTotals(
        total_orders=total_orders,
        total_revenue=round_decimal(total_revenue, 2),
        total_units=round_decimal(total_units, 1),
        avg_order_value=round_decimal(avg_order_value, 2),
        total_returns=round_half_up(total_returns),
    )
