"""
Ranking and period comparison.

top_variants ranks SKUs by units sold inside a window. compare is the one
place current-vs-previous deltas are computed; orders, revenue and units
all go through it.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from config import settings
from exceptions import ValidationError
from models.metrics import Comparison, TrendDirection, VariantRanking
from models.orders import OrderRecord
from models.periods import PeriodWindow
from utils.number_utils import Number, round_half_up, to_decimal

logger = structlog.get_logger(__name__)


def top_variants(
    orders: Iterable[OrderRecord],
    window: PeriodWindow,
    n: Optional[int] = None,
) -> List[VariantRanking]:
    """
    Top SKUs by units sold inside a window.

    Line items are grouped by SKU; units, line amounts and the number of
    orders containing the SKU are summed. The sort is stable, so SKUs with
    equal units keep the order in which they were first seen.

    Args:
        orders: Order records
        window: Only orders inside this window count
        n: Maximum entries (defaults to settings.top_variants_limit)

    Raises:
        ValidationError: If n is negative
    """
    limit = settings.top_variants_limit if n is None else n
    if limit < 0:
        raise ValidationError(
            message="n must be zero or greater",
            code="INVALID_RANKING_LIMIT",
            details={"provided": limit},
        )

    rankings: Dict[str, VariantRanking] = {}

    for order in orders:
        if not window.contains(order.created_at):
            continue

        seen_in_order = set()
        for item in order.line_items:
            entry = rankings.get(item.sku)
            if entry is None:
                entry = VariantRanking(
                    sku=item.sku,
                    product_title=item.product_title,
                    variant_title=item.variant_title,
                )
                rankings[item.sku] = entry

            entry.units_sold += item.quantity
            entry.gross_sales += item.amount
            if item.sku not in seen_in_order:
                entry.orders_count += 1
                seen_in_order.add(item.sku)

    # sorted() is stable: ties keep discovery order
    ranked = sorted(rankings.values(), key=lambda r: r.units_sold, reverse=True)
    return ranked[:limit]


def compare(current: Number, previous: Number) -> Comparison:
    """
    Compare a current value against the previous period's value.

    - raw = current - previous
    - trend = "up" when raw >= 0, else "down"
    - pct_change = 100 if previous is 0 and current > 0, 0 if both are 0,
      otherwise round(raw / previous * 100) with halves rounded up

    Examples:
        compare(0, 0)   → up, 0, 0
        compare(10, 0)  → up, 100, 10
        compare(5, 10)  → down, -50, -5
    """
    current_d = to_decimal(current)
    previous_d = to_decimal(previous)
    raw = current_d - previous_d

    if previous_d == 0:
        pct_change = 100 if current_d > 0 else 0
    else:
        pct_change = round_half_up(raw / previous_d * 100)

    return Comparison(
        trend=TrendDirection.UP if raw >= 0 else TrendDirection.DOWN,
        pct_change=pct_change,
        raw=raw,
    )


def order_totals(
    orders: Iterable[OrderRecord],
    window: Optional[PeriodWindow] = None,
) -> Tuple[int, Decimal, int]:
    """(order count, revenue, units) for orders inside the window."""
    count = 0
    revenue = Decimal("0")
    units = 0
    for order in orders:
        if window is not None and not window.contains(order.created_at):
            continue
        count += 1
        revenue += order.total_amount
        units += order.units
    return count, revenue, units


def compare_metrics(
    current_orders: Iterable[OrderRecord],
    previous_orders: Iterable[OrderRecord],
    current_window: Optional[PeriodWindow] = None,
    previous_window: Optional[PeriodWindow] = None,
) -> Dict[str, Comparison]:
    """Order count, revenue and units comparisons from two order sets."""
    cur_count, cur_revenue, cur_units = order_totals(current_orders, current_window)
    prev_count, prev_revenue, prev_units = order_totals(previous_orders, previous_window)

    return {
        "orders": compare(cur_count, prev_count),
        "revenue": compare(cur_revenue, prev_revenue),
        "units": compare(cur_units, prev_units),
    }
