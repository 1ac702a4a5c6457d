"""
Proportional redistribution of month-level product totals.

Used when a period shorter than a month is requested but only monthly
per-product totals exist, and when a month's product mix has to be
synthesized from an order count and a base distribution.

Integer outputs always sum exactly to the requested total.
"""

import random
from decimal import Decimal
from typing import Dict, Mapping, Optional

import structlog

from config import settings
from exceptions import InvalidPeriodTokenError, ValidationError
from models.periods import PeriodWindow
from services.period_service import get_business_timezone, month_bounds, parse_month_key
from utils.number_utils import Number, round_half_up, to_decimal

logger = structlog.get_logger(__name__)


def redistribute(totals: Mapping[str, Number], target_total: int) -> Dict[str, int]:
    """
    Scale `totals` so the values sum exactly to `target_total`.

    Each entry is scaled by target / Σ totals and rounded; the rounding
    residual goes to the entry with the largest share (the first one on
    ties). If that would drive it below zero, the rest of the deficit is
    taken from the next-largest entries, so no entry is ever negative.

    Args:
        totals: SKU → units (non-negative)
        target_total: Required sum of the output

    Returns:
        SKU → units in input order; empty when totals is empty or all zero

    Raises:
        ValidationError: If target_total or any input value is negative
    """
    if target_total < 0:
        raise ValidationError(
            message="target_total must not be negative",
            code="INVALID_REDISTRIBUTION_TARGET",
            details={"provided": target_total},
        )

    entries = [(sku, to_decimal(value)) for sku, value in totals.items()]
    negative = [sku for sku, value in entries if value < 0]
    if negative:
        raise ValidationError(
            message="Distribution values must not be negative",
            code="INVALID_DISTRIBUTION",
            details={"skus": negative},
        )

    source_total = sum((value for _, value in entries), Decimal("0"))
    if not entries or source_total == 0:
        return {}

    scale = Decimal(target_total) / source_total
    result = {sku: round_half_up(value * scale) for sku, value in entries}

    residual = target_total - sum(result.values())
    if residual:
        by_share = sorted(entries, key=lambda e: e[1], reverse=True)
        largest = by_share[0][0]
        result[largest] += residual

        if result[largest] < 0:
            deficit = -result[largest]
            result[largest] = 0
            for sku, _ in by_share[1:]:
                taken = min(deficit, result[sku])
                result[sku] -= taken
                deficit -= taken
                if deficit == 0:
                    break

        logger.debug(
            "redistribution_residual_assigned",
            sku=largest,
            residual=residual,
        )

    return result


def synthesize_monthly_mix(
    month_key: str,
    orders: Number,
    qty_per_order: Number,
    base_distribution: Mapping[str, Number],
    seed: Optional[str] = None,
) -> Dict[str, int]:
    """
    Build a product mix for a month from its order count.

    Total units = round(orders × qty_per_order). Each base share is nudged
    by a random factor of ±2.5-7.5% so months don't look identical, then the
    result is redistributed to hit the total exactly. The random source is
    seeded by `seed` and the month key, so a month always gets the same mix.

    Raises:
        InvalidPeriodTokenError: If month_key is not YYYY-MM
    """
    if parse_month_key(month_key) is None:
        raise InvalidPeriodTokenError(month_key)

    rng = random.Random(f"{seed or settings.mix_seed}:{month_key}")
    total_units = round_half_up(to_decimal(orders) * to_decimal(qty_per_order))

    variation_factor = 0.05 + rng.random() * 0.1

    adjusted_by_sku: Dict[str, float] = {}
    for sku, share in base_distribution.items():
        adjusted_by_sku[sku] = float(share) * (1 + (rng.random() - 0.5) * variation_factor)

    # Zero entries are dropped only after rounding so tiny months still hit the total
    mix = {
        sku: units
        for sku, units in redistribute(adjusted_by_sku, total_units).items()
        if units > 0
    }

    logger.debug(
        "monthly_mix_synthesized",
        month=month_key,
        total_units=total_units,
        products=len(mix),
    )
    return mix


def prorate_monthly_totals(
    monthly_products: Mapping[str, Mapping[str, Number]],
    window: PeriodWindow,
) -> Dict[str, int]:
    """
    Estimate per-SKU units for a window from month-level totals.

    Each month overlapping the window contributes round(month total ×
    overlap fraction) units, split across SKUs in proportion to that
    month's mix. Results are summed across months.

    Args:
        monthly_products: "YYYY-MM" → (SKU → units)
        window: Requested window

    Returns:
        SKU → estimated units
    """
    tz = get_business_timezone()
    result: Dict[str, int] = {}

    for month_key in sorted(monthly_products):
        totals = monthly_products[month_key]
        month_start, month_end = month_bounds(month_key, tz)

        overlap_start = max(month_start, window.start)
        overlap_end = min(month_end, window.end)
        if overlap_end < overlap_start:
            continue

        if overlap_start == month_start and overlap_end == month_end:
            fraction = Decimal("1")
        else:
            fraction = to_decimal(
                (overlap_end - overlap_start) / (month_end - month_start)
            )

        month_total = sum((to_decimal(v) for v in totals.values()), Decimal("0"))
        target = round_half_up(month_total * fraction)

        for sku, units in redistribute(totals, target).items():
            result[sku] = result.get(sku, 0) + units

    return result
