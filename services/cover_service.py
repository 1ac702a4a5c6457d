"""
Inventory cover projection: core business logic.

Weeks of cover = (on hand + open inbound) / monthly velocity × 4.
A month is treated as 4 weeks throughout. Zero velocity means the stock
never depletes; that case is reported as unbounded cover (weeks_of_cover
is None) instead of an infinite number.

Status table (weeks of cover, lower bound inclusive):
    < 2      Critical
    2 - 4    Low
    4 - 8    Adequate
    >= 8     Healthy (also when unbounded)
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import structlog

from config import settings
from exceptions import ValidationError
from models.inventory import (
    STATUS_PRIORITY,
    CoverStatus,
    FreightMode,
    InboundOrder,
    InventorySnapshot,
    InventoryStatus,
    ReorderRecommendation,
    SalesVelocity,
)
from models.orders import OrderRecord
from services.period_service import get_business_timezone, to_business_time
from utils.number_utils import Number, round_decimal, round_half_up, to_decimal

logger = structlog.get_logger(__name__)

WEEKS_PER_MONTH = Decimal("4")
VALID_VELOCITY_WINDOWS = (4, 8, 12)


def business_today() -> date:
    return datetime.now(get_business_timezone()).date()


def classify_cover(weeks_of_cover: Optional[Decimal]) -> CoverStatus:
    """
    Map weeks of cover to a status.

    None (unbounded cover) is Healthy.
    """
    if weeks_of_cover is None:
        return CoverStatus.HEALTHY
    if weeks_of_cover < to_decimal(settings.cover_critical_weeks):
        return CoverStatus.CRITICAL
    if weeks_of_cover < to_decimal(settings.cover_low_weeks):
        return CoverStatus.LOW
    if weeks_of_cover < to_decimal(settings.cover_adequate_weeks):
        return CoverStatus.ADEQUATE
    return CoverStatus.HEALTHY


def open_inbound_units(sku: str, inbound_orders: Iterable[InboundOrder]) -> int:
    """Units on pending or in-transit inbound orders for a SKU."""
    return sum(o.quantity for o in inbound_orders if o.sku == sku and o.is_open)


def project_cover(
    sku: str,
    on_hand: int,
    monthly_velocity: Number,
    inbound_orders: Iterable[InboundOrder] = (),
    today: Optional[date] = None,
) -> InventoryStatus:
    """
    Project weeks of cover and stockout date for one SKU.

    Args:
        sku: Variant SKU
        on_hand: Units available now (may be negative when oversold)
        monthly_velocity: Units sold per month (4 weeks)
        inbound_orders: Scheduled shipments; only open ones for this SKU count
        today: Reference date (defaults to today in the business timezone)

    Returns:
        InventoryStatus

    Raises:
        ValidationError: If monthly_velocity is negative
    """
    velocity = to_decimal(monthly_velocity)
    if velocity < 0:
        raise ValidationError(
            message="monthly_velocity must not be negative",
            code="INVALID_VELOCITY",
            details={"sku": sku, "provided": str(velocity)},
        )

    today = today or business_today()
    inbound = open_inbound_units(sku, inbound_orders)
    effective = on_hand + inbound

    if velocity > 0:
        weeks = Decimal(effective) / velocity * WEEKS_PER_MONTH
        days = max(round_half_up(weeks * 7), 0)
        stockout_date: Optional[date] = today + timedelta(days=days)
        weeks_of_cover: Optional[Decimal] = round_decimal(weeks, 2)
    else:
        weeks = None
        stockout_date = None
        weeks_of_cover = None

    return InventoryStatus(
        sku=sku,
        on_hand=on_hand,
        inbound_units=inbound,
        effective_on_hand=effective,
        monthly_velocity=round_decimal(velocity, 2),
        weeks_of_cover=weeks_of_cover,
        cover_unbounded=weeks is None,
        projected_stockout_date=stockout_date,
        status=classify_cover(weeks),
    )


def sort_by_status(statuses: Iterable[InventoryStatus]) -> List[InventoryStatus]:
    """Critical first, then Low, Adequate, Healthy; SKU within a status."""
    return sorted(statuses, key=lambda s: (STATUS_PRIORITY[s.status], s.sku))


def project_all(
    snapshots: Iterable[InventorySnapshot],
    velocities: Iterable[SalesVelocity],
    inbound_orders: Iterable[InboundOrder] = (),
    today: Optional[date] = None,
) -> List[InventoryStatus]:
    """
    Cover projections for every SKU that has stock or sales.

    A SKU missing from snapshots has zero on hand; a SKU missing from
    velocities has zero velocity.
    """
    today = today or business_today()
    inbound_orders = list(inbound_orders)

    on_hand_by_sku: Dict[str, int] = {}
    for snap in snapshots:
        on_hand_by_sku[snap.sku] = on_hand_by_sku.get(snap.sku, 0) + snap.on_hand

    velocity_by_sku = {v.sku: v.monthly_velocity for v in velocities}

    skus = list(on_hand_by_sku)
    skus.extend(sku for sku in velocity_by_sku if sku not in on_hand_by_sku)

    results = [
        project_cover(
            sku=sku,
            on_hand=on_hand_by_sku.get(sku, 0),
            monthly_velocity=velocity_by_sku.get(sku, Decimal("0")),
            inbound_orders=inbound_orders,
            today=today,
        )
        for sku in skus
    ]
    return sort_by_status(results)


# ===================
# VELOCITY
# ===================

def check_velocity_window(window_weeks: int) -> None:
    if window_weeks not in VALID_VELOCITY_WINDOWS:
        raise ValidationError(
            message="Velocity window must be 4, 8 or 12 weeks",
            code="INVALID_VELOCITY_WINDOW",
            details={"provided": window_weeks, "valid": list(VALID_VELOCITY_WINDOWS)},
        )


def calculate_velocities(
    orders: Iterable[OrderRecord],
    window_weeks: int,
    now: Optional[datetime] = None,
) -> List[SalesVelocity]:
    """
    Monthly velocity for every SKU sold in the trailing window.

    velocity = units in the last `window_weeks` weeks / window_weeks × 4
    """
    check_velocity_window(window_weeks)

    tz = get_business_timezone()
    end = to_business_time(now, tz) if now else datetime.now(tz)
    start = end - timedelta(weeks=window_weeks)

    units: Dict[str, int] = {}
    for order in orders:
        if not start <= order.created_at <= end:
            continue
        for item in order.line_items:
            units[item.sku] = units.get(item.sku, 0) + item.quantity

    return [
        SalesVelocity(
            sku=sku,
            monthly_velocity=round_decimal(
                Decimal(total) / window_weeks * WEEKS_PER_MONTH, 2
            ),
        )
        for sku, total in units.items()
    ]


def calculate_monthly_velocity(
    orders: Iterable[OrderRecord],
    sku: str,
    window_weeks: int,
    now: Optional[datetime] = None,
) -> Decimal:
    """Monthly velocity for a single SKU (0 when it had no sales)."""
    for velocity in calculate_velocities(orders, window_weeks, now=now):
        if velocity.sku == sku:
            return velocity.monthly_velocity
    return Decimal("0")


# ===================
# REORDER
# ===================

def lead_time_weeks(freight_mode: FreightMode = FreightMode.SEA) -> int:
    """Production plus freight transit, in weeks."""
    freight = (
        settings.air_freight_weeks
        if freight_mode == FreightMode.AIR
        else settings.sea_freight_weeks
    )
    return settings.production_lead_weeks + freight


def recommend_reorder(
    status: InventoryStatus,
    freight_mode: FreightMode = FreightMode.SEA,
    safety_weeks: Optional[int] = None,
) -> ReorderRecommendation:
    """
    Units to order so stock lasts through lead time plus a safety buffer.

    order_now is set when cover is bounded and runs out within
    production lead time + 2 weeks.
    """
    lead = lead_time_weeks(freight_mode)
    safety = settings.safety_stock_weeks if safety_weeks is None else safety_weeks

    weekly = status.monthly_velocity / WEEKS_PER_MONTH
    needed = weekly * (lead + safety)
    shortfall = needed - status.effective_on_hand
    recommended = max(0, math.ceil(shortfall))

    order_now = (
        status.weeks_of_cover is not None
        and status.weeks_of_cover < settings.production_lead_weeks + 2
    )

    return ReorderRecommendation(
        sku=status.sku,
        status=status.status,
        monthly_velocity=status.monthly_velocity,
        effective_on_hand=status.effective_on_hand,
        weeks_of_cover=status.weeks_of_cover,
        lead_time_weeks=lead,
        safety_weeks=safety,
        recommended_qty=recommended,
        order_now=order_now,
    )
