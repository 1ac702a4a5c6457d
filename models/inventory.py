"""
Inventory models: on-hand snapshots, inbound shipments, cover
projections and reorder recommendations.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import BaseSchema


class CoverStatus(str, Enum):
    """Stock status by weeks of cover."""

    CRITICAL = "Critical"    # < 2 weeks
    LOW = "Low"              # 2-4 weeks
    ADEQUATE = "Adequate"    # 4-8 weeks
    HEALTHY = "Healthy"      # 8+ weeks, or no depletion


STATUS_PRIORITY = {
    CoverStatus.CRITICAL: 0,
    CoverStatus.LOW: 1,
    CoverStatus.ADEQUATE: 2,
    CoverStatus.HEALTHY: 3,
}


class FreightMode(str, Enum):
    AIR = "air"
    SEA = "sea"


class InboundStatus(str, Enum):
    """Lifecycle of a scheduled shipment."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"


# Statuses whose quantity still adds to effective on-hand
OPEN_INBOUND_STATUSES = (InboundStatus.PENDING, InboundStatus.IN_TRANSIT)


class InventorySnapshot(BaseSchema):
    """On-hand quantity for one SKU."""

    sku: str
    on_hand: int = Field(default=0)
    tracked: bool = True


class SalesVelocity(BaseSchema):
    """Average units sold per month (4 weeks) for one SKU."""

    sku: str
    monthly_velocity: Decimal = Field(default=Decimal("0"), ge=0)


class DepositTracking(BaseSchema):
    paid: Decimal = Field(default=Decimal("0"), ge=0)
    remaining: Decimal = Field(default=Decimal("0"))


class InboundOrderCreate(BaseSchema):
    """Request body for scheduling an inbound shipment."""

    sku: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    freight_mode: FreightMode = FreightMode.SEA
    expected_arrival: date
    deposit_paid: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str = ""


class InboundOrderStatusUpdate(BaseSchema):
    status: InboundStatus


class InboundOrder(BaseSchema):
    """A scheduled shipment as persisted in the inbound store."""

    id: str
    sku: str
    quantity: int = Field(..., gt=0)
    freight_mode: FreightMode
    expected_arrival: date
    deposit: DepositTracking = Field(default_factory=DepositTracking)
    status: InboundStatus = InboundStatus.PENDING
    notes: str = ""
    created_at: datetime

    @property
    def is_open(self) -> bool:
        """Not arrived and not cancelled."""
        return self.status in OPEN_INBOUND_STATUSES


class InventoryStatus(BaseSchema):
    """
    Cover projection for one SKU.

    weeks_of_cover is None when velocity is zero: stock never depletes,
    so there is no stockout date either.
    """

    sku: str
    on_hand: int
    inbound_units: int = 0
    effective_on_hand: int
    monthly_velocity: Decimal
    weeks_of_cover: Optional[Decimal] = None
    cover_unbounded: bool = False
    projected_stockout_date: Optional[date] = None
    status: CoverStatus


class InventoryStatusSummary(BaseSchema):
    """Cover projections for every SKU plus counts by status."""

    as_of: date
    velocity_window_weeks: int
    critical_count: int = 0
    low_count: int = 0
    adequate_count: int = 0
    healthy_count: int = 0
    products: List[InventoryStatus] = Field(default_factory=list)
    failed: bool = Field(default=False, description="True when a source fetch failed")


class ReorderRecommendation(BaseSchema):
    """How much to order so cover lasts through lead time plus buffer."""

    sku: str
    status: CoverStatus
    monthly_velocity: Decimal
    effective_on_hand: int
    weeks_of_cover: Optional[Decimal] = None
    lead_time_weeks: int
    safety_weeks: int
    recommended_qty: int = Field(default=0, ge=0)
    order_now: bool = False
