"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, RecordSchema
from models.orders import (
    UNKNOWN_SKU,
    LineItem,
    OrderRecord,
    OrderQuery,
    OrderPage,
)
from models.periods import (
    PeriodToken,
    Granularity,
    PeriodWindow,
    ResolvedPeriod,
)
from models.metrics import (
    TrendDirection,
    DailyBucket,
    Bucket,
    TimeSeries,
    VariantRanking,
    Comparison,
    MetricSummary,
    TopVariantsResult,
    DashboardOverview,
    MonthlyAggregate,
    PeriodTotals,
)
from models.inventory import (
    CoverStatus,
    STATUS_PRIORITY,
    FreightMode,
    InboundStatus,
    InventorySnapshot,
    SalesVelocity,
    DepositTracking,
    InboundOrderCreate,
    InboundOrderStatusUpdate,
    InboundOrder,
    InventoryStatus,
    InventoryStatusSummary,
    ReorderRecommendation,
)

__all__ = [
    # Base
    "BaseSchema",
    "RecordSchema",

    # Orders
    "UNKNOWN_SKU",
    "LineItem",
    "OrderRecord",
    "OrderQuery",
    "OrderPage",

    # Periods
    "PeriodToken",
    "Granularity",
    "PeriodWindow",
    "ResolvedPeriod",

    # Metrics
    "TrendDirection",
    "DailyBucket",
    "Bucket",
    "TimeSeries",
    "VariantRanking",
    "Comparison",
    "MetricSummary",
    "TopVariantsResult",
    "DashboardOverview",
    "MonthlyAggregate",
    "PeriodTotals",

    # Inventory
    "CoverStatus",
    "STATUS_PRIORITY",
    "FreightMode",
    "InboundStatus",
    "InventorySnapshot",
    "SalesVelocity",
    "DepositTracking",
    "InboundOrderCreate",
    "InboundOrderStatusUpdate",
    "InboundOrder",
    "InventoryStatus",
    "InventoryStatusSummary",
    "ReorderRecommendation",
]
