"""
Business logic services.

Each service handles one domain area.
"""

from services.dashboard_service import DashboardService, get_dashboard_service
from services.inventory_service import InventoryService, get_inventory_service
from services.inbound_store import InboundStore, get_inbound_store
from services.period_service import resolve_period, resolve_window, comparison_window
from services.ranking_service import compare, top_variants
from services.timeseries_service import bucket_daily, rollup, build_time_series
from services.cover_service import project_cover, recommend_reorder
from services.redistribution_service import redistribute, synthesize_monthly_mix

__all__ = [
    "DashboardService",
    "get_dashboard_service",
    "InventoryService",
    "get_inventory_service",
    "InboundStore",
    "get_inbound_store",
    "resolve_period",
    "resolve_window",
    "comparison_window",
    "compare",
    "top_variants",
    "bucket_daily",
    "rollup",
    "build_time_series",
    "project_cover",
    "recommend_reorder",
    "redistribute",
    "synthesize_monthly_mix",
]
