"""
Inventory service.

Combines on-hand levels, trailing sales velocity and open inbound
shipments into cover projections and reorder recommendations.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import structlog

from config import settings
from exceptions import DataSourceUnavailableError
from integrations.order_source import InventorySource, OrderSource, fetch_all_orders
from integrations.shopify import ShopifyClient
from models.inventory import (
    CoverStatus,
    FreightMode,
    InventorySnapshot,
    InventoryStatusSummary,
    ReorderRecommendation,
)
from models.orders import OrderRecord
from models.periods import PeriodWindow
from services.cover_service import (
    calculate_velocities,
    check_velocity_window,
    project_all,
    recommend_reorder,
)
from services.inbound_store import InboundStore, get_inbound_store
from services.period_service import get_business_timezone, to_business_time

logger = structlog.get_logger(__name__)


class InventoryService:
    """
    Inventory cover business logic.

    Usage:
        service = InventoryService(source, source, InboundStore(path))
        summary = service.get_inventory_status(velocity_weeks=8)
    """

    def __init__(
        self,
        order_source: OrderSource,
        inventory_source: InventorySource,
        inbound_store: InboundStore,
    ):
        self.order_source = order_source
        self.inventory_source = inventory_source
        self.inbound_store = inbound_store

    # ===================
    # FETCHING
    # ===================

    def _fetch_sales(self, window: PeriodWindow) -> Tuple[List[OrderRecord], bool]:
        try:
            return fetch_all_orders(self.order_source, window), False
        except DataSourceUnavailableError as e:
            logger.warning("velocity_fetch_failed", error=e.message)
            return [], True

    def _fetch_levels(self) -> Tuple[List[InventorySnapshot], bool]:
        try:
            return self.inventory_source.fetch_inventory_levels(), False
        except DataSourceUnavailableError as e:
            logger.warning("inventory_fetch_failed", error=e.message)
            return [], True

    # ===================
    # STATUS
    # ===================

    def get_inventory_status(
        self,
        velocity_weeks: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> InventoryStatusSummary:
        """
        Cover projection for every SKU with stock or recent sales.

        Sales and inventory levels are fetched concurrently. If either
        fetch fails the summary is still built from what arrived and
        flagged failed.

        Args:
            velocity_weeks: Trailing sales window (4, 8 or 12; defaults to settings)
            now: Reference instant

        Raises:
            ValidationError: If velocity_weeks is not 4, 8 or 12
        """
        weeks = settings.velocity_window_weeks if velocity_weeks is None else velocity_weeks
        check_velocity_window(weeks)
        tz = get_business_timezone()
        end = to_business_time(now, tz) if now else datetime.now(tz)
        window = PeriodWindow(
            token=f"{weeks}w",
            start=end - timedelta(weeks=weeks),
            end=end,
            label=f"Last {weeks} weeks",
        )

        with ThreadPoolExecutor(max_workers=min(2, settings.max_concurrent_fetches)) as executor:
            sales_future = executor.submit(self._fetch_sales, window)
            levels_future = executor.submit(self._fetch_levels)
            orders, sales_failed = sales_future.result()
            snapshots, levels_failed = levels_future.result()

        velocities = calculate_velocities(orders, weeks, now=end)
        inbound = self.inbound_store.list(open_only=True)
        products = project_all(snapshots, velocities, inbound, today=end.date())

        summary = InventoryStatusSummary(
            as_of=end.date(),
            velocity_window_weeks=weeks,
            critical_count=sum(1 for p in products if p.status == CoverStatus.CRITICAL),
            low_count=sum(1 for p in products if p.status == CoverStatus.LOW),
            adequate_count=sum(1 for p in products if p.status == CoverStatus.ADEQUATE),
            healthy_count=sum(1 for p in products if p.status == CoverStatus.HEALTHY),
            products=products,
            failed=sales_failed or levels_failed,
        )

        logger.info(
            "inventory_status_built",
            velocity_weeks=weeks,
            products=len(products),
            critical=summary.critical_count,
            low=summary.low_count,
            inbound_orders=len(inbound),
            failed=summary.failed,
        )
        return summary

    def get_reorder_recommendations(
        self,
        velocity_weeks: Optional[int] = None,
        freight_mode: FreightMode = FreightMode.SEA,
        now: Optional[datetime] = None,
    ) -> List[ReorderRecommendation]:
        """Reorder quantities for every SKU, most urgent status first."""
        summary = self.get_inventory_status(velocity_weeks=velocity_weeks, now=now)
        recommendations = [
            recommend_reorder(status, freight_mode=freight_mode)
            for status in summary.products
        ]

        logger.info(
            "reorder_recommendations_built",
            freight_mode=freight_mode.value,
            products=len(recommendations),
            order_now=sum(1 for r in recommendations if r.order_now),
        )
        return recommendations


# Singleton instance for convenience
_inventory_service: Optional[InventoryService] = None


def get_inventory_service() -> InventoryService:
    """Get or create InventoryService backed by Shopify and the JSON store."""
    global _inventory_service
    if _inventory_service is None:
        client = ShopifyClient()
        _inventory_service = InventoryService(client, client, get_inbound_store())
    return _inventory_service
