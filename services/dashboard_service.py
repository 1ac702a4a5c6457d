"""
Dashboard service.

Resolves a period, fetches the current and comparison windows
concurrently, and builds the summaries shown on the overview page.

A failed fetch never fails the whole request: the affected side is
reported as zero and flagged with failed / comparison_failed so callers
can tell "no sales" from "no data".
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

import structlog

from config import settings
from exceptions import DataSourceUnavailableError
from integrations.order_source import OrderSource, fetch_all_orders
from integrations.shopify import ShopifyClient
from models.metrics import (
    DashboardOverview,
    MetricSummary,
    TimeSeries,
    TopVariantsResult,
)
from models.orders import OrderRecord
from models.periods import PeriodWindow, ResolvedPeriod
from services.period_service import resolve_period
from services.ranking_service import compare, order_totals, top_variants
from services.timeseries_service import build_time_series

logger = structlog.get_logger(__name__)

OVERVIEW_SERIES_COUNT = 3

# (records, failed)
FetchResult = Tuple[List[OrderRecord], bool]


class DashboardService:
    """
    Sales dashboard business logic.

    Usage:
        service = DashboardService(InMemoryOrderSource(orders))
        summary = service.get_sales_summary("mtd")
    """

    def __init__(self, source: OrderSource, max_workers: Optional[int] = None):
        self.source = source
        self.max_workers = max_workers or settings.max_concurrent_fetches

    # ===================
    # FETCHING
    # ===================

    def _safe_fetch(self, window: PeriodWindow, sku: Optional[str] = None) -> FetchResult:
        """Fetch a window; a source failure becomes ([], True)."""
        try:
            return fetch_all_orders(self.source, window, sku=sku), False
        except DataSourceUnavailableError as e:
            logger.warning(
                "fetch_failed",
                source=self.source.name,
                window=window.label,
                sku=sku,
                error=e.message,
            )
            return [], True

    def _fetch_period(self, resolved: ResolvedPeriod) -> Tuple[FetchResult, FetchResult]:
        """Current and comparison windows, fetched concurrently."""
        with ThreadPoolExecutor(max_workers=min(2, self.max_workers)) as executor:
            current = executor.submit(self._safe_fetch, resolved.current)
            previous = executor.submit(self._safe_fetch, resolved.comparison)
            return current.result(), previous.result()

    # ===================
    # SUMMARIES
    # ===================

    def _summaries(
        self,
        resolved: ResolvedPeriod,
        current: FetchResult,
        previous: FetchResult,
    ) -> dict:
        current_orders, current_failed = current
        previous_orders, previous_failed = previous

        cur = order_totals(current_orders, resolved.current)
        prev = order_totals(previous_orders, resolved.comparison)

        summaries = {}
        for index, metric in enumerate(("orders", "sales", "units")):
            current_value = Decimal(cur[index])
            previous_value = Decimal(prev[index])
            summaries[metric] = MetricSummary(
                period=resolved.current.token,
                label=resolved.current.label,
                current=current_value,
                previous=previous_value,
                comparison=compare(current_value, previous_value),
                failed=current_failed,
                comparison_failed=previous_failed,
            )
        return summaries

    def _metric(self, period: str, metric: str, now: Optional[datetime]) -> MetricSummary:
        resolved = resolve_period(period, now=now)
        current, previous = self._fetch_period(resolved)
        summary = self._summaries(resolved, current, previous)[metric]

        logger.info(
            "metric_summary_built",
            metric=metric,
            period=resolved.current.token,
            current=str(summary.current),
            previous=str(summary.previous),
            failed=summary.failed,
            comparison_failed=summary.comparison_failed,
        )
        return summary

    def get_orders_summary(self, period: str, now: Optional[datetime] = None) -> MetricSummary:
        """Order count for the period vs the previous period."""
        return self._metric(period, "orders", now)

    def get_sales_summary(self, period: str, now: Optional[datetime] = None) -> MetricSummary:
        """Revenue (sum of order totals) for the period vs the previous period."""
        return self._metric(period, "sales", now)

    def get_units(self, period: str, now: Optional[datetime] = None) -> MetricSummary:
        """Units sold for the period vs the previous period."""
        return self._metric(period, "units", now)

    # ===================
    # RANKINGS / SERIES
    # ===================

    def get_top_variants(
        self,
        period: str,
        n: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TopVariantsResult:
        """Top variants by units for the current window only."""
        resolved = resolve_period(period, now=now)
        orders, failed = self._safe_fetch(resolved.current)

        return TopVariantsResult(
            period=resolved.current.token,
            label=resolved.current.label,
            variants=top_variants(orders, resolved.current, n=n),
            failed=failed,
        )

    def _series(self, window: PeriodWindow, sku: Optional[str]) -> TimeSeries:
        orders, failed = self._safe_fetch(window, sku=sku)
        series = build_time_series(orders, window, sku=sku)
        series.failed = failed
        return series

    def get_product_time_series(
        self,
        sku: Optional[str],
        period: str,
        now: Optional[datetime] = None,
    ) -> TimeSeries:
        """
        Daily buckets and rollups for one SKU (or all orders when sku is None).

        Raises:
            InvalidPeriodTokenError: If period is not recognized
        """
        resolved = resolve_period(period, now=now)
        return self._series(resolved.current, sku)

    def get_overview(self, period: str, now: Optional[datetime] = None) -> DashboardOverview:
        """
        Summaries, top variants and series for the top three variants.

        The per-SKU series are fetched concurrently once the ranking is known.
        """
        resolved = resolve_period(period, now=now)
        current, previous = self._fetch_period(resolved)
        summaries = self._summaries(resolved, current, previous)

        ranked = top_variants(current[0], resolved.current)
        top_skus = [r.sku for r in ranked[:OVERVIEW_SERIES_COUNT]]

        top_series: List[TimeSeries] = []
        if top_skus:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                top_series = list(
                    executor.map(lambda sku: self._series(resolved.current, sku), top_skus)
                )

        logger.info(
            "overview_built",
            period=resolved.current.token,
            orders=str(summaries["orders"].current),
            top_skus=top_skus,
            failed=summaries["orders"].failed,
        )

        return DashboardOverview(
            period=resolved.current.token,
            label=resolved.current.label,
            window=resolved.current,
            comparison_window=resolved.comparison,
            orders=summaries["orders"],
            sales=summaries["sales"],
            units=summaries["units"],
            top_variants=ranked,
            top_series=top_series,
        )


# Singleton instance for convenience
_dashboard_service: Optional[DashboardService] = None


def get_dashboard_service() -> DashboardService:
    """Get or create DashboardService backed by Shopify."""
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService(ShopifyClient())
    return _dashboard_service
