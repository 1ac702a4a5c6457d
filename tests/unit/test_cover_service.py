"""
Unit tests for inventory cover projection, velocity and reorder logic.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from exceptions import ValidationError
from models.inventory import CoverStatus, FreightMode, InboundStatus, SalesVelocity
from services.cover_service import (
    calculate_monthly_velocity,
    calculate_velocities,
    classify_cover,
    lead_time_weeks,
    project_all,
    project_cover,
    recommend_reorder,
)
from tests.factories import InboundOrderFactory, brisbane, snapshot


TODAY = date(2025, 10, 15)


# ===================
# CLASSIFICATION
# ===================

class TestClassifyCover:
    """Status thresholds: lower bound inclusive."""

    @pytest.mark.parametrize(
        "weeks,expected",
        [
            (Decimal("0"), CoverStatus.CRITICAL),
            (Decimal("1.99"), CoverStatus.CRITICAL),
            (Decimal("2"), CoverStatus.LOW),
            (Decimal("3.99"), CoverStatus.LOW),
            (Decimal("4"), CoverStatus.ADEQUATE),
            (Decimal("7.99"), CoverStatus.ADEQUATE),
            (Decimal("8"), CoverStatus.HEALTHY),
            (Decimal("52"), CoverStatus.HEALTHY),
            (None, CoverStatus.HEALTHY),
        ],
    )
    def test_thresholds(self, weeks, expected):
        assert classify_cover(weeks) == expected

    def test_negative_cover_is_critical(self):
        assert classify_cover(Decimal("-1")) == CoverStatus.CRITICAL


# ===================
# PROJECTION
# ===================

class TestProjectCover:
    """Tests for project_cover()."""

    def test_eight_weeks_is_healthy(self):
        status = project_cover("A", on_hand=1000, monthly_velocity=500, today=TODAY)

        assert status.weeks_of_cover == Decimal("8.00")
        assert status.status == CoverStatus.HEALTHY
        assert status.projected_stockout_date == TODAY + timedelta(days=56)
        assert status.cover_unbounded is False

    def test_zero_velocity_is_unbounded(self):
        status = project_cover("A", on_hand=100, monthly_velocity=0, today=TODAY)

        assert status.weeks_of_cover is None
        assert status.cover_unbounded is True
        assert status.projected_stockout_date is None
        assert status.status == CoverStatus.HEALTHY

    def test_one_week_is_critical(self):
        status = project_cover("A", on_hand=10, monthly_velocity=40, today=TODAY)

        assert status.weeks_of_cover == Decimal("1.00")
        assert status.status == CoverStatus.CRITICAL
        assert status.projected_stockout_date == TODAY + timedelta(days=7)

    def test_two_weeks_is_low(self):
        status = project_cover("A", on_hand=20, monthly_velocity=40, today=TODAY)

        assert status.status == CoverStatus.LOW

    def test_oversold_stock_runs_out_today(self):
        status = project_cover("A", on_hand=-10, monthly_velocity=40, today=TODAY)

        assert status.weeks_of_cover == Decimal("-1.00")
        assert status.status == CoverStatus.CRITICAL
        assert status.projected_stockout_date == TODAY

    def test_fractional_cover_is_rounded(self):
        status = project_cover("A", on_hand=10, monthly_velocity=3, today=TODAY)

        assert status.weeks_of_cover == Decimal("13.33")

    def test_stockout_days_round_to_nearest(self):
        """5 on hand at 72/month is 1.94 days of cover."""
        status = project_cover("A", on_hand=5, monthly_velocity=72, today=TODAY)

        assert status.projected_stockout_date == TODAY + timedelta(days=2)

    def test_open_inbound_adds_to_effective_on_hand(self):
        inbound = [
            InboundOrderFactory.create(sku="A", quantity=90, status=InboundStatus.PENDING),
            InboundOrderFactory.create(sku="A", quantity=50, status=InboundStatus.ARRIVED),
            InboundOrderFactory.create(sku="A", quantity=30, status=InboundStatus.CANCELLED),
            InboundOrderFactory.create(sku="B", quantity=20, status=InboundStatus.IN_TRANSIT),
        ]

        status = project_cover("A", on_hand=10, monthly_velocity=40,
                               inbound_orders=inbound, today=TODAY)

        assert status.inbound_units == 90
        assert status.effective_on_hand == 100
        assert status.weeks_of_cover == Decimal("10.00")

    def test_negative_velocity_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            project_cover("A", on_hand=10, monthly_velocity=-1, today=TODAY)

        assert exc_info.value.code == "INVALID_VELOCITY"


class TestProjectAll:

    def test_covers_skus_with_stock_or_sales_sorted_by_urgency(self):
        snapshots = [snapshot("A", 1000), snapshot("B", 10)]
        velocities = [
            SalesVelocity(sku="A", monthly_velocity=Decimal("500")),
            SalesVelocity(sku="B", monthly_velocity=Decimal("40")),
            SalesVelocity(sku="C", monthly_velocity=Decimal("20")),
        ]

        statuses = project_all(snapshots, velocities, today=TODAY)

        assert [(s.sku, s.status) for s in statuses] == [
            ("B", CoverStatus.CRITICAL),
            ("C", CoverStatus.CRITICAL),
            ("A", CoverStatus.HEALTHY),
        ]

    def test_stock_without_sales_is_unbounded(self):
        [status] = project_all([snapshot("Z", 5)], [], today=TODAY)

        assert status.cover_unbounded is True


# ===================
# VELOCITY
# ===================

class TestVelocity:
    """Tests for calculate_velocities()."""

    NOW = brisbane(2025, 10, 31, 12)

    def test_four_week_velocity(self, october_orders):
        velocities = {v.sku: v.monthly_velocity for v in calculate_velocities(october_orders, 4, now=self.NOW)}

        assert velocities == {"A": Decimal("6.00"), "B": Decimal("2.00")}

    def test_eight_week_velocity_halves(self, october_orders):
        velocity = calculate_monthly_velocity(october_orders, "A", 8, now=self.NOW)

        assert velocity == Decimal("3.00")

    def test_sku_without_sales_has_zero_velocity(self, october_orders):
        assert calculate_monthly_velocity(october_orders, "Q", 4, now=self.NOW) == Decimal("0")

    def test_orders_before_window_are_ignored(self, october_orders):
        later = brisbane(2025, 12, 31, 12)

        assert calculate_velocities(october_orders, 4, now=later) == []

    @pytest.mark.parametrize("weeks", [0, 3, 6, 52])
    def test_invalid_window_raises(self, october_orders, weeks):
        with pytest.raises(ValidationError) as exc_info:
            calculate_velocities(october_orders, weeks, now=self.NOW)

        assert exc_info.value.code == "INVALID_VELOCITY_WINDOW"


# ===================
# REORDER
# ===================

class TestReorder:
    """Tests for recommend_reorder()."""

    def test_lead_times(self):
        assert lead_time_weeks(FreightMode.SEA) == 18
        assert lead_time_weeks(FreightMode.AIR) == 13

    def test_sea_freight_recommendation(self):
        status = project_cover("A", on_hand=100, monthly_velocity=40, today=TODAY)

        rec = recommend_reorder(status)

        assert rec.lead_time_weeks == 18
        assert rec.safety_weeks == 4
        assert rec.recommended_qty == 120
        assert rec.order_now is True

    def test_air_freight_needs_less(self):
        status = project_cover("A", on_hand=100, monthly_velocity=40, today=TODAY)

        rec = recommend_reorder(status, freight_mode=FreightMode.AIR)

        assert rec.recommended_qty == 70

    def test_well_stocked_sku_needs_nothing(self):
        status = project_cover("A", on_hand=1000, monthly_velocity=40, today=TODAY)

        rec = recommend_reorder(status)

        assert rec.recommended_qty == 0
        assert rec.order_now is False

    def test_unbounded_cover_never_orders_now(self):
        status = project_cover("A", on_hand=0, monthly_velocity=0, today=TODAY)

        rec = recommend_reorder(status)

        assert rec.recommended_qty == 0
        assert rec.order_now is False

    def test_custom_safety_weeks(self):
        status = project_cover("A", on_hand=100, monthly_velocity=40, today=TODAY)

        rec = recommend_reorder(status, safety_weeks=0)

        assert rec.recommended_qty == 80
