"""
Unit tests for proportional redistribution and monthly product mixes.
"""

import pytest

from exceptions import InvalidPeriodTokenError, ValidationError
from models.periods import PeriodWindow
from services.period_service import month_bounds
from services.redistribution_service import (
    prorate_monthly_totals,
    redistribute,
    synthesize_monthly_mix,
)
from tests.factories import brisbane


# ===================
# REDISTRIBUTE
# ===================

class TestRedistribute:
    """Tests for redistribute()."""

    def test_exact_scaling(self):
        assert redistribute({"A": 50, "B": 30, "C": 20}, 10) == {"A": 5, "B": 3, "C": 2}

    def test_positive_residual_goes_to_first_largest(self):
        result = redistribute({"A": 1, "B": 1, "C": 1}, 10)

        assert result == {"A": 4, "B": 3, "C": 3}

    def test_negative_residual_taken_from_largest(self):
        result = redistribute({"A": 1, "B": 1}, 3)

        assert result == {"A": 1, "B": 2}

    def test_deficit_spills_to_next_largest(self):
        result = redistribute({"A": 1, "B": 1, "C": 1, "D": 1}, 2)

        assert sum(result.values()) == 2
        assert all(v >= 0 for v in result.values())
        assert result == {"A": 0, "B": 0, "C": 1, "D": 1}

    def test_sum_always_matches_target(self):
        totals = {"A": 7, "B": 13, "C": 1, "D": 29, "E": 3}
        for target in range(0, 60):
            result = redistribute(totals, target)
            assert sum(result.values()) == target
            assert all(v >= 0 for v in result.values())

    def test_zero_target(self):
        assert redistribute({"A": 5, "B": 5}, 0) == {"A": 0, "B": 0}

    def test_empty_and_all_zero_inputs(self):
        assert redistribute({}, 10) == {}
        assert redistribute({"A": 0, "B": 0}, 10) == {}

    def test_negative_target_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            redistribute({"A": 1}, -1)

        assert exc_info.value.code == "INVALID_REDISTRIBUTION_TARGET"

    def test_negative_value_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            redistribute({"A": 1, "B": -2}, 5)

        assert exc_info.value.details["skus"] == ["B"]


# ===================
# MONTHLY MIX
# ===================

class TestSynthesizeMonthlyMix:
    """Tests for synthesize_monthly_mix()."""

    BASE = {"A": 0.5, "B": 0.3, "C": 0.2}

    def test_total_is_orders_times_qty(self):
        mix = synthesize_monthly_mix("2025-10", 100, 1.5, self.BASE)

        assert sum(mix.values()) == 150
        assert set(mix) <= set(self.BASE)

    def test_same_month_same_mix(self):
        first = synthesize_monthly_mix("2025-10", 100, 1.5, self.BASE)
        second = synthesize_monthly_mix("2025-10", 100, 1.5, self.BASE)

        assert first == second

    def test_shares_stay_close_to_base(self):
        mix = synthesize_monthly_mix("2025-10", 1000, 1, self.BASE)

        assert 450 <= mix["A"] <= 550
        assert 250 <= mix["B"] <= 350

    @pytest.mark.parametrize("orders, qty, total", [(1, 1, 1), (2, 1, 2), (1, 1.4, 1), (3, 0.5, 2)])
    def test_tiny_month_still_hits_total(self, orders, qty, total):
        mix = synthesize_monthly_mix("2025-09", orders, qty, {"A": 0.3, "B": 0.3, "C": 0.4})

        assert sum(mix.values()) == total
        assert all(units > 0 for units in mix.values())

    def test_single_unit_goes_to_one_sku(self):
        mix = synthesize_monthly_mix("2025-09", 1, 1, self.BASE)

        assert list(mix.values()) == [1]

    def test_invalid_month_raises(self):
        with pytest.raises(InvalidPeriodTokenError):
            synthesize_monthly_mix("October", 100, 1.5, self.BASE)


# ===================
# PRORATION
# ===================

class TestProrateMonthlyTotals:
    """Tests for prorate_monthly_totals()."""

    MONTHLY = {
        "2025-09": {"A": 10},
        "2025-10": {"A": 62, "B": 31},
    }

    def test_full_month_returns_totals(self):
        start, end = month_bounds("2025-10")
        window = PeriodWindow(token="2025-10", start=start, end=end)

        assert prorate_monthly_totals(self.MONTHLY, window) == {"A": 62, "B": 31}

    def test_partial_month_is_scaled(self):
        window = PeriodWindow(
            token="custom",
            start=brisbane(2025, 10, 1, 0),
            end=brisbane(2025, 10, 16, 0),
        )

        assert prorate_monthly_totals(self.MONTHLY, window) == {"A": 30, "B": 15}

    def test_months_are_summed(self):
        start, _ = month_bounds("2025-09")
        _, end = month_bounds("2025-10")
        window = PeriodWindow(token="custom", start=start, end=end)

        assert prorate_monthly_totals(self.MONTHLY, window) == {"A": 72, "B": 31}

    def test_window_outside_data(self):
        window = PeriodWindow(
            token="custom",
            start=brisbane(2026, 1, 1, 0),
            end=brisbane(2026, 1, 31, 0),
        )

        assert prorate_monthly_totals(self.MONTHLY, window) == {}
