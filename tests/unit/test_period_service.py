"""
Unit tests for period resolution.

Covers every period token, month keys, comparison windows and the
business-timezone handling of reference instants.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from exceptions import InvalidPeriodTokenError
from models.periods import PeriodToken
from services.period_service import (
    business_date,
    comparison_window,
    iter_month_keys,
    month_bounds,
    parse_month_key,
    period_label,
    resolve_period,
    resolve_window,
)
from tests.factories import BRISBANE, brisbane


NOW = brisbane(2025, 10, 15, 10, 30)  # Wednesday


# ===================
# NAMED TOKENS
# ===================

class TestResolveWindow:
    """Tests for resolve_window()."""

    def test_daily_starts_at_local_midnight(self):
        window = resolve_window("daily", now=NOW)

        assert window.start == brisbane(2025, 10, 15, 0, 0)
        assert window.end == NOW
        assert window.label == "Daily"

    def test_weekly_starts_on_monday(self):
        window = resolve_window("weekly", now=NOW)

        assert window.start == brisbane(2025, 10, 13, 0, 0)
        assert window.start.weekday() == 0

    def test_weekly_on_a_monday_starts_today(self):
        monday = brisbane(2025, 10, 13, 9)
        window = resolve_window(PeriodToken.WEEKLY, now=monday)

        assert window.start == brisbane(2025, 10, 13, 0, 0)

    def test_mtd_starts_on_first_of_month(self):
        window = resolve_window("mtd", now=NOW)

        assert window.start == brisbane(2025, 10, 1, 0, 0)
        assert window.end == NOW
        assert window.label == "Month to Date"

    def test_ytd_starts_on_first_of_january(self):
        window = resolve_window("ytd", now=NOW)

        assert window.start == brisbane(2025, 1, 1, 0, 0)
        assert window.label == "Year to Date"

    def test_all_looks_back_configured_days(self):
        window = resolve_window("all", now=NOW)

        assert window.end - window.start == timedelta(days=180)
        assert window.label == "All Time (180 days)"

    def test_token_whitespace_is_ignored(self):
        window = resolve_window("  mtd ", now=NOW)

        assert window.token == "mtd"

    def test_utc_reference_instant_uses_business_date(self):
        """20:00 UTC on the 14th is already the 15th in Brisbane."""
        now = datetime(2025, 10, 14, 20, 0, tzinfo=timezone.utc)
        window = resolve_window("daily", now=now)

        assert window.start == brisbane(2025, 10, 15, 0, 0)
        assert window.start.utcoffset() == timedelta(hours=10)

    def test_windows_are_ordered(self):
        for token in ("daily", "weekly", "mtd", "ytd", "all", "2025-02"):
            window = resolve_window(token, now=NOW)
            assert window.start <= window.end


# ===================
# MONTH KEYS
# ===================

class TestMonthKeys:
    """Tests for YYYY-MM month keys."""

    def test_month_key_covers_whole_month(self):
        window = resolve_window("2025-10", now=NOW)

        assert window.start == brisbane(2025, 10, 1, 0, 0)
        assert window.end == datetime(2025, 10, 31, 23, 59, 59, 999999, tzinfo=BRISBANE)
        assert window.label == "October 2025"

    def test_february_leap_year(self):
        start, end = month_bounds("2024-02")

        assert end.date() == date(2024, 2, 29)

    def test_month_in_the_future_is_still_valid(self):
        window = resolve_window("2030-01", now=NOW)

        assert window.start.year == 2030

    @pytest.mark.parametrize("token", ["2025-13", "2025-00", "2025-1", "25-10", "2025/10"])
    def test_invalid_month_keys(self, token):
        assert parse_month_key(token) is None

    def test_iter_month_keys_spans_year_boundary(self):
        keys = iter_month_keys(date(2025, 11, 15), date(2026, 2, 1))

        assert keys == ["2025-11", "2025-12", "2026-01", "2026-02"]


# ===================
# INVALID TOKENS
# ===================

class TestInvalidTokens:
    """Unknown tokens fail loudly instead of falling back."""

    @pytest.mark.parametrize("token", ["", "quarterly", "MTD-1", "2025-13", "month"])
    def test_invalid_token_raises(self, token):
        with pytest.raises(InvalidPeriodTokenError) as exc_info:
            resolve_window(token, now=NOW)

        assert exc_info.value.code == "INVALID_PERIOD_TOKEN"
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["provided"] == token.strip()

    def test_label_for_invalid_token_raises(self):
        with pytest.raises(InvalidPeriodTokenError):
            period_label("fortnightly")


# ===================
# COMPARISON WINDOWS
# ===================

class TestComparisonWindow:
    """Tests for comparison_window() and resolve_period()."""

    def test_comparison_ends_where_current_starts(self):
        resolved = resolve_period("mtd", now=NOW)

        assert resolved.comparison.end == resolved.current.start
        assert resolved.comparison.duration == resolved.current.duration

    def test_mtd_comparison_is_not_previous_calendar_month(self):
        """Fourteen and a half days into October compares against the same span before it."""
        resolved = resolve_period("mtd", now=NOW)

        assert resolved.comparison.start == brisbane(2025, 9, 16, 13, 30)

    def test_month_key_comparison_has_same_length(self):
        resolved = resolve_period("2025-10", now=NOW)
        current = resolved.current

        assert resolved.comparison.start == current.start - (current.end - current.start)

    def test_boundary_instant_belongs_to_current_window_only(self):
        resolved = resolve_period("weekly", now=NOW)
        boundary = resolved.current.start

        assert resolved.current.contains(boundary)
        assert not resolved.comparison.contains(boundary)
        assert resolved.comparison.contains(boundary - timedelta(microseconds=1))

    def test_comparison_label(self):
        window = resolve_window("mtd", now=NOW)

        assert comparison_window(window).label == "Previous Month to Date"

    def test_lengths_match_across_daylight_saving_change(self):
        """Sydney moved to AEDT on 5 October 2025, inside the MTD window."""
        sydney = ZoneInfo("Australia/Sydney")
        now = datetime(2025, 10, 15, 12, 0, tzinfo=sydney)
        resolved = resolve_period("mtd", now=now, tz_name="Australia/Sydney")

        current = resolved.current.end.astimezone(timezone.utc) - resolved.current.start.astimezone(timezone.utc)
        previous = resolved.comparison.end.astimezone(timezone.utc) - resolved.comparison.start.astimezone(timezone.utc)

        assert current == timedelta(days=14, hours=11)
        assert previous == current
        assert resolved.comparison.duration == resolved.current.duration
        assert resolved.comparison.end == resolved.current.start

    def test_zero_length_window(self):
        """daily at exactly midnight: both windows are empty instants."""
        midnight = brisbane(2025, 10, 15, 0, 0)
        resolved = resolve_period("daily", now=midnight)

        assert resolved.current.start == resolved.current.end
        assert resolved.comparison.start == resolved.comparison.end


# ===================
# TIMEZONE HELPERS
# ===================

class TestBusinessDate:

    def test_late_utc_evening_is_next_business_day(self):
        instant = datetime(2025, 10, 31, 15, 0, tzinfo=timezone.utc)

        assert business_date(instant) == date(2025, 11, 1)

    def test_naive_datetime_is_business_local(self):
        assert business_date(datetime(2025, 10, 31, 23, 0)) == date(2025, 10, 31)
