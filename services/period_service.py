"""
Period resolution: turns a period token into concrete time windows.

Every window is computed in the business timezone (settings.business_timezone),
never in the caller's local zone. The comparison window for any period is
derived here and only here: it is the interval of identical length that
ends where the current window starts.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

import structlog
from dateutil.relativedelta import relativedelta

from config import settings
from exceptions import InvalidPeriodTokenError
from models.periods import PeriodToken, PeriodWindow, ResolvedPeriod

logger = structlog.get_logger(__name__)

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

PERIOD_LABELS = {
    PeriodToken.DAILY: "Daily",
    PeriodToken.WEEKLY: "Weekly",
    PeriodToken.MTD: "Month to Date",
    PeriodToken.YTD: "Year to Date",
    PeriodToken.ALL: "All Time",
}


def get_business_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """Timezone all calendar boundaries are computed in."""
    return ZoneInfo(tz_name or settings.business_timezone)


def to_business_time(instant: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """
    Express an instant in the business timezone.

    Naive datetimes are taken to already be business-local wall time.
    """
    tz = tz or get_business_timezone()
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def business_date(instant: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar date of an instant in the business timezone."""
    return to_business_time(instant, tz).date()


def parse_month_key(token: str) -> Optional[Tuple[int, int]]:
    """Return (year, month) for a valid YYYY-MM key, else None."""
    match = MONTH_KEY_PATTERN.match(token)
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        return None
    return year, month


def month_bounds(month_key: str, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """
    First and last instant of a calendar month.

    Raises:
        InvalidPeriodTokenError: If month_key is not a valid YYYY-MM key
    """
    parsed = parse_month_key(month_key)
    if parsed is None:
        raise InvalidPeriodTokenError(month_key)

    tz = tz or get_business_timezone()
    year, month = parsed
    start = datetime(year, month, 1, tzinfo=tz)
    end = start + relativedelta(months=1) - timedelta(microseconds=1)
    return start, end


def iter_month_keys(start: date, end: date) -> List[str]:
    """YYYY-MM keys of every month touched by [start, end], ascending."""
    keys = []
    cursor = date(start.year, start.month, 1)
    while cursor <= end:
        keys.append(cursor.strftime("%Y-%m"))
        cursor = cursor + relativedelta(months=1)
    return keys


def period_label(token: Union[str, PeriodToken]) -> str:
    """
    Display label for a period token or month key.

    Examples:
        "mtd" → "Month to Date"
        "2025-10" → "October 2025"
    """
    value = _token_value(token)
    try:
        named = PeriodToken(value)
    except ValueError:
        named = None

    if named is PeriodToken.ALL:
        return f"{PERIOD_LABELS[named]} ({settings.all_time_days} days)"
    if named is not None:
        return PERIOD_LABELS[named]

    parsed = parse_month_key(value)
    if parsed:
        return date(parsed[0], parsed[1], 1).strftime("%B %Y")

    raise InvalidPeriodTokenError(value)


def _token_value(token: Union[str, PeriodToken]) -> str:
    if isinstance(token, PeriodToken):
        return token.value
    return str(token).strip()


def resolve_window(
    token: Union[str, PeriodToken],
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> PeriodWindow:
    """
    Resolve a period token to its current window.

    Args:
        token: daily, weekly, mtd, ytd, all, or a YYYY-MM month key
        now: Reference instant (defaults to the current time)
        tz_name: Override for the business timezone

    Returns:
        PeriodWindow with start <= end, end included

    Raises:
        InvalidPeriodTokenError: For any other token
    """
    tz = get_business_timezone(tz_name)
    value = _token_value(token)
    now = to_business_time(now, tz) if now else datetime.now(tz)
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if value == PeriodToken.DAILY.value:
        start, end = today_start, now
    elif value == PeriodToken.WEEKLY.value:
        # ISO weeks start on Monday
        start, end = today_start - timedelta(days=today_start.weekday()), now
    elif value == PeriodToken.MTD.value:
        start, end = today_start.replace(day=1), now
    elif value == PeriodToken.YTD.value:
        start, end = today_start.replace(month=1, day=1), now
    elif value == PeriodToken.ALL.value:
        start, end = now - timedelta(days=settings.all_time_days), now
    elif parse_month_key(value):
        start, end = month_bounds(value, tz)
    else:
        logger.warning("invalid_period_token", token=value)
        raise InvalidPeriodTokenError(value)

    return PeriodWindow(
        token=value,
        start=start,
        end=end,
        label=period_label(value),
        include_end=True,
    )


def comparison_window(window: PeriodWindow) -> PeriodWindow:
    """
    The same-length window immediately before `window`.

    comparison.end == window.start and
    comparison.start == window.start - (window.end - window.start).
    The comparison window excludes its end instant. Lengths are measured
    in UTC so a daylight-saving change inside either window doesn't skew them.
    """
    start_utc = window.start.astimezone(timezone.utc)
    duration = window.end.astimezone(timezone.utc) - start_utc
    return PeriodWindow(
        token=window.token,
        start=(start_utc - duration).astimezone(window.start.tzinfo),
        end=window.start,
        label=f"Previous {window.label}" if window.label else "Previous period",
        include_end=False,
    )


def resolve_period(
    token: Union[str, PeriodToken],
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> ResolvedPeriod:
    """Resolve the current window and its comparison window together."""
    current = resolve_window(token, now=now, tz_name=tz_name)
    comparison = comparison_window(current)

    logger.debug(
        "period_resolved",
        token=current.token,
        start=current.start.isoformat(),
        end=current.end.isoformat(),
        comparison_start=comparison.start.isoformat(),
    )

    return ResolvedPeriod(current=current, comparison=comparison)
