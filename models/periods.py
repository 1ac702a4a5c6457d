"""
Period models: named period tokens, bucket granularities, and resolved
time windows.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import Field, model_validator

from models.base import BaseSchema


class PeriodToken(str, Enum):
    """Named periods. Month keys (YYYY-MM) are accepted alongside these."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MTD = "mtd"
    YTD = "ytd"
    ALL = "all"


class Granularity(str, Enum):
    """Bucket size for time series."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


class PeriodWindow(BaseSchema):
    """
    A time window in the business timezone.

    The current window of a period includes its end instant. A comparison
    window stops just before its end (which equals the current start) so
    no order is counted in both.
    """

    token: str = Field(..., description="Period token or month key")
    start: datetime
    end: datetime
    label: str = Field(default="", description="Display label")
    include_end: bool = Field(default=True, description="Whether end itself is inside")

    @model_validator(mode="after")
    def start_not_after_end(self) -> "PeriodWindow":
        if self.start > self.end:
            raise ValueError("window start must not be after end")
        return self

    @property
    def duration(self) -> timedelta:
        """Elapsed time, measured in UTC."""
        return self.end.astimezone(timezone.utc) - self.start.astimezone(timezone.utc)

    def contains(self, instant: datetime) -> bool:
        """True when instant falls inside the window."""
        if instant < self.start:
            return False
        if self.include_end:
            return instant <= self.end
        return instant < self.end


class ResolvedPeriod(BaseSchema):
    """A current window and the same-length window right before it."""

    current: PeriodWindow
    comparison: PeriodWindow
