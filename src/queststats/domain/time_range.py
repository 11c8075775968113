"""Time range resolution for chart computations."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from queststats.domain.entities import TimeRange, TimeRangeType
from queststats.domain.errors import ConfigValidationError
from queststats.utils.date_parser import to_naive

# Calendar-aware lookback per relative range type.
_LOOKBACK: dict[TimeRangeType, relativedelta] = {
    TimeRangeType.LAST_7_DAYS: relativedelta(days=7),
    TimeRangeType.LAST_30_DAYS: relativedelta(days=30),
    TimeRangeType.LAST_3_MONTHS: relativedelta(months=3),
    TimeRangeType.LAST_6_MONTHS: relativedelta(months=6),
    TimeRangeType.LAST_YEAR: relativedelta(years=1),
    TimeRangeType.LAST_2_YEARS: relativedelta(years=2),
    TimeRangeType.LAST_3_YEARS: relativedelta(years=3),
}


@dataclass(frozen=True)
class ResolvedTimeRange:
    """Concrete half-open window ``start <= t < end``."""

    start: datetime
    end: datetime
    unbounded: bool = False

    def contains(self, moment: Optional[datetime]) -> bool:
        """Return True if a moment lies in the window.

        Unknown moments only belong to an unbounded window.
        """
        if moment is None:
            return self.unbounded
        return self.start <= moment < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


ALL_TIME = ResolvedTimeRange(start=datetime.min, end=datetime.max, unbounded=True)


def time_range_problems(time_range: Optional[TimeRange]) -> list[str]:
    """Return validation problems of a time range selector."""
    if time_range is None or time_range.type != TimeRangeType.CUSTOM:
        return []
    problems = []
    if time_range.custom_start is None or time_range.custom_end is None:
        problems.append("Custom time range requires both a start and an end")
    elif to_naive(time_range.custom_end) < to_naive(time_range.custom_start):
        problems.append("Custom time range end must not be before its start")
    return problems


def resolve_time_range(time_range: Optional[TimeRange], now: datetime) -> ResolvedTimeRange:
    """Turn a time range selector into concrete bounds.

    Args:
        time_range: Selector from the chart configuration (None means all time)
        now: Reference instant, captured once per computation

    Returns:
        ResolvedTimeRange for the selector

    Raises:
        ConfigValidationError: If a custom range is incomplete or inverted
    """
    if time_range is None or time_range.type == TimeRangeType.ALL_TIME:
        return ALL_TIME

    problems = time_range_problems(time_range)
    if problems:
        raise ConfigValidationError(problems)

    if time_range.type == TimeRangeType.CUSTOM:
        return ResolvedTimeRange(
            start=to_naive(time_range.custom_start),
            end=to_naive(time_range.custom_end),
        )

    # Relative ranges end at the midnight after now, so today is a full bucket.
    today = datetime.combine(to_naive(now).date(), time.min)
    try:
        end = today + timedelta(days=1)
    except OverflowError:
        end = datetime.max
    return ResolvedTimeRange(start=end - _LOOKBACK[time_range.type], end=end)
