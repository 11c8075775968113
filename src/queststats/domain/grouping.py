"""Grouping of filtered records into ordered chart buckets."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from queststats.domain.compatibility import BucketDensity, CategoryOrder
from queststats.domain.entities import DateInterval, GroupingConfig, GroupingType, Record
from queststats.domain.time_range import ALL_TIME, ResolvedTimeRange

UNSPECIFIED_LABEL = "Unspecified"
DEFAULT_LABEL = "All"
MAX_DENSE_BUCKETS = 1000

_STEP: dict[DateInterval, relativedelta] = {
    DateInterval.DAY: relativedelta(days=1),
    DateInterval.WEEK: relativedelta(weeks=1),
    DateInterval.MONTH: relativedelta(months=1),
    DateInterval.YEAR: relativedelta(years=1),
}

_LABEL_FORMAT: dict[DateInterval, str] = {
    DateInterval.DAY: "%Y-%m-%d",
    DateInterval.WEEK: "%Y-%m-%d",
    DateInterval.MONTH: "%Y-%m",
    DateInterval.YEAR: "%Y",
}


@dataclass(frozen=True)
class Bucket:
    """Records sharing one grouping key, in natural order."""

    label: str
    key: Any
    records: tuple[Record, ...]


def truncate(moment: datetime, interval: DateInterval) -> datetime:
    """Return the start of the interval containing a moment.

    Weeks start on Monday (ISO weeks).
    """
    day_start = datetime.combine(moment.date(), time.min)
    if interval == DateInterval.DAY:
        return day_start
    if interval == DateInterval.WEEK:
        return day_start - timedelta(days=day_start.weekday())
    if interval == DateInterval.MONTH:
        return day_start.replace(day=1)
    if interval == DateInterval.YEAR:
        return day_start.replace(month=1, day=1)
    raise ValueError(f"Unsupported date interval: {interval!r}")


def date_label(bucket_start: datetime, interval: DateInterval) -> str:
    """Format a bucket start; labels sort chronologically as text."""
    return bucket_start.strftime(_LABEL_FORMAT[interval])


def category_label(value: Any) -> str:
    """Display key for a category value."""
    if value is None:
        return UNSPECIFIED_LABEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def iter_interval_starts(
    first: datetime,
    end: datetime,
    interval: DateInterval,
    inclusive: bool = False,
    limit: int = MAX_DENSE_BUCKETS,
):
    """Yield consecutive interval starts from ``first`` up to ``end``.

    Stops after ``limit`` starts or at the last representable interval.
    """
    step = _STEP[interval]
    current = first
    produced = 0
    while produced < limit and (current < end or (inclusive and current == end)):
        yield current
        produced += 1
        try:
            current = current + step
        except (OverflowError, ValueError):
            return


def _group_by_date(
    records: Iterable[Record],
    key_of: Callable[[Record], Any],
    interval: DateInterval,
    density: BucketDensity,
    time_range: ResolvedTimeRange,
) -> list[Bucket]:
    grouped: dict[datetime, list[Record]] = {}
    unspecified: list[Record] = []
    for record in records:
        moment = key_of(record)
        if moment is None:
            unspecified.append(record)
            continue
        grouped.setdefault(truncate(moment, interval), []).append(record)

    if density == BucketDensity.DENSE and (grouped or not time_range.unbounded):
        if time_range.unbounded:
            starts = iter_interval_starts(min(grouped), max(grouped), interval, inclusive=True)
        else:
            starts = iter_interval_starts(truncate(time_range.start, interval), time_range.end, interval)
        keys = list(starts)
        known = set(keys)
        # Records outside the dense span still get their own bucket.
        keys.extend(key for key in grouped if key not in known)
        keys.sort()
    else:
        keys = sorted(grouped)

    buckets = [Bucket(date_label(key, interval), key, tuple(grouped.get(key, ()))) for key in keys]
    if unspecified:
        buckets.append(Bucket(UNSPECIFIED_LABEL, None, tuple(unspecified)))
    return buckets


def _group_by_category(
    records: Iterable[Record],
    key_of: Callable[[Record], Any],
    order: CategoryOrder,
) -> list[Bucket]:
    # Values with the same label share a bucket; the first key seen represents it.
    grouped: dict[str, tuple[Any, list[Record]]] = {}
    for record in records:
        key = key_of(record)
        label = category_label(key)
        if label == UNSPECIFIED_LABEL:
            key = None
        grouped.setdefault(label, (key, []))[1].append(record)

    buckets = [Bucket(label, key, tuple(items)) for label, (key, items) in grouped.items()]
    if order == CategoryOrder.FIRST_APPEARANCE:
        return buckets

    specified = [bucket for bucket in buckets if bucket.key is not None]
    unspecified = [bucket for bucket in buckets if bucket.key is None]
    if order == CategoryOrder.LABEL:
        specified.sort(key=lambda bucket: (bucket.label.casefold(), bucket.label))
    else:
        specified.sort(key=lambda bucket: bucket.key)
    return specified + unspecified


def group_records(
    records: Iterable[Record],
    *,
    grouping: GroupingConfig,
    key_of: Callable[[Record], Any],
    density: BucketDensity = BucketDensity.SPARSE,
    category_order: CategoryOrder = CategoryOrder.FIRST_APPEARANCE,
    time_range: ResolvedTimeRange = ALL_TIME,
    title: Optional[str] = None,
) -> tuple[Bucket, ...]:
    """Partition records into ordered buckets.

    Args:
        records: Records already narrowed to the time range, in natural order
        grouping: Grouping strategy
        key_of: Extracts the grouping key (the X-axis value) of a record
        density: Whether empty date buckets are materialized
        category_order: Order of category buckets
        time_range: Resolved window, used to span dense date buckets
        title: Label of the single bucket when grouping is NONE

    Returns:
        Tuple of buckets in output order
    """
    records = list(records)
    if grouping.type == GroupingType.NONE:
        if not records:
            return ()
        return (Bucket(title or DEFAULT_LABEL, None, tuple(records)),)
    if grouping.type == GroupingType.BY_DATE:
        return tuple(_group_by_date(records, key_of, grouping.interval, density, time_range))
    if grouping.type == GroupingType.BY_CATEGORY:
        return tuple(_group_by_category(records, key_of, category_order))
    raise ValueError(f"Unsupported grouping type: {grouping.type!r}")
