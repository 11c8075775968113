"""Date parsing utilities."""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats
        today: Reference day for relative dates (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            # Monday of last week
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(value: str) -> datetime:
    """Parse an absolute date/time string into a naive datetime.

    Raises:
        ValueError: If the string cannot be parsed
    """
    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, TypeError, OverflowError):
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"Could not parse date/time '{value}': {e}")
    return to_naive(parsed)


def to_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive; aware values are converted to UTC first."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Coerce a record value into a naive datetime, or None if impossible.

    Dates become midnight of that day and strings are parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return parse_datetime(value)
        except ValueError:
            return None
    return None
