"""CLI helpers for time range resolution."""

from datetime import datetime, time, timedelta

import click

from queststats.domain.entities import TimeRange, TimeRangeType
from queststats.utils.date_parser import parse_date


def resolve_cli_time_range(
    ctx,
    *,
    range_name: str | None,
    start_date: str | None,
    end_date: str | None,
) -> TimeRange | None:
    """Resolve the CLI time range from a named range or explicit dates.

    Explicit dates are whole days: the end date is included.
    """
    if range_name and range_name != TimeRangeType.CUSTOM.value and (start_date or end_date):
        click.echo(
            "Error: --range cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if not start_date and not end_date:
        if range_name == TimeRangeType.CUSTOM.value:
            click.echo("Error: --range custom requires --start-date and --end-date.", err=True)
            ctx.exit(1)
        if range_name:
            return TimeRange(TimeRangeType(range_name))
        return None

    if not (start_date and end_date):
        click.echo("Error: --start-date and --end-date must be given together.", err=True)
        ctx.exit(1)

    try:
        start = parse_date(start_date)
    except ValueError as e:
        click.echo(f"Error: Invalid start date: {e}", err=True)
        ctx.exit(1)

    try:
        end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid end date: {e}", err=True)
        ctx.exit(1)

    return TimeRange(
        TimeRangeType.CUSTOM,
        custom_start=datetime.combine(start, time.min),
        custom_end=datetime.combine(end + timedelta(days=1), time.min),
    )
