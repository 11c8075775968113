"""Chart computation command."""

from dataclasses import replace

import click

from queststats.cli.error_handling import handle_domain_error
from queststats.cli.time_filters import resolve_cli_time_range
from queststats.domain.chart_data import ChartDataService
from queststats.domain.entities import (
    AggregationFunction,
    ChartDataResult,
    ChartType,
    DataFilter,
    DataSource,
    DateInterval,
    DynamicChartConfig,
    FilterOperator,
    GroupingConfig,
    GroupingType,
    SortConfig,
    SortDirection,
    SortKey,
    TimeRangeType,
)
from queststats.domain.errors import DomainError
from queststats.domain.templates import get_template
from queststats.utils.date_parser import parse_datetime


def _choices(enum_type) -> click.Choice:
    return click.Choice([member.value for member in enum_type], case_sensitive=False)


def parse_where(expression: str) -> DataFilter:
    """Parse a ``FIELD:OPERATOR:VALUE`` filter expression.

    Raises:
        ValueError: If the expression is malformed or the operator unknown
    """
    parts = expression.split(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise ValueError(f"Invalid filter '{expression}'. Expected FIELD:OPERATOR:VALUE")
    field_id, operator, value = parts
    try:
        return DataFilter(field_id=field_id, operator=FilterOperator(operator.lower()), value=value)
    except ValueError:
        operators = ", ".join(op.value for op in FilterOperator)
        raise ValueError(f"Unknown filter operator '{operator}'. Supported operators: {operators}")


def format_value(value: float) -> str:
    """Format a chart value for display."""
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def print_chart(title: str, result: ChartDataResult) -> None:
    """Print chart data as label/value rows."""
    click.echo(f"\n{title}")
    if result.is_empty:
        click.echo("No data for this chart.")
        return
    width = max(20, max(len(label) for label in result.labels))
    for label, value in result.rows():
        click.echo(f"  {label:<{width}} {format_value(value):>14}")


@click.command("chart")
@click.option("--template", "template_name", help="Start from a chart template (see 'templates')")
@click.option("--title", help="Chart title")
@click.option("--source", type=_choices(DataSource), help="Data source")
@click.option("--chart-type", type=_choices(ChartType), help="Chart type (default: bar)")
@click.option("--x", "x_field", help="X-axis field id")
@click.option("--y", "y_field", help="Y-axis field id")
@click.option("--aggregation", type=_choices(AggregationFunction), help="Aggregation (default: count)")
@click.option("--group-by", type=_choices(GroupingType), help="Grouping (none, category, date)")
@click.option("--interval", type=_choices(DateInterval), help="Date bucket width for --group-by date")
@click.option("--range", "range_name", type=_choices(TimeRangeType), help="Time range")
@click.option("--start-date", help="Custom range start (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="Custom range end, inclusive (YYYY-MM-DD or relative like 'today')")
@click.option("--sort", "sort_key", type=_choices(SortKey), help="Sort buckets by natural order, label or value")
@click.option("--desc", is_flag=True, help="Sort descending")
@click.option("--category-id", type=int, help="Only include records of this category")
@click.option("--where", "where", multiple=True, help="Record filter FIELD:OPERATOR:VALUE (repeatable)")
@click.option("--as-of", help="Reference time for relative ranges and overdue flags (default: now)")
@click.pass_context
def chart(
    ctx,
    template_name: str | None,
    title: str | None,
    source: str | None,
    chart_type: str | None,
    x_field: str | None,
    y_field: str | None,
    aggregation: str | None,
    group_by: str | None,
    interval: str | None,
    range_name: str | None,
    start_date: str | None,
    end_date: str | None,
    sort_key: str | None,
    desc: bool,
    category_id: int | None,
    where: tuple[str, ...],
    as_of: str | None,
):
    """Compute a chart and print its labels and values."""
    db = ctx.obj["db"]

    try:
        filters = tuple(parse_where(expression) for expression in where)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    now = None
    if as_of:
        try:
            now = parse_datetime(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid --as-of: {e}", err=True)
            ctx.exit(1)

    time_range = resolve_cli_time_range(
        ctx, range_name=range_name, start_date=start_date, end_date=end_date
    )

    if template_name:
        try:
            config = get_template(template_name).config
        except DomainError as e:
            handle_domain_error(ctx, e)
    else:
        if not source or not x_field:
            click.echo("Error: --source and --x are required unless --template is given.", err=True)
            ctx.exit(1)
        config = DynamicChartConfig(
            title=title or f"{source} by {x_field}",
            chart_type=ChartType.BAR_CHART,
            data_source=DataSource(source.lower()),
            x_axis_field=x_field,
        )

    overrides = {"filters": config.filters + filters}
    if title:
        overrides["title"] = title
    if source:
        overrides["data_source"] = DataSource(source.lower())
    if x_field:
        overrides["x_axis_field"] = x_field
    if chart_type:
        overrides["chart_type"] = ChartType(chart_type.lower())
    if y_field:
        overrides["y_axis_field"] = y_field
    if aggregation:
        overrides["y_axis_aggregation"] = AggregationFunction(aggregation.lower())
    if group_by or interval:
        grouping_type = GroupingType(group_by.lower()) if group_by else config.grouping.type
        date_interval = DateInterval(interval.lower()) if interval else config.grouping.date_interval
        overrides["grouping"] = GroupingConfig(grouping_type, date_interval)
    if time_range is not None:
        overrides["time_range"] = time_range
    if sort_key or desc:
        key = SortKey(sort_key.lower()) if sort_key else config.sort.key
        overrides["sort"] = SortConfig(key, SortDirection.DESC if desc else SortDirection.ASC)
    config = replace(config, **overrides)

    service = ChartDataService(db.repositories())
    try:
        result = service.compute(config, category_id=category_id, now=now)
    except DomainError as e:
        handle_domain_error(ctx, e)
    finally:
        service.close()

    print_chart(config.title, result)


def register_commands(cli):
    """Register chart commands with main CLI."""
    cli.add_command(chart)
