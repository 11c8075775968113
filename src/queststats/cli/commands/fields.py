"""Field catalog commands."""

import click

from queststats.domain.compatibility import available_aggregations, is_valid_axis_field
from queststats.domain.entities import AggregationFunction, AxisRole, ChartType, DataSource
from queststats.domain.field_catalog import fields_for


@click.command("fields")
@click.argument("source", type=click.Choice([s.value for s in DataSource], case_sensitive=False))
@click.option(
    "--chart-type",
    type=click.Choice([t.value for t in ChartType], case_sensitive=False),
    help="Show which axes each field may be used on for this chart type",
)
def list_fields(source: str, chart_type: str | None):
    """List the chartable fields of a data source."""
    data_source = DataSource(source.lower())
    fields = fields_for(data_source)
    if not fields:
        click.echo(f"No fields available for '{data_source.value}'.")
        return

    chart = ChartType(chart_type.lower()) if chart_type else None
    click.echo(f"\nFields for {data_source.value}:")
    for field in fields:
        aggregations = ", ".join(
            agg.value for agg in AggregationFunction if agg in available_aggregations(field)
        )
        line = f"  {field.id:<20} {field.data_type.name:<8} {field.label:<22} [{aggregations}]"
        if chart is not None:
            axes = [
                role.value.upper() for role in AxisRole if is_valid_axis_field(chart, role, field)
            ]
            line += f"  axes: {'/'.join(axes) if axes else '-'}"
        click.echo(line)


def register_commands(cli):
    """Register field commands with main CLI."""
    cli.add_command(list_fields)
