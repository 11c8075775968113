"""Chart template commands."""

import click

from queststats.domain.templates import CHART_TEMPLATES


@click.command("templates")
def list_templates():
    """List quick-start chart templates."""
    click.echo("\nChart templates:")
    for template in CHART_TEMPLATES:
        config = template.config
        click.echo(f"  {template.name:<24} {template.description}")
        click.echo(
            f"  {'':<24} ({config.chart_type.value}, {config.data_source.value}, x={config.x_axis_field})"
        )


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(list_templates)
