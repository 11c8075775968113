"""CLI error handling helpers."""

import click

from queststats.domain.errors import ConfigValidationError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, ConfigValidationError):
        click.echo("Error: Invalid chart configuration:", err=True)
        for problem in error.problems:
            click.echo(f"  - {problem}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
