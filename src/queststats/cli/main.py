"""Main CLI entry point."""

import logging

import click
from queststats.database.factories import create_sqlite_database

# Import and register all commands at module level
from queststats.cli.commands import chart, fields, templates


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides QUESTSTATS_DB_PATH environment variable)",
    envvar="QUESTSTATS_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Queststats - statistics and charts for your quests.

    Compute chart data from tasks, XP transactions, categories and calendar
    events with user-defined grouping, aggregation and time ranges.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Open the database only when actually running a command (not for --help)
    if ctx.invoked_subcommand is not None:
        ctx.obj["db"] = create_sqlite_database(database_path=db_path)


# Register all commands
chart.register_commands(cli)
fields.register_commands(cli)
templates.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
