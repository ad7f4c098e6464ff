"""Main CLI entry point."""

import logging

import click
from emitrack.database.factories import create_database

# Import and register all commands at module level
from emitrack.cli.commands import (
    add,
    emi,
    serve,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides EMITRACK_DB_PATH environment variable)",
    envvar="EMITRACK_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="local",
    show_default=True,
    envvar="EMITRACK_USER",
    help="User the commands act as",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="EMITRACK_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, log_level: str):
    """emitrack - EMI and expense tracking.

    Track installment loans, subscriptions and one-off purchases, record
    their payments and keep a ledger of income and expenses.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id


# Register all commands
emi.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
