"""CLI error handling helpers."""

import logging

import click

from emitrack.domain.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)


def format_error(error: ValueError) -> str:
    """Message shown for a failed command.

    Validation errors name the offending field; internal errors hide their
    cause, which is logged instead.
    """
    if isinstance(error, InternalError):
        return "Internal error, see the log for details"
    if isinstance(error, ValidationError) and error.field:
        return f"{error} (field: {error.field})"
    return str(error)


def handle_domain_error(ctx: click.Context, error: ValueError) -> None:
    """Render a domain error on stderr and exit with status 1."""
    if isinstance(error, InternalError):
        logger.error("Command %s failed: %s", ctx.command_path, error)
    click.echo(f"Error: {format_error(error)}", err=True)
    ctx.exit(1)
