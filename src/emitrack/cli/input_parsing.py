"""CLI helpers for parsing dates and amounts or exiting with an error.

This keeps error messaging and exit behavior consistent across commands.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click
from emitrack.utils.amount_parser import parse_amount
from emitrack.utils.date_parser import parse_date


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    try:
        return parse_date(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)
