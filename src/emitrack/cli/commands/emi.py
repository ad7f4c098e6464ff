"""EMI management commands."""

import click
from emitrack.cli.error_handling import handle_domain_error
from emitrack.cli.input_parsing import parse_amount_or_exit, parse_date_or_exit
from emitrack.domain.emi import EmiService
from emitrack.domain.entities import Emi, EmiStatus, EmiType, PaymentType

EMI_TYPES = [t.value for t in EmiType]
PAYMENT_TYPES = [t.value for t in PaymentType]
STATUSES = [s.value for s in EmiStatus]


def _format_amount(amount) -> str:
    return f"{amount:,.2f}"


def echo_emi(emi: Emi) -> None:
    """Print the full details of an EMI."""
    click.echo(f"EMI {emi.id}: {emi.name}")
    click.echo(f"  Type: {emi.type.value} ({emi.payment_type.value})")
    click.echo(f"  Status: {emi.status.value}")
    click.echo(f"  Amount: {_format_amount(emi.emi_amount)}")
    if emi.payment_type == PaymentType.SUBSCRIPTION:
        click.echo(f"  Payments made: {emi.paid_installments}")
    else:
        click.echo(f"  Installments: {emi.paid_installments}/{emi.total_installments}")
        click.echo(f"  Total: {_format_amount(emi.total_amount)}")
        click.echo(f"  Remaining: {_format_amount(emi.remaining_amount)}")
    click.echo(f"  Start date: {emi.start_date}")
    if emi.next_due_date is not None:
        click.echo(f"  Next due: {emi.next_due_date}")
    if emi.end_date is not None:
        click.echo(f"  End date: {emi.end_date}")
    if emi.notes:
        click.echo(f"  Notes: {emi.notes}")


@click.group()
def emi_group():
    """Manage EMIs, subscriptions and full payments."""
    pass


@emi_group.command("create")
@click.argument("name")
@click.option("--type", "emi_type", type=click.Choice(EMI_TYPES), default="other", show_default=True)
@click.option(
    "--payment-type", type=click.Choice(PAYMENT_TYPES), default="emi", show_default=True
)
@click.option("--amount", required=True, help="Installment amount (or full amount)")
@click.option("--installments", type=int, help="Total installments (required for emi)")
@click.option("--start-date", required=True, help="Start date (YYYY-MM-DD or 'today')")
@click.option("--notes", help="Notes")
@click.pass_context
def create_emi(
    ctx,
    name: str,
    emi_type: str,
    payment_type: str,
    amount: str,
    installments: int | None,
    start_date: str,
    notes: str | None,
):
    """Create an EMI.

    Examples:
        emitrack emi create "Phone Loan" --type mobile_emi --amount 1000 --installments 12 --start-date 2024-01-15
        emitrack emi create "Netflix" --payment-type subscription --amount 649 --start-date 2024-01-01
    """
    service = EmiService(ctx.obj["db"])
    emi_amount = parse_amount_or_exit(ctx, amount)
    start = parse_date_or_exit(ctx, start_date, "start date")

    try:
        emi = service.create_emi(
            user_id=ctx.obj["user_id"],
            name=name,
            emi_type=emi_type,
            payment_type=payment_type,
            emi_amount=emi_amount,
            start_date=start,
            total_installments=installments,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created EMI '{emi.name}' (ID: {emi.id})")
    echo_emi(emi)


@emi_group.command("list")
@click.option("--status", type=click.Choice(STATUSES), help="Only show EMIs with this status")
@click.option("--due-before", help="Only show EMIs due on or before this date")
@click.pass_context
def list_emis(ctx, status: str | None, due_before: str | None):
    """List EMIs ordered by next due date."""
    service = EmiService(ctx.obj["db"])
    due_to = parse_date_or_exit(ctx, due_before, "due date") if due_before else None

    emis = service.list_emis(ctx.obj["user_id"], status=status, due_to=due_to)
    if not emis:
        click.echo("No EMIs found.")
        return

    click.echo(f"\nFound {len(emis)} EMI(s):")
    click.echo("-" * 100)
    for emi in emis:
        progress = (
            f"{emi.paid_installments} paid"
            if emi.total_installments is None
            else f"{emi.paid_installments}/{emi.total_installments}"
        )
        click.echo(
            f"ID: {emi.id:3d} | {emi.name[:24]:24s} | {emi.payment_type.value:12s} | "
            f"{emi.status.value:9s} | {progress:>8s} | "
            f"Remaining: {_format_amount(emi.remaining_amount):>12s} | Next: {emi.next_due_date or '-'}"
        )


@emi_group.command("show")
@click.argument("emi_id", type=int)
@click.pass_context
def show_emi(ctx, emi_id: int):
    """Show one EMI."""
    service = EmiService(ctx.obj["db"])
    try:
        emi = service.get_emi(ctx.obj["user_id"], emi_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    echo_emi(emi)


@emi_group.command("update")
@click.argument("emi_id", type=int)
@click.option("--name", help="New name")
@click.option("--type", "emi_type", type=click.Choice(EMI_TYPES))
@click.option("--payment-type", type=click.Choice(PAYMENT_TYPES))
@click.option("--amount", help="Installment amount")
@click.option("--installments", type=int, help="Total installments")
@click.option("--paid", type=int, help="Paid installments")
@click.option("--start-date", help="Start date")
@click.option("--status", type=click.Choice(STATUSES))
@click.option("--notes", help="Notes")
@click.pass_context
def update_emi(
    ctx,
    emi_id: int,
    name: str | None,
    emi_type: str | None,
    payment_type: str | None,
    amount: str | None,
    installments: int | None,
    paid: int | None,
    start_date: str | None,
    status: str | None,
    notes: str | None,
):
    """Update an EMI.

    Updates only the fields that are provided; due dates and the remaining
    balance are recomputed when the schedule changes.

    Examples:
        emitrack emi update 1 --installments 18
        emitrack emi update 1 --payment-type full_payment
    """
    service = EmiService(ctx.obj["db"])
    emi_amount = parse_amount_or_exit(ctx, amount) if amount is not None else None
    start = parse_date_or_exit(ctx, start_date, "start date") if start_date is not None else None

    try:
        emi = service.update_emi(
            ctx.obj["user_id"],
            emi_id,
            name=name,
            emi_type=emi_type,
            payment_type=payment_type,
            emi_amount=emi_amount,
            total_installments=installments,
            paid_installments=paid,
            start_date=start,
            status=status,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated EMI {emi_id}")
    echo_emi(emi)


@emi_group.command("pay")
@click.argument("emi_id", type=int)
@click.option("--amount", required=True, help="Amount paid")
@click.option("--date", "payment_date", default="today", show_default=True, help="Payment date")
@click.option("--notes", help="Notes for the ledger entry")
@click.pass_context
def pay_emi(ctx, emi_id: int, amount: str, payment_date: str, notes: str | None):
    """Record one payment and add it to the ledger."""
    service = EmiService(ctx.obj["db"])
    paid_amount = parse_amount_or_exit(ctx, amount)
    paid_on = parse_date_or_exit(ctx, payment_date, "payment date")

    try:
        result = service.record_payment(
            ctx.obj["user_id"], emi_id, amount=paid_amount, payment_date=paid_on, notes=notes
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    emi = result.emi
    click.echo(f"Recorded payment of {_format_amount(paid_amount)} for '{emi.name}'")
    click.echo(f"  Transaction: {result.transaction.id}")
    if emi.total_installments is not None:
        click.echo(f"  Installments: {emi.paid_installments}/{emi.total_installments}")
    click.echo(f"  Remaining: {_format_amount(emi.remaining_amount)}")
    if emi.status == EmiStatus.COMPLETED:
        click.echo("  Status: completed")
    else:
        click.echo(f"  Next due: {emi.next_due_date}")


@emi_group.command("backfill")
@click.argument("emi_id", type=int)
@click.option("--start-date", required=True, help="Date of the first historical payment")
@click.option("--count", type=click.IntRange(1, 60), required=True, help="Number of monthly payments")
@click.option("--amount", required=True, help="Amount of each payment")
@click.pass_context
def backfill_emi(ctx, emi_id: int, start_date: str, count: int, amount: str):
    """Add ledger entries for past monthly payments.

    The EMI's paid count is not changed; follow up with bulk-update.
    """
    service = EmiService(ctx.obj["db"])
    start = parse_date_or_exit(ctx, start_date, "start date")
    payment_amount = parse_amount_or_exit(ctx, amount)

    try:
        result = service.create_bulk_transactions(
            ctx.obj["user_id"],
            emi_id,
            start_date=start,
            number_of_payments=count,
            payment_amount=payment_amount,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Created {len(result.transactions)} transaction records for {result.emi.name} "
        f"(total {_format_amount(result.total_amount)})"
    )
    for txn in result.transactions:
        click.echo(f"  {txn.date}  {_format_amount(txn.amount):>12s}  {txn.description}")


@emi_group.command("bulk-update")
@click.argument("emi_id", type=int)
@click.option("--paid", type=int, required=True, help="Total installments paid so far")
@click.option("--last-payment-date", required=True, help="Date of the latest payment")
@click.pass_context
def bulk_update_emi(ctx, emi_id: int, paid: int, last_payment_date: str):
    """Set the number of paid installments directly."""
    service = EmiService(ctx.obj["db"])
    last_payment = parse_date_or_exit(ctx, last_payment_date, "last payment date")

    try:
        emi = service.bulk_update(
            ctx.obj["user_id"], emi_id, paid_installments=paid, last_payment_date=last_payment
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated EMI {emi_id} with bulk payment information")
    echo_emi(emi)


@emi_group.command("delete")
@click.argument("emi_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_emi(ctx, emi_id: int, yes: bool):
    """Delete an EMI. Its ledger transactions are kept."""
    service = EmiService(ctx.obj["db"])
    if not yes:
        click.confirm(f"Delete EMI {emi_id}?", abort=True)
    try:
        service.delete_emi(ctx.obj["user_id"], emi_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted EMI {emi_id}")


@emi_group.command("summary")
@click.pass_context
def emi_summary(ctx):
    """Show totals across all EMIs."""
    service = EmiService(ctx.obj["db"])
    summary = service.get_summary(ctx.obj["user_id"])

    click.echo("\nEMI Summary")
    click.echo("=" * 40)
    click.echo(f"Total EMIs:      {summary.total}")
    click.echo(f"  Active:        {summary.active}")
    click.echo(f"  Completed:     {summary.completed}")
    click.echo(f"  Defaulted:     {summary.defaulted}")
    click.echo("-" * 40)
    click.echo(f"Total amount:    {_format_amount(summary.total_amount):>15s}")
    click.echo(f"Total paid:      {_format_amount(summary.total_paid):>15s}")
    click.echo(f"Total remaining: {_format_amount(summary.total_remaining):>15s}")
    click.echo(f"Monthly EMI:     {_format_amount(summary.monthly_emi):>15s}")


def register_commands(cli):
    """Register EMI commands with main CLI."""
    cli.add_command(emi_group, name="emi")
