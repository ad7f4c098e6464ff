"""Add transaction command."""

import click
from emitrack.cli.error_handling import handle_domain_error
from emitrack.cli.input_parsing import parse_amount_or_exit, parse_date_or_exit
from emitrack.domain.entities import PaymentMethod, Recurring, RecurringFrequency, TransactionType
from emitrack.domain.transaction import TransactionService

TRANSACTION_TYPES = [t.value for t in TransactionType]
PAYMENT_METHODS = [m.value for m in PaymentMethod]
FREQUENCIES = [f.value for f in RecurringFrequency]


@click.command("add")
@click.option(
    "--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES), default="expense", show_default=True
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 1000 or 1,250.50)")
@click.option("--description", required=True, help="Transaction description")
@click.option(
    "--date",
    "txn_date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--payment-method", type=click.Choice(PAYMENT_METHODS))
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--notes", help="Notes")
@click.option("--recurring", type=click.Choice(FREQUENCIES), help="Mark as recurring with this frequency")
@click.pass_context
def add_transaction(
    ctx,
    transaction_type: str,
    amount: str,
    description: str,
    txn_date: str,
    payment_method: str | None,
    tags: tuple[str, ...],
    notes: str | None,
    recurring: str | None,
):
    """Add a transaction manually.

    Expenses whose description names an EMI (for example
    "EMI Payment: Phone Loan") also record an installment on that EMI.

    Examples:
        emitrack add --amount 450 --description "Groceries" --tag food
        emitrack add --amount 1000 --description "EMI Payment: Phone Loan"
        emitrack add --type income --amount 50000 --description "Salary" --recurring monthly
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    parsed_date = parse_date_or_exit(ctx, txn_date)
    parsed_amount = parse_amount_or_exit(ctx, amount)

    try:
        txn = transaction_service.create_transaction(
            user_id=ctx.obj["user_id"],
            transaction_type=transaction_type,
            amount=parsed_amount,
            description=description,
            date=parsed_date,
            tags=list(tags) or None,
            payment_method=payment_method,
            notes=notes,
            recurring=Recurring(is_recurring=True, frequency=RecurringFrequency(recurring))
            if recurring
            else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Description: {txn.description}")
    if txn.tags:
        click.echo(f"  Tags: {', '.join(txn.tags)}")
    if txn.emi_id is not None:
        emi = db.get_emi(txn.emi_id)
        click.echo(
            f"  Applied to EMI '{emi.name}' ({emi.paid_installments} paid, status {emi.status.value})"
        )


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
