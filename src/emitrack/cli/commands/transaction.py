"""Transaction management commands."""

import click
from emitrack.cli.error_handling import handle_domain_error
from emitrack.cli.input_parsing import parse_amount_or_exit, parse_date_or_exit
from emitrack.domain.entities import PaymentMethod, Transaction, TransactionType
from emitrack.domain.transaction import SORT_FIELDS, TransactionService

TRANSACTION_TYPES = [t.value for t in TransactionType]
PAYMENT_METHODS = [m.value for m in PaymentMethod]


def echo_transaction(txn: Transaction) -> None:
    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Payment method: {txn.payment_method.value}")
    if txn.tags:
        click.echo(f"  Tags: {', '.join(txn.tags)}")
    if txn.recurring.is_recurring:
        click.echo(f"  Recurring: {txn.recurring.frequency.value}")
    if txn.emi_id is not None:
        click.echo(f"  EMI: {txn.emi_id}")
    if txn.notes:
        click.echo(f"  Notes: {txn.notes}")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES))
@click.option("--start-date", help="Inclusive start date")
@click.option("--end-date", help="Inclusive end date")
@click.option("--sort-by", type=click.Choice(SORT_FIELDS), default="date", show_default=True)
@click.option("--asc", "ascending", is_flag=True, help="Oldest or smallest first")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True, help="Page size (1-100)")
@click.pass_context
def list_transactions(
    ctx,
    transaction_type: str | None,
    start_date: str | None,
    end_date: str | None,
    sort_by: str,
    ascending: bool,
    page: int,
    limit: int,
):
    """List transactions one page at a time.

    Examples:
        emitrack transaction list --type expense --start-date "this month"
        emitrack transaction list --sort-by amount --page 2
    """
    service = TransactionService(ctx.obj["db"])
    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None

    try:
        result = service.list_transactions(
            ctx.obj["user_id"],
            transaction_type=transaction_type,
            start_date=start,
            end_date=end,
            sort_by=sort_by,
            sort_order="asc" if ascending else "desc",
            page=page,
            limit=limit,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not result.items:
        click.echo("No transactions found.")
        return

    click.echo(
        f"\nPage {result.current_page} of {result.total_pages} "
        f"({result.total_items} transaction(s)):"
    )
    click.echo("-" * 90)
    for txn in result.items:
        marker = f" [EMI {txn.emi_id}]" if txn.emi_id is not None else ""
        click.echo(
            f"ID: {txn.id:4d} | {txn.date} | {txn.type.value:7s} | "
            f"{txn.amount:>12,.2f} | {txn.description[:40]}{marker}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show one transaction."""
    service = TransactionService(ctx.obj["db"])
    try:
        txn = service.get_transaction(ctx.obj["user_id"], transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    echo_transaction(txn)


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES))
@click.option("--amount", help="Transaction amount")
@click.option("--description", help="Transaction description")
@click.option("--date", "txn_date", help="Transaction date")
@click.option("--payment-method", type=click.Choice(PAYMENT_METHODS))
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    transaction_type: str | None,
    amount: str | None,
    description: str | None,
    txn_date: str | None,
    payment_method: str | None,
    tags: tuple[str, ...],
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        emitrack transaction update 1 --amount 75
        emitrack transaction update 1 --description "EMI Payment: Phone Loan"
    """
    service = TransactionService(ctx.obj["db"])
    parsed_amount = parse_amount_or_exit(ctx, amount) if amount is not None else None
    parsed_date = parse_date_or_exit(ctx, txn_date) if txn_date is not None else None

    try:
        txn = service.update_transaction(
            ctx.obj["user_id"],
            transaction_id,
            transaction_type=transaction_type,
            amount=parsed_amount,
            description=description,
            date=parsed_date,
            tags=list(tags) if tags else None,
            payment_method=payment_method,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated transaction {transaction_id}")
    echo_transaction(txn)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])
    if not yes:
        click.confirm(f"Delete transaction {transaction_id}?", abort=True)
    try:
        service.delete_transaction(ctx.obj["user_id"], transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
