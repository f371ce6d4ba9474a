"""Ledger commands: balances, transfers, expenses and history."""

import click
from tillbook.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_staff_or_exit,
)
from tillbook.domain import chart
from tillbook.domain.errors import DomainError
from tillbook.domain.ledger import LedgerService
from tillbook.domain.staff import StaffService


def format_transaction(txn, accounts: dict[str, str]) -> str:
    """One table row for a transaction."""
    status = "done" if txn.is_reconciled else "pending"
    source = accounts.get(txn.from_account_id, txn.from_account_id)
    target = accounts.get(txn.to_account_id, txn.to_account_id)
    return (
        f"{txn.id:<28} {txn.timestamp:%Y-%m-%d %H:%M}  {source[:20]:<20} -> {target[:20]:<20} "
        f"{f'${txn.amount:,.2f}':>12}  {status:<8} {txn.note}"
    )


@click.command("accounts")
@click.pass_context
def list_accounts(ctx):
    """Show the chart of accounts with balances and totals."""
    ledger = LedgerService(ctx.obj["db"])

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in ledger.list_accounts():
        click.echo(f"{acc.id:<26} {acc.name:<28} {acc.type.value:<11} ${acc.balance:>12,.2f}")
    click.echo("-" * 78)
    click.echo(f"Total assets:      ${ledger.total_assets():,.2f}")
    click.echo(f"Total receivables: ${ledger.total_receivables():,.2f}")
    click.echo(f"Total liabilities: ${ledger.total_liabilities():,.2f}")


@click.command("transfer")
@click.argument("from_account", metavar="FROM")
@click.argument("to_account", metavar="TO")
@click.argument("amount")
@click.option("--note", default="", help="Note stored with the transaction")
@click.option("--reconciled", is_flag=True, help="Record the transaction as already settled")
@click.pass_context
def transfer(ctx, from_account: str, to_account: str, amount: str, note: str, reconciled: bool):
    """Move money from one account to another.

    FROM and TO can be an account ID or name.

    Examples:
        tillbook transfer business_bank till_float 200 --note "Float top-up"
        tillbook transfer "Till Float" "Business Bank" 1,500.00
    """
    ledger = LedgerService(ctx.obj["db"])
    from_id = resolve_account_or_exit(ctx, ledger, from_account)
    to_id = resolve_account_or_exit(ctx, ledger, to_account)
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = ledger.transfer(from_id, to_id, value, note, is_reconciled=reconciled)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to transfer.")
        return
    click.echo(f"Transferred ${txn.amount:,.2f} from {from_id} to {to_id} ({txn.id})")


@click.command("expense")
@click.argument("amount")
@click.option("--category", required=True, help="Expense category (e.g. Food, Utilities)")
@click.option("--note", default="", help="What the money was spent on")
@click.option("--source", default=chart.TILL_FLOAT, show_default=True, help="Account ID or name paying")
@click.option("--sub-category", help="Sub-category")
@click.option("--payee", help="Vendor or person paid")
@click.option("--staff", help="Staff member paid (ID or name)")
@click.option("--stock", is_flag=True, help="Purchase is stock for the kitchen or bar")
@click.pass_context
def add_expense(
    ctx,
    amount: str,
    category: str,
    note: str,
    source: str,
    sub_category: str | None,
    payee: str | None,
    staff: str | None,
    stock: bool,
):
    """Record an operating expense.

    Examples:
        tillbook expense 40 --category Food --note "Vegetables"
        tillbook expense 120 --category Utilities --source business_bank
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    source_id = resolve_account_or_exit(ctx, ledger, source)
    staff_id = resolve_staff_or_exit(ctx, StaffService(db), staff) if staff else None
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = ledger.add_expense(
            value,
            category,
            note,
            source_id=source_id,
            sub_category=sub_category,
            payee_name=payee,
            staff_id=staff_id,
            is_stock=stock,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to record.")
        return
    click.echo(f"Recorded expense {txn.id}")
    click.echo(f"  Amount: ${txn.amount:,.2f}")
    click.echo(f"  Paid from: {source_id}")
    click.echo(f"  Note: {txn.note}")


@click.command("transactions")
@click.option("--account", help="Only transactions touching this account (ID or name)")
@click.option(
    "--direction",
    type=click.Choice(["in", "out"]),
    help="Only money entering or leaving --account",
)
@click.option(
    "--status",
    type=click.Choice(["pending", "reconciled"]),
    help="Only unreconciled or only reconciled transactions",
)
@click.option("--since", help="Only transactions on or after this date (e.g. 'yesterday')")
@click.option("--limit", type=int, default=50, show_default=True, help="Maximum rows to show")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    direction: str | None,
    status: str | None,
    since: str | None,
    limit: int,
):
    """List transactions, newest first."""
    ledger = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, ledger, account) if account else None
    since_date = parse_date_or_exit(ctx, since) if since else None
    reconciled = None if status is None else status == "reconciled"

    try:
        transactions = ledger.list_transactions(
            account_id=account_id,
            direction=direction,
            reconciled=reconciled,
            since=since_date,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    names = {acc.id: acc.name for acc in ledger.list_accounts()}
    shown = transactions[:limit]
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 120)
    for txn in shown:
        click.echo(format_transaction(txn, names))
    if len(shown) < len(transactions):
        click.echo(f"... {len(transactions) - len(shown)} more (use --limit)")


@click.command("check")
@click.pass_context
def check_balances(ctx):
    """Verify every balance against its transaction history."""
    ledger = LedgerService(ctx.obj["db"])
    mismatches = ledger.verify_balances()
    if not mismatches:
        click.echo("All balances match the transaction log.")
        return

    click.echo(f"{len(mismatches)} account(s) out of balance:", err=True)
    for item in mismatches:
        click.echo(
            f"  {item.account_id}: stored ${item.stored_balance:,.2f}, "
            f"expected ${item.expected_balance:,.2f} (off by ${item.difference:,.2f})",
            err=True,
        )
    ctx.exit(1)


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(list_accounts)
    cli.add_command(transfer)
    cli.add_command(add_expense)
    cli.add_command(list_transactions)
    cli.add_command(check_balances)
