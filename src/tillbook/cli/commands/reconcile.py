"""Reconciliation commands."""

import click
from tillbook.cli.commands.ledger import format_transaction
from tillbook.cli.error_handling import handle_domain_error, parse_amount_or_exit, resolve_account_or_exit
from tillbook.domain import chart
from tillbook.domain.errors import DomainError
from tillbook.domain.ledger import LedgerService
from tillbook.domain.reconciliation import ReconciliationService, SettlementSplit


@click.group()
def reconcile_group():
    """Settle pending receivable transactions."""
    pass


@reconcile_group.command("pending")
@click.option("--account", help="Receivable account (ID or name); omit for a summary")
@click.option("--partner", help="Only credit bills run by this partner")
@click.pass_context
def list_pending(ctx, account: str | None, partner: str | None):
    """Show unreconciled inflows.

    Examples:
        tillbook reconcile pending
        tillbook reconcile pending --account hiking_bar_rec
        tillbook reconcile pending --account pending_bills --partner "Hotel Sunrise"
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    service = ReconciliationService(db, ledger)

    if account is None and partner is None:
        click.echo("\nPending transactions:")
        click.echo("-" * 40)
        for account_id, count in service.pending_counts().items():
            click.echo(f"{account_id:<28} {count:>5}")
        return

    account_id = resolve_account_or_exit(ctx, ledger, account or chart.PENDING_BILLS)
    try:
        pending = service.pending_transactions(account_id, partner=partner)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not pending:
        click.echo("No pending transactions.")
        return

    names = {acc.id: acc.name for acc in ledger.list_accounts()}
    total = sum(txn.amount for txn in pending)
    click.echo(f"\n{len(pending)} pending on {account_id} (total ${total:,.2f}):")
    click.echo("-" * 120)
    for txn in pending:
        click.echo(format_transaction(txn, names))


@reconcile_group.command("split")
@click.argument("transaction_id")
@click.option("--cash", default="0", help="Part paid in cash")
@click.option("--card", default="0", help="Part paid by card")
@click.option("--service-charge", default="0", help="Service charge kept by the hiking bar")
@click.option("--contra", default="0", help="Contra amount offset against the order")
@click.pass_context
def reconcile_split(ctx, transaction_id: str, cash: str, card: str, service_charge: str, contra: str):
    """Settle a hiking bar order into cash, card and deductions.

    The parts must add up to the order amount.

    Examples:
        tillbook reconcile split txn_1700000000000_a1b2c3 --cash 60 --card 30 --service-charge 10
    """
    service = ReconciliationService(ctx.obj["db"])
    split = SettlementSplit(
        cash=parse_amount_or_exit(ctx, cash, "cash"),
        card=parse_amount_or_exit(ctx, card, "card"),
        service_charge=parse_amount_or_exit(ctx, service_charge, "service charge"),
        contra=parse_amount_or_exit(ctx, contra, "contra"),
    )

    try:
        posted = service.reconcile_split(transaction_id, split)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Settled {transaction_id} (${split.total:,.2f}) with {len(posted)} transfer(s)")


@reconcile_group.command("card")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.option("--account", default=chart.CARD_PAYMENTS, show_default=True, help="Card receivable (ID or name)")
@click.option("--net", "net_amount", required=True, help="Amount the bank actually paid out")
@click.option("--note", default="", help="Settlement note")
@click.pass_context
def reconcile_card(ctx, transaction_ids: tuple[str, ...], account: str, net_amount: str, note: str):
    """Settle a batch of card payments against the bank payout.

    The difference between the selected total and the payout is booked as a
    bank fee.

    Examples:
        tillbook reconcile card txn_a txn_b --net 97.50
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    service = ReconciliationService(db, ledger)
    account_id = resolve_account_or_exit(ctx, ledger, account)
    net = parse_amount_or_exit(ctx, net_amount, "net amount")

    try:
        result = service.reconcile_card_settlement(transaction_ids, account_id, net, note)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Settled {len(transaction_ids)} card payment(s) on {account_id}")
    click.echo(f"  Selected total: ${result.selected_total:,.2f}")
    click.echo(f"  Bank payout:    ${result.net_amount:,.2f}")
    click.echo(f"  Bank fee:       ${result.fee_amount:,.2f} ({result.fee_percentage}%)")


@reconcile_group.command("bills")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.option("--to", "destination", default=chart.BUSINESS_BANK, show_default=True, help="Account the payment landed in")
@click.option("--note", default="", help="Settlement note")
@click.pass_context
def reconcile_bills(ctx, transaction_ids: tuple[str, ...], destination: str, note: str):
    """Settle pending credit bills in one payment.

    Examples:
        tillbook reconcile bills txn_a txn_b txn_c --to business_bank --note "Hotel Sunrise March"
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    service = ReconciliationService(db, ledger)
    destination_id = resolve_account_or_exit(ctx, ledger, destination)

    try:
        txn = service.reconcile_credit_bills(transaction_ids, destination_id, note)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo(f"Marked {len(transaction_ids)} bill(s) reconciled; nothing to transfer.")
        return
    click.echo(f"Settled {len(transaction_ids)} bill(s): ${txn.amount:,.2f} into {destination_id}")


@reconcile_group.command("record-bill")
@click.argument("partner")
@click.argument("amount")
@click.option("--source", required=True, help="Account the bill's value comes from (ID or name)")
@click.pass_context
def record_bill(ctx, partner: str, amount: str, source: str):
    """Record a bill a partner ran on credit.

    Examples:
        tillbook reconcile record-bill "Hotel Sunrise" 45 --source owner_equity
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    service = ReconciliationService(db, ledger)
    source_id = resolve_account_or_exit(ctx, ledger, source)
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = service.record_credit_bill(partner, value, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to record.")
        return
    click.echo(f"Recorded credit bill {txn.id} for {partner}: ${txn.amount:,.2f}")


def register_commands(cli):
    """Register reconcile commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
