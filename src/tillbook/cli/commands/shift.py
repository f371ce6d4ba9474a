"""Shift lifecycle commands."""

import click
from tillbook.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
)
from tillbook.domain import chart
from tillbook.domain.entities import CreditBillLine, ShiftState
from tillbook.domain.errors import DomainError
from tillbook.domain.ledger import LedgerService
from tillbook.domain.shift import ShiftCloseInput, ShiftService


def parse_credit_bill(ctx: click.Context, value: str) -> CreditBillLine:
    """Parse a PARTNER=AMOUNT credit bill option."""
    partner, sep, amount = value.rpartition("=")
    if not sep or not partner.strip():
        click.echo(f"Error: Credit bill must look like PARTNER=AMOUNT, got '{value}'", err=True)
        ctx.exit(1)
    return CreditBillLine(partner=partner.strip(), amount=parse_amount_or_exit(ctx, amount, "credit bill amount"))


def echo_calculation(calculation) -> None:
    click.echo(f"  Opening float:   ${calculation.opening_float:,.2f}")
    click.echo(f"  Total sales:     ${calculation.total_sales:,.2f}")
    click.echo(f"  Non-cash sales:  ${calculation.non_cash_total:,.2f}")
    click.echo(f"  Cash sales:      ${calculation.cash_sales:,.2f}")
    click.echo(f"  Cash expenses:   ${calculation.shift_cash_expenses:,.2f}")
    click.echo(f"  Expected cash:   ${calculation.expected_cash:,.2f}")
    if calculation.actual_cash is not None:
        click.echo(f"  Counted cash:    ${calculation.actual_cash:,.2f}")
        click.echo(f"  Variance:        ${calculation.variance:,.2f}")


@click.group()
def shift_group():
    """Open and close till shifts."""
    pass


@shift_group.command("open")
@click.option("--float", "opening_float", help="Opening float (defaults to the till float balance)")
@click.option("--date", "log_date", help="Business date (defaults to today)")
@click.pass_context
def open_shift(ctx, opening_float: str | None, log_date: str | None):
    """Open a shift.

    Examples:
        tillbook shift open
        tillbook shift open --float 500 --date yesterday
    """
    service = ShiftService(ctx.obj["db"])
    amount = parse_amount_or_exit(ctx, opening_float, "opening float") if opening_float else None
    day = parse_date_or_exit(ctx, log_date) if log_date else None

    try:
        log = service.open_day(opening_float=amount, log_date=day)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Opened shift {log.id} for {log.date} with float ${log.opening_float:,.2f}")


@shift_group.command("close")
@click.option("--cash", "actual_cash", required=True, help="Cash counted in the till")
@click.option("--sales", "total_sales", default="0", help="Total sales for the shift")
@click.option("--card", "card_payments", default="0", help="Card payments taken")
@click.option("--hiking-bar", "hiking_bar_sales", default="0", help="Hiking bar orders on account")
@click.option("--foreign", "foreign_currency", default="0", help="Foreign currency taken")
@click.option("--foreign-note", help="Explanation for foreign currency (required with --foreign)")
@click.option(
    "--credit-bill",
    "credit_bills",
    multiple=True,
    help="Bill run on credit as PARTNER=AMOUNT (repeatable)",
)
@click.option("--dry-run", is_flag=True, help="Show the close figures without closing")
@click.pass_context
def close_shift(
    ctx,
    actual_cash: str,
    total_sales: str,
    card_payments: str,
    hiking_bar_sales: str,
    foreign_currency: str,
    foreign_note: str | None,
    credit_bills: tuple[str, ...],
    dry_run: bool,
):
    """Close the open shift and record the cash count.

    Examples:
        tillbook shift close --cash 960 --sales 1000 --card 300 --hiking-bar 50 --credit-bill "Hotel Sunrise=100"
        tillbook shift close --cash 500 --foreign 20 --foreign-note "EUR from tour group"
    """
    service = ShiftService(ctx.obj["db"])
    close_input = ShiftCloseInput(
        actual_cash=parse_amount_or_exit(ctx, actual_cash, "counted cash"),
        total_sales=parse_amount_or_exit(ctx, total_sales, "total sales"),
        card_payments=parse_amount_or_exit(ctx, card_payments, "card payments"),
        hiking_bar_sales=parse_amount_or_exit(ctx, hiking_bar_sales, "hiking bar sales"),
        foreign_currency=parse_amount_or_exit(ctx, foreign_currency, "foreign currency"),
        foreign_currency_note=foreign_note,
        credit_bill_lines=tuple(parse_credit_bill(ctx, value) for value in credit_bills),
    )

    try:
        if dry_run:
            calculation = service.preview_close(close_input)
            click.echo("Shift close preview:")
            echo_calculation(calculation)
            return
        log = service.close_day(close_input)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Closed shift {log.id} for {log.date}")
    click.echo(f"  Expected cash: ${log.expected_cash:,.2f}")
    click.echo(f"  Counted cash:  ${log.actual_cash:,.2f}")
    click.echo(f"  Variance:      ${log.variance:,.2f}")


@shift_group.command("status")
@click.option("--history", is_flag=True, help="List past shifts")
@click.pass_context
def shift_status(ctx, history: bool):
    """Show whether a shift is open and its running figures."""
    service = ShiftService(ctx.obj["db"])

    if history:
        logs = service.list_logs()
        if not logs:
            click.echo("No shifts recorded.")
            return
        click.echo(f"\n{'Date':<12} {'Status':<8} {'Float':>10} {'Expected':>12} {'Counted':>12} {'Variance':>10}")
        click.echo("-" * 70)
        for log in logs:
            counted = f"${log.actual_cash:,.2f}" if log.actual_cash is not None else "-"
            variance = f"${log.variance:,.2f}" if log.variance is not None else "-"
            click.echo(
                f"{str(log.date):<12} {'closed' if log.is_closed else 'open':<8} "
                f"{f'${log.opening_float:,.2f}':>10} {f'${log.expected_cash:,.2f}':>12} "
                f"{counted:>12} {variance:>10}"
            )
        return

    if service.state() is ShiftState.CLOSED:
        click.echo("Shift is closed.")
        return

    log = service.current_log()
    click.echo(f"Shift {log.id} is open for {log.date}")
    click.echo(f"  Opening float:  ${log.opening_float:,.2f}")
    click.echo(f"  Cash expenses:  ${service.shift_cash_expenses(log):,.2f}")


@shift_group.command("top-up")
@click.argument("amount")
@click.option("--source", default=chart.OWNER_EQUITY, show_default=True, help="Account ID or name funding the float")
@click.pass_context
def top_up(ctx, amount: str, source: str):
    """Add cash to the till float."""
    ledger = LedgerService(ctx.obj["db"])
    source_id = resolve_account_or_exit(ctx, ledger, source)
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = ledger.top_up_float(value, source_id=source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to top up.")
        return
    click.echo(f"Topped up till float by ${txn.amount:,.2f} from {source_id}")


@shift_group.command("bank-money")
@click.argument("amount")
@click.pass_context
def bank_money(ctx, amount: str):
    """Move till cash onto the staff bank card."""
    ledger = LedgerService(ctx.obj["db"])
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = ledger.move_to_staff_card(value)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to move.")
        return
    click.echo(f"Moved ${txn.amount:,.2f} from the till to the staff bank card")


def register_commands(cli):
    """Register shift commands with main CLI."""
    cli.add_command(shift_group, name="shift")
