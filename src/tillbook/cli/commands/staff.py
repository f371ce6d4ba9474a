"""Staff, payroll and holiday commands."""

import click
from tillbook.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_staff_or_exit,
)
from tillbook.domain import chart
from tillbook.domain.entities import HolidayType, PayrollCycle
from tillbook.domain.errors import DomainError
from tillbook.domain.ledger import LedgerService
from tillbook.domain.payroll import OverDeductionPolicy, PayrollService
from tillbook.domain.staff import StaffService


@click.group()
def staff_group():
    """Manage staff, loans, advances and payroll."""
    pass


@staff_group.command("list")
@click.pass_context
def list_staff(ctx):
    """List staff with their outstanding loans and advances."""
    service = StaffService(ctx.obj["db"])

    click.echo(
        f"\n{'ID':<4} {'Name':<10} {'Role':<14} {'Salary':>10} {'Loan':>10} {'Installment':>12} {'Advance':>10}"
    )
    click.echo("-" * 76)
    for member in service.list_staff():
        click.echo(
            f"{member.id:<4} {member.name:<10} {member.role:<14} "
            f"{f'${member.base_salary:,.2f}':>10} {f'${member.loan_balance:,.2f}':>10} "
            f"{f'${member.monthly_loan_installment:,.2f}':>12} {f'${member.advance_balance:,.2f}':>10}"
        )


@staff_group.command("advance")
@click.argument("staff")
@click.argument("amount")
@click.option("--source", default=chart.TILL_FLOAT, show_default=True, help="Account paying the advance")
@click.pass_context
def give_advance(ctx, staff: str, amount: str, source: str):
    """Give a staff member a salary advance.

    Examples:
        tillbook staff advance Amara 50
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    staff_id = resolve_staff_or_exit(ctx, StaffService(db), staff)
    source_id = resolve_account_or_exit(ctx, ledger, source)
    value = parse_amount_or_exit(ctx, amount)

    try:
        txn = PayrollService(db, ledger).manage_staff_advance(staff_id, value, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to record.")
        return
    click.echo(f"Advance of ${txn.amount:,.2f} given to {staff} from {source_id}")


@staff_group.command("loan")
@click.argument("staff")
@click.argument("amount")
@click.option("--initial", "initial_amount", default="0", help="Reset the original loan amount to this value")
@click.option("--source", default=chart.BUSINESS_BANK, show_default=True, help="Account paying the loan")
@click.pass_context
def give_loan(ctx, staff: str, amount: str, initial_amount: str, source: str):
    """Issue a loan to a staff member.

    Examples:
        tillbook staff loan Dinesh 500
        tillbook staff loan s2 200 --initial 600 --source till_float
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    staff_id = resolve_staff_or_exit(ctx, StaffService(db), staff)
    source_id = resolve_account_or_exit(ctx, ledger, source)
    value = parse_amount_or_exit(ctx, amount)
    initial = parse_amount_or_exit(ctx, initial_amount, "initial amount")

    try:
        txn = PayrollService(db, ledger).manage_staff_loan(staff_id, value, initial, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn is None:
        click.echo("Nothing to record.")
        return
    click.echo(f"Loan of ${txn.amount:,.2f} issued to {staff} from {source_id}")


@staff_group.command("payroll")
@click.argument("staff")
@click.option(
    "--cycle",
    type=click.Choice([c.value for c in PayrollCycle]),
    default=PayrollCycle.SALARY.value,
    show_default=True,
    help="1st pays the monthly salary, 15th the service charge",
)
@click.option("--gross", help="Gross pay (defaults to base salary on the 1st)")
@click.option("--loan-deduction", help="Loan repayment (defaults to one installment on the 1st)")
@click.option("--advance-deduction", help="Advance repayment (defaults to the full advance on the 1st)")
@click.option("--source", default=chart.BUSINESS_BANK, show_default=True, help="Account paying out")
@click.option("--strict", is_flag=True, help="Refuse deductions larger than the balance owed")
@click.pass_context
def run_payroll(
    ctx,
    staff: str,
    cycle: str,
    gross: str | None,
    loan_deduction: str | None,
    advance_deduction: str | None,
    source: str,
    strict: bool,
):
    """Pay a staff member, deducting loan and advance repayments.

    Examples:
        tillbook staff payroll Dinesh
        tillbook staff payroll Amara --cycle 15th --gross 120
        tillbook staff payroll s1 --gross 1200 --loan-deduction 100 --advance-deduction 0
    """
    db = ctx.obj["db"]
    ledger = LedgerService(db)
    staff_id = resolve_staff_or_exit(ctx, StaffService(db), staff)
    source_id = resolve_account_or_exit(ctx, ledger, source)
    policy = OverDeductionPolicy.REJECT if strict else OverDeductionPolicy.CLAMP
    service = PayrollService(db, ledger, over_deduction=policy)

    try:
        defaults = service.payroll_defaults(staff_id, PayrollCycle(cycle))
    except DomainError as e:
        handle_domain_error(ctx, e)

    gross_pay = parse_amount_or_exit(ctx, gross, "gross pay") if gross else defaults.gross
    if gross_pay is None:
        click.echo("Error: --gross is required for a service charge payout", err=True)
        ctx.exit(1)
    loan_ded = (
        parse_amount_or_exit(ctx, loan_deduction, "loan deduction")
        if loan_deduction
        else defaults.loan_deduction
    )
    advance_ded = (
        parse_amount_or_exit(ctx, advance_deduction, "advance deduction")
        if advance_deduction
        else defaults.advance_deduction
    )

    try:
        result = service.commit_payroll(staff_id, PayrollCycle(cycle), gross_pay, loan_ded, advance_ded, source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Payroll ({cycle}) for {staff}:")
    click.echo(f"  Gross:             ${result.gross:,.2f}")
    click.echo(f"  Loan deduction:    ${loan_ded:,.2f}")
    click.echo(f"  Advance deduction: ${advance_ded:,.2f}")
    click.echo(f"  Net paid:          ${result.net:,.2f}")
    click.echo(f"  Loan balance:      ${result.loan_balance:,.2f}")
    click.echo(f"  Advance balance:   ${result.advance_balance:,.2f}")


@staff_group.command("installment")
@click.argument("staff")
@click.argument("amount")
@click.pass_context
def set_installment(ctx, staff: str, amount: str):
    """Set a staff member's monthly loan installment."""
    service = StaffService(ctx.obj["db"])
    staff_id = resolve_staff_or_exit(ctx, service, staff)
    value = parse_amount_or_exit(ctx, amount, "installment")

    try:
        member = service.update_staff_installment(staff_id, value)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Monthly installment for {member.name} set to ${member.monthly_loan_installment:,.2f}")


@staff_group.command("update")
@click.argument("staff")
@click.option("--name", help="New name")
@click.option("--role", help="New role")
@click.option("--phone", help="New phone number")
@click.option("--salary", help="New base salary")
@click.option("--joined", help="Date the staff member joined")
@click.pass_context
def update_staff(
    ctx,
    staff: str,
    name: str | None,
    role: str | None,
    phone: str | None,
    salary: str | None,
    joined: str | None,
):
    """Edit a staff member's profile.

    Updates only the fields that are provided.

    Examples:
        tillbook staff update Amara --role "Head Server" --salary 650
    """
    service = StaffService(ctx.obj["db"])
    staff_id = resolve_staff_or_exit(ctx, service, staff)

    changes = {}
    if name is not None:
        changes["name"] = name
    if role is not None:
        changes["role"] = role
    if phone is not None:
        changes["phone"] = phone
    if salary is not None:
        changes["base_salary"] = parse_amount_or_exit(ctx, salary, "salary")
    if joined is not None:
        changes["joined_date"] = parse_date_or_exit(ctx, joined)

    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        member = service.update_staff_details(staff_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated {member.name} ({member.id})")


@staff_group.command("holiday")
@click.argument("staff", required=False)
@click.argument("day", required=False)
@click.option(
    "--type",
    "holiday_type",
    type=click.Choice([t.value for t in HolidayType]),
    default=HolidayType.FULL_DAY.value,
    show_default=True,
    help="Kind of leave",
)
@click.pass_context
def toggle_holiday(ctx, staff: str | None, day: str | None, holiday_type: str):
    """Mark a day off for a staff member, or clear it if already marked.

    Without DAY, lists the holidays recorded (for STAFF, if given).

    Examples:
        tillbook staff holiday Leela 2024-03-08
        tillbook staff holiday Nimal tomorrow --type "Sick Leave"
        tillbook staff holiday
    """
    service = StaffService(ctx.obj["db"])
    staff_id = resolve_staff_or_exit(ctx, service, staff) if staff else None

    if day is None:
        names = {member.id: member.name for member in service.list_staff()}
        holidays = service.list_holidays(staff_id)
        if not holidays:
            click.echo("No holidays recorded.")
            return
        for holiday in holidays:
            click.echo(f"{str(holiday.date):<12} {names.get(holiday.staff_id, holiday.staff_id):<10} {holiday.type.value}")
        return

    if staff_id is None:
        click.echo("Error: STAFF is required to mark a holiday", err=True)
        ctx.exit(1)
    holiday_date = parse_date_or_exit(ctx, day)
    try:
        holiday = service.toggle_staff_holiday(staff_id, holiday_date, HolidayType(holiday_type))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if holiday is None:
        click.echo(f"Cleared holiday for {staff} on {holiday_date}")
    else:
        click.echo(f"Marked {holiday.type.value} for {staff} on {holiday_date}")


def register_commands(cli):
    """Register staff commands with main CLI."""
    cli.add_command(staff_group, name="staff")
