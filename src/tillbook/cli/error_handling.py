"""CLI error handling helpers."""

from decimal import Decimal

import click

from tillbook.domain.errors import DomainError
from tillbook.domain.ledger import LedgerService
from tillbook.domain.staff import StaffService
from tillbook.utils.amount_parser import parse_amount
from tillbook.utils.date_parser import parse_date
from tillbook.utils.resolver import resolve_account, resolve_staff


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse a CLI amount, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: str):
    """Parse a CLI date, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def resolve_account_or_exit(ctx: click.Context, ledger: LedgerService, account: str) -> str:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(ledger, account)
    except DomainError as e:
        handle_domain_error(ctx, e)


def resolve_staff_or_exit(ctx: click.Context, staff_service: StaffService, staff: str) -> str:
    """Resolve staff name or ID, or exit with a CLI error."""
    try:
        return resolve_staff(staff_service, staff)
    except DomainError as e:
        handle_domain_error(ctx, e)
