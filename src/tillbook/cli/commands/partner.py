"""Credit partner commands."""

import click
from tillbook.cli.error_handling import handle_domain_error
from tillbook.domain.errors import DomainError
from tillbook.domain.staff import CreditPartnerService


@click.group()
def partner_group():
    """Manage partners allowed to run bills on credit."""
    pass


@partner_group.command("list")
@click.pass_context
def list_partners(ctx):
    """List credit partners."""
    partners = CreditPartnerService(ctx.obj["db"]).list_partners()
    if not partners:
        click.echo("No credit partners found.")
        return
    for name in partners:
        click.echo(name)


@partner_group.command("add")
@click.argument("name")
@click.pass_context
def add_partner(ctx, name: str):
    """Add a credit partner."""
    try:
        added = CreditPartnerService(ctx.obj["db"]).add_partner(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added credit partner '{added}'")


@partner_group.command("remove")
@click.argument("name")
@click.pass_context
def remove_partner(ctx, name: str):
    """Remove a credit partner."""
    try:
        CreditPartnerService(ctx.obj["db"]).remove_partner(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed credit partner '{name}'")


def register_commands(cli):
    """Register partner commands with main CLI."""
    cli.add_command(partner_group, name="partner")
