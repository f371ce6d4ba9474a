"""Main CLI entry point."""

import logging

import click
from tillbook.database.factories import ENV_DB_PATH, create_sqlite_database
from tillbook.domain.chart import seed_defaults

# Import and register all commands at module level
from tillbook.cli.commands import (
    ledger,
    shift,
    reconcile,
    staff,
    partner,
)

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TILLBOOK_DB_PATH environment variable)",
    envvar=ENV_DB_PATH,
)
@click.option("-v", "--verbose", is_flag=True, help="Log every ledger mutation")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Tillbook - Restaurant back-office ledger.

    Track the till float, bank and receivables, settle card and hiking bar
    takings, open and close shifts, and run staff payroll.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        accounts_created, staff_created = seed_defaults(db)
        if accounts_created or staff_created:
            logger.info("Seeded %d accounts and %d staff members", accounts_created, staff_created)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
ledger.register_commands(cli)
shift.register_commands(cli)
reconcile.register_commands(cli)
staff.register_commands(cli)
partner.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
