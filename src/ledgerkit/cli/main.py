"""Main CLI entry point."""

import logging

import click

from ledgerkit.config import DB_PATH_ENV, LedgerConfig
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.permissions import coerce_role
from ledgerkit.logging_setup import setup_logging

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    account,
    init_accounts,
    journal,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--actor",
    default="cli",
    show_default=True,
    envvar="LEDGERKIT_ACTOR",
    help="Who is acting; recorded on created, posted and reversed records",
)
@click.option(
    "--role",
    default="admin",
    show_default=True,
    envvar="LEDGERKIT_ROLE",
    help="Actor role: admin, accountant, manager or auditor",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, actor: str, role: str, verbose: bool):
    """Ledgerkit - double-entry bookkeeping.

    Keep a chart of accounts, record balanced journal entries, post them to
    account balances and produce trial balance, profit and loss and balance
    sheet reports.
    """
    ctx.ensure_object(dict)
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["config"] = LedgerConfig.from_env()
            ctx.obj["role"] = coerce_role(role)
        except (DomainError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        ctx.obj["actor"] = actor

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
journal.register_commands(cli)
report.register_commands(cli)
init_accounts.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
