"""Main CLI entry point."""

import logging

import click
from ledgerkit.database.factories import create_database

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    account,
    allocation,
    cost_center,
    obligation,
    recurrence,
    statement,
    transfer,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL used when no --db-path is given (LEDGERKIT_DATABASE_URL)",
    envvar="LEDGERKIT_DATABASE_URL",
)
@click.option(
    "--owner",
    default="default",
    show_default=True,
    envvar="LEDGERKIT_OWNER",
    help="Owner whose ledger is used (LEDGERKIT_OWNER environment variable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log ledger operations to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, owner: str, verbose: bool):
    """Ledgerkit - Payables, receivables and bank accounts.

    Track what you owe and what is owed to you, settle it against bank
    accounts, split costs across cost centers and print bank statements.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path, database_url=database_url)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
cost_center.register_commands(cli)
obligation.register_commands(cli)
allocation.register_commands(cli)
transfer.register_commands(cli)
statement.register_commands(cli)
recurrence.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
