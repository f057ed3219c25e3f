"""Bank statement command."""

import click
from ledgerkit.cli.date_filters import resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.money import format_brl
from ledgerkit.domain.statement import StatementService
from ledgerkit.utils.account_resolver import resolve_account


@click.command("statement")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="First day of the statement")
@click.option("--end-date", help="Last day of the statement")
@click.option("--this-month", is_flag=True, help="Current month up to today")
@click.option("--last-month", is_flag=True, help="Previous calendar month")
@click.option("--this-year", is_flag=True, help="Current year up to today")
@click.option("--last-year", is_flag=True, help="Previous calendar year")
@click.pass_context
def statement(
    ctx,
    account: str,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    last_month: bool,
    this_year: bool,
    last_year: bool,
):
    """Print the running-balance statement of a bank account.

    Examples:
        ledgerkit statement "Itau Corrente"
        ledgerkit statement 1 --last-month
        ledgerkit statement 1 --start-date 2024-01-01 --end-date 2024-01-31
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "last-month": last_month,
            "this-year": this_year,
            "last-year": last_year,
        },
    )

    try:
        account_id = resolve_account(BankAccountService(db), owner, account)
        result = StatementService(db).build_bank_statement(owner, account_id, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nOpening balance: {format_brl(result.opening_balance)}")
    click.echo("-" * 100)
    click.echo(f"{'Date':<12} {'':<2} {'Amount':>16}  {'Description':<40} {'Balance':>16}")
    click.echo("-" * 100)
    for entry in result.entries:
        click.echo(
            f"{str(entry.date):<12} {entry.entry_type.value:<2} {format_brl(entry.amount):>16}  "
            f"{entry.description[:40]:<40} {format_brl(entry.balance):>16}"
        )
    click.echo("-" * 100)
    click.echo(f"Credits: {format_brl(result.total_credits)}")
    click.echo(f"Debits:  {format_brl(result.total_debits)}")
    click.echo(f"Final balance: {format_brl(result.final_balance)}")


def register_commands(cli):
    """Register statement command with main CLI."""
    cli.add_command(statement)
