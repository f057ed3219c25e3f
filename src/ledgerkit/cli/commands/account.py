"""Bank account management commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.money import format_brl
from ledgerkit.utils.account_resolver import resolve_account
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", help="Bank name")
@click.option("--initial-balance", default="0", help="Opening balance (e.g. 1.500,00)")
@click.option("--initial-balance-date", help="Date of the opening balance")
@click.pass_context
def create_account(ctx, name: str, bank: str | None, initial_balance: str, initial_balance_date: str | None):
    """Create a new bank account.

    Examples:
        ledgerkit account create "Itau Corrente" --bank Itau --initial-balance 1000
        ledgerkit account create "Caixa" --initial-balance "R$ 250,00"
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = BankAccountService(db)

    amount = parse_or_exit(ctx, parse_amount, initial_balance, "initial balance")
    balance_date = None
    if initial_balance_date:
        balance_date = parse_or_exit(ctx, parse_date, initial_balance_date, "initial balance date")

    try:
        account_id = service.create_account(
            owner, name=name, bank_name=bank, initial_balance=amount, initial_balance_date=balance_date
        )
        click.echo(f"Created bank account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all bank accounts with their balances."""
    db = ctx.obj["db"]
    service = BankAccountService(db)

    accounts = service.list_accounts(ctx.obj["owner"])
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 72)
    for acc in accounts:
        bank = acc.bank_name or "-"
        inactive = "" if acc.is_active else " (inactive)"
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {bank:15s} | {format_brl(acc.balance):>16s}{inactive}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete a bank account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if no settlement, transfer or
    payable/receivable references it.

    Examples:
        ledgerkit account delete "Caixa"
        ledgerkit account delete 1 --yes
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = BankAccountService(db)

    try:
        account_id = resolve_account(service, owner, account)
    except DomainError as e:
        handle_domain_error(ctx, e)

    account_obj = service.get_account(owner, account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete bank account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(owner, account_id)
        click.echo(f"Deleted bank account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register bank account commands with main CLI."""
    cli.add_command(account_group, name="account")
