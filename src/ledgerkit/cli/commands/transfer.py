"""Bank transfer commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.money import format_brl
from ledgerkit.domain.transfer import TransferService
from ledgerkit.utils.account_resolver import resolve_account
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


@click.group()
def transfer_group():
    """Move money between bank accounts."""
    pass


@transfer_group.command("create")
@click.argument("from_account", metavar="FROM_ACCOUNT")
@click.argument("to_account", metavar="TO_ACCOUNT")
@click.argument("amount")
@click.option("--date", "transfer_date", default="today", show_default=True, help="Transfer date")
@click.option("--description", help="Description")
@click.pass_context
def create_transfer(ctx, from_account: str, to_account: str, amount: str, transfer_date: str, description: str | None):
    """Transfer AMOUNT from one bank account to another.

    Accounts can be given by name or ID.

    Examples:
        ledgerkit transfer create "Itau Corrente" "Caixa" "R$ 200,00"
        ledgerkit transfer create 1 2 150 --date 2024-03-01
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    accounts = BankAccountService(db)

    value = parse_or_exit(ctx, parse_amount, amount, "amount")
    on = parse_or_exit(ctx, parse_date, transfer_date, "date")

    try:
        from_id = resolve_account(accounts, owner, from_account)
        to_id = resolve_account(accounts, owner, to_account)
        transfer = TransferService(db).create_transfer(
            owner, from_id, to_id, amount=value, transfer_date=on, description=description
        )
        click.echo(f"Transferred {format_brl(transfer.amount)} (ID: {transfer.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transfer_group.command("list")
@click.option("--account", help="Only transfers touching this account (name or ID)")
@click.pass_context
def list_transfers(ctx, account: str | None):
    """List transfers."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    accounts = BankAccountService(db)

    try:
        account_id = resolve_account(accounts, owner, account) if account else None
    except DomainError as e:
        handle_domain_error(ctx, e)

    transfers = TransferService(db).list_transfers(owner, account_id=account_id)
    if not transfers:
        click.echo("No transfers found.")
        return

    names = {acc.id: acc.name for acc in accounts.list_accounts(owner)}
    click.echo("-" * 90)
    for transfer in transfers:
        click.echo(
            f"{transfer.id:<6} {str(transfer.transfer_date):<12} "
            f"{names.get(transfer.from_account_id, '?'):>18s} -> {names.get(transfer.to_account_id, '?'):<18s} "
            f"{format_brl(transfer.amount):>16s}  {transfer.description or ''}"
        )


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
