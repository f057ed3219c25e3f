"""Payable and receivable commands.

``payable`` and ``receivable`` share the same commands; each group is
built for its obligation kind.
"""

import click
from ledgerkit.cli.commands.cost_center import resolve_cost_center
from ledgerkit.cli.error_handling import handle_domain_error, parse_or_exit
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.cost_center import CostCenterService
from ledgerkit.domain.entities import (
    ObligationKind,
    ObligationStatus,
    PaymentMethod,
    RecurrenceStatus,
    RecurrenceType,
)
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.money import format_brl
from ledgerkit.domain.obligation import ObligationService
from ledgerkit.domain.recurrence import RecurrenceService
from ledgerkit.domain.settlement import SettlementService
from ledgerkit.utils.account_resolver import resolve_account
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


def _print_obligations(obligations) -> None:
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Due':<12} {'Status':<10} {'Total':>16} {'Settled':>16}  {'Description':<30}"
    )
    click.echo("-" * 100)
    for obligation in obligations:
        marker = " *" if obligation.is_recurring_parent else ""
        click.echo(
            f"{obligation.id:<6} {str(obligation.due_date):<12} {obligation.status.value:<10} "
            f"{format_brl(obligation.total_amount):>16} {format_brl(obligation.amount_settled):>16}  "
            f"{obligation.description[:30]}{marker}"
        )


def build_group(kind: ObligationKind) -> click.Group:
    """Build the command group for payables or receivables."""
    label = kind.value

    @click.group(help=f"Manage {label}s.")
    def group():
        pass

    @group.command("create")
    @click.argument("description")
    @click.argument("amount")
    @click.option("--due", "due_date", required=True, help="Due date")
    @click.option("--issue", "issue_date", help="Issue date (defaults to due date)")
    @click.option("--counterparty", help="Supplier/customer name")
    @click.option("--cost-center", help="Cost center code or ID")
    @click.option("--account", help="Default bank account name or ID")
    @click.option("--document", help="Document number")
    @click.option("--notes", help="Notes")
    @click.option(
        "--recurrence",
        type=click.Choice([t.value for t in RecurrenceType]),
        default=RecurrenceType.UNICA.value,
        show_default=True,
        help="Recurrence of the obligation",
    )
    @click.option("--recurrence-end", help="Last due date of the series")
    @click.pass_context
    def create(
        ctx,
        description: str,
        amount: str,
        due_date: str,
        issue_date: str | None,
        counterparty: str | None,
        cost_center: str | None,
        account: str | None,
        document: str | None,
        notes: str | None,
        recurrence: str,
        recurrence_end: str | None,
    ):
        """Create a payable/receivable.

        Examples:
            ledgerkit payable create "Aluguel" "1.500,00" --due 2024-01-10 --recurrence mensal
            ledgerkit receivable create "Consultoria" 3000 --due 2024-02-15 --counterparty "ACME"
        """
        db = ctx.obj["db"]
        owner = ctx.obj["owner"]

        total = parse_or_exit(ctx, parse_amount, amount, "amount")
        due = parse_or_exit(ctx, parse_date, due_date, "due date")
        issue = parse_or_exit(ctx, parse_date, issue_date, "issue date") if issue_date else None
        end = parse_or_exit(ctx, parse_date, recurrence_end, "recurrence end date") if recurrence_end else None

        try:
            cost_center_id = (
                resolve_cost_center(CostCenterService(db), owner, cost_center) if cost_center else None
            )
            bank_account_id = resolve_account(BankAccountService(db), owner, account) if account else None
            obligation_id = ObligationService(db).create_obligation(
                owner,
                kind,
                description=description,
                total_amount=total,
                due_date=due,
                issue_date=issue,
                counterparty_name=counterparty,
                cost_center_id=cost_center_id,
                bank_account_id=bank_account_id,
                document_number=document,
                notes=notes,
                recurrence_type=recurrence,
                recurrence_end_date=end,
            )
            click.echo(f"Created {label} '{description}' (ID: {obligation_id})")
        except DomainError as e:
            handle_domain_error(ctx, e)

    @group.command("list")
    @click.option("--status", type=click.Choice([s.value for s in ObligationStatus]), help="Filter by status")
    @click.option("--start-date", help="First due date")
    @click.option("--end-date", help="Last due date")
    @click.pass_context
    def list_(ctx, status: str | None, start_date: str | None, end_date: str | None):
        """List payables/receivables (generating due recurring occurrences first)."""
        db = ctx.obj["db"]
        start = parse_or_exit(ctx, parse_date, start_date, "start date") if start_date else None
        end = parse_or_exit(ctx, parse_date, end_date, "end date") if end_date else None

        try:
            obligations = ObligationService(db).list_obligations(
                ctx.obj["owner"], kind, status=status, start_date=start, end_date=end
            )
        except DomainError as e:
            handle_domain_error(ctx, e)

        if not obligations:
            click.echo(f"No {label}s found.")
            return

        click.echo(f"\nFound {len(obligations)} {label}(s):")
        _print_obligations(obligations)

    @group.command("settle")
    @click.argument("obligation_id", type=int)
    @click.argument("amount")
    @click.option("--date", "payment_date", default="today", show_default=True, help="Settlement date")
    @click.option(
        "--method",
        type=click.Choice([m.value for m in PaymentMethod]),
        default=PaymentMethod.PIX.value,
        show_default=True,
        help="Payment method",
    )
    @click.option("--account", help="Bank account name or ID the money moves through")
    @click.option("--notes", help="Notes")
    @click.pass_context
    def settle(
        ctx,
        obligation_id: int,
        amount: str,
        payment_date: str,
        method: str,
        account: str | None,
        notes: str | None,
    ):
        """Register a payment/receipt against a payable/receivable.

        Examples:
            ledgerkit payable settle 3 "R$ 400,00" --account "Itau Corrente"
            ledgerkit receivable settle 7 3000 --method boleto --date 2024-02-15
        """
        db = ctx.obj["db"]
        owner = ctx.obj["owner"]

        value = parse_or_exit(ctx, parse_amount, amount, "amount")
        settled_on = parse_or_exit(ctx, parse_date, payment_date, "date")

        try:
            bank_account_id = resolve_account(BankAccountService(db), owner, account) if account else None
            result = SettlementService(db).settle(
                owner,
                kind,
                obligation_id,
                amount=value,
                payment_date=settled_on,
                payment_method=method,
                bank_account_id=bank_account_id,
                notes=notes,
            )
        except DomainError as e:
            handle_domain_error(ctx, e)

        obligation = result.obligation
        click.echo(
            f"Settled {format_brl(result.payment.amount)} on {label} {obligation_id}: "
            f"{format_brl(obligation.amount_settled)} of {format_brl(obligation.total_amount)} "
            f"({obligation.status.value})"
        )

    @group.command("cancel")
    @click.argument("obligation_id", type=int)
    @click.pass_context
    def cancel(ctx, obligation_id: int):
        """Cancel a payable/receivable that is not paid."""
        try:
            ObligationService(ctx.obj["db"]).cancel_obligation(ctx.obj["owner"], kind, obligation_id)
            click.echo(f"Cancelled {label} {obligation_id}")
        except DomainError as e:
            handle_domain_error(ctx, e)

    def _set_recurrence(ctx, obligation_id: int, status: RecurrenceStatus, verb: str):
        try:
            RecurrenceService(ctx.obj["db"]).set_recurrence_status(ctx.obj["owner"], kind, obligation_id, status)
            click.echo(f"{verb} recurrence of {label} {obligation_id}")
        except DomainError as e:
            handle_domain_error(ctx, e)

    @group.command("pause")
    @click.argument("obligation_id", type=int)
    @click.pass_context
    def pause(ctx, obligation_id: int):
        """Pause a recurring series."""
        _set_recurrence(ctx, obligation_id, RecurrenceStatus.PAUSADA, "Paused")

    @group.command("resume")
    @click.argument("obligation_id", type=int)
    @click.pass_context
    def resume(ctx, obligation_id: int):
        """Resume a paused recurring series."""
        _set_recurrence(ctx, obligation_id, RecurrenceStatus.ATIVA, "Resumed")

    return group


payable_group = build_group(ObligationKind.PAYABLE)
receivable_group = build_group(ObligationKind.RECEIVABLE)


def register_commands(cli):
    """Register payable and receivable commands with main CLI."""
    cli.add_command(payable_group, name="payable")
    cli.add_command(receivable_group, name="receivable")
