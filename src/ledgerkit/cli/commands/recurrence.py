"""Recurrence commands."""

import click
from ledgerkit.cli.error_handling import parse_or_exit
from ledgerkit.domain.obligation import ObligationService
from ledgerkit.domain.recurrence import RecurrenceService
from ledgerkit.utils.date_parser import parse_date


@click.group()
def recurrence_group():
    """Generate occurrences of recurring payables/receivables."""
    pass


@recurrence_group.command("process")
@click.option("--today", "reference_date", help="Reference date (defaults to today)")
@click.option("--mark-overdue", is_flag=True, help="Also flag pending obligations past their due date")
@click.pass_context
def process(ctx, reference_date: str | None, mark_overdue: bool):
    """Generate every recurring occurrence that is due.

    Examples:
        ledgerkit recurrence process
        ledgerkit recurrence process --today 2024-03-31 --mark-overdue
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    today = parse_or_exit(ctx, parse_date, reference_date, "date") if reference_date else None

    result = RecurrenceService(db).process_recurrences(owner, today=today)
    click.echo(
        f"Generated {result.payables_generated} payable(s) and {result.receivables_generated} receivable(s)"
    )

    if mark_overdue:
        count = ObligationService(db).mark_overdue(owner, today=today)
        click.echo(f"Marked {count} obligation(s) overdue")


def register_commands(cli):
    """Register recurrence commands with main CLI."""
    cli.add_command(recurrence_group, name="recurrence")
