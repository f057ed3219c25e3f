"""Cost-center allocation commands."""

import click
from ledgerkit.cli.commands.cost_center import resolve_cost_center
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.allocation import AllocationService, create_equal_distribution
from ledgerkit.domain.cost_center import CostCenterService
from ledgerkit.domain.entities import AllocationInput, ObligationKind
from ledgerkit.domain.errors import DomainError, ValidationError
from ledgerkit.domain.money import format_brl
from ledgerkit.utils.amount_parser import parse_amount

KIND_CHOICE = click.Choice([k.value for k in ObligationKind])


@click.group()
def allocation_group():
    """Split payables/receivables across cost centers."""
    pass


def _parse_share(service: CostCenterService, owner: str, share: str) -> AllocationInput:
    """Parse ``CODE=PERCENT`` into an allocation input."""
    code, sep, percentage = share.partition("=")
    if not sep or not code or not percentage:
        raise ValidationError(f"Invalid allocation '{share}'. Expected COST_CENTER=PERCENT")
    return AllocationInput(
        cost_center_id=resolve_cost_center(service, owner, code),
        percentage=parse_amount(percentage.rstrip("%")),
    )


@allocation_group.command("set")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("obligation_id", type=int)
@click.argument("shares", nargs=-1)
@click.option("--equal", is_flag=True, help="Split equally across the given cost centers")
@click.pass_context
def set_allocations(ctx, kind: str, obligation_id: int, shares: tuple[str, ...], equal: bool):
    """Replace the allocations of a payable/receivable.

    SHARES are COST_CENTER=PERCENT pairs (cost center code or ID) that
    must add up to 100. With --equal, SHARES are cost centers only.
    Without SHARES the allocations are cleared.

    Examples:
        ledgerkit allocation set payable 3 ADM=60 OPS=40
        ledgerkit allocation set payable 3 --equal ADM OPS FIN
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    cost_centers = CostCenterService(db)

    try:
        if equal:
            inputs = create_equal_distribution(
                [resolve_cost_center(cost_centers, owner, code) for code in shares]
            )
        else:
            inputs = [_parse_share(cost_centers, owner, share) for share in shares]
        stored = AllocationService(db).replace_allocations(owner, ObligationKind(kind), obligation_id, inputs)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not stored:
        click.echo(f"Cleared allocations of {kind} {obligation_id}")
        return
    click.echo(f"Stored {len(stored)} allocation(s) for {kind} {obligation_id}")


@allocation_group.command("show")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("obligation_id", type=int)
@click.pass_context
def show_allocations(ctx, kind: str, obligation_id: int):
    """Show the allocations of a payable/receivable."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]

    allocations = AllocationService(db).get_allocations(owner, ObligationKind(kind), obligation_id)
    if not allocations:
        click.echo(f"No allocations for {kind} {obligation_id}.")
        return

    centers = {c.id: c for c in CostCenterService(db).list_cost_centers(owner)}
    click.echo("-" * 60)
    for allocation in allocations:
        center = centers.get(allocation.cost_center_id)
        label = f"{center.code} - {center.name}" if center else str(allocation.cost_center_id)
        click.echo(f"{label:30s} {allocation.percentage:>7}% {format_brl(allocation.amount):>16s}")


def register_commands(cli):
    """Register allocation commands with main CLI."""
    cli.add_command(allocation_group, name="allocation")
