"""Cost center management commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.cost_center import CostCenterService
from ledgerkit.domain.errors import DomainError, NotFoundError


def resolve_cost_center(service: CostCenterService, owner: str, value: str) -> int:
    """Resolve a cost center code or ID to its ID."""
    for center in service.list_cost_centers(owner):
        if center.code == value:
            return center.id
    try:
        cost_center_id = int(value)
    except ValueError:
        raise NotFoundError(f"Cost center '{value}' not found")
    if service.get_cost_center(owner, cost_center_id) is None:
        raise NotFoundError(f"Cost center {cost_center_id} not found")
    return cost_center_id


@click.group()
def cost_center_group():
    """Manage cost centers."""
    pass


@cost_center_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--parent", help="Parent cost center code or ID")
@click.option("--description", help="Description")
@click.pass_context
def create_cost_center(ctx, code: str, name: str, parent: str | None, description: str | None):
    """Create a cost center.

    Examples:
        ledgerkit cost-center create ADM "Administrativo"
        ledgerkit cost-center create ADM-TI "Tecnologia" --parent ADM
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = CostCenterService(db)

    try:
        parent_id = resolve_cost_center(service, owner, parent) if parent else None
        cost_center_id = service.create_cost_center(
            owner, code=code, name=name, parent_id=parent_id, description=description
        )
        click.echo(f"Created cost center '{code}' (ID: {cost_center_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("list")
@click.pass_context
def list_cost_centers(ctx):
    """List cost centers as a tree."""
    db = ctx.obj["db"]
    service = CostCenterService(db)

    centers = service.list_cost_centers(ctx.obj["owner"])
    if not centers:
        click.echo("No cost centers found.")
        return

    children: dict[int | None, list] = {}
    for center in centers:
        children.setdefault(center.parent_id, []).append(center)

    def print_tree(parent_id, indent=0):
        for center in children.get(parent_id, []):
            click.echo(f"{'  ' * indent}{center.code} - {center.name} (ID: {center.id})")
            print_tree(center.id, indent + 1)

    print_tree(None)


@cost_center_group.command("move")
@click.argument("cost_center")
@click.option("--parent", help="New parent code or ID (omit to make it a root)")
@click.pass_context
def move_cost_center(ctx, cost_center: str, parent: str | None):
    """Move a cost center under a new parent.

    Examples:
        ledgerkit cost-center move ADM-TI --parent OPS
        ledgerkit cost-center move ADM-TI
    """
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = CostCenterService(db)

    try:
        cost_center_id = resolve_cost_center(service, owner, cost_center)
        parent_id = resolve_cost_center(service, owner, parent) if parent else None
        service.move_cost_center(owner, cost_center_id, parent_id)
        click.echo(f"Moved cost center '{cost_center}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("rename")
@click.argument("cost_center")
@click.argument("name")
@click.pass_context
def rename_cost_center(ctx, cost_center: str, name: str):
    """Rename a cost center."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = CostCenterService(db)

    try:
        cost_center_id = resolve_cost_center(service, owner, cost_center)
        service.rename_cost_center(owner, cost_center_id, name)
        click.echo(f"Renamed cost center '{cost_center}' to '{name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("delete")
@click.argument("cost_center")
@click.pass_context
def delete_cost_center(ctx, cost_center: str):
    """Delete a cost center without children, allocations or obligations."""
    db = ctx.obj["db"]
    owner = ctx.obj["owner"]
    service = CostCenterService(db)

    try:
        cost_center_id = resolve_cost_center(service, owner, cost_center)
        service.delete_cost_center(owner, cost_center_id)
        click.echo(f"Deleted cost center '{cost_center}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register cost center commands with main CLI."""
    cli.add_command(cost_center_group, name="cost-center")
