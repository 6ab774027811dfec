"""Click CLI for engagementsctl.

Usage:
    python manage.py engagementsctl [command] [options]
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

STATUS_STYLES = {
    "awaiting_confirmation": "yellow",
    "requested": "yellow",
    "confirmed": "cyan",
    "completed": "green",
    "cancelled": "red",
    "expired": "red",
    "no_show": "red",
}


def short_uuid(uuid_val) -> str:
    if uuid_val is None:
        return "-"
    return str(uuid_val)[:8]


def _when(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def _status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def format_engagements_table(engagements, title: str = "Engagements") -> Table:
    """Format engagements as a Rich table.

    Bookings show their time slot; orders show quantity and delivery method.
    """
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Resource")
    table.add_column("Buyer")
    table.add_column("Seller")
    table.add_column("Status")
    table.add_column("Total", justify="right")
    table.add_column("Details", style="dim")

    for engagement in engagements:
        if engagement.is_booking:
            details = f"{_when(engagement.start_time)} -> {_when(engagement.end_time)}"
        else:
            details = f"x{engagement.quantity} {engagement.delivery_method}"
        table.add_row(
            short_uuid(engagement.pk),
            engagement.kind,
            engagement.resource_id,
            engagement.buyer_id,
            engagement.seller_id,
            _status(engagement.status),
            str(engagement.money),
            details,
        )
    return table


def format_history_table(changes) -> Table:
    table = Table(title="History")
    table.add_column("When", style="dim")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Actor", style="cyan")
    table.add_column("Reason")

    for change in changes:
        table.add_row(
            _when(change.created_at),
            change.from_status or "-",
            _status(change.status),
            change.actor,
            change.reason or "-",
        )
    return table


def format_engagement_detail(engagement) -> Panel:
    lines = [
        f"[bold]Kind:[/bold] {engagement.kind}",
        f"[bold]Status:[/bold] {_status(engagement.status)}",
        f"[bold]Resource:[/bold] {engagement.resource_id}",
        f"[bold]Buyer:[/bold] {engagement.buyer_id}",
        f"[bold]Seller:[/bold] {engagement.seller_id}",
        f"[bold]Scope:[/bold] {engagement.scope_id}",
        f"[bold]Total:[/bold] {engagement.money}",
        f"[bold]Created:[/bold] {_when(engagement.created_at)}",
    ]
    if engagement.is_booking:
        lines.append(f"[bold]Slot:[/bold] {_when(engagement.start_time)} -> {_when(engagement.end_time)}")
        lines.append(f"[bold]Duration:[/bold] {engagement.duration_minutes} min")
    else:
        lines.append(f"[bold]Quantity:[/bold] {engagement.quantity}")
        lines.append(f"[bold]Delivery:[/bold] {engagement.delivery_method}")
    if engagement.cancellation_reason:
        lines.append(f"[bold]Cancellation reason:[/bold] {engagement.cancellation_reason}")
    return Panel("\n".join(lines), title=f"Engagement {engagement.pk}")


@click.group()
@click.pass_context
def cli(ctx):
    """Engagements Terminal UI.

    Inspect orders and bookings, and run the lifecycle sweep.
    """
    ctx.ensure_object(dict)


@cli.command(name="list")
@click.option("--party", required=True, help="Party id (buyer or seller)")
@click.option("--kind", type=click.Choice(["order", "booking"]), help="Filter by kind")
@click.option("--role", type=click.Choice(["buyer", "seller"]), help="Filter by the party's side")
@click.option("--limit", default=50, help="Maximum records to return")
def list_command(party, kind, role, limit):
    """List a party's engagements."""
    from .selectors import list_engagements

    engagements = list(list_engagements(party, kind=kind, role=role)[:limit])
    if not engagements:
        console.print(f"[yellow]No engagements for party {party}[/yellow]")
        return
    console.print(format_engagements_table(engagements))


@cli.command(name="show")
@click.argument("engagement_id")
def show_command(engagement_id):
    """Show an engagement and its status history."""
    from django.core.exceptions import ValidationError

    from .models import Engagement
    from .selectors import get_history

    try:
        engagement = Engagement.objects.get(pk=engagement_id)
    except (Engagement.DoesNotExist, ValidationError):
        console.print(f"[red]Engagement not found: {engagement_id}[/red]")
        raise SystemExit(1)

    console.print(format_engagement_detail(engagement))
    console.print(format_history_table(get_history(engagement)))


@cli.command(name="sweep")
@click.option("--dry-run", is_flag=True, help="Only count what would be swept")
def sweep_command(dry_run):
    """Expire or cancel engagements nobody confirmed in time."""
    from .sweeper import run_lifecycle_sweep, stale_candidates

    if dry_run:
        candidates = stale_candidates()
        console.print(f"Orders to expire: {candidates['order'].count()}")
        console.print(f"Bookings to cancel: {candidates['booking'].count()}")
        return

    result = run_lifecycle_sweep()
    console.print(f"[green]Expired {result.expired_orders} orders[/green]")
    console.print(f"[green]Cancelled {result.cancelled_bookings} bookings[/green]")
    if result.failures:
        console.print(f"[red]Failed: {', '.join(result.failures)}[/red]")
