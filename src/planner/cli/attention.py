"""
Planner CLI - Shared attention items.

Attention items live in the shared real-time tree and are visible on every
device. Status changes merge into the record (done also stamps the
completion time).
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from planner.cli.common import connect_client
from planner.cli.errors import fail, item_not_found
from planner.core.attention import (
    ALL_BUSINESSES,
    BIZ_MAP,
    AttentionItem,
    AttentionService,
    Priority,
    active_items,
    recently_done,
)
from planner.core.remote import ATTENTION_PATH, SyncClient

console = Console()
app = typer.Typer(help="Shared items that need attention")

PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "dim"}
BIZ_CHOICES = {key: emoji for emoji, key in BIZ_MAP.items()}


def read_items(client: SyncClient) -> list[AttentionItem]:
    """One-time read of every attention item."""
    items: list[AttentionItem] = []
    client.get(ATTENTION_PATH, lambda snapshot: items.extend(AttentionItem.list_from_snapshot(snapshot)))
    return items


def require_item(client: SyncClient, item_id: str) -> AttentionItem:
    """
    Read one item.

    Raises:
        typer.Exit: If the item does not exist
    """
    found: list[AttentionItem | None] = []
    AttentionService(client).get_item(item_id, found.append)
    if not found or found[0] is None:
        item_not_found(item_id)
    return found[0]


def _business_option(value: str) -> str:
    if value != ALL_BUSINESSES and value not in BIZ_CHOICES:
        raise typer.BadParameter(f"choose one of: {', '.join(sorted(BIZ_CHOICES))}")
    return value


def _print_items(title: str, items: list[AttentionItem], show_done: bool = False) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Biz", width=3)
    table.add_column("Pri", width=6)
    table.add_column("Title", overflow="fold")
    table.add_column("Completed" if show_done else "Detail", overflow="fold")

    for item in items:
        style = PRIORITY_STYLE.get(item.priority, "")
        last = (item.completed_at or "")[:10] if show_done else (item.detail or "[dim]-[/dim]")
        table.add_row(
            item.id,
            item.biz,
            f"[{style}]{item.priority}[/{style}]" if style else item.priority,
            item.title,
            last,
        )
    console.print(table)


@app.callback(invoke_without_command=True)
def list_items(
    ctx: typer.Context,
    biz: str = typer.Option(
        ALL_BUSINESSES,
        "--biz",
        "-b",
        help="Business to show (sheds, farm, forge, grow or all)",
        callback=_business_option,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    List active attention items, most urgent first.

    Examples:
        planner attention              # Everything active
        planner attention --biz farm   # One business
        planner attention add "Fix the gate" --biz farm --priority high
    """
    if ctx.invoked_subcommand is not None:
        return

    client = connect_client()
    items = active_items(read_items(client), biz)

    if json_output:
        console.print(json.dumps([i.to_record() for i in items], indent=2, ensure_ascii=False))
        return

    if not items:
        console.print("[green]✅ All clear, nothing needs your attention right now.[/green]")
        return

    _print_items(f"Needs attention ({len(items)})", items)


@app.command()
def add(
    title: str = typer.Argument(..., help="What needs attention"),
    detail: str = typer.Option("", "--detail", "-d", help="More context"),
    biz: str = typer.Option(
        ALL_BUSINESSES,
        "--biz",
        "-b",
        help="Business (sheds, farm, forge, grow or all)",
        callback=_business_option,
    ),
    priority: Priority = typer.Option(Priority.MEDIUM, "--priority", "-p", help="Priority"),
) -> None:
    """Add an attention item."""
    client = connect_client()
    try:
        key = AttentionService(client).add_item(
            title, detail=detail, biz=BIZ_CHOICES[biz], priority=priority
        )
    except ValueError as e:
        fail("Cannot add attention item", reason=str(e))
    console.print(f"[green]✓[/green] Added [bold]{key}[/bold]: {title.strip()}")


@app.command()
def done(item_id: str = typer.Argument(..., help="Item id")) -> None:
    """Mark an item done."""
    client = connect_client()
    item = require_item(client, item_id)
    AttentionService(client).complete(item_id)
    console.print(f"[green]✓[/green] Done: {item.title}")


@app.command()
def dismiss(item_id: str = typer.Argument(..., help="Item id")) -> None:
    """Dismiss an item without doing it."""
    client = connect_client()
    item = require_item(client, item_id)
    AttentionService(client).dismiss(item_id)
    console.print(f"[green]✓[/green] Dismissed: {item.title}")


@app.command(name="done-list")
def done_list(
    biz: str = typer.Option(
        ALL_BUSINESSES,
        "--biz",
        "-b",
        help="Business to show",
        callback=_business_option,
    ),
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="How many to show"),
) -> None:
    """Show recently completed items."""
    client = connect_client()
    items = recently_done(read_items(client), biz, limit=limit)
    if not items:
        console.print("[dim]Nothing completed yet.[/dim]")
        return
    _print_items(f"Recently done ({len(items)})", items, show_done=True)
