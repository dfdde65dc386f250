"""
Planner CLI - Aggregated board across every tracker.

Tracker snapshots are read-only; a tracker that cannot be loaded shows up
as empty rather than failing the command.
"""

import typer
from rich.console import Console
from rich.table import Table

from planner.cli.common import get_config
from planner.core.board import (
    BoardCard,
    load_trackers,
    merge_cards,
    status_line,
    today_view,
    tracker_summary,
    urgent_count,
)
from planner.core.ideas import IdeaStore

console = Console()
app = typer.Typer(help="Merged view of every tracker and the incubator")


def _card_row(card: BoardCard) -> tuple[str, str, str, str]:
    return (card.source_emoji, card.id, card.priority or "[dim]-[/dim]", card.title)


def _card_table(title: str, cards: list[BoardCard]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan", title_justify="left")
    table.add_column("", width=2)
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Pri", width=6)
    table.add_column("Title", overflow="fold")
    for card in cards:
        table.add_row(*_card_row(card))
    return table


@app.callback(invoke_without_command=True)
def today(ctx: typer.Context) -> None:
    """
    What matters right now, across everything.

    Examples:
        planner board            # Today view
        planner board trackers   # Per-tracker counts
    """
    if ctx.invoked_subcommand is not None:
        return

    config = get_config()
    snapshots = load_trackers(config.trackers, http_config=config.http)
    store = IdeaStore.from_config(config)
    ideas = store.ideas
    cards = merge_cards(snapshots, ideas)
    view = today_view(cards, incubating=len(ideas))

    console.print("[bold]🎯 Today[/bold]")
    console.print(
        f"🔥 {len(view.in_progress)} in progress   🔴 {view.high_backlog_total} high priority   "
        f"✅ {view.completion_percent}% complete   🧪 {view.incubating} incubating   "
        f"[bold]{urgent_count(cards)}[/bold] urgent"
    )

    if view.in_progress:
        console.print(_card_table("🔥 In Progress", view.in_progress))
    if view.high_backlog:
        console.print(_card_table("🔴 High Priority Backlog", view.high_backlog))
        if view.more_high_backlog:
            console.print(f"[dim]+ {view.more_high_backlog} more...[/dim]")
    if view.recent_done:
        console.print(_card_table("✅ Recently Done", view.recent_done))

    failed = [s for s in snapshots if not s.ok]
    for snapshot in failed:
        console.print(f"[yellow]Could not load {snapshot.source.display_name}[/yellow]")

    console.print(f"\n[dim]{status_line(cards, len(snapshots), len(ideas))}[/dim]")


@app.command()
def trackers() -> None:
    """Card counts per tracker."""
    config = get_config()
    if not config.trackers:
        console.print("[yellow]No trackers configured.[/yellow]")
        console.print('[dim]Add a "trackers" list to .planner.json[/dim]')
        raise typer.Exit(0)

    summaries = tracker_summary(load_trackers(config.trackers, http_config=config.http))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Tracker")
    table.add_column("Backlog", justify="right")
    table.add_column("In progress", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Total", justify="right")
    for summary in summaries:
        name = f"{summary.source.emoji} {summary.source.display_name}"
        if summary.error:
            name += " [yellow](unavailable)[/yellow]"
        table.add_row(
            name,
            str(summary.backlog),
            str(summary.in_progress),
            str(summary.done),
            str(summary.total),
        )
    console.print(table)
