"""
Planner CLI - Incubator idea commands.

Ideas live only on this device, in the local cache slot. On first use the
cache is seeded from the bootstrap snapshot if one is configured.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from planner.cli.common import get_config
from planner.cli.errors import ExitCode, fail, idea_not_found, warn_unsaved
from planner.core.ideas import Idea, IdeaPriority, IdeaStage, IdeaStore

console = Console()
app = typer.Typer(help="Capture and grow incubator ideas")

STAGE_STYLE = {
    IdeaStage.CONCEPT: "blue",
    IdeaStage.DEVELOPING: "yellow",
    IdeaStage.READY: "green",
}


def _open_store() -> IdeaStore:
    store = IdeaStore.from_config(get_config())
    store.load()
    return store


def _check_saved(store: IdeaStore) -> None:
    if not store.last_save_ok:
        warn_unsaved()


def _idea_json(idea: Idea) -> dict[str, object]:
    return idea.model_dump(by_alias=True, mode="json", exclude_none=True)


@app.callback(invoke_without_command=True)
def list_ideas(
    ctx: typer.Context,
    stage: IdeaStage | None = typer.Option(
        None,
        "--stage",
        "-s",
        help="Only show ideas in this stage",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    List incubator ideas, grouped by stage.

    Examples:
        planner ideas                    # All ideas
        planner ideas --stage developing # One stage
        planner ideas add "Sauna trailer" --priority high
    """
    if ctx.invoked_subcommand is not None:
        return

    store = _open_store()
    groups = store.group_by_stage()
    stages = [stage] if stage else list(IdeaStage)

    if json_output:
        output = {s.value: [_idea_json(i) for i in groups[s]] for s in stages}
        console.print(json.dumps(output, indent=2))
        return

    if not any(groups[s] for s in stages):
        console.print("[yellow]No ideas found.[/yellow]")
        console.print('\nCapture one with: [bold]planner ideas add "Your idea"[/bold]')
        raise typer.Exit(0)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", width=5)
    table.add_column("Stage", width=11)
    table.add_column("Pri", width=6)
    table.add_column("Title", overflow="fold")
    table.add_column("Notes", overflow="fold")

    for s in stages:
        for idea in groups[s]:
            table.add_row(
                idea.id,
                f"[{STAGE_STYLE[s]}]{s.value}[/{STAGE_STYLE[s]}]",
                idea.priority.value,
                idea.title,
                idea.notes or "[dim]-[/dim]",
            )

    console.print(table)
    console.print(f"[dim]{len(store.ideas)} incubating[/dim]")


@app.command()
def add(
    title: str = typer.Argument(..., help="Short idea title"),
    description: str = typer.Option("", "--description", "-d", help="Longer description"),
    priority: IdeaPriority = typer.Option(
        IdeaPriority.MEDIUM, "--priority", "-p", help="Priority"
    ),
    stage: IdeaStage = typer.Option(IdeaStage.CONCEPT, "--stage", "-s", help="Starting stage"),
    notes: str = typer.Option("", "--notes", "-n", help="Initial notes"),
) -> None:
    """Capture a new idea."""
    store = _open_store()
    try:
        idea = store.add(
            title, description=description, stage=stage, priority=priority, notes=notes
        )
    except ValueError as e:
        fail("Cannot add idea", reason=str(e))
    _check_saved(store)
    console.print(f"[green]✓[/green] Added idea [bold]{idea.id}[/bold]: {idea.title}")


@app.command(name="stage")
def set_stage(
    idea_id: str = typer.Argument(..., help="Idea id"),
    stage: IdeaStage = typer.Argument(..., help="New stage"),
) -> None:
    """Move an idea to another stage."""
    store = _open_store()
    idea = store.update_stage(idea_id, stage)
    if idea is None:
        idea_not_found(idea_id)
    _check_saved(store)
    console.print(f"[green]✓[/green] Idea {idea.id} is now [bold]{idea.stage.value}[/bold]")


@app.command()
def notes(
    idea_id: str = typer.Argument(..., help="Idea id"),
    text: str = typer.Argument(..., help="Replacement notes"),
) -> None:
    """Replace an idea's notes."""
    store = _open_store()
    idea = store.update_notes(idea_id, text)
    if idea is None:
        idea_not_found(idea_id)
    _check_saved(store)
    console.print(f"[green]✓[/green] Updated notes for idea {idea.id}")


@app.command()
def graduate(idea_id: str = typer.Argument(..., help="Idea id")) -> None:
    """Mark an idea ready to become its own project."""
    store = _open_store()
    idea = store.graduate(idea_id)
    if idea is None:
        idea_not_found(idea_id)
    _check_saved(store)
    console.print(f"[green]✓[/green] Idea {idea.id} graduated: {idea.title}")


@app.command()
def delete(idea_id: str = typer.Argument(..., help="Idea id")) -> None:
    """
    Delete an idea.

    Deleting an id that does not exist does nothing.
    """
    store = _open_store()
    if store.delete(idea_id):
        _check_saved(store)
        console.print(f"[green]✓[/green] Deleted idea {idea_id}")
    else:
        console.print(f"[dim]No idea {idea_id}; nothing deleted.[/dim]")


@app.command()
def export(
    output_dir: Path = typer.Option(
        Path("."),
        "--output",
        "-o",
        help="Directory to write incubator-YYYY-MM-DD.json into",
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print the snapshot instead"),
) -> None:
    """Export the whole incubator as a JSON snapshot."""
    store = _open_store()
    if stdout:
        typer.echo(store.export())
        return
    try:
        path = store.export_to(output_dir)
    except OSError as e:
        fail("Export failed", reason=str(e), code=ExitCode.GENERAL_ERROR)
    console.print(f"[green]✓[/green] Exported {len(store.ideas)} idea(s) to {path}")
