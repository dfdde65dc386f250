"""
The ``planner`` command: shared attention items, the local idea incubator
and the cross-tracker board, one Typer sub-app each.
"""

import typer
from rich.console import Console

from planner import __version__
from planner.cli import attention, board, ideas, item
from planner.cli.common import setup_logging
from planner.core.config.env import load_layered_env

app = typer.Typer(
    name="planner",
    help="Personal command centre: ideas, attention items and tracker boards",
    no_args_is_help=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level to stderr"),
) -> None:
    """
    Solution Planner: one place for everything in flight.

    \b
        planner ideas add "Sauna trailer"       capture an idea
        planner attention add "Fix the gate"    flag something shared
        planner board                           today across all trackers

    Settings live in .planner.json and ~/.config/planner/config.json; the
    PLANNER_* variables (also read from .env files) override both.
    """
    load_layered_env()
    setup_logging(debug)
    ctx.obj = {"debug": debug}


app.add_typer(attention.app, name="attention", rich_help_panel="Shared items")
app.add_typer(item.app, name="item", rich_help_panel="Shared items")
app.add_typer(ideas.app, name="ideas", rich_help_panel="Incubator")
app.add_typer(board.app, name="board", rich_help_panel="Views")


@app.command()
def version() -> None:
    """Print the installed version."""
    console.print(f"planner version {__version__}")


def cli_main() -> None:
    app()


__all__ = ["app", "cli_main"]
