"""
Error output and exit codes shared by the planner subcommands.

Every failure prints one red line, optionally followed by why it happened
and what to try next, then exits with an ``ExitCode``.
"""

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    GENERAL_ERROR = 1
    # bad id or input; fixable by the user
    USER_ERROR = 2


def print_error(problem: str, *, reason: str | None = None, hint: str | None = None) -> None:
    lines = [f"[red]Error:[/red] {problem}"]
    if reason:
        lines.append(f"[dim]{reason}[/dim]")
    if hint:
        lines.append(f"[cyan]→ Try:[/cyan] {hint}")
    console.print("\n".join(lines))


def fail(
    problem: str,
    *,
    reason: str | None = None,
    hint: str | None = None,
    code: ExitCode = ExitCode.USER_ERROR,
) -> NoReturn:
    """Print the error and leave the command with ``code``."""
    print_error(problem, reason=reason, hint=hint)
    raise typer.Exit(code)


def idea_not_found(idea_id: str) -> NoReturn:
    fail(
        f"Idea not found: {idea_id}",
        reason="The id may be wrong or the idea may have been deleted",
        hint="planner ideas  # to list ideas",
    )


def item_not_found(item_id: str) -> NoReturn:
    fail(
        f"Attention item not found: {item_id}",
        reason="It may have been deleted on another device",
        hint="planner attention  # to list active items",
    )


def remote_unavailable(detail: str | None = None) -> NoReturn:
    fail(
        "Cannot reach the remote store",
        reason=detail,
        hint="check PLANNER_DATABASE_URL and PLANNER_AUTH_TOKEN",
        code=ExitCode.GENERAL_ERROR,
    )


def warn_unsaved() -> None:
    """The change is held in memory but the local cache write failed."""
    console.print(
        "[yellow]Warning:[/yellow] the incubator could not be saved; this change may be lost"
    )
