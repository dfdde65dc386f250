"""
Shared setup for CLI commands: logging, config and the sync client.
"""

import logging
import sys

from rich.console import Console

from planner.cli.errors import remote_unavailable
from planner.core.config import PlannerConfig, load_config
from planner.core.remote import Disconnected, SyncClient, get_sync_client

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the CLI.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def get_config() -> PlannerConfig:
    return load_config()


def connect_client(config: PlannerConfig | None = None) -> SyncClient:
    """
    The process-wide sync client, connected.

    Raises:
        typer.Exit: If the remote store cannot be reached
    """
    config = config or get_config()
    client = get_sync_client(config)
    if not client.is_ready and not client.connect():
        state = client.state
        remote_unavailable(state.error if isinstance(state, Disconnected) else None)

    if not config.remote.database_url:
        console.print(
            "[dim]No remote database configured; using an in-memory store "
            "(changes last for this process only).[/dim]"
        )
    return client
