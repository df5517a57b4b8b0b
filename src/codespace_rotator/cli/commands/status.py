"""Read-only inspection commands: status and verify.

Neither command writes the progress file.
"""

import typer
from rich.console import Console
from structlog import get_logger

from codespace_rotator.cli.display_helpers import (
    create_progress_table,
    display_session_probe,
)
from codespace_rotator.config.settings import Settings
from codespace_rotator.core.waits import InterruptibleSleeper
from codespace_rotator.exceptions import AuthError, ConfigError
from codespace_rotator.github.client import GitHubClient
from codespace_rotator.rotation.accounts import load_credentials
from codespace_rotator.rotation.progress import ProgressStore
from codespace_rotator.rotation.startup import build_provisioner


console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def show_status(settings: Settings) -> None:
    """Print the persisted progress record and the number of tokens."""
    store = ProgressStore(settings.paths.state_file)

    token_count: int | None = None
    try:
        token_count = len(load_credentials(settings.paths.tokens_file))
    except ConfigError as e:
        err_console.print(f"[red]Error loading tokens:[/red] {e.message}")

    if not store.exists():
        console.print("[yellow]No state file found[/yellow]")
        if token_count is not None:
            console.print(f"Tokens available: {token_count}")
        return

    record = store.load()
    console.print(create_progress_table(record, store.path, token_count))


def verify_sessions(settings: Settings) -> None:
    """Probe the two sessions recorded for the persisted account index.

    Raises:
        typer.Exit: With code 1 when there is nothing to verify
    """
    store = ProgressStore(settings.paths.state_file)
    if not store.exists():
        err_console.print("[red]No state file found[/red]")
        raise typer.Exit(code=1)

    try:
        credentials = load_credentials(settings.paths.tokens_file)
    except ConfigError as e:
        err_console.print(f"[red]Error loading tokens:[/red] {e.message}")
        raise typer.Exit(code=1) from e

    record = store.load()
    if record.current_account_index >= len(credentials):
        err_console.print(
            f"[red]Invalid token index {record.current_account_index}[/red] "
            f"for {len(credentials)} tokens"
        )
        raise typer.Exit(code=1)

    if not record.has_sessions:
        console.print(
            f"Token index {record.current_account_index}: no sessions recorded yet"
        )
        return

    token = credentials[record.current_account_index].token
    console.print(f"Token Index: {record.current_account_index}")

    with GitHubClient(settings.github) as client:
        provisioner = build_provisioner(settings, client, InterruptibleSleeper())
        for role, session_name in (
            ("primary", record.current_primary_name),
            ("secondary", record.current_secondary_name),
        ):
            if not session_name:
                continue
            try:
                available: bool | None = provisioner.is_available(token, session_name)
                error = None
            except AuthError as e:
                available, error = None, e.message
            logger.debug("session_verified", role=role, session=session_name, available=available)
            display_session_probe(console, role, session_name, available, error)
