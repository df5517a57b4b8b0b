"""Rich rendering helpers for the status and verify commands."""

from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from codespace_rotator.rotation.progress import ProgressRecord


def create_progress_table(
    record: ProgressRecord,
    state_file: Path,
    token_count: int | None,
) -> Table:
    """Create a Rich table describing the persisted rotation position.

    Args:
        record: Persisted progress record
        state_file: Where the record was read from
        token_count: Number of loaded tokens, None if they could not be loaded

    Returns:
        Formatted Rich table with progress details
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        title="Rotation Status",
        title_style="bold white",
    )
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("State File", str(state_file))
    table.add_row("Token Index", str(record.current_account_index))
    table.add_row("Primary", record.current_primary_name or "[dim]-[/dim]")
    table.add_row("Secondary", record.current_secondary_name or "[dim]-[/dim]")
    table.add_row(
        "Tokens",
        f"{token_count} tokens" if token_count is not None else "[red]unavailable[/red]",
    )
    return table


def display_session_probe(
    console: Console,
    role: str,
    session_name: str,
    available: bool | None,
    error: str | None = None,
) -> None:
    """Print the outcome of one liveness probe.

    ``available`` is None when the probe itself failed.
    """
    console.print(f"\n[bold]Verifying {role}:[/bold] {session_name}")
    if available is None:
        console.print(f"   [red]Error:[/red] {error}")
    elif available:
        console.print("   [green]RUNNING & READY[/green]")
    else:
        console.print("   [yellow]NOT READY or STOPPED[/yellow]")
