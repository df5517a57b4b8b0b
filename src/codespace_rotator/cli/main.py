"""Command-line entry point.

    codespace-rotator OWNER/REPO   run the rotation loop
    codespace-rotator status       show persisted progress and token count
    codespace-rotator verify       probe the recorded sessions
"""

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from codespace_rotator import __version__
from codespace_rotator.cli.commands.run import run_rotation
from codespace_rotator.cli.commands.status import show_status, verify_sessions
from codespace_rotator.config.settings import Settings, load_settings
from codespace_rotator.core.logging import configure_logging
from codespace_rotator.core.validators import is_repository_slug
from codespace_rotator.exceptions import ConfigError


USAGE = """Usage: codespace-rotator OWNER/REPO

Commands:
   codespace-rotator status   -> Show status
   codespace-rotator verify   -> Verify nodes"""

COMMANDS = ("status", "verify")

USAGE_EXIT_CODE = 2

app = typer.Typer(
    name="codespace-rotator",
    help="Keep two codespaces alive by rotating across GitHub accounts.",
    add_completion=False,
)

err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"codespace-rotator {__version__}")
        raise typer.Exit()


def usage_error(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)
    err_console.print(USAGE, highlight=False, markup=False)
    return typer.Exit(code=USAGE_EXIT_CODE)


def _extract_config_section(cli_args: dict[str, Any], keys: list[str]) -> dict[str, Any]:
    """Extract non-None values for specified keys from CLI args."""
    return {key: cli_args[key] for key in keys if cli_args.get(key) is not None}


def get_cli_overrides_from_args(**cli_args: Any) -> dict[str, Any]:
    """Extract non-None CLI arguments as configuration overrides."""
    overrides: dict[str, Any] = {}

    paths = _extract_config_section(cli_args, ["tokens_file", "state_file"])
    if paths:
        overrides["paths"] = paths

    logging_settings = _extract_config_section(cli_args, ["json_logs"])
    if cli_args.get("log_level") is not None:
        logging_settings["level"] = cli_args["log_level"]
    if logging_settings:
        overrides["logging"] = logging_settings

    return overrides


def _load(config: Path | None, overrides: dict[str, Any]) -> Settings:
    try:
        settings = load_settings(config_path=config, overrides=overrides)
    except ConfigError as e:
        err_console.print(f"[red]FATAL:[/red] {e.message}", highlight=False)
        raise typer.Exit(code=1) from e
    configure_logging(settings.logging.level, settings.logging.json_logs)
    return settings


@app.command()
def rotate(
    target: Annotated[
        str | None,
        typer.Argument(
            help="Target repository as OWNER/REPO, or one of: status, verify",
            show_default=False,
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a TOML configuration file"),
    ] = None,
    tokens_file: Annotated[
        Path | None,
        typer.Option("--tokens-file", help="Path to tokens.json"),
    ] = None,
    state_file: Annotated[
        Path | None,
        typer.Option("--state-file", help="Path to state.json"),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
    json_logs: Annotated[
        bool | None,
        typer.Option("--json-logs/--console-logs", help="Log output format"),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Rotate GitHub accounts to keep a primary and a secondary codespace running."""
    if target is None:
        raise usage_error("target repository not given")

    if target not in COMMANDS and not is_repository_slug(target):
        raise usage_error(f"'{target}' is neither a command nor an OWNER/REPO")

    overrides = get_cli_overrides_from_args(
        tokens_file=tokens_file,
        state_file=state_file,
        log_level=log_level,
        json_logs=json_logs,
    )
    settings = _load(config, overrides)

    if target == "status":
        show_status(settings)
    elif target == "verify":
        verify_sessions(settings)
    else:
        try:
            run_rotation(settings, target)
        except ConfigError as e:
            err_console.print(f"[red]FATAL:[/red] {e.message}", highlight=False)
            raise typer.Exit(code=1) from e


def app_main() -> None:
    """Console script entry point."""
    app()
