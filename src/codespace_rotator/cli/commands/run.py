"""The rotation loop command."""

from rich.console import Console
from structlog import get_logger

from codespace_rotator.config.settings import Settings
from codespace_rotator.core.waits import InterruptibleSleeper, install_signal_handlers
from codespace_rotator.rotation.startup import rotator_components


console = Console()
logger = get_logger(__name__)


def run_rotation(settings: Settings, repository: str) -> None:
    """Run the rotation loop for ``repository`` until SIGINT/SIGTERM.

    Raises:
        ConfigError: If the tokens file cannot be loaded
    """
    sleeper = InterruptibleSleeper()

    with rotator_components(settings, sleeper=sleeper) as components:
        console.print(
            f"[bold cyan]Codespace rotator[/bold cyan]: {repository} "
            f"with {len(components.credentials)} tokens"
        )
        install_signal_handlers(sleeper)
        components.controller.run_forever(repository)

    logger.info("rotator_exited", repository=repository)
