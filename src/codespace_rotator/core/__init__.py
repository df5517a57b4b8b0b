"""Core helpers shared across the rotator."""

from codespace_rotator.core.logging import configure_logging
from codespace_rotator.core.retry import RetryPolicy
from codespace_rotator.core.validators import is_repository_slug, parse_repository
from codespace_rotator.core.waits import (
    InterruptibleSleeper,
    ShutdownRequested,
    install_signal_handlers,
    monotonic_clock,
)


__all__ = [
    "InterruptibleSleeper",
    "RetryPolicy",
    "ShutdownRequested",
    "configure_logging",
    "install_signal_handlers",
    "is_repository_slug",
    "monotonic_clock",
    "parse_repository",
]
