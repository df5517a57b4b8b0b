"""Interruptible waits for the rotation loop.

Every suspension in the rotator goes through an ``InterruptibleSleeper`` so a
shutdown signal can end a multi-hour keep-alive sleep without a hard kill.
"""

from __future__ import annotations

import signal
import threading
import time
from collections.abc import Callable
from types import FrameType

from structlog import get_logger


logger = get_logger(__name__)

Clock = Callable[[], float]


class ShutdownRequested(Exception):
    """Raised from a wait once shutdown has been requested."""


class InterruptibleSleeper:
    """Bounded sleeps that return early when shutdown is requested."""

    def __init__(self) -> None:
        self._stop = threading.Event()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        """Wake any pending sleep and make every later sleep fail fast."""
        self._stop.set()

    def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless shutdown is requested.

        Raises:
            ShutdownRequested: If shutdown was requested before or during the wait
        """
        if self._stop.is_set():
            raise ShutdownRequested()
        if seconds > 0 and self._stop.wait(timeout=seconds):
            raise ShutdownRequested()

    def __call__(self, seconds: float) -> None:
        self.sleep(seconds)


def monotonic_clock() -> float:
    return time.monotonic()


def install_signal_handlers(sleeper: InterruptibleSleeper) -> None:
    """Route SIGINT and SIGTERM to ``sleeper.request_stop``."""

    def _handle(signum: int, frame: FrameType | None) -> None:
        logger.warning("shutdown_signal_received", signal=signal.Signals(signum).name)
        sleeper.request_stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)
