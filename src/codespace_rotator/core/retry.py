"""Bounded retry policy shared by authentication, provisioning and readiness polling.

Wraps tenacity so every call site declares only what it retries on, how
often and how long to wait, and all waits go through the caller's sleeper.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from structlog import get_logger
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)


logger = get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry policy.

    Attributes:
        operation: Name used in retry log events
        retry_on: Exception types considered retryable; anything else propagates
        max_attempts: Total attempts including the first, or None for unbounded
        delay_seconds: Fixed wait between attempts
    """

    operation: str
    retry_on: tuple[type[BaseException], ...]
    max_attempts: int | None = 3
    delay_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

    def _log_retry(self, retry_state: Any, context: dict[str, Any]) -> None:
        """Log retry attempts before sleeping."""
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait_seconds = retry_state.next_action.sleep if retry_state.next_action else 0

        logger.warning(
            "operation_retry",
            operation=self.operation,
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            wait_seconds=wait_seconds,
            error=str(exc) if exc else None,
            error_class=type(exc).__name__ if exc else None,
            **context,
        )

    def call(
        self,
        fn: Callable[..., T],
        *args: Any,
        sleep: Sleep,
        log_context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> T:
        """Call ``fn`` until it succeeds, raises a non-retryable error or attempts run out.

        The last retryable exception is re-raised unchanged once attempts are
        exhausted.
        """
        context = log_context or {}
        retrying = Retrying(
            stop=(
                stop_never
                if self.max_attempts is None
                else stop_after_attempt(self.max_attempts)
            ),
            wait=wait_fixed(self.delay_seconds),
            retry=retry_if_exception_type(self.retry_on),
            sleep=sleep,
            before_sleep=lambda rs: self._log_retry(rs, context),
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)
