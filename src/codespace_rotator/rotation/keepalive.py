"""Keep-alive scheduler for a running session pair.

One synchronous loop inside the controller's run state. The schedule is
time-driven: a failed keep-alive is logged and the loop carries on with the
same budget.
"""

from dataclasses import dataclass

from structlog import get_logger

from codespace_rotator.core.retry import Sleep
from codespace_rotator.core.waits import Clock, monotonic_clock
from codespace_rotator.exceptions import GitHubError
from codespace_rotator.github.codespaces import CodespacesProvisioner, SessionPair
from codespace_rotator.rotation.constants import SECONDS_PER_HOUR
from codespace_rotator.rotation.quota import RunBudget


logger = get_logger(__name__)


@dataclass(frozen=True)
class KeepAliveReport:
    """Outcome of one keep-alive run."""

    cycles: int
    failures: int
    elapsed_seconds: float
    fired_at: tuple[float, ...] = ()


class KeepAliveScheduler:
    """Re-invokes the startup routine on both sessions at a fixed cadence."""

    def __init__(
        self,
        provisioner: CodespacesProvisioner,
        interval_seconds: float,
        min_sleep_seconds: float,
        node_gap_seconds: float,
        sleep: Sleep,
        clock: Clock = monotonic_clock,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self.provisioner = provisioner
        self.interval_seconds = interval_seconds
        self.min_sleep_seconds = min_sleep_seconds
        self.node_gap_seconds = node_gap_seconds
        self._sleep = sleep
        self._clock = clock

    def next_sleep(self, budget_seconds: float, elapsed_seconds: float) -> float:
        """Seconds until the next keep-alive: a full interval or whatever budget is left."""
        remaining = max(0.0, budget_seconds - elapsed_seconds)
        return min(self.interval_seconds, remaining)

    def _keep_alive_session(self, token: str, role: str, session_name: str) -> bool:
        try:
            output = self.provisioner.run_startup(token, session_name)
        except GitHubError as e:
            logger.warning(
                "keepalive_failed",
                role=role,
                session=session_name,
                error=e.message,
                error_type=e.error_type,
            )
            return False

        logger.info(
            "keepalive_sent",
            role=role,
            session=session_name,
            output=output.splitlines()[0] if output else "",
        )
        return True

    def fire(self, token: str, pair: SessionPair) -> int:
        """Keep-alive primary, then secondary. Returns the number of failures."""
        failures = 0
        for position, (role, session_name) in enumerate(pair):
            if position:
                self._sleep(self.node_gap_seconds)
            if not self._keep_alive_session(token, role, session_name):
                failures += 1
        return failures

    def run(self, token: str, pair: SessionPair, budget: RunBudget) -> KeepAliveReport:
        """Keep ``pair`` alive until ``budget`` is spent.

        Ends without firing once less than ``min_sleep_seconds`` of budget
        remains, and never fires after the budget has fully elapsed.
        """
        start = self._clock()
        cycle = 1
        failures = 0
        fired_at: list[float] = []

        logger.info(
            "keepalive_started",
            budget_hours=round(budget.hours, 2),
            interval_hours=round(self.interval_seconds / SECONDS_PER_HOUR, 2),
            primary=pair.primary,
            secondary=pair.secondary,
        )

        while True:
            elapsed = self._clock() - start
            if elapsed >= budget.seconds:
                break

            sleep_seconds = self.next_sleep(budget.seconds, elapsed)
            if sleep_seconds < self.min_sleep_seconds:
                break

            logger.info(
                "keepalive_waiting",
                next_in_hours=round(sleep_seconds / SECONDS_PER_HOUR, 2),
            )
            self._sleep(sleep_seconds)

            elapsed = self._clock() - start
            if elapsed >= budget.seconds:
                break

            logger.info(
                "keepalive_cycle",
                cycle=cycle,
                elapsed_hours=round(elapsed / SECONDS_PER_HOUR, 2),
                remaining_hours=round((budget.seconds - elapsed) / SECONDS_PER_HOUR, 2),
            )
            failures += self.fire(token, pair)
            fired_at.append(elapsed)
            cycle += 1

        elapsed = self._clock() - start
        logger.info(
            "keepalive_finished",
            cycles=cycle - 1,
            failures=failures,
            elapsed_hours=round(elapsed / SECONDS_PER_HOUR, 2),
        )
        return KeepAliveReport(
            cycles=cycle - 1,
            failures=failures,
            elapsed_seconds=elapsed,
            fired_at=tuple(fired_at),
        )
