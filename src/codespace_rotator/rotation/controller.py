"""Rotation controller: the admission-and-rotation state machine.

Each visit walks one account through

    SelectAccount -> Authenticate -> CheckQuota -> Provision -> Run -> Advance

and the controller loops over visits until shutdown is requested. Auth and
quota failures advance to the next account; provisioning failures are retried
on the same account after a fixed backoff. Progress is persisted after every
transition so a restart resumes at the last recorded account.
"""

from enum import StrEnum

import structlog
from structlog import get_logger

from codespace_rotator.config.rotation import RotationSettings
from codespace_rotator.core.retry import RetryPolicy, Sleep
from codespace_rotator.core.waits import ShutdownRequested
from codespace_rotator.exceptions import (
    AuthError,
    CommandError,
    DeployError,
    RotatorError,
    SessionTimeoutError,
)
from codespace_rotator.github.codespaces import CodespacesProvisioner, SessionPair
from codespace_rotator.rotation.accounts import Credential, CredentialStore
from codespace_rotator.rotation.keepalive import KeepAliveScheduler
from codespace_rotator.rotation.progress import ProgressRecord, ProgressStore
from codespace_rotator.rotation.quota import QuotaOracle, RunBudget, compute_run_budget


logger = get_logger(__name__)


class VisitOutcome(StrEnum):
    """How a single account visit ended."""

    SKIPPED_AUTH = "skipped_auth"
    SKIPPED_ERROR = "skipped_error"
    SKIPPED_QUOTA = "skipped_quota"
    COMPLETED = "completed"


class RotationController:
    """Drives the account rotation loop.

    Attributes:
        account_index: Position of the account being visited
        run_budget: Budget of the current or most recent run
        cycle_count: Keep-alive cycles completed in the most recent run
        rotations: Full passes over the credential list since start
    """

    def __init__(
        self,
        credentials: CredentialStore,
        progress_store: ProgressStore,
        provisioner: CodespacesProvisioner,
        oracle: QuotaOracle,
        keepalive: KeepAliveScheduler,
        settings: RotationSettings,
        sleep: Sleep,
    ) -> None:
        self.credentials = credentials
        self.progress_store = progress_store
        self.provisioner = provisioner
        self.oracle = oracle
        self.keepalive = keepalive
        self.settings = settings
        self._sleep = sleep

        self.account_index = 0
        self.run_budget: RunBudget | None = None
        self.cycle_count = 0
        self.rotations = 0
        self._record = ProgressRecord()

        self._auth_policy = RetryPolicy(
            operation="identify",
            retry_on=(CommandError,),
            max_attempts=settings.auth_attempts,
            delay_seconds=settings.auth_retry_delay_seconds,
        )
        self._provision_policy = RetryPolicy(
            operation="provision",
            retry_on=(DeployError, SessionTimeoutError, CommandError),
            max_attempts=None,
            delay_seconds=settings.provision_backoff_seconds,
        )

    @property
    def account_count(self) -> int:
        return len(self.credentials)

    @property
    def record(self) -> ProgressRecord:
        """Last record handed to the progress store."""
        return self._record

    # --- Progress ---

    def resume(self) -> ProgressRecord:
        """Load persisted progress and position the controller on it."""
        record = self.progress_store.load()
        self._record = record
        self.account_index = record.current_account_index % self.account_count
        if record.current_account_index:
            logger.info(
                "rotation_resumed",
                account_index=self.account_index,
                account_count=self.account_count,
            )
        return record

    def _persist(self, record: ProgressRecord) -> None:
        self._record = record
        if not self.progress_store.save(record):
            logger.error("progress_not_persisted", **record.to_dict())

    def advance(self) -> int:
        """Move to the next account, wrapping at the end, and persist the new index."""
        self.account_index = (self.account_index + 1) % self.account_count
        self._persist(self._record.with_index(self.account_index))

        if self.account_index == 0:
            self.rotations += 1
            logger.info(
                "full_rotation_complete",
                rotations=self.rotations,
                account_count=self.account_count,
            )
        return self.account_index

    def _skip(self) -> None:
        self.advance()
        self._sleep(self.settings.account_switch_delay_seconds)

    # --- States ---

    def _authenticate(self, credential: Credential) -> str:
        return self._auth_policy.call(
            self.provisioner.identify,
            credential.token,
            sleep=self._sleep,
            log_context={"account_index": credential.index},
        )

    def _provision_attempt(self, credential: Credential, repository: str) -> SessionPair:
        pair = self.provisioner.ensure_pair(credential.token, repository)
        self.provisioner.start_pair(credential.token, pair)
        return pair

    def _provision(self, credential: Credential, repository: str) -> SessionPair:
        return self._provision_policy.call(
            self._provision_attempt,
            credential,
            repository,
            sleep=self._sleep,
            log_context={"account_index": credential.index, "repository": repository},
        )

    def run_once(self, repository: str) -> VisitOutcome:
        """Visit the current account once and advance past it.

        Provisioning failures are retried on this account until they succeed
        or shutdown is requested.
        """
        credential = self.credentials.get(self.account_index)
        structlog.contextvars.bind_contextvars(account_index=credential.index)
        try:
            return self._visit(credential, repository)
        finally:
            structlog.contextvars.unbind_contextvars("account_index")

    def _visit(self, credential: Credential, repository: str) -> VisitOutcome:
        logger.info(
            "account_selected",
            position=credential.index + 1,
            account_count=self.account_count,
        )

        try:
            username = self._authenticate(credential)
        except AuthError as e:
            logger.warning(
                "account_auth_rejected",
                operation="identify",
                error=e.message,
                error_type=e.error_type,
            )
            self._skip()
            return VisitOutcome.SKIPPED_AUTH
        except CommandError as e:
            logger.warning(
                "account_identify_failed",
                operation="identify",
                error=e.message,
                error_type=e.error_type,
            )
            self._skip()
            return VisitOutcome.SKIPPED_ERROR

        logger.info("account_authenticated", username=username)

        snapshot = self.oracle.check(credential.token, username)
        if not snapshot.is_admitted:
            logger.warning(
                "account_quota_insufficient",
                operation="check_quota",
                hours_remaining=round(snapshot.hours_remaining, 2),
                is_fallback=snapshot.is_fallback,
            )
            self._skip()
            return VisitOutcome.SKIPPED_QUOTA

        try:
            budget = compute_run_budget(
                snapshot,
                max_run_hours=self.settings.max_run_hours,
                safety_buffer_minutes=self.settings.safety_buffer_minutes,
            )
        except ValueError as e:
            logger.warning("account_budget_exhausted", operation="check_quota", error=str(e))
            self._skip()
            return VisitOutcome.SKIPPED_QUOTA

        try:
            pair = self._provision(credential, repository)
        except AuthError as e:
            logger.warning(
                "account_auth_rejected",
                operation="provision",
                error=e.message,
                error_type=e.error_type,
            )
            self._skip()
            return VisitOutcome.SKIPPED_AUTH

        self._persist(
            self._record.with_sessions(self.account_index, pair.primary, pair.secondary)
        )
        self.run_budget = budget
        logger.info(
            "deployment_ready",
            username=username,
            primary=pair.primary,
            secondary=pair.secondary,
            hours_remaining=round(snapshot.hours_remaining, 2),
            budget_hours=round(budget.hours, 2),
        )

        report = self.keepalive.run(credential.token, pair, budget)
        self.cycle_count = report.cycles
        logger.info(
            "run_complete",
            username=username,
            cycles=report.cycles,
            failures=report.failures,
            budget_hours=round(budget.hours, 2),
        )

        self.advance()
        return VisitOutcome.COMPLETED

    def run_forever(self, repository: str) -> None:
        """Rotate until shutdown is requested.

        Per-account failures never end the loop; only ``ShutdownRequested``
        does, and progress is already persisted at that point.
        """
        self.resume()
        logger.info(
            "rotation_started",
            repository=repository,
            account_count=self.account_count,
            account_index=self.account_index,
        )

        try:
            while True:
                try:
                    self.run_once(repository)
                except RotatorError as e:
                    logger.exception(
                        "rotation_visit_failed",
                        account_index=self.account_index,
                        error=e.message,
                        error_type=e.error_type,
                    )
                    self._sleep(self.settings.provision_backoff_seconds)
        except ShutdownRequested:
            logger.info(
                "rotation_stopped",
                account_index=self.account_index,
                rotations=self.rotations,
            )
