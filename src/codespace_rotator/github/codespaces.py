"""Codespaces provisioner: identity, session pair discovery and startup.

Sessions are matched by display name rather than codespace name, so the pair
for an account is found again after a restart and ``ensure_pair`` is
idempotent.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from urllib.parse import quote

from structlog import get_logger

from codespace_rotator.config.github import GitHubSettings
from codespace_rotator.core.retry import RetryPolicy, Sleep
from codespace_rotator.core.validators import parse_repository
from codespace_rotator.exceptions import (
    CommandError,
    DeployError,
    SessionTimeoutError,
)
from codespace_rotator.github.client import GitHubClient
from codespace_rotator.github.models import (
    Codespace,
    CodespaceList,
    CodespaceState,
    GitHubUser,
)
from codespace_rotator.github.remote import RemoteShell


logger = get_logger(__name__)

READY_PROBE_COMMAND = "echo 'ready'"
READY_PROBE_MARKER = "ready"

# Largest page size the codespaces listing accepts
LIST_PAGE_SIZE = 100


@dataclass(frozen=True)
class SessionPair:
    """The two named sessions owned by one account."""

    primary: str
    secondary: str

    def __iter__(self) -> Iterator[tuple[str, str]]:
        yield ("primary", self.primary)
        yield ("secondary", self.secondary)


class _NotReady(Exception):
    """Internal: a readiness attempt did not complete; retried by the polling policy."""

    def __init__(self, session_name: str, reason: str) -> None:
        super().__init__(f"{session_name}: {reason}")
        self.reason = reason


class CodespacesProvisioner:
    """Provisions and drives the primary/secondary codespace pair for an account."""

    def __init__(
        self,
        client: GitHubClient,
        remote: RemoteShell,
        settings: GitHubSettings,
        sleep: Sleep,
    ) -> None:
        self.client = client
        self.remote = remote
        self.settings = settings
        self._sleep = sleep
        self._ready_policy = RetryPolicy(
            operation="await_ready",
            retry_on=(_NotReady, CommandError),
            max_attempts=settings.ready_attempts,
            delay_seconds=settings.ready_delay_seconds,
        )

    # --- Identity ---

    def identify(self, token: str) -> str:
        """Resolve the login owning ``token``.

        Raises:
            AuthError: The token was rejected
            CommandError: Transient failure
        """
        return self.client.get_model(token, "/user", GitHubUser).login

    # --- Session discovery and creation ---

    def _list_page(self, token: str, page: int) -> CodespaceList:
        return self.client.get_model(
            token,
            "/user/codespaces",
            CodespaceList,
            params={"per_page": LIST_PAGE_SIZE, "page": page},
        )

    def list_sessions(self, token: str) -> CodespaceList:
        """All codespaces of the account, following pages until ``total_count`` is reached."""
        listing = self._list_page(token, 1)
        codespaces = list(listing.codespaces)
        page = 1
        while listing.codespaces and len(codespaces) < listing.total_count:
            page += 1
            listing = self._list_page(token, page)
            codespaces.extend(listing.codespaces)
        return CodespaceList(total_count=len(codespaces), codespaces=codespaces)

    def get_session(self, token: str, session_name: str) -> Codespace:
        return self.client.get_model(
            token, f"/user/codespaces/{quote(session_name)}", Codespace
        )

    def _create_session(
        self, token: str, repository: str, machine: str, display_name: str
    ) -> str:
        owner, name = parse_repository(repository)
        try:
            created = self.client.post_model(
                token,
                f"/repos/{owner}/{name}/codespaces",
                Codespace,
                json={
                    "machine": machine,
                    "display_name": display_name,
                    "idle_timeout_minutes": self.settings.idle_timeout_minutes,
                },
            )
        except CommandError as e:
            raise DeployError(
                f"Failed to create '{display_name}': {e.message}",
                status_code=e.status_code,
                details={"repository": repository, "display_name": display_name},
            ) from e

        if not created.name.strip():
            raise DeployError(
                f"Creating '{display_name}' returned no codespace name",
                details={"repository": repository, "display_name": display_name},
            )
        return created.name

    def _find_or_create(
        self,
        token: str,
        repository: str,
        existing: CodespaceList,
        display_name: str,
        machine: str,
    ) -> str:
        found = existing.find_by_display_name(display_name)
        if found is not None:
            logger.info(
                "session_found",
                display_name=display_name,
                session=found.name,
                state=found.state.value,
            )
            return found.name

        logger.info("session_creating", display_name=display_name, machine=machine)
        name = self._create_session(token, repository, machine, display_name)
        logger.info("session_created", display_name=display_name, session=name)
        return name

    def ensure_pair(self, token: str, repository: str) -> SessionPair:
        """Find the account's primary and secondary sessions, creating missing ones.

        Raises:
            DeployError: Repository is malformed or creation failed
            AuthError: The token was rejected
            CommandError: Listing sessions failed
        """
        try:
            parse_repository(repository)
        except ValueError as e:
            raise DeployError(str(e), details={"repository": repository}) from e

        existing = self.list_sessions(token)
        primary = self._find_or_create(
            token,
            repository,
            existing,
            self.settings.primary_display_name,
            self.settings.primary_machine,
        )
        secondary = self._find_or_create(
            token,
            repository,
            existing,
            self.settings.secondary_display_name,
            self.settings.secondary_machine,
        )
        return SessionPair(primary=primary, secondary=secondary)

    # --- Liveness and startup ---

    def is_available(self, token: str, session_name: str) -> bool:
        """Point-in-time liveness probe.

        Transient failures read as "not available"; rejected credentials propagate.
        """
        try:
            return self.get_session(token, session_name).is_available
        except CommandError as e:
            logger.info("session_probe_failed", session=session_name, error=e.message)
            return False

    def _ready_attempt(self, token: str, session_name: str) -> str:
        session = self.get_session(token, session_name)

        if session.state.is_stopped:
            logger.info("session_starting", session=session_name, state=session.state.value)
            self.client.request(
                token, "POST", f"/user/codespaces/{quote(session_name)}/start"
            )
            raise _NotReady(session_name, f"state {session.state.value}, start requested")

        if session.state is not CodespaceState.AVAILABLE:
            raise _NotReady(session_name, f"state {session.state.value}")

        probe = self.exec_on(token, session_name, READY_PROBE_COMMAND)
        if READY_PROBE_MARKER not in probe:
            raise _NotReady(session_name, "remote shell not ready")

        logger.info("session_ssh_ready", session=session_name)
        return self.run_startup(token, session_name)

    def await_ready(self, token: str, session_name: str) -> None:
        """Wait for ``session_name`` to become reachable, then invoke its startup routine.

        Returns once the startup routine has been invoked, not once the workload
        is healthy.

        Raises:
            SessionTimeoutError: Readiness attempts exhausted
            AuthError: The token was rejected
        """
        try:
            output = self._ready_policy.call(
                self._ready_attempt,
                token,
                session_name,
                sleep=self._sleep,
                log_context={"session": session_name},
            )
        except (_NotReady, CommandError) as e:
            raise SessionTimeoutError(
                session_name, self.settings.ready_attempts
            ) from e

        logger.info(
            "session_startup_invoked",
            session=session_name,
            output=output.splitlines()[0] if output else "",
        )

    def start_pair(self, token: str, pair: SessionPair) -> None:
        """Bring up primary then secondary, serially."""
        self.await_ready(token, pair.primary)
        self._sleep(self.settings.pair_start_gap_seconds)
        self.await_ready(token, pair.secondary)

    # --- Remote commands ---

    def exec_on(self, token: str, session_name: str, command: str) -> str:
        return self.remote.run(token, session_name, command)

    def run_startup(self, token: str, session_name: str) -> str:
        return self.exec_on(token, session_name, self.settings.startup_command)
