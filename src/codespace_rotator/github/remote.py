"""Remote command channel into a codespace via ``gh codespace ssh``.

The REST API has no exec endpoint, so remote commands go through the gh CLI
with the account token passed as ``GH_TOKEN``.
"""

import os
import re
import subprocess  # nosec B404 - fixed gh invocation, arguments passed as a list

from structlog import get_logger

from codespace_rotator.config.github import GitHubSettings
from codespace_rotator.exceptions import AuthError, CommandError


logger = get_logger(__name__)

# gh reports rejected tokens only on stderr
AUTH_FAILURE_PATTERNS = [
    re.compile(r"bad credentials", re.IGNORECASE),
    re.compile(r"authentication required", re.IGNORECASE),
    re.compile(r"HTTP 401"),
]


def is_auth_failure(stderr: str) -> bool:
    return any(pattern.search(stderr) for pattern in AUTH_FAILURE_PATTERNS)


class RemoteShell:
    """Runs one command inside a codespace and returns its stdout."""

    def __init__(self, settings: GitHubSettings) -> None:
        self.settings = settings

    def build_args(self, session_name: str, command: str) -> list[str]:
        return [
            self.settings.gh_binary,
            "codespace",
            "ssh",
            "-c",
            session_name,
            "--",
            command,
        ]

    def run(self, token: str, session_name: str, command: str) -> str:
        """Execute ``command`` in ``session_name``.

        Raises:
            AuthError: gh rejected the token
            CommandError: gh could not be spawned, timed out or exited non-zero
        """
        args = self.build_args(session_name, command)
        env = {**os.environ, "GH_TOKEN": token}

        try:
            # nosec B603 - arguments passed as a list, no shell
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.settings.ssh_timeout_seconds,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(
                f"gh CLI not found: {self.settings.gh_binary}",
                details={"session": session_name},
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Remote command timed out after {self.settings.ssh_timeout_seconds}s",
                details={"session": session_name},
            ) from e
        except OSError as e:
            # e.g. PermissionError on a non-executable binary, ENOMEM on fork
            raise CommandError(
                f"Cannot run {self.settings.gh_binary}: {e}",
                details={"session": session_name},
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if is_auth_failure(stderr):
                raise AuthError(
                    f"Credential rejected by gh: {stderr.splitlines()[0]}",
                    details={"session": session_name},
                )
            raise CommandError(
                f"Remote command exited {result.returncode}: {stderr[:200]}",
                details={"session": session_name, "returncode": result.returncode},
            )

        return result.stdout.strip()
