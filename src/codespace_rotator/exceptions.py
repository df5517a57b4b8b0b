"""Consolidated exception hierarchy for the codespace rotator.

All exceptions use proper exception chaining with the `from` keyword.
Error types use StrEnum so log records carry a stable classification.
"""

from enum import StrEnum
from typing import Any


class ErrorType(StrEnum):
    """Error type codes attached to every rotator error."""

    CONFIGURATION = "configuration_error"
    AUTHENTICATION = "authentication_error"
    COMMAND = "command_error"
    DEPLOY = "deploy_error"
    TIMEOUT = "timeout_error"
    TRANSPORT = "transport_error"
    INTERNAL = "internal_error"


# ============================================================================
# Base Exceptions
# ============================================================================


class RotatorError(Exception):
    """Base exception for all rotator errors.

    Carries a classification and structured details so call sites can log
    failures without string formatting.
    """

    error_type: ErrorType = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigError(RotatorError):
    """Configuration is missing, unreadable or invalid.

    Fatal: raised only during startup, before the rotation loop begins.
    """

    error_type = ErrorType.CONFIGURATION


# ============================================================================
# GitHub Provisioning Errors
# ============================================================================


class GitHubError(RotatorError):
    """Base error for calls against the GitHub API or the gh CLI."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class AuthError(GitHubError):
    """The credential was rejected.

    The account is unusable for the rest of this rotation.
    """

    error_type = ErrorType.AUTHENTICATION


class CommandError(GitHubError):
    """A transient API or remote command failure."""

    error_type = ErrorType.COMMAND


class DeployError(GitHubError):
    """Codespace creation did not yield a usable session."""

    error_type = ErrorType.DEPLOY


class SessionTimeoutError(GitHubError):
    """A session did not become ready within the bounded polling window."""

    error_type = ErrorType.TIMEOUT

    def __init__(self, session_name: str, attempts: int) -> None:
        super().__init__(
            f"Session '{session_name}' not ready after {attempts} attempts",
            details={"session": session_name, "attempts": attempts},
        )
        self.session_name = session_name
        self.attempts = attempts


# ============================================================================
# Billing Errors
# ============================================================================


class TransportError(RotatorError):
    """Billing usage could not be fetched or decoded.

    Never surfaced past the quota oracle: converted into a fallback snapshot.
    """

    error_type = ErrorType.TRANSPORT


__all__ = [
    # Enums
    "ErrorType",
    # Base
    "RotatorError",
    # Configuration
    "ConfigError",
    # GitHub
    "GitHubError",
    "AuthError",
    "CommandError",
    "DeployError",
    "SessionTimeoutError",
    # Billing
    "TransportError",
]
