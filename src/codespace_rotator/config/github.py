"""GitHub API and Codespaces settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# REST API version the response schemas in codespace_rotator.github.models target
GITHUB_API_VERSION = "2022-11-28"


class GitHubSettings(BaseSettings):
    """
    Configuration for the GitHub REST API and the gh CLI.

    Settings can be configured via environment variables with GITHUB__ prefix.
    """

    api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )

    api_version: str = Field(
        default=GITHUB_API_VERSION,
        description="Pinned REST API version sent as X-GitHub-Api-Version",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300.0,
        description="HTTP request timeout in seconds",
    )

    gh_binary: str = Field(
        default="gh",
        description="gh CLI executable used for the remote command channel",
    )

    ssh_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Upper bound on a single remote command",
    )

    primary_display_name: str = Field(
        default="primary-node",
        description="Display name identifying the primary codespace",
    )

    secondary_display_name: str = Field(
        default="secondary-node",
        description="Display name identifying the secondary codespace",
    )

    primary_machine: str = Field(
        default="basicLinux32gb",
        description="Machine class of the primary codespace",
    )

    secondary_machine: str = Field(
        default="standardLinux32gb",
        description="Machine class of the secondary codespace",
    )

    idle_timeout_minutes: int = Field(
        default=240,
        ge=5,
        le=240,
        description="Idle timeout requested for created codespaces",
    )

    startup_script: str = Field(
        default="/workspaces/node-blueprint/auto-start.sh",
        description="Path of the startup routine inside the codespace",
    )

    ready_attempts: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Readiness polling attempts per session",
    )

    ready_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Delay between readiness polling attempts",
    )

    pair_start_gap_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Pause between starting the primary and secondary sessions",
    )

    model_config = SettingsConfigDict(
        env_prefix="GITHUB__",
        case_sensitive=False,
    )

    @property
    def startup_command(self) -> str:
        """Remote command that runs the startup routine in a login shell."""
        return f"bash -l -c 'bash {self.startup_script}'"
