"""File locations and logging settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codespace_rotator.core.validators import validate_log_level


class PathSettings(BaseSettings):
    """
    Locations of the token list and the progress file.

    Settings can be configured via environment variables with PATHS__ prefix.
    """

    tokens_file: Path = Field(
        default=Path("tokens.json"),
        description="JSON file holding the ordered list of account tokens",
    )

    state_file: Path = Field(
        default=Path("state.json"),
        description="JSON file holding the persisted rotation progress",
    )

    model_config = SettingsConfigDict(
        env_prefix="PATHS__",
        case_sensitive=False,
    )

    @field_validator("tokens_file", "state_file", mode="after")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class LoggingSettings(BaseSettings):
    """
    Structured logging output.

    Settings can be configured via environment variables with LOGGING__ prefix.
    """

    level: str = Field(
        default="INFO",
        description="Root log level",
    )

    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON lines instead of console output",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOGGING__",
        case_sensitive=False,
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        return validate_log_level(v)
