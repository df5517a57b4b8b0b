"""Settings configuration for the codespace rotator."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codespace_rotator.config.discovery import find_toml_config_file
from codespace_rotator.exceptions import ConfigError

from .github import GitHubSettings
from .rotation import KeepAliveSettings, QuotaSettings, RotationSettings
from .runtime import LoggingSettings, PathSettings


__all__ = [
    "Settings",
    "load_settings",
]


def _coerce_settings(value: Any, settings_class: type) -> Any:
    """Coerce value to settings class instance.

    Handles: None → default, dict → instance, passthrough existing instances.
    """
    if value is None:
        return settings_class()
    if isinstance(value, settings_class):
        return value
    if isinstance(value, dict):
        return settings_class(**value)
    if hasattr(value, "model_dump"):
        return settings_class(**value.model_dump())
    return value


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings(BaseSettings):
    """
    Configuration settings for the codespace rotator.

    Settings are loaded from environment variables, .env files, and TOML configuration files.
    TOML configuration files are searched in the following order:
    1. .codespace_rotator.toml in current directory
    2. codespace_rotator.toml in git repository root
    3. config.toml in user config directory/codespace_rotator/ (platform-specific)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    paths: PathSettings = Field(
        default_factory=PathSettings,
        description="Token and state file locations",
    )

    quota: QuotaSettings = Field(
        default_factory=QuotaSettings,
        description="Quota admission policy",
    )

    rotation: RotationSettings = Field(
        default_factory=RotationSettings,
        description="Rotation controller timing and run budget limits",
    )

    keepalive: KeepAliveSettings = Field(
        default_factory=KeepAliveSettings,
        description="Keep-alive cadence",
    )

    github: GitHubSettings = Field(
        default_factory=GitHubSettings,
        description="GitHub API and Codespaces configuration",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Structured logging output",
    )

    @field_validator("paths", mode="before")
    @classmethod
    def validate_paths(cls, v: Any) -> Any:
        return _coerce_settings(v, PathSettings)

    @field_validator("quota", mode="before")
    @classmethod
    def validate_quota(cls, v: Any) -> Any:
        return _coerce_settings(v, QuotaSettings)

    @field_validator("rotation", mode="before")
    @classmethod
    def validate_rotation(cls, v: Any) -> Any:
        return _coerce_settings(v, RotationSettings)

    @field_validator("keepalive", mode="before")
    @classmethod
    def validate_keepalive(cls, v: Any) -> Any:
        return _coerce_settings(v, KeepAliveSettings)

    @field_validator("github", mode="before")
    @classmethod
    def validate_github(cls, v: Any) -> Any:
        return _coerce_settings(v, GitHubSettings)

    @field_validator("logging", mode="before")
    @classmethod
    def validate_logging(cls, v: Any) -> Any:
        return _coerce_settings(v, LoggingSettings)

    @model_validator(mode="after")
    def check_budget_is_positive(self) -> "Settings":
        """An admitted account must always leave a positive run budget."""
        buffer_hours = self.rotation.safety_buffer_minutes / 60
        if self.quota.min_hours_required <= buffer_hours:
            raise ValueError(
                "quota.min_hours_required must exceed rotation.safety_buffer_minutes "
                f"({self.quota.min_hours_required}h <= {buffer_hours:.2f}h)"
            )
        if self.quota.fail_open and self.quota.fallback_hours < self.quota.min_hours_required:
            raise ValueError(
                "quota.fallback_hours must be at least quota.min_hours_required "
                "when quota.fail_open is enabled"
            )
        return self

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file.

        Raises:
            ValueError: If the TOML file is invalid or cannot be read
        """
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ValueError(f"Cannot read TOML config file {toml_path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls, config_path: Path | str | None = None, **kwargs: Any
    ) -> "Settings":
        """Create Settings instance from configuration file.

        Args:
            config_path: Path to configuration file. Can be:
                - None: Auto-discover config file or use CONFIG_FILE env var
                - Path or str: Use this specific config file
            **kwargs: Additional keyword arguments to override config values

        Returns:
            Settings: Configured Settings instance
        """
        if config_path is None:
            config_path_env = os.environ.get("CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()

        config_data: dict[str, Any] = {}
        if config_path and config_path.exists():
            if config_path.suffix.lower() != ".toml":
                raise ValueError(
                    f"Unsupported config file format: {config_path.suffix}. "
                    "Only TOML (.toml) files are supported."
                )
            config_data = cls.load_toml_config(config_path)
        elif config_path:
            raise ValueError(f"Config file not found: {config_path}")

        return cls(**_deep_merge(config_data, kwargs))


def load_settings(
    config_path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings, converting every failure into ``ConfigError``."""
    try:
        return Settings.from_config(config_path=config_path, **(overrides or {}))
    except (OSError, ValueError, ValidationError) as e:
        raise ConfigError(f"Failed to load configuration: {e}") from e
