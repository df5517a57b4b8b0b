"""Quota, rotation and keep-alive policy settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuotaSettings(BaseSettings):
    """
    Admission policy applied to billing usage.

    Settings can be configured via environment variables with QUOTA__ prefix.
    """

    min_hours_required: float = Field(
        default=20.0,
        gt=0,
        description="Minimum remaining runtime (hours) for an account to be admitted",
    )

    included_core_hours: int = Field(
        default=120,
        ge=0,
        description="Monthly Codespaces allowance included with each account, in core-hours",
    )

    heavy_cost_multiplier: int = Field(
        default=2,
        ge=1,
        description="Cost multiplier of the secondary machine class relative to a 2-core machine",
    )

    fail_open: bool | None = Field(
        default=None,
        description="Admit accounts whose usage cannot be checked. Unset uses the built-in policy",
    )

    fallback_hours: float = Field(
        default=30.0,
        ge=0,
        description="Remaining hours reported by a fail-open fallback snapshot",
    )

    model_config = SettingsConfigDict(
        env_prefix="QUOTA__",
        case_sensitive=False,
    )


class RotationSettings(BaseSettings):
    """
    Rotation controller timing and run budget limits.

    Settings can be configured via environment variables with ROTATION__ prefix.
    """

    max_run_hours: float = Field(
        default=20.0,
        gt=0,
        description="Ceiling on a single continuous run, forcing periodic quota re-evaluation",
    )

    safety_buffer_minutes: int = Field(
        default=30,
        ge=0,
        description="Quota held back from the run budget",
    )

    provision_backoff_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Delay before retrying a failed provisioning attempt on the same account",
    )

    account_switch_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Pause after skipping an account",
    )

    auth_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Attempts at resolving the account identity on transient errors",
    )

    auth_retry_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Delay between identity resolution attempts",
    )

    model_config = SettingsConfigDict(
        env_prefix="ROTATION__",
        case_sensitive=False,
    )


class KeepAliveSettings(BaseSettings):
    """
    Keep-alive cadence.

    Settings can be configured via environment variables with KEEPALIVE__ prefix.
    """

    interval_seconds: float = Field(
        default=3.5 * 3600,
        gt=0,
        description="Seconds between keep-alive cycles",
    )

    min_sleep_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Remaining budget below which the keep-alive loop ends",
    )

    node_gap_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Pause between the primary and secondary keep-alive calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="KEEPALIVE__",
        case_sensitive=False,
    )
