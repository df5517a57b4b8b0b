"""Configuration module for the codespace rotator."""

from .github import GitHubSettings
from .rotation import KeepAliveSettings, QuotaSettings, RotationSettings
from .runtime import LoggingSettings, PathSettings
from .settings import Settings, load_settings


__all__ = [
    "Settings",
    "load_settings",
    "GitHubSettings",
    "KeepAliveSettings",
    "LoggingSettings",
    "PathSettings",
    "QuotaSettings",
    "RotationSettings",
]
