"""Validation helpers shared by configuration and the CLI."""

import re


__all__ = [
    "LOG_LEVELS",
    "REPOSITORY_PATTERN",
    "is_repository_slug",
    "parse_repository",
    "validate_log_level",
]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# owner/name as accepted by GitHub: owner is alphanumeric with single hyphens,
# repository names additionally allow dots and underscores
REPOSITORY_PATTERN = re.compile(
    r"^(?P<owner>[A-Za-z0-9](?:[A-Za-z0-9-]{0,38}))/(?P<name>[A-Za-z0-9._-]{1,100})$"
)


def validate_log_level(value: str) -> str:
    """Normalize and validate a log level name.

    Raises:
        ValueError: If the level is not a known stdlib level name
    """
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{value}': expected one of {', '.join(LOG_LEVELS)}"
        )
    return level


def is_repository_slug(value: str) -> bool:
    """Check whether value looks like an ``owner/repo`` slug."""
    return REPOSITORY_PATTERN.match(value) is not None


def parse_repository(value: str) -> tuple[str, str]:
    """Split an ``owner/repo`` slug.

    Raises:
        ValueError: If value is not a valid slug
    """
    match = REPOSITORY_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid repository '{value}': expected owner/repo")
    return match.group("owner"), match.group("name")
