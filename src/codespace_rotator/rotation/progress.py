"""Durable rotation progress.

The progress record is the only state that survives a restart. Every save
replaces the whole file through a temp file and ``os.replace`` so a crash
mid-write leaves the previous record intact.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import orjson
from structlog import get_logger


logger = get_logger(__name__)

DEFAULT_STATE_PATH = Path("state.json")


@dataclass(frozen=True)
class ProgressRecord:
    """Resumable rotation position."""

    current_account_index: int = 0
    current_primary_name: str = ""
    current_secondary_name: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.current_account_index, bool) or not isinstance(
            self.current_account_index, int
        ):
            raise ValueError(
                f"current_account_index must be an integer, got {self.current_account_index!r}"
            )
        if self.current_account_index < 0:
            raise ValueError(
                f"current_account_index must be >= 0, got {self.current_account_index}"
            )
        for field_name in ("current_primary_name", "current_secondary_name"):
            if not isinstance(getattr(self, field_name), str):
                raise ValueError(f"{field_name} must be a string")

    @property
    def has_sessions(self) -> bool:
        return bool(self.current_primary_name or self.current_secondary_name)

    def with_index(self, index: int) -> "ProgressRecord":
        """Record positioned at ``index`` with no sessions recorded yet."""
        return replace(
            self,
            current_account_index=index,
            current_primary_name="",
            current_secondary_name="",
        )

    def with_sessions(self, index: int, primary: str, secondary: str) -> "ProgressRecord":
        return replace(
            self,
            current_account_index=index,
            current_primary_name=primary,
            current_secondary_name=secondary,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "current_account_index": self.current_account_index,
            "current_primary_name": self.current_primary_name,
            "current_secondary_name": self.current_secondary_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProgressRecord":
        """Create from dictionary loaded from JSON.

        Raises:
            ValueError: If fields have the wrong type or range
        """
        return cls(
            current_account_index=data.get("current_account_index", 0),
            current_primary_name=data.get("current_primary_name", ""),
            current_secondary_name=data.get("current_secondary_name", ""),
        )


class ProgressStore:
    """Loads and atomically rewrites the progress record file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path or DEFAULT_STATE_PATH).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> ProgressRecord:
        """Load the persisted record.

        A missing file yields the initial record. An unreadable or corrupt file
        is logged and also yields the initial record.
        """
        if not self.path.exists():
            logger.info("progress_not_found", path=str(self.path))
            return ProgressRecord()

        try:
            with self.path.open("rb") as f:
                data = orjson.loads(f.read())
            if not isinstance(data, dict):
                raise ValueError(f"expected object, got {type(data).__name__}")
            record = ProgressRecord.from_dict(data)
        except (OSError, ValueError) as e:
            # orjson.JSONDecodeError is a ValueError
            logger.warning(
                "progress_unreadable_starting_fresh",
                path=str(self.path),
                error=str(e),
            )
            return ProgressRecord()

        logger.debug("progress_loaded", path=str(self.path), **record.to_dict())
        return record

    def save(self, record: ProgressRecord) -> bool:
        """Replace the persisted record.

        Returns:
            True if saved successfully
        """
        temp_path = self.path.with_name(f"{self.path.name}.tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("wb") as f:
                f.write(orjson.dumps(record.to_dict(), option=orjson.OPT_INDENT_2))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            # OSError: File system errors (permissions, disk full, path issues)
            logger.error("progress_save_failed", path=str(self.path), error=str(e))
            return False

        logger.debug("progress_saved", path=str(self.path), **record.to_dict())
        return True
