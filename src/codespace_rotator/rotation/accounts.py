"""Credential store for account rotation.

Loads the ordered token list from tokens.json. The list is read once and never
mutated during the process lifetime.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson
from structlog import get_logger

from codespace_rotator.exceptions import ConfigError


logger = get_logger(__name__)

DEFAULT_TOKENS_PATH = Path("tokens.json")


@dataclass(frozen=True)
class Credential:
    """An opaque account token at a fixed position in the rotation."""

    index: int
    token: str

    @property
    def masked(self) -> str:
        """Token with all but the last four characters hidden."""
        return f"...{self.token[-4:]}" if len(self.token) > 4 else "****"

    def __repr__(self) -> str:
        return f"Credential(index={self.index}, token='{self.masked}')"

    __str__ = __repr__


def _extract_tokens(data: Any, path: Path) -> list[str]:
    if isinstance(data, dict):
        if "tokens" not in data:
            raise ConfigError(f"Invalid tokens file {path}: missing 'tokens' field")
        data = data["tokens"]

    if not isinstance(data, list):
        raise ConfigError(
            f"Invalid tokens file {path}: expected a list of tokens, got {type(data).__name__}"
        )

    tokens = []
    for position, item in enumerate(data):
        if not isinstance(item, str):
            raise ConfigError(
                f"Invalid tokens file {path}: entry {position} is {type(item).__name__}, "
                "expected a string"
            )
        if item.strip():
            tokens.append(item.strip())
        else:
            logger.warning("blank_token_skipped", path=str(path), position=position)
    return tokens


def load_credentials(path: Path | None = None) -> list[Credential]:
    """Load the ordered credential list.

    Accepts ``{"tokens": [...]}`` or a bare JSON list of strings.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed or empty
    """
    path = Path(path or DEFAULT_TOKENS_PATH).expanduser()

    if not path.exists():
        raise ConfigError(f"Tokens file not found: {path}")

    logger.debug("loading_tokens", path=str(path))

    try:
        with path.open("rb") as f:
            data = orjson.loads(f.read())
    except OSError as e:
        raise ConfigError(f"Cannot read tokens file {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in tokens file {path}: {e}") from e

    tokens = _extract_tokens(data, path)
    if not tokens:
        raise ConfigError(f"Tokens file {path} contains no tokens")

    logger.info("tokens_loaded", path=str(path), count=len(tokens))
    return [Credential(index=i, token=token) for i, token in enumerate(tokens)]


class CredentialStore:
    """Read-only, index-addressed, cyclic view over the loaded credentials."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path or DEFAULT_TOKENS_PATH)
        self._credentials: list[Credential] | None = None

    def load(self) -> list[Credential]:
        """Load credentials on first call; later calls return the same list."""
        if self._credentials is None:
            self._credentials = load_credentials(self.path)
        return list(self._credentials)

    def __len__(self) -> int:
        return len(self.load())

    def get(self, index: int) -> Credential:
        """Credential at ``index`` modulo the credential count."""
        credentials = self.load()
        return credentials[index % len(credentials)]
