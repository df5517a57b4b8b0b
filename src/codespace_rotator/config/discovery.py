from pathlib import Path

from codespace_rotator.core.system import get_rotator_config_dir


CONFIG_FILE_NAMES = (".codespace_rotator.toml", "codespace_rotator.toml")


def find_toml_config_file() -> Path | None:
    """Find the TOML configuration file for codespace_rotator.

    Searches in the following order:
    1. .codespace_rotator.toml / codespace_rotator.toml in current directory
    2. the same names in the git repository root (if in a git repo)
    3. config.toml in user config directory/codespace_rotator/ (platform-specific)
    """
    candidates = [Path(name).resolve() for name in CONFIG_FILE_NAMES]

    git_root = find_git_root()
    if git_root:
        candidates.extend(git_root / name for name in CONFIG_FILE_NAMES)

    candidates.append(get_rotator_config_dir() / "config.toml")

    for candidate in candidates:
        if candidate.exists() and candidate.is_file():
            return candidate

    return None


def find_git_root(path: Path | None = None) -> Path | None:
    """Find the root directory of a git repository."""
    import subprocess  # nosec B404 - safe usage for git commands only

    if path is None:
        path = Path.cwd()

    try:
        # nosec B603, B607 - safe: hardcoded git command, no user input
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        return Path(result.stdout.strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
