from pathlib import Path

import platformdirs


def get_xdg_config_home() -> Path:
    """Get the XDG_CONFIG_HOME directory using platformdirs.

    Returns:
        Path to the user config directory (cross-platform).
    """
    return Path(platformdirs.user_config_dir())


def get_rotator_config_dir() -> Path:
    """Get the codespace rotator configuration directory.

    Returns:
        Path to the rotator configuration directory within user config directory.
    """
    return get_xdg_config_home() / "codespace_rotator"
