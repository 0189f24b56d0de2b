"""Config directory and file locations.

All persisted state lives in one per-user directory:
    ~/.config/gs-write/auth.json    - OAuth client credentials and token
    ~/.config/gs-write/config.json  - user settings (freeze panes, filter)

Set GS_WRITE_CONFIG_DIR to use a different directory.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from gs_write.exceptions import PersistenceFailed

APP_NAME = "gs-write"

AUTH_FILE_NAME = "auth.json"
SETTINGS_FILE_NAME = "config.json"

DIR_MODE = 0o700
FILE_MODE = 0o600


def get_config_dir() -> Path:
    """Return the config directory, honouring GS_WRITE_CONFIG_DIR."""
    override = os.environ.get("GS_WRITE_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / APP_NAME


def get_auth_path() -> Path:
    """Return the full path to the credential file."""
    return get_config_dir() / AUTH_FILE_NAME


def get_settings_path() -> Path:
    """Return the full path to the settings file."""
    return get_config_dir() / SETTINGS_FILE_NAME


def write_private_json(path: Path, data: dict[str, Any]) -> None:
    """Write a JSON document readable only by the owner.

    Creates the parent directory when missing, restricts it to mode 0700
    and writes the file with mode 0600.

    Args:
        path: Destination file.
        data: JSON-serializable document.

    Raises:
        PersistenceFailed: On any filesystem error.
    """
    try:
        path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        # mkdir mode only applies to directories it creates
        os.chmod(path.parent, DIR_MODE)
    except OSError as e:
        raise PersistenceFailed(f"failed to create config directory {path.parent}: {e}") from e

    text = json.dumps(data, indent=2) + "\n"
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w") as f:
            f.write(text)
        # O_CREAT mode only applies to new files
        os.chmod(path, FILE_MODE)
    except OSError as e:
        raise PersistenceFailed(f"failed to write {path}: {e}") from e
