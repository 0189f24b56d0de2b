"""User settings store.

Settings are kept in config.json next to the credential file:

    {
      "freeze": {"rows": 1, "cols": 0},
      "filter": {"header_row": 1}
    }

Every field is optional. Unset fields fall back to 0 (no freeze, no filter).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gs_write.config import get_settings_path, write_private_json
from gs_write.exceptions import PersistenceFailed
from gs_write.settings.exceptions import InvalidParameter, SettingsCorrupt, UnknownSettingKey

logger = logging.getLogger(__name__)

# Setting key -> (section, field) in the settings file
SETTING_KEYS: dict[str, tuple[str, str]] = {
    "freeze.rows": ("freeze", "rows"),
    "freeze.cols": ("freeze", "cols"),
    "filter.header_row": ("filter", "header_row"),
}

# Setting key -> Settings attribute
_ATTRIBUTES = {
    "freeze.rows": "freeze_rows",
    "freeze.cols": "freeze_cols",
    "filter.header_row": "filter_header_row",
}

DEFAULT_VALUE = 0

# Optional sign followed by ASCII digits
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def _attribute(key: str) -> str:
    try:
        return _ATTRIBUTES[key]
    except KeyError:
        raise UnknownSettingKey(key) from None


@dataclass
class Settings:
    """User-adjustable presentation options. None means unset."""

    freeze_rows: int | None = None
    freeze_cols: int | None = None
    filter_header_row: int | None = None

    def get(self, key: str) -> tuple[int, bool]:
        """Get a setting.

        Returns:
            Tuple of (value, is_set). Unset settings return (0, False).
        """
        value = getattr(self, _attribute(key))
        if value is None:
            return DEFAULT_VALUE, False
        return value, True

    def effective(self, key: str) -> int:
        """Get the value a setting resolves to, falling back to the default."""
        value, _ = self.get(key)
        return value

    def set(self, key: str, value: int) -> None:
        """Set a setting. Callers validate the value first."""
        setattr(self, _attribute(key), value)

    def unset(self, key: str) -> None:
        """Clear a setting back to its default."""
        setattr(self, _attribute(key), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the nested file layout, omitting unset fields."""
        data: dict[str, Any] = {}
        for key, (section, name) in SETTING_KEYS.items():
            value = getattr(self, _ATTRIBUTES[key])
            if value is not None:
                data.setdefault(section, {})[name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from the nested file layout.

        Raises:
            ValueError: If a section is not a mapping or a value is not an integer.
        """
        settings = cls()
        for key, (section, name) in SETTING_KEYS.items():
            section_data = data.get(section) or {}
            if not isinstance(section_data, dict):
                raise ValueError(f"'{section}' must be a table of settings")
            value = section_data.get(name)
            if value is None:
                continue
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"'{key}' must be an integer, got {value!r}")
            settings.set(key, value)
        return settings


def parse_setting_value(key: str, raw: str) -> int:
    """Parse a value given on the command line for a setting.

    Raises:
        UnknownSettingKey: If the key is not a known setting.
        InvalidParameter: If the value is not a non-negative integer.
    """
    _attribute(key)
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise InvalidParameter(f"Invalid value for {key}: must be an integer")
    value = int(raw)

    if value < 0:
        raise InvalidParameter(f"Invalid value for {key}: must be non-negative (got: {value})")
    return value


class SettingsStore:
    """File-backed storage for user settings."""

    def __init__(self, path: str | Path | None = None):
        """Initialize the store.

        Args:
            path: Settings file. Defaults to ~/.config/gs-write/config.json.
        """
        self.path = Path(path) if path else get_settings_path()

    def load(self) -> Settings:
        """Load settings, returning empty settings when no file exists.

        Raises:
            SettingsCorrupt: If the file exists but cannot be parsed.
            PersistenceFailed: On other read errors.
        """
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            logger.debug(f"No config file at {self.path}, using defaults")
            return Settings()
        except OSError as e:
            raise PersistenceFailed(f"failed to read config file {self.path}: {e}") from e

        try:
            data = json.loads(text) if text.strip() else {}
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return Settings.from_dict(data)
        except ValueError as e:
            raise SettingsCorrupt(str(self.path), str(e)) from e

    def save(self, settings: Settings) -> None:
        """Persist settings with owner-only permissions.

        Raises:
            PersistenceFailed: On any filesystem error.
        """
        write_private_json(self.path, settings.to_dict())
        logger.info(f"Config saved to {self.path}")
