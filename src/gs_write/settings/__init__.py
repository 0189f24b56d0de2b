"""User settings and option resolution."""

from gs_write.settings.exceptions import (
    InvalidParameter,
    SettingsCorrupt,
    SettingsError,
    UnknownSettingKey,
)
from gs_write.settings.resolver import (
    ResolvedParameters,
    WriteOptions,
    resolve,
    resolve_parameters,
)
from gs_write.settings.store import SETTING_KEYS, Settings, SettingsStore, parse_setting_value

__all__ = [
    "SETTING_KEYS",
    "Settings",
    "SettingsStore",
    "parse_setting_value",
    "ResolvedParameters",
    "WriteOptions",
    "resolve",
    "resolve_parameters",
    "SettingsError",
    "SettingsCorrupt",
    "UnknownSettingKey",
    "InvalidParameter",
]
