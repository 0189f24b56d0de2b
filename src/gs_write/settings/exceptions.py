"""Settings exceptions."""

from gs_write.exceptions import GsWriteError


class SettingsError(GsWriteError):
    """Base exception for settings errors."""

    pass


class SettingsCorrupt(SettingsError):
    """Raised when the settings file exists but cannot be parsed."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Failed to parse config file {path}: {detail}")


class UnknownSettingKey(SettingsError):
    """Raised for a key that is not a known setting."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown configuration key: {key}")


class InvalidParameter(SettingsError):
    """Raised when a setting or flag value is not a non-negative integer."""

    pass
