"""Base exceptions for gs-write."""


class GsWriteError(Exception):
    """Base exception for all gs-write errors."""

    pass


class PersistenceFailed(GsWriteError):
    """Raised when a config directory or file cannot be read or written."""

    pass
