"""Spreadsheet writing exceptions."""

from gs_write.exceptions import GsWriteError


class RemoteOperationFailed(GsWriteError):
    """Raised when a Sheets API call fails."""

    def __init__(self, step: str, error: Exception):
        self.step = step
        self.error = error
        super().__init__(f"Failed to {step}: {error}")


class InvalidInput(GsWriteError):
    """Raised when standard input cannot be read as CSV."""

    pass


class EmptyInput(InvalidInput):
    """Raised when standard input contains no rows."""

    def __init__(self):
        super().__init__("No data provided on standard input")
