"""gs-write: write standard input to a new Google Spreadsheet."""

__version__ = "0.1.0"
