"""Resolve effective spreadsheet options.

Each option is taken from the first source that provides it:
command-line flag, then the settings file, then the built-in default.
"""

from __future__ import annotations

from dataclasses import dataclass

from gs_write.settings.exceptions import InvalidParameter
from gs_write.settings.store import DEFAULT_VALUE, Settings


@dataclass(frozen=True)
class WriteOptions:
    """Options given for one write. None means the flag was not given."""

    title: str = ""
    freeze_rows: int | None = None
    freeze_cols: int | None = None
    filter_header_row: int | None = None


@dataclass(frozen=True)
class ResolvedParameters:
    """Effective freeze and filter parameters for one write."""

    freeze_rows: int
    freeze_cols: int
    filter_header_row: int

    def validate(self) -> None:
        """Raise InvalidParameter if any parameter is negative."""
        if self.freeze_rows < 0 or self.freeze_cols < 0:
            raise InvalidParameter(
                "freeze-rows and freeze-cols must be non-negative "
                f"(got: rows={self.freeze_rows}, cols={self.freeze_cols})"
            )
        if self.filter_header_row < 0:
            raise InvalidParameter(
                f"filter-header-row must be non-negative (got: {self.filter_header_row})"
            )


def resolve(explicit: int | None, stored: int | None, default: int = DEFAULT_VALUE) -> int:
    """Pick the explicit value, else the stored value, else the default."""
    if explicit is not None:
        return explicit
    if stored is not None:
        return stored
    return default


def resolve_parameters(options: WriteOptions, settings: Settings) -> ResolvedParameters:
    """Resolve all three parameters independently."""
    return ResolvedParameters(
        freeze_rows=resolve(options.freeze_rows, settings.freeze_rows),
        freeze_cols=resolve(options.freeze_cols, settings.freeze_cols),
        filter_header_row=resolve(options.filter_header_row, settings.filter_header_row),
    )
