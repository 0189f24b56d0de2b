"""Google Sheets API client implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from google.auth.exceptions import GoogleAuthError as GoogleAuthLibraryError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gs_write.sheets.exceptions import RemoteOperationFailed

logger = logging.getLogger(__name__)

SHEET_TITLE = "Sheet1"
TITLE_TIME_FORMAT = "%Y%m%d%H%M%S"
TITLE_SUFFIX = "+gs"
URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit"

# Failures surfaced by the API client and its transport
_REMOTE_ERRORS = (HttpError, GoogleAuthLibraryError, OSError)


@dataclass
class Spreadsheet:
    """Represents a newly created Google Spreadsheet."""

    id: str
    sheet_id: int
    title: str

    @property
    def url(self) -> str:
        """Canonical edit URL."""
        return URL_TEMPLATE.format(spreadsheet_id=self.id)


def generate_default_title(now: datetime | None = None) -> str:
    """Generate a title from the current time, e.g. '20240131093000+gs'."""
    now = now or datetime.now()
    return now.strftime(TITLE_TIME_FORMAT) + TITLE_SUFFIX


def filter_range(sheet_id: int, rows: Sequence[Sequence[str]], header_row: int) -> dict[str, int]:
    """Build the grid range for a basic filter starting at a 1-based header row.

    The range covers every row from the header through the last data row
    and every column of the first row.
    """
    return {
        "sheetId": sheet_id,
        "startRowIndex": header_row - 1,
        "endRowIndex": len(rows),
        "startColumnIndex": 0,
        "endColumnIndex": len(rows[0]) if rows else 0,
    }


class SheetsClient:
    """Google Sheets API client for writing tabular data.

    Usage:
        client = SheetsClient.from_credentials(google_credentials)
        url = client.create_spreadsheet(
            "Monthly Report",
            [["Name", "Age"], ["Alice", "30"]],
            freeze_rows=1,
            filter_header_row=1,
        )
    """

    def __init__(self, service: Any) -> None:
        """Initialize Sheets client.

        Args:
            service: Sheets v4 service object from googleapiclient.
        """
        self._service = service

    @classmethod
    def from_credentials(cls, credentials: Any) -> SheetsClient:
        """Build a client from google-auth credentials."""
        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return cls(service)

    # =========================================================================
    # Spreadsheets
    # =========================================================================

    def create_spreadsheet(
        self,
        title: str,
        rows: Sequence[Sequence[str]],
        freeze_rows: int = 0,
        freeze_cols: int = 0,
        filter_header_row: int = 0,
    ) -> str:
        """Create a new spreadsheet, fill it with rows and apply formatting.

        Calls are issued in a fixed order and the first failure aborts the
        rest. A spreadsheet that was already created is left in place.

        Args:
            title: Spreadsheet title. Empty means a timestamp-based title.
            rows: Cell values, written as-is starting at A1.
            freeze_rows: Number of leading rows to freeze.
            freeze_cols: Number of leading columns to freeze.
            filter_header_row: 1-based header row of a basic filter, 0 for none.

        Returns:
            Edit URL of the created spreadsheet.

        Raises:
            RemoteOperationFailed: If any API call fails.
        """
        if not title:
            title = generate_default_title()

        spreadsheet = self._create(title)

        if rows:
            self._write_values(spreadsheet, rows)

        if freeze_rows > 0 or freeze_cols > 0:
            self._set_freeze_panes(spreadsheet, freeze_rows, freeze_cols)

        if filter_header_row > 0:
            self._set_basic_filter(spreadsheet, rows, filter_header_row)

        return spreadsheet.url

    def _create(self, title: str) -> Spreadsheet:
        body = {
            "properties": {"title": title},
            "sheets": [{"properties": {"title": SHEET_TITLE}}],
        }
        try:
            result = self._service.spreadsheets().create(body=body).execute()
        except _REMOTE_ERRORS as e:
            raise RemoteOperationFailed("create spreadsheet", e) from e

        spreadsheet = self._parse_spreadsheet(result)
        logger.info(f"Created spreadsheet {spreadsheet.id} ({spreadsheet.title})")
        return spreadsheet

    # =========================================================================
    # Writing Data
    # =========================================================================

    def _write_values(self, spreadsheet: Spreadsheet, rows: Sequence[Sequence[str]]) -> None:
        try:
            result = (
                self._service.spreadsheets()
                .values()
                .update(
                    spreadsheetId=spreadsheet.id,
                    range=f"{SHEET_TITLE}!A1",
                    valueInputOption="RAW",
                    body={"values": [list(row) for row in rows]},
                )
                .execute()
            )
        except _REMOTE_ERRORS as e:
            raise RemoteOperationFailed("write data", e) from e

        logger.info(f"Wrote {result.get('updatedCells', 0)} cells")

    # =========================================================================
    # Formatting
    # =========================================================================

    def _set_freeze_panes(self, spreadsheet: Spreadsheet, rows: int, cols: int) -> None:
        request = {
            "updateSheetProperties": {
                "properties": {
                    "sheetId": spreadsheet.sheet_id,
                    "gridProperties": {
                        "frozenRowCount": rows,
                        "frozenColumnCount": cols,
                    },
                },
                "fields": "gridProperties.frozenRowCount,gridProperties.frozenColumnCount",
            }
        }
        try:
            self._batch_update(spreadsheet.id, [request])
        except _REMOTE_ERRORS as e:
            raise RemoteOperationFailed("set freeze panes", e) from e

        logger.info(f"Froze {rows} rows and {cols} columns")

    def _set_basic_filter(
        self, spreadsheet: Spreadsheet, rows: Sequence[Sequence[str]], header_row: int
    ) -> None:
        request = {
            "setBasicFilter": {
                "filter": {"range": filter_range(spreadsheet.sheet_id, rows, header_row)}
            }
        }
        try:
            self._batch_update(spreadsheet.id, [request])
        except _REMOTE_ERRORS as e:
            raise RemoteOperationFailed("set basic filter", e) from e

        logger.info(f"Set basic filter with header row {header_row}")

    def _batch_update(self, spreadsheet_id: str, requests: list[dict[str, Any]]) -> dict:
        return (
            self._service.spreadsheets()
            .batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": requests})
            .execute()
        )

    def _parse_spreadsheet(self, data: dict) -> Spreadsheet:
        """Parse spreadsheet from API response."""
        sheets = data.get("sheets") or [{}]
        props = sheets[0].get("properties", {})
        return Spreadsheet(
            id=data["spreadsheetId"],
            sheet_id=props.get("sheetId", 0),
            title=data.get("properties", {}).get("title", ""),
        )
