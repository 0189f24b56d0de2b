"""Tests for the Google Sheets writer."""

from datetime import datetime
from unittest.mock import MagicMock, Mock

import pytest
from googleapiclient.errors import HttpError

from gs_write.sheets import RemoteOperationFailed, SheetsClient
from gs_write.sheets.client import filter_range, generate_default_title


def _http_error(status=403, message="denied"):
    resp = Mock(status=status, reason="Forbidden")
    content = f'{{"error": {{"message": "{message}"}}}}'.encode()
    return HttpError(resp, content)


@pytest.fixture
def service():
    """Mock Sheets v4 service returning a created spreadsheet."""
    service = MagicMock()
    spreadsheets = service.spreadsheets.return_value
    spreadsheets.create.return_value.execute.return_value = {
        "spreadsheetId": "sheet-abc123",
        "properties": {"title": "Report"},
        "sheets": [{"properties": {"sheetId": 42, "title": "Sheet1", "index": 0}}],
    }
    spreadsheets.values.return_value.update.return_value.execute.return_value = {
        "updatedCells": 4
    }
    spreadsheets.batchUpdate.return_value.execute.return_value = {"replies": [{}]}
    return service


def _batch_requests(service):
    calls = service.spreadsheets.return_value.batchUpdate.call_args_list
    return [c.kwargs["body"]["requests"][0] for c in calls]


class TestTitle:
    """Test default title generation."""

    def test_default_title_format(self):
        """Should format the timestamp and append the suffix."""
        assert generate_default_title(datetime(2024, 1, 31, 9, 30, 5)) == "20240131093005+gs"


class TestFilterRange:
    """Test basic filter range computation."""

    def test_header_on_first_row(self):
        """Should cover all rows and the first row's columns."""
        rows = [["h1", "h2"], ["a", "b"], ["c", "d"]]
        assert filter_range(7, rows, 1) == {
            "sheetId": 7,
            "startRowIndex": 0,
            "endRowIndex": 3,
            "startColumnIndex": 0,
            "endColumnIndex": 2,
        }

    def test_header_below_preamble(self):
        """Should start at the header row (0-indexed)."""
        rows = [["Report", "", ""], ["h1", "h2", "h3"], ["a", "b", "c"]]
        result = filter_range(0, rows, 2)
        assert result["startRowIndex"] == 1
        assert result["endColumnIndex"] == 3


class TestCreateSpreadsheet:
    """Test the create/write/format sequence."""

    def test_freeze_rows_only(self, service):
        """Should create, write, freeze one row and skip the filter."""
        client = SheetsClient(service)
        url = client.create_spreadsheet("", [["a", "b"], ["1", "2"]], freeze_rows=1)

        spreadsheets = service.spreadsheets.return_value
        spreadsheets.create.assert_called_once()
        body = spreadsheets.create.call_args.kwargs["body"]
        assert body["properties"]["title"].endswith("+gs")
        assert body["sheets"] == [{"properties": {"title": "Sheet1"}}]

        spreadsheets.values.return_value.update.assert_called_once_with(
            spreadsheetId="sheet-abc123",
            range="Sheet1!A1",
            valueInputOption="RAW",
            body={"values": [["a", "b"], ["1", "2"]]},
        )

        requests = _batch_requests(service)
        assert len(requests) == 1
        props = requests[0]["updateSheetProperties"]["properties"]
        assert props["sheetId"] == 42
        assert props["gridProperties"] == {"frozenRowCount": 1, "frozenColumnCount": 0}

        assert url == "https://docs.google.com/spreadsheets/d/sheet-abc123/edit"

    def test_filter_range(self, service):
        """Should install a filter over 3 rows and 2 columns."""
        client = SheetsClient(service)
        client.create_spreadsheet(
            "Report", [["h1", "h2"], ["a", "b"], ["c", "d"]], filter_header_row=1
        )

        requests = _batch_requests(service)
        assert len(requests) == 1
        grid_range = requests[0]["setBasicFilter"]["filter"]["range"]
        assert grid_range == {
            "sheetId": 42,
            "startRowIndex": 0,
            "endRowIndex": 3,
            "startColumnIndex": 0,
            "endColumnIndex": 2,
        }

    def test_freeze_and_filter_order(self, service):
        """Should freeze before installing the filter."""
        client = SheetsClient(service)
        client.create_spreadsheet(
            "Report", [["h1", "h2"], ["a", "b"]], freeze_rows=1, freeze_cols=1, filter_header_row=1
        )

        requests = _batch_requests(service)
        assert [next(iter(r)) for r in requests] == ["updateSheetProperties", "setBasicFilter"]

    def test_no_formatting(self, service):
        """Should make no formatting calls when nothing is requested."""
        client = SheetsClient(service)
        client.create_spreadsheet("Report", [["a"]])

        service.spreadsheets.return_value.batchUpdate.assert_not_called()

    def test_title_kept(self, service):
        """Should use the given title."""
        client = SheetsClient(service)
        client.create_spreadsheet("Monthly Report", [["a"]])

        body = service.spreadsheets.return_value.create.call_args.kwargs["body"]
        assert body["properties"]["title"] == "Monthly Report"

    def test_no_rows_skips_write(self, service):
        """Should not write values when there are no rows."""
        client = SheetsClient(service)
        client.create_spreadsheet("Empty", [])

        service.spreadsheets.return_value.values.return_value.update.assert_not_called()


class TestRemoteFailures:
    """Test that API failures abort with the failing step named."""

    def test_create_fails(self, service):
        """Should report the create step."""
        service.spreadsheets.return_value.create.return_value.execute.side_effect = _http_error()
        client = SheetsClient(service)

        with pytest.raises(RemoteOperationFailed, match="create spreadsheet") as exc_info:
            client.create_spreadsheet("Report", [["a"]])

        assert isinstance(exc_info.value.error, HttpError)
        service.spreadsheets.return_value.values.return_value.update.assert_not_called()

    def test_write_fails(self, service):
        """Should report the write step and stop."""
        values = service.spreadsheets.return_value.values.return_value
        values.update.return_value.execute.side_effect = _http_error(status=500)
        client = SheetsClient(service)

        with pytest.raises(RemoteOperationFailed) as exc_info:
            client.create_spreadsheet("Report", [["a"]], freeze_rows=1)

        assert exc_info.value.step == "write data"
        service.spreadsheets.return_value.batchUpdate.assert_not_called()

    def test_freeze_fails(self, service):
        """Should report the freeze step and skip the filter."""
        batch = service.spreadsheets.return_value.batchUpdate.return_value
        batch.execute.side_effect = _http_error()
        client = SheetsClient(service)

        with pytest.raises(RemoteOperationFailed) as exc_info:
            client.create_spreadsheet("Report", [["a"]], freeze_rows=1, filter_header_row=1)

        assert exc_info.value.step == "set freeze panes"
        assert len(_batch_requests(service)) == 1

    def test_filter_fails(self, service):
        """Should report the filter step."""
        batch = service.spreadsheets.return_value.batchUpdate.return_value
        batch.execute.side_effect = _http_error()
        client = SheetsClient(service)

        with pytest.raises(RemoteOperationFailed, match="set basic filter"):
            client.create_spreadsheet("Report", [["a"]], filter_header_row=1)
