"""Google Sheets writer.

Create a spreadsheet from rows of text with OAuth 2.0 authentication.

Usage:
    from gs_write.google import CredentialStore, build_google_credentials
    from gs_write.sheets import SheetsClient

    credentials, token = CredentialStore().get_valid_client()
    client = SheetsClient.from_credentials(build_google_credentials(credentials, token))

    # Create a spreadsheet with a frozen header and a filter
    url = client.create_spreadsheet(
        "Report", [["Name", "Age"], ["Alice", "30"]], freeze_rows=1, filter_header_row=1
    )

OAuth Setup:
    1. Download OAuth credentials from Google Cloud Console
    2. Authorize: gs-write auth --credentials ~/Downloads/credentials.json
"""

from __future__ import annotations

from gs_write.sheets.client import SheetsClient, Spreadsheet
from gs_write.sheets.exceptions import EmptyInput, InvalidInput, RemoteOperationFailed

__all__ = ["SheetsClient", "Spreadsheet", "RemoteOperationFailed", "InvalidInput", "EmptyInput"]
