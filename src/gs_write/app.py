"""Write CSV from a stream into a new spreadsheet."""

from __future__ import annotations

import csv
import logging
from typing import Any, Callable, TextIO

from gs_write.google.oauth import CredentialStore, build_google_credentials
from gs_write.settings.exceptions import InvalidParameter
from gs_write.settings.resolver import WriteOptions, resolve_parameters
from gs_write.settings.store import SettingsStore
from gs_write.sheets.client import SheetsClient
from gs_write.sheets.exceptions import EmptyInput, InvalidInput

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Any], SheetsClient]


def read_rows(stream: TextIO) -> list[list[str]]:
    """Read all CSV rows from a stream, skipping blank lines.

    Every row must have as many fields as the first one.

    Raises:
        InvalidInput: If the input cannot be decoded or is not valid CSV.
    """
    reader = csv.reader(stream)
    rows: list[list[str]] = []
    try:
        for row in reader:
            if not row:
                continue
            if rows and len(row) != len(rows[0]):
                raise InvalidInput(
                    f"Failed to read CSV from stdin: record on line {reader.line_num}: "
                    f"wrong number of fields (expected {len(rows[0])}, got {len(row)})"
                )
            rows.append(row)
    except (csv.Error, UnicodeDecodeError, OSError) as e:
        raise InvalidInput(f"Failed to read CSV from stdin: {e}") from e
    return rows



def write_from_stream(
    options: WriteOptions,
    stream: TextIO,
    settings_store: SettingsStore | None = None,
    credential_store: CredentialStore | None = None,
    client_factory: ClientFactory = SheetsClient.from_credentials,
) -> str:
    """Create a spreadsheet from CSV input.

    Input is read completely before credentials are checked or any API
    call is made.

    Args:
        options: Title and command-line overrides.
        stream: CSV input, usually standard input.
        settings_store: Settings file. Defaults to the user config.
        credential_store: Credential file. Defaults to the user config.
        client_factory: Builds a SheetsClient from google-auth credentials.

    Returns:
        Edit URL of the new spreadsheet.
    """
    rows = read_rows(stream)
    if not rows:
        raise EmptyInput()
    logger.info(f"Read {len(rows)} rows from input")

    settings = (settings_store or SettingsStore()).load()
    params = resolve_parameters(options, settings)
    params.validate()
    if params.filter_header_row > len(rows):
        raise InvalidParameter(
            "filter-header-row must not exceed the number of input rows "
            f"(got: {params.filter_header_row}, rows: {len(rows)})"
        )
    logger.debug(f"Resolved parameters: {params}")

    credentials, token = (credential_store or CredentialStore()).get_valid_client()
    client = client_factory(build_google_credentials(credentials, token))

    return client.create_spreadsheet(
        options.title,
        rows,
        freeze_rows=params.freeze_rows,
        freeze_cols=params.freeze_cols,
        filter_header_row=params.filter_header_row,
    )
