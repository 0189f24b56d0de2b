"""CLI for gs-write - write standard input to a new Google Spreadsheet.

Usage:
    ls -l | gs-write                                   # Write CSV from stdin
    cat report.csv | gs-write --title "Monthly Report"
    cat data.csv | gs-write --freeze-rows 1 --filter-header-row 1
    gs-write auth --credentials ./credentials.json     # Authorize (OAuth 2.0)
    gs-write auth --status                             # Show token status
    gs-write config list                               # Show settings
    gs-write config get freeze.rows
    gs-write config set freeze.rows 1
    gs-write config unset freeze.rows
    gs-write info                                      # Show stored config (masked)
    gs-write version
"""

from __future__ import annotations

import argparse
import json
import logging
import platform
import sys
import webbrowser
from typing import TextIO

from gs_write import __version__
from gs_write.config import get_config_dir
from gs_write.exceptions import GsWriteError
from gs_write.google.exceptions import CorruptCredentials, InvalidCredentials, NotAuthenticated
from gs_write.google.oauth import (
    CredentialRecord,
    CredentialStore,
    build_authorization_url,
    exchange_authorization_code,
    extract_authorization_code,
    parse_client_credentials,
)
from gs_write.redact import ConfigTree, redact
from gs_write.settings.resolver import WriteOptions
from gs_write.settings.store import SETTING_KEYS, SettingsStore, parse_setting_value

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def cmd_write(options: WriteOptions, stdin: TextIO | None = None) -> int:
    """Write CSV from stdin to a new spreadsheet and print its URL."""
    from gs_write.app import write_from_stream

    url = write_from_stream(options, stdin or sys.stdin)
    print(url)
    return 0


# =============================================================================
# auth
# =============================================================================


def cmd_auth(
    credentials_file: str | None = None,
    no_browser: bool = False,
    stdin: TextIO | None = None,
    store: CredentialStore | None = None,
) -> int:
    """Interactive OAuth authorization."""
    stdin = stdin or sys.stdin
    store = store or CredentialStore()

    if credentials_file:
        try:
            with open(credentials_file) as f:
                raw = f.read()
        except OSError as e:
            raise InvalidCredentials(f"Failed to read credentials file: {e}") from e
    else:
        print("Please paste your credentials JSON (press Ctrl+D when done):")
        raw = stdin.read().strip()
        if not raw:
            raise InvalidCredentials("No credentials provided")

    credentials = parse_client_credentials(raw)

    url = build_authorization_url(credentials)
    print(f"\nPlease visit the following URL to authorize this application:\n{url}\n")

    if not no_browser:
        webbrowser.open(url)

    print("Enter the authorization code (or the full redirect URL): ", end="", flush=True)
    line = stdin.readline()
    code = extract_authorization_code(line)

    token = exchange_authorization_code(credentials, code)
    store.save(CredentialRecord(credentials=credentials, token=token))

    print(f"\nAuthentication successful!\nAuthentication saved to: {store.path}")
    return 0


def cmd_auth_status(store: CredentialStore | None = None) -> int:
    """Show stored OAuth token status."""
    store = store or CredentialStore()
    info = store.token_status()

    print(f"Auth file     : {store.path}")
    print(f"Status        : {info['status']}")
    print(f"Expires in    : {info['expires_in']}")
    print(f"Refresh token : {'yes' if info['has_refresh_token'] else 'no'}")
    return 0


# =============================================================================
# config
# =============================================================================


def config_list(store: SettingsStore | None = None) -> int:
    """List all settings with their effective values."""
    settings = (store or SettingsStore()).load()

    print("Current configuration:")
    for key in SETTING_KEYS:
        print(f"  {key} = {settings.effective(key)}")
    return 0


def config_get(key: str, store: SettingsStore | None = None) -> int:
    """Print the effective value of a setting."""
    settings = (store or SettingsStore()).load()
    print(settings.effective(key))
    return 0


def config_set(key: str, raw_value: str, store: SettingsStore | None = None) -> int:
    """Validate and store a setting."""
    store = store or SettingsStore()
    settings = store.load()

    value = parse_setting_value(key, raw_value)
    settings.set(key, value)
    store.save(settings)

    print(f"Set {key} = {value}")
    print(f"Configuration saved to: {store.path}")
    return 0


def config_unset(key: str, store: SettingsStore | None = None) -> int:
    """Clear a setting back to its default."""
    store = store or SettingsStore()
    settings = store.load()

    settings.unset(key)
    store.save(settings)

    print(f"Unset {key}")
    print(f"Configuration saved to: {store.path}")
    return 0


# =============================================================================
# info / version
# =============================================================================


def collect_info(
    settings_store: SettingsStore | None = None,
    credential_store: CredentialStore | None = None,
) -> ConfigTree:
    """Gather stored configuration into one tree (unmasked)."""
    settings_store = settings_store or SettingsStore()
    credential_store = credential_store or CredentialStore()

    info: ConfigTree = {
        "config_dir": str(get_config_dir()),
        "settings": {
            "path": str(settings_store.path),
            **settings_store.load().to_dict(),
        },
    }

    try:
        record = credential_store.load()
    except (NotAuthenticated, CorruptCredentials) as e:
        info["auth"] = {"path": str(credential_store.path), "error": str(e)}
    else:
        info["auth"] = {
            "path": str(credential_store.path),
            **record.credentials.to_dict(),
            **record.token.to_dict(),
        }
    return info


def cmd_info(
    settings_store: SettingsStore | None = None,
    credential_store: CredentialStore | None = None,
) -> int:
    """Print stored configuration as JSON with sensitive values masked."""
    info = collect_info(settings_store, credential_store)
    print(json.dumps(redact(info), indent=2))
    return 0


def cmd_version() -> int:
    """Show version information."""
    print(f"gs-write version: {__version__}")
    print(f"Python: {platform.python_version()}")
    print(f"OS/Arch: {platform.system().lower()}/{platform.machine()}")
    return 0


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gs-write",
        description="Write standard input (CSV) to a new Google Spreadsheet",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--title",
        type=str,
        default="",
        help="Title of the spreadsheet (default: auto-generated from timestamp)",
    )
    # None means "not given" so config file values still apply
    parser.add_argument(
        "--freeze-rows",
        type=int,
        default=None,
        help="Number of rows to freeze (overrides config file)",
    )
    parser.add_argument(
        "--freeze-cols",
        type=int,
        default=None,
        help="Number of columns to freeze (overrides config file)",
    )
    parser.add_argument(
        "--filter-header-row",
        type=int,
        default=None,
        help="Header row for basic filter (overrides config file)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # auth command
    auth_parser = subparsers.add_parser("auth", help="Authenticate with Google Sheets API")
    auth_parser.add_argument(
        "--credentials",
        type=str,
        default=None,
        help="Path to credentials.json file (default: read from stdin)",
    )
    auth_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open browser automatically",
    )
    auth_parser.add_argument(
        "--status",
        action="store_true",
        help="Show stored token status instead of authorizing",
    )

    # config command
    config_parser = subparsers.add_parser("config", help="Manage gs-write configuration")
    config_parser.set_defaults(print_config_help=config_parser.print_help)
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Command")
    keys_help = ", ".join(SETTING_KEYS)

    config_subparsers.add_parser("list", help="List all configuration settings")

    get_parser = config_subparsers.add_parser("get", help="Get a configuration value")
    get_parser.add_argument("key", help=f"Setting key ({keys_help})")

    set_parser = config_subparsers.add_parser("set", help="Set a configuration value")
    set_parser.add_argument("key", help=f"Setting key ({keys_help})")
    set_parser.add_argument("value", help="Non-negative integer")

    unset_parser = config_subparsers.add_parser("unset", help="Unset a configuration value")
    unset_parser.add_argument("key", help=f"Setting key ({keys_help})")

    # info command
    subparsers.add_parser("info", help="Show stored configuration (secrets masked)")

    # version command
    subparsers.add_parser("version", help="Show version")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    try:
        return _dispatch(args)
    except GsWriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _dispatch(args: argparse.Namespace) -> int:
    if args.command is None:
        options = WriteOptions(
            title=args.title,
            freeze_rows=args.freeze_rows,
            freeze_cols=args.freeze_cols,
            filter_header_row=args.filter_header_row,
        )
        return cmd_write(options)

    if args.command == "auth":
        if args.status:
            return cmd_auth_status()
        return cmd_auth(args.credentials, args.no_browser)

    if args.command == "config":
        if args.config_command == "list":
            return config_list()
        elif args.config_command == "get":
            return config_get(args.key)
        elif args.config_command == "set":
            return config_set(args.key, args.value)
        elif args.config_command == "unset":
            return config_unset(args.key)
        else:
            args.print_config_help()
            return 0

    if args.command == "info":
        return cmd_info()

    if args.command == "version":
        return cmd_version()

    return 0


if __name__ == "__main__":
    sys.exit(main())
