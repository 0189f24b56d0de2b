"""Google OAuth credential management using Authlib.

This module provides the OAuth 2.0 authorization-code flow for the
Google Sheets API with:
- Parsing of client credentials downloaded from Google Cloud Console
- Authorization URL generation and code-for-token exchange
- File-based storage of credentials and token
- Transparent refresh of expired tokens, persisted before use

Everything is stored in a single file (auth.json by default):
    {"credentials": {...client id/secret, endpoints, scopes...},
     "token": {"access_token", "token_type", "refresh_token", "expiry"}}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import requests
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.requests_client import OAuth2Session
from google.oauth2.credentials import Credentials as GoogleCredentials

from gs_write.config import get_auth_path, write_private_json
from gs_write.exceptions import PersistenceFailed
from gs_write.google.exceptions import (
    CorruptCredentials,
    InvalidCredentials,
    NotAuthenticated,
    ReauthenticationRequired,
    TokenExchangeFailed,
)

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
SPREADSHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

# Fixed anti-forgery value; the code is pasted back by hand, not via callback
STATE_TOKEN = "state-token"

# Tokens this close to expiry are treated as expired
EXPIRY_LEEWAY = timedelta(seconds=10)

# Errors Authlib/requests raise for rejected or failed token requests
_TOKEN_REQUEST_ERRORS = (AuthlibBaseError, requests.RequestException, ValueError)


@dataclass(frozen=True)
class ClientCredentials:
    """OAuth client identity issued by Google Cloud Console."""

    client_id: str
    client_secret: str
    redirect_uri: str
    auth_uri: str = AUTHORIZE_URL
    token_uri: str = TOKEN_URL
    scopes: tuple[str, ...] = (SPREADSHEETS_SCOPE,)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "auth_uri": self.auth_uri,
            "token_uri": self.token_uri,
            "redirect_uri": self.redirect_uri,
            "scopes": list(self.scopes),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientCredentials:
        return cls(
            client_id=data["client_id"],
            client_secret=data["client_secret"],
            redirect_uri=data["redirect_uri"],
            auth_uri=data.get("auth_uri") or AUTHORIZE_URL,
            token_uri=data.get("token_uri") or TOKEN_URL,
            scopes=tuple(data.get("scopes") or (SPREADSHEETS_SCOPE,)),
        )


@dataclass
class Token:
    """OAuth access token with optional refresh token and expiry (UTC)."""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expiry: datetime | None = None

    def is_valid(self, now: datetime | None = None) -> bool:
        """Check whether the access token can be used as-is.

        A token without a tracked expiry is valid as long as it has an
        access token.
        """
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        return self.expiry - EXPIRY_LEEWAY > now

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "refresh_token": self.refresh_token,
            "expiry": self.expiry.isoformat() if self.expiry else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            refresh_token=data.get("refresh_token") or None,
            expiry=_parse_expiry(data.get("expiry")),
        )

    @classmethod
    def from_oauth_response(cls, token: dict[str, Any]) -> Token:
        """Convert an Authlib token response to a Token.

        Raises:
            ValueError: If the response carries no access token.
        """
        access_token = token.get("access_token")
        if not access_token:
            raise ValueError("token response missing access_token")

        expires_at = token.get("expires_at")
        if expires_at is None and token.get("expires_in") is not None:
            expires_at = datetime.now(timezone.utc).timestamp() + float(token["expires_in"])

        return cls(
            access_token=access_token,
            token_type=token.get("token_type") or "Bearer",
            refresh_token=token.get("refresh_token") or None,
            expiry=datetime.fromtimestamp(float(expires_at), tz=timezone.utc)
            if expires_at is not None
            else None,
        )

    def to_authlib(self) -> dict[str, Any]:
        """Convert to the token dict Authlib sessions expect."""
        token: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
        }
        if self.refresh_token:
            token["refresh_token"] = self.refresh_token
        if self.expiry:
            token["expires_at"] = int(self.expiry.timestamp())
        return token


@dataclass
class CredentialRecord:
    """Client credentials plus the current token, as persisted."""

    credentials: ClientCredentials
    token: Token

    def to_dict(self) -> dict[str, Any]:
        return {
            "credentials": self.credentials.to_dict(),
            "token": self.token.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CredentialRecord:
        return cls(
            credentials=ClientCredentials.from_dict(data["credentials"]),
            token=Token.from_dict(data["token"]),
        )


def _parse_expiry(value: Any) -> datetime | None:
    """Parse an ISO 8601 expiry (or epoch seconds) into an aware UTC datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _new_session(credentials: ClientCredentials, token: Token | None = None) -> OAuth2Session:
    """Create an Authlib session for the given client."""
    return OAuth2Session(
        client_id=credentials.client_id,
        client_secret=credentials.client_secret,
        scope=" ".join(credentials.scopes),
        redirect_uri=credentials.redirect_uri,
        token=token.to_authlib() if token else None,
        token_endpoint=credentials.token_uri,
        token_endpoint_auth_method="client_secret_post",
    )


def parse_client_credentials(raw: str | bytes) -> ClientCredentials:
    """Parse a client credentials document downloaded from Google Cloud Console.

    Args:
        raw: JSON text with an 'installed' or 'web' section.

    Returns:
        Client credentials scoped to spreadsheet access.

    Raises:
        InvalidCredentials: If the document is malformed or incomplete.
    """
    try:
        creds = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidCredentials(f"Failed to parse credentials: invalid JSON: {e}") from e

    if not isinstance(creds, dict):
        raise InvalidCredentials("Failed to parse credentials: expected a JSON object")

    # Handle both web and installed app credential formats
    if "installed" in creds:
        app_creds = creds["installed"]
    elif "web" in creds:
        app_creds = creds["web"]
    else:
        raise InvalidCredentials(
            "Invalid credentials format. Expected 'installed' or 'web' key."
        )

    if not isinstance(app_creds, dict):
        raise InvalidCredentials("Invalid credentials format. Client section must be an object.")

    missing = [key for key in ("client_id", "client_secret") if not app_creds.get(key)]
    if missing:
        raise InvalidCredentials(f"Credentials missing required fields: {', '.join(missing)}")

    redirect_uris = app_creds.get("redirect_uris") or []
    if not redirect_uris:
        raise InvalidCredentials("Credentials missing redirect URL ('redirect_uris')")

    return ClientCredentials(
        client_id=app_creds["client_id"],
        client_secret=app_creds["client_secret"],
        redirect_uri=redirect_uris[0],
        auth_uri=app_creds.get("auth_uri") or AUTHORIZE_URL,
        token_uri=app_creds.get("token_uri") or TOKEN_URL,
    )


def build_authorization_url(credentials: ClientCredentials) -> str:
    """Build the consent URL the user must visit.

    Always requests offline access so Google issues a refresh token.
    """
    session = _new_session(credentials)
    authorization_url, _ = session.create_authorization_url(
        credentials.auth_uri,
        state=STATE_TOKEN,
        access_type="offline",
    )
    return authorization_url


def extract_authorization_code(text: str) -> str:
    """Get the authorization code from user input.

    Accepts either the bare code or the full redirect URL copied from the
    browser's address bar.

    Raises:
        TokenExchangeFailed: If no code can be found.
    """
    text = text.strip()
    if not text:
        raise TokenExchangeFailed("No authorization code provided")

    if text.startswith(("http://", "https://")):
        query = parse_qs(urlparse(text).query)
        if "error" in query:
            raise TokenExchangeFailed(f"Authorization denied: {query['error'][0]}")
        codes = query.get("code")
        if not codes:
            raise TokenExchangeFailed("Redirect URL does not contain an authorization code")
        return codes[0]

    return text


def exchange_authorization_code(credentials: ClientCredentials, code: str) -> Token:
    """Exchange an authorization code for a token.

    Raises:
        TokenExchangeFailed: On provider rejection or transport failure.
    """
    session = _new_session(credentials)
    try:
        response = session.fetch_token(
            credentials.token_uri,
            code=code,
        )
        token = Token.from_oauth_response(response)
    except _TOKEN_REQUEST_ERRORS as e:
        raise TokenExchangeFailed(f"Failed to exchange token: {e}") from e

    if not token.refresh_token:
        logger.warning("Token response did not include a refresh token")
    logger.info("Exchanged authorization code for token")
    return token


def build_google_credentials(credentials: ClientCredentials, token: Token) -> GoogleCredentials:
    """Get a Google Credentials object for API client libraries."""
    expiry = None
    if token.expiry:
        # google-auth compares against naive UTC
        expiry = token.expiry.astimezone(timezone.utc).replace(tzinfo=None)

    return GoogleCredentials(
        token=token.access_token,
        refresh_token=token.refresh_token,
        token_uri=credentials.token_uri,
        client_id=credentials.client_id,
        client_secret=credentials.client_secret,
        scopes=list(credentials.scopes),
        expiry=expiry,
    )


class CredentialStore:
    """File-backed storage for the credential record.

    Example:
        >>> store = CredentialStore()
        >>> credentials, token = store.get_valid_client()
        >>> google_creds = build_google_credentials(credentials, token)
    """

    def __init__(self, path: str | Path | None = None):
        """Initialize the store.

        Args:
            path: Credential file. Defaults to ~/.config/gs-write/auth.json.
        """
        self.path = Path(path) if path else get_auth_path()

    def load(self) -> CredentialRecord:
        """Load the credential record.

        Raises:
            NotAuthenticated: If the file does not exist.
            CorruptCredentials: If the file cannot be parsed.
            PersistenceFailed: On other read errors.
        """
        try:
            text = self.path.read_text()
        except FileNotFoundError as e:
            raise NotAuthenticated(str(self.path)) from e
        except OSError as e:
            raise PersistenceFailed(f"failed to read auth file {self.path}: {e}") from e

        try:
            record = CredentialRecord.from_dict(json.loads(text))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise CorruptCredentials(str(self.path), str(e)) from e

        logger.info(f"Loaded credentials from {self.path}")
        return record

    def save(self, record: CredentialRecord) -> None:
        """Persist the credential record with owner-only permissions.

        Raises:
            PersistenceFailed: On any filesystem error.
        """
        write_private_json(self.path, record.to_dict())
        logger.info(f"Credentials saved to {self.path}")

    def get_valid_client(self) -> tuple[ClientCredentials, Token]:
        """Get client credentials with a usable token, refreshing if expired.

        A refreshed token replaces the stored one and is saved before
        returning.

        Raises:
            NotAuthenticated: If 'gs-write auth' has never been run.
            ReauthenticationRequired: If the token is expired and cannot be refreshed.
        """
        record = self.load()
        if record.token.is_valid():
            return record.credentials, record.token

        if not record.token.refresh_token:
            raise ReauthenticationRequired("token expired and no refresh token is stored")

        logger.info("Token expired, refreshing...")
        session = _new_session(record.credentials, record.token)
        try:
            response = session.refresh_token(
                record.credentials.token_uri,
                refresh_token=record.token.refresh_token,
            )
            new_token = Token.from_oauth_response(response)
        except _TOKEN_REQUEST_ERRORS as e:
            raise ReauthenticationRequired(str(e)) from e

        # Google omits the refresh token from refresh responses
        if not new_token.refresh_token:
            new_token = replace(new_token, refresh_token=record.token.refresh_token)

        record.token = new_token
        self.save(record)
        logger.info("Token refreshed")
        return record.credentials, new_token

    def token_status(self) -> dict[str, Any]:
        """Get information about the stored token.

        Returns:
            Dictionary with token status, expiry and refresh capability.
        """
        token = self.load().token
        if token.expiry:
            expires_in = (token.expiry - datetime.now(timezone.utc)).total_seconds()
            expires_str = str(timedelta(seconds=int(max(0, expires_in))))
        else:
            expires_str = "unknown"

        return {
            "status": "valid" if token.is_valid() else "expired",
            "expires_in": expires_str,
            "has_refresh_token": bool(token.refresh_token),
        }
