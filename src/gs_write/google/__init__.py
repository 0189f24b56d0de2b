"""Google OAuth authentication and credential storage."""

from gs_write.google.exceptions import (
    CorruptCredentials,
    GoogleAuthError,
    InvalidCredentials,
    NotAuthenticated,
    ReauthenticationRequired,
    TokenExchangeFailed,
)
from gs_write.google.oauth import (
    ClientCredentials,
    CredentialRecord,
    CredentialStore,
    Token,
    build_authorization_url,
    build_google_credentials,
    exchange_authorization_code,
    extract_authorization_code,
    parse_client_credentials,
)

__all__ = [
    "ClientCredentials",
    "CredentialRecord",
    "CredentialStore",
    "Token",
    "build_authorization_url",
    "build_google_credentials",
    "exchange_authorization_code",
    "extract_authorization_code",
    "parse_client_credentials",
    "GoogleAuthError",
    "NotAuthenticated",
    "ReauthenticationRequired",
    "InvalidCredentials",
    "TokenExchangeFailed",
    "CorruptCredentials",
]
