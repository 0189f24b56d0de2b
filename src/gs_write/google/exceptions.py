"""Google authentication exceptions."""

from gs_write.exceptions import GsWriteError


class GoogleAuthError(GsWriteError):
    """Base exception for Google authentication errors."""

    pass


class NotAuthenticated(GoogleAuthError):
    """Raised when no credential file exists yet."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Auth file not found at {path}. Please run 'gs-write auth' first."
        )


class ReauthenticationRequired(GoogleAuthError):
    """Raised when an expired token cannot be refreshed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to refresh token ({reason}). Please run 'gs-write auth' again.")


class InvalidCredentials(GoogleAuthError):
    """Raised when a client credentials document is malformed."""

    pass


class TokenExchangeFailed(GoogleAuthError):
    """Raised when the authorization code cannot be exchanged for a token."""

    pass


class CorruptCredentials(GoogleAuthError):
    """Raised when the credential file exists but cannot be parsed."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Failed to parse auth file {path}: {detail}")
