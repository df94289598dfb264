"""
Error taxonomy for Photo Drive.

Every error carries a ``kind`` so callers branch on the kind instead of
matching message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIG = "config"
    AUTH = "auth"
    AUTH_TRANSPORT = "auth_transport"
    REAUTH_REQUIRED = "reauth_required"
    REMOTE_API = "remote_api"
    NOT_FOUND = "not_found"
    REMOTE_TRANSPORT = "remote_transport"
    PARTIAL_CLEANUP = "partial_cleanup"


class PhotoDriveError(Exception):
    """Base exception for all Photo Drive errors."""

    kind = ErrorKind.CONFIG


class ConfigError(PhotoDriveError):
    """Raised when required configuration is missing or invalid."""

    kind = ErrorKind.CONFIG


class AuthError(PhotoDriveError):
    """Raised when OAuth authentication fails."""

    kind = ErrorKind.AUTH


class AuthorizationDenied(AuthError):
    """Raised when the consent screen redirects back with an error."""

    def __init__(self, reason: str):
        super().__init__(f"Authorization denied: {reason}")
        self.reason = reason


class AuthTransportError(AuthError):
    """Network failure talking to the token endpoint. Never retried here."""

    kind = ErrorKind.AUTH_TRANSPORT


class ReauthRequired(AuthError):
    """The stored token cannot be refreshed; run the interactive flow again."""

    kind = ErrorKind.REAUTH_REQUIRED


class RemoteApiError(PhotoDriveError):
    """
    Non-2xx response from the Drive API.

    Attributes:
        status: HTTP status code (None when no response was received)
        body: Raw response body text, kept for diagnostics
    """

    kind = ErrorKind.REMOTE_API

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        detail = f"{message} (HTTP {status})" if status is not None else message
        if body:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.status = status
        self.body = body


class ResourceNotFound(RemoteApiError):
    """404 from the Drive API."""

    kind = ErrorKind.NOT_FOUND


class DriveTransportError(RemoteApiError):
    """The request never produced a response (DNS, connection reset, timeout)."""

    kind = ErrorKind.REMOTE_TRANSPORT


class PartialCleanupFailure(PhotoDriveError):
    """Some stale folders could not be deleted. Carries the full outcome."""

    kind = ErrorKind.PARTIAL_CLEANUP

    def __init__(self, outcome):
        failed = len(outcome.failures)
        word = "folder" if failed == 1 else "folders"
        super().__init__(f"{failed} {word} could not be deleted")
        self.outcome = outcome
