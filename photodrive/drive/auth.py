"""
OAuth session for Photo Drive.

Handles the Google OAuth 2.0 desktop flow: loading the saved token,
checking it against Drive, refreshing it, and falling back to the
interactive browser flow with a one-shot local callback listener.

States:
    NO_TOKEN -> AUTHENTICATED -> EXPIRED -> REFRESHING -> AUTHENTICATED
    AUTHENTICATED -> INVALID -> REAUTHENTICATING -> AUTHENTICATED
"""

import time
import webbrowser
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from ..core.logging import get_logger
from ..errors import AuthError, AuthTransportError, DriveTransportError, ReauthRequired
from .callback import CallbackListener
from .store import CredentialStore, TokenRecord

logger = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive"]
AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
ABOUT_URL = "https://www.googleapis.com/drive/v3/about"


class SessionState(Enum):
    NO_TOKEN = "no_token"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"
    REFRESHING = "refreshing"
    INVALID = "invalid"
    REAUTHENTICATING = "reauthenticating"


def _expiry_to_millis(expiry: Optional[datetime]) -> Optional[int]:
    """google-auth stores expiry as a naive UTC datetime."""
    if expiry is None:
        return None
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return int(expiry.timestamp() * 1000)


def record_from_credentials(creds: Credentials, fallback_refresh_token: Optional[str] = None) -> TokenRecord:
    """Convert google-auth Credentials to a TokenRecord."""
    return TokenRecord(
        access_token=creds.token,
        refresh_token=creds.refresh_token or fallback_refresh_token,
        expiry_epoch_millis=_expiry_to_millis(creds.expiry),
    )


class TokenEndpoint(Protocol):
    """The token endpoint operations OAuthSession needs."""

    def authorization_url(self, redirect_uri: str) -> str: ...

    def exchange_code(self, code: str) -> TokenRecord: ...

    def refresh(self, refresh_token: str) -> TokenRecord: ...


class GoogleTokenEndpoint:
    """
    Google's authorization and token endpoints.

    authorization_url() and exchange_code() must be called on the same
    instance: the Flow keeps the PKCE verifier between the two steps.
    """

    def __init__(self, client_id: str, client_secret: str, scopes: Optional[list] = None,
                 http: Optional[requests.Session] = None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.scopes = scopes or SCOPES
        self.http = http
        self._flow: Optional[Flow] = None

    def _client_config(self, redirect_uri: str) -> dict:
        # Same shape as a downloaded credentials.json
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [redirect_uri],
            }
        }

    def authorization_url(self, redirect_uri: str) -> str:
        self._flow = Flow.from_client_config(
            self._client_config(redirect_uri),
            scopes=self.scopes,
            redirect_uri=redirect_uri,
        )
        url, _state = self._flow.authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange_code(self, code: str) -> TokenRecord:
        if self._flow is None:
            raise AuthError("exchange_code() called before authorization_url()")
        try:
            self._flow.fetch_token(code=code)
        except requests.RequestException as e:
            raise AuthTransportError(f"Could not reach the token endpoint: {e}") from e
        except OAuth2Error as e:
            raise AuthError(f"Authorization code was rejected: {e.description or e.error}") from e
        return record_from_credentials(self._flow.credentials)

    def refresh(self, refresh_token: str) -> TokenRecord:
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.scopes,
        )
        try:
            creds.refresh(Request(session=self.http))
        except RefreshError as e:
            raise ReauthRequired(f"Refresh token was rejected: {e}") from e
        except TransportError as e:
            raise AuthTransportError(f"Could not reach the token endpoint: {e}") from e
        return record_from_credentials(creds, fallback_refresh_token=refresh_token)


class OAuthSession:
    """
    Owns the access token for one run.

    The saved token is read once; after it is validated (or refreshed, or
    replaced by the interactive flow) the session serves it from memory
    until it expires.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        store: Optional[CredentialStore] = None,
        endpoint: Optional[TokenEndpoint] = None,
        port: int = 8080,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        open_browser: bool = True,
        listener_factory: Callable[[int], CallbackListener] = CallbackListener,
        callback_timeout: Optional[float] = None,
    ):
        """
        Initialize the session.

        Args:
            client_id: OAuth desktop client ID
            client_secret: OAuth desktop client secret
            store: Token persistence (default: per-user token file)
            endpoint: Token endpoint strategy (default: Google)
            port: Local port for the OAuth redirect
            http: requests session used for the validity probe
            clock: Returns the current time in epoch seconds
            open_browser: Open the consent page automatically
            listener_factory: Builds the callback listener for a port
            callback_timeout: Seconds to wait for the redirect (None = forever)
        """
        self.store = store or CredentialStore()
        self.endpoint = endpoint or GoogleTokenEndpoint(client_id, client_secret, http=http)
        self.port = port
        self.http = http or requests.Session()
        self.clock = clock
        self.open_browser = open_browser
        self.listener_factory = listener_factory
        self.callback_timeout = callback_timeout
        self.state = SessionState.NO_TOKEN
        self._record: Optional[TokenRecord] = None

    def _now_millis(self) -> int:
        return int(self.clock() * 1000)

    def get_access_token(self, interactive: bool = True) -> str:
        """
        Return a usable access token, refreshing or re-authenticating as needed.

        Args:
            interactive: Allow the browser flow when no usable token exists

        Raises:
            ReauthRequired: Token expired without a usable refresh token, or
                re-authentication is needed and interactive is False
            AuthTransportError: Token endpoint unreachable
        """
        record = self._record
        validated = record is not None
        if record is None:
            record = self.store.load()

        if record is None:
            self.state = SessionState.NO_TOKEN
            return self._reauthenticate(interactive, "no saved token")

        if record.is_expired(self._now_millis()):
            self.state = SessionState.EXPIRED
            if not record.refresh_token:
                raise ReauthRequired("Saved token has expired and has no refresh token")
            return self._refresh(record)

        if validated:
            return record.access_token

        if self._probe(record.access_token):
            return self._accept(record)

        self.state = SessionState.INVALID
        logger.warning("token_invalid", has_refresh_token=bool(record.refresh_token))

        if record.refresh_token:
            try:
                return self._refresh(record)
            except ReauthRequired as e:
                logger.warning("token_refresh_rejected", error=str(e))
                self.state = SessionState.INVALID

        return self._reauthenticate(interactive, "saved token is no longer valid")

    def authenticate(self) -> str:
        """Run the interactive browser flow and persist the new token."""
        if self.state is not SessionState.NO_TOKEN:
            self.state = SessionState.REAUTHENTICATING

        listener = self.listener_factory(self.port)
        try:
            url = self.endpoint.authorization_url(listener.redirect_uri)

            print()
            print("Sign in to Google Drive in your browser:")
            print()
            print(f"  {url}")
            print()
            print("If the browser does not open, paste the URL above into it.")
            print()

            if self.open_browser:
                webbrowser.open(url)

            code = listener.wait(timeout=self.callback_timeout)
        finally:
            listener.stop()

        record = self.endpoint.exchange_code(code)
        logger.info("authorization_complete", has_refresh_token=bool(record.refresh_token))
        self.store.save(record)
        return self._accept(record)

    def _reauthenticate(self, interactive: bool, reason: str) -> str:
        if not interactive:
            raise ReauthRequired(f"Google Drive sign-in required ({reason})")
        logger.info("reauthentication_started", reason=reason)
        return self.authenticate()

    def _refresh(self, record: TokenRecord) -> str:
        self.state = SessionState.REFRESHING
        new_record = self.endpoint.refresh(record.refresh_token)
        if not new_record.refresh_token:
            new_record.refresh_token = record.refresh_token
        self.store.save(new_record)
        logger.info("token_refreshed", expiry_epoch_millis=new_record.expiry_epoch_millis)
        return self._accept(new_record)

    def _accept(self, record: TokenRecord) -> str:
        self._record = record
        self.state = SessionState.AUTHENTICATED
        return record.access_token

    def _about(self, token: str) -> requests.Response:
        try:
            return self.http.get(
                ABOUT_URL,
                params={"fields": "user"},
                headers={"Authorization": f"Bearer {token}"},
            )
        except requests.RequestException as e:
            raise DriveTransportError(f"Could not reach Google Drive: {e}") from e

    def _probe(self, token: str) -> bool:
        """Cheap authenticated GET; any non-2xx means the token is invalid."""
        response = self._about(token)
        if not response.ok:
            logger.debug("token_probe_failed", status=response.status_code)
        return response.ok

    def get_current_account(self) -> Optional[str]:
        """
        Get the signed-in account's email for display.

        Returns:
            Email string or None if unavailable
        """
        if self._record is None:
            return None
        try:
            response = self._about(self._record.access_token)
        except DriveTransportError:
            return None
        if not response.ok:
            return None
        return response.json().get("user", {}).get("emailAddress") or None

    def logout(self) -> None:
        """Remove the saved token and forget the cached one."""
        self.store.clear()
        self._record = None
        self.state = SessionState.NO_TOKEN
