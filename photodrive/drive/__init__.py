"""
Google Drive interaction module.

Handles authentication, token persistence and the Drive REST client.
"""

from .auth import GoogleTokenEndpoint, OAuthSession, SessionState
from .callback import CallbackListener
from .client import DriveClient, DriveClientConfig, FolderRef, UploadTarget, build_multipart_body
from .store import CredentialStore, FolderHintStore, NullHintStore, TokenRecord, hint_store_from_config

__all__ = [
    "GoogleTokenEndpoint",
    "OAuthSession",
    "SessionState",
    "CallbackListener",
    "DriveClient",
    "DriveClientConfig",
    "FolderRef",
    "UploadTarget",
    "build_multipart_body",
    "CredentialStore",
    "FolderHintStore",
    "NullHintStore",
    "TokenRecord",
    "hint_store_from_config",
]
