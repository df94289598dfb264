"""
Shared setup for the command line tools.
"""

from typing import Optional

from .config import AppConfig
from .core.logging import setup_logging
from .drive.auth import OAuthSession
from .drive.client import DriveClient
from .drive.store import hint_store_from_config
from .drive.utils import parse_drive_folder_url
from .errors import ConfigError, ReauthRequired


def load_app_config(verbose: bool = False, json_logs: bool = False) -> AppConfig:
    """Load and validate config, then configure logging from it."""
    config = AppConfig.load()
    config.validate()
    setup_logging("DEBUG" if verbose else config.log_level, json_output=json_logs)
    return config


def build_session(config: AppConfig) -> OAuthSession:
    config.require_oauth_client()
    return OAuthSession(config.client_id, config.client_secret, port=config.callback_port)


def sign_in(session: OAuthSession) -> str:
    """
    Get a token, starting the browser flow once if the saved one is unusable.
    """
    try:
        return session.get_access_token()
    except ReauthRequired as e:
        print(f"Sign-in required: {e}")
        return session.authenticate()


def build_client(session: OAuthSession) -> DriveClient:
    return DriveClient(token_provider=session.get_access_token)


def resolve_folder_id(value: str) -> str:
    """Accept a folder URL or a raw ID; raise ConfigError otherwise."""
    folder_id, error = parse_drive_folder_url(value)
    if error:
        raise ConfigError(f"{error}: {value}")
    return folder_id


def resolve_parent_id(config: AppConfig, override: Optional[str] = None) -> str:
    """
    Root folder ID for cleanup: command line, then config, then the
    remembered hint.
    """
    if override:
        return resolve_folder_id(override)
    if config.root_folder_id:
        return config.root_folder_id
    remembered = hint_store_from_config(config).load()
    if remembered:
        return remembered
    raise ConfigError(
        "Distribution folder ID is unknown. Pass --parent-id, set rootFolderId "
        "in the config file, or run an upload first."
    )
