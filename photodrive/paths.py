"""
Per-user file locations for Photo Drive.

Everything lives under ~/.config/photo-management unless
PHOTODRIVE_CONFIG_DIR points somewhere else.
"""

import os
from pathlib import Path

CONFIG_DIR_NAME = "photo-management"
TOKEN_FILENAME = "google-drive-token.json"
FOLDER_ID_FILENAME = "folder-id.txt"
CONFIG_FILENAME = "config.json"


def get_config_dir() -> Path:
    """Get the per-user configuration directory."""
    override = os.environ.get("PHOTODRIVE_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / CONFIG_DIR_NAME


def get_token_path() -> Path:
    """Get path to the saved OAuth token."""
    return get_config_dir() / TOKEN_FILENAME


def get_folder_id_path() -> Path:
    """Get path to the remembered root folder ID."""
    return get_config_dir() / FOLDER_ID_FILENAME


def get_app_config_path() -> Path:
    """Get path to the app configuration file."""
    return get_config_dir() / CONFIG_FILENAME
