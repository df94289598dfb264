"""
Configuration management for Photo Drive.

Config file: ~/.config/photo-management/config.json

    {
      "clientId": "xxxx.apps.googleusercontent.com",
      "clientSecret": "xxxx",
      "distributionRetentionDays": 30
    }

PHOTODRIVE_CLIENT_ID / PHOTODRIVE_CLIENT_SECRET / PHOTODRIVE_LOG_LEVEL
override the file.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .paths import get_app_config_path

DEFAULT_ROOT_FOLDER_NAME = "PhotoDistribution"
DEFAULT_RETENTION_DAYS = 30
DEFAULT_CALLBACK_PORT = 8080


@dataclass
class AppConfig:
    """Settings shared by the upload, cleanup and auth tools."""
    client_id: str = ""
    client_secret: str = ""
    retention_days: int = DEFAULT_RETENTION_DAYS
    root_folder_name: str = DEFAULT_ROOT_FOLDER_NAME
    root_folder_id: Optional[str] = None  # Hint only, always re-verified
    callback_port: int = DEFAULT_CALLBACK_PORT
    remember_root_folder: bool = True
    upload_delay_min: float = 2.0
    upload_delay_max: float = 5.0
    model_folder_suffix: str = "用フォルダ"
    log_level: str = "WARNING"

    def to_dict(self) -> dict:
        d = {
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
            "distributionRetentionDays": self.retention_days,
            "rootFolderName": self.root_folder_name,
            "callbackPort": self.callback_port,
            "rememberRootFolder": self.remember_root_folder,
            "uploadDelayMin": self.upload_delay_min,
            "uploadDelayMax": self.upload_delay_max,
            "modelFolderSuffix": self.model_folder_suffix,
            "logLevel": self.log_level,
        }
        if self.root_folder_id:
            d["rootFolderId"] = self.root_folder_id
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        defaults = cls()
        try:
            return cls(
                client_id=data.get("clientId", defaults.client_id),
                client_secret=data.get("clientSecret", defaults.client_secret),
                retention_days=int(data.get("distributionRetentionDays", defaults.retention_days)),
                root_folder_name=data.get("rootFolderName", defaults.root_folder_name),
                root_folder_id=data.get("rootFolderId") or None,
                callback_port=int(data.get("callbackPort", defaults.callback_port)),
                remember_root_folder=bool(data.get("rememberRootFolder", defaults.remember_root_folder)),
                upload_delay_min=float(data.get("uploadDelayMin", defaults.upload_delay_min)),
                upload_delay_max=float(data.get("uploadDelayMax", defaults.upload_delay_max)),
                model_folder_suffix=data.get("modelFolderSuffix", defaults.model_folder_suffix),
                log_level=data.get("logLevel", defaults.log_level),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in configuration: {e}") from e

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppConfig":
        """
        Load configuration from file, then apply environment overrides.

        A missing file yields defaults. A file that exists but is not valid
        JSON raises ConfigError.
        """
        path = path or get_app_config_path()
        data = {}

        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, ValueError) as e:
                raise ConfigError(f"Could not parse {path}: {e}") from e

        config = cls.from_dict(data)
        config.apply_env(os.environ)
        return config

    def save(self, path: Optional[Path] = None):
        """Save configuration to file."""
        path = path or get_app_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def apply_env(self, environ) -> None:
        """Apply PHOTODRIVE_* environment overrides."""
        self.client_id = environ.get("PHOTODRIVE_CLIENT_ID", self.client_id)
        self.client_secret = environ.get("PHOTODRIVE_CLIENT_SECRET", self.client_secret)
        self.log_level = environ.get("PHOTODRIVE_LOG_LEVEL", self.log_level)

    def require_oauth_client(self) -> None:
        """Raise ConfigError unless an OAuth client ID and secret are set."""
        if not self.client_id or not self.client_secret:
            raise ConfigError(
                "Google Drive OAuth client is not configured. Set clientId and "
                f"clientSecret in {get_app_config_path()} or export "
                "PHOTODRIVE_CLIENT_ID / PHOTODRIVE_CLIENT_SECRET."
            )

    def validate(self) -> None:
        if self.retention_days < 0:
            raise ConfigError("distributionRetentionDays must be 0 or greater")
        if self.upload_delay_min < 0 or self.upload_delay_max < self.upload_delay_min:
            raise ConfigError("uploadDelayMin/uploadDelayMax must satisfy 0 <= min <= max")
