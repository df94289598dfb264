"""
Local persistence for OAuth tokens and the remembered root folder ID.

Both files are advisory state owned by this process. They are written
whole (temp file + rename) so a crash never leaves half a token on disk.
"""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from ..core.logging import get_logger
from ..paths import get_folder_id_path, get_token_path

logger = get_logger(__name__)


def _atomic_write_text(path: Path, text: str) -> None:
    """Write text to path via a sibling temp file and os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


@dataclass
class TokenRecord:
    """Persisted OAuth credential state."""
    access_token: str
    refresh_token: Optional[str] = None
    expiry_epoch_millis: Optional[int] = None

    def is_expired(self, now_millis: int) -> bool:
        """True only when an expiry is recorded and it has passed."""
        if self.expiry_epoch_millis is None:
            return False
        return self.expiry_epoch_millis <= now_millis

    def to_dict(self) -> dict:
        d = {"accessToken": self.access_token}
        if self.refresh_token:
            d["refreshToken"] = self.refresh_token
        if self.expiry_epoch_millis is not None:
            d["expiryEpochMillis"] = self.expiry_epoch_millis
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "TokenRecord":
        expiry = data.get("expiryEpochMillis")
        return cls(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken") or None,
            expiry_epoch_millis=int(expiry) if expiry is not None else None,
        )


class CredentialStore:
    """
    Reads and writes the token record as JSON.

    load() returns None for a missing or unparsable file; callers treat
    that exactly like "never authenticated".
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_token_path()

    def load(self) -> Optional[TokenRecord]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            record = TokenRecord.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("token_file_unreadable", path=str(self.path), error=str(e))
            return None
        if not record.access_token:
            return None
        return record

    def save(self, record: TokenRecord) -> None:
        _atomic_write_text(self.path, json.dumps(record.to_dict(), indent=2))
        logger.debug("token_saved", path=str(self.path))

    def clear(self) -> None:
        """Remove the saved token (forces re-authentication)."""
        if self.path.exists():
            self.path.unlink()
            logger.info("token_cleared", path=str(self.path))


class HintStore(Protocol):
    """Load/save interface for the remembered root folder ID."""

    def load(self) -> Optional[str]: ...

    def save(self, folder_id: str) -> None: ...

    def clear(self) -> None: ...


class FolderHintStore:
    """
    Plain-text file holding one Drive folder ID.

    The ID is a hint, never a source of truth: callers verify it against
    Drive before using it.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_folder_id_path()

    def load(self) -> Optional[str]:
        try:
            folder_id = self.path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return folder_id or None

    def save(self, folder_id: str) -> None:
        _atomic_write_text(self.path, folder_id)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class NullHintStore:
    """Hint store that remembers nothing."""

    def load(self) -> Optional[str]:
        return None

    def save(self, folder_id: str) -> None:
        pass

    def clear(self) -> None:
        pass


def hint_store_from_config(config) -> HintStore:
    """
    Pick the folder hint strategy for this run.

    Args:
        config: AppConfig; remember_root_folder=False disables the file
    """
    if not config.remember_root_folder:
        return NullHintStore()
    return FolderHintStore()
