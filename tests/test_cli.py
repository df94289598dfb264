"""
Tests for the command line tools and their shared setup.
"""

import json
import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

import drive_cleanup
import drive_upload
from photodrive.app import resolve_folder_id, resolve_parent_id
from photodrive.config import AppConfig
from photodrive.drive.store import FolderHintStore
from photodrive.errors import ConfigError


def write_config(config_dir, **values):
    config_dir.mkdir(parents=True, exist_ok=True)
    data = {"clientId": "id", "clientSecret": "secret", **values}
    (config_dir / "config.json").write_text(json.dumps(data))


def old_time(days):
    return (datetime.now(timezone.utc) - timedelta(days=days)).strftime("%Y-%m-%dT%H:%M:%S.000Z")


@pytest.fixture
def signed_in(monkeypatch, drive_client):
    """Skip OAuth and point the tools at the fake Drive."""
    session = Mock()
    session.get_current_account.return_value = "photographer@example.com"
    for module in (drive_cleanup, drive_upload):
        monkeypatch.setattr(module, "build_session", lambda config: session)
        monkeypatch.setattr(module, "sign_in", lambda s: "token")
        monkeypatch.setattr(module, "build_client", lambda s: drive_client)
    return session


class TestResolveIds:

    def test_folder_url_accepted(self):
        assert resolve_folder_id("https://drive.google.com/drive/folders/1ABC123def456789") == "1ABC123def456789"

    def test_file_link_rejected(self):
        with pytest.raises(ConfigError):
            resolve_folder_id("https://drive.google.com/file/d/1ABC123def456/view")

    def test_parent_id_precedence(self):
        config = AppConfig(root_folder_id="from-config-id")
        assert resolve_parent_id(config, "1OVERRIDE_id_123") == "1OVERRIDE_id_123"
        assert resolve_parent_id(config) == "from-config-id"

    def test_parent_id_from_hint(self):
        FolderHintStore().save("remembered-id")
        assert resolve_parent_id(AppConfig()) == "remembered-id"

    def test_parent_id_unknown(self):
        with pytest.raises(ConfigError):
            resolve_parent_id(AppConfig(remember_root_folder=False))


class TestCleanupCli:

    def test_missing_oauth_client_exits_1(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["drive_cleanup.py"])
        assert drive_cleanup.main() == 1
        assert "clientId" in capsys.readouterr().err

    def test_dry_run(self, monkeypatch, capsys, fake_drive, signed_in, isolated_config_dir):
        root = fake_drive.add_folder("PhotoDistribution")
        fake_drive.add_folder("2024-01-01_Old", parent_id=root, created_time=old_time(60))
        write_config(isolated_config_dir, rootFolderId=root)
        monkeypatch.setattr(sys, "argv", ["drive_cleanup.py"])

        assert drive_cleanup.main() == 0

        assert "2024-01-01_Old" in capsys.readouterr().out
        assert fake_drive.count("DELETE") == 0

    def test_partial_failure_exits_2(self, monkeypatch, capsys, fake_drive, signed_in, isolated_config_dir):
        root = fake_drive.add_folder("PhotoDistribution")
        ok = fake_drive.add_folder("A", parent_id=root, created_time=old_time(60))
        bad = fake_drive.add_folder("B", parent_id=root, created_time=old_time(50))
        fake_drive.fail("DELETE", bad, status=403)
        write_config(isolated_config_dir)
        monkeypatch.setattr(sys, "argv", ["drive_cleanup.py", "--execute", "--days", "30", "--parent-id", root])

        assert drive_cleanup.main() == 2

        assert ok not in fake_drive.items
        assert bad in fake_drive.items
        assert "1 folder could not be deleted" in capsys.readouterr().err


class TestUploadCli:

    def test_archives_uploaded_and_removed(self, monkeypatch, capsys, tmp_path, fake_drive, signed_in,
                                           isolated_config_dir):
        write_config(isolated_config_dir, uploadDelayMin=0, uploadDelayMax=0)
        event_dir = tmp_path / "2025-01-12_Studio"
        event_dir.mkdir()
        (event_dir / "Alice.zip").write_bytes(b"PK")
        monkeypatch.setattr(sys, "argv", ["drive_upload.py", str(event_dir), "--archives", "--delete-after-upload"])

        assert drive_upload.main() == 0

        out = capsys.readouterr().out
        assert "https://drive.google.com/uc?export=download&id=" in out
        assert not (event_dir / "Alice.zip").exists()
        assert len(fake_drive.folders_named("2025-01-12_Studio")) == 1
        assert FolderHintStore().load() == fake_drive.folders_named("PhotoDistribution")[0]["id"]

    def test_missing_event_dir_exits_1(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "argv", ["drive_upload.py", str(tmp_path / "nope")])
        assert drive_upload.main() == 1
