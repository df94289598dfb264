"""
Tests for token and folder hint persistence.
"""

import json
from types import SimpleNamespace

from photodrive.drive.store import (
    CredentialStore,
    FolderHintStore,
    NullHintStore,
    TokenRecord,
    hint_store_from_config,
)
from photodrive.paths import get_folder_id_path, get_token_path


class TestTokenRecord:

    def test_expiry_in_past(self):
        assert TokenRecord("a", expiry_epoch_millis=1000).is_expired(1001) is True

    def test_expiry_boundary_counts_as_expired(self):
        assert TokenRecord("a", expiry_epoch_millis=1000).is_expired(1000) is True

    def test_expiry_in_future(self):
        assert TokenRecord("a", expiry_epoch_millis=5000).is_expired(1000) is False

    def test_no_expiry_never_expires(self):
        assert TokenRecord("a").is_expired(10 ** 15) is False

    def test_json_keys(self):
        record = TokenRecord("acc", "ref", 1700000000000)
        assert record.to_dict() == {
            "accessToken": "acc",
            "refreshToken": "ref",
            "expiryEpochMillis": 1700000000000,
        }
        assert TokenRecord.from_dict(record.to_dict()) == record

    def test_optional_fields_omitted(self):
        assert TokenRecord("acc").to_dict() == {"accessToken": "acc"}


class TestCredentialStore:

    def test_default_path_under_config_dir(self, isolated_config_dir):
        assert CredentialStore().path == get_token_path()
        assert get_token_path() == isolated_config_dir / "google-drive-token.json"

    def test_missing_file(self, tmp_path):
        assert CredentialStore(tmp_path / "token.json").load() is None

    def test_save_and_load(self, tmp_path):
        store = CredentialStore(tmp_path / "nested" / "token.json")
        record = TokenRecord("acc", "ref", 123)
        store.save(record)
        assert store.load() == record
        assert json.loads(store.path.read_text())["accessToken"] == "acc"

    def test_atomic_write_leaves_no_temp_files(self, tmp_path):
        store = CredentialStore(tmp_path / "token.json")
        store.save(TokenRecord("one"))
        store.save(TokenRecord("two"))
        assert [p.name for p in tmp_path.iterdir()] == ["token.json"]
        assert store.load().access_token == "two"

    def test_corrupt_file_treated_as_missing(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text("{not json")
        assert CredentialStore(path).load() is None

    def test_missing_access_token_treated_as_missing(self, tmp_path):
        path = tmp_path / "token.json"
        path.write_text(json.dumps({"refreshToken": "r"}))
        assert CredentialStore(path).load() is None

    def test_clear(self, tmp_path):
        store = CredentialStore(tmp_path / "token.json")
        store.save(TokenRecord("acc"))
        store.clear()
        assert not store.path.exists()
        store.clear()


class TestHintStores:

    def test_folder_hint_round_trip_strips_whitespace(self, tmp_path):
        store = FolderHintStore(tmp_path / "folder-id.txt")
        assert store.load() is None
        store.path.write_text("  abc123\n")
        assert store.load() == "abc123"
        store.save("def456")
        assert store.path.read_text() == "def456"

    def test_empty_hint_file(self, tmp_path):
        path = tmp_path / "folder-id.txt"
        path.write_text("\n")
        assert FolderHintStore(path).load() is None

    def test_null_store_remembers_nothing(self):
        store = NullHintStore()
        store.save("abc")
        assert store.load() is None

    def test_strategy_from_config(self):
        remembered = hint_store_from_config(SimpleNamespace(remember_root_folder=True))
        assert isinstance(remembered, FolderHintStore)
        assert remembered.path == get_folder_id_path()

        forgetful = hint_store_from_config(SimpleNamespace(remember_root_folder=False))
        assert isinstance(forgetful, NullHintStore)
