"""
Tests for ResourceProvisioner.

Focus: folders are found before they are created, so repeated runs never
create duplicates, and a stale remembered root ID falls back cleanly.
"""

from unittest.mock import Mock

import pytest

from photodrive.drive.store import FolderHintStore, NullHintStore
from photodrive.errors import RemoteApiError
from photodrive.provision import ResourceProvisioner


class TestEnsureChildFolder:

    def test_second_call_is_a_search_hit(self, fake_drive, drive_client):
        """Two calls, same ID, exactly one creation."""
        provisioner = ResourceProvisioner(drive_client)
        parent = fake_drive.add_folder("Root")

        first = provisioner.ensure_child_folder(parent, "2025-01-12_Event")
        second = provisioner.ensure_child_folder(parent, "2025-01-12_Event")

        assert first.id == second.id
        assert first.created is True
        assert second.created is False
        assert fake_drive.count("POST", "/drive/v3/files") == 1

    def test_same_name_under_other_parent_is_separate(self, fake_drive, drive_client):
        provisioner = ResourceProvisioner(drive_client)
        a = fake_drive.add_folder("A")
        b = fake_drive.add_folder("B")

        in_a = provisioner.ensure_child_folder(a, "Event")
        in_b = provisioner.ensure_child_folder(b, "Event")

        assert in_a.id != in_b.id

    def test_ensure_folder_path(self, fake_drive, drive_client):
        provisioner = ResourceProvisioner(drive_client)
        root = fake_drive.add_folder("Root")

        chain = provisioner.ensure_folder_path(root, ["Event", "ModelA用フォルダ"])
        again = provisioner.ensure_folder_path(root, ["Event", "ModelA用フォルダ"])

        assert [f.id for f in chain] == [f.id for f in again]
        assert chain[1].parent_id == chain[0].id
        assert fake_drive.count("POST", "/drive/v3/files") == 2


class TestEnsureRootFolder:

    def test_creates_when_nothing_known(self, fake_drive, drive_client):
        provisioner = ResourceProvisioner(drive_client, root_folder_name="PhotoDistribution")
        folder = provisioner.ensure_root_folder()
        assert folder.created is True
        assert len(fake_drive.folders_named("PhotoDistribution")) == 1

    def test_stale_hint_falls_back_to_search_then_create(self, fake_drive, drive_client):
        """404 on the remembered ID, search misses, exactly one folder created."""
        provisioner = ResourceProvisioner(drive_client)

        folder = provisioner.ensure_root_folder(remembered_id="deleted-folder-id")

        assert folder.created is True
        assert fake_drive.count("GET", "/files/deleted-folder-id") == 1
        assert fake_drive.count("POST", "/drive/v3/files") == 1
        assert len(fake_drive.folders_named("PhotoDistribution")) == 1

    def test_stale_hint_falls_back_to_search_hit(self, fake_drive, drive_client):
        existing = fake_drive.add_folder("PhotoDistribution")
        provisioner = ResourceProvisioner(drive_client)

        folder = provisioner.ensure_root_folder(remembered_id="deleted-folder-id")

        assert folder.id == existing
        assert fake_drive.count("POST", "/drive/v3/files") == 0

    def test_valid_hint_reused_without_search(self, fake_drive, drive_client):
        existing = fake_drive.add_folder("PhotoDistribution")
        provisioner = ResourceProvisioner(drive_client)

        folder = provisioner.ensure_root_folder(remembered_id=existing)

        assert folder.id == existing
        assert fake_drive.count("GET") == 1

    def test_verification_error_treated_as_stale(self, fake_drive, drive_client):
        fake_drive.fail("GET", "/files/flaky-id", status=500)
        provisioner = ResourceProvisioner(drive_client)

        folder = provisioner.ensure_root_folder(remembered_id="flaky-id")

        assert folder.created is True

    def test_hint_store_read_and_updated(self, fake_drive, drive_client, tmp_path):
        store = FolderHintStore(tmp_path / "folder-id.txt")
        store.save("stale-id")
        provisioner = ResourceProvisioner(drive_client, hint_store=store)

        folder = provisioner.ensure_root_folder()

        assert store.load() == folder.id
        assert fake_drive.count("GET", "/files/stale-id") == 1

    def test_hint_not_rewritten_when_unchanged(self, fake_drive, drive_client):
        existing = fake_drive.add_folder("PhotoDistribution")
        store = Mock()
        store.load.return_value = existing
        provisioner = ResourceProvisioner(drive_client, hint_store=store)

        provisioner.ensure_root_folder()

        store.save.assert_not_called()

    def test_hint_read_once_per_lookup(self, fake_drive, drive_client):
        store = Mock()
        store.load.return_value = "stale-id"
        provisioner = ResourceProvisioner(drive_client, hint_store=store)

        folder = provisioner.ensure_root_folder()

        store.load.assert_called_once_with()
        store.save.assert_called_once_with(folder.id)

    def test_null_hint_store_always_searches(self, fake_drive, drive_client):
        fake_drive.add_folder("PhotoDistribution")
        provisioner = ResourceProvisioner(drive_client, hint_store=NullHintStore())

        provisioner.ensure_root_folder()
        provisioner.ensure_root_folder()

        assert fake_drive.count("POST", "/drive/v3/files") == 0
        assert len(fake_drive.folders_named("PhotoDistribution")) == 1


class TestPublish:

    def test_publish_file_returns_direct_download_url(self, fake_drive, drive_client):
        folder_id = fake_drive.add_folder("x")
        url = ResourceProvisioner(drive_client).publish_file(folder_id)
        assert url == f"https://drive.google.com/uc?export=download&id={folder_id}"
        assert fake_drive.permissions[folder_id] == [{"role": "reader", "type": "anyone"}]

    def test_publish_folder_is_not_discoverable(self, fake_drive, drive_client):
        folder_id = fake_drive.add_folder("x")
        url = ResourceProvisioner(drive_client).publish_folder(folder_id)
        assert url == f"https://drive.google.com/drive/folders/{folder_id}"
        assert fake_drive.permissions[folder_id][0]["allowFileDiscovery"] is False

    def test_publish_errors_propagate(self, drive_client):
        client = Mock(wraps=drive_client)
        client.set_public_read_permission.side_effect = RemoteApiError("Sharing failed", 403)
        provisioner = ResourceProvisioner(client)
        with pytest.raises(RemoteApiError) as exc_info:
            provisioner.publish_folder("abc")
        assert exc_info.value.status == 403
