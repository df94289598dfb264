"""Pytest configuration and fixtures."""

import json
import re
from urllib.parse import urlsplit

import pytest

from photodrive.drive.client import DriveClient
from photodrive.drive.utils import FOLDER_MIME_TYPE

FILES_PATH = "/drive/v3/files"
UPLOAD_PATH = "/upload/drive/v3/files"
ABOUT_PATH = "/drive/v3/about"


class FakeResponse:
    """Just enough of requests.Response for the code under test."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeDrive:
    """
    In-memory stand-in for the Drive v3 REST API behind a requests.Session.

    Records every call in `calls` as (method, url, kwargs). Requests matching
    a rule added with fail() get that status instead of being served.
    """

    def __init__(self, page_size=None):
        self.items = {}
        self.permissions = {}
        self.calls = []
        self.user = {"emailAddress": "photographer@example.com"}
        self.page_size = page_size
        self._rules = []
        self._next_id = 1

    # --- setup helpers ---

    def add_folder(self, name, parent_id=None, created_time="2025-01-01T00:00:00.000Z", trashed=False):
        folder_id = self._new_id("folder")
        self.items[folder_id] = {
            "id": folder_id,
            "name": name,
            "mimeType": FOLDER_MIME_TYPE,
            "parents": [parent_id] if parent_id else [],
            "createdTime": created_time,
            "trashed": trashed,
        }
        return folder_id

    def fail(self, method, fragment, status=500, body="backend error"):
        """Answer every matching request with an error status."""
        self._rules.append((method, fragment, status, body))

    def count(self, method, fragment=""):
        return sum(1 for m, url, _ in self.calls if m == method and fragment in url)

    def folders_named(self, name):
        return [i for i in self.items.values() if i["name"] == name and i["mimeType"] == FOLDER_MIME_TYPE]

    # --- requests.Session surface ---

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))

        for rule_method, fragment, status, body in self._rules:
            if rule_method == method and fragment in url:
                return FakeResponse(status, text=body)

        path = urlsplit(url).path
        params = kwargs.get("params") or {}

        if path == ABOUT_PATH:
            return FakeResponse(200, {"user": self.user})
        if path == UPLOAD_PATH and method == "POST":
            return self._upload(kwargs["data"])
        if path == FILES_PATH and method == "GET":
            return self._list(params)
        if path == FILES_PATH and method == "POST":
            return self._create(kwargs["json"])
        if path.endswith("/permissions") and method == "POST":
            item_id = path.split("/")[-2]
            if item_id not in self.items:
                return FakeResponse(404, text="File not found")
            self.permissions.setdefault(item_id, []).append(kwargs["json"])
            return FakeResponse(200, {"id": "anyoneWithLink"})
        if path.startswith(FILES_PATH + "/"):
            item_id = path.rsplit("/", 1)[-1]
            if item_id not in self.items:
                return FakeResponse(404, text="File not found")
            if method == "GET":
                return FakeResponse(200, self.items[item_id])
            if method == "DELETE":
                del self.items[item_id]
                return FakeResponse(204, text="")

        return FakeResponse(400, text=f"Unhandled {method} {url}")

    # --- internals ---

    def _new_id(self, prefix):
        item_id = f"{prefix}{self._next_id:04d}"
        self._next_id += 1
        return item_id

    def _list(self, params):
        query = params.get("q", "")
        matches = [i for i in self.items.values() if not i["trashed"]]

        name = re.search(r"name='((?:[^'\\]|\\.)*)'", query)
        if name:
            wanted = re.sub(r"\\(.)", r"\1", name.group(1))
            matches = [i for i in matches if i["name"] == wanted]
        parent = re.search(r"'([^']+)' in parents", query)
        if parent:
            matches = [i for i in matches if parent.group(1) in i["parents"]]
        if "mimeType=" in query:
            matches = [i for i in matches if i["mimeType"] == FOLDER_MIME_TYPE]
        if params.get("orderBy") == "createdTime":
            matches.sort(key=lambda i: i["createdTime"])

        start = int(params.get("pageToken") or 0)
        size = self.page_size or int(params.get("pageSize", 100))
        page = matches[start:start + size]
        data = {"files": [dict(i) for i in page]}
        if start + size < len(matches):
            data["nextPageToken"] = str(start + size)
        return FakeResponse(200, data)

    def _create(self, metadata):
        parents = metadata.get("parents", [])
        folder_id = self.add_folder(metadata["name"], parents[0] if parents else None)
        return FakeResponse(200, {"id": folder_id, "name": metadata["name"]})

    def _upload(self, body):
        metadata_json = body.split(b"\r\n\r\n", 1)[1].split(b"\r\n--", 1)[0]
        metadata = json.loads(metadata_json.decode("utf-8"))
        file_id = self._new_id("file")
        self.items[file_id] = {
            "id": file_id,
            "name": metadata["name"],
            "mimeType": "application/octet-stream",
            "parents": metadata.get("parents", []),
            "createdTime": "2025-01-01T00:00:00.000Z",
            "trashed": False,
        }
        return FakeResponse(200, {"id": file_id})


@pytest.fixture
def fake_drive():
    return FakeDrive()


@pytest.fixture
def drive_client(fake_drive):
    return DriveClient(auth_token="test-token", http=fake_drive)


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.config/photo-management."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("PHOTODRIVE_CONFIG_DIR", str(config_dir))
    for name in ("PHOTODRIVE_CLIENT_ID", "PHOTODRIVE_CLIENT_SECRET", "PHOTODRIVE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return config_dir
