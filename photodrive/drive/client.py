"""
Google Drive API client for Photo Drive.

Handles all HTTP interactions with the Google Drive v3 REST API. Each
operation is a single request (pagination aside) with bearer auth. There
are no retries here: a non-2xx response becomes a RemoteApiError and the
caller decides what to do.
"""

import json
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from ..core.logging import get_logger
from ..errors import DriveTransportError, RemoteApiError, ResourceNotFound
from .utils import FOLDER_MIME_TYPE, build_folder_query

logger = get_logger(__name__)

MULTIPART_BOUNDARY = "-------314159265358979323846"


@dataclass
class DriveClientConfig:
    """Configuration for DriveClient."""
    timeout: Optional[float] = None  # None = transport default
    search_page_size: int = 10
    list_page_size: int = 1000


@dataclass
class FolderRef:
    """A Drive folder. created is True when this run created it."""
    id: str
    name: str
    parent_id: Optional[str] = None
    created: bool = False


@dataclass(frozen=True)
class UploadTarget:
    """One local file headed for one Drive folder."""
    local_path: Path
    remote_parent_id: str
    desired_name: str

    @classmethod
    def for_file(cls, local_path: Path, parent_id: str, name: Optional[str] = None) -> "UploadTarget":
        local_path = Path(local_path)
        return cls(local_path, parent_id, name or local_path.name)


def guess_content_type(path: Path) -> str:
    """Content type for the binary part of an upload."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or "application/octet-stream"


def build_multipart_body(
    metadata: dict,
    content: bytes,
    content_type: str = "application/octet-stream",
) -> tuple[bytes, str]:
    """
    Build a multipart/related upload body.

    Layout: JSON metadata part, binary part, closing boundary.

        --B CRLF Content-Type: application/json; charset=UTF-8 CRLF CRLF {json} CRLF
        --B CRLF Content-Type: <type> CRLF CRLF <bytes>
        CRLF --B--

    Args:
        metadata: Drive file metadata (name, parents, ...)
        content: Raw file bytes
        content_type: Content type of the binary part

    Returns:
        Tuple of (body, Content-Type header value)
    """
    metadata_part = (
        f"--{MULTIPART_BOUNDARY}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        + json.dumps(metadata, ensure_ascii=False, separators=(",", ":"))
        + "\r\n"
    ).encode("utf-8")
    file_part_header = (
        f"--{MULTIPART_BOUNDARY}\r\nContent-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    closing_boundary = f"\r\n--{MULTIPART_BOUNDARY}--".encode("utf-8")

    body = metadata_part + file_part_header + content + closing_boundary
    return body, f"multipart/related; boundary={MULTIPART_BOUNDARY}"


class DriveClient:
    """
    Google Drive API client.

    Handles folder search/creation, uploads, sharing and deletion.
    Does NOT decide what to create (see ResourceProvisioner for that).
    """

    API_BASE = "https://www.googleapis.com/drive/v3"
    API_FILES = f"{API_BASE}/files"
    API_ABOUT = f"{API_BASE}/about"
    API_UPLOAD = "https://www.googleapis.com/upload/drive/v3/files"

    def __init__(
        self,
        config: Optional[DriveClientConfig] = None,
        auth_token: Optional[str] = None,
        token_provider: Optional[Callable[[], str]] = None,
        http: Optional[requests.Session] = None,
    ):
        """
        Initialize the Drive client.

        Args:
            config: Client configuration
            auth_token: Fixed OAuth access token
            token_provider: Called before each request for a fresh token
                (e.g. OAuthSession.get_access_token); wins over auth_token
            http: requests session (default: a new one)
        """
        self.config = config or DriveClientConfig()
        self.auth_token = auth_token
        self.token_provider = token_provider
        self.http = http or requests.Session()
        self._api_calls = 0

    @property
    def api_calls(self) -> int:
        """Total API calls made by this client."""
        return self._api_calls

    def reset_api_calls(self):
        """Reset the API call counter."""
        self._api_calls = 0

    def _get_headers(self) -> dict:
        """Get request headers."""
        token = self.token_provider() if self.token_provider else self.auth_token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _request(self, method: str, url: str, action: str, **kwargs) -> requests.Response:
        """
        Make one request and map failures to typed errors.

        Args:
            method: HTTP method
            url: Full URL
            action: Human-readable description used in error messages
        """
        headers = {**self._get_headers(), **kwargs.pop("headers", {})}
        if self.config.timeout is not None:
            kwargs.setdefault("timeout", self.config.timeout)

        try:
            response = self.http.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as e:
            raise DriveTransportError(f"{action} failed: {e}") from e

        self._api_calls += 1

        if response.status_code == 404:
            raise ResourceNotFound(f"{action} failed", response.status_code, response.text)
        if not response.ok:
            logger.debug("drive_api_error", action=action, status=response.status_code)
            raise RemoteApiError(f"{action} failed", response.status_code, response.text)
        return response

    def search_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[FolderRef]:
        """
        Find a non-trashed folder by exact name.

        When several folders match, the first one Drive returns wins.

        Args:
            name: Folder name
            parent_id: Only search inside this folder

        Returns:
            FolderRef or None if nothing matches
        """
        params = {
            "q": build_folder_query(name=name, parent_id=parent_id),
            "fields": "files(id,name,parents)",
            "pageSize": self.config.search_page_size,
        }
        response = self._request("GET", self.API_FILES, "Folder search", params=params)
        files = response.json().get("files", [])
        if not files:
            return None

        if len(files) > 1:
            logger.debug("folder_search_multiple_matches", name=name, count=len(files))

        first = files[0]
        parents = first.get("parents") or []
        return FolderRef(
            id=first["id"],
            name=first.get("name", name),
            parent_id=parent_id or (parents[0] if parents else None),
        )

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> FolderRef:
        """
        Create a folder.

        Args:
            name: Folder name
            parent_id: Parent folder ID (None = My Drive root)
        """
        metadata = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id:
            metadata["parents"] = [parent_id]

        response = self._request(
            "POST", self.API_FILES, "Folder creation",
            params={"fields": "id,name"},
            json=metadata,
        )
        data = response.json()
        logger.info("folder_created", folder_id=data["id"], name=name, parent_id=parent_id)
        return FolderRef(id=data["id"], name=data.get("name", name), parent_id=parent_id, created=True)

    def verify_is_folder(self, folder_id: str) -> bool:
        """
        Check that an ID refers to an existing, non-trashed folder.

        Returns:
            False on 404 or when the item is not a folder
        """
        try:
            response = self._request(
                "GET", f"{self.API_FILES}/{folder_id}", "Folder lookup",
                params={"fields": "id,name,mimeType,trashed"},
            )
        except ResourceNotFound:
            return False

        data = response.json()
        return data.get("mimeType") == FOLDER_MIME_TYPE and not data.get("trashed", False)

    def upload_file(
        self,
        local_path: Path,
        parent_id: str,
        name: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> str:
        """
        Upload a local file into a folder with a multipart request.

        Args:
            local_path: File to upload
            parent_id: Destination folder ID
            name: Remote name (defaults to the local file name)
            mime_type: Content type (guessed from the extension by default)

        Returns:
            The new file's ID
        """
        local_path = Path(local_path)
        content = local_path.read_bytes()
        metadata = {"name": name or local_path.name, "parents": [parent_id]}
        body, content_type = build_multipart_body(
            metadata, content, mime_type or guess_content_type(local_path)
        )

        response = self._request(
            "POST", self.API_UPLOAD, "File upload",
            params={"uploadType": "multipart", "fields": "id"},
            headers={"Content-Type": content_type},
            data=body,
        )
        file_id = response.json()["id"]
        logger.info("file_uploaded", file_id=file_id, name=metadata["name"], size=len(content))
        return file_id

    def upload(self, target: UploadTarget) -> str:
        """Upload an UploadTarget. Returns the new file's ID."""
        return self.upload_file(target.local_path, target.remote_parent_id, name=target.desired_name)

    def set_public_read_permission(self, item_id: str, discoverable: bool = True):
        """
        Grant read access to anyone with the link.

        Args:
            item_id: File or folder ID
            discoverable: False keeps the item out of search results
        """
        permission = {"role": "reader", "type": "anyone"}
        if not discoverable:
            permission["allowFileDiscovery"] = False

        self._request(
            "POST", f"{self.API_FILES}/{item_id}/permissions", "Sharing",
            json=permission,
        )
        logger.info("permission_granted", item_id=item_id, discoverable=discoverable)

    def delete_item(self, item_id: str):
        """Permanently delete a file or folder."""
        self._request("DELETE", f"{self.API_FILES}/{item_id}", "Deletion")
        logger.info("item_deleted", item_id=item_id)

    def list_child_folders(self, parent_id: str) -> list:
        """
        List all non-trashed folders directly inside a folder, oldest first.

        Args:
            parent_id: Parent folder ID

        Returns:
            List of {id, name, createdTime} dicts
        """
        all_items = []
        page_token = None

        while True:
            params = {
                "q": build_folder_query(parent_id=parent_id),
                "fields": "nextPageToken, files(id,name,createdTime)",
                "orderBy": "createdTime",
                "pageSize": self.config.list_page_size,
            }
            if page_token:
                params["pageToken"] = page_token

            response = self._request("GET", self.API_FILES, "Folder listing", params=params)
            data = response.json()

            all_items.extend(data.get("files", []))
            page_token = data.get("nextPageToken")

            if not page_token:
                break

        return all_items

    def get_about_user(self) -> dict:
        """Get the signed-in user (also a cheap token validity check)."""
        response = self._request("GET", self.API_ABOUT, "Account lookup", params={"fields": "user"})
        return response.json().get("user", {})
