"""
Idempotent "make sure it exists" operations on top of DriveClient.

Folders are found before they are created, so running the same upload
twice reuses the same folders. The root folder goes through three tiers:
remembered ID, then search by name, then create.
"""

from typing import Iterable, Optional

from ..core.logging import get_logger
from ..drive.client import DriveClient, FolderRef
from ..drive.store import HintStore, NullHintStore
from ..drive.utils import direct_download_url, folder_url
from ..errors import RemoteApiError

logger = get_logger(__name__)


class ResourceProvisioner:
    """
    Ensures folders exist and issues public links.

    Errors from Drive propagate unchanged; nothing here rolls back.
    """

    def __init__(
        self,
        client: DriveClient,
        root_folder_name: str = "PhotoDistribution",
        hint_store: Optional[HintStore] = None,
    ):
        """
        Args:
            client: Drive API client
            root_folder_name: Name of the top-level distribution folder
            hint_store: Where the root folder ID is remembered between runs
        """
        self.client = client
        self.root_folder_name = root_folder_name
        self.hint_store = hint_store or NullHintStore()

    def ensure_root_folder(self, remembered_id: Optional[str] = None) -> FolderRef:
        """
        Get the distribution root folder, creating it if needed.

        Args:
            remembered_id: ID to try first (defaults to the hint store value)

        Returns:
            FolderRef for an existing folder
        """
        hint = self.hint_store.load()
        candidate = remembered_id or hint

        if candidate:
            try:
                is_folder = self.client.verify_is_folder(candidate)
            except RemoteApiError as e:
                logger.warning("root_folder_verify_failed", folder_id=candidate, error=str(e))
                is_folder = False

            if is_folder:
                logger.debug("root_folder_reused", folder_id=candidate)
                folder = FolderRef(id=candidate, name=self.root_folder_name)
                self._remember(folder.id, hint)
                return folder

            logger.warning("root_folder_hint_stale", folder_id=candidate)

        folder = self.client.search_folder(self.root_folder_name)
        if folder is None:
            folder = self.client.create_folder(self.root_folder_name)
        else:
            logger.info("root_folder_found", folder_id=folder.id)

        self._remember(folder.id, hint)
        return folder

    def _remember(self, folder_id: str, hint: Optional[str]) -> None:
        if hint != folder_id:
            self.hint_store.save(folder_id)

    def ensure_child_folder(self, parent_id: str, name: str) -> FolderRef:
        """
        Find a folder by name inside parent_id, or create it.

        Args:
            parent_id: Parent folder ID
            name: Child folder name
        """
        folder = self.client.search_folder(name, parent_id=parent_id)
        if folder is not None:
            logger.debug("folder_reused", folder_id=folder.id, name=name)
            return folder
        return self.client.create_folder(name, parent_id=parent_id)

    def ensure_folder_path(self, parent_id: str, names: Iterable[str]) -> list[FolderRef]:
        """
        Ensure a chain of nested folders, one level at a time.

        Returns:
            FolderRefs from outermost to innermost
        """
        folders = []
        current = parent_id
        for name in names:
            folder = self.ensure_child_folder(current, name)
            folders.append(folder)
            current = folder.id
        return folders

    def publish_file(self, file_id: str) -> str:
        """Share a file with anyone who has the link; returns a direct-download URL."""
        self.client.set_public_read_permission(file_id, discoverable=True)
        return direct_download_url(file_id)

    def publish_folder(self, folder_id: str) -> str:
        """Share a folder with anyone who has the link, hidden from search."""
        self.client.set_public_read_permission(folder_id, discoverable=False)
        return folder_url(folder_id)
