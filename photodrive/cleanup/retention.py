"""
Retention cleanup of old event folders.

Event folders directly under the distribution root are deleted once they
are older than the retention period. Dry runs only report. Real runs
delete folders one at a time and record failures instead of stopping.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Union

from ..core.logging import get_logger
from ..drive.client import DriveClient
from ..errors import ConfigError, PartialCleanupFailure

logger = get_logger(__name__)

MILLIS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class EventFolderInfo:
    """An event folder and its age at the time it was listed."""
    id: str
    name: str
    created_at: datetime
    age_days: int


@dataclass(frozen=True)
class CleanupFailure:
    """A folder that could not be deleted, with the error text."""
    item: EventFolderInfo
    reason: str


@dataclass
class CleanupOutcome:
    """Result of a non-dry-run cleanup."""
    deleted_count: int = 0
    deleted: List[EventFolderInfo] = field(default_factory=list)
    failures: List[CleanupFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def raise_for_failures(self) -> None:
        """Raise PartialCleanupFailure if any deletion failed."""
        if self.failures:
            raise PartialCleanupFailure(self)


def parse_drive_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp from Drive ("2025-01-12T03:04:05.678Z")."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def age_in_days(created_at: datetime, now: datetime) -> int:
    """Whole days elapsed between created_at and now, rounded down."""
    elapsed_ms = (now - created_at).total_seconds() * 1000
    return int(elapsed_ms // MILLIS_PER_DAY)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RetentionCleaner:
    """
    Finds and deletes event folders past the retention period.
    """

    def __init__(self, client: DriveClient, clock: Callable[[], datetime] = _utcnow):
        """
        Args:
            client: Drive API client
            clock: Returns the current aware UTC datetime
        """
        self.client = client
        self.clock = clock

    def list_child_folders(self, parent_id: str) -> List[EventFolderInfo]:
        """
        List event folders under parent_id, aged against the clock right now.
        """
        now = self.clock()
        folders = []
        for item in self.client.list_child_folders(parent_id):
            created_at = parse_drive_timestamp(item["createdTime"])
            folders.append(EventFolderInfo(
                id=item["id"],
                name=item.get("name", ""),
                created_at=created_at,
                age_days=age_in_days(created_at, now),
            ))
        return folders

    @staticmethod
    def select_stale(folders: List[EventFolderInfo], retention_days: int) -> List[EventFolderInfo]:
        """
        Folders strictly older than retention_days.

        A folder exactly retention_days old is kept.
        """
        return [f for f in folders if f.age_days > retention_days]

    def delete_folders(self, folders: List[EventFolderInfo]) -> CleanupOutcome:
        """
        Delete each folder independently; one failure never stops the rest.
        """
        outcome = CleanupOutcome()

        for folder in folders:
            try:
                self.client.delete_item(folder.id)
            except Exception as e:
                logger.warning("cleanup_delete_failed", folder_id=folder.id, name=folder.name, error=str(e))
                outcome.failures.append(CleanupFailure(item=folder, reason=str(e)))
                continue

            outcome.deleted_count += 1
            outcome.deleted.append(folder)
            logger.info("cleanup_deleted", folder_id=folder.id, name=folder.name, age_days=folder.age_days)

        return outcome

    def run(self, parent_id: str, retention_days: int,
            dry_run: bool = True) -> Union[List[EventFolderInfo], CleanupOutcome]:
        """
        Clean up old event folders.

        Args:
            parent_id: Distribution root folder ID
            retention_days: Keep folders this many days old or younger
            dry_run: Only report what would be deleted

        Returns:
            The stale folders (dry run) or a CleanupOutcome
        """
        if retention_days < 0:
            raise ConfigError("Retention days must be 0 or greater")

        stale = self.select_stale(self.list_child_folders(parent_id), retention_days)
        logger.info("cleanup_candidates", parent_id=parent_id, stale=len(stale),
                    retention_days=retention_days, dry_run=dry_run)

        if dry_run:
            return stale

        return self.delete_folders(stale)
