"""
Distribution upload workflows.

Two ways to hand photos to models:
- folder mode: one shared folder per model, photos uploaded individually
- archive mode: one zip per model, shared as a direct-download link

Both place their content inside an event folder under the distribution
root. If anything fails mid-way, the folders and files this run created
are deleted again (newest first) before the error propagates.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..core.formatting import format_size, sort_by_name
from ..core.logging import get_logger
from ..core.pacing import Pacer, no_pacing
from ..drive.client import FolderRef, UploadTarget
from .provisioner import ResourceProvisioner

logger = get_logger(__name__)

PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}
ARCHIVE_EXTENSION = ".zip"
EVENT_DIR_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}_.+")


@dataclass
class ModelUpload:
    """Photos for one model."""
    model_name: str
    files: List[Path] = field(default_factory=list)


@dataclass
class ArchiveUpload:
    """A zip archive for one model."""
    model_name: str
    archive_path: Path


@dataclass
class UploadReport:
    """Result of one upload run: where things went and the links to send."""
    event_folder: FolderRef
    urls: dict = field(default_factory=dict)  # model name -> shared URL
    files_uploaded: int = 0


def event_folder_name(event_date: date, event_name: str) -> str:
    """Event folder name, e.g. "2025-01-12_Spring Shoot"."""
    return f"{event_date.isoformat()}_{event_name}"


def event_folder_name_for_dir(event_dir: Path, today: Optional[date] = None) -> str:
    """
    Event folder name for a local event directory.

    A directory already named "YYYY-MM-DD_name" is used as-is; anything
    else is prefixed with today's date.
    """
    name = Path(event_dir).resolve().name
    if EVENT_DIR_PATTERN.match(name):
        return name
    return event_folder_name(today or date.today(), name)


def list_photo_files(directory: Path) -> List[Path]:
    """Photo files directly inside a directory, sorted by name."""
    photos = [
        p for p in Path(directory).iterdir()
        if p.is_file() and p.suffix.lower() in PHOTO_EXTENSIONS
    ]
    return sort_by_name(photos, key=lambda p: p.name)


def collect_model_uploads(event_dir: Path) -> List[ModelUpload]:
    """
    Treat each sub-directory of event_dir as one model's photo folder.

    Sub-directories without photos are skipped.
    """
    uploads = []
    model_dirs = [p for p in Path(event_dir).iterdir() if p.is_dir()]
    for model_dir in sort_by_name(model_dirs, key=lambda p: p.name):
        photos = list_photo_files(model_dir)
        if not photos:
            logger.warning("model_folder_empty", model=model_dir.name)
            continue
        uploads.append(ModelUpload(model_name=model_dir.name, files=photos))
    return uploads


def collect_archive_uploads(event_dir: Path) -> List[ArchiveUpload]:
    """Treat each zip in event_dir as one model's archive (model name = file stem)."""
    archives = [
        p for p in Path(event_dir).iterdir()
        if p.is_file() and p.suffix.lower() == ARCHIVE_EXTENSION
    ]
    return [ArchiveUpload(model_name=p.stem, archive_path=p) for p in sort_by_name(archives, key=lambda p: p.name)]


def delete_local_archives(paths: Iterable[Path]) -> int:
    """
    Remove local archives after a successful upload.

    Returns:
        Number of files removed. Failures are logged and skipped.
    """
    removed = 0
    for path in paths:
        try:
            Path(path).unlink()
            removed += 1
        except OSError as e:
            logger.warning("local_archive_delete_failed", path=str(path), error=str(e))
    return removed


class DistributionUploader:
    """
    Uploads an event's photos or archives and collects the share links.

    All Drive calls happen sequentially. A Pacer spaces out consecutive
    models.
    """

    def __init__(
        self,
        provisioner: ResourceProvisioner,
        pacer: Optional[Pacer] = None,
        model_folder_suffix: str = "",
        echo: Callable[[str], None] = print,
    ):
        self.provisioner = provisioner
        self.client = provisioner.client
        self.pacer = pacer or no_pacing()
        self.model_folder_suffix = model_folder_suffix
        self.echo = echo

    def model_folder_name(self, model_name: str) -> str:
        return f"{model_name}{self.model_folder_suffix}"

    def upload_model_folders(self, root_id: str, event_folder_name: str,
                             models: Iterable[ModelUpload]) -> UploadReport:
        """
        Upload each model's photos into its own shared folder.

        Args:
            root_id: Distribution root folder ID
            event_folder_name: Event folder name (e.g. "2025-01-12_Event")
            models: Photos grouped by model

        Returns:
            UploadReport with one folder URL per model
        """
        created: List[str] = []
        try:
            event_folder = self._ensure_tracked(root_id, event_folder_name, created)
            report = UploadReport(event_folder=event_folder)

            for model in models:
                self.pacer.wait()
                self.echo(f"   • {model.model_name} ({len(model.files)} files)")

                folder = self._ensure_tracked(event_folder.id, self.model_folder_name(model.model_name), created)
                for path in model.files:
                    created.append(self.client.upload(UploadTarget.for_file(path, folder.id)))
                    report.files_uploaded += 1

                url = self.provisioner.publish_folder(folder.id)
                report.urls[model.model_name] = url
                self.echo(f"     done: {url}")
        except Exception:
            self._compensate(created)
            raise

        return report

    def upload_archives(self, root_id: str, event_folder_name: str,
                        archives: Iterable[ArchiveUpload]) -> UploadReport:
        """
        Upload each model's zip and share it as a direct-download link.

        Returns:
            UploadReport with one download URL per model
        """
        created: List[str] = []
        try:
            event_folder = self._ensure_tracked(root_id, event_folder_name, created)
            report = UploadReport(event_folder=event_folder)

            for archive in archives:
                self.pacer.wait()
                self.echo(f"   • {archive.archive_path.name} ({format_size(archive.archive_path.stat().st_size)})")

                file_id = self.client.upload(UploadTarget.for_file(archive.archive_path, event_folder.id))
                created.append(file_id)
                report.files_uploaded += 1

                url = self.provisioner.publish_file(file_id)
                report.urls[archive.model_name] = url
                self.echo(f"     done: {url}")
        except Exception:
            self._compensate(created)
            raise

        return report

    def _ensure_tracked(self, parent_id: str, name: str, created: List[str]) -> FolderRef:
        folder = self.provisioner.ensure_child_folder(parent_id, name)
        if folder.created:
            created.append(folder.id)
        return folder

    def _compensate(self, created: List[str]) -> None:
        """Delete what this run created, newest first. Never raises."""
        if not created:
            return

        self.echo("   Upload failed, removing folders and files created by this run...")
        for item_id in reversed(created):
            try:
                self.client.delete_item(item_id)
            except Exception as e:
                logger.warning("compensating_delete_failed", item_id=item_id, error=str(e))
