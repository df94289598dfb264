"""
Report formatting for the upload and cleanup tools.

Functions return lists of lines; the callers print them.
"""

import sys
from typing import List, Optional

from ..cleanup.retention import CleanupOutcome, EventFolderInfo
from ..core.formatting import format_date, plural
from ..provision.uploader import UploadReport
from .colors import Colors, colors_enabled, paint


def format_folder_lines(folder: EventFolderInfo) -> List[str]:
    """Three-line description of one event folder."""
    return [
        f"  • {folder.name}",
        f"    Created: {format_date(folder.created_at)}",
        f"    Age: {plural(folder.age_days, 'day')}",
    ]


def format_stale_folders(folders: List[EventFolderInfo], color: bool = False) -> List[str]:
    """Dry-run listing of folders that would be deleted."""
    if not folders:
        return [paint("  No folders are past the retention period.", Colors.GREEN, color)]

    lines = [paint(f"  {plural(len(folders), 'folder')} would be deleted:", Colors.YELLOW, color), ""]
    for folder in folders:
        lines.extend(format_folder_lines(folder))
        lines.append("")
    lines.append("Run again with --execute to delete them.")
    return lines


def format_cleanup_outcome(outcome: CleanupOutcome, color: bool = False) -> List[str]:
    """Deleted and failed folders after a real cleanup."""
    if outcome.deleted_count == 0 and not outcome.failures:
        return [paint("  No folders are past the retention period.", Colors.GREEN, color)]

    lines = []
    if outcome.deleted_count:
        lines.append(paint(f"Deleted {plural(outcome.deleted_count, 'folder')}:", Colors.GREEN, color))
        lines.append("")
        for folder in outcome.deleted:
            lines.extend(format_folder_lines(folder))
            lines.append("")

    if outcome.failures:
        lines.append(paint(f"Failed to delete {plural(len(outcome.failures), 'folder')}:", Colors.RED, color))
        lines.append("")
        for failure in outcome.failures:
            lines.append(f"  • {failure.item.name}")
            lines.append(f"    Error: {failure.reason}")
            lines.append("")

    return lines


def format_upload_report(report: UploadReport, color: bool = False) -> List[str]:
    """Share links per model."""
    lines = [
        paint(f"Uploaded {plural(report.files_uploaded, 'file')} to {report.event_folder.name}", Colors.GREEN, color),
        "",
    ]
    width = max((len(name) for name in report.urls), default=0)
    for model_name, url in report.urls.items():
        lines.append(f"  {model_name.ljust(width)}  {url}")
    return lines


def print_error(message: str, detail: Optional[str] = None) -> None:
    """Print an error to stderr."""
    color = colors_enabled(sys.stderr)
    print(paint(f"Error: {message}", Colors.RED, color), file=sys.stderr)
    if detail:
        print(f"   {detail}", file=sys.stderr)
