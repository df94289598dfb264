"""
Drive-related utilities for Photo Drive.
"""

import re
from typing import Optional

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def escape_query_value(value: str) -> str:
    """Escape a string for use inside single quotes in a Drive `q` query."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_folder_query(name: Optional[str] = None, parent_id: Optional[str] = None) -> str:
    """
    Build a Drive search query for non-trashed folders.

    Args:
        name: Exact folder name to match
        parent_id: Restrict to children of this folder
    """
    clauses = []
    if name is not None:
        clauses.append(f"name='{escape_query_value(name)}'")
    if parent_id:
        clauses.append(f"'{escape_query_value(parent_id)}' in parents")
    clauses.append(f"mimeType='{FOLDER_MIME_TYPE}'")
    clauses.append("trashed=false")
    return " and ".join(clauses)


def folder_url(folder_id: str) -> str:
    """Browser link for a shared folder."""
    return f"https://drive.google.com/drive/folders/{folder_id}"


def direct_download_url(file_id: str) -> str:
    """Link that starts the download directly instead of opening the preview page."""
    return f"https://drive.google.com/uc?export=download&id={file_id}"


def parse_drive_folder_url(url_or_id: str) -> tuple[str | None, str | None]:
    """
    Extract Google Drive folder ID from a URL or raw ID.

    Supports formats:
    - https://drive.google.com/drive/folders/FOLDER_ID
    - https://drive.google.com/drive/folders/FOLDER_ID?usp=sharing
    - https://drive.google.com/drive/u/0/folders/FOLDER_ID
    - Raw folder ID (alphanumeric with - and _)

    Args:
        url_or_id: URL or folder ID string

    Returns:
        Tuple of (folder_id, error_message)
        - (folder_id, None) if valid
        - (None, error_message) if invalid
    """
    url_or_id = url_or_id.strip()

    if re.search(r"drive\.google\.com/(?:file/d/|uc\?)", url_or_id):
        return None, "That's a file link, not a folder link"

    match = re.search(r"drive\.google\.com/drive(?:/u/\d+)?/folders/([a-zA-Z0-9_-]+)", url_or_id)
    if match:
        return match.group(1), None

    # Raw IDs are typically 10+ chars of [A-Za-z0-9_-]
    if re.match(r"^[a-zA-Z0-9_-]{10,}$", url_or_id):
        return url_or_id, None

    if "drive.google.com" in url_or_id:
        return None, "Unrecognized Google Drive URL format"

    return None, "Not a Google Drive URL"
