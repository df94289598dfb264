"""
Formatting utilities for Photo Drive console output.
"""

import unicodedata
from datetime import datetime
from typing import Any, Callable, List, Optional


def format_size(size_bytes: int) -> str:
    """Format bytes as human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format seconds as human readable duration."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    else:
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


def format_date(value: datetime) -> str:
    """Format a datetime as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def plural(count: int, word: str, plural_word: Optional[str] = None) -> str:
    """'1 folder', '3 folders'."""
    if count == 1:
        return f"{count} {word}"
    return f"{count} {plural_word or word + 's'}"


def name_sort_key(name: str) -> str:
    """Case-insensitive, NFC-normalized sort key."""
    return unicodedata.normalize("NFC", name).casefold()


def sort_by_name(items: List[Any], key: Optional[Callable[[Any], str]] = None) -> List[Any]:
    """
    Sort items by name, case-insensitively.

    Args:
        items: Items to sort
        key: Function extracting the name (defaults to the item itself)
    """
    key = key or (lambda item: item)
    return sorted(items, key=lambda item: name_sort_key(key(item)))
