"""
Retention cleanup of old event folders.
"""

from .retention import CleanupFailure, CleanupOutcome, EventFolderInfo, RetentionCleaner

__all__ = [
    "CleanupFailure",
    "CleanupOutcome",
    "EventFolderInfo",
    "RetentionCleaner",
]
