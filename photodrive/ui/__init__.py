"""
Console output for the command line tools.
"""

from .colors import Colors, colors_enabled, paint
from .report import (
    format_cleanup_outcome,
    format_folder_lines,
    format_stale_folders,
    format_upload_report,
    print_error,
)

__all__ = [
    "Colors",
    "colors_enabled",
    "paint",
    "format_cleanup_outcome",
    "format_folder_lines",
    "format_stale_folders",
    "format_upload_report",
    "print_error",
]
