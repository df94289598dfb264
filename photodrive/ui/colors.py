"""
Shared color definitions for terminal output.
"""

import os
import sys


class Colors:
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    GREEN = "\x1b[38;2;74;222;128m"
    YELLOW = "\x1b[38;2;250;204;21m"
    RED = "\x1b[38;2;248;113;113m"
    MUTED = "\x1b[38;2;148;163;184m"


def colors_enabled(stream=None) -> bool:
    """Colors only on a TTY, and never when NO_COLOR is set."""
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def paint(text: str, color: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{color}{text}{Colors.RESET}"
