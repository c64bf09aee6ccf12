"""
Utility functions shared across snipflow.
"""

import os
import re
import time
from pathlib import Path

_LEADING_WHITESPACE = re.compile(r"^\s*")


def get_state_dir() -> str:
    """
    Return the directory used for logs and the recency list, creating it.

    Honors ``SNIPFLOW_HOME`` and falls back to ``~/.snipflow``.
    """
    base = Path(os.getenv("SNIPFLOW_HOME", "~/.snipflow")).expanduser()
    base.mkdir(parents=True, exist_ok=True)
    return str(base)


def now_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


def leading_indent(line: str) -> str:
    """Return the leading whitespace of ``line``."""
    match = _LEADING_WHITESPACE.match(line)
    return match.group(0) if match else ""


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n`` keeping empty trailing segments."""
    return re.split(r"\r?\n", text)
