"""Output destinations for the aggregated text."""

from __future__ import annotations

import logging
from pathlib import Path

import pyperclip
from strif import atomic_output_file

log = logging.getLogger(__name__)


def write_output_file(path: str | Path, content: str) -> None:
    """Write `content` to `path` atomically, creating parent directories."""
    path = Path(path)
    with atomic_output_file(path, make_parents=True) as temp_path:
        Path(temp_path).write_text(content, encoding="utf-8")


def copy_to_clipboard(content: str) -> bool:
    """Copy `content` to the system clipboard. Returns False (with a warning) if unavailable."""
    try:
        pyperclip.copy(content)
    except pyperclip.PyperclipException as e:
        log.warning("Could not copy to clipboard: %s", e)
        return False
    return True
