"""Bounded, most-recent-first clipboard history persisted as a text file.

One entry per line. Backslashes and line breaks inside an entry are written
as the escapes \\\\, \\n and \\r, so the file is not raw clipboard text.
"""

import logging
import os
from pathlib import Path
from typing import List

from .models import ClipboardEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def escape_history_line(text: str) -> str:
    """
    Escape a clipboard value so it fits on a single line.

    Args:
        text: Raw clipboard content

    Returns:
        Escaped string with no line breaks
    """
    # Escape backslashes first (must be first)
    text = text.replace("\\", "\\\\")
    text = text.replace("\n", "\\n")
    text = text.replace("\r", "\\r")
    return text


_ESCAPES = {"n": "\n", "r": "\r", "\\": "\\"}


def unescape_history_line(line: str) -> str:
    """
    Reverse escape_history_line.

    A backslash that does not start one of the escapes written by
    escape_history_line is kept as is, so raw lines from older history
    files keep their backslashes (e.g. "C:\\Users").
    """
    out = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\" and i + 1 < len(line) and line[i + 1] in _ESCAPES:
            out.append(_ESCAPES[line[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class ClipboardHistory:
    """Clipboard history file: one escaped entry per line, most recent first."""

    def __init__(self, path: Path, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize the clipboard history store.

        Args:
            path: Path to the history text file
            capacity: Maximum number of entries kept
        """
        self.path = Path(path)
        self.capacity = capacity

    def load(self) -> List[ClipboardEntry]:
        """
        Load history entries (most recent first).

        Returns:
            Entries from disk, or an empty list if the file is absent or unreadable
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.read().split("\n")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read clipboard history %s: %s", self.path, e)
            return []
        return [ClipboardEntry(content=unescape_history_line(line)) for line in lines if line]

    def add(self, content: str) -> List[ClipboardEntry]:
        """
        Add content to the front of the history.

        Existing copies of the same content are moved to the front instead of
        being duplicated, and the oldest entries are dropped beyond capacity.

        Args:
            content: Clipboard text to record

        Returns:
            The updated history
        """
        if not content:
            return self.load()

        history = [entry.content for entry in self.load()]

        # Remove if already exists (move to front)
        if content in history:
            history.remove(content)

        history.insert(0, content)

        if len(history) > self.capacity:
            history = history[:self.capacity]

        self._save(history)
        return [ClipboardEntry(content=item) for item in history]

    def clear(self) -> None:
        """Clear the clipboard history."""
        self._save([])

    def _save(self, history: List[str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                for item in history:
                    f.write(escape_history_line(item) + "\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning("Failed to save clipboard history to %s: %s", self.path, e)


def filter_entries(entries: List[ClipboardEntry], fragment: str) -> List[ClipboardEntry]:
    """Case-insensitive containment filter; an empty fragment keeps everything."""
    needle = fragment.strip().lower()
    if not needle:
        return list(entries)
    return [entry for entry in entries if needle in entry.content.lower()]


__all__ = [
    "ClipboardHistory",
    "DEFAULT_CAPACITY",
    "escape_history_line",
    "unescape_history_line",
    "filter_entries",
]
