"""Tests for clipboard history storage and the clipboard watcher."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from nlauncher.cache.history import (
    ClipboardHistory,
    escape_history_line,
    filter_entries,
    unescape_history_line,
)
from nlauncher.cache.models import ClipboardEntry
from nlauncher.clipboard_daemon import ClipboardWatcher


class TestClipboardHistory:
    """Test ClipboardHistory."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert ClipboardHistory(tmp_path / "history.txt").load() == []

    def test_add_puts_newest_first(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        history.add("first")
        history.add("second")

        assert [e.content for e in history.load()] == ["second", "first"]

    def test_duplicate_moves_to_front(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        for item in ("a", "b", "c"):
            history.add(item)

        entries = history.add("a")

        assert [e.content for e in entries] == ["a", "c", "b"]
        assert history.load() == entries

    def test_capacity_evicts_oldest(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt", capacity=100)
        for i in range(101):
            history.add(f"item {i}")

        entries = history.load()

        assert len(entries) == 100
        assert entries[0].content == "item 100"
        assert ClipboardEntry("item 0") not in entries

    def test_multiline_content_survives_a_reload(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        history.add("line one\nline two\\n")

        assert history.load() == [ClipboardEntry("line one\nline two\\n")]
        assert len((tmp_path / "history.txt").read_text().splitlines()) == 1

    def test_empty_content_is_ignored(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        assert history.add("") == []
        assert not (tmp_path / "history.txt").exists()

    def test_clear(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        history.add("x")
        history.clear()
        assert history.load() == []


class TestEscaping:
    """Test line escaping helpers."""

    def test_escape_has_no_line_breaks(self) -> None:
        assert escape_history_line("a\nb\r\\") == "a\\nb\\r\\\\"

    def test_unescape_keeps_trailing_backslash(self) -> None:
        assert unescape_history_line("abc\\") == "abc\\"

    def test_unescape_keeps_unknown_escapes(self) -> None:
        assert unescape_history_line("C:\\Users\\me") == "C:\\Users\\me"
        assert unescape_history_line("tab\\there") == "tab\\there"

    def test_windows_path_survives_a_reload(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        history.add("C:\\Users\\me")

        assert history.load() == [ClipboardEntry("C:\\Users\\me")]

    def test_raw_line_with_backslash_is_loaded_unchanged(self, tmp_path: Path) -> None:
        path = tmp_path / "history.txt"
        path.write_text("C:\\Users\\me\n", encoding="utf-8")

        assert ClipboardHistory(path).load() == [ClipboardEntry("C:\\Users\\me")]


class TestFilterEntries:
    """Test filter_entries()."""

    def test_filter(self) -> None:
        entries = [ClipboardEntry("Hello World"), ClipboardEntry("goodbye"), ClipboardEntry("world peace")]
        assert filter_entries(entries, "WORLD") == [entries[0], entries[2]]
        assert filter_entries(entries, "") == entries


class TestClipboardWatcher:
    """Test ClipboardWatcher.check_once()."""

    def test_records_only_changes(self, tmp_path: Path) -> None:
        history = ClipboardHistory(tmp_path / "history.txt")
        reader = MagicMock(side_effect=["one", "one", None, "two"])
        watcher = ClipboardWatcher(history, read_clipboard=reader)

        results = [watcher.check_once() for _ in range(4)]

        assert results == [True, False, False, True]
        assert [e.content for e in history.load()] == ["two", "one"]
