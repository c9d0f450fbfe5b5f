"""Tests for result serialization."""

from __future__ import annotations

import pytest

from nlauncher.cache.models import ApplicationRecord, ClipboardEntry, ProcessInfo, VaultEntry
from nlauncher.results import (
    ApplicationResult,
    CalculationResult,
    ClipboardResult,
    PlaceholderKind,
    PlaceholderResult,
    ProcessResult,
    VaultEntryResult,
    result_to_dict,
)

APPS = [ApplicationRecord(name="Firefox", exec_command="firefox %u", icon_ref="firefox", icon_resolved_path="/i.png")]


class TestResultToDict:
    """Test result_to_dict()."""

    def test_application(self) -> None:
        assert result_to_dict(ApplicationResult(0), APPS) == {
            "type": "application",
            "index": 0,
            "name": "Firefox",
            "exec": "firefox %u",
            "icon": "firefox",
            "icon_path": "/i.png",
        }

    def test_calculation(self) -> None:
        assert result_to_dict(CalculationResult("4"), APPS) == {"type": "calculation", "value": "4"}

    def test_process_with_error(self) -> None:
        data = result_to_dict(ProcessResult(ProcessInfo(7, "chrome", 1.234, 99.99), "denied"), APPS)
        assert data == {
            "type": "process",
            "pid": 7,
            "name": "chrome",
            "cpu_usage": 1.2,
            "memory_mb": 100.0,
            "error": "denied",
        }

    def test_vault_entry_never_exposes_password(self) -> None:
        entry = VaultEntry(title="GitHub", username="octocat", password="s3cret", totp="otp")
        data = result_to_dict(VaultEntryResult(entry), APPS)

        assert "s3cret" not in str(data)
        assert data == {"type": "vault_entry", "title": "GitHub", "username": "octocat", "has_totp": True}

    def test_clipboard(self) -> None:
        assert result_to_dict(ClipboardResult(ClipboardEntry("x")), APPS) == {"type": "clipboard", "content": "x"}

    def test_placeholder(self) -> None:
        data = result_to_dict(PlaceholderResult(PlaceholderKind.LOADING, "Scanning"), APPS)
        assert data == {"type": "placeholder", "kind": "loading", "message": "Scanning"}

    def test_unknown_type(self) -> None:
        with pytest.raises(TypeError):
            result_to_dict("nope", APPS)
