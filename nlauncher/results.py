"""Search result types: a closed tagged union consumed by the presentation layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Union

from .cache.models import ApplicationRecord, ClipboardEntry, ProcessInfo, VaultEntry


@dataclass(frozen=True)
class ApplicationResult:
    """An application, by index into the router's application list."""
    index: int


@dataclass(frozen=True)
class CalculationResult:
    value: str


@dataclass(frozen=True)
class ProcessResult:
    """A running process; error is set when terminating it failed."""
    process: ProcessInfo
    error: Optional[str] = None


@dataclass(frozen=True)
class VaultEntryResult:
    entry: VaultEntry


@dataclass(frozen=True)
class ClipboardResult:
    entry: ClipboardEntry


class PlaceholderKind(Enum):
    LOADING = "loading"
    UNLOCKING = "unlocking"
    INITIALIZING = "initializing"
    ERROR = "error"
    HINT = "hint"


@dataclass(frozen=True)
class PlaceholderResult:
    """Non-actionable row shown while a mode waits on background work."""
    kind: PlaceholderKind
    message: str


SearchResult = Union[
    ApplicationResult,
    CalculationResult,
    ProcessResult,
    VaultEntryResult,
    ClipboardResult,
    PlaceholderResult,
]


def result_to_dict(result: SearchResult, applications: Sequence[ApplicationRecord]) -> Dict[str, Any]:
    """
    Convert a result to a JSON-serializable dict for UI consumption.

    Passwords are never included.

    Args:
        result: Result to convert
        applications: Application list the ApplicationResult indices refer to

    Returns:
        Dict with a "type" key and kind-specific fields
    """
    match result:
        case ApplicationResult(index=index):
            app = applications[index]
            return {
                "type": "application",
                "index": index,
                "name": app.name,
                "exec": app.exec_command,
                "icon": app.icon_ref,
                "icon_path": app.icon_resolved_path,
            }
        case CalculationResult(value=value):
            return {"type": "calculation", "value": value}
        case ProcessResult(process=proc, error=error):
            return {
                "type": "process",
                "pid": proc.pid,
                "name": proc.name,
                "cpu_usage": round(proc.cpu_usage, 1),
                "memory_mb": round(proc.memory_mb, 1),
                "error": error,
            }
        case VaultEntryResult(entry=entry):
            return {
                "type": "vault_entry",
                "title": entry.title,
                "username": entry.username,
                "has_totp": entry.totp is not None,
            }
        case ClipboardResult(entry=entry):
            return {"type": "clipboard", "content": entry.content}
        case PlaceholderResult(kind=kind, message=message):
            return {"type": "placeholder", "kind": kind.value, "message": message}
    raise TypeError(f"Unknown result type: {type(result).__name__}")


__all__ = [
    "ApplicationResult",
    "CalculationResult",
    "ProcessResult",
    "VaultEntryResult",
    "ClipboardResult",
    "PlaceholderKind",
    "PlaceholderResult",
    "SearchResult",
    "result_to_dict",
]
