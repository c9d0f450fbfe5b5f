"""Data models for the launcher core."""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any


@dataclass(frozen=True)
class ApplicationRecord:
    """Data model for a launchable application."""
    name: str
    exec_command: str
    icon_ref: Optional[str] = None
    icon_resolved_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the cache file."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationRecord":
        """
        Build a record from a cache file entry.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        name = data["name"]
        exec_command = data["exec_command"]
        if not isinstance(name, str) or not isinstance(exec_command, str):
            raise ValueError("name and exec_command must be strings")
        icon_ref = data.get("icon_ref")
        icon_resolved_path = data.get("icon_resolved_path")
        return cls(
            name=name,
            exec_command=exec_command,
            icon_ref=str(icon_ref) if icon_ref is not None else None,
            icon_resolved_path=str(icon_resolved_path) if icon_resolved_path is not None else None,
        )


@dataclass(frozen=True)
class ProcessInfo:
    """Data model for a running process."""
    pid: int
    name: str
    cpu_usage: float = 0.0
    memory_mb: float = 0.0


@dataclass(frozen=True)
class VaultEntry:
    """Data model for a decrypted vault credential."""
    title: str
    username: str
    password: str
    totp: Optional[str] = None

    def __repr__(self) -> str:
        return f"VaultEntry(title={self.title!r}, username={self.username!r})"


@dataclass(frozen=True)
class ClipboardEntry:
    """Data model for a clipboard history entry."""
    content: str
