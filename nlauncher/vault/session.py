"""On-disk vault session metadata."""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VaultSession:
    """Proof of a successful unlock: when it happened and which backend served it."""
    unlocked_at: int
    backend_handle: Optional[int] = None


class SessionStore:
    """Reads and writes the session file. The file is untrusted input."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Optional[VaultSession]:
        """
        Parse the session file.

        Returns:
            VaultSession, or None if the file is absent or corrupt (corrupt files are deleted)
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Discarding unreadable vault session %s: %s", self.path, e)
            self.delete()
            return None

        session = self._parse(data)
        if session is None:
            logger.warning("Discarding malformed vault session %s", self.path)
            self.delete()
        return session

    @staticmethod
    def _parse(data) -> Optional[VaultSession]:
        if not isinstance(data, dict):
            return None
        unlocked_at = data.get("unlocked_at")
        handle = data.get("backend_handle")
        # bool is an int subclass, reject it explicitly
        if not isinstance(unlocked_at, int) or isinstance(unlocked_at, bool):
            return None
        if handle is not None and (not isinstance(handle, int) or isinstance(handle, bool)):
            return None
        return VaultSession(unlocked_at=unlocked_at, backend_handle=handle)

    def write(self, session: VaultSession) -> None:
        """
        Persist the session with owner-only permissions.

        The file is replaced atomically so a concurrent read() never sees
        a partially written session.

        Raises:
            OSError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file with mode 0600 under a unique name
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=self.path.name + ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(asdict(session), f)
            os.replace(tmp_name, self.path)
        except Exception:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to delete vault session %s: %s", self.path, e)


__all__ = ["VaultSession", "SessionStore"]
