"""Vault session manager: time-bounded unlock state and credential retrieval."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

import psutil

from ..cache.models import VaultEntry
from ..exceptions import BackendUnavailableError, VaultBusyError, VaultError, VaultLockedError
from .base import SecretBackend
from .session import SessionStore, VaultSession

logger = logging.getLogger(__name__)

SESSION_TTL = 600.0

UNLOCK_GUIDANCE = (
    "Please open and unlock KeePassXC first. "
    "Enable 'Secret Service Integration' in KeePassXC settings."
)

USERNAME_ATTRIBUTES = ("username", "UserName")
TOTP_ATTRIBUTES = ("totp", "TOTP")


def _first_attribute(attributes, names) -> Optional[str]:
    for name in names:
        value = attributes.get(name)
        if value:
            return value
    return None


class VaultManager:
    """
    Manages the vault session.

    Validity is checked lazily on read: is_unlocked() deletes the session
    file as soon as it finds it expired or its backend gone.
    """

    def __init__(
        self,
        backend_factory: Callable[[], SecretBackend],
        session_path: Path,
        ttl: float = SESSION_TTL,
        clock: Callable[[], float] = time.time,
        is_alive: Callable[[int], bool] = psutil.pid_exists,
    ):
        """
        Initialize the vault manager.

        Args:
            backend_factory: Callable returning a fresh SecretBackend connection
            session_path: Path of the session metadata file
            ttl: Session lifetime in seconds
            clock: Time source returning epoch seconds
            is_alive: Liveness check for a backend handle (process id)
        """
        self._backend_factory = backend_factory
        self.sessions = SessionStore(session_path)
        self.ttl = ttl
        self._clock = clock
        self._is_alive = is_alive
        self._unlock_lock = threading.Lock()

    @property
    def unlock_in_progress(self) -> bool:
        return self._unlock_lock.locked()

    def current_session(self) -> Optional[VaultSession]:
        """
        Get the session if it is still valid.

        Returns:
            The valid session, or None (an invalid session file is deleted)
        """
        session = self.sessions.read()
        if session is None:
            return None

        age = self._clock() - session.unlocked_at
        if age >= self.ttl or age < 0:
            logger.info("Vault session expired")
            self.sessions.delete()
            return None

        if session.backend_handle is not None and not self._handle_alive(session.backend_handle):
            logger.info("Vault backend (PID %d) is gone", session.backend_handle)
            self.sessions.delete()
            return None

        return session

    def is_unlocked(self) -> bool:
        """Check whether a valid session exists. May delete the session file."""
        return self.current_session() is not None

    def unlock(self, secret: str) -> List[VaultEntry]:
        """
        Unlock the vault and fetch its entries.

        Only one unlock may run at a time. Nothing is persisted unless the
        whole operation succeeds.

        Args:
            secret: Secret typed by the user

        Returns:
            All decrypted entries

        Raises:
            VaultBusyError: If another unlock is already in flight
            BackendUnavailableError: If the backend is unreachable or locked
            VaultError: For any other failure
        """
        if not self._unlock_lock.acquire(blocking=False):
            raise VaultBusyError("An unlock is already in progress")

        try:
            backend = self._backend_factory()
            try:
                backend.unlock(secret)
                entries = self._read_entries(backend)
                handle = backend.handle()
            finally:
                backend.close()

            self.sessions.write(VaultSession(unlocked_at=int(self._clock()), backend_handle=handle))
            logger.info("Vault unlocked (%d entries)", len(entries))
            return entries
        except BackendUnavailableError as e:
            raise BackendUnavailableError(f"{UNLOCK_GUIDANCE} Error: {e}") from e
        except VaultError:
            raise
        except Exception as e:
            raise VaultError(f"Vault unlock failed: {e}") from e
        finally:
            self._unlock_lock.release()

    def load_entries_from_existing_session(self) -> List[VaultEntry]:
        """
        Re-fetch entries from the live backend without re-authenticating.

        Returns:
            All decrypted entries

        Raises:
            VaultLockedError: If there is no valid session
            BackendUnavailableError: If the backend is unreachable or locked
            VaultError: For any other failure
        """
        if not self.is_unlocked():
            raise VaultLockedError("The vault is locked")

        try:
            backend = self._backend_factory()
            try:
                entries = self._read_entries(backend)
            finally:
                backend.close()
        except BackendUnavailableError as e:
            raise BackendUnavailableError(f"{UNLOCK_GUIDANCE} Error: {e}") from e
        except VaultError:
            raise
        except Exception as e:
            raise VaultError(f"Failed to load vault entries: {e}") from e

        logger.debug("Reloaded %d vault entries", len(entries))
        return entries

    def lock(self) -> None:
        """Forget the session."""
        self.sessions.delete()
        logger.info("Vault locked")

    @staticmethod
    def filter(entries: List[VaultEntry], fragment: str) -> List[VaultEntry]:
        """
        Filter entries by title or username.

        Args:
            entries: Entries to filter
            fragment: Case-insensitive substring; empty keeps everything

        Returns:
            Matching entries in original order
        """
        needle = fragment.strip().lower()
        if not needle:
            return list(entries)
        return [
            entry for entry in entries
            if needle in entry.title.lower() or needle in entry.username.lower()
        ]

    def _handle_alive(self, handle: int) -> bool:
        try:
            return bool(self._is_alive(handle))
        except Exception as e:
            logger.debug("Liveness check for PID %d failed: %s", handle, e)
            return False

    @staticmethod
    def _read_entries(backend: SecretBackend) -> List[VaultEntry]:
        if backend.is_locked():
            raise BackendUnavailableError("The secret collection is locked")

        entries: List[VaultEntry] = []
        for item in backend.list_items():
            attributes = backend.get_attributes(item) or {}
            entries.append(VaultEntry(
                title=backend.get_label(item),
                username=_first_attribute(attributes, USERNAME_ATTRIBUTES) or "",
                password=backend.get_secret(item).decode("utf-8", errors="replace"),
                totp=_first_attribute(attributes, TOTP_ATTRIBUTES),
            ))
        return entries


__all__ = ["VaultManager", "SESSION_TTL", "UNLOCK_GUIDANCE"]
