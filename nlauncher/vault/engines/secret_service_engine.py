"""Secret backend for the freedesktop Secret Service (KeePassXC, GNOME Keyring)."""

import logging
from typing import Any, Dict, List, Optional

import secretstorage
from jeepney.bus_messages import message_bus
from jeepney.wrappers import DBusErrorResponse, unwrap_msg
from secretstorage.exceptions import (
    ItemNotFoundException,
    LockedException,
    SecretServiceNotAvailableException,
    SecretStorageException,
)

from ...exceptions import BackendUnavailableError
from ..base import SecretBackend

logger = logging.getLogger(__name__)

SECRETS_BUS_NAME = "org.freedesktop.secrets"


class SecretServiceBackend(SecretBackend):
    """
    Secret Service backend over D-Bus.

    The Secret Service protocol does not accept a master password from
    clients: the collection has to be unlocked in the service itself, so
    unlock() only verifies that the default collection is reachable and open.
    """

    def __init__(self):
        self._connection = None
        self._collection = None

    def _connect(self):
        if self._collection is not None:
            return self._collection
        try:
            logger.debug("Connecting to Secret Service...")
            self._connection = secretstorage.dbus_init()
            self._collection = secretstorage.get_default_collection(self._connection)
        except SecretServiceNotAvailableException as e:
            raise BackendUnavailableError(f"Secret Service is not running: {e}") from e
        except ItemNotFoundException as e:
            raise BackendUnavailableError(f"No default collection: {e}") from e
        except SecretStorageException as e:
            raise BackendUnavailableError(str(e)) from e
        return self._collection

    def unlock(self, secret: str) -> None:
        if self._connect().is_locked():
            raise BackendUnavailableError("KeePassXC is locked")

    def is_locked(self) -> bool:
        return self._connect().is_locked()

    def list_items(self) -> List[Any]:
        items = list(self._connect().get_all_items())
        logger.debug("Found %d items", len(items))
        return items

    def get_label(self, item: Any) -> str:
        return item.get_label()

    def get_secret(self, item: Any) -> bytes:
        try:
            return item.get_secret()
        except LockedException as e:
            raise BackendUnavailableError("Item is locked") from e

    def get_attributes(self, item: Any) -> Dict[str, str]:
        return dict(item.get_attributes())

    def handle(self) -> Optional[int]:
        if self._connection is None:
            return None
        try:
            reply = self._connection.send_and_get_reply(
                message_bus.GetConnectionUnixProcessID(SECRETS_BUS_NAME)
            )
            return int(unwrap_msg(reply)[0])
        except (DBusErrorResponse, OSError, ValueError, IndexError) as e:
            logger.warning("Could not resolve Secret Service PID: %s", e)
            return None

    def close(self) -> None:
        if self._connection is not None:
            try:
                self._connection.close()
            except OSError as e:
                logger.debug("Error closing D-Bus connection: %s", e)
        self._connection = None
        self._collection = None
