"""Base classes and interfaces for secret backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class SecretBackend(ABC):
    """Abstract base class for secret storage backends."""

    @abstractmethod
    def unlock(self, secret: str) -> None:
        """
        Establish a usable connection to the backend.

        Args:
            secret: Secret typed by the user

        Raises:
            BackendUnavailableError: If the backend is unreachable or stays locked
        """
        pass

    @abstractmethod
    def is_locked(self) -> bool:
        """Return True if the backend's collection is locked."""
        pass

    @abstractmethod
    def list_items(self) -> List[Any]:
        """
        List opaque item references.

        Returns:
            Item references accepted by get_label / get_secret / get_attributes
        """
        pass

    @abstractmethod
    def get_label(self, item: Any) -> str:
        """Return the display label of an item."""
        pass

    @abstractmethod
    def get_secret(self, item: Any) -> bytes:
        """Return the raw secret of an item."""
        pass

    @abstractmethod
    def get_attributes(self, item: Any) -> Dict[str, str]:
        """Return the attribute map of an item."""
        pass

    def handle(self) -> Optional[int]:
        """
        Identify the live backend so a session can be revalidated later.

        Returns:
            Process id of the backend service, or None if unknown
        """
        return None

    def close(self) -> None:
        """Release the backend connection."""
        pass
