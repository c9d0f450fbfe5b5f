"""Vault package: secret backends and the session manager."""

from .base import SecretBackend
from .factory import backend_factory, create_secret_backend
from .manager import SESSION_TTL, VaultManager
from .session import SessionStore, VaultSession

__all__ = [
    "SecretBackend",
    "backend_factory",
    "create_secret_backend",
    "SESSION_TTL",
    "VaultManager",
    "SessionStore",
    "VaultSession",
]
