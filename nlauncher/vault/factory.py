"""Factory for creating secret backends based on configuration."""

from typing import Callable

from .base import SecretBackend

DEFAULT_BACKEND = "secretservice"


def create_secret_backend(backend_name: str = DEFAULT_BACKEND) -> SecretBackend:
    """
    Create a secret backend instance.

    Args:
        backend_name: Name of the backend to create

    Returns:
        SecretBackend instance

    Raises:
        ValueError: If backend name is unknown
    """
    backend = backend_name.lower()

    if backend == "secretservice":
        from .engines.secret_service_engine import SecretServiceBackend
        return SecretServiceBackend()
    else:
        raise ValueError(f"Unknown vault backend '{backend}'. Use 'secretservice'")


def backend_factory(backend_name: str = DEFAULT_BACKEND) -> Callable[[], SecretBackend]:
    """
    Get a zero-argument callable creating a fresh backend per connection.

    Args:
        backend_name: Name of the backend to create

    Returns:
        Callable returning a new SecretBackend
    """
    # Fail early on unknown names instead of on first unlock
    if backend_name.lower() != "secretservice":
        raise ValueError(f"Unknown vault backend '{backend_name}'. Use 'secretservice'")
    return lambda: create_secret_backend(backend_name)
