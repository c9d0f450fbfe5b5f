"""Custom exception classes for the launcher core."""


class LauncherError(Exception):
    """Base exception for launcher errors."""
    pass


class CacheError(LauncherError):
    """Exception raised for application cache errors."""
    pass


class CacheCorruptError(CacheError):
    """Exception raised when a cache file cannot be parsed."""
    pass


class VaultError(LauncherError):
    """Exception raised for vault errors."""
    pass


class BackendUnavailableError(VaultError):
    """Exception raised when the secret backend is not reachable or still locked."""
    pass


class VaultBusyError(VaultError):
    """Exception raised when an unlock is requested while another one is running."""
    pass


class VaultLockedError(VaultError):
    """Exception raised when an operation needs an unlocked vault session."""
    pass


class ProcessError(LauncherError):
    """Exception raised for process termination errors."""
    pass


class ProcessNotFoundError(ProcessError):
    """Exception raised when the target process does not exist anymore."""
    pass


class ProcessPermissionError(ProcessError):
    """Exception raised when the process may not be signalled by this user."""
    pass


class ProcessOperationError(ProcessError):
    """Exception raised when signalling a process fails for another reason."""
    pass


class LaunchError(LauncherError):
    """Exception raised when an application launch or clipboard copy fails."""
    pass
