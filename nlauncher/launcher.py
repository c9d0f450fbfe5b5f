"""Actions performed when a result is activated: launching and clipboard access."""

import logging
from typing import Optional

from .cache.models import ApplicationRecord
from .exceptions import LaunchError
from .utils import ShellExecutor, strip_field_codes

logger = logging.getLogger(__name__)

# Create a module-level executor instance
_executor = ShellExecutor()


def launch_application(app: ApplicationRecord, executor: Optional[ShellExecutor] = None) -> None:
    """
    Launch an application from its Exec line.

    Args:
        app: Application to start
        executor: Shell executor (defaults to the module-level one)

    Raises:
        LaunchError: If the command is empty or could not be started
    """
    command = strip_field_codes(app.exec_command)
    if not command:
        raise LaunchError(f"'{app.name}' has no command to run")

    success, error = (executor or _executor).spawn(command)
    if not success:
        raise LaunchError(f"Failed to launch '{app.name}': {error}")
    logger.info("Launched %s", app.name)


def set_clipboard(content: str, executor: Optional[ShellExecutor] = None) -> None:
    """
    Copy text to the Wayland clipboard.

    Raises:
        LaunchError: If wl-copy is missing or fails
    """
    success, error = (executor or _executor).feed(["wl-copy"], content)
    if not success:
        raise LaunchError(f"Failed to set clipboard: {error}")


def get_clipboard(executor: Optional[ShellExecutor] = None) -> Optional[str]:
    """
    Read the Wayland clipboard.

    Returns:
        Current clipboard text, or None if empty or unavailable
    """
    success, stdout, _ = (executor or _executor).execute(["wl-paste", "--no-newline"])
    if not success or not stdout:
        return None
    return stdout


__all__ = ["launch_application", "set_clipboard", "get_clipboard"]
