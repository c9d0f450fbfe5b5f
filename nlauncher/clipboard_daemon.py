"""Clipboard watcher: records new Wayland clipboard contents into the history file."""

import argparse
import logging
import sys
import time
from typing import Callable, List, Optional

from .cache.history import ClipboardHistory
from .config import Config
from .launcher import get_clipboard

logger = logging.getLogger(__name__)


class ClipboardWatcher:
    """Polls the clipboard and pushes changed content to the history."""

    def __init__(self, history: ClipboardHistory, read_clipboard: Callable[[], Optional[str]] = get_clipboard):
        self.history = history
        self._read_clipboard = read_clipboard
        self._last_content: Optional[str] = None

    def check_once(self) -> bool:
        """
        Read the clipboard once.

        Returns:
            True if new content was recorded
        """
        content = self._read_clipboard()
        if not content or content == self._last_content:
            return False
        logger.debug("New clipboard content detected")
        self.history.add(content)
        self._last_content = content
        return True

    def run(self, interval: float = 0.5) -> None:
        logger.info("Starting clipboard monitor...")
        while True:
            try:
                self.check_once()
            except OSError as e:
                logger.warning("Clipboard poll failed: %s", e)
            time.sleep(interval)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="nlauncher-clipboard", description="Record clipboard history.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    try:
        config = Config()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}")
        return 2

    history = ClipboardHistory(config.clipboard_history_path, capacity=config.clipboard_history_size)
    watcher = ClipboardWatcher(history)
    try:
        watcher.run(config.clipboard_poll_interval)
    except KeyboardInterrupt:
        print("\nInterrupted. Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
