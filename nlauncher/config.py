"""Configuration for the launcher."""

import os
import tempfile
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def default_cache_dir() -> Path:
    """Return the per-user cache directory ($XDG_CACHE_HOME/nlauncher)."""
    cache_home = os.getenv("XDG_CACHE_HOME") or os.path.expanduser("~/.cache")
    return Path(cache_home) / "nlauncher"


class Config:
    """Configuration class for the launcher."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Per-user cache directory holding the application index and clipboard history
        self.cache_dir = Path(os.getenv("NLAUNCHER_CACHE_DIR") or default_cache_dir())
        self.app_cache_path = self.cache_dir / "app_cache.json"
        self.app_cache_ttl = float(os.getenv("NLAUNCHER_APP_CACHE_TTL", "3600"))

        # Vault session metadata lives in the per-user runtime dir so it does
        # not survive a logout, falling back to the temp dir
        runtime_dir = os.getenv("XDG_RUNTIME_DIR") or tempfile.gettempdir()
        default_session = os.path.join(runtime_dir, "nlauncher_vault_session")
        self.session_path = Path(os.getenv("NLAUNCHER_SESSION_PATH", default_session))
        self.session_ttl = float(os.getenv("NLAUNCHER_SESSION_TTL", "600"))
        self.vault_backend = os.getenv("NLAUNCHER_VAULT_BACKEND", "secretservice").lower()

        # Clipboard history
        self.clipboard_history_path = self.cache_dir / "clipboard_history.txt"
        self.clipboard_history_size = int(os.getenv("NLAUNCHER_CLIPBOARD_HISTORY_SIZE", "100"))
        self.clipboard_poll_interval = float(os.getenv("NLAUNCHER_CLIPBOARD_POLL_INTERVAL", "0.5"))

        # Result list
        self.max_results = int(os.getenv("NLAUNCHER_MAX_RESULTS", "50"))
        self.visible_items = int(os.getenv("NLAUNCHER_VISIBLE_ITEMS", "10"))
        self.icon_size = int(os.getenv("NLAUNCHER_ICON_SIZE", "24"))

        # Mode prefixes
        self.vault_prefix = os.getenv("NLAUNCHER_VAULT_PREFIX", "vault")
        self.process_prefix = os.getenv("NLAUNCHER_PROCESS_PREFIX", "ps")
        self.clipboard_prefix = os.getenv("NLAUNCHER_CLIPBOARD_PREFIX", "clip")

        # Calculator engine
        self.calculator = os.getenv("NLAUNCHER_CALCULATOR", "pint").lower()

        # Local API (for the presentation layer)
        self.api_port = int(os.getenv("NLAUNCHER_API_PORT", "8771"))

        # Validate configuration
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        valid_backends = ["secretservice"]
        if self.vault_backend not in valid_backends:
            raise ValueError(
                f"Invalid vault backend '{self.vault_backend}'. "
                f"Must be one of: {', '.join(valid_backends)}"
            )

        valid_calculators = ["pint"]
        if self.calculator not in valid_calculators:
            raise ValueError(
                f"Invalid calculator '{self.calculator}'. "
                f"Must be one of: {', '.join(valid_calculators)}"
            )

        for name in ("app_cache_ttl", "session_ttl", "clipboard_poll_interval"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        for name in ("clipboard_history_size", "max_results", "visible_items", "icon_size"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")

        prefixes = [self.vault_prefix, self.process_prefix, self.clipboard_prefix]
        for prefix in prefixes:
            if not prefix or prefix != prefix.strip() or " " in prefix:
                raise ValueError(f"Mode prefix must be a single word, got '{prefix}'")
        if len(set(prefixes)) != len(prefixes):
            raise ValueError(f"Mode prefixes must be distinct, got {prefixes}")


__all__ = ["Config", "default_cache_dir"]
