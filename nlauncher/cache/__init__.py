"""Cache package: data models and on-disk stores."""

from .cache import AppIndexCache
from .history import ClipboardHistory
from .models import ApplicationRecord, ClipboardEntry, ProcessInfo, VaultEntry

__all__ = [
    'AppIndexCache',
    'ClipboardHistory',
    'ApplicationRecord',
    'ClipboardEntry',
    'ProcessInfo',
    'VaultEntry',
]
