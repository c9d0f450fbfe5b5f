"""Application index: discovery, de-duplication, sorting and disk caching."""

import logging
from typing import Callable, List, Optional

from .cache.cache import AppIndexCache
from .cache.models import ApplicationRecord
from .monitoring.app_monitor import dedupe_by_name, scan_applications, sort_by_name
from .worker import BackgroundWorker

logger = logging.getLogger(__name__)

Scanner = Callable[[], List[ApplicationRecord]]

REFRESH_TASK = "applications"


class ApplicationIndex:
    """Keeps the set of launchable applications, backed by a freshness-checked cache."""

    def __init__(self, cache: AppIndexCache, scanner: Optional[Scanner] = None):
        """
        Initialize the application index.

        Args:
            cache: Disk cache for the scanned records
            scanner: Callable performing a full system scan (defaults to scan_applications)
        """
        self.cache = cache
        self._scanner = scanner or scan_applications

    def scan(self) -> List[ApplicationRecord]:
        """
        Perform a full system scan.

        Returns:
            Name-unique records sorted ascending by name (empty on failure)
        """
        try:
            records = self._scanner()
        except Exception as e:
            logger.error("Application scan failed: %s", e)
            return []
        return sort_by_name(dedupe_by_name(records))

    def load_cached(self) -> Optional[List[ApplicationRecord]]:
        """
        Return cached records if the cache is fresh, without ever scanning.

        Returns:
            Name-unique sorted records, or None on a cache miss
        """
        records = self.cache.load()
        if records is None:
            return None
        return sort_by_name(dedupe_by_name(records))

    def load(self) -> List[ApplicationRecord]:
        """
        Load the index from the cache, or scan and populate the cache on a miss.

        Returns:
            Name-unique records sorted ascending by name
        """
        cached = self.load_cached()
        if cached is not None:
            logger.debug("Loaded %d applications from cache", len(cached))
            return cached
        return self.refresh()

    def refresh(self) -> List[ApplicationRecord]:
        """
        Scan and write the result back to the cache.

        Returns:
            Freshly scanned records
        """
        records = self.scan()
        self.cache.save(records)
        return records

    def refresh_async(self, worker: BackgroundWorker):
        """
        Schedule refresh() on the background worker.

        The completion message is tagged REFRESH_TASK and carries the new list.
        """
        return worker.submit(REFRESH_TASK, self.refresh)

    def clear_cache(self) -> None:
        """Delete the cache file so the next load rescans regardless of age."""
        self.cache.clear()


__all__ = ["ApplicationIndex", "REFRESH_TASK"]
