"""Disk cache for the application index, with mtime-based freshness."""

import json
import logging
import os
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..exceptions import CacheCorruptError
from .models import ApplicationRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600.0


class AppIndexCache:
    """Manages the on-disk JSON copy of the application index."""

    def __init__(self, path: Path, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.time):
        """
        Initialize the application cache.

        Args:
            path: Path to the JSON cache file
            ttl: Freshness window in seconds (cache age <= ttl is fresh)
            clock: Time source returning epoch seconds
        """
        self.path = Path(path)
        self.ttl = ttl
        self._clock = clock

    def age(self) -> Optional[float]:
        """
        Get the age of the cache file.

        Returns:
            Seconds since the cache file was last written, or None if it is absent
        """
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to stat application cache %s: %s", self.path, e)
            return None
        return self._clock() - mtime

    def is_fresh(self) -> bool:
        """Check whether the cache file exists and is inside the freshness window."""
        age = self.age()
        return age is not None and age <= self.ttl

    def read(self) -> List[ApplicationRecord]:
        """
        Read records from the cache file regardless of age.

        Returns:
            Records in file order

        Raises:
            FileNotFoundError: If there is no cache file
            CacheCorruptError: If the file cannot be read or parsed
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise CacheCorruptError(f"Unreadable application cache {self.path}: {e}") from e

        if not isinstance(data, list):
            raise CacheCorruptError(f"Application cache {self.path} is not a JSON array")

        try:
            return [ApplicationRecord.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheCorruptError(f"Malformed record in application cache {self.path}: {e}") from e

    def load(self) -> Optional[List[ApplicationRecord]]:
        """
        Load cached records if the cache is fresh.

        Returns:
            Cached records, or None on a miss (absent, stale or corrupt)
        """
        age = self.age()
        if age is None:
            logger.debug("No application cache at %s", self.path)
            return None
        if age > self.ttl:
            logger.info("Application cache is stale (%.0fs old)", age)
            return None

        try:
            return self.read()
        except FileNotFoundError:
            return None
        except CacheCorruptError as e:
            logger.warning("Discarding application cache: %s", e)
            return None

    def save(self, records: List[ApplicationRecord]) -> bool:
        """
        Write records to the cache file.

        Args:
            records: Records to persist

        Returns:
            True if the file was written, False otherwise
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([record.to_dict() for record in records], f, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError) as e:
            logger.warning("Failed to save application cache to %s: %s", self.path, e)
            return False

    def clear(self) -> None:
        """Delete the cache file unconditionally."""
        try:
            self.path.unlink()
            logger.info("Cleared application cache at %s", self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clear application cache %s: %s", self.path, e)


__all__ = ["AppIndexCache", "DEFAULT_TTL"]
