"""Application discovery from freedesktop .desktop descriptors."""

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from xdg import BaseDirectory
from xdg.DesktopEntry import DesktopEntry
from xdg.Exceptions import Error as XdgError
from xdg.IconTheme import getIconPath

from ..cache.models import ApplicationRecord

logger = logging.getLogger(__name__)

DEFAULT_ICON_SIZE = 24

IconResolver = Callable[[str], Optional[str]]


def application_dirs(data_dirs: Optional[Iterable[str]] = None) -> List[Path]:
    """
    Get the directories that hold application descriptors.

    Args:
        data_dirs: XDG data directories (defaults to $XDG_DATA_HOME + $XDG_DATA_DIRS)

    Returns:
        Existing "<data dir>/applications" directories, de-duplicated in order
    """
    if data_dirs is None:
        data_dirs = BaseDirectory.xdg_data_dirs

    dirs: List[Path] = []
    seen = set()
    for base in data_dirs:
        if not base:
            continue
        candidate = Path(os.path.expanduser(base)) / "applications"
        key = os.path.normpath(str(candidate))
        if key in seen:
            continue
        seen.add(key)
        if candidate.is_dir():
            dirs.append(candidate)
    return dirs


def iter_desktop_files(dirs: Iterable[Path]) -> Iterator[Path]:
    """Yield every .desktop file below the given directories, directory order first."""
    for base in dirs:
        try:
            paths = sorted(base.rglob("*.desktop"))
        except OSError as e:
            logger.warning("Failed to list %s: %s", base, e)
            continue
        for path in paths:
            if path.is_file():
                yield path


def make_icon_resolver(size: int = DEFAULT_ICON_SIZE) -> IconResolver:
    """
    Build an icon resolver for a fixed lookup size.

    Args:
        size: Icon size in pixels

    Returns:
        Callable mapping an icon name (or absolute path) to a file path or None
    """
    def resolve(icon: str) -> Optional[str]:
        if os.path.isabs(icon):
            return icon if os.path.isfile(icon) else None
        try:
            return getIconPath(icon, size=size) or None
        except (OSError, XdgError) as e:
            logger.debug("Icon lookup failed for %s: %s", icon, e)
            return None

    return resolve


def read_desktop_entry(path: Path, icon_resolver: Optional[IconResolver] = None) -> Optional[ApplicationRecord]:
    """
    Decode one descriptor into an application record.

    Args:
        path: Path to the .desktop file
        icon_resolver: Optional callable resolving icon names to file paths

    Returns:
        ApplicationRecord, or None if the descriptor lacks a name or command
    """
    entry = DesktopEntry(str(path))
    name = (entry.getName() or "").strip()
    exec_command = (entry.getExec() or "").strip()
    if not name or not exec_command:
        return None

    icon = (entry.getIcon() or "").strip() or None
    icon_path = None
    if icon and icon_resolver is not None:
        icon_path = icon_resolver(icon)

    return ApplicationRecord(
        name=name,
        exec_command=exec_command,
        icon_ref=icon,
        icon_resolved_path=icon_path,
    )


def dedupe_by_name(records: Iterable[ApplicationRecord]) -> List[ApplicationRecord]:
    """Keep the first record seen for each display name."""
    unique: List[ApplicationRecord] = []
    seen_names = set()
    for record in records:
        if record.name in seen_names:
            continue
        seen_names.add(record.name)
        unique.append(record)
    return unique


def sort_by_name(records: Iterable[ApplicationRecord]) -> List[ApplicationRecord]:
    """Sort records ascending by name."""
    return sorted(records, key=lambda record: record.name)


def scan_applications(
    data_dirs: Optional[Iterable[str]] = None,
    icon_resolver: Optional[IconResolver] = None,
) -> List[ApplicationRecord]:
    """
    Scan the system for launchable applications.

    Unreadable or invalid descriptors are skipped.

    Args:
        data_dirs: XDG data directories to search (defaults to the environment)
        icon_resolver: Icon resolver (defaults to a 24px theme lookup)

    Returns:
        Name-unique records sorted ascending by name
    """
    if icon_resolver is None:
        icon_resolver = make_icon_resolver()

    records: List[ApplicationRecord] = []
    for path in iter_desktop_files(application_dirs(data_dirs)):
        try:
            record = read_desktop_entry(path, icon_resolver)
        except (OSError, UnicodeDecodeError, XdgError) as e:
            logger.debug("Skipping unreadable descriptor %s: %s", path, e)
            continue
        if record is not None:
            records.append(record)

    apps = sort_by_name(dedupe_by_name(records))
    logger.info("Scanned %d applications", len(apps))
    return apps


__all__ = [
    "DEFAULT_ICON_SIZE",
    "application_dirs",
    "iter_desktop_files",
    "make_icon_resolver",
    "read_desktop_entry",
    "dedupe_by_name",
    "sort_by_name",
    "scan_applications",
]
