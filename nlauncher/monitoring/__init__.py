"""System monitoring package: installed applications and the process table."""

from .app_monitor import application_dirs, make_icon_resolver, scan_applications
from .process_monitor import ProcessBackend, ProcessDirectory, PsutilProcessBackend

__all__ = [
    'application_dirs',
    'make_icon_resolver',
    'scan_applications',
    'ProcessBackend',
    'ProcessDirectory',
    'PsutilProcessBackend',
]
