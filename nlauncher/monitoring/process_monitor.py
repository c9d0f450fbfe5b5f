"""Process directory: live process snapshots and termination."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import psutil

from ..cache.models import ProcessInfo
from ..exceptions import (
    ProcessNotFoundError,
    ProcessOperationError,
    ProcessPermissionError,
)

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class ProcessBackend(ABC):
    """Abstract base class for process table backends."""

    @abstractmethod
    def list_processes(self) -> List[ProcessInfo]:
        """
        Enumerate live processes.

        Returns:
            ProcessInfo list in enumeration order
        """
        pass

    @abstractmethod
    def send_terminate(self, pid: int) -> None:
        """
        Send a termination signal to a process.

        Raises:
            ProcessNotFoundError, ProcessPermissionError, ProcessOperationError
        """
        pass


class PsutilProcessBackend(ProcessBackend):
    """Process backend built on psutil."""

    _ATTRS = ["pid", "name", "cpu_percent", "memory_info"]

    def list_processes(self) -> List[ProcessInfo]:
        processes: List[ProcessInfo] = []
        for proc in psutil.process_iter(attrs=self._ATTRS, ad_value=None):
            info = proc.info
            name = info.get("name") or ""
            if not name:
                continue
            memory = info.get("memory_info")
            processes.append(ProcessInfo(
                pid=int(info["pid"]),
                name=name,
                cpu_usage=float(info.get("cpu_percent") or 0.0),
                memory_mb=(memory.rss / BYTES_PER_MB) if memory is not None else 0.0,
            ))
        return processes

    def send_terminate(self, pid: int) -> None:
        try:
            psutil.Process(pid).terminate()
        except psutil.NoSuchProcess as e:
            raise ProcessNotFoundError(f"No process with PID {pid}") from e
        except psutil.AccessDenied as e:
            raise ProcessPermissionError(f"Permission denied to terminate PID {pid}") from e
        except (psutil.Error, OSError) as e:
            raise ProcessOperationError(f"Failed to terminate PID {pid}: {e}") from e


class ProcessDirectory:
    """Snapshots running processes and terminates them on request."""

    def __init__(self, backend: Optional[ProcessBackend] = None):
        """
        Initialize the process directory.

        Args:
            backend: Process backend (defaults to psutil)
        """
        self.backend = backend or PsutilProcessBackend()

    def snapshot(self) -> List[ProcessInfo]:
        """
        Enumerate live processes. Never cached.

        Returns:
            ProcessInfo list, or an empty list if the backend fails
        """
        try:
            return self.backend.list_processes()
        except Exception as e:
            logger.warning("Failed to enumerate processes: %s", e)
            return []

    def terminate(self, pid: int) -> None:
        """
        Terminate a process.

        Args:
            pid: Process id to signal

        Raises:
            ProcessError: Subclass describing why the signal could not be delivered
        """
        logger.info("Terminating PID %d", pid)
        self.backend.send_terminate(pid)

    @staticmethod
    def filter(processes: List[ProcessInfo], fragment: str) -> List[ProcessInfo]:
        """
        Filter processes by name.

        Args:
            processes: Snapshot to filter
            fragment: Case-insensitive substring; empty keeps everything

        Returns:
            Matching processes in enumeration order
        """
        needle = fragment.strip().lower()
        if not needle:
            return list(processes)
        return [proc for proc in processes if needle in proc.name.lower()]


__all__ = ["ProcessBackend", "PsutilProcessBackend", "ProcessDirectory"]
