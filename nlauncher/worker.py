"""Background worker that runs slow operations off the interactive path."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskResult:
    """Completion message for one background operation."""
    kind: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BackgroundWorker:
    """
    Runs callables on a thread pool and posts exactly one TaskResult per call.

    Background tasks only produce values; the consumer drains completions
    from a single thread and applies them to its own state.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="nlauncher")
        self._completed: "Queue[TaskResult]" = Queue()
        self._pending: Set[Future] = set()
        self._lock = threading.Condition()

    def submit(self, kind: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        Schedule a callable.

        Args:
            kind: Tag copied into the completion message
            func: Callable to run in the background
            *args, **kwargs: Arguments for the callable

        Returns:
            The underlying Future
        """
        future = self._executor.submit(func, *args, **kwargs)
        with self._lock:
            self._pending.add(future)

        def _done(fut: Future) -> None:
            error = fut.exception()
            if error is not None:
                logger.debug("Background task %s failed: %s", kind, error)
                result = TaskResult(kind=kind, error=error)
            else:
                result = TaskResult(kind=kind, value=fut.result())
            self._completed.put(result)
            with self._lock:
                self._pending.discard(fut)
                self._lock.notify_all()

        future.add_done_callback(_done)
        return future

    def drain(self, max_items: int = 100) -> List[TaskResult]:
        """Collect completion messages without blocking."""
        collected: List[TaskResult] = []
        for _ in range(max_items):
            try:
                collected.append(self._completed.get_nowait())
            except Empty:
                break
        return collected

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every scheduled task has posted its completion.

        Returns:
            True if nothing is pending anymore
        """
        with self._lock:
            return self._lock.wait_for(lambda: not self._pending, timeout=timeout)

    def shutdown(self, wait_for_tasks: bool = False) -> None:
        self._executor.shutdown(wait=wait_for_tasks)


__all__ = ["BackgroundWorker", "TaskResult"]
