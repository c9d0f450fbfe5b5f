"""Query router: classifies the query string and builds the typed result list."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import fuzzy_matcher
from .app_index import REFRESH_TASK, ApplicationIndex
from .cache.history import ClipboardHistory, filter_entries
from .cache.models import ApplicationRecord, VaultEntry
from .calculator import INIT_TASK, CalculatorAdapter, is_calculator_query
from .exceptions import LaunchError, ProcessError, VaultBusyError, VaultLockedError
from .launcher import launch_application, set_clipboard
from .monitoring.process_monitor import ProcessDirectory
from .results import (
    ApplicationResult,
    CalculationResult,
    ClipboardResult,
    PlaceholderKind,
    PlaceholderResult,
    ProcessResult,
    SearchResult,
    VaultEntryResult,
    result_to_dict,
)
from .selection import SelectionState
from .vault.manager import VaultManager
from .worker import BackgroundWorker, TaskResult

logger = logging.getLogger(__name__)

UNLOCK_TASK = "vault_unlock"
RELOAD_TASK = "vault_reload"

DEFAULT_MAX_RESULTS = 50

# Seconds a terminated process stays hidden while it is still running
TERMINATE_GRACE = 3.0


class QueryMode(Enum):
    VAULT = "vault"
    PROCESSES = "processes"
    CLIPBOARD = "clipboard"
    CALCULATOR = "calculator"
    APPLICATIONS = "applications"


@dataclass(frozen=True)
class Classification:
    mode: QueryMode
    remainder: str


def match_prefix(query: str, prefix: str) -> Optional[str]:
    """
    Match a mode prefix as a whole word.

    Args:
        query: Raw query text
        prefix: Mode keyword (e.g. "ps")

    Returns:
        The text after "<prefix> ", "" for the bare prefix, or None if no match
    """
    head = query.lstrip()
    if head.lower() == prefix.lower():
        return ""
    if head[:len(prefix) + 1].lower() == prefix.lower() + " ":
        return head[len(prefix) + 1:]
    return None


def classify(
    query: str,
    vault_prefix: str = "vault",
    process_prefix: str = "ps",
    clipboard_prefix: str = "clip",
) -> Classification:
    """
    Decide which mode a query belongs to.

    Precedence is fixed: vault > process > clipboard > calculator > applications.
    """
    for mode, prefix in (
        (QueryMode.VAULT, vault_prefix),
        (QueryMode.PROCESSES, process_prefix),
        (QueryMode.CLIPBOARD, clipboard_prefix),
    ):
        remainder = match_prefix(query, prefix)
        if remainder is not None:
            return Classification(mode, remainder)
    if is_calculator_query(query):
        return Classification(QueryMode.CALCULATOR, query.strip())
    return Classification(QueryMode.APPLICATIONS, query.strip())


class QueryRouter:
    """
    Owns the query, the result list and the state every mode reads.

    All methods must be called from one thread. Slow work runs on the
    background worker and is applied only through poll().
    """

    def __init__(
        self,
        app_index: ApplicationIndex,
        processes: ProcessDirectory,
        vault: VaultManager,
        calculator: CalculatorAdapter,
        clipboard: ClipboardHistory,
        worker: BackgroundWorker,
        max_results: int = DEFAULT_MAX_RESULTS,
        visible_items: int = 10,
        vault_prefix: str = "vault",
        process_prefix: str = "ps",
        clipboard_prefix: str = "clip",
        launch: Callable[[ApplicationRecord], None] = launch_application,
        copy: Callable[[str], None] = set_clipboard,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.app_index = app_index
        self.processes = processes
        self.vault = vault
        self.calculator = calculator
        self.clipboard = clipboard
        self.worker = worker
        self.max_results = max_results
        self.vault_prefix = vault_prefix
        self.process_prefix = process_prefix
        self.clipboard_prefix = clipboard_prefix
        self._launch = launch
        self._copy = copy
        self._clock = clock

        self.query = ""
        self.mode = QueryMode.APPLICATIONS
        self.applications: Optional[List[ApplicationRecord]] = None
        self.results: List[SearchResult] = []
        self.selection = SelectionState(visible_items)

        self._scan_pending = False
        self._vault_entries: Optional[List[VaultEntry]] = None
        self._vault_unlocking = False
        self._vault_reloading = False
        self._vault_error: Optional[str] = None
        self._unlock_query: Optional[str] = None
        self._process_errors: Dict[int, str] = {}
        # pid -> clock reading when SIGTERM was sent
        self._terminated: Dict[int, float] = {}

    # Lifecycle

    def start(self) -> None:
        """Load the cached index and kick off background initialization."""
        cached = self.app_index.load_cached()
        if cached is not None:
            self.applications = cached
            logger.info("Loaded %d applications from cache", len(cached))
        else:
            self._start_scan()
        self.calculator.start(self.worker)
        self._rebuild(reset_selection=True)

    def refresh(self) -> None:
        """Drop the application cache and rescan in the background."""
        self.app_index.clear_cache()
        self._start_scan()

    def poll(self) -> bool:
        """
        Apply finished background work. The single update entry point.

        Returns:
            True if any completion was applied
        """
        completed = self.worker.drain()
        for task in completed:
            self._apply(task)
        if completed:
            self._rebuild(reset_selection=False)
        return bool(completed)

    # Input

    def set_query(self, text: str) -> None:
        """Replace the query and rebuild the result list from scratch."""
        if text == self.query:
            return
        self.query = text
        self._vault_error = None
        self._process_errors.clear()
        self._rebuild(reset_selection=True)

    def move_selection(self, delta: int) -> bool:
        return self.selection.move(delta)

    def submit(self) -> bool:
        """
        Handle Enter: unlock the vault in locked vault mode, else activate.

        Returns:
            True if an action was started or performed
        """
        classification = self.classify(self.query)
        if classification.mode is QueryMode.VAULT and not self.vault.is_unlocked():
            return self._start_unlock(classification.remainder)
        return self.activate_selected()

    def activate_selected(self) -> bool:
        """
        Perform the action of the selected result.

        Returns:
            True if the action succeeded
        """
        result = self.selected_result()
        if result is None:
            return False

        match result:
            case ApplicationResult(index=index):
                app = self.applications[index]
                try:
                    self._launch(app)
                except LaunchError as e:
                    logger.error("%s", e)
                    return False
                return True
            case CalculationResult(value=value):
                return self._copy_text(value)
            case ProcessResult(process=proc):
                return self._terminate(proc.pid)
            case VaultEntryResult(entry=entry):
                return self._copy_text(entry.password)
            case ClipboardResult(entry=entry):
                return self._copy_text(entry.content)
            case PlaceholderResult():
                return False
        return False

    def lock_vault(self) -> None:
        self.vault.lock()
        self._vault_entries = None
        self._vault_error = None
        self._rebuild(reset_selection=True)

    # Views

    def classify(self, query: str) -> Classification:
        return classify(query, self.vault_prefix, self.process_prefix, self.clipboard_prefix)

    def selected_result(self) -> Optional[SearchResult]:
        if not self.results:
            return None
        return self.results[self.selection.selected_index]

    def visible_results(self) -> List[Tuple[int, SearchResult]]:
        start, end = self.selection.visible_range()
        return [(i, self.results[i]) for i in range(start, end)]

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the current state for the presentation layer."""
        applications = self.applications or []
        start, end = self.selection.visible_range()
        return {
            "query": self.query,
            "mode": self.mode.value,
            "selected_index": self.selection.selected_index,
            "scroll_offset": self.selection.scroll_offset,
            "visible_range": [start, end],
            "results": [result_to_dict(result, applications) for result in self.results],
        }

    # Result building

    def _rebuild(self, reset_selection: bool) -> None:
        classification = self.classify(self.query)
        self.mode = classification.mode
        match classification.mode:
            case QueryMode.VAULT:
                results = self._build_vault(classification.remainder)
            case QueryMode.PROCESSES:
                results = self._build_processes(classification.remainder)
            case QueryMode.CLIPBOARD:
                results = self._build_clipboard(classification.remainder)
            case QueryMode.CALCULATOR:
                results = self._build_calculation(classification.remainder)
            case _:
                results = self._build_applications(classification.remainder)

        self.results = results
        if reset_selection:
            self.selection.reset(len(results))
        else:
            self.selection.update_item_count(len(results))

    def _build_applications(self, text: str) -> List[SearchResult]:
        if self.applications is None:
            return [PlaceholderResult(PlaceholderKind.LOADING, "Scanning applications...")]
        indices = fuzzy_matcher.search(text, self.applications)
        return [ApplicationResult(index) for index in indices[:self.max_results]]

    def _build_calculation(self, expression: str) -> List[SearchResult]:
        if not self.calculator.is_ready:
            if self.calculator.is_initializing:
                return [PlaceholderResult(PlaceholderKind.INITIALIZING, "Calculator is starting...")]
            return []
        value = self.calculator.evaluate(expression)
        if value is None:
            return []
        return [CalculationResult(value)]

    def _build_processes(self, fragment: str) -> List[SearchResult]:
        snapshot = self.processes.snapshot()
        live = {proc.pid for proc in snapshot}
        now = self._clock()
        for pid, sent_at in list(self._terminated.items()):
            if pid not in live:
                del self._terminated[pid]
            elif now - sent_at >= TERMINATE_GRACE:
                # Still running after the grace period, show it again
                del self._terminated[pid]
                self._process_errors[pid] = f"PID {pid} is still running after SIGTERM"
        processes = [proc for proc in snapshot if proc.pid not in self._terminated]
        processes = ProcessDirectory.filter(processes, fragment)
        return [
            ProcessResult(proc, self._process_errors.get(proc.pid))
            for proc in processes[:self.max_results]
        ]

    def _build_clipboard(self, fragment: str) -> List[SearchResult]:
        entries = filter_entries(self.clipboard.load(), fragment)
        return [ClipboardResult(entry) for entry in entries[:self.max_results]]

    def _build_vault(self, fragment: str) -> List[SearchResult]:
        if self._vault_unlocking:
            return [PlaceholderResult(PlaceholderKind.UNLOCKING, "Unlocking vault...")]
        if self.vault.is_unlocked():
            if self._vault_entries is None:
                if self._vault_error:
                    return [PlaceholderResult(PlaceholderKind.ERROR, self._vault_error)]
                self._start_reload()
                return [PlaceholderResult(PlaceholderKind.LOADING, "Loading vault entries...")]
            entries = self.vault.filter(self._vault_entries, fragment)
            return [VaultEntryResult(entry) for entry in entries[:self.max_results]]

        # Locked or expired: in-memory entries die with the session
        self._vault_entries = None
        if self._vault_error:
            return [PlaceholderResult(PlaceholderKind.ERROR, self._vault_error)]
        return [PlaceholderResult(PlaceholderKind.HINT, "Type the vault password and press Enter to unlock")]

    # Background work

    def _start_scan(self) -> None:
        if self._scan_pending:
            return
        self._scan_pending = True
        self.app_index.refresh_async(self.worker)

    def _start_unlock(self, secret: str) -> bool:
        if not secret or self._vault_unlocking:
            return False
        self._vault_unlocking = True
        self._vault_error = None
        self._unlock_query = self.query
        self.worker.submit(UNLOCK_TASK, self.vault.unlock, secret)
        self._rebuild(reset_selection=True)
        return True

    def _start_reload(self) -> None:
        if self._vault_reloading:
            return
        self._vault_reloading = True
        self.worker.submit(RELOAD_TASK, self.vault.load_entries_from_existing_session)

    def _apply(self, task: TaskResult) -> None:
        if task.kind == REFRESH_TASK:
            self._scan_pending = False
            if task.ok:
                self.applications = task.value
            else:
                logger.error("Application refresh failed: %s", task.error)
                if self.applications is None:
                    self.applications = []
        elif task.kind == INIT_TASK:
            if task.ok:
                self.calculator.attach(task.value)
            else:
                self.calculator.fail(task.error)
        elif task.kind == UNLOCK_TASK:
            self._apply_unlock(task)
        elif task.kind == RELOAD_TASK:
            self._vault_reloading = False
            if task.ok:
                self._vault_entries = task.value
            elif isinstance(task.error, VaultLockedError):
                self._vault_entries = None
            else:
                self._vault_error = str(task.error)
        else:
            logger.warning("Ignoring unknown background task %s", task.kind)

    def _apply_unlock(self, task: TaskResult) -> None:
        self._vault_unlocking = False
        unlock_query, self._unlock_query = self._unlock_query, None
        if not task.ok:
            if not isinstance(task.error, VaultBusyError):
                self._vault_error = str(task.error)
            return

        self._vault_entries = task.value
        self._vault_error = None
        # Drop the secret from the query buffer if the user has not moved on
        if unlock_query is not None and self.query == unlock_query:
            self.query = self.vault_prefix + " "
            self._rebuild(reset_selection=True)

    # Actions

    def _copy_text(self, text: str) -> bool:
        try:
            self._copy(text)
        except LaunchError as e:
            logger.error("%s", e)
            return False
        return True

    def _terminate(self, pid: int) -> bool:
        try:
            self.processes.terminate(pid)
        except ProcessError as e:
            logger.warning("%s", e)
            self._process_errors[pid] = str(e)
            self._rebuild(reset_selection=False)
            return False
        self._process_errors.pop(pid, None)
        self._terminated[pid] = self._clock()
        self._rebuild(reset_selection=False)
        return True


__all__ = [
    "QueryMode",
    "Classification",
    "QueryRouter",
    "classify",
    "match_prefix",
    "UNLOCK_TASK",
    "RELOAD_TASK",
    "TERMINATE_GRACE",
]
