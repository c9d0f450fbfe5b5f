"""Shared fixtures and fake backends for the test-suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from nlauncher.app_index import ApplicationIndex
from nlauncher.cache.cache import AppIndexCache
from nlauncher.cache.history import ClipboardHistory
from nlauncher.cache.models import ApplicationRecord, ProcessInfo
from nlauncher.calculator import CalculatorAdapter, Evaluator
from nlauncher.exceptions import BackendUnavailableError, ProcessNotFoundError
from nlauncher.monitoring.process_monitor import ProcessBackend, ProcessDirectory
from nlauncher.router import QueryRouter
from nlauncher.vault.base import SecretBackend
from nlauncher.vault.manager import VaultManager
from nlauncher.worker import TaskResult


class ImmediateWorker:
    """Runs submitted callables synchronously but still delivers results through drain()."""

    def __init__(self) -> None:
        self.submitted: List[str] = []
        self._completed: List[TaskResult] = []

    def submit(self, kind: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.submitted.append(kind)
        try:
            value = func(*args, **kwargs)
        except Exception as e:
            self._completed.append(TaskResult(kind=kind, error=e))
        else:
            self._completed.append(TaskResult(kind=kind, value=value))

    def drain(self, max_items: int = 100) -> List[TaskResult]:
        collected, self._completed = self._completed[:max_items], self._completed[max_items:]
        return collected

    def has_pending(self) -> bool:
        return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        return True

    def shutdown(self, wait_for_tasks: bool = False) -> None:
        pass


class FakeProcessBackend(ProcessBackend):
    """In-memory process table."""

    def __init__(self, processes: List[ProcessInfo], errors: Optional[Dict[int, Exception]] = None):
        self.processes = list(processes)
        self.errors = errors or {}
        self.terminated: List[int] = []

    def list_processes(self) -> List[ProcessInfo]:
        return list(self.processes)

    def send_terminate(self, pid: int) -> None:
        if pid in self.errors:
            raise self.errors[pid]
        if pid not in {proc.pid for proc in self.processes}:
            raise ProcessNotFoundError(f"No process with PID {pid}")
        self.terminated.append(pid)


class FakeSecretBackend(SecretBackend):
    """In-memory secret collection."""

    def __init__(
        self,
        items: Optional[List[Dict[str, Any]]] = None,
        locked: bool = False,
        backend_handle: Optional[int] = None,
    ):
        self.items = items if items is not None else []
        self.locked = locked
        self.backend_handle = backend_handle
        self.unlock_calls: List[str] = []
        self.close_calls = 0

    def unlock(self, secret: str) -> None:
        self.unlock_calls.append(secret)
        if self.locked:
            raise BackendUnavailableError("KeePassXC is locked")

    def is_locked(self) -> bool:
        return self.locked

    def list_items(self) -> List[Any]:
        return list(self.items)

    def get_label(self, item: Any) -> str:
        return item["label"]

    def get_secret(self, item: Any) -> bytes:
        return item["secret"]

    def get_attributes(self, item: Any) -> Dict[str, str]:
        return item.get("attributes", {})

    def handle(self) -> Optional[int]:
        return self.backend_handle

    def close(self) -> None:
        self.close_calls += 1


class FakeEvaluator(Evaluator):
    """Evaluator answering from a lookup table."""

    def __init__(self, answers: Optional[Dict[str, str]] = None):
        self.answers = answers or {}

    def evaluate(self, expression: str) -> Optional[str]:
        return self.answers.get(expression)


SAMPLE_APPS = [
    ApplicationRecord(name="Calculator", exec_command="gnome-calculator"),
    ApplicationRecord(name="Code", exec_command="code %F", icon_ref="vscode"),
    ApplicationRecord(name="Files", exec_command="nautilus --new-window %U"),
    ApplicationRecord(name="Firefox", exec_command="firefox %u", icon_ref="firefox"),
    ApplicationRecord(name="Terminal", exec_command="kgx"),
]

SAMPLE_PROCESSES = [
    ProcessInfo(pid=101, name="systemd", cpu_usage=0.0, memory_mb=12.0),
    ProcessInfo(pid=202, name="chrome", cpu_usage=5.5, memory_mb=350.2),
    ProcessInfo(pid=203, name="chrome", cpu_usage=1.0, memory_mb=120.0),
    ProcessInfo(pid=304, name="Xwayland", cpu_usage=0.3, memory_mb=80.0),
]

SAMPLE_ITEMS = [
    {"label": "GitHub", "secret": b"gh-pass", "attributes": {"UserName": "octocat", "TOTP": "otpauth://x"}},
    {"label": "Mail", "secret": b"mail-pass", "attributes": {"username": "me@example.com"}},
    {"label": "Bank", "secret": b"bank-pass", "attributes": {}},
]


@pytest.fixture
def immediate_worker() -> ImmediateWorker:
    return ImmediateWorker()


@pytest.fixture
def secret_backend() -> FakeSecretBackend:
    return FakeSecretBackend(items=[dict(item) for item in SAMPLE_ITEMS])


@pytest.fixture
def process_backend() -> FakeProcessBackend:
    return FakeProcessBackend(SAMPLE_PROCESSES)


@pytest.fixture
def make_router(tmp_path: Path, immediate_worker: ImmediateWorker, secret_backend: FakeSecretBackend,
                process_backend: FakeProcessBackend):
    """Factory building a QueryRouter wired to fakes and temporary files."""

    def _make(
        applications: Optional[List[ApplicationRecord]] = None,
        evaluator: Optional[Evaluator] = None,
        evaluator_factory: Optional[Callable[[], Evaluator]] = None,
        max_results: int = 50,
        visible_items: int = 10,
        clock: Optional[Callable[[], float]] = None,
    ) -> QueryRouter:
        apps = list(SAMPLE_APPS if applications is None else applications)
        scanner = MagicMock(return_value=apps)
        if evaluator_factory is None:
            answers = evaluator or FakeEvaluator({"2+2": "4", "1 km to m": "1000 m"})
            evaluator_factory = lambda: answers  # noqa: E731

        router = QueryRouter(
            app_index=ApplicationIndex(AppIndexCache(tmp_path / "app_cache.json"), scanner=scanner),
            processes=ProcessDirectory(process_backend),
            vault=VaultManager(lambda: secret_backend, tmp_path / "vault_session"),
            calculator=CalculatorAdapter(evaluator_factory),
            clipboard=ClipboardHistory(tmp_path / "clipboard_history.txt"),
            worker=immediate_worker,
            max_results=max_results,
            visible_items=visible_items,
            launch=MagicMock(),
            copy=MagicMock(),
            clock=clock or (lambda: 0.0),
        )
        router.scanner = scanner
        return router

    return _make
