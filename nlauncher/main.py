"""Main entry point for the launcher core."""

import argparse
import logging
import sys
import time
from typing import Any, Dict, List, Optional

from .api_server import StateStore, start_api_server, stop_api_server
from .app_index import ApplicationIndex
from .cache.cache import AppIndexCache
from .cache.history import ClipboardHistory
from .calculator import CalculatorAdapter, create_evaluator
from .command_queue import EventQueue
from .config import Config
from .monitoring.app_monitor import make_icon_resolver, scan_applications
from .monitoring.process_monitor import ProcessDirectory
from .results import result_to_dict
from .router import QueryRouter
from .vault.factory import backend_factory
from .vault.manager import VaultManager
from .worker import BackgroundWorker

logger = logging.getLogger(__name__)

LOOP_INTERVAL = 0.02


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nlauncher",
        description="Query-resolution core of the nlauncher desktop launcher.",
    )
    parser.add_argument("--refresh", action="store_true",
                        help="Delete the application cache before loading")
    parser.add_argument("--query", metavar="TEXT",
                        help="Resolve one query, print the results and exit")
    parser.add_argument("--port", type=int, default=None,
                        help="Port of the local API (default: NLAUNCHER_API_PORT or 8771)")
    parser.add_argument("--timeout", type=float, default=30.0,
                        help="Seconds --query waits for background work")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def build_router(config: Config, worker: BackgroundWorker) -> QueryRouter:
    """
    Wire every component from configuration.

    Args:
        config: Loaded configuration
        worker: Background worker shared by all slow operations

    Returns:
        A router that has not been started yet
    """
    icon_resolver = make_icon_resolver(config.icon_size)
    app_index = ApplicationIndex(
        AppIndexCache(config.app_cache_path, ttl=config.app_cache_ttl),
        scanner=lambda: scan_applications(icon_resolver=icon_resolver),
    )
    vault = VaultManager(
        backend_factory(config.vault_backend),
        config.session_path,
        ttl=config.session_ttl,
    )
    calculator = CalculatorAdapter(lambda: create_evaluator(config.calculator))
    clipboard = ClipboardHistory(config.clipboard_history_path, capacity=config.clipboard_history_size)

    return QueryRouter(
        app_index=app_index,
        processes=ProcessDirectory(),
        vault=vault,
        calculator=calculator,
        clipboard=clipboard,
        worker=worker,
        max_results=config.max_results,
        visible_items=config.visible_items,
        vault_prefix=config.vault_prefix,
        process_prefix=config.process_prefix,
        clipboard_prefix=config.clipboard_prefix,
    )


def apply_event(router: QueryRouter, event: Dict[str, Any]) -> None:
    """Apply one UI event to the router."""
    event_type = event.get("type")
    if event_type == "query":
        router.set_query(str(event.get("text", "")))
    elif event_type == "move":
        router.move_selection(int(event.get("delta", 0)))
    elif event_type == "submit":
        router.submit()
    elif event_type == "activate":
        router.activate_selected()
    elif event_type == "refresh":
        router.refresh()
    elif event_type == "lock_vault":
        router.lock_vault()
    else:
        logger.warning("Unknown event type: %s", event_type)


def print_results(router: QueryRouter) -> None:
    """Print the current result list to the console."""
    applications = router.applications or []
    print(f"Mode: {router.mode.value}")
    if not router.results:
        print("  No results.")
        return
    for i, result in enumerate(router.results, 1):
        data = result_to_dict(result, applications)
        kind = data["type"]
        if kind == "application":
            line = data["name"]
        elif kind == "calculation":
            line = f"= {data['value']}"
        elif kind == "process":
            line = f"{data['name']} (PID {data['pid']}, {data['cpu_usage']}% CPU, {data['memory_mb']} MB)"
        elif kind == "vault_entry":
            line = f"{data['title']} [{data['username']}]"
        elif kind == "clipboard":
            line = data["content"].replace("\n", " ")
        else:
            line = f"({data['kind']}) {data['message']}"
        print(f"  {i}. {line}")


def run_query(router: QueryRouter, worker: BackgroundWorker, text: str, timeout: float) -> None:
    """Resolve a single query, waiting for background work such as the first scan."""
    router.start()
    router.set_query(text)
    deadline = time.monotonic() + timeout
    while worker.has_pending() and time.monotonic() < deadline:
        worker.wait(timeout=max(0.0, deadline - time.monotonic()))
        router.poll()
    router.poll()
    print_results(router)


def run_interactive(router: QueryRouter, port: int) -> None:
    """Serve the local API and process UI events until interrupted."""
    events = EventQueue()
    state = StateStore()
    router.start()
    state.publish(router.snapshot())

    try:
        bound_port = start_api_server(events, state, port=port)
        print(f"Local API server started on http://127.0.0.1:{bound_port}\n")
    except OSError as e:
        print(f"Warning: Could not start local API server on port {port}: {e}\n")

    try:
        while True:
            try:
                changed = False
                for event in events.drain_events(max_items=20):
                    apply_event(router, event)
                    changed = True
                if router.poll():
                    changed = True
                if changed:
                    state.publish(router.snapshot())
                time.sleep(LOOP_INTERVAL)
            except KeyboardInterrupt:
                print("\n\nInterrupted. Goodbye!")
                break
            except Exception as e:
                logger.exception("Error while processing events: %s", e)
    finally:
        stop_api_server()


def main(argv: Optional[List[str]] = None) -> int:
    """Main loop for the launcher core."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = Config()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}")
        return 2

    worker = BackgroundWorker()
    router = build_router(config, worker)

    if args.refresh:
        router.app_index.clear_cache()
        print("Application cache cleared.")

    try:
        if args.query is not None:
            run_query(router, worker, args.query, args.timeout)
        else:
            run_interactive(router, args.port or config.api_port)
    finally:
        worker.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
