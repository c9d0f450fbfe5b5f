"""Thread-safe event queue bridging the HTTP API and the router's main loop."""

from queue import Queue, Empty
from typing import Any, Dict, List, Optional


VALID_EVENTS = ("query", "move", "submit", "activate", "refresh", "lock_vault")


class EventQueue:
	"""FIFO of UI events; the API thread produces, the main loop consumes."""

	def __init__(self):
		self._queue: "Queue[Dict[str, Any]]" = Queue()

	def put_event(self, event_type: str, **payload: Any) -> bool:
		if event_type not in VALID_EVENTS:
			return False
		self._queue.put({"type": event_type, **payload})
		return True

	def try_get_event(self) -> Optional[Dict[str, Any]]:
		try:
			return self._queue.get_nowait()
		except Empty:
			return None

	def drain_events(self, max_items: int = 100) -> List[Dict[str, Any]]:
		collected: List[Dict[str, Any]] = []
		for _ in range(max_items):
			try:
				collected.append(self._queue.get_nowait())
			except Empty:
				break
		return collected


__all__ = ["EventQueue", "VALID_EVENTS"]
