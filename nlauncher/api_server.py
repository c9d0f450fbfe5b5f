"""Lightweight local HTTP API for the presentation layer: /query, /results and actions."""

from typing import Optional, Any, Dict
import logging
import threading
from flask import Flask, request, jsonify
from werkzeug.serving import BaseWSGIServer, make_server, prepare_socket

from .command_queue import EventQueue


logger = logging.getLogger(__name__)


class StateStore:
	"""Latest router snapshot, published by the main loop and read by the API thread."""

	def __init__(self):
		self._lock = threading.Lock()
		self._state: Dict[str, Any] = {"query": "", "mode": "applications", "results": []}
		self._version = 0

	def publish(self, state: Dict[str, Any]) -> None:
		with self._lock:
			self._state = state
			self._version += 1

	def get(self) -> Dict[str, Any]:
		with self._lock:
			return {"version": self._version, **self._state}


def create_app(events: EventQueue, state: StateStore) -> Flask:
	app = Flask("nlauncher_api")

	@app.get("/health")
	def health():
		return jsonify({"status": "ok"})

	# Basic CORS for a local file:// renderer
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.route("/results", methods=["GET", "OPTIONS"])
	def results():
		if request.method == "OPTIONS":
			return ("", 204)
		return jsonify(state.get())

	@app.route("/query", methods=["POST", "OPTIONS"])
	def query():
		if request.method == "OPTIONS":
			return ("", 204)
		data = request.get_json(silent=True) or {}
		text = data.get("text", "")
		if not isinstance(text, str):
			return jsonify({"status": "error", "message": "text must be a string"}), 400
		events.put_event("query", text=text)
		return jsonify({"status": "ok"})

	@app.route("/move", methods=["POST", "OPTIONS"])
	def move():
		if request.method == "OPTIONS":
			return ("", 204)
		data = request.get_json(silent=True) or {}
		delta = data.get("delta")
		if not isinstance(delta, int) or isinstance(delta, bool):
			return jsonify({"status": "error", "message": "delta must be an integer"}), 400
		events.put_event("move", delta=delta)
		return jsonify({"status": "ok"})

	def _simple_event(event_type: str):
		if request.method == "OPTIONS":
			return ("", 204)
		events.put_event(event_type)
		return jsonify({"status": "ok"})

	@app.route("/submit", methods=["POST", "OPTIONS"])
	def submit():
		return _simple_event("submit")

	@app.route("/activate", methods=["POST", "OPTIONS"])
	def activate():
		return _simple_event("activate")

	@app.route("/refresh", methods=["POST", "OPTIONS"])
	def refresh():
		return _simple_event("refresh")

	@app.route("/vault/lock", methods=["POST", "OPTIONS"])
	def vault_lock():
		return _simple_event("lock_vault")

	return app


_server: Optional[BaseWSGIServer] = None
_server_thread: Optional[threading.Thread] = None


def start_api_server(events: EventQueue, state: StateStore, port: int = 8771) -> int:
	"""
	Start the local API server in a background thread.
	Only binds to 127.0.0.1.

	The socket is bound before the thread starts, so a port that is already
	in use raises here instead of failing silently in the thread.

	Returns:
		The bound port (useful when port is 0)

	Raises:
		OSError: If the port cannot be bound
	"""
	global _server, _server_thread
	if _server_thread and _server_thread.is_alive():
		return _server.socket.getsockname()[1]
	app = create_app(events, state)
	# Bind here so OSError reaches the caller; make_server would sys.exit()
	sock = prepare_socket("127.0.0.1", port)
	try:
		_server = make_server("127.0.0.1", port, app, threaded=True, fd=sock.fileno())
	finally:
		# The server works on a duplicate of the descriptor
		sock.close()

	_server_thread = threading.Thread(target=_server.serve_forever, daemon=True)
	_server_thread.start()
	bound_port = _server.socket.getsockname()[1]
	logger.info("Local API server started on http://127.0.0.1:%d", bound_port)
	return bound_port


def stop_api_server() -> None:
	"""Stop the API server started by start_api_server(), if any."""
	global _server, _server_thread
	if _server is None:
		return
	_server.shutdown()
	_server.server_close()
	if _server_thread is not None:
		_server_thread.join(timeout=5)
	_server = None
	_server_thread = None
	logger.info("Local API server stopped")


__all__ = ["StateStore", "create_app", "start_api_server", "stop_api_server"]
