"""Pytest configuration and shared fixtures for hooksbuild tests.

Provides a stub compile service: a real HTTP server on a random local port that
records every /api/build request and answers with a per-unit canned response.
"""

import base64
import json
import socket
import sys
import threading
import time
import warnings
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional

import pytest

# Suppress ResourceWarnings from file cleanup in Python 3.13
if sys.version_info >= (3, 13):
    warnings.filterwarnings("ignore", category=ResourceWarning)


def wasm_bytes(name: str) -> bytes:
    """Fake artifact for a unit: the wasm magic followed by the unit name."""
    return b"\x00asm" + name.encode("utf-8")


def success_body(name: str) -> dict[str, Any]:
    return {
        "success": True,
        "message": "OK",
        "output": base64.b64encode(wasm_bytes(name)).decode("ascii"),
        "tasks": [
            {"name": "compile", "console": "", "success": True},
            {"name": "optimize", "console": "", "success": True},
        ],
    }


def failure_body(message: str = "Build failed", consoles: Optional[list[str]] = None) -> dict[str, Any]:
    consoles = consoles if consoles is not None else [f"error: {message}"]
    return {
        "success": False,
        "message": message,
        "output": "",
        "tasks": [{"name": f"task{i}", "console": c, "success": False} for i, c in enumerate(consoles)],
    }


class StubCompileService:
    """State shared between the stub HTTP handler and the tests.

    Attributes:
        responses: Canned (status, body) keyed by compilation unit name
        requests: Every JSON body received, in arrival order
        delays: Seconds to wait before answering, keyed by compilation unit name
    """

    def __init__(self) -> None:
        self.port = 0
        self.responses: dict[str, tuple[int, Any]] = {}
        self.requests: list[dict[str, Any]] = []
        self.headers_seen: list[dict[str, str]] = []
        self.raw_responses: dict[str, bytes] = {}
        self.delays: dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def respond(self, unit_name: str, body: Any, status: int = 200) -> None:
        self.responses[unit_name] = (status, body)

    def delay(self, unit_name: str, seconds: float) -> None:
        """Hold the response for unit_name for the given number of seconds."""
        self.delays[unit_name] = seconds

    def respond_raw(self, unit_name: str, payload: bytes) -> None:
        self.raw_responses[unit_name] = payload

    def record(self, body: dict[str, Any], headers: dict[str, str]) -> None:
        with self._lock:
            self.requests.append(body)
            self.headers_seen.append(headers)

    def unit_names(self) -> list[str]:
        with self._lock:
            return [r["files"][0]["name"] for r in self.requests]


def _make_handler(service: StubCompileService) -> type[BaseHTTPRequestHandler]:
    class _Handler(BaseHTTPRequestHandler):
        def do_POST(self) -> None:
            length = int(self.headers.get("Content-Length", 0))
            body = json.loads(self.rfile.read(length))
            service.record(body, {"Content-Type": self.headers.get("Content-Type", "")})

            if self.path != "/api/build":
                self._send(404, b'{"error": "not found"}')
                return

            name = body["files"][0]["name"]
            time.sleep(service.delays.get(name, 0.0))

            if name in service.raw_responses:
                self._send(200, service.raw_responses[name])
                return
            status, payload = service.responses.get(name, (200, success_body(name)))
            self._send(status, json.dumps(payload).encode("utf-8"))

        def _send(self, status: int, payload: bytes) -> None:
            try:
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)
            except (BrokenPipeError, ConnectionResetError):
                # Client gave up (timeout) before the delayed response was sent
                pass

        def log_message(self, format: str, *args: Any) -> None:
            """Suppress request logging."""
            pass

    return _Handler


@pytest.fixture
def compile_service():
    """Start a stub compile service on a random port."""
    service = StubCompileService()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(service))
    service.port = server.server_address[1]
    server_thread = threading.Thread(target=server.serve_forever, daemon=True)
    server_thread.start()

    yield service

    server.shutdown()
    server.server_close()
    server_thread.join(timeout=2.0)


@pytest.fixture
def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__
