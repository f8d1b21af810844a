"""HTTP control plane for brightness, display mode and free text."""

from __future__ import annotations

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from departure_matrix.state import InvalidControlValue, SharedState

DEFAULT_PORT = 8080
MAX_BODY_BYTES = 64 * 1024

logger = logging.getLogger(__name__)


class BadRequest(ValueError):
    """Raised for a request body that cannot be applied."""


def _read_field(payload: Any, key: str, kind: type) -> Any:
    if not isinstance(payload, dict) or key not in payload:
        raise BadRequest(f"Body must be an object with '{key}'")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, kind):
        raise BadRequest(f"'{key}' must be of type {kind.__name__}")
    return value


class ControlHandler(BaseHTTPRequestHandler):
    server: "ControlHTTPServer"

    def do_GET(self) -> None:  # noqa: N802
        state = self.server.state
        if self.path == "/brightness":
            self._send_json(200, {"brightness": state.brightness.read()})
            return

        if self.path == "/mode":
            self._send_json(200, {"mode": int(state.mode.read())})
            return

        if self.path == "/text":
            self._send_json(200, {"text": state.text.read()})
            return

        if self.path == "/status":
            status = state.poll_status.read()
            self._send_json(
                200,
                {
                    "timetable_loaded": state.timetable.read() is not None,
                    "fetched_at": status.fetched_at if status else None,
                    "error": status.error if status else None,
                },
            )
            return

        if self.path == "/healthz":
            self.send_response(200)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.end_headers()
            self.wfile.write(b"ok")
            return

        self._send_status(404)

    def do_POST(self) -> None:  # noqa: N802
        state = self.server.state
        try:
            if self.path == "/brightness":
                value = _read_field(self._read_json(), "brightness", int)
                state.set_brightness(value)
            elif self.path == "/mode":
                value = _read_field(self._read_json(), "mode", int)
                value = state.set_mode(value).name
            elif self.path == "/text":
                value = _read_field(self._read_json(), "text", str)
                state.set_text(value)
            else:
                self._send_status(404)
                return
        except (BadRequest, InvalidControlValue) as exc:
            logger.info("control_rejected %s", {"path": self.path, "error": str(exc)})
            self._send_status(400)
            return

        logger.info("control_update %s", {"path": self.path, "value": value})
        self._send_status(200)

    def _read_json(self) -> Any:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError as exc:
            raise BadRequest("Invalid Content-Length") from exc
        if length < 0 or length > MAX_BODY_BYTES:
            raise BadRequest("Body too large")
        body = self.rfile.read(length)
        try:
            return json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise BadRequest(f"Malformed JSON: {exc}") from exc

    def _send_json(self, status: int, payload: dict[str, Any]) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_status(self, status: int) -> None:
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("control_request %s", format % args)


class ControlHTTPServer(ThreadingHTTPServer):
    # in-flight requests finish before server_close returns
    daemon_threads = False
    block_on_close = True

    def __init__(self, address: tuple[str, int], state: SharedState) -> None:
        super().__init__(address, ControlHandler)
        self.state = state


class ControlServer:
    """Runs the control plane on its own thread."""

    def __init__(self, state: SharedState, host: str = "0.0.0.0", port: int = DEFAULT_PORT) -> None:
        self._httpd = ControlHTTPServer((host, port), state)
        self._thread: threading.Thread | None = None

    @property
    def server_address(self) -> tuple[str, int]:
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="control-server")
        self._thread.start()
        logger.info("control_listening %s", {"address": self.server_address})

    def stop(self) -> None:
        """Stop accepting requests, wait for in-flight ones and release the socket."""
        if self._thread is not None:
            self._httpd.shutdown()
            self._thread.join()
            self._thread = None
        self._httpd.server_close()


__all__ = ["ControlHandler", "ControlHTTPServer", "ControlServer", "DEFAULT_PORT"]
