"""Threaded poller that periodically refreshes the timetable snapshot."""

from __future__ import annotations

import logging
import threading
import time

from departure_matrix.data.models import TimetableFormatError
from departure_matrix.data.provider_client import TimetableClient, TimetableClientError
from departure_matrix.diagnostics import DiagnosticLog
from departure_matrix.state import PollStatus, SharedState

DEFAULT_POLL_INTERVAL_SECONDS = 30

logger = logging.getLogger(__name__)


class TimetablePoller:
    """Background poller that publishes a new Timetable after each good fetch.

    Waits a fixed delay after every attempt, failed ones included. A failure
    leaves the published timetable untouched.
    """

    def __init__(
        self,
        client: TimetableClient,
        state: SharedState,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self._client = client
        self._state = state
        self._poll_interval_seconds = poll_interval_seconds
        self._diagnostics = diagnostics
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the background polling thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="timetable-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop."""
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self._poll_once()
            except Exception as exc:  # noqa: BLE001 - keep polling on the fixed delay
                logger.exception("poll_failed %s", {"error": repr(exc)})
                status = PollStatus(fetched_at=time.time(), error=f"{type(exc).__name__}: {exc}")
                self._state.poll_status.publish(status)
                self._record_diagnostic(status)
            self._stop_event.wait(timeout=self._poll_interval_seconds)

    def _poll_once(self) -> PollStatus:
        try:
            timetable = self._client.fetch_timetable()
        except (TimetableClientError, TimetableFormatError) as exc:
            status = PollStatus(fetched_at=time.time(), error=str(exc))
            self._state.poll_status.publish(status)
            self._report_failure(status)
            return status

        self._state.timetable.publish(timetable)
        status = PollStatus(fetched_at=time.time())
        self._state.poll_status.publish(status)
        logger.debug("poll_ok %s", {"trips": len(timetable.trips), "fetched_at": status.fetched_at})
        return status

    def _report_failure(self, status: PollStatus) -> None:
        logger.warning("poll_failed %s", {"fetched_at": status.fetched_at, "error": status.error})
        self._record_diagnostic(status)

    def _record_diagnostic(self, status: PollStatus) -> None:
        if self._diagnostics is None:
            return
        try:
            self._diagnostics.record(status.error or "unknown error")
        except OSError:
            logger.exception("diagnostic_write_failed")


__all__ = ["DEFAULT_POLL_INTERVAL_SECONDS", "TimetablePoller"]
