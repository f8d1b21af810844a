"""Logging setup and the JSON-lines diagnostic sink for poll failures."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import threading
from typing import Any

from departure_matrix.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_FILENAME = "departure_matrix.log"
POLL_ERRORS_FILENAME = "poll_errors.jsonl"


def configure_logging(config: LoggingConfig) -> None:
    """Configure root logging from the logging section of the config."""
    level = logging.getLevelName(str(config.level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {config.level}")

    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8"),
    ]
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DiagnosticLog:
    """Append-only JSON-lines file of poll diagnostics."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def record(self, error: str, **fields: Any) -> dict[str, Any]:
        """Write one record and return it."""
        entry = {"timestamp": _utc_now_iso(), "error": error, **fields}
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        return entry


__all__ = ["DiagnosticLog", "configure_logging"]
