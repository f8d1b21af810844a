"""HTTP client for the remote timetable provider."""

from __future__ import annotations

from typing import Any

import requests

from departure_matrix.data.models import Timetable, parse_timetable

TIMETABLE_PATH = "/timetable"


class TimetableClientError(Exception):
    """Raised when a provider request fails or returns a non-200 response."""


class TimetableClient:
    """Thin wrapper around the provider's timetable endpoint using requests."""

    def __init__(self, base_url: str, timeout_seconds: float = 10) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_timetable(self) -> Timetable:
        """Fetch and parse the current timetable.

        Raises TimetableClientError on transport or status failures and
        TimetableFormatError when the body does not match the schema.
        """
        return parse_timetable(self._get(TIMETABLE_PATH))

    def _get(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = requests.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise TimetableClientError(f"Timetable request failed: {exc}") from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            raise TimetableClientError(f"Timetable request failed: {detail}")

        try:
            return response.json()
        except (ValueError, RecursionError) as exc:
            raise TimetableClientError("Timetable response was not valid JSON") from exc


__all__ = ["TimetableClient", "TimetableClientError"]
