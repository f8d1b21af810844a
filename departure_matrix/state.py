"""Shared runtime state read by the render loop and written by poller and listener."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
import threading
from typing import Generic, TypeVar

from departure_matrix.data.models import Timetable

T = TypeVar("T")

BRIGHTNESS_MIN = 0
BRIGHTNESS_MAX = 100
DEFAULT_BRIGHTNESS = 80


class InvalidControlValue(ValueError):
    """Raised when a control update violates its domain constraints."""


class DisplayMode(IntEnum):
    """What the render loop shows."""

    UNCONFIGURED = -1
    DEPARTURES = 0
    FREE_TEXT = 1


SETTABLE_MODES = (DisplayMode.DEPARTURES, DisplayMode.FREE_TEXT)


@dataclass(frozen=True)
class PollStatus:
    """Outcome of the latest timetable poll attempt."""

    fetched_at: float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ControlsView:
    """Controls as read together for one render tick."""

    brightness: int
    mode: DisplayMode
    text: str | None


class Snapshot(Generic[T]):
    """Single-value cell holding an immutable value.

    A publish replaces the reference wholesale; the lock is held only for the
    swap itself, so readers never wait on a fetch or a request.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def read(self) -> T:
        with self._lock:
            return self._value

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value


class SharedState:
    """Process-wide state, created by the process root and passed to each component."""

    def __init__(self, brightness: int = DEFAULT_BRIGHTNESS) -> None:
        self.brightness: Snapshot[int] = Snapshot(validate_brightness(brightness))
        self.mode: Snapshot[DisplayMode] = Snapshot(DisplayMode.UNCONFIGURED)
        self.text: Snapshot[str | None] = Snapshot(None)
        self.timetable: Snapshot[Timetable | None] = Snapshot(None)
        self.poll_status: Snapshot[PollStatus | None] = Snapshot(None)

    def set_brightness(self, value: int) -> None:
        self.brightness.publish(validate_brightness(value))

    def set_mode(self, value: int) -> DisplayMode:
        try:
            mode = DisplayMode(value)
        except ValueError as exc:
            raise InvalidControlValue(f"Unknown display mode: {value!r}") from exc
        if mode not in SETTABLE_MODES:
            raise InvalidControlValue(f"Display mode cannot be set to {mode.name}")
        self.mode.publish(mode)
        return mode

    def set_text(self, value: str) -> None:
        if not isinstance(value, str):
            raise InvalidControlValue("Text must be a string")
        self.text.publish(value)

    def controls(self) -> ControlsView:
        return ControlsView(
            brightness=self.brightness.read(),
            mode=self.mode.read(),
            text=self.text.read(),
        )


def validate_brightness(value: int) -> int:
    """Return ``value`` if it is an integer brightness in range, else raise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidControlValue(f"Brightness must be an integer, got {value!r}")
    if not BRIGHTNESS_MIN <= value <= BRIGHTNESS_MAX:
        raise InvalidControlValue(
            f"Brightness must be between {BRIGHTNESS_MIN} and {BRIGHTNESS_MAX}, got {value}"
        )
    return value


__all__ = [
    "ControlsView",
    "DisplayMode",
    "InvalidControlValue",
    "PollStatus",
    "SharedState",
    "Snapshot",
    "validate_brightness",
]
