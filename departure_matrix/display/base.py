"""Capability surface the render loop needs from a display device."""

from __future__ import annotations

from typing import Any, Protocol

Color = tuple[int, int, int]


class DeviceError(RuntimeError):
    """Raised when a display device cannot be acquired or initialised."""


class Font(Protocol):
    def baseline(self) -> int:
        """Distance in pixels from the top of a line to its baseline."""
        ...


class Device(Protocol):
    """Double-buffered pixel surface.

    Drawing targets the off-screen buffer; ``present`` makes it visible and
    returns the buffer to draw the next frame into.
    """

    def clear(self, r: int, g: int, b: int) -> None: ...

    def draw_text(
        self,
        x: int,
        y: int,
        font: Any,
        color: Color,
        background: Color | None,
        text: str,
        extra_spacing: int = 0,
    ) -> int: ...

    def set_brightness(self, brightness: int) -> None: ...

    def present(self) -> Any: ...

    def load_font(self, path: str | None, size: int) -> Font: ...

    def close(self) -> None: ...


__all__ = ["Color", "Device", "DeviceError", "Font"]
