"""Render loop drawing the latest shared state onto the display device."""

from __future__ import annotations

import logging
import threading
from typing import Mapping

from departure_matrix.display.base import Device, Font
from departure_matrix.rendering.layout import COLOR_BACKGROUND, RenderInstruction, layout
from departure_matrix.state import SharedState

TEXT_X = 0

logger = logging.getLogger(__name__)


class RenderLoop:
    """Clear, lay out, draw and present once per tick until stopped.

    Reads every field through SharedState, so a slow fetch or request never
    holds up a frame. With ``frame_interval_seconds=0`` the cadence is set by
    the device's ``present`` alone.
    """

    def __init__(
        self,
        device: Device,
        state: SharedState,
        fonts: Mapping[str, Font],
        frame_interval_seconds: float = 1.0,
    ) -> None:
        self._device = device
        self._state = state
        self._fonts = dict(fonts)
        self._frame_interval_seconds = frame_interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._frames_presented = 0

    @property
    def frames_presented(self) -> int:
        return self._frames_presented

    def tick(self) -> tuple[RenderInstruction, ...]:
        """Render and present one frame; returns what was drawn."""
        controls = self._state.controls()
        timetable = self._state.timetable.read()

        self._device.clear(*COLOR_BACKGROUND)
        self._device.set_brightness(controls.brightness)
        instructions = layout(controls, timetable, self._fonts)
        for instruction in instructions:
            self._device.draw_text(
                TEXT_X,
                instruction.y,
                self._fonts[instruction.font],
                instruction.color,
                None,
                instruction.text,
                0,
            )
        self._device.present()
        self._frames_presented += 1
        return instructions

    def run(self) -> None:
        """Tick until ``stop`` is called."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:  # noqa: BLE001 - keep the display alive
                logger.exception("render_error")
            if self._frame_interval_seconds > 0:
                self._stop_event.wait(timeout=self._frame_interval_seconds)

    def start(self) -> None:
        """Run the loop on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="render-loop")
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


__all__ = ["RenderLoop"]
