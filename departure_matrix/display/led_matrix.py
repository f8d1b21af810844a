"""Device backed by the rpi-rgb-led-matrix Python binding (``rgbmatrix``)."""

from __future__ import annotations

from typing import Any

from departure_matrix.display.base import Color, DeviceError


class LedMatrixFont:
    """BDF font loaded through ``rgbmatrix.graphics``."""

    def __init__(self, font: Any) -> None:
        self._font = font

    @property
    def font(self) -> Any:
        return self._font

    def baseline(self) -> int:
        return self._font.baseline


class LedMatrixDevice:
    """RGBMatrix with one off-screen FrameCanvas, presented with SwapOnVSync.

    ``present`` blocks until the next vertical sync, so the render loop can
    run without its own sleep.
    """

    def __init__(self, options: dict[str, Any], brightness: int = 100) -> None:
        try:
            from rgbmatrix import RGBMatrix, RGBMatrixOptions, graphics
        except ImportError as exc:
            raise DeviceError(
                "LED matrix output requires the 'rgbmatrix' binding from rpi-rgb-led-matrix."
            ) from exc

        matrix_options = RGBMatrixOptions()
        for key, value in options.items():
            if not hasattr(matrix_options, key):
                raise DeviceError(f"Unknown rgbmatrix option: {key}")
            setattr(matrix_options, key, value)
        matrix_options.brightness = brightness

        try:
            self._matrix = RGBMatrix(options=matrix_options)
        except (OSError, RuntimeError) as exc:
            raise DeviceError(f"Couldn't acquire the LED matrix: {exc}") from exc
        self._graphics = graphics
        self._offscreen = self._matrix.CreateFrameCanvas()

    def load_font(self, path: str | None, size: int) -> LedMatrixFont:
        if path is None:
            raise DeviceError("LED matrix output needs BDF font files for font_small and font_large")
        font = self._graphics.Font()
        try:
            font.LoadFont(path)
        except Exception as exc:  # noqa: BLE001 - the binding raises a bare Exception
            raise DeviceError(f"Couldn't load font '{path}'") from exc
        return LedMatrixFont(font)

    def clear(self, r: int, g: int, b: int) -> None:
        self._offscreen.Fill(r, g, b)

    def draw_text(
        self,
        x: int,
        y: int,
        font: LedMatrixFont,
        color: Color,
        background: Color | None,
        text: str,
        extra_spacing: int = 0,
    ) -> int:
        fg = self._graphics.Color(*color)
        if background is None and not extra_spacing:
            return self._graphics.DrawText(self._offscreen, font.font, x, y, fg, text)
        cursor = x
        for ch in text:
            if background is not None:
                width = font.font.CharacterWidth(ord(ch))
                top = y - font.baseline()
                for px in range(cursor, cursor + width + extra_spacing):
                    for py in range(top, top + font.font.height):
                        self._offscreen.SetPixel(px, py, *background)
            cursor += self._graphics.DrawText(self._offscreen, font.font, cursor, y, fg, ch)
            cursor += extra_spacing
        return cursor - x

    def set_brightness(self, brightness: int) -> None:
        self._matrix.brightness = brightness

    def present(self) -> Any:
        self._offscreen = self._matrix.SwapOnVSync(self._offscreen)
        return self._offscreen

    def close(self) -> None:
        self._matrix.Clear()


__all__ = ["LedMatrixDevice", "LedMatrixFont"]
