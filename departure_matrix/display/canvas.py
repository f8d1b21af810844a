"""Pillow-backed device: draws into an off-screen image and hands frames to outputs."""

from __future__ import annotations

from typing import Callable, Iterable

from PIL import Image, ImageDraw, ImageFont

from departure_matrix.display.base import Color, DeviceError

FrameOutput = Callable[[Image.Image], None]


class PillowFont:
    """Pillow font exposing the baseline the layout engine stacks lines with."""

    def __init__(self, font: ImageFont.ImageFont | ImageFont.FreeTypeFont) -> None:
        self._font = font

    @classmethod
    def load(cls, path: str | None, size: int) -> "PillowFont":
        """Load a TrueType/OpenType or Pillow bitmap (.pil) font, or Pillow's default."""
        try:
            if path is None:
                return cls(ImageFont.load_default(size))
            if path.endswith(".pil"):
                return cls(ImageFont.load(path))
            return cls(ImageFont.truetype(path, size))
        except OSError as exc:
            raise DeviceError(f"Couldn't load font '{path}'") from exc

    @property
    def font(self) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        return self._font

    def baseline(self) -> int:
        if hasattr(self._font, "getmetrics"):
            ascent, _descent = self._font.getmetrics()
            return int(ascent)
        return int(self._font.getbbox("A")[3])

    def length(self, text: str) -> int:
        return int(round(self._font.getlength(text)))


class CanvasDevice:
    """Double-buffered RGB canvas.

    ``present`` sends a brightness-scaled copy of the off-screen image to every
    frame output and returns a fresh off-screen image.
    """

    def __init__(self, width: int, height: int, outputs: Iterable[FrameOutput] = ()) -> None:
        if width <= 0 or height <= 0:
            raise DeviceError(f"Invalid canvas size {width}x{height}")
        self._width = width
        self._height = height
        self._outputs = list(outputs)
        self._brightness = 100
        self._offscreen = Image.new("RGB", (width, height), (0, 0, 0))
        self._visible: Image.Image | None = None

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def brightness(self) -> int:
        return self._brightness

    @property
    def offscreen(self) -> Image.Image:
        return self._offscreen

    @property
    def visible(self) -> Image.Image | None:
        """Last presented frame, before brightness scaling."""
        return self._visible

    def load_font(self, path: str | None, size: int) -> PillowFont:
        return PillowFont.load(path, size)

    def clear(self, r: int, g: int, b: int) -> None:
        self._offscreen.paste((r, g, b), (0, 0, self._width, self._height))

    def draw_text(
        self,
        x: int,
        y: int,
        font: PillowFont,
        color: Color,
        background: Color | None,
        text: str,
        extra_spacing: int = 0,
    ) -> int:
        """Draw ``text`` with its baseline at ``y``; returns the advance in pixels."""
        draw = ImageDraw.Draw(self._offscreen)
        top = y - font.baseline()
        if extra_spacing:
            advance = sum(font.length(ch) + extra_spacing for ch in text)
        else:
            advance = font.length(text)
        if background is not None and text:
            bbox = draw.textbbox((x, top), text, font=font.font)
            draw.rectangle((x, bbox[1], x + advance - 1, bbox[3]), fill=background)

        if not extra_spacing:
            draw.text((x, top), text, font=font.font, fill=color)
            return advance

        cursor = x
        for ch in text:
            draw.text((cursor, top), ch, font=font.font, fill=color)
            cursor += font.length(ch) + extra_spacing
        return advance

    def set_brightness(self, brightness: int) -> None:
        self._brightness = brightness

    def present(self) -> Image.Image:
        frame = self._offscreen
        if self._brightness < 100:
            scale = self._brightness
            frame = Image.eval(frame, lambda value: value * scale // 100)
        for output in self._outputs:
            output(frame)
        self._visible = self._offscreen
        self._offscreen = Image.new("RGB", (self._width, self._height), (0, 0, 0))
        return self._offscreen

    def close(self) -> None:
        """Blank every output and release them."""
        black = Image.new("RGB", (self._width, self._height), (0, 0, 0))
        for output in self._outputs:
            output(black)
        self._outputs = []


__all__ = ["CanvasDevice", "FrameOutput", "PillowFont"]
