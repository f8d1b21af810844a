from __future__ import annotations

import pytest
from PIL import Image

from departure_matrix.display.base import DeviceError
from departure_matrix.display.canvas import CanvasDevice, PillowFont
from departure_matrix.rendering.emulator import FrameFile


def test_present_swaps_buffers() -> None:
    frames: list[Image.Image] = []
    device = CanvasDevice(32, 16, [frames.append])
    drawn = device.offscreen
    device.clear(255, 0, 0)

    next_buffer = device.present()

    assert device.visible is drawn
    assert next_buffer is device.offscreen
    assert next_buffer is not drawn
    assert next_buffer.getpixel((0, 0)) == (0, 0, 0)
    assert frames[0].getpixel((5, 5)) == (255, 0, 0)


def test_present_scales_by_brightness() -> None:
    frames: list[Image.Image] = []
    device = CanvasDevice(8, 8, [frames.append])
    device.clear(200, 100, 0)
    device.set_brightness(50)

    device.present()

    assert frames[0].getpixel((0, 0)) == (100, 50, 0)
    assert device.visible.getpixel((0, 0)) == (200, 100, 0)


def test_draw_text_returns_advance() -> None:
    device = CanvasDevice(128, 32, [])
    font = PillowFont.load(None, 12)

    advance = device.draw_text(0, font.baseline(), font, (255, 255, 255), None, "12", 0)
    spaced = device.draw_text(0, font.baseline(), font, (255, 255, 255), (0, 0, 64), "12", 2)

    assert advance > 0
    assert spaced == font.length("1") + font.length("2") + 4
    assert device.offscreen.getbbox() is not None


def test_close_blanks_outputs() -> None:
    frames: list[Image.Image] = []
    device = CanvasDevice(8, 8, [frames.append])
    device.clear(255, 255, 255)
    device.present()

    device.close()

    assert frames[-1].getbbox() is None


def test_missing_font_raises_device_error(tmp_path) -> None:
    with pytest.raises(DeviceError):
        PillowFont.load(str(tmp_path / "missing.ttf"), 12)


def test_invalid_size_raises_device_error() -> None:
    with pytest.raises(DeviceError):
        CanvasDevice(0, 32)


def test_frame_file_output(tmp_path) -> None:
    path = tmp_path / "out" / "frame.png"
    device = CanvasDevice(16, 8, [FrameFile(str(path))])
    device.clear(0, 255, 0)

    device.present()

    with Image.open(path) as saved:
        assert saved.size == (16, 8)
        assert saved.convert("RGB").getpixel((1, 1)) == (0, 255, 0)


def test_default_font_honours_size() -> None:
    small = PillowFont.load(None, 8)
    large = PillowFont.load(None, 12)

    assert large.baseline() > small.baseline()
