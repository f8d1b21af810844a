"""Frame output that writes each presented frame to a PNG file."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

DEFAULT_FRAME_PATH = "emulator_output/frame.png"


def save_frame(image: Image.Image, path: str = DEFAULT_FRAME_PATH) -> None:
    """Save a frame to disk as a PNG image, replacing the previous one atomically."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = output_path.with_name(output_path.name + ".partial")
    image.save(partial_path, format="PNG")
    partial_path.replace(output_path)


class FrameFile:
    """Frame output bound to one PNG path."""

    def __init__(self, path: str = DEFAULT_FRAME_PATH) -> None:
        self.path = path

    def __call__(self, image: Image.Image) -> None:
        save_frame(image, self.path)


__all__ = ["DEFAULT_FRAME_PATH", "FrameFile", "save_frame"]
