"""HUB75 frame output for the Raspberry Pi 5 via Piomatter."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from departure_matrix.display.base import DeviceError

ADDR_LINES_BY_PANEL_HEIGHT = {16: 3, 32: 4, 64: 5}


@dataclass(frozen=True)
class MatrixGeometry:
    """Logical geometry used for panel chain setup."""

    width: int
    height: int
    panel_width: int = 64
    panel_height: int = 32
    n_addr_lines: int | None = None

    def address_lines(self) -> int:
        if self.n_addr_lines is not None:
            return self.n_addr_lines
        if self.panel_height not in ADDR_LINES_BY_PANEL_HEIGHT:
            raise DeviceError(
                f"Unsupported panel_height {self.panel_height} for address-line detection. "
                "Use 16, 32, or 64, or set n_addr_lines explicitly."
            )
        return ADDR_LINES_BY_PANEL_HEIGHT[self.panel_height]

    def validate(self) -> None:
        if self.width % self.panel_width != 0:
            raise DeviceError(
                f"Display width ({self.width}) must be a multiple of panel width ({self.panel_width})."
            )
        if self.height % self.panel_height != 0:
            raise DeviceError(
                f"Display height ({self.height}) must be a multiple of panel height ({self.panel_height})."
            )


class MatrixDisplay:
    """Blit PIL RGB frames to a chained HUB75 panel setup.

    Used as a frame output of CanvasDevice, which applies brightness itself;
    the panel is driven at full scale.
    """

    def __init__(self, geometry: MatrixGeometry) -> None:
        try:
            import numpy as np
            import adafruit_blinka_raspberry_pi5_piomatter as piomatter
        except ImportError as exc:
            raise DeviceError(
                "Hardware display requires 'numpy' and "
                "'adafruit_blinka_raspberry_pi5_piomatter' on Raspberry Pi 5."
            ) from exc

        geometry.validate()
        self._np = np
        self._geometry = geometry

        piomatter_geometry = piomatter.Geometry(
            width=geometry.width,
            height=geometry.height,
            n_addr_lines=geometry.address_lines(),
            rotation=piomatter.Orientation.Normal,
        )
        self._framebuffer = np.zeros((geometry.height, geometry.width, 3), dtype=np.uint8)
        try:
            self._matrix = piomatter.PioMatter(
                colorspace=piomatter.Colorspace.RGB888Packed,
                pinout=piomatter.Pinout.AdafruitMatrixBonnet,
                framebuffer=self._framebuffer,
                geometry=piomatter_geometry,
            )
        except (OSError, RuntimeError) as exc:
            raise DeviceError(f"Couldn't acquire the HUB75 matrix: {exc}") from exc

    @property
    def panel_count(self) -> int:
        return self._geometry.width // self._geometry.panel_width

    def render(self, image: Image.Image) -> None:
        """Copy an RGB image into the framebuffer and flush."""
        if image.size != (self._geometry.width, self._geometry.height):
            raise ValueError(
                "Frame size mismatch. "
                f"Expected {(self._geometry.width, self._geometry.height)}, got {image.size}."
            )
        self._framebuffer[:] = self._np.asarray(image.convert("RGB"), dtype=self._np.uint8)
        self._matrix.show()


__all__ = ["MatrixDisplay", "MatrixGeometry"]
