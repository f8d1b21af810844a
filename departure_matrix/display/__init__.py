"""Display device adapters."""

from departure_matrix.display.base import Device, DeviceError, Font
from departure_matrix.display.canvas import CanvasDevice, PillowFont
from departure_matrix.display.hardware import MatrixDisplay, MatrixGeometry
from departure_matrix.display.led_matrix import LedMatrixDevice

__all__ = [
    "CanvasDevice",
    "Device",
    "DeviceError",
    "Font",
    "LedMatrixDevice",
    "MatrixDisplay",
    "MatrixGeometry",
    "PillowFont",
]
