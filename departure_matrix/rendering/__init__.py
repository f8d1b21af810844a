"""Layout and rendering for the departure matrix."""

from departure_matrix.rendering.emulator import FrameFile, save_frame
from departure_matrix.rendering.layout import RenderInstruction, layout
from departure_matrix.rendering.render_loop import RenderLoop

__all__ = ["FrameFile", "RenderInstruction", "RenderLoop", "layout", "save_frame"]
