"""Control-plane listener."""

from departure_matrix.control.server import ControlServer

__all__ = ["ControlServer"]
