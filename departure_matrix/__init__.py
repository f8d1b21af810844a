"""Departure times on an LED pixel matrix, with an HTTP control plane."""

__version__ = "0.1.0"
