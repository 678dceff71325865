"""Dashboard module for the flip card demo."""

from .grid_window import GridWindow

__all__ = ["GridWindow"]
