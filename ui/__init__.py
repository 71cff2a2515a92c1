"""Rendering of tracker output."""

from .drawing import draw_status, to_pixel_rect
from .render import NullRenderer, OpenCVWindowRenderer, Renderer

__all__ = [
    "NullRenderer",
    "OpenCVWindowRenderer",
    "Renderer",
    "draw_status",
    "to_pixel_rect",
]
