"""Renderers consuming tracker output."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Optional

import cv2

from contracts import Frame, MotionStatus
from log_config.logger import get_logger
from ui.drawing import draw_status

logger = get_logger(__name__)


class Renderer(ABC):
    @abstractmethod
    def render(self, frame: Frame, status: Optional[MotionStatus]) -> None:
        """Show a frame with the current target status (None when no target)."""

    def close(self) -> None:
        return None


class NullRenderer(Renderer):
    """Headless renderer that only keeps the last status."""

    def __init__(self) -> None:
        self.last_status: Optional[MotionStatus] = None
        self.frames_rendered = 0

    def render(self, frame: Frame, status: Optional[MotionStatus]) -> None:
        self.frames_rendered += 1
        if status is not None:
            self.last_status = status


class OpenCVWindowRenderer(Renderer):
    """Display annotated frames in an OpenCV window.

    ``render`` only stores the latest annotated image; ``pump`` must run on
    the thread that owns the window (HighGUI is not thread safe).
    """

    def __init__(self, window_name: str = "SettleTrack") -> None:
        self.window_name = window_name
        self._lock = threading.Lock()
        self._pending = None
        self._last_status: Optional[MotionStatus] = None

    def render(self, frame: Frame, status: Optional[MotionStatus]) -> None:
        if status is not None:
            self._last_status = status
        # Keep showing the last box when this frame had no target
        shown = self._last_status
        image = draw_status(frame.image, shown) if shown is not None else frame.image
        with self._lock:
            self._pending = image

    def pump(self, wait_ms: int = 1) -> int:
        """Show the newest annotated frame and return the pressed key (or -1)."""
        with self._lock:
            image, self._pending = self._pending, None
        if image is not None:
            cv2.imshow(self.window_name, image)
        return cv2.waitKey(wait_ms)

    def close(self) -> None:
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error as e:
            logger.debug(f"Window {self.window_name} already closed: {e}")
