"""OpenCV-based camera backend."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import cv2

from contracts import Frame
from exceptions import CameraConnectionError, CameraNotFoundError
from log_config.logger import get_logger

from .camera_device import CameraDevice, CameraStats

logger = get_logger(__name__)


@dataclass
class _Stats:
    last_frame_t: float = 0.0
    frames: int = 0
    dropped: int = 0
    fps_avg: float = 0.0
    fps_instant: float = 0.0


class OpenCVCamera(CameraDevice):
    def __init__(self) -> None:
        self._source: Optional[str] = None
        self._capture: Optional[cv2.VideoCapture] = None
        self._stats = _Stats()

    def open(self, source: str) -> None:
        """Open camera by index, or a video file / stream URL.

        Args:
            source: Camera index as string (e.g. "0") or a path/URL

        Raises:
            CameraNotFoundError: If the device or file cannot be opened
        """
        source_str = str(source)
        self._source = source_str
        logger.info(f"Opening OpenCV capture {source_str}")

        target = int(source_str) if source_str.isdigit() else source_str
        capture = cv2.VideoCapture(target)
        if not capture.isOpened():
            capture.release()
            logger.error(f"Failed to open capture {source_str}")
            raise CameraNotFoundError(
                f"Failed to open capture {source_str} - camera may be in use or not found",
                camera_id=source_str,
            )
        self._capture = capture

    def set_mode(self, width: int, height: int, fps: int) -> None:
        """Configure camera resolution and frame rate.

        Raises:
            RuntimeError: If camera not opened
        """
        if self._capture is None:
            logger.error(f"Cannot set_mode on camera {self._source}: not opened")
            raise RuntimeError("Camera not opened.")

        logger.info(f"Camera {self._source}: Configuring {width}x{height} @ {fps}fps")
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._capture.set(cv2.CAP_PROP_FPS, fps)

        # Backends may silently ignore requested settings
        actual_width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = int(self._capture.get(cv2.CAP_PROP_FPS))

        if actual_width != width or actual_height != height:
            logger.warning(
                f"Camera {self._source}: Requested {width}x{height} but got {actual_width}x{actual_height}"
            )
        if actual_fps != fps:
            logger.warning(f"Camera {self._source}: Requested {fps}fps but got {actual_fps}fps")

    def read_frame(self) -> Frame:
        if self._capture is None:
            raise RuntimeError("Camera not opened.")
        ok, image = self._capture.read()
        if not ok:
            self._stats.dropped += 1
            raise CameraConnectionError(
                f"Failed to read frame from {self._source}", camera_id=self._source
            )

        now = time.monotonic()
        if self._stats.last_frame_t:
            delta_s = now - self._stats.last_frame_t
            if delta_s > 0:
                self._stats.fps_instant = 1.0 / delta_s
                self._stats.fps_avg = (
                    (self._stats.fps_avg * self._stats.frames) + self._stats.fps_instant
                ) / (self._stats.frames + 1)
        self._stats.frames += 1
        self._stats.last_frame_t = now
        return Frame(
            camera_id=self._source or "0",
            frame_index=self._stats.frames,
            t_capture=now,
            image=image,
            width=image.shape[1],
            height=image.shape[0],
        )

    def get_stats(self) -> CameraStats:
        return CameraStats(
            fps_avg=self._stats.fps_avg,
            fps_instant=self._stats.fps_instant,
            frames=self._stats.frames,
            dropped_frames=self._stats.dropped,
        )

    def close(self) -> None:
        """Close camera and release resources. Idempotent."""
        if self._capture is None:
            logger.debug(f"Camera {self._source}: Already closed")
            return

        logger.info(f"Camera {self._source}: Closing")
        try:
            self._capture.release()
        finally:
            self._capture = None
