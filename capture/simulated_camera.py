"""Simulated camera backend for pipeline testing."""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from contracts import Frame

from .camera_device import CameraDevice, CameraStats


class SimulatedCamera(CameraDevice):
    def __init__(self, width: int = 640, height: int = 360, fps: int = 30) -> None:
        self._source: Optional[str] = None
        self._width = width
        self._height = height
        self._fps = fps
        self._frame_index = 0
        self._last_frame_time = time.monotonic()

    def open(self, source: str) -> None:
        self._source = source

    def set_mode(self, width: int, height: int, fps: int) -> None:
        self._width = width
        self._height = height
        self._fps = fps

    def read_frame(self) -> Frame:
        if self._fps > 0:
            target_delay = 1.0 / self._fps
            now = time.monotonic()
            elapsed = now - self._last_frame_time
            if elapsed < target_delay:
                time.sleep(target_delay - elapsed)
        self._last_frame_time = time.monotonic()
        self._frame_index += 1

        # Dark blue-gray BGR frame
        image = np.zeros((self._height, self._width, 3), dtype=np.uint8)
        image[:, :, 0] = 40
        image[:, :, 1] = 30
        image[:, :, 2] = 20

        return Frame(
            camera_id=self._source or "sim",
            frame_index=self._frame_index,
            t_capture=self._last_frame_time,
            image=image,
            width=self._width,
            height=self._height,
        )

    def get_stats(self) -> CameraStats:
        return CameraStats(
            fps_avg=float(self._fps),
            fps_instant=float(self._fps),
            frames=self._frame_index,
            dropped_frames=0,
        )

    def close(self) -> None:
        return None
