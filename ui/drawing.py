"""Drawing functions for rendering frames with target overlays."""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from contracts import BoundingBox, MotionStatus

# BGR
MOVING_COLOR = (0, 0, 255)
SETTLED_COLOR = (0, 255, 0)


def to_pixel_rect(box: BoundingBox, width: int, height: int) -> Tuple[int, int, int, int]:
    """Scale a normalized top-left box to pixel (x1, y1, x2, y2), clipped to the image."""
    x1 = int(round(np.clip(box.min_x, 0.0, 1.0) * width))
    y1 = int(round(np.clip(box.min_y, 0.0, 1.0) * height))
    x2 = int(round(np.clip(box.max_x, 0.0, 1.0) * width))
    y2 = int(round(np.clip(box.max_y, 0.0, 1.0) * height))
    return x1, y1, x2, y2


def status_color(moving: bool) -> Tuple[int, int, int]:
    return MOVING_COLOR if moving else SETTLED_COLOR


def draw_status(image: np.ndarray, status: MotionStatus, thickness: int = 4) -> np.ndarray:
    """Draw the target box, red while moving and green once settled.

    Args:
        image: Grayscale or BGR image
        status: Tracker output for this frame
        thickness: Border width in pixels

    Returns:
        Annotated BGR copy of the image
    """
    if image.ndim == 2:
        canvas = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    else:
        canvas = image.copy()
    height, width = canvas.shape[:2]
    x1, y1, x2, y2 = to_pixel_rect(status.box, width, height)
    cv2.rectangle(canvas, (x1, y1), (x2, y2), status_color(status.moving), thickness)
    return canvas
