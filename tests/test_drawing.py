"""Tests for overlay drawing and renderers."""

from __future__ import annotations

import numpy as np

from contracts import BoundingBox, Frame, MotionStatus
from ui.drawing import MOVING_COLOR, SETTLED_COLOR, draw_status, status_color, to_pixel_rect
from ui.render import NullRenderer, OpenCVWindowRenderer


def _status(moving: bool) -> MotionStatus:
    return MotionStatus(
        box=BoundingBox(min_x=0.25, min_y=0.25, width=0.5, height=0.5),
        moving=moving,
        timestamp=0.0,
    )


def test_to_pixel_rect_scales_normalized_box() -> None:
    box = BoundingBox(min_x=0.25, min_y=0.5, width=0.5, height=0.25)

    assert to_pixel_rect(box, width=200, height=100) == (50, 50, 150, 75)


def test_to_pixel_rect_clips_to_image() -> None:
    box = BoundingBox(min_x=-0.1, min_y=0.9, width=0.5, height=0.5)

    x1, y1, x2, y2 = to_pixel_rect(box, width=100, height=100)

    assert (x1, y1, x2, y2) == (0, 90, 40, 100)


def test_status_colors() -> None:
    assert status_color(True) == MOVING_COLOR
    assert status_color(False) == SETTLED_COLOR


def test_draw_status_moving_is_red() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)

    annotated = draw_status(image, _status(moving=True), thickness=2)

    # Top edge of the box at y=25 spans x=50..150
    assert tuple(annotated[25, 100]) == MOVING_COLOR
    # Interior untouched
    assert tuple(annotated[50, 100]) == (0, 0, 0)
    # Input not mutated
    assert not image.any()


def test_draw_status_settled_is_green() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)

    annotated = draw_status(image, _status(moving=False), thickness=2)

    assert tuple(annotated[25, 100]) == SETTLED_COLOR


def test_draw_status_on_grayscale() -> None:
    image = np.zeros((100, 200), dtype=np.uint8)

    annotated = draw_status(image, _status(moving=True))

    assert annotated.shape == (100, 200, 3)


def test_null_renderer_keeps_last_status() -> None:
    renderer = NullRenderer()
    frame = Frame(camera_id="0", frame_index=1, t_capture=0.0, image=None, width=0, height=0)
    status = _status(moving=True)

    renderer.render(frame, status)
    renderer.render(frame, None)

    assert renderer.frames_rendered == 2
    assert renderer.last_status == status


def test_window_renderer_keeps_last_box_without_target() -> None:
    renderer = OpenCVWindowRenderer()
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    frame = Frame(camera_id="0", frame_index=1, t_capture=0.0, image=image, width=200, height=100)

    renderer.render(frame, _status(moving=False))
    renderer.render(frame, None)

    pending = renderer._pending
    assert tuple(pending[25, 100]) == SETTLED_COLOR
