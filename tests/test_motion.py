"""Tests for motion magnitude computation and centering."""

from __future__ import annotations

import pytest

from contracts import BoundingBox
from track.motion import MotionConfig, compute_motion, is_centered, raw_change, window_capacity
from track.smoothing import MovingAverageFilter


def _box(mid_x: float, mid_y: float = 0.5, width: float = 0.25, height: float = 0.5) -> BoundingBox:
    return BoundingBox.from_center(mid_x, mid_y, width, height)


class TestRawChange:
    """Weighted box change."""

    def test_identical_boxes(self):
        """Identical boxes have zero change."""
        assert raw_change(_box(0.5), _box(0.5), MotionConfig()) == 0.0

    def test_horizontal_and_width_weighted_double(self):
        """Horizontal and width changes count twice as much as vertical and height."""
        config = MotionConfig()
        previous = BoundingBox(min_x=0.0, min_y=0.0, width=0.5, height=0.5)

        moved_x = BoundingBox(min_x=0.125, min_y=0.0, width=0.5, height=0.5)
        moved_y = BoundingBox(min_x=0.0, min_y=0.125, width=0.5, height=0.5)
        wider = BoundingBox(min_x=0.0, min_y=0.0, width=0.75, height=0.5)
        taller = BoundingBox(min_x=0.0, min_y=0.0, width=0.5, height=0.75)

        assert raw_change(moved_x, previous, config) == pytest.approx(0.25)
        assert raw_change(moved_y, previous, config) == pytest.approx(0.125)
        # Width change also shifts the center by half the change
        assert raw_change(wider, previous, config) == pytest.approx(2 * 0.125 + 2 * 0.25)
        assert raw_change(taller, previous, config) == pytest.approx(0.125 + 0.25)

    def test_custom_weights(self):
        """Weights are configurable per component."""
        config = MotionConfig(weight_x=1.0, weight_y=0.0, weight_width=0.0, weight_height=0.0)

        assert raw_change(_box(0.75), _box(0.5), config) == pytest.approx(0.25)
        assert raw_change(_box(0.5, mid_y=0.9), _box(0.5), config) == 0.0


class TestWindowCapacity:
    """Smoothing window sizing."""

    @pytest.mark.parametrize(
        "elapsed,expected",
        [(0.1, 15), (0.5, 3), (2.0, 1), (1.5, 1), (0.033, 45), (0.09999999999999998, 15)],
    )
    def test_capacity_spans_window(self, elapsed, expected):
        """Capacity is the number of whole intervals in 1.5 s, at least one."""
        assert window_capacity(elapsed) == expected

    def test_float_noise_does_not_lose_a_slot(self):
        """An interval summed from floats still yields the exact slot count."""
        elapsed = 0.1 + 0.2

        assert 1.5 / elapsed < 5.0
        assert window_capacity(elapsed) == 5

    def test_ratio_just_below_integer_rounds_down(self):
        """Only float noise is forgiven; a real shortfall floors."""
        assert window_capacity(0.1000000000007) == 14
        assert window_capacity(0.1001) == 14

    def test_custom_window(self):
        """The window length is configurable."""
        assert window_capacity(0.25, window_s=3.0) == 12


class TestCentering:
    """Strict horizontal center band."""

    @pytest.mark.parametrize("mid_x,expected", [(0.35, False), (0.65, False), (0.5, True), (0.36, True), (0.64, True)])
    def test_band_edges(self, mid_x, expected):
        """Band edges are excluded."""
        box = BoundingBox(min_x=mid_x, min_y=0.25, width=0.0, height=0.5)

        assert is_centered(box, MotionConfig()) is expected

    def test_vertical_position_ignored(self):
        """Only the horizontal center decides centering."""
        box = BoundingBox(min_x=0.5, min_y=0.9, width=0.0, height=0.1)

        assert is_centered(box, MotionConfig())


class TestComputeMotion:
    """Filter update and classification for one interval."""

    def test_still_centered_box(self):
        """An unchanged centered box is settled."""
        motion_filter = MovingAverageFilter()

        check = compute_motion(_box(0.5), _box(0.5), 0.1, motion_filter, MotionConfig())

        assert check.magnitude == 0.0
        assert check.not_moving
        assert check.centered
        assert motion_filter.max_count == 15

    def test_sudden_jump(self):
        """A jump pushes the average over the threshold."""
        motion_filter = MovingAverageFilter()

        check = compute_motion(_box(0.9), _box(0.5), 0.1, motion_filter, MotionConfig())

        assert check.magnitude >= 8.0 - 1e-9
        assert not check.not_moving
        assert not check.centered

    def test_magnitude_normalized_per_second(self):
        """The raw change is divided by the elapsed seconds."""
        slow = compute_motion(_box(0.625), _box(0.5), 0.5, MovingAverageFilter(), MotionConfig())
        fast = compute_motion(_box(0.625), _box(0.5), 0.125, MovingAverageFilter(), MotionConfig())

        assert slow.magnitude == pytest.approx(0.5)
        assert fast.magnitude == pytest.approx(2.0)

    def test_sample_appended_before_resize(self):
        """The new sample survives a shrink to capacity 1."""
        motion_filter = MovingAverageFilter(max_count=10)
        for _ in range(5):
            motion_filter.append(0.0)

        check = compute_motion(_box(0.625), _box(0.5), 2.0, motion_filter, MotionConfig())

        assert motion_filter.max_count == 1
        assert motion_filter.values() == [pytest.approx(0.125)]
        assert check.smoothed_magnitude == pytest.approx(0.125)
        assert not check.not_moving

    def test_rejects_non_positive_interval(self):
        """A zero interval is a caller error."""
        with pytest.raises(ValueError):
            compute_motion(_box(0.5), _box(0.5), 0.0, MovingAverageFilter(), MotionConfig())
