"""Weighted box-change magnitude and settle classification."""

from __future__ import annotations

import math
from dataclasses import dataclass

from contracts import BoundingBox
from track.smoothing import MovingAverageFilter

# Float noise only; a few thousand ulps of the window ratio
_RATIO_REL_TOL = 1e-12


@dataclass(frozen=True)
class MotionConfig:
    weight_x: float = 2.0
    weight_y: float = 1.0
    weight_width: float = 2.0
    weight_height: float = 1.0
    window_s: float = 1.5
    threshold: float = 0.1  # smoothed magnitude, per second
    center_min: float = 0.35
    center_max: float = 0.65


@dataclass(frozen=True)
class MotionCheck:
    not_moving: bool
    centered: bool
    magnitude: float
    smoothed_magnitude: float


def raw_change(current: BoundingBox, previous: BoundingBox, config: MotionConfig) -> float:
    """Weighted sum of center and size changes between two boxes.

    Horizontal position and width carry twice the weight of vertical position
    and height with the default config.
    """
    delta_x = abs(current.mid_x - previous.mid_x)
    delta_y = abs(current.mid_y - previous.mid_y)
    delta_width = abs(current.width - previous.width)
    delta_height = abs(current.height - previous.height)
    return (
        delta_x * config.weight_x
        + delta_y * config.weight_y
        + delta_width * config.weight_width
        + delta_height * config.weight_height
    )


def window_capacity(elapsed: float, window_s: float = 1.5) -> int:
    """Number of samples spanning ``window_s`` at the current frame interval.

    This is ``floor(window_s / elapsed)``, except that a ratio within float
    rounding of an integer counts as that integer (``1.5 / (0.1 + 0.2)`` is 5).
    """
    ratio = window_s / elapsed
    nearest = round(ratio)
    if math.isclose(ratio, nearest, rel_tol=_RATIO_REL_TOL):
        return max(int(nearest), 1)
    return max(int(math.floor(ratio)), 1)


def is_centered(box: BoundingBox, config: MotionConfig) -> bool:
    # Strict bounds, horizontal band only
    return config.center_min < box.mid_x < config.center_max


def compute_motion(
    current: BoundingBox,
    previous: BoundingBox,
    elapsed: float,
    motion_filter: MovingAverageFilter,
    config: MotionConfig,
) -> MotionCheck:
    """Feed one per-second magnitude into the filter and classify the target.

    Args:
        current: Newest target box
        previous: Last known target box
        elapsed: Seconds between the two observations, must be positive
        motion_filter: Tracker-owned smoothing window (mutated)
        config: Weights, window length, threshold and center band

    Returns:
        MotionCheck with the settle flags and the raw/smoothed magnitudes
    """
    if elapsed <= 0:
        raise ValueError(f"elapsed must be positive, got {elapsed}")

    magnitude = raw_change(current, previous, config) / elapsed
    motion_filter.append(magnitude)
    motion_filter.set_capacity(window_capacity(elapsed, config.window_s))

    smoothed = motion_filter.average()
    return MotionCheck(
        not_moving=smoothed < config.threshold,
        centered=is_centered(current, config),
        magnitude=magnitude,
        smoothed_magnitude=smoothed,
    )
