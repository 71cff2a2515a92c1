"""Motion stability tracker for a single detection target."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from contracts import BoundingBox, DetectionResult, MotionStatus
from log_config.logger import get_logger
from track.motion import MotionConfig, compute_motion
from track.smoothing import MovingAverageFilter

logger = get_logger(__name__)


@dataclass
class TrackerState:
    last_location: Optional[BoundingBox] = None
    last_timestamp: Optional[float] = None
    filter: MovingAverageFilter = field(default_factory=MovingAverageFilter)

    @property
    def has_reference(self) -> bool:
        return self.last_location is not None and self.last_timestamp is not None


class MotionTracker:
    """Classify the tracked target as moving or settled near the frame center.

    Every observation is compared with the single previous sighting only.
    Not thread safe: callers must serialize ``update`` (the detection
    pipeline does so through the admission gate).
    """

    def __init__(
        self,
        config: Optional[MotionConfig] = None,
        state: Optional[TrackerState] = None,
    ) -> None:
        self.config = config or MotionConfig()
        self._state = state or TrackerState()

    @property
    def state(self) -> TrackerState:
        return self._state

    def update(self, result: DetectionResult, now: float) -> Optional[MotionStatus]:
        """Update tracker with a detection result (target may be missing).

        Args:
            result: Detector output reduced to the first target match
            now: Observation time in seconds

        Returns:
            MotionStatus for the target, or None when the frame had no target
        """
        box = result.box
        if box is None:
            # Missed detection: keep the motion history as-is
            return None

        state = self._state
        moving = True
        magnitude: Optional[float] = None
        smoothed: Optional[float] = None

        if state.has_reference:
            elapsed = now - state.last_timestamp
            if elapsed <= 0:
                logger.debug(f"Non-positive interval between observations ({elapsed:.6f}s), treating target as moving")
            else:
                check = compute_motion(
                    current=box,
                    previous=state.last_location,
                    elapsed=elapsed,
                    motion_filter=state.filter,
                    config=self.config,
                )
                moving = not (check.not_moving and check.centered)
                magnitude = check.magnitude
                smoothed = check.smoothed_magnitude

        state.last_location = box
        state.last_timestamp = now

        return MotionStatus(
            box=box,
            moving=moving,
            timestamp=now,
            magnitude=magnitude,
            smoothed_magnitude=smoothed,
        )

    def reset(self) -> None:
        self._state.last_location = None
        self._state.last_timestamp = None
        self._state.filter.clear()
