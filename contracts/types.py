"""Core data contracts for capture, detection, and motion tracking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class Frame:
    camera_id: str
    frame_index: int
    t_capture: float  # seconds, time.monotonic()
    image: Any
    width: int
    height: int


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in normalized [0, 1] coordinates, origin top-left."""

    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def mid_x(self) -> float:
        return self.min_x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.min_y + self.height / 2.0

    @classmethod
    def from_center(cls, mid_x: float, mid_y: float, width: float, height: float) -> "BoundingBox":
        return cls(
            min_x=mid_x - width / 2.0,
            min_y=mid_y - height / 2.0,
            width=width,
            height=height,
        )


@dataclass(frozen=True)
class Detection:
    label: str
    confidence: float
    box: BoundingBox


@dataclass(frozen=True)
class DetectionResult:
    """Detector output reduced to the single tracked target (or none)."""

    target: Optional[Detection] = None

    @property
    def has_target(self) -> bool:
        return self.target is not None

    @property
    def box(self) -> Optional[BoundingBox]:
        return self.target.box if self.target is not None else None

    @classmethod
    def from_detections(
        cls, detections: Iterable[Detection], target_label: str = "person"
    ) -> "DetectionResult":
        """Keep the first detection whose label matches; ignore the rest."""
        return cls(target=select_target(detections, target_label))


@dataclass(frozen=True)
class MotionStatus:
    box: BoundingBox
    moving: bool
    timestamp: float
    magnitude: Optional[float] = None
    smoothed_magnitude: Optional[float] = None


def select_target(detections: Iterable[Detection], target_label: str = "person") -> Optional[Detection]:
    """First detection whose label matches ``target_label``, or None."""
    for detection in detections:
        if detection.label == target_label:
            return detection
    return None
