"""Shared data contracts for target motion tracking."""

from .types import (
    BoundingBox,
    Detection,
    DetectionResult,
    Frame,
    MotionStatus,
    select_target,
)

__all__ = [
    "BoundingBox",
    "Detection",
    "DetectionResult",
    "Frame",
    "MotionStatus",
    "select_target",
]
