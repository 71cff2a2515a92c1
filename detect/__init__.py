"""Detection module."""

from .detector import Detector
from .ml_detector import COCO_LABELS, MlDetector
from .simple_detector import ScriptedDetector, WalkingPersonDetector

__all__ = [
    "COCO_LABELS",
    "Detector",
    "MlDetector",
    "ScriptedDetector",
    "WalkingPersonDetector",
]
