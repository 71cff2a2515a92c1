"""Scripted detector for simulated pipeline runs and tests."""

from __future__ import annotations

import math
import threading
from typing import List, Optional, Sequence

from contracts import BoundingBox, Detection, Frame

from .detector import Detector


class ScriptedDetector(Detector):
    """Return a predefined detection list per call.

    After the script runs out the last entry is repeated, or the script
    starts over when ``loop`` is set.
    """

    def __init__(self, script: Sequence[Sequence[Detection]], loop: bool = False) -> None:
        if not script:
            raise ValueError("ScriptedDetector needs at least one scripted entry")
        self._script: List[List[Detection]] = [list(entry) for entry in script]
        self._loop = loop
        self._index = 0
        self._lock = threading.Lock()
        self.calls = 0

    def detect(self, frame: Frame) -> List[Detection]:
        with self._lock:
            self.calls += 1
            if self._index >= len(self._script):
                self._index = 0 if self._loop else len(self._script) - 1
            entry = self._script[self._index]
            self._index += 1
        return list(entry)


class WalkingPersonDetector(Detector):
    """Synthetic person that walks in from the left and stops at the center.

    Position is a function of the frame timestamp so the output is independent
    of how many frames the gate drops.
    """

    def __init__(
        self,
        walk_duration_s: float = 3.0,
        start_x: float = 0.1,
        stop_x: float = 0.5,
        size: float = 0.3,
        confidence: float = 0.9,
    ) -> None:
        self.walk_duration_s = walk_duration_s
        self.start_x = start_x
        self.stop_x = stop_x
        self.size = size
        self.confidence = confidence
        self._t0: Optional[float] = None

    def detect(self, frame: Frame) -> List[Detection]:
        if self._t0 is None:
            self._t0 = frame.t_capture
        progress = min((frame.t_capture - self._t0) / self.walk_duration_s, 1.0)
        mid_x = self.start_x + (self.stop_x - self.start_x) * progress
        # Slight bob while walking
        mid_y = 0.5 + (0.02 * math.sin(progress * 6 * math.pi) if progress < 1.0 else 0.0)
        box = BoundingBox.from_center(mid_x, mid_y, self.size * 0.5, self.size)
        return [Detection(label="person", confidence=self.confidence, box=box)]
