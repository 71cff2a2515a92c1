"""Detector interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from contracts import Detection, Frame


class Detector(ABC):
    @abstractmethod
    def detect(self, frame: Frame) -> List[Detection]:
        """Run the model on a frame and return labeled, normalized boxes."""
