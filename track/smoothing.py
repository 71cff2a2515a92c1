"""Sliding-window mean over recent motion magnitudes."""

from __future__ import annotations

from collections import deque
from typing import Deque, List

import numpy as np


class MovingAverageFilter:
    """Fixed-capacity FIFO window with a plain arithmetic mean.

    Capacity is mutable. Shrinking it evicts the oldest samples immediately,
    so ``len(filter) <= max_count`` holds after every call.
    """

    def __init__(self, max_count: int = 10) -> None:
        self._samples: Deque[float] = deque()
        self._max_count = max(int(max_count), 1)

    @property
    def max_count(self) -> int:
        return self._max_count

    def append(self, value: float) -> None:
        self._samples.append(float(value))
        self._evict()

    def set_capacity(self, count: int) -> None:
        self._max_count = max(int(count), 1)
        self._evict()

    def average(self) -> float:
        if not self._samples:
            return 0.0
        return float(np.mean(self._samples))

    def values(self) -> List[float]:
        """Snapshot of current samples, oldest first."""
        return list(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def _evict(self) -> None:
        while len(self._samples) > self._max_count:
            self._samples.popleft()
