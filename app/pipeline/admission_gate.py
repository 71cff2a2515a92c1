"""Single-flight admission of camera frames into the detector."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

from contracts import Frame
from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GateStats:
    offered: int
    admitted: int
    dropped: int
    in_flight: bool


class AdmissionToken:
    """Capability handed out for an admitted frame.

    ``complete()`` releases the gate and may be called from any thread.
    Only the first call has an effect, so a token can never release the
    gate twice. Usable as a context manager.
    """

    def __init__(self, gate: "FrameAdmissionGate", frame_index: int) -> None:
        self._gate = gate
        self.frame_index = frame_index
        self._lock = threading.Lock()
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    def complete(self) -> None:
        with self._lock:
            if self._completed:
                return
            self._completed = True
        self._gate._release(self)

    def __enter__(self) -> "AdmissionToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.complete()


class FrameAdmissionGate:
    """Admit at most one frame for inference at a time; drop the rest.

    Dropped frames are discarded, never queued. There is no timeout on an
    admitted frame: until its token completes, every offer is dropped.
    """

    def __init__(self, drop_log_interval_s: float = 5.0) -> None:
        # Semaphore, not Lock: admission and completion run on different threads
        self._slot = threading.Semaphore(1)
        self._stats_lock = threading.Lock()
        self._in_flight = False
        self._offered = 0
        self._admitted = 0
        self._dropped = 0
        self._drop_log_interval_s = drop_log_interval_s
        self._last_drop_log_time = 0.0

    def offer(self, frame: Frame) -> Optional[AdmissionToken]:
        """Offer a frame for inference.

        Args:
            frame: Captured frame; not copied or retained

        Returns:
            AdmissionToken when admitted, None when the frame is dropped
        """
        admitted = self._slot.acquire(blocking=False)

        should_log = False
        with self._stats_lock:
            self._offered += 1
            if admitted:
                self._admitted += 1
                self._in_flight = True
            else:
                self._dropped += 1
                drop_count = self._dropped
                current_time = time.monotonic()
                if current_time - self._last_drop_log_time > self._drop_log_interval_s:
                    should_log = True
                    self._last_drop_log_time = current_time

        if admitted:
            return AdmissionToken(self, frame.frame_index)

        # Log outside the stats lock
        if should_log:
            logger.info(
                f"Inference busy, dropped frame {frame.frame_index} "
                f"({drop_count} frames dropped total)"
            )
        return None

    def stats(self) -> GateStats:
        with self._stats_lock:
            return GateStats(
                offered=self._offered,
                admitted=self._admitted,
                dropped=self._dropped,
                in_flight=self._in_flight,
            )

    @property
    def in_flight(self) -> bool:
        with self._stats_lock:
            return self._in_flight

    def _release(self, token: AdmissionToken) -> None:
        with self._stats_lock:
            self._in_flight = False
        self._slot.release()
        logger.trace(f"Gate released by frame {token.frame_index}")
