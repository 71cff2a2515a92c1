"""Tests for single-flight frame admission.

Validates that at most one frame is admitted until its token completes,
that completion works from another thread, and that a token can only
release the gate once.
"""

from __future__ import annotations

import threading
import time

import pytest

from app.pipeline.admission_gate import AdmissionToken, FrameAdmissionGate
from contracts import Frame


def _frame(index: int) -> Frame:
    return Frame(
        camera_id="test",
        frame_index=index,
        t_capture=index / 30.0,
        image=None,
        width=640,
        height=360,
    )


class TestAdmission:
    """Single-flight admission of offered frames."""

    def test_first_offer_admitted(self):
        """An idle gate admits the first frame."""
        gate = FrameAdmissionGate()

        token = gate.offer(_frame(1))

        assert isinstance(token, AdmissionToken)
        assert token.frame_index == 1
        assert gate.in_flight

    def test_offers_dropped_while_in_flight(self):
        """Every offer while a frame is in flight is dropped."""
        gate = FrameAdmissionGate()
        token = gate.offer(_frame(1))

        dropped = [gate.offer(_frame(i)) for i in range(2, 6)]

        assert token is not None
        assert dropped == [None] * 4
        stats = gate.stats()
        assert stats.offered == 5
        assert stats.admitted == 1
        assert stats.dropped == 4
        assert stats.in_flight

    def test_complete_reopens_gate(self):
        """Completing the token lets the next frame in."""
        gate = FrameAdmissionGate()
        gate.offer(_frame(1)).complete()

        assert not gate.in_flight
        assert gate.offer(_frame(2)) is not None

    def test_dropped_frames_are_not_deferred(self):
        """Dropped frames are gone; nothing is replayed after release."""
        gate = FrameAdmissionGate()
        token = gate.offer(_frame(1))
        gate.offer(_frame(2))

        token.complete()
        next_token = gate.offer(_frame(3))

        # Frame 2 is gone for good; frame 3 is the next one admitted
        assert next_token.frame_index == 3
        assert gate.stats().admitted == 2


class TestToken:
    """Admission token release semantics."""

    def test_double_complete_releases_once(self):
        """A second complete() on the same token does not free the gate again."""
        gate = FrameAdmissionGate()
        token = gate.offer(_frame(1))

        token.complete()
        token.complete()

        assert token.completed
        assert gate.offer(_frame(2)) is not None
        assert gate.offer(_frame(3)) is None

    def test_context_manager_completes(self):
        """Leaving the with block releases the gate."""
        gate = FrameAdmissionGate()

        with gate.offer(_frame(1)) as token:
            assert gate.offer(_frame(2)) is None

        assert token.completed
        assert gate.offer(_frame(3)) is not None

    def test_context_manager_completes_on_error(self):
        """An exception inside the with block still releases the gate."""
        gate = FrameAdmissionGate()

        with pytest.raises(RuntimeError):
            with gate.offer(_frame(1)):
                raise RuntimeError("inference failed")

        assert not gate.in_flight
        assert gate.offer(_frame(2)) is not None

    def test_complete_from_other_thread(self):
        """The token may be completed on a different thread than the offer."""
        gate = FrameAdmissionGate()
        token = gate.offer(_frame(1))

        worker = threading.Thread(target=token.complete)
        worker.start()
        worker.join(timeout=2.0)

        assert not worker.is_alive()
        assert gate.offer(_frame(2)) is not None


class TestConcurrency:
    """Gate behavior under concurrent offers."""

    def test_concurrent_offers_admit_exactly_one(self):
        """Racing offers on an idle gate admit exactly one frame."""
        gate = FrameAdmissionGate()
        thread_count = 16
        barrier = threading.Barrier(thread_count)
        tokens = []
        tokens_lock = threading.Lock()

        def offer(index: int) -> None:
            barrier.wait()
            token = gate.offer(_frame(index))
            with tokens_lock:
                tokens.append(token)

        threads = [threading.Thread(target=offer, args=(i,)) for i in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5.0)

        admitted = [token for token in tokens if token is not None]
        assert len(tokens) == thread_count
        assert len(admitted) == 1
        assert gate.stats().dropped == thread_count - 1

    def test_never_two_in_flight(self):
        """Workers that hold the token briefly never overlap."""
        gate = FrameAdmissionGate()
        active = 0
        max_active = 0
        state_lock = threading.Lock()
        stop = threading.Event()

        def producer(offset: int) -> None:
            nonlocal active, max_active
            index = offset
            while not stop.is_set():
                index += 1
                token = gate.offer(_frame(index))
                if token is None:
                    continue
                with state_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.001)
                with state_lock:
                    active -= 1
                # Complete on a different thread than the one that admitted
                releaser = threading.Thread(target=token.complete)
                releaser.start()
                releaser.join()

        producers = [threading.Thread(target=producer, args=(i * 100000,)) for i in range(4)]
        for thread in producers:
            thread.start()
        stop.wait(0.3)
        stop.set()
        for thread in producers:
            thread.join(timeout=5.0)

        stats = gate.stats()
        assert max_active == 1
        assert stats.admitted >= 1
        assert stats.admitted + stats.dropped == stats.offered
