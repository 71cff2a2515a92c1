"""Detection pipeline: camera -> admission gate -> detector -> tracker -> renderer."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from app.pipeline.admission_gate import AdmissionToken, FrameAdmissionGate, GateStats
from capture.camera_device import CameraDevice
from contracts import Detection, DetectionResult, Frame, MotionStatus
from detect.detector import Detector
from exceptions import CameraError
from log_config.logger import get_logger, log_performance
from track.tracker import MotionTracker
from ui.render import Renderer

logger = get_logger(__name__)


class DetectionPipeline:
    """Runs single-flight inference on live frames and classifies the target.

    The capture thread offers every frame to the gate. Admitted frames run on
    a one-worker executor, which is also the only caller of the tracker, so
    tracker updates are strictly serialized.
    """

    def __init__(
        self,
        camera: CameraDevice,
        detector: Detector,
        tracker: Optional[MotionTracker] = None,
        gate: Optional[FrameAdmissionGate] = None,
        renderer: Optional[Renderer] = None,
        target_label: str = "person",
        slow_inference_ms: float = 100.0,
    ) -> None:
        self._camera = camera
        self._detector = detector
        self._tracker = tracker or MotionTracker()
        self._gate = gate or FrameAdmissionGate()
        self._renderer = renderer
        self._target_label = target_label
        self._slow_inference_ms = slow_inference_ms

        self._running = False
        self._started = False
        self._capture_thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._frames_captured = 0
        self._max_frames: Optional[int] = None
        self._finished = threading.Event()

        # Callbacks
        self._status_callback: Optional[Callable[[Frame, Optional[MotionStatus]], None]] = None
        self._error_callback: Optional[Callable[[str, Exception], None]] = None

        # Error tracking
        self._detection_errors = 0
        self._last_error_log_time = 0.0
        self._max_consecutive_errors = 10

        self._latest_status: Optional[MotionStatus] = None
        self._status_lock = threading.Lock()

    @property
    def tracker(self) -> MotionTracker:
        return self._tracker

    @property
    def gate(self) -> FrameAdmissionGate:
        return self._gate

    @property
    def latest_status(self) -> Optional[MotionStatus]:
        """Last classified target, kept across frames without a target."""
        with self._status_lock:
            return self._latest_status

    def set_status_callback(self, callback: Callable[[Frame, Optional[MotionStatus]], None]) -> None:
        """Set callback receiving (frame, status) after every inference.

        Args:
            callback: Called on the inference thread; status is None when no target was found
        """
        self._status_callback = callback

    def set_error_callback(self, callback: Callable[[str, Exception], None]) -> None:
        """Set callback for error notification.

        Args:
            callback: Function to handle errors, receives (source, exception)
        """
        self._error_callback = callback

    def start(self, max_frames: Optional[int] = None) -> None:
        """Start the capture thread and the inference worker.

        Args:
            max_frames: Stop capturing after this many frames (None runs until stop())

        Raises:
            RuntimeError: If a capture thread from a previous run is still blocked
        """
        if self._running:
            return
        if self.capture_alive():
            raise RuntimeError("Previous capture thread is still blocked in read_frame().")

        self._max_frames = max_frames
        self._frames_captured = 0
        self._finished.clear()
        self._started = True
        self._running = True
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inference")
        self._capture_thread = threading.Thread(target=self._capture_loop, name="capture", daemon=True)
        self._capture_thread.start()
        logger.info("Detection pipeline started")

    def stop(self, timeout: float = 2.0) -> bool:
        """Stop capturing and wait for the in-flight inference to finish.

        Args:
            timeout: Seconds to wait for the capture thread

        Returns:
            True if the capture thread exited. False means it is still blocked
            in ``read_frame()``, and the camera must not be closed under it.
        """
        self._running = False
        capture_stopped = True
        if self._capture_thread is not None:
            self._capture_thread.join(timeout=timeout)
            if self._capture_thread.is_alive():
                capture_stopped = False
                logger.warning(
                    f"Capture thread still blocked in read_frame() after {timeout:.1f}s; "
                    f"its next frame will be discarded"
                )
            else:
                self._capture_thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._finished.set()
        logger.info(f"Detection pipeline stopped: {self.stats()}")
        return capture_stopped

    def capture_alive(self) -> bool:
        """True while the capture thread is still running, even after stop()."""
        thread = self._capture_thread
        return thread is not None and thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the capture loop ends (max_frames reached or camera failure)."""
        return self._finished.wait(timeout)

    def is_running(self) -> bool:
        return self._running

    def stats(self) -> GateStats:
        return self._gate.stats()

    def handle_frame(self, frame: Frame) -> bool:
        """Offer a frame to the gate and schedule inference if admitted.

        Frames arriving after stop() are discarded.

        Returns:
            True if the frame was admitted, False if it was dropped

        Raises:
            RuntimeError: If the pipeline was never started
        """
        token = self._gate.offer(frame)
        if token is None:
            return False
        executor = self._executor
        if executor is None or not self._running:
            token.complete()
            if not self._started:
                raise RuntimeError("Pipeline not started.")
            logger.debug(f"Discarding frame {frame.frame_index}: pipeline stopped")
            return False
        try:
            future: Future = executor.submit(self._run_inference, frame, token)
        except RuntimeError:
            # Executor shut down between offer and submit
            token.complete()
            logger.debug(f"Discarding frame {frame.frame_index}: pipeline stopped")
            return False
        future.add_done_callback(self._log_unexpected_failure)
        return True

    def process_frame(self, frame: Frame) -> Optional[MotionStatus]:
        """Run one frame synchronously on the calling thread.

        Goes through the gate like a live frame. Returns None when the frame
        was dropped or contained no target.
        """
        token = self._gate.offer(frame)
        if token is None:
            return None
        return self._run_inference(frame, token)

    def _run_inference(self, frame: Frame, token: AdmissionToken) -> Optional[MotionStatus]:
        with token:
            detections = self._detect_frame(frame)
            result = DetectionResult.from_detections(detections, self._target_label)
            status = self._tracker.update(result, frame.t_capture)
            if status is not None:
                with self._status_lock:
                    self._latest_status = status
            self._publish(frame, status)
            return status

    def _detect_frame(self, frame: Frame) -> List[Detection]:
        """Run the detector, turning failures into an empty result.

        Errors are counted per consecutive run and logged at most once per
        5 seconds. The error callback fires once the count reaches the limit.
        """
        start = time.perf_counter()
        try:
            detections = self._detector.detect(frame)
        except Exception as e:
            should_log = False
            self._detection_errors += 1
            error_count = self._detection_errors
            current_time = time.monotonic()
            if current_time - self._last_error_log_time > 5.0:
                should_log = True
                self._last_error_log_time = current_time

            if should_log:
                logger.opt(exception=e).error(
                    f"Detection failed on frame {frame.frame_index} (error #{error_count}): "
                    f"{e.__class__.__name__}: {e}"
                )
            if error_count == self._max_consecutive_errors:
                logger.critical(
                    f"Detection failing consistently ({error_count} consecutive errors). "
                    f"Detection may be broken."
                )
                self._notify_error("detection", e)
            return []

        if self._detection_errors > 0:
            logger.info(f"Detection recovered after {self._detection_errors} errors")
            self._detection_errors = 0

        log_performance(
            f"inference frame {frame.frame_index}",
            (time.perf_counter() - start) * 1000.0,
            threshold_ms=self._slow_inference_ms,
        )
        return detections

    def _publish(self, frame: Frame, status: Optional[MotionStatus]) -> None:
        if self._renderer is not None:
            try:
                self._renderer.render(frame, status)
            except Exception as e:
                logger.error(f"Renderer failed on frame {frame.frame_index}: {e}")
                self._notify_error("renderer", e)
        if self._status_callback is not None:
            try:
                self._status_callback(frame, status)
            except Exception as e:
                logger.error(f"Status callback failed on frame {frame.frame_index}: {e}")

    def _notify_error(self, source: str, error: Exception) -> None:
        if self._error_callback is None:
            return
        try:
            self._error_callback(source, error)
        except Exception as callback_error:
            logger.error(f"Error callback failed: {callback_error}")

    def _capture_loop(self) -> None:
        try:
            while self._running:
                if self._max_frames is not None and self._frames_captured >= self._max_frames:
                    break
                try:
                    frame = self._camera.read_frame()
                except Exception as e:
                    if not self._running:
                        # Camera closed while the read was blocked
                        logger.debug(f"Capture read ended after stop: {e.__class__.__name__}: {e}")
                        break
                    if isinstance(e, CameraError):
                        logger.error(f"Capture failed: {e}")
                    else:
                        logger.opt(exception=e).error(f"Unexpected capture failure: {e}")
                    self._notify_error("camera", e)
                    break
                self._frames_captured += 1
                self.handle_frame(frame)
        finally:
            self._running = False
            self._finished.set()
            logger.debug("Capture thread exited")

    @staticmethod
    def _log_unexpected_failure(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Inference task crashed: {error}")
