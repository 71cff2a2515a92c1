#!/usr/bin/env python
"""SettleTrack launcher - runs the live detection pipeline."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from app.pipeline.admission_gate import FrameAdmissionGate
from app.pipeline.detection_pipeline import DetectionPipeline
from capture import CameraDevice, OpenCVCamera, SimulatedCamera
from configs.settings import DEFAULT_CONFIG_PATH, AppConfig, load_config
from detect import Detector, MlDetector, WalkingPersonDetector
from exceptions import SettleTrackError
from log_config.logger import configure_logging, get_logger
from track.tracker import MotionTracker
from ui.render import NullRenderer, OpenCVWindowRenderer, Renderer

logger = get_logger(__name__)


def build_camera(config: AppConfig, simulate: bool) -> CameraDevice:
    camera: CameraDevice = SimulatedCamera() if simulate else OpenCVCamera()
    camera.open(config.camera.source)
    camera.set_mode(config.camera.width, config.camera.height, config.camera.fps)
    return camera


def build_detector(config: AppConfig, simulate: bool) -> Detector:
    if simulate or config.detector.type == "simulated":
        return WalkingPersonDetector()
    return MlDetector(
        model_path=config.detector.model_path,
        input_size=config.detector.model_input_size,
        conf_threshold=config.detector.conf_threshold,
        nms_threshold=config.detector.nms_threshold,
        output_format=config.detector.model_format,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Flag whether the detected person is moving or has settled at the frame center."
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML configuration file")
    parser.add_argument("--camera", help="Camera index or video path (overrides config)")
    parser.add_argument("--model", help="YOLO ONNX model path (overrides config)")
    parser.add_argument("--simulate", action="store_true", help="Use the simulated camera and detector")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after this many captured frames")
    parser.add_argument("--headless", action="store_true", help="Do not open a display window")
    parser.add_argument("--log-level", default=None, help="Console log level (overrides config)")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except SettleTrackError as e:
        logger.error(f"Cannot start: {e}")
        return 2

    if args.camera is not None:
        config = replace(config, camera=replace(config.camera, source=args.camera))
    if args.model is not None:
        config = replace(config, detector=replace(config.detector, type="ml", model_path=args.model))
    configure_logging(args.log_level or config.logging.level, config.logging.log_dir)

    try:
        camera = build_camera(config, args.simulate)
        detector = build_detector(config, args.simulate)
    except SettleTrackError as e:
        logger.error(f"Cannot start: {e}")
        return 1

    window: Optional[OpenCVWindowRenderer] = None
    renderer: Renderer
    if args.headless:
        renderer = NullRenderer()
    else:
        window = OpenCVWindowRenderer()
        renderer = window

    pipeline = DetectionPipeline(
        camera=camera,
        detector=detector,
        tracker=MotionTracker(config.tracker),
        gate=FrameAdmissionGate(drop_log_interval_s=config.pipeline.drop_log_interval_s),
        renderer=renderer,
        target_label=config.detector.target_label,
        slow_inference_ms=config.pipeline.slow_inference_ms,
    )

    last_moving: list[Optional[bool]] = [None]

    def on_status(frame, status) -> None:
        if status is not None and status.moving != last_moving[0]:
            last_moving[0] = status.moving
            logger.info(f"Target {'moving' if status.moving else 'settled'} at frame {frame.frame_index}")

    pipeline.set_status_callback(on_status)
    pipeline.start(max_frames=args.max_frames)
    try:
        while pipeline.is_running():
            if window is not None:
                key = window.pump(wait_ms=15)
                if key in (ord("q"), 27):
                    break
            else:
                pipeline.wait(timeout=0.5)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        capture_stopped = pipeline.stop()
        renderer.close()
        if capture_stopped:
            camera.close()
        else:
            logger.warning("Leaving camera open: capture thread is still reading from it")

    stats = pipeline.stats()
    camera_stats = camera.get_stats()
    print(f"Frames offered: {stats.offered}, admitted: {stats.admitted}, dropped: {stats.dropped}")
    print(
        f"Camera frames: {camera_stats.frames}, read failures: {camera_stats.dropped_frames}, "
        f"avg fps: {camera_stats.fps_avg:.1f}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
