"""Configuration loading for SettleTrack."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from configs.validator import validate_config
from exceptions import ConfigError, InvalidConfigError
from log_config.logger import get_logger
from track.motion import MotionConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default.yaml"


@dataclass(frozen=True)
class CameraConfig:
    source: str
    width: int
    height: int
    fps: int


@dataclass(frozen=True)
class DetectorConfig:
    type: str
    model_path: Optional[str]
    model_input_size: Tuple[int, int]
    model_format: str
    conf_threshold: float
    nms_threshold: float
    target_label: str


@dataclass(frozen=True)
class PipelineConfig:
    drop_log_interval_s: float
    slow_inference_ms: float


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    log_dir: Optional[str]


@dataclass(frozen=True)
class AppConfig:
    camera: CameraConfig
    detector: DetectorConfig
    tracker: MotionConfig
    pipeline: PipelineConfig
    logging: LoggingConfig


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    try:
        logger.info(f"Loading configuration from {path}")
        if not path.exists():
            raise InvalidConfigError(f"Configuration file not found: {path}")
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    if not isinstance(data, dict):
        raise InvalidConfigError(f"Configuration root must be a mapping: {path}")
    return config_from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> AppConfig:
    """Validate a raw configuration mapping and build the typed config.

    Raises:
        ConfigValidationError: If the mapping fails schema validation
        InvalidConfigError: If values are inconsistent
    """
    # Validate against JSON Schema (fills defaults in place)
    validate_config(data)

    try:
        camera = CameraConfig(
            source=str(data["camera"]["source"]),
            width=data["camera"]["width"],
            height=data["camera"]["height"],
            fps=data["camera"]["fps"],
        )
        detector_data = data["detector"]
        detector = DetectorConfig(
            type=detector_data["type"],
            model_path=detector_data.get("model_path"),
            model_input_size=tuple(detector_data["model_input_size"]),
            model_format=detector_data["model_format"],
            conf_threshold=float(detector_data["conf_threshold"]),
            nms_threshold=float(detector_data["nms_threshold"]),
            target_label=detector_data["target_label"],
        )
        tracker_data = data["tracker"]
        weights = tracker_data["weights"]
        tracker = MotionConfig(
            weight_x=float(weights["x"]),
            weight_y=float(weights["y"]),
            weight_width=float(weights["width"]),
            weight_height=float(weights["height"]),
            window_s=float(tracker_data["window_s"]),
            threshold=float(tracker_data["threshold"]),
            center_min=float(tracker_data["center_min"]),
            center_max=float(tracker_data["center_max"]),
        )
        pipeline = PipelineConfig(**data["pipeline"])
        logging_config = LoggingConfig(**data["logging"])
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")

    if tracker.center_min >= tracker.center_max:
        raise InvalidConfigError(
            f"tracker.center_min ({tracker.center_min}) must be below tracker.center_max ({tracker.center_max})"
        )
    if detector.type == "ml" and not detector.model_path:
        logger.warning("ML detector configured without model_path; no detections will be produced")

    config = AppConfig(
        camera=camera,
        detector=detector,
        tracker=tracker,
        pipeline=pipeline,
        logging=logging_config,
    )
    logger.info(
        f"Configuration loaded successfully: {config.detector.type} detector, "
        f"{config.camera.width}x{config.camera.height}@{config.camera.fps}fps, "
        f"target '{config.detector.target_label}'"
    )
    return config


__all__ = [
    "AppConfig",
    "CameraConfig",
    "ConfigError",
    "DetectorConfig",
    "LoggingConfig",
    "PipelineConfig",
    "config_from_dict",
    "load_config",
]
