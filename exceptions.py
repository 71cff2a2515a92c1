"""Custom exception classes for SettleTrack."""

from __future__ import annotations

from typing import Optional


class SettleTrackError(Exception):
    """Base exception for all SettleTrack errors."""

    pass


class CameraError(SettleTrackError):
    """Base exception for camera-related errors."""

    def __init__(self, message: str, camera_id: Optional[str] = None):
        self.camera_id = camera_id
        super().__init__(message)


class CameraConnectionError(CameraError):
    """Raised when camera connection fails or is lost."""

    pass


class CameraNotFoundError(CameraError):
    """Raised when a specified camera is not found."""

    pass


class ConfigError(SettleTrackError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)


class DetectionError(SettleTrackError):
    """Base exception for detection-related errors."""

    pass


class ModelLoadError(DetectionError):
    """Raised when the detection model fails to load."""

    pass


class ModelInferenceError(DetectionError):
    """Raised when a forward pass of the detection model fails."""

    pass
