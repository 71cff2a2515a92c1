"""Configuration validation using JSON Schema."""

from __future__ import annotations

from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["camera", "detector", "tracker"],
    "properties": {
        "camera": {
            "type": "object",
            "required": ["fps"],
            "properties": {
                "source": {"type": "string", "default": "0"},
                "width": {"type": "integer", "minimum": 160, "maximum": 3840, "default": 1920},
                "height": {"type": "integer", "minimum": 120, "maximum": 2160, "default": 1080},
                "fps": {"type": "integer", "minimum": 1, "maximum": 240},
            },
        },
        "detector": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"type": "string", "enum": ["ml", "simulated"]},
                "model_path": {"type": ["string", "null"], "default": None},
                "model_input_size": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 128, "maximum": 1280},
                    "minItems": 2,
                    "maxItems": 2,
                    "default": [640, 640],
                },
                "model_format": {"type": "string", "enum": ["yolo_v5", "yolo_v8"], "default": "yolo_v5"},
                "conf_threshold": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.25},
                "nms_threshold": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.45},
                "target_label": {"type": "string", "minLength": 1, "default": "person"},
            },
        },
        "tracker": {
            "type": "object",
            "properties": {
                "window_s": {"type": "number", "exclusiveMinimum": 0, "maximum": 60, "default": 1.5},
                "threshold": {"type": "number", "minimum": 0, "default": 0.1},
                "center_min": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.35},
                "center_max": {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": 0.65},
                "weights": {
                    "type": "object",
                    "properties": {
                        "x": {"type": "number", "minimum": 0, "default": 2.0},
                        "y": {"type": "number", "minimum": 0, "default": 1.0},
                        "width": {"type": "number", "minimum": 0, "default": 2.0},
                        "height": {"type": "number", "minimum": 0, "default": 1.0},
                    },
                    "default": {},
                },
            },
        },
        "pipeline": {
            "type": "object",
            "properties": {
                "drop_log_interval_s": {"type": "number", "minimum": 0, "default": 5.0},
                "slow_inference_ms": {"type": "number", "minimum": 1, "default": 100.0},
            },
            "default": {},
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
                    "default": "INFO",
                },
                "log_dir": {"type": ["string", "null"], "default": None},
            },
            "default": {},
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    default = subschema["default"]
                    instance.setdefault(prop, dict(default) if isinstance(default, dict) else default)

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (mutated with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.debug("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["validate_config", "CONFIG_SCHEMA"]
