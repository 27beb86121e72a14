"""
ProctorWatch Configuration Module

Pydantic-based configuration.
"""

from proctorwatch.cfg.config import (
    BaseConfig,
    MonitorConfig,
    DetectorConfig,
    PoseConfig,
    Settings,
    get_settings,
    NO_PERSON_CONFIDENCE,
    IMAGE_TYPES,
)

__all__ = [
    "BaseConfig",
    "MonitorConfig",
    "DetectorConfig",
    "PoseConfig",
    "Settings",
    "get_settings",
    "NO_PERSON_CONFIDENCE",
    "IMAGE_TYPES",
]
