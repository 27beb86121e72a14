"""
ProctorWatch Utilities Module

Logging, event constants and exceptions.
"""

from proctorwatch.utils.logger import get_logger, setup_logging, EventLogger
from proctorwatch.utils.alerts import DetectionType, GazeDirection, get_event_message
from proctorwatch.utils.errors import (
    ProctorWatchError,
    ConfigurationError,
    FpsRangeError,
    GazeSensitivityRangeError,
    ImageFormatError,
    MissingParameterError,
    StrokeColorError,
    CameraUnavailableError,
    ModelLoadError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "EventLogger",
    "DetectionType",
    "GazeDirection",
    "get_event_message",
    # Errors
    "ProctorWatchError",
    "ConfigurationError",
    "FpsRangeError",
    "GazeSensitivityRangeError",
    "ImageFormatError",
    "MissingParameterError",
    "StrokeColorError",
    "CameraUnavailableError",
    "ModelLoadError",
]
