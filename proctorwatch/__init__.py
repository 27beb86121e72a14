"""
ProctorWatch - Webcam Proctoring Monitor

Samples webcam frames at a fixed rate, runs YOLO object detection and pose
estimation on each sampled frame, and raises suspicious-activity events
(multiple faces, phone/book/laptop in view, gaze diverted, no person) to a
handler, either immediately or in periodic batches.

Usage:
    from proctorwatch import ProctorMonitor, WebcamSource, EventLogger

    source = WebcamSource(0)
    monitor = await ProctorMonitor.create(
        source,
        EventLogger(),
        {"fps": 2, "queue_events": True, "queue_cool_down_period": 5},
    )
    ...
    monitor.stop()
"""

__version__ = "0.1.0"

from proctorwatch.cfg import MonitorConfig, Settings, get_settings
from proctorwatch.engine.results import Detection, Landmark, PoseEstimate, Event, EventBatch
from proctorwatch.utils import (
    DetectionType,
    EventLogger,
    ConfigurationError,
    FpsRangeError,
    GazeSensitivityRangeError,
    ImageFormatError,
    MissingParameterError,
)


# Service, camera and model components (lazy loaded when accessed)
def __getattr__(name: str):
    """Lazy load the monitor, webcam and model wrappers."""
    if name == "ProctorMonitor":
        from proctorwatch.service.monitor import ProctorMonitor
        return ProctorMonitor
    elif name == "WebcamSource":
        from proctorwatch.data.frame_source import WebcamSource
        return WebcamSource
    elif name == "ObjectDetector":
        from proctorwatch.models.detector import ObjectDetector
        return ObjectDetector
    elif name == "PoseEstimator":
        from proctorwatch.models.pose import PoseEstimator
        return PoseEstimator
    raise AttributeError(f"module 'proctorwatch' has no attribute '{name}'")


# Public API
__all__ = [
    # Monitor
    "ProctorMonitor",
    "WebcamSource",
    "ObjectDetector",
    "PoseEstimator",
    # Configs
    "MonitorConfig",
    "Settings",
    "get_settings",
    # Results
    "Detection",
    "Landmark",
    "PoseEstimate",
    "Event",
    "EventBatch",
    "DetectionType",
    "EventLogger",
    # Errors
    "ConfigurationError",
    "FpsRangeError",
    "GazeSensitivityRangeError",
    "ImageFormatError",
    "MissingParameterError",
    # Version
    "__version__",
]
