"""
ProctorWatch Data Module

Frame sources for the monitor.
"""

from proctorwatch.data.frame_source import (
    FrameSource,
    StaticFrameSource,
    WebcamSource,
    has_webcam,
)

__all__ = [
    "FrameSource",
    "StaticFrameSource",
    "WebcamSource",
    "has_webcam",
]
