"""
ProctorWatch Engine - sampling, classification and dispatch.

- BasePredictor: Inference pipeline shared by the detection services
- FrameScheduler: Rate-limited sampling loop
- SnapshotCapturer: Annotated frame encoder
- EventClassifier: Detection and pose rules
- EventDispatcher: Immediate or batched delivery
"""

from proctorwatch.engine.predictor import BasePredictor, select_device
from proctorwatch.engine.results import (
    Box,
    Detection,
    Landmark,
    PoseEstimate,
    Event,
    EventBatch,
    FrameResults,
    KEYPOINT_NAMES,
)
from proctorwatch.engine.scheduler import FrameScheduler
from proctorwatch.engine.capture import SnapshotCapturer
from proctorwatch.engine.classifier import EventClassifier
from proctorwatch.engine.dispatcher import EventDispatcher

__all__ = [
    # Base classes
    "BasePredictor",
    "select_device",
    # Results
    "Box",
    "Detection",
    "Landmark",
    "PoseEstimate",
    "Event",
    "EventBatch",
    "FrameResults",
    "KEYPOINT_NAMES",
    # Core
    "FrameScheduler",
    "SnapshotCapturer",
    "EventClassifier",
    "EventDispatcher",
]
