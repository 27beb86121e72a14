"""
ProctorWatch Engine - Results Classes

Data classes for detection service output and the events raised from it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from proctorwatch.utils.alerts import DetectionType

# COCO-17 keypoint order shared by the pose backends
KEYPOINT_NAMES = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

BATCH_TYPE = "QUEUE_EVENTS"


class Box(NamedTuple):
    """Bounding box in frame pixels, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "Box":
        return cls(x1, y1, x2 - x1, y2 - y1)


@dataclass(frozen=True)
class Detection:
    """
    One labelled box from the object detector.

    Attributes:
        label: Detector class name (e.g. "person", "cell phone")
        box: Bounding box in frame pixels
        confidence: Detection confidence 0-1
    """
    label: str
    box: Box
    confidence: float = 1.0

    def to_dict(self) -> dict:
        return {
            "class": self.label,
            "bbox": list(self.box),
            "score": self.confidence,
        }


@dataclass(frozen=True)
class Landmark:
    """One named body keypoint from the pose estimator."""
    name: str
    x: float
    y: float
    score: float

    def to_dict(self) -> dict:
        return {
            "part": self.name,
            "position": {"x": self.x, "y": self.y},
            "score": self.score,
        }


@dataclass
class PoseEstimate:
    """
    Keypoints for a single person.

    Attributes:
        landmarks: Keypoints in COCO-17 order
        score: Overall pose confidence
    """
    landmarks: list[Landmark] = field(default_factory=list)
    score: float = 0.0

    def score_of(self, index: int) -> float:
        """Score of the landmark at ``index``; 0.0 when missing."""
        if index < len(self.landmarks):
            return self.landmarks[index].score
        return 0.0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "keypoints": [lm.to_dict() for lm in self.landmarks],
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Event:
    """
    A suspicious-activity event delivered to the handler.

    Attributes:
        detection_type: What was detected
        timestamp: Epoch milliseconds at detection time
        screenshot: Annotated frame as a data URL
        data: Free-form payload, always carries a ``message``
    """
    detection_type: DetectionType
    screenshot: str
    data: dict = field(default_factory=dict)
    timestamp: int = field(default_factory=_now_ms)

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    def to_dict(self) -> dict:
        return {
            "detectionType": self.detection_type.value,
            "timestamp": self.timestamp,
            "screenShot": self.screenshot,
            "data": dict(self.data),
        }


@dataclass(frozen=True)
class EventBatch:
    """Events queued since the last flush, in production order."""
    events: tuple[Event, ...] = ()
    type: str = BATCH_TYPE

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "events": [event.to_dict() for event in self.events],
        }


@dataclass
class FrameResults:
    """
    Joined output of both detection services for one frame.

    Attributes:
        detections: Object detector output, model order
        poses: Pose estimator output; only the first pose is classified
        speed: Inference timing in milliseconds
    """
    detections: list[Detection] = field(default_factory=list)
    poses: list[PoseEstimate] = field(default_factory=list)
    speed: dict = field(default_factory=lambda: {"inference": 0.0, "classify": 0.0})

    @property
    def pose(self) -> Optional[PoseEstimate]:
        return self.poses[0] if self.poses else None

    @property
    def total_time_ms(self) -> float:
        return sum(self.speed.values())
