"""
Event Classifier

Turns one frame's object detections and pose estimate into events.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from proctorwatch.cfg.config import NO_PERSON_CONFIDENCE, MonitorConfig
from proctorwatch.engine.capture import SnapshotCapturer
from proctorwatch.engine.results import Box, Detection, Event, PoseEstimate
from proctorwatch.utils.alerts import (
    OBJECT_EVENTS,
    PERSON_LABEL,
    DetectionType,
    GazeDirection,
    get_event_message,
)

# Landmark positions within a pose estimate
NOSE, LEFT_EYE, RIGHT_EYE, LEFT_EAR, RIGHT_EAR = range(5)
HEAD_LANDMARKS = 5

# Margin trimmed from the frame for the gaze snapshot box
GAZE_BOX_MARGIN = (40, 80)
GAZE_LABEL = "Person"


class EventClassifier:
    """
    Rule-based classifier for a single frame.

    Object rules run first, in detector output order. The gaze rule runs
    once on the first pose estimate and raises at most one of NO_PERSON or
    GAZE; the presence check always wins over the direction checks.

    Example:
        >>> classifier = EventClassifier(config, capturer)
        >>> events = classifier.classify(frame, detections, poses)
    """

    def __init__(self, config: MonitorConfig, capturer: SnapshotCapturer):
        """
        Initialize classifier.

        Args:
            config: Monitor options (gaze sensitivity)
            capturer: Snapshot renderer shared by every event
        """
        self.config = config
        self.capturer = capturer
        self.min_confidence = config.min_gaze_confidence
        self.no_person_confidence = NO_PERSON_CONFIDENCE

    def classify(
        self,
        frame: np.ndarray,
        detections: Sequence[Detection],
        poses: Sequence[PoseEstimate],
    ) -> list[Event]:
        """
        Classify one frame.

        Args:
            frame: Frame both services ran on
            detections: Object detector output
            poses: Pose estimator output; only the first is used

        Returns:
            Object events in detection order, then the gaze event if any
        """
        events = self.detect_objects(frame, detections)

        gaze_event = self.detect_gaze(frame, poses[0] if poses else None)
        if gaze_event is not None:
            events.append(gaze_event)

        return events

    def detect_objects(self, frame: np.ndarray, detections: Sequence[Detection]) -> list[Event]:
        """Apply the per-label rules to every detection."""
        events = []
        face_count = 0

        for detection in detections:
            if detection.label == PERSON_LABEL:
                face_count += 1
                if face_count > 1:
                    events.append(self._event(DetectionType.MULTIPLE_FACE, frame, detection))
            elif detection.label in OBJECT_EVENTS:
                events.append(self._event(OBJECT_EVENTS[detection.label], frame, detection))

        return events

    def detect_gaze(self, frame: np.ndarray, pose: Optional[PoseEstimate]) -> Optional[Event]:
        """
        Apply the presence and gaze rules to a single pose.

        A missing pose, or one without the five head landmarks, counts as all
        landmark scores being zero.
        """
        if pose is None or len(pose.landmarks) < HEAD_LANDMARKS:
            pose = PoseEstimate()

        nose = pose.score_of(NOSE)
        left_eye = pose.score_of(LEFT_EYE)
        right_eye = pose.score_of(RIGHT_EYE)

        if (
            (left_eye < self.no_person_confidence and right_eye < self.no_person_confidence)
            or nose < self.no_person_confidence
        ):
            return self._gaze_event(DetectionType.NO_PERSON, frame)

        if pose.score_of(LEFT_EAR) < self.min_confidence:
            return self._gaze_event(DetectionType.GAZE, frame, GazeDirection.LEFT)

        if pose.score_of(RIGHT_EAR) < self.min_confidence:
            return self._gaze_event(DetectionType.GAZE, frame, GazeDirection.RIGHT)

        return None

    def gaze_box(self, frame: np.ndarray) -> Box:
        """Whole-frame box used for presence and gaze snapshots."""
        height, width = frame.shape[:2]
        return Box(0, 0, width - GAZE_BOX_MARGIN[0], height - GAZE_BOX_MARGIN[1])

    def _event(self, detection_type: DetectionType, frame: np.ndarray, detection: Detection) -> Event:
        screenshot = self.capturer.capture(frame, detection.box, detection.label)
        return Event(
            detection_type=detection_type,
            screenshot=screenshot,
            data={
                "message": get_event_message(detection_type),
                "confidence": detection.confidence,
                "bbox": list(detection.box),
            },
        )

    def _gaze_event(
        self,
        detection_type: DetectionType,
        frame: np.ndarray,
        direction: GazeDirection | None = None,
    ) -> Event:
        screenshot = self.capturer.capture(frame, self.gaze_box(frame), GAZE_LABEL)
        data = {"message": get_event_message(detection_type, direction)}
        if direction is not None:
            data["direction"] = direction.value
        return Event(detection_type=detection_type, screenshot=screenshot, data=data)
