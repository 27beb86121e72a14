"""
Event Types and Constants

Defines the suspicious-activity event types and the messages attached to them.
"""

from __future__ import annotations

from enum import Enum


class DetectionType(str, Enum):
    """Types of proctoring events."""
    MULTIPLE_FACE = "MULTIPLE_FACE"
    MOBILE = "MOBILE"
    LAPTOP = "LAPTOP"
    BOOK = "BOOK"
    NO_PERSON = "NO_PERSON"
    GAZE = "GAZE"


class GazeDirection(str, Enum):
    """Side the candidate looked away to."""
    LEFT = "left"
    RIGHT = "right"


# Object detector labels that raise an event
PERSON_LABEL = "person"
PHONE_LABEL = "cell phone"
BOOK_LABEL = "book"
LAPTOP_LABEL = "laptop"

OBJECT_EVENTS = {
    PHONE_LABEL: DetectionType.MOBILE,
    BOOK_LABEL: DetectionType.BOOK,
    LAPTOP_LABEL: DetectionType.LAPTOP,
}

EVENT_MESSAGES = {
    DetectionType.MULTIPLE_FACE: "Found more than one person in Frame",
    DetectionType.MOBILE: "Found using Mobile in frame",
    DetectionType.BOOK: "Found using book in frame",
    DetectionType.LAPTOP: "Found using laptop in frame",
    DetectionType.NO_PERSON: "Not able to Find any person in frame",
}

GAZE_MESSAGES = {
    GazeDirection.LEFT: "You looked away from the Screen (To the left)",
    GazeDirection.RIGHT: "You looked away from the Screen (To the Right)",
}


def get_event_message(
    detection_type: DetectionType,
    direction: GazeDirection | None = None,
) -> str:
    """
    Get the human-readable message for an event.

    Args:
        detection_type: Type of event
        direction: Gaze direction, only used for GAZE events

    Returns:
        Event message string
    """
    if detection_type is DetectionType.GAZE:
        return GAZE_MESSAGES[direction or GazeDirection.LEFT]
    return EVENT_MESSAGES.get(detection_type, "Suspicious activity in frame")
