import base64
import time

import cv2
import numpy as np

from proctorwatch.cfg import BaseConfig
from proctorwatch.engine.predictor import BasePredictor
from proctorwatch.engine.results import KEYPOINT_NAMES, Box, Detection, Landmark, PoseEstimate

FRAME_WIDTH = 160
FRAME_HEIGHT = 120


def make_frame(width: int = FRAME_WIDTH, height: int = FRAME_HEIGHT, value: int = 90) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


def make_detection(label: str, x: float = 10, y: float = 20, w: float = 40, h: float = 30) -> Detection:
    return Detection(label=label, box=Box(x, y, w, h), confidence=0.9)


def make_pose(
    nose: float = 0.9,
    left_eye: float = 0.9,
    right_eye: float = 0.9,
    left_ear: float = 0.9,
    right_ear: float = 0.9,
    rest: float = 0.8,
) -> PoseEstimate:
    head = [nose, left_eye, right_eye, left_ear, right_ear]
    scores = head + [rest] * (len(KEYPOINT_NAMES) - len(head))
    landmarks = [
        Landmark(name=name, x=float(i), y=float(i), score=score)
        for i, (name, score) in enumerate(zip(KEYPOINT_NAMES, scores))
    ]
    return PoseEstimate(landmarks=landmarks, score=0.9)


def decode_data_url(url: str) -> np.ndarray:
    header, payload = url.split(",", 1)
    assert header.endswith(";base64")
    buffer = np.frombuffer(base64.b64decode(payload), dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)


class FakePredictor(BasePredictor):
    """Detection service returning canned output."""

    def __init__(self, outputs=None, delay: float = 0.0, error: Exception | None = None):
        super().__init__(BaseConfig())
        self.outputs = list(outputs or [])
        self.delay = delay
        self.error = error
        self.calls = 0
        self.loads = 0
        self.closed = False

    def setup_model(self):
        self.loads += 1
        self.model = object()

    def inference(self, data):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.outputs

    def postprocess(self, preds, source):
        return list(preds)

    def close(self):
        self.closed = True


class NullSource:
    """Frame source that never has a frame."""

    size = (FRAME_WIDTH, FRAME_HEIGHT)

    def read(self):
        return None
