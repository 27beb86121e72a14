from types import SimpleNamespace

import numpy as np
import pytest

from helpers import make_frame
from proctorwatch.cfg import DetectorConfig, PoseConfig
from proctorwatch.engine import Box, select_device
from proctorwatch.engine.results import KEYPOINT_NAMES
from proctorwatch.models import (
    MediaPipePoseEstimator,
    ObjectDetector,
    PoseEstimator,
    build_pose_estimator,
)
from proctorwatch.models.pose import MEDIAPIPE_TO_COCO

COCO_NAMES = {0: "person", 63: "laptop", 67: "cell phone", 73: "book"}


class FakeBoxes:
    def __init__(self, cls, conf, xyxy):
        self.cls = np.array(cls, dtype=np.float32)
        self.conf = np.array(conf, dtype=np.float32)
        self.xyxy = np.array(xyxy, dtype=np.float32)

    def __len__(self):
        return len(self.cls)


class FakeKeypoints:
    def __init__(self, xy, conf=None):
        self.xy = np.array(xy, dtype=np.float32)
        self.conf = None if conf is None else np.array(conf, dtype=np.float32)

    def __len__(self):
        return len(self.xy)


def test_detector_postprocess_keeps_model_order() -> None:
    boxes = FakeBoxes(
        cls=[67, 0, 73],
        conf=[0.75, 0.5, 0.25],
        xyxy=[[10, 20, 50, 60], [0, 0, 100, 200], [5, 5, 15, 25]],
    )
    result = SimpleNamespace(boxes=boxes, names=COCO_NAMES)

    detections = ObjectDetector().postprocess([result], make_frame())

    assert [d.label for d in detections] == ["cell phone", "person", "book"]
    assert detections[0].box == Box(10, 20, 40, 40)
    assert detections[0].confidence == pytest.approx(0.75)


def test_detector_postprocess_handles_empty_results() -> None:
    detector = ObjectDetector()

    assert detector.postprocess([], make_frame()) == []
    assert detector.postprocess([SimpleNamespace(boxes=None, names=COCO_NAMES)], make_frame()) == []


def test_detector_uses_config() -> None:
    detector = ObjectDetector(DetectorConfig(model_path="custom.pt", confidence=0.4))

    assert detector.cfg.model_path == "custom.pt"
    assert detector.cfg.confidence == 0.4
    assert not detector.ready


def test_pose_postprocess_builds_coco_landmarks() -> None:
    xy = [[[float(i), float(2 * i)] for i in range(17)], [[1.0, 1.0]] * 17]
    conf = [[0.9] * 5 + [0.5] * 12, [0.1] * 17]
    result = SimpleNamespace(
        keypoints=FakeKeypoints(xy, conf),
        boxes=SimpleNamespace(conf=np.array([0.8, 0.3], dtype=np.float32)),
    )

    poses = PoseEstimator().postprocess([result], make_frame())

    assert len(poses) == 2
    first = poses[0]
    assert [lm.name for lm in first.landmarks] == list(KEYPOINT_NAMES)
    assert first.landmarks[3].x == 3.0
    assert first.landmarks[3].y == 6.0
    assert first.score_of(0) == pytest.approx(0.9)
    assert first.score_of(5) == pytest.approx(0.5)
    assert first.score == pytest.approx(0.8)


def test_pose_postprocess_without_confidences() -> None:
    result = SimpleNamespace(keypoints=FakeKeypoints([[[1.0, 2.0]] * 17]), boxes=None)

    poses = PoseEstimator().postprocess([result], make_frame())

    assert poses[0].score_of(4) == 1.0
    assert poses[0].score == pytest.approx(1.0)


def test_pose_postprocess_with_nobody() -> None:
    result = SimpleNamespace(keypoints=FakeKeypoints(np.zeros((0, 17, 2))), boxes=None)

    assert PoseEstimator().postprocess([result], make_frame()) == []


def test_mediapipe_postprocess_maps_landmarks() -> None:
    raw = [SimpleNamespace(x=i / 100, y=i / 50, visibility=i / 33) for i in range(33)]
    preds = SimpleNamespace(pose_landmarks=SimpleNamespace(landmark=raw))
    frame = make_frame(width=200, height=100)

    poses = MediaPipePoseEstimator().postprocess(preds, frame)

    assert len(poses) == 1
    landmarks = poses[0].landmarks
    assert len(landmarks) == len(KEYPOINT_NAMES)
    left_ear = MEDIAPIPE_TO_COCO[3]
    assert landmarks[3].name == "left_ear"
    assert landmarks[3].x == pytest.approx(left_ear / 100 * 200)
    assert landmarks[3].y == pytest.approx(left_ear / 50 * 100)
    assert landmarks[3].score == pytest.approx(left_ear / 33)


def test_mediapipe_postprocess_without_person() -> None:
    preds = SimpleNamespace(pose_landmarks=None)

    assert MediaPipePoseEstimator().postprocess(preds, make_frame()) == []


def test_mediapipe_preprocess_converts_to_rgb() -> None:
    frame = make_frame()
    frame[..., 0] = 255

    rgb = MediaPipePoseEstimator().preprocess(frame)

    assert rgb[0, 0, 2] == 255
    assert rgb[0, 0, 0] == 90


def test_preprocess_rejects_non_arrays() -> None:
    with pytest.raises(ValueError):
        ObjectDetector().preprocess("frame.jpg")


@pytest.mark.parametrize("backend,expected", [("yolo", PoseEstimator), ("mediapipe", MediaPipePoseEstimator)])
def test_build_pose_estimator(backend, expected) -> None:
    estimator = build_pose_estimator(PoseConfig(backend=backend))

    assert isinstance(estimator, expected)
    assert estimator.cfg.backend == backend


def test_unknown_pose_backend_is_rejected() -> None:
    with pytest.raises(ValueError):
        PoseConfig(backend="openpose")


def test_explicit_device_is_kept() -> None:
    assert select_device("cpu") == "cpu"
