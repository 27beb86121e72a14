"""
Pose Estimators

Single-person body keypoints in COCO-17 order, from either YOLO11-pose
or MediaPipe Pose.
"""

from __future__ import annotations

from typing import Any

import cv2
import numpy as np

from proctorwatch.cfg import PoseConfig
from proctorwatch.engine.predictor import BasePredictor, select_device
from proctorwatch.engine.results import KEYPOINT_NAMES, Landmark, PoseEstimate
from proctorwatch.models.detector import _import_yolo
from proctorwatch.utils import ModelLoadError, get_logger

logger = get_logger(__name__)

# Lazy imports
mp = None


def _import_mediapipe():
    """Lazy import MediaPipe."""
    global mp
    if mp is None:
        import mediapipe as _mp
        mp = _mp
    return mp


# MediaPipe Pose landmark index for each COCO-17 keypoint
MEDIAPIPE_TO_COCO = (0, 2, 5, 7, 8, 11, 12, 13, 14, 15, 16, 23, 24, 25, 26, 27, 28)


class PoseEstimator(BasePredictor):
    """
    YOLO11-pose wrapper.

    Poses come back ordered by person confidence, so the first estimate is
    the most prominent person in frame.
    """

    def __init__(self, cfg: PoseConfig | None = None):
        super().__init__(cfg or PoseConfig())

    def setup_model(self):
        """Load YOLO pose weights onto the best available device."""
        YOLO = _import_yolo()

        try:
            model = YOLO(self.cfg.model_path)
        except Exception as e:
            raise ModelLoadError(f"Could not load pose weights {self.cfg.model_path}: {e}") from e

        self.device = select_device(self.cfg.device)
        model.to(self.device)
        self.model = model

        logger.info(f"✅ Pose estimator loaded: {self.cfg.model_path} on {self.device}")

    def inference(self, frame: np.ndarray) -> Any:
        return self.model(frame, conf=self.cfg.confidence, verbose=False)

    def postprocess(self, preds: Any, source: Any) -> list[PoseEstimate]:
        """Parse YOLO keypoints into pose estimates."""
        poses: list[PoseEstimate] = []

        if not preds or len(preds) == 0:
            return poses

        result = preds[0]
        keypoints = result.keypoints
        if keypoints is None or len(keypoints) == 0:
            return poses

        points = keypoints.xy.tolist()
        if keypoints.conf is not None:
            scores = keypoints.conf.tolist()
        else:
            scores = [[1.0] * len(p) for p in points]

        person_scores = result.boxes.conf.tolist() if result.boxes is not None else []

        for i, person in enumerate(points):
            landmarks = [
                Landmark(name=name, x=float(x), y=float(y), score=float(score))
                for name, (x, y), score in zip(KEYPOINT_NAMES, person, scores[i])
            ]
            if i < len(person_scores):
                score = float(person_scores[i])
            else:
                score = float(np.mean(scores[i])) if scores[i] else 0.0
            poses.append(PoseEstimate(landmarks=landmarks, score=score))

        return poses


class MediaPipePoseEstimator(BasePredictor):
    """
    MediaPipe Pose wrapper.

    MediaPipe tracks one person; its 33 landmarks are reduced to the COCO-17
    keypoints and landmark visibility is used as the score.
    """

    def __init__(self, cfg: PoseConfig | None = None):
        super().__init__(cfg or PoseConfig(backend="mediapipe"))

    def setup_model(self):
        """Create the MediaPipe Pose graph."""
        try:
            mp = _import_mediapipe()
            self.model = mp.solutions.pose.Pose(
                static_image_mode=False,
                model_complexity=self.cfg.model_complexity,
                min_detection_confidence=self.cfg.confidence,
                min_tracking_confidence=0.5,
            )
        except Exception as e:
            raise ModelLoadError(f"Could not initialize MediaPipe Pose: {e}") from e

        logger.info("✅ MediaPipe Pose initialized")

    def preprocess(self, source: np.ndarray) -> np.ndarray:
        source = super().preprocess(source)
        return cv2.cvtColor(source, cv2.COLOR_BGR2RGB)

    def inference(self, frame: np.ndarray) -> Any:
        return self.model.process(frame)

    def postprocess(self, preds: Any, source: Any) -> list[PoseEstimate]:
        """Map MediaPipe landmarks to pixel-space COCO keypoints."""
        if preds is None or not preds.pose_landmarks:
            return []

        h, w = source.shape[:2]
        raw = preds.pose_landmarks.landmark

        landmarks = [
            Landmark(
                name=name,
                x=float(raw[index].x * w),
                y=float(raw[index].y * h),
                score=float(raw[index].visibility),
            )
            for name, index in zip(KEYPOINT_NAMES, MEDIAPIPE_TO_COCO)
        ]
        score = float(np.mean([lm.score for lm in landmarks]))

        return [PoseEstimate(landmarks=landmarks, score=score)]

    def close(self):
        """Release resources."""
        if self.model is not None:
            self.model.close()


def build_pose_estimator(cfg: PoseConfig) -> BasePredictor:
    """Create the pose estimator for the configured backend."""
    if cfg.backend == "mediapipe":
        return MediaPipePoseEstimator(cfg)
    return PoseEstimator(cfg)
