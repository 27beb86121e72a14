"""
Object Detector

COCO object detection with Ultralytics YOLO11.
https://docs.ultralytics.com/models/yolo11/
"""

from __future__ import annotations

from typing import Any

import numpy as np

from proctorwatch.cfg import DetectorConfig
from proctorwatch.engine.predictor import BasePredictor, select_device
from proctorwatch.engine.results import Box, Detection
from proctorwatch.utils import ModelLoadError, get_logger

logger = get_logger(__name__)

# Lazy imports
YOLO = None


def _import_yolo():
    """Lazy import YOLO."""
    global YOLO
    if YOLO is None:
        from ultralytics import YOLO as _YOLO
        YOLO = _YOLO
    return YOLO


class ObjectDetector(BasePredictor):
    """
    YOLO wrapper returning labelled boxes.

    Every detected class is returned with its COCO name ("person",
    "cell phone", "book", "laptop", ...); deciding which labels matter is
    left to the classifier.
    """

    def __init__(self, cfg: DetectorConfig | None = None):
        super().__init__(cfg or DetectorConfig())

    def setup_model(self):
        """Load YOLO weights onto the best available device."""
        YOLO = _import_yolo()

        try:
            model = YOLO(self.cfg.model_path)
        except Exception as e:
            raise ModelLoadError(f"Could not load detector weights {self.cfg.model_path}: {e}") from e

        self.device = select_device(self.cfg.device)
        model.to(self.device)
        self.model = model

        logger.info(f"✅ Object detector loaded: {self.cfg.model_path} on {self.device}")

    def inference(self, frame: np.ndarray) -> Any:
        return self.model(frame, conf=self.cfg.confidence, verbose=False)

    def postprocess(self, preds: Any, source: Any) -> list[Detection]:
        """Parse YOLO results into detections, model order preserved."""
        detections: list[Detection] = []

        if not preds or len(preds) == 0:
            return detections

        result = preds[0]
        if result.boxes is None:
            return detections

        boxes = result.boxes
        names = result.names

        for i in range(len(boxes)):
            cls = int(boxes.cls[i])
            conf = float(boxes.conf[i])
            x1, y1, x2, y2 = (float(v) for v in boxes.xyxy[i].tolist())

            detections.append(Detection(
                label=names.get(cls, "unknown"),
                box=Box.from_xyxy(x1, y1, x2, y2),
                confidence=conf,
            ))

        return detections
