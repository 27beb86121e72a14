"""
ProctorWatch Engine - Base Predictor Class

Handles inference logic with preprocessing, inference, and postprocessing.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from proctorwatch.cfg import BaseConfig
from proctorwatch.utils import get_logger

logger = get_logger(__name__)


class BasePredictor(ABC):
    """
    Base class for the detection services.

    Predictors handle the inference pipeline:
    1. preprocess() - Prepare input frame
    2. inference() - Run model inference
    3. postprocess() - Convert model outputs to result objects

    Models are loaded lazily by ``setup_model`` (or ``load``), so a predictor
    can be constructed cheaply and loaded off the event loop.

    Attributes:
        cfg: Configuration for prediction
        model: Loaded model instance
        device: Computation device (cpu/cuda/mps)

    Example:
        >>> detector = ObjectDetector(cfg)
        >>> await detector.load()
        >>> detections = await detector.predict_async(frame)
    """

    def __init__(self, cfg: BaseConfig):
        """
        Initialize predictor.

        Args:
            cfg: Predictor configuration
        """
        self.cfg = cfg
        self.model = None
        self.device = "cpu"

    @property
    def ready(self) -> bool:
        return self.model is not None

    @abstractmethod
    def setup_model(self):
        """Load and setup the model."""
        pass

    def preprocess(self, source: np.ndarray) -> Any:
        """
        Preprocess input before inference.

        Args:
            source: BGR frame

        Returns:
            Preprocessed input ready for model
        """
        if not isinstance(source, np.ndarray):
            raise ValueError(f"Unsupported source type: {type(source)}")
        return source

    @abstractmethod
    def inference(self, data: Any) -> Any:
        """
        Run model inference.

        Args:
            data: Preprocessed input

        Returns:
            Raw model outputs
        """
        pass

    @abstractmethod
    def postprocess(self, preds: Any, source: Any) -> list:
        """
        Postprocess model outputs.

        Args:
            preds: Raw model predictions
            source: Original input for reference

        Returns:
            List of result objects
        """
        pass

    def __call__(self, source: np.ndarray) -> list:
        """
        Run full prediction pipeline.

        Args:
            source: Input frame

        Returns:
            Prediction results
        """
        if not self.ready:
            self.setup_model()

        preprocessed = self.preprocess(source)
        preds = self.inference(preprocessed)
        return self.postprocess(preds, source)

    async def load(self) -> None:
        """Load the model in a worker thread."""
        if not self.ready:
            logger.debug(f"Loading {self.__class__.__name__}")
            await asyncio.to_thread(self.setup_model)

    async def predict_async(self, source: np.ndarray) -> list:
        """Run the pipeline in a worker thread."""
        return await asyncio.to_thread(self, source)

    def close(self):
        """Release resources."""
        pass


def select_device(preference: str = "auto") -> str:
    """
    Pick the computation device for torch-backed models.

    Args:
        preference: auto, cpu, cuda or mps

    Returns:
        Device name
    """
    if preference != "auto":
        return preference

    import torch

    if torch.backends.mps.is_available():
        # Apple Silicon (M1/M2/M3/M4)
        return "mps"
    if torch.cuda.is_available():
        return "cuda"
    return "cpu"
