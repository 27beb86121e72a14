"""
Frame Sources

Supply the most recent video frame on demand.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np

from proctorwatch.utils import CameraUnavailableError, get_logger

logger = get_logger(__name__)


class FrameSource(ABC):
    """
    Base class for frame sources.

    Only "most recent frame" semantics are provided; nothing is buffered.
    """

    @property
    @abstractmethod
    def size(self) -> tuple[int, int]:
        """Frame (width, height) in pixels."""
        pass

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """Return the latest BGR frame, or None if none is available yet."""
        pass

    def close(self) -> None:
        """Release the underlying device."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class StaticFrameSource(FrameSource):
    """Serves the same frame on every read."""

    def __init__(self, frame: np.ndarray):
        self.frame = frame

    @property
    def size(self) -> tuple[int, int]:
        h, w = self.frame.shape[:2]
        return w, h

    def read(self) -> Optional[np.ndarray]:
        return self.frame


def has_webcam(index: int = 0) -> bool:
    """Check whether a video input device can be opened."""
    capture = cv2.VideoCapture(index)
    try:
        return capture.isOpened()
    finally:
        capture.release()


class WebcamSource(FrameSource):
    """
    OpenCV webcam reader.

    A background thread keeps grabbing frames so ``read`` always returns the
    newest one instead of whatever the driver has buffered.

    Example:
        >>> with WebcamSource(0) as source:
        ...     frame = source.read()
    """

    def __init__(
        self,
        index: int = 0,
        width: int = 640,
        height: int = 480,
    ):
        """
        Open the camera.

        Args:
            index: OpenCV device index
            width: Requested capture width
            height: Requested capture height

        Raises:
            CameraUnavailableError: If the device cannot be opened
        """
        self.index = index
        self.capture = cv2.VideoCapture(index)

        if not self.capture.isOpened():
            self.capture.release()
            raise CameraUnavailableError(f"No video input device at index {index}")

        self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self._width = int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH)) or width
        self._height = int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT)) or height

        self._latest: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self.running = True
        self.frame_count = 0

        self._thread = threading.Thread(target=self._grab_loop, name="webcam-grabber", daemon=True)
        self._thread.start()

        logger.info(f"📹 Camera {index} opened at {self._width}x{self._height}")

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def read(self) -> Optional[np.ndarray]:
        with self._lock:
            return None if self._latest is None else self._latest.copy()

    def _grab_loop(self) -> None:
        while self.running:
            ok, frame = self.capture.read()
            if not ok:
                logger.warning(f"⚠️ Camera {self.index} returned no frame, stopping grabber")
                break
            with self._lock:
                self._latest = frame
                self.frame_count += 1

    def close(self) -> None:
        """Stop grabbing and release the camera."""
        if not self.running:
            return
        self.running = False
        self._thread.join(timeout=1.0)
        self.capture.release()
        logger.info(f"📹 Camera {self.index} released")
