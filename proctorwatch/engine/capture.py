"""
Snapshot Capturer

Annotates a frame with a labelled box and encodes it as a data URL.
"""

from __future__ import annotations

import base64
import threading
from typing import Sequence

import cv2
import numpy as np

from proctorwatch.cfg.config import IMAGE_TYPES, MonitorConfig


class SnapshotCapturer:
    """
    Renders annotated snapshots on a single reusable surface.

    The surface is allocated once at the monitor's frame size. Every capture
    holds the surface lock while it draws, encodes and clears, so one
    snapshot never bleeds into the next.

    Example:
        >>> capturer = SnapshotCapturer(640, 480, color=(255, 237, 43))
        >>> url = capturer.capture(frame, Box(10, 20, 100, 80), "cell phone")
    """

    LINE_WIDTH = 2
    LABEL_OFFSET = 8
    FONT = cv2.FONT_HERSHEY_SIMPLEX
    FONT_SCALE = 0.8

    def __init__(
        self,
        width: int,
        height: int,
        color: tuple[int, int, int] = (255, 237, 43),
        image_type: str = "jpeg",
    ):
        """
        Initialize capturer.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
            color: Annotation colour, BGR
            image_type: Encoding (jpeg, png)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid surface size {width}x{height}")
        if image_type not in IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {image_type}")

        self.width = width
        self.height = height
        self.color = tuple(int(c) for c in color)
        self.mime_type = IMAGE_TYPES[image_type]
        self.extension = ".jpg" if image_type == "jpeg" else f".{image_type}"

        self.surface = np.zeros((height, width, 3), dtype=np.uint8)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: MonitorConfig, width: int, height: int) -> "SnapshotCapturer":
        return cls(width, height, color=config.stroke_bgr, image_type=config.image_type)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def capture(self, frame: np.ndarray, box: Sequence[float], label: str) -> str:
        """
        Snapshot ``frame`` with ``box`` and ``label`` drawn on it.

        Args:
            frame: BGR image; scaled to the surface size if it differs
            box: (x, y, width, height) in frame pixels
            label: Text drawn above the box, upper-cased

        Returns:
            ``data:<mime>;base64,...`` string
        """
        with self._lock:
            try:
                self._draw_frame(frame)
                self._draw_annotation(self._scale_box(box, frame), label)
                return self._encode()
            finally:
                self.surface.fill(0)

    def _draw_frame(self, frame: np.ndarray) -> None:
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        elif frame.shape[2] == 4:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)

        if frame.shape[:2] != (self.height, self.width):
            frame = cv2.resize(frame, (self.width, self.height))

        np.copyto(self.surface, frame)

    def _scale_box(self, box: Sequence[float], frame: np.ndarray) -> tuple[float, ...]:
        """Map a frame-pixel box onto the surface."""
        h, w = frame.shape[:2]
        sx, sy = self.width / w, self.height / h
        x, y, bw, bh = box
        return (x * sx, y * sy, bw * sx, bh * sy)

    def _draw_annotation(self, box: Sequence[float], label: str) -> None:
        x, y, w, h = (int(round(v)) for v in box)

        cv2.rectangle(self.surface, (x, y), (x + w, y + h), self.color, self.LINE_WIDTH)
        cv2.putText(
            self.surface,
            label.upper(),
            (x, y - self.LABEL_OFFSET),
            self.FONT,
            self.FONT_SCALE,
            self.color,
            self.LINE_WIDTH,
            cv2.LINE_AA,
        )

    def _encode(self) -> str:
        ok, buffer = cv2.imencode(self.extension, self.surface)
        if not ok:
            raise RuntimeError(f"Could not encode snapshot as {self.mime_type}")
        payload = base64.b64encode(buffer.tobytes()).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"
