"""
Proctor Monitor

Wires the frame source, detection services, classifier and dispatcher into
a running proctoring session.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping, Optional, Union

import numpy as np

from proctorwatch.cfg import MonitorConfig, Settings, get_settings
from proctorwatch.data import FrameSource
from proctorwatch.engine import (
    BasePredictor,
    Event,
    EventClassifier,
    EventDispatcher,
    FrameResults,
    FrameScheduler,
    SnapshotCapturer,
)
from proctorwatch.engine.dispatcher import EventHandler
from proctorwatch.utils import get_logger

logger = get_logger(__name__)


class ProctorMonitor:
    """
    Webcam proctoring monitor.

    Options are validated synchronously in the constructor, before anything
    else is set up, so an invalid configuration never produces a monitor.
    Sampling starts only after ``start()`` has loaded both detection
    services.

    Example:
        >>> monitor = ProctorMonitor(source, handler, {"fps": 2, "queue_events": True,
        ...                                            "queue_cool_down_period": 5})
        >>> await monitor.start()
        >>> ...
        >>> monitor.stop()
    """

    def __init__(
        self,
        source: FrameSource,
        handler: EventHandler,
        options: Union[MonitorConfig, Mapping[str, Any], None] = None,
        *,
        detector: Optional[BasePredictor] = None,
        pose_estimator: Optional[BasePredictor] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize monitor.

        Args:
            source: Live frame source
            handler: Receives each Event, or an EventBatch in queued mode
            options: Monitor options; environment defaults when None
            detector: Object detection service (YOLO by default)
            pose_estimator: Pose estimation service (per settings by default)
            settings: Application settings

        Raises:
            ConfigurationError: If the options are invalid
        """
        self.settings = settings or get_settings()
        self.config = self._build_config(options, self.settings)

        self.source = source
        self.handler = handler

        width, height = source.size
        self.capturer = SnapshotCapturer.from_config(self.config, width, height)
        self.classifier = EventClassifier(self.config, self.capturer)
        self.dispatcher = EventDispatcher.from_config(handler, self.config)
        self.scheduler = FrameScheduler(
            self._proctor_frame,
            self.config.interval_ms,
            refresh_hz=self.settings.refresh_hz,
        )

        if detector is None:
            from proctorwatch.models import ObjectDetector
            detector = ObjectDetector(self.settings.to_detector_config())
        if pose_estimator is None:
            from proctorwatch.models import build_pose_estimator
            pose_estimator = build_pose_estimator(self.settings.to_pose_config())

        self.detector = detector
        self.pose_estimator = pose_estimator

        self.frames_processed = 0
        self.last_results: Optional[FrameResults] = None
        self._stopped = False

    @staticmethod
    def _build_config(
        options: Union[MonitorConfig, Mapping[str, Any], None],
        settings: Settings,
    ) -> MonitorConfig:
        if isinstance(options, MonitorConfig):
            return options
        if options is None:
            return settings.to_monitor_config()
        return MonitorConfig(**options)

    @classmethod
    async def create(
        cls,
        source: FrameSource,
        handler: EventHandler,
        options: Union[MonitorConfig, Mapping[str, Any], None] = None,
        **kwargs,
    ) -> "ProctorMonitor":
        """Construct a monitor and start it."""
        monitor = cls(source, handler, options, **kwargs)
        await monitor.start()
        return monitor

    @property
    def active(self) -> bool:
        """True while frames are being sampled."""
        return self.scheduler.running

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def start(self) -> None:
        """Load both detection services, then begin sampling."""
        if self._stopped:
            raise RuntimeError("ProctorMonitor cannot be restarted after stop()")
        if self.active:
            return

        logger.info("🔧 Loading detection services...")
        await asyncio.gather(self.detector.load(), self.pose_estimator.load())

        if self._stopped:
            logger.info("Monitor stopped while models were loading")
            return

        self.dispatcher.start()
        self.scheduler.start()

        mode = (
            f"queued every {self.config.queue_cool_down_period}s"
            if self.config.queue_events else "immediate"
        )
        logger.info(f"✅ Monitor active at {self.config.fps} fps, {mode} delivery")

    def stop(self) -> None:
        """
        Stop sampling and the flush timer.

        Idempotent. A frame already being processed may still deliver its
        events afterwards.
        """
        if self._stopped:
            return
        self._stopped = True

        self.scheduler.stop()
        self.dispatcher.stop()

        logger.info(f"👋 Monitor stopped after {self.frames_processed} frames")

    async def close(self) -> None:
        """Stop, wait for the in-flight frame and release the models."""
        self.stop()
        await self.scheduler.wait_idle()
        self.detector.close()
        self.pose_estimator.close()

    async def __aenter__(self) -> "ProctorMonitor":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def process_frame(self, frame: np.ndarray) -> list[Event]:
        """
        Run both detection services on ``frame`` and classify the result.

        Args:
            frame: BGR frame

        Returns:
            Events in delivery order, not yet dispatched
        """
        started = time.perf_counter()

        detections, poses = await asyncio.gather(
            self.detector.predict_async(frame),
            self.pose_estimator.predict_async(frame),
        )
        inferred = time.perf_counter()

        events = self.classifier.classify(frame, detections, poses)

        self.last_results = FrameResults(
            detections=list(detections),
            poses=list(poses),
            speed={
                "inference": (inferred - started) * 1000,
                "classify": (time.perf_counter() - inferred) * 1000,
            },
        )
        self.frames_processed += 1

        logger.debug(
            f"FRAME | #{self.frames_processed} | {len(detections)} objects | "
            f"{len(events)} events | {self.last_results.total_time_ms:.1f}ms"
        )
        return events

    async def _proctor_frame(self) -> None:
        frame = self.source.read()
        if frame is None:
            logger.debug("No frame available yet")
            return

        for event in await self.process_frame(frame):
            self.dispatcher.dispatch(event)
