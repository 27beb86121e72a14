"""
Frame Scheduler

Drives the per-frame callback at the sampling rate from a steady repaint loop.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from proctorwatch.cfg.config import DEFAULT_REFRESH_HZ
from proctorwatch.utils import get_logger

logger = get_logger(__name__)


class FrameScheduler:
    """
    Rate-limited sampling loop.

    The loop wakes on every repaint tick (``refresh_hz``, independent of the
    sampling rate). When at least ``interval_ms`` has elapsed since the last
    sampling tick, the callback is started as a background task. A tick that
    arrives while the previous callback is still in flight is skipped, not
    queued, so at most one frame is ever being processed.

    Example:
        >>> scheduler = FrameScheduler(process_frame, interval_ms=1000 / 3)
        >>> scheduler.start()
        >>> ...
        >>> scheduler.stop()
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[None]],
        interval_ms: float,
        refresh_hz: float = DEFAULT_REFRESH_HZ,
    ):
        """
        Initialize scheduler.

        Args:
            callback: Coroutine function run once per sampling tick
            interval_ms: Minimum milliseconds between sampling ticks
            refresh_hz: Repaint loop frequency
        """
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if refresh_hz <= 0:
            raise ValueError("refresh_hz must be positive")

        self.callback = callback
        self.interval = interval_ms / 1000
        self.refresh_interval = 1 / refresh_hz

        self.ticks = 0
        self.skipped = 0

        self._marker = 0.0
        self._task: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def busy(self) -> bool:
        """True while a callback started by this scheduler is unfinished."""
        return self._in_flight is not None and not self._in_flight.done()

    def start(self) -> None:
        """Start the repaint loop on the running event loop."""
        if self._stopped:
            raise RuntimeError("FrameScheduler cannot be restarted after stop()")
        if self.running:
            return

        loop = asyncio.get_running_loop()
        self._marker = loop.time()
        self._task = loop.create_task(self._run())

    def stop(self) -> None:
        """
        Halt all future sampling ticks.

        Idempotent. A callback already in flight is left to finish.
        """
        if self._stopped:
            return
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
        logger.debug(f"Scheduler stopped after {self.ticks} ticks ({self.skipped} skipped)")

    async def wait_idle(self) -> None:
        """Wait for the in-flight callback, if any, without raising its error."""
        if self._in_flight is not None:
            await asyncio.gather(self._in_flight, return_exceptions=True)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._stopped:
            self._on_repaint(loop.time())
            await asyncio.sleep(self.refresh_interval)

    def _on_repaint(self, now: float) -> None:
        if self._stopped or now - self._marker < self.interval:
            return

        self._marker = now

        if self.busy:
            self.skipped += 1
            logger.debug("Skipping tick, previous frame still in flight")
            return

        self.ticks += 1
        self._in_flight = asyncio.ensure_future(self.callback())
        self._in_flight.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            task.get_loop().call_exception_handler({
                "message": "Frame callback failed",
                "exception": exc,
                "task": task,
            })
