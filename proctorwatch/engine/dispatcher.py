"""
Event Dispatcher

Delivers events to the caller, either one at a time or in periodic batches.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Callable, Optional, Union

from proctorwatch.cfg.config import MonitorConfig
from proctorwatch.engine.results import Event, EventBatch
from proctorwatch.utils import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Union[Event, EventBatch]], None]


class EventDispatcher:
    """
    Routes classified events to the handler.

    Immediate mode forwards every event as it arrives. Queued mode appends to
    an internal queue and a flush task delivers one ``EventBatch`` every
    ``flush_period`` seconds; an empty queue delivers nothing. Handler
    exceptions propagate out of ``dispatch`` and ``flush``; inside the flush
    task they go to the loop exception handler and the timer keeps firing.

    Example:
        >>> dispatcher = EventDispatcher(print, queue_events=True, flush_period=5)
        >>> dispatcher.start()
        >>> dispatcher.dispatch(event)
    """

    def __init__(
        self,
        handler: EventHandler,
        queue_events: bool = False,
        flush_period: Optional[float] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            handler: Receives an Event (immediate) or an EventBatch (queued)
            queue_events: Batch events instead of forwarding them
            flush_period: Seconds between flushes, required when queueing
        """
        if queue_events and (flush_period is None or flush_period <= 0):
            raise ValueError("flush_period must be positive when queue_events is enabled")

        self.handler = handler
        self.queue_events = queue_events
        self.flush_period = flush_period

        self._queue: list[Event] = []
        self._flush_task: Optional[asyncio.Task] = None
        self._stopped = False

    @classmethod
    def from_config(cls, handler: EventHandler, config: MonitorConfig) -> "EventDispatcher":
        return cls(
            handler,
            queue_events=config.queue_events,
            flush_period=config.queue_cool_down_period,
        )

    @property
    def pending(self) -> int:
        """Number of events waiting for the next flush."""
        return len(self._queue)

    @property
    def running(self) -> bool:
        return self._flush_task is not None and not self._flush_task.done()

    def start(self) -> None:
        """Start the flush timer. No-op in immediate mode."""
        if not self.queue_events or self.running or self._stopped:
            return
        self._flush_task = asyncio.get_running_loop().create_task(self._flush_loop())

    def stop(self) -> None:
        """Stop the flush timer. Idempotent; queued events are kept."""
        self._stopped = True
        if self._flush_task is not None:
            self._flush_task.cancel()
            self._flush_task = None

    def dispatch(self, event: Event) -> None:
        """Deliver or enqueue one event."""
        if self.queue_events:
            self._queue.append(event)
        else:
            self.handler(event)

    def flush(self) -> Optional[EventBatch]:
        """
        Deliver everything queued as a single batch.

        Returns:
            The delivered batch, or None when the queue was empty
        """
        if not self._queue:
            return None

        batch = EventBatch(events=tuple(copy.deepcopy(self._queue)))
        self._queue.clear()

        logger.debug(f"Flushing {len(batch)} queued events")
        self.handler(batch)
        return batch

    async def _flush_loop(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.flush_period)
            # A failing handler must not stop the timer
            try:
                self.flush()
            except Exception as e:
                loop.call_exception_handler({
                    "message": "Event handler failed during queue flush",
                    "exception": e,
                    "task": self._flush_task,
                })
