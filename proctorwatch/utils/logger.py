"""
ProctorWatch Logger

Centralized logging configuration.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Setup root logging for command line use.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(fmt=DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # Reduce noise from other libraries
    logging.getLogger("ultralytics").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(
    name: str,
    level: int = logging.INFO,
    format_str: Optional[str] = None,
) -> logging.Logger:
    """
    Get a configured logger.

    Args:
        name: Logger name (usually __name__)
        level: Logging level
        format_str: Custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(format_str or DEFAULT_FORMAT))

        logger.addHandler(handler)
        logger.setLevel(level)

    return logger


class EventLogger:
    """
    Event handler that writes each delivered event to the log.

    Usable directly as the monitor's handler callback.
    """

    def __init__(self, session_id: str | None = None):
        self.logger = get_logger("proctorwatch.events")
        self.session_id = session_id or "-"
        self.delivered = 0

    def __call__(self, payload) -> None:
        from proctorwatch.engine.results import EventBatch

        if isinstance(payload, EventBatch):
            self.log_batch(payload)
        else:
            self.log_event(payload)

    def log_event(self, event) -> None:
        """Log a single event."""
        self.delivered += 1
        self.logger.warning(
            f"EVENT | {self.session_id} | {event.detection_type.value} | "
            f"ts={event.timestamp} | {event.data.get('message', '')}"
        )

    def log_batch(self, batch) -> None:
        """Log a queued batch, one line per event."""
        self.logger.warning(f"BATCH | {self.session_id} | {len(batch)} events")
        for event in batch.events:
            self.log_event(event)
