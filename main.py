"""
ProctorWatch - Main Entry Point

Usage:
    python main.py                          # Monitor camera 0 with env defaults
    python main.py --fps 2 --gaze 15        # Custom sampling and gaze sensitivity
    python main.py --queue --cooldown 5     # Deliver events in 5 second batches
    python main.py --duration 60            # Stop after a minute

Events are written to the log. Ctrl+C stops the monitor.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="ProctorWatch webcam proctoring monitor")
    parser.add_argument("--camera", type=int, default=None, help="Camera device index")
    parser.add_argument("--fps", type=float, default=None, help="Frames sampled per second (1-5)")
    parser.add_argument("--image-type", choices=["jpeg", "png"], default=None, help="Snapshot encoding")
    parser.add_argument("--color", default=None, help="Annotation colour, name or #rrggbb")
    parser.add_argument("--gaze", type=float, default=None, help="Gaze sensitivity percent (5-60)")
    parser.add_argument("--queue", action="store_true", default=None, help="Batch events")
    parser.add_argument("--cooldown", type=float, default=None, help="Seconds between batches")
    parser.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    return parser.parse_args(argv)


async def run(args) -> int:
    from proctorwatch.cfg import get_settings
    from proctorwatch.data import WebcamSource, has_webcam
    from proctorwatch.service import ProctorMonitor
    from proctorwatch.utils import ConfigurationError, EventLogger, get_logger

    logger = get_logger("proctorwatch")
    settings = get_settings()

    try:
        options = settings.to_monitor_config(
            fps=args.fps,
            image_type=args.image_type,
            stroke_color=args.color,
            gaze_sensitivity_percent=args.gaze,
            queue_events=args.queue,
            queue_cool_down_period=args.cooldown,
        )
    except ConfigurationError as e:
        logger.error(f"❌ Invalid options: {e}")
        return 2

    camera = settings.camera_index if args.camera is None else args.camera
    if not has_webcam(camera):
        logger.error("❌ No Media Found")
        return 1

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass

    with WebcamSource(camera, settings.frame_width, settings.frame_height) as source:
        monitor = ProctorMonitor(source, EventLogger(), options, settings=settings)
        async with monitor:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=args.duration)
            except asyncio.TimeoutError:
                pass
            logger.info("⚠️ Shutting down...")
        # Deliver whatever was still waiting for the next batch
        monitor.dispatcher.flush()

    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    from proctorwatch.cfg import get_settings
    from proctorwatch.utils import setup_logging

    setup_logging(args.log_level or get_settings().log_level)

    print("🚀 Starting ProctorWatch...")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
