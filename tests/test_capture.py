from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from helpers import FRAME_HEIGHT, FRAME_WIDTH, decode_data_url, make_frame
from proctorwatch.cfg import MonitorConfig
from proctorwatch.engine import Box, SnapshotCapturer

RED = (0, 0, 255)


def _png_capturer(color=RED) -> SnapshotCapturer:
    return SnapshotCapturer(FRAME_WIDTH, FRAME_HEIGHT, color=color, image_type="png")


def test_capture_returns_jpeg_data_url() -> None:
    capturer = SnapshotCapturer.from_config(MonitorConfig(), FRAME_WIDTH, FRAME_HEIGHT)

    url = capturer.capture(make_frame(), Box(10, 20, 40, 30), "book")

    assert url.startswith("data:image/jpeg;base64,")
    assert decode_data_url(url).shape == (FRAME_HEIGHT, FRAME_WIDTH, 3)


def test_capture_png_uses_config_colour() -> None:
    capturer = SnapshotCapturer.from_config(
        MonitorConfig(image_type="png", stroke_color="red"), FRAME_WIDTH, FRAME_HEIGHT
    )

    url = capturer.capture(make_frame(value=0), Box(10, 20, 50, 40), "laptop")

    assert url.startswith("data:image/png;base64,")
    image = decode_data_url(url)
    assert tuple(image[40, 10]) == RED
    assert tuple(image[20, 35]) == RED


def test_surface_is_cleared_after_capture() -> None:
    capturer = _png_capturer()

    capturer.capture(make_frame(value=200), Box(10, 20, 40, 30), "person")

    assert not capturer.surface.any()


def test_surface_is_reused() -> None:
    capturer = _png_capturer()
    surface = capturer.surface

    capturer.capture(make_frame(), Box(0, 0, 10, 10), "book")
    capturer.capture(make_frame(), Box(0, 0, 10, 10), "book")

    assert capturer.surface is surface


def test_previous_annotation_does_not_bleed_into_next_snapshot() -> None:
    capturer = _png_capturer()

    capturer.capture(make_frame(value=0), Box(100, 60, 40, 40), "first")
    image = decode_data_url(capturer.capture(make_frame(value=0), Box(10, 20, 20, 20), "b"))

    assert tuple(image[80, 100]) == (0, 0, 0)
    assert tuple(image[30, 10]) == RED


def test_frame_is_scaled_to_surface() -> None:
    capturer = _png_capturer()
    frame = np.full((480, 640, 3), 120, dtype=np.uint8)

    image = decode_data_url(capturer.capture(frame, Box(0, 0, 5, 5), "x"))

    assert image.shape == (FRAME_HEIGHT, FRAME_WIDTH, 3)
    assert tuple(image[FRAME_HEIGHT - 1, FRAME_WIDTH - 1]) == (120, 120, 120)


def test_box_is_scaled_with_frame() -> None:
    capturer = _png_capturer()
    frame = np.zeros((FRAME_HEIGHT * 2, FRAME_WIDTH * 2, 3), dtype=np.uint8)

    image = decode_data_url(capturer.capture(frame, Box(20, 40, 100, 80), "book"))

    assert tuple(image[40, 10]) == RED
    assert tuple(image[20, 35]) == RED
    assert tuple(image[80, 20]) == (0, 0, 0)


def test_grayscale_frame_is_accepted() -> None:
    capturer = _png_capturer()
    frame = np.full((FRAME_HEIGHT, FRAME_WIDTH), 60, dtype=np.uint8)

    image = decode_data_url(capturer.capture(frame, Box(0, 0, 5, 5), "x"))

    assert tuple(image[FRAME_HEIGHT - 1, FRAME_WIDTH - 1]) == (60, 60, 60)


def test_concurrent_captures_are_serialized() -> None:
    capturer = _png_capturer()
    frames = [make_frame(value=10 * i) for i in range(8)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        urls = list(pool.map(lambda f: capturer.capture(f, Box(0, 0, 5, 5), "x"), frames))

    for i, url in enumerate(urls):
        image = decode_data_url(url)
        assert tuple(image[FRAME_HEIGHT - 1, FRAME_WIDTH - 1]) == (10 * i,) * 3


def test_invalid_surface_size_raises() -> None:
    with pytest.raises(ValueError):
        SnapshotCapturer(0, 480)


def test_unknown_image_type_raises() -> None:
    with pytest.raises(ValueError):
        SnapshotCapturer(640, 480, image_type="gif")
