import asyncio

import pytest

from proctorwatch.engine import FrameScheduler


def test_ticks_follow_sampling_interval() -> None:
    calls = []

    async def callback():
        calls.append(asyncio.get_running_loop().time())

    async def scenario():
        scheduler = FrameScheduler(callback, interval_ms=100, refresh_hz=200)
        scheduler.start()
        await asyncio.sleep(0.55)
        scheduler.stop()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert 3 <= len(calls) <= 6
    assert scheduler.ticks == len(calls)
    gaps = [b - a for a, b in zip(calls, calls[1:])]
    assert all(gap >= 0.09 for gap in gaps)


def test_busy_callback_skips_ticks_instead_of_overlapping() -> None:
    active = 0
    max_active = 0

    async def callback():
        nonlocal active, max_active
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.25)
        active -= 1

    async def scenario():
        scheduler = FrameScheduler(callback, interval_ms=50, refresh_hz=200)
        scheduler.start()
        await asyncio.sleep(0.6)
        scheduler.stop()
        await scheduler.wait_idle()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert max_active == 1
    assert scheduler.skipped > 0
    assert scheduler.ticks >= 2


def test_stop_halts_future_ticks() -> None:
    calls = []

    async def callback():
        calls.append(1)

    async def scenario():
        scheduler = FrameScheduler(callback, interval_ms=50, refresh_hz=200)
        scheduler.start()
        await asyncio.sleep(0.2)
        scheduler.stop()
        count = len(calls)
        await asyncio.sleep(0.2)
        return scheduler, count

    scheduler, count = asyncio.run(scenario())

    assert len(calls) == count
    assert not scheduler.running


def test_stop_is_idempotent_and_restart_is_rejected() -> None:
    async def callback():
        pass

    async def scenario():
        scheduler = FrameScheduler(callback, interval_ms=100)
        scheduler.start()
        scheduler.stop()
        scheduler.stop()
        with pytest.raises(RuntimeError):
            scheduler.start()

    asyncio.run(scenario())


def test_stop_before_start_prevents_ticks() -> None:
    calls = []

    async def callback():
        calls.append(1)

    scheduler = FrameScheduler(callback, interval_ms=10)
    scheduler.stop()

    assert calls == []
    assert not scheduler.running


def test_in_flight_callback_finishes_after_stop() -> None:
    finished = []

    async def callback():
        await asyncio.sleep(0.2)
        finished.append(1)

    async def scenario():
        scheduler = FrameScheduler(callback, interval_ms=50, refresh_hz=200)
        scheduler.start()
        await asyncio.sleep(0.1)
        assert scheduler.busy
        scheduler.stop()
        await scheduler.wait_idle()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert finished == [1]
    assert not scheduler.busy


def test_callback_errors_go_to_loop_exception_handler() -> None:
    errors = []

    async def callback():
        raise RuntimeError("detector failed")

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda _loop, context: errors.append(context["exception"]))
        scheduler = FrameScheduler(callback, interval_ms=50, refresh_hz=200)
        scheduler.start()
        await asyncio.sleep(0.2)
        scheduler.stop()
        await scheduler.wait_idle()

    asyncio.run(scenario())

    assert errors
    assert all(isinstance(error, RuntimeError) for error in errors)


@pytest.mark.parametrize("interval_ms,refresh_hz", [(0, 60), (-1, 60), (100, 0)])
def test_invalid_arguments_raise(interval_ms, refresh_hz) -> None:
    async def callback():
        pass

    with pytest.raises(ValueError):
        FrameScheduler(callback, interval_ms=interval_ms, refresh_hz=refresh_hz)
