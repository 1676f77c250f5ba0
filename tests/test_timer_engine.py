import asyncio

import pytest

from breathe.core.timer_engine import TimerEngine
from breathe.models.config import PHASE_STORAGE_KEY, PhaseConfig
from breathe.models.timer import Phase


def make_engine(clock, store=None, duration=4.0):
    return TimerEngine(
        PhaseConfig(phase_duration_seconds=duration),
        store=store,
        clock=clock,
        sample_interval_ms=10,
    )


async def test_pause_resume_preserves_elapsed(clock):
    engine = make_engine(clock)

    engine.start()
    clock.advance(3)
    engine.pause()
    assert engine.elapsed_ms == pytest.approx(3000)

    clock.advance(10)
    assert engine.elapsed_ms == pytest.approx(3000)
    assert engine.display_ms == pytest.approx(3000)

    engine.start()
    clock.advance(2)
    assert engine.elapsed_ms == pytest.approx(5000)
    engine.close()


async def test_start_twice_keeps_same_handle(clock):
    engine = make_engine(clock)
    handle = engine.start()
    clock.advance(1)
    assert engine.start() is handle
    assert engine.elapsed_ms == pytest.approx(1000)
    engine.close()


async def test_pause_when_stopped_is_noop(clock):
    engine = make_engine(clock)
    samples = []
    engine.subscribe(samples.append)

    engine.pause()

    assert samples == []
    assert engine.is_running is False


async def test_reset_zeroes_everything(clock):
    engine = make_engine(clock)
    tokens = []
    engine.on_restart(tokens.append)

    handle = engine.start()
    clock.advance(5)  # In the first hold
    engine.tick(handle)
    assert engine.is_hold is True

    engine.reset()

    assert engine.elapsed_ms == 0
    assert engine.is_running is False
    assert engine.is_hold is False
    assert engine.display_ms == 0
    assert handle.active is False
    assert tokens == [1]


async def test_reset_while_paused(clock):
    engine = make_engine(clock)
    engine.start()
    clock.advance(13)
    engine.pause()

    engine.reset()

    assert engine.state.elapsed_ms == 0
    assert engine.state.running_since is None
    assert engine.is_hold is False
    assert engine.restart_token == 1


async def test_set_duration_while_running_recomputes_hold(clock, local_storage):
    engine = make_engine(clock, store=local_storage)
    handle = engine.start()
    clock.advance(5)
    engine.tick(handle)
    assert engine.is_hold is True

    applied = engine.set_phase_duration(2.0)

    # 5000 ms in an 8000 ms cycle of 2 s phases is the exhale
    assert applied == 2.0
    assert engine.is_hold is False
    assert engine.elapsed_ms == pytest.approx(5000)
    assert engine.is_running is True
    assert local_storage.get(PHASE_STORAGE_KEY) == "2.0"
    engine.close()


async def test_set_duration_while_paused_clears_hold(clock):
    engine = make_engine(clock)
    engine.start()
    clock.advance(5)
    engine.pause()
    assert engine.is_hold is True
    published = []
    engine.subscribe(published.append)

    engine.set_phase_duration(4.5)

    assert engine.is_hold is False
    assert engine.elapsed_ms == pytest.approx(5000)
    sample = published[-1]
    assert sample.elapsed_ms == pytest.approx(5000)
    assert sample.is_hold is False
    assert sample.phase is Phase.INHALE
    assert sample.phase_remaining_ms == pytest.approx(4500)


@pytest.mark.parametrize(
    "value, expected",
    [(12.34, 10.0), (0.2, 1.0), (7.34, 7.3), (4.0, 4.0)],
)
def test_set_duration_clamps(clock, local_storage, value, expected):
    engine = make_engine(clock, store=local_storage)

    assert engine.set_phase_duration(value) == expected
    assert engine.phase_duration == expected
    assert local_storage.get(PHASE_STORAGE_KEY) == f"{expected:.1f}"


async def test_stale_tick_after_pause_is_ignored(clock):
    engine = make_engine(clock)
    samples = []
    engine.subscribe(samples.append)

    handle = engine.start()
    clock.advance(2)
    engine.pause()
    published = len(samples)

    clock.advance(30)
    engine.tick(handle)

    assert len(samples) == published
    assert engine.display_ms == pytest.approx(2000)


async def test_old_handle_cannot_drive_new_run(clock):
    engine = make_engine(clock)
    first = engine.start()
    engine.pause()
    second = engine.start()
    samples = []
    engine.subscribe(samples.append)

    engine.tick(first)
    assert samples == []

    engine.tick(second)
    assert len(samples) == 1
    engine.close()


async def test_delayed_ticks_do_not_drift(clock):
    engine = make_engine(clock)
    handle = engine.start()

    # No ticks for a long stretch, then one late tick
    clock.advance(100)
    engine.tick(handle)

    assert engine.display_ms == pytest.approx(100_000)
    engine.close()


async def test_backwards_clock_never_reduces_elapsed(clock):
    engine = make_engine(clock)
    clock.advance(10)
    engine.start()
    clock.advance(-5)
    assert engine.elapsed_ms == 0
    engine.close()


async def test_sampling_task_publishes_until_paused(clock):
    engine = make_engine(clock)
    samples = []
    engine.subscribe(samples.append)

    handle = engine.start()
    for _ in range(5):
        clock.advance(0.5)
        await asyncio.sleep(0.03)
    assert len(samples) > 1
    assert samples[-1].elapsed_ms > samples[0].elapsed_ms

    engine.pause()
    count = len(samples)
    clock.advance(1)
    await asyncio.sleep(0.05)

    assert handle.active is False
    assert len(samples) == count


async def test_sample_is_pure(clock):
    engine = make_engine(clock)
    engine.start()
    clock.advance(9)

    sample = engine.sample(clock() + 4)

    assert sample.elapsed_ms == pytest.approx(13000)
    assert sample.is_hold is True
    assert engine.elapsed_ms == pytest.approx(9000)
    engine.close()


async def test_failing_subscriber_does_not_break_engine(clock):
    engine = make_engine(clock)

    def broken(sample):
        raise RuntimeError("boom")

    engine.subscribe(broken)
    engine.start()
    clock.advance(1)
    engine.pause()

    assert engine.elapsed_ms == pytest.approx(1000)


def test_start_requires_running_loop(clock):
    engine = make_engine(clock)
    with pytest.raises(RuntimeError):
        engine.start()
    assert engine.is_running is False


@pytest.mark.parametrize(
    "stored, expected",
    [("7.3", 7.3), ("", 4.0), ("abc", 4.0), ("nan", 4.0), ("25", 10.0), (None, 4.0)],
)
def test_from_store(local_storage, stored, expected):
    if stored is not None:
        local_storage.set(PHASE_STORAGE_KEY, stored)

    engine = TimerEngine.from_store(local_storage)

    assert engine.phase_duration == expected
