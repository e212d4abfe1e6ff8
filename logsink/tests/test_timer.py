"""Tests for logsink.timer module."""

import threading
import time

import pytest

from logsink.timer import TimerDriver


def test_ticks_at_interval():
    ticks = []
    timer = TimerDriver(0.02, lambda: ticks.append(time.time()))
    timer.start()
    time.sleep(0.15)
    timer.stop()

    assert len(ticks) >= 2
    assert not timer.is_running


def test_stop_does_not_wait_for_interval():
    timer = TimerDriver(3600, lambda: None)
    timer.start()
    assert timer.is_running

    start = time.time()
    timer.stop(timeout=2.0)
    assert time.time() - start < 1.0
    assert not timer.is_running


def test_tick_errors_do_not_stop_timer():
    calls = threading.Semaphore(0)

    def on_tick():
        calls.release()
        raise RuntimeError("boom")

    timer = TimerDriver(0.01, on_tick)
    timer.start()
    try:
        assert calls.acquire(timeout=1.0)
        assert calls.acquire(timeout=1.0)
    finally:
        timer.stop()


def test_start_twice_keeps_one_thread():
    timer = TimerDriver(3600, lambda: None)
    timer.start()
    first = timer._thread
    timer.start()
    assert timer._thread is first
    timer.stop()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        TimerDriver(0, lambda: None)
