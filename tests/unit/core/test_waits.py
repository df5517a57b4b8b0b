"""Tests for interruptible waits."""

import threading

import pytest

from codespace_rotator.core.waits import InterruptibleSleeper, ShutdownRequested


@pytest.mark.unit
class TestInterruptibleSleeper:
    def test_zero_sleep_returns_immediately(self) -> None:
        sleeper = InterruptibleSleeper()
        sleeper.sleep(0)
        assert not sleeper.stop_requested

    def test_sleep_after_stop_raises(self) -> None:
        sleeper = InterruptibleSleeper()
        sleeper.request_stop()

        assert sleeper.stop_requested
        with pytest.raises(ShutdownRequested):
            sleeper(0)

    def test_stop_wakes_a_long_sleep(self) -> None:
        sleeper = InterruptibleSleeper()
        timer = threading.Timer(0.05, sleeper.request_stop)
        timer.start()
        try:
            with pytest.raises(ShutdownRequested):
                sleeper.sleep(3600)
        finally:
            timer.cancel()
