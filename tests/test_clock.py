"""Tests for RunningClock."""

import math

import pytest

from celestjax.clock import RestartPolicy, RunningClock
from celestjax.timevalue import TimeValue

_START = TimeValue.from_jd(2459000.5)


def _clock(wall, speed=1.0, **kwargs):
    return RunningClock(_START, speed, wall_clock=wall, **kwargs)


class TestUnstarted:
    def test_reads_start_time(self, wall):
        clock = _clock(wall)
        wall.advance(100.0)
        assert not clock.is_running
        assert clock.current() == _START
        assert clock.scaled_elapsed() == 0.0
        assert clock.run_time() == 0.0

    def test_defaults_to_now(self):
        clock = RunningClock()
        assert abs(clock.start_time - TimeValue.now()) < 60.0

    def test_speed_change_before_start(self, wall):
        clock = _clock(wall)
        clock.set_timer_speed(5.0)
        clock.start()
        wall.advance(2.0)
        assert clock.scaled_elapsed() == 10.0


class TestRunning:
    @pytest.mark.parametrize("speed", [1.0, 2.0, 60.0])
    def test_scaled_elapsed(self, wall, speed):
        clock = _clock(wall, speed)
        clock.start()
        wall.advance(10.0)
        assert clock.run_time() == 10.0
        assert clock.scaled_elapsed() == 10.0 * speed
        assert clock.current() - _START == pytest.approx(10.0 * speed, abs=1e-4)

    def test_zero_speed_freezes(self, wall):
        clock = _clock(wall, 0.0)
        clock.start()
        wall.advance(3600.0)
        assert clock.current() == _START

    def test_setting_zero_speed_holds_reading(self, wall):
        clock = _clock(wall, 3.0)
        clock.start()
        wall.advance(10.0)
        clock.set_timer_speed(0.0)
        frozen = clock.scaled_elapsed()
        frozen_at = clock.current()
        assert frozen == 30.0
        for step in (1.0, 1000.0, 86400.0):
            wall.advance(step)
            assert clock.scaled_elapsed() == frozen
            assert clock.current() == frozen_at

    def test_negative_speed_runs_backwards(self, wall):
        clock = _clock(wall, -1.0)
        clock.start()
        wall.advance(86400.0)
        assert clock.current().jd == pytest.approx(_START.jd - 1.0, abs=1e-9)

    def test_speed_change_is_continuous(self, wall):
        clock = _clock(wall, 2.0)
        clock.start()
        wall.advance(10.0)
        before = clock.scaled_elapsed()
        clock.set_timer_speed(-3.0)
        assert clock.scaled_elapsed() == before
        wall.advance(4.0)
        assert clock.scaled_elapsed() == 20.0 - 12.0
        assert clock.run_time() == 4.0

    @pytest.mark.parametrize("speed", [math.nan, math.inf, -math.inf])
    def test_non_finite_speed_rejected(self, wall, speed):
        clock = _clock(wall)
        with pytest.raises(ValueError):
            clock.set_timer_speed(speed)
        assert clock.timer_speed == 1.0
        with pytest.raises(ValueError):
            _clock(wall, speed)

    def test_set_start_time_rebases(self, wall):
        clock = _clock(wall, 10.0)
        clock.start()
        wall.advance(5.0)
        later = TimeValue.from_jd(2459100.5)
        clock.set_start_time(later)
        assert clock.current() == later
        wall.advance(1.0)
        assert clock.current() - later == pytest.approx(10.0, abs=1e-4)


class TestRestartPolicy:
    def test_keep_ignores_second_start(self, wall):
        clock = _clock(wall)
        clock.start()
        wall.advance(10.0)
        clock.start()
        assert clock.scaled_elapsed() == 10.0

    def test_reset_restarts(self, wall):
        clock = _clock(wall, restart_policy="reset")
        assert clock.restart_policy is RestartPolicy.RESET
        clock.start()
        wall.advance(10.0)
        clock.start()
        assert clock.scaled_elapsed() == 0.0
        wall.advance(1.0)
        assert clock.scaled_elapsed() == 1.0

    def test_repr(self, wall):
        clock = _clock(wall)
        assert "unstarted" in repr(clock)
        clock.start()
        assert "running" in repr(clock)
