"""Tests for the cached Observation."""

from __future__ import annotations

import math
from unittest.mock import patch

import pytest

from celestjax.clock import RunningClock
from celestjax.coordinates import Frame, SkyPosition
from celestjax.eop import static_table
from celestjax.exceptions import UnsupportedTransformError
from celestjax.observation import Observation
from celestjax.observer import ObserverState
from celestjax.timevalue import TimeValue
from celestjax.transform import FrameTransformEngine

_EPOCH = TimeValue.from_jd(2459000.5)


@pytest.fixture
def engine():
    return FrameTransformEngine(static_table(dut1=-0.2, xp=0.1, yp=0.3))


@pytest.fixture
def site():
    return ObserverState(-70.0, -30.0, 2000.0)


@pytest.fixture
def star():
    return SkyPosition.from_degrees(150.0, 45.0, Frame.ICRS)


@pytest.fixture
def clock(wall):
    clock = RunningClock(_EPOCH, 60.0, wall_clock=wall)
    clock.start()
    return clock


def _spy(engine):
    return patch.object(engine, "transform", wraps=engine.transform)


class TestFixedDate:
    def test_matches_engine(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        expected = engine.transform(star, Frame.OBSERVED, _EPOCH, site)
        assert obs.observed == expected.position
        assert obs.azimuth == expected.position.x
        assert obs.zenith == expected.position.y
        assert obs.hour_angle == expected.hour_angle
        assert obs.apparent == expected.apparent
        assert obs.apparent.frame is Frame.ICRS

    def test_altitude_complements_zenith(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        assert obs.altitude.radians == pytest.approx(math.pi / 2 - obs.zenith.radians, abs=1e-15)

    def test_computed_once(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        with _spy(engine) as transform:
            obs.azimuth
            obs.zenith
            obs.hour_angle
            obs.apparent
            obs.azimuth_zenith()
        assert transform.call_count == 1
        assert not obs.needs_update()

    def test_default_engine(self, site, star):
        obs = Observation(star, site, _EPOCH)
        expected = FrameTransformEngine().convert(star, Frame.OBSERVED, _EPOCH, site)
        assert obs.observed == expected

    def test_observed_position_rejected(self, site):
        seen = SkyPosition.from_degrees(10.0, 20.0, Frame.OBSERVED)
        with pytest.raises(UnsupportedTransformError):
            Observation(seen, site, _EPOCH)


class TestRunningDate:
    def test_reads_clock(self, engine, site, star, clock, wall):
        obs = Observation(star, site, clock, engine=engine)
        wall.advance(10.0)
        assert obs.epoch == clock.current()
        expected = engine.convert(star, Frame.OBSERVED, clock.current(), site)
        assert obs.observed == expected

    def test_recomputes_only_when_date_moves(self, engine, site, star, clock, wall):
        obs = Observation(star, site, clock, engine=engine)
        with _spy(engine) as transform:
            first = obs.azimuth
            obs.zenith
            assert transform.call_count == 1

            wall.advance(60.0)
            assert obs.needs_update()
            moved = obs.azimuth
            obs.zenith
            assert transform.call_count == 2
        # an hour of sky time moves the star noticeably
        assert abs(moved.radians - first.radians) > 1e-3

    def test_frozen_clock_keeps_cache(self, engine, site, star, clock, wall):
        obs = Observation(star, site, clock, engine=engine)
        clock.set_timer_speed(0.0)
        with _spy(engine) as transform:
            obs.update()
            wall.advance(3600.0)
            assert not obs.needs_update()
            obs.altitude
        assert transform.call_count == 1

    def test_azimuth_zenith_share_instant(self, engine, site, star, clock, wall):
        obs = Observation(star, site, clock, engine=engine)
        wall.advance(5.0)
        azimuth, zenith = obs.azimuth_zenith()
        expected = engine.convert(star, Frame.OBSERVED, clock.current(), site)
        assert (azimuth, zenith) == (expected.x, expected.y)


class TestInvalidation:
    def test_new_observer_recomputes(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        before = obs.observed
        obs.observer = ObserverState(20.0, 50.0, 100.0)
        assert obs.needs_update()
        assert obs.observed != before

    def test_new_position_recomputes(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        before = obs.observed
        obs.position = SkyPosition.from_degrees(160.0, 40.0, Frame.ICRS)
        assert obs.observed != before
        with pytest.raises(UnsupportedTransformError):
            obs.position = before

    def test_new_date_recomputes(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        before = obs.observed
        obs.date = _EPOCH + 3600.0
        assert obs.observed != before

    def test_force_after_in_place_change(self, engine, site, star):
        obs = Observation(star, site, _EPOCH, engine=engine)
        before = obs.observed
        site.set_pressure(0.0)
        assert obs.observed == before
        obs.update(force=True)
        assert obs.zenith.radians > before.y.radians
