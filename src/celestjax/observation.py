"""Cached observed coordinates of one sky position.

An :class:`Observation` links a catalogue position, an observer and a date
source.  The date source is either a fixed :class:`TimeValue` or a
:class:`~celestjax.clock.RunningClock`; with a clock, every read sees the
clock's current instant.  All observed quantities (azimuth, zenith
distance, hour angle and apparent position) come out of a single engine
call and are cached together.  The cache is keyed on the instant, so they
are recomputed only when the date source has moved on.

Replacing the position, observer, date source or engine drops the cache.
Mutating an :class:`ObserverState` in place does not; call
``update(force=True)`` after doing so.
"""

from __future__ import annotations

import logging
import math

from celestjax.angle import Angle
from celestjax.clock import RunningClock
from celestjax.coordinates import Frame, SkyPosition
from celestjax.exceptions import UnsupportedTransformError
from celestjax.observer import ObserverState, ObservingConditions
from celestjax.timevalue import TimeValue
from celestjax.transform import FrameTransformEngine, TransformResult

logger = logging.getLogger(__name__)


def _check_position(position: SkyPosition) -> SkyPosition:
    if position.frame is Frame.OBSERVED:
        raise UnsupportedTransformError(
            "An observation needs a catalogue position, not an OBSERVED one"
        )
    return position


class Observation:
    """Observed coordinates of *position* for *observer* at *date*.

    Args:
        position: Position being observed, in ICRS, CIRS or GALACTIC.
        observer: Site, as an :class:`ObserverState` or
            :class:`ObservingConditions`.
        date: Fixed instant or running clock giving the instant to observe at.
        engine: Engine performing the conversion.  Defaults to one without
            a correction table.

    Raises:
        UnsupportedTransformError: If *position* is already OBSERVED.

    Examples:
        ```python
        from celestjax import Frame, Observation, ObserverState, RunningClock, SkyPosition
        star = SkyPosition.from_degrees(150.0, 45.0, Frame.ICRS)
        clock = RunningClock(timer_speed=60.0)
        clock.start()
        obs = Observation(star, ObserverState(-70.0, -30.0, 2000.0), clock)
        obs.altitude.degrees   # recomputed only once the clock has advanced
        ```
    """

    def __init__(
        self,
        position: SkyPosition,
        observer: ObserverState | ObservingConditions,
        date: TimeValue | RunningClock,
        *,
        engine: FrameTransformEngine | None = None,
    ) -> None:
        self._position = _check_position(position)
        self._observer = observer
        self._date = date
        self._engine = FrameTransformEngine() if engine is None else engine
        self._cached_epoch: TimeValue | None = None
        self._cached: TransformResult | None = None

    # -- linked objects ------------------------------------------------------

    @property
    def position(self) -> SkyPosition:
        return self._position

    @position.setter
    def position(self, value: SkyPosition) -> None:
        self._position = _check_position(value)
        self._invalidate()

    @property
    def observer(self) -> ObserverState | ObservingConditions:
        return self._observer

    @observer.setter
    def observer(self, value: ObserverState | ObservingConditions) -> None:
        self._observer = value
        self._invalidate()

    @property
    def date(self) -> TimeValue | RunningClock:
        return self._date

    @date.setter
    def date(self, value: TimeValue | RunningClock) -> None:
        self._date = value
        self._invalidate()

    @property
    def engine(self) -> FrameTransformEngine:
        return self._engine

    @engine.setter
    def engine(self, value: FrameTransformEngine) -> None:
        self._engine = value
        self._invalidate()

    @property
    def epoch(self) -> TimeValue:
        """The instant the date source currently reads."""
        if isinstance(self._date, RunningClock):
            return self._date.current()
        return self._date

    # -- cache ---------------------------------------------------------------

    def _invalidate(self) -> None:
        self._cached_epoch = None
        self._cached = None

    def needs_update(self) -> bool:
        """Whether the date source has moved since the last computation."""
        return self._cached is None or self.epoch != self._cached_epoch

    def update(self, force: bool = False) -> TransformResult:
        """Recompute the observed quantities if the instant changed.

        Args:
            force: Recompute even when the cached instant is current.

        Returns:
            The full transform result the cached values are read from.
        """
        epoch = self.epoch
        if force or self._cached is None or epoch != self._cached_epoch:
            logger.debug("Observing %s at %s", self._position, epoch)
            self._cached = self._engine.transform(
                self._position, Frame.OBSERVED, epoch, self._observer
            )
            self._cached_epoch = epoch
        return self._cached

    # -- observed quantities -------------------------------------------------

    @property
    def observed(self) -> SkyPosition:
        """Observed position (azimuth, zenith distance)."""
        return self.update().position

    def azimuth_zenith(self) -> tuple[Angle, Angle]:
        """Azimuth and zenith distance read from the same instant."""
        observed = self.update().position
        return observed.x, observed.y

    @property
    def azimuth(self) -> Angle:
        """Azimuth, north through east."""
        return self.update().position.x

    @property
    def zenith(self) -> Angle:
        return self.update().position.y

    @property
    def altitude(self) -> Angle:
        return Angle(math.pi / 2.0 - self.zenith.radians)

    @property
    def hour_angle(self) -> Angle:
        return self.update().hour_angle

    @property
    def apparent(self) -> SkyPosition:
        """Refraction-shifted line of sight, in the frame of :attr:`position`."""
        return self.update().apparent

    def __repr__(self) -> str:
        return f"Observation({self._position!r}, date={self._date!r})"
