"""A scaled, wall-clock driven source of :class:`TimeValue` instants.

:class:`RunningClock` is meant for display and tracking loops that want
"now" to advance faster, slower or backwards relative to real time.  The
clock is either unstarted (its reading is the start time) or running.
Changing the speed folds the scaled time elapsed so far into an
accumulator, so readings stay continuous across speed changes.

``RunningClock`` is not thread-safe: a :meth:`~RunningClock.set_timer_speed`
racing with a read may observe a half-updated state.  Callers that share
a clock between threads must synchronise access themselves.
"""

from __future__ import annotations

import enum
import math
import time
from collections.abc import Callable

from celestjax.timevalue import TimeValue


class RestartPolicy(enum.Enum):
    """What :meth:`RunningClock.start` does when the clock already runs.

    Attributes:
        KEEP: Ignore the call; the reference instant is unchanged.
        RESET: Restart from zero elapsed time at the current wall time.
    """

    KEEP = "keep"
    RESET = "reset"


def _check_speed(speed: float) -> float:
    speed = float(speed)
    if not math.isfinite(speed):
        raise ValueError(f"Timer speed must be finite, got {speed}")
    return speed


class RunningClock:
    """A clock that advances at a multiple of real elapsed time.

    Args:
        start_time: Instant the clock reads when no time has elapsed.
            Defaults to the current UTC time.
        timer_speed: Scaled seconds per wall-clock second.  ``0`` freezes
            the clock and negative values run it backwards.
        restart_policy: Behaviour of :meth:`start` on a running clock.
        wall_clock: Monotonic seconds source, replaceable for testing.

    Examples:
        ```python
        from celestjax import RunningClock, TimeValue
        clock = RunningClock(TimeValue.from_jd(2459000.5), timer_speed=60.0)
        clock.start()
        clock.current()   # advances one minute per real second
        ```
    """

    def __init__(
        self,
        start_time: TimeValue | None = None,
        timer_speed: float = 1.0,
        *,
        restart_policy: RestartPolicy | str = RestartPolicy.KEEP,
        wall_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._start_time = TimeValue.now() if start_time is None else start_time
        self._speed = _check_speed(timer_speed)
        self._policy = RestartPolicy(restart_policy)
        self._wall_clock = wall_clock
        self._reference: float | None = None
        self._accumulated = 0.0

    @property
    def is_running(self) -> bool:
        return self._reference is not None

    @property
    def timer_speed(self) -> float:
        return self._speed

    @property
    def restart_policy(self) -> RestartPolicy:
        return self._policy

    @property
    def start_time(self) -> TimeValue:
        return self._start_time

    def start(self) -> None:
        """Begin advancing from the current wall-clock instant."""
        if self.is_running and self._policy is RestartPolicy.KEEP:
            return
        self._reference = self._wall_clock()
        self._accumulated = 0.0

    def _elapsed_at(self, now: float) -> float:
        if self._reference is None:
            return self._accumulated
        return self._accumulated + (now - self._reference) * self._speed

    def run_time(self) -> float:
        """Unscaled wall-clock seconds since the current speed took effect."""
        if self._reference is None:
            return 0.0
        return self._wall_clock() - self._reference

    def scaled_elapsed(self) -> float:
        """Scaled seconds elapsed since :meth:`start`."""
        return self._elapsed_at(self._wall_clock())

    def set_timer_speed(self, speed: float) -> None:
        """Change the speed without a jump in the clock's reading.

        Args:
            speed: New scaled seconds per wall-clock second.
        """
        speed = _check_speed(speed)
        if self._reference is not None:
            now = self._wall_clock()
            self._accumulated = self._elapsed_at(now)
            self._reference = now
        self._speed = speed

    def set_start_time(self, start_time: TimeValue) -> None:
        """Rebase the clock so that it reads *start_time* from now on."""
        self._start_time = start_time
        self._accumulated = 0.0
        if self._reference is not None:
            self._reference = self._wall_clock()

    def current(self) -> TimeValue:
        """The clock's reading: start time plus the scaled elapsed seconds."""
        return self._start_time + self.scaled_elapsed()

    def __repr__(self) -> str:
        state = "running" if self.is_running else "unstarted"
        return (
            f"RunningClock(start_time={self._start_time!r}, "
            f"timer_speed={self._speed}, {state})"
        )
