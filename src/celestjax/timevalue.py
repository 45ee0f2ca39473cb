"""The ``TimeValue`` class representing a UTC instant.

A ``TimeValue`` stores a two-part Julian Date: an integer JD day number
and the fraction of that (noon-based) JD day.  The split keeps civil-time
precision well below a microsecond, which a single double cannot do near
JD 2.4 million, while the scalar :attr:`TimeValue.jd` view is exact for
values created with :meth:`TimeValue.from_jd`.

Calendar conversion uses the proleptic Gregorian calendar (no Julian
calendar cutover) with the integer algorithm of Fliegel & Van Flandern.
Julian Dates below :data:`~celestjax.constants.JD_FLOOR` are rejected.

The instant is interpreted as UTC.  TT and TDB follow from the leap
second table built into ERFA; UT1 needs a UT1-UTC offset, normally taken
from an :class:`~celestjax.eop.EarthOrientationTable`.

References:
    1. H. F. Fliegel and T. C. Van Flandern, "A Machine Algorithm for
       Processing Calendar Dates", *Communications of the ACM* 11, 1968.
"""

from __future__ import annotations

import datetime
import enum
import math
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

from celestjax import sofa
from celestjax.angle import Angle, as_angle
from celestjax.constants import AS2RAD, JD_FLOOR, JD_MJD_OFFSET, SECONDS_PER_DAY
from celestjax.exceptions import InvalidObserverStateError, OutOfRangeError

if TYPE_CHECKING:
    from celestjax.eop import EarthOrientationTable

_ISO_PATTERN = re.compile(
    r"^(-?\d{4,})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2}(?:\.\d*)?))?)?"
    r"\s*(?:Z|UTC|\+00:?00)?$"
)

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class SiderealKind(enum.Enum):
    """Sidereal time variant.

    Attributes:
        MEAN: Greenwich mean sidereal time.
        APPARENT: Greenwich apparent sidereal time (mean plus the equation of
            the equinoxes).
        LOCAL: Local apparent sidereal time (apparent plus east longitude).
    """

    MEAN = "mean"
    APPARENT = "apparent"
    LOCAL = "local"


def _is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def gregorian_to_jdn(year: int, month: int, day: int) -> int:
    """Julian Day Number (JD at noon) of a proleptic Gregorian date."""
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def jdn_to_gregorian(jdn: int) -> tuple[int, int, int]:
    """Inverse of :func:`gregorian_to_jdn`, valid for ``jdn >= 0``."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + m // 10
    return year, month, day


def _validate_date(year: int, month: int, day: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be in 1..12, got {month}")
    days = _DAYS_IN_MONTH[month - 1] + (1 if month == 2 and _is_leap_year(year) else 0)
    if not 1 <= day <= days:
        raise ValueError(f"Day must be in 1..{days} for {year}-{month:02d}, got {day}")


class TimeValue:
    """A UTC instant stored as a two-part Julian Date.

    Instances are immutable.  Use the ``from_*`` class methods to build
    one and the views (:attr:`jd`, :meth:`to_mjd`, :meth:`to_gregorian`,
    :meth:`day_fraction`) to read it back.

    Examples:
        ```python
        from celestjax import TimeValue
        t = TimeValue.from_gregorian(2020, 5, 31)
        t.jd          # 2459000.5
        t.to_mjd()    # 59000.0
        ```
    """

    __slots__ = ("_day", "_frac")

    def __init__(self, day: int, fraction: float) -> None:
        # fraction is normalised into [0, 1) with the carry applied to day
        carry = math.floor(fraction)
        day = int(day) + int(carry)
        fraction = float(fraction) - carry
        if fraction >= 1.0:
            day += 1
            fraction = 0.0
        if day + fraction < JD_FLOOR:
            raise OutOfRangeError(
                f"Julian Date {day + fraction} is before the calendar floor JD {JD_FLOOR}"
            )
        self._day = day
        self._frac = fraction

    # -- construction --------------------------------------------------------

    @classmethod
    def from_jd(cls, jd: float) -> TimeValue:
        """Create a TimeValue from a scalar Julian Date.

        Raises:
            OutOfRangeError: If *jd* is not finite or below the calendar floor.
        """
        jd = float(jd)
        if not math.isfinite(jd):
            raise OutOfRangeError(f"Julian Date must be finite, got {jd}")
        if jd < JD_FLOOR:
            raise OutOfRangeError(
                f"Julian Date {jd} is before the calendar floor JD {JD_FLOOR}"
            )
        day = math.floor(jd)
        return cls(day, jd - day)

    @classmethod
    def from_mjd(cls, mjd: float) -> TimeValue:
        mjd = float(mjd)
        if not math.isfinite(mjd):
            raise OutOfRangeError(f"Modified Julian Date must be finite, got {mjd}")
        # MJD days start at midnight, half a JD day after the JD boundary
        day = math.floor(mjd)
        return cls(day + 2400000, (mjd - day) + 0.5)

    @classmethod
    def from_gregorian(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: float = 0.0,
    ) -> TimeValue:
        """Create a TimeValue from proleptic Gregorian calendar components.

        Args:
            year: Astronomical year (year 0 = 1 BC).
            month: Month, 1-12.
            day: Day of month.
            hour: Hour, 0-23.
            minute: Minute, 0-59.
            second: Seconds, may be fractional.

        Raises:
            ValueError: If month, day or time-of-day fields are out of bounds.
            OutOfRangeError: If the date falls before the calendar floor.
        """
        year, month, day, hour, minute = int(year), int(month), int(day), int(hour), int(minute)
        _validate_date(year, month, day)
        if not 0 <= hour < 24 or not 0 <= minute < 60 or not 0.0 <= second < 61.0:
            raise ValueError(
                f"Invalid time of day {hour:02d}:{minute:02d}:{second}"
            )
        jdn = gregorian_to_jdn(year, month, day)
        seconds = hour * 3600.0 + minute * 60.0 + float(second)
        if seconds < SECONDS_PER_DAY / 2.0:
            return cls(jdn - 1, (seconds + SECONDS_PER_DAY / 2.0) / SECONDS_PER_DAY)
        return cls(jdn, (seconds - SECONDS_PER_DAY / 2.0) / SECONDS_PER_DAY)

    @classmethod
    def from_gregorian_vector(cls, vector: Sequence[float]) -> TimeValue:
        """Create a TimeValue from ``[Y, M, D]``, ``[Y, M, D, day_fraction]``
        or ``[Y, M, D, h, m, s]`` (``[Y, M, D, h]`` and ``[Y, M, D, h, m]``
        are also accepted).

        A four-element vector whose last component is fractional is taken as
        the fraction of the civil day since midnight.
        """
        n = len(vector)
        if not 3 <= n <= 6:
            raise ValueError(f"Gregorian vector must have 3-6 components, got {n}")
        year, month, day = (int(v) for v in vector[:3])
        if n == 4 and float(vector[3]) != int(vector[3]):
            fraction = float(vector[3])
            if not 0.0 <= fraction < 1.0:
                raise ValueError(f"Day fraction must be in [0, 1), got {fraction}")
            hour, rem = divmod(fraction * SECONDS_PER_DAY, 3600.0)
            minute, second = divmod(rem, 60.0)
            return cls.from_gregorian(year, month, day, int(hour), int(minute), second)
        rest = list(vector[3:]) + [0] * (6 - n)
        return cls.from_gregorian(year, month, day, int(rest[0]), int(rest[1]), float(rest[2]))

    @classmethod
    def from_packed_gregorian(cls, value: float) -> TimeValue:
        """Create a TimeValue from a date packed as ``YYYYMMDD.f``.

        The integer part holds the calendar date and the fractional part is
        the fraction of the civil day since midnight, so ``20200531.75`` is
        2020-05-31 18:00 UTC.

        Raises:
            ValueError: If *value* is negative or not finite, or the packed
                month or day is out of range.
        """
        value = float(value)
        if not math.isfinite(value) or value < 0.0:
            raise ValueError(f"Packed Gregorian date must be finite and non-negative, got {value}")
        whole = math.floor(value)
        fraction = value - whole
        packed = int(whole)
        year, month, day = packed // 10000, packed // 100 % 100, packed % 100
        return cls.from_gregorian_vector([year, month, day, fraction])

    @classmethod
    def from_string(cls, text: str) -> TimeValue:
        """Parse an ISO 8601 style UTC timestamp such as
        ``"2020-05-31T12:30:15.25Z"`` or ``"2020-05-31"``.
        """
        match = _ISO_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Unrecognised time string {text!r}")
        year, month, day = int(match[1]), int(match[2]), int(match[3])
        hour = int(match[4]) if match[4] else 0
        minute = int(match[5]) if match[5] else 0
        second = float(match[6]) if match[6] else 0.0
        return cls.from_gregorian(year, month, day, hour, minute, second)

    @classmethod
    def now(cls) -> TimeValue:
        """Current UTC time from the system clock."""
        now = datetime.datetime.now(datetime.timezone.utc)
        return cls.from_gregorian(
            now.year,
            now.month,
            now.day,
            now.hour,
            now.minute,
            now.second + now.microsecond * 1e-6,
        )

    # -- views ---------------------------------------------------------------

    @property
    def jd(self) -> float:
        return self._day + self._frac

    @property
    def mjd(self) -> float:
        return self.to_mjd()

    @property
    def day_number(self) -> int:
        """Integer part of the Julian Date."""
        return self._day

    def jd_parts(self) -> tuple[float, float]:
        """Two-part Julian Date ``(day, fraction)`` in ERFA's convention."""
        return float(self._day), self._frac

    def to_mjd(self) -> float:
        return (self._day - JD_MJD_OFFSET) + self._frac

    def day_fraction(self) -> float:
        """Fraction of the Julian day (measured from noon)."""
        return self._frac

    def _civil(self) -> tuple[int, float]:
        """JD day number of the civil date and seconds since its midnight."""
        if self._frac >= 0.5:
            jdn, since_midnight = self._day + 1, self._frac - 0.5
        else:
            jdn, since_midnight = self._day, self._frac + 0.5
        seconds = round(since_midnight * SECONDS_PER_DAY, 9)
        if seconds >= SECONDS_PER_DAY:
            jdn, seconds = jdn + 1, seconds - SECONDS_PER_DAY
        return jdn, seconds

    def to_gregorian(self) -> tuple[int, int, int, int, int, float]:
        """Return ``(year, month, day, hour, minute, second)``."""
        jdn, seconds = self._civil()
        year, month, day = jdn_to_gregorian(jdn)
        hour = int(seconds // 3600.0)
        minute = int((seconds - hour * 3600.0) // 60.0)
        second = seconds - hour * 3600.0 - minute * 60.0
        return year, month, day, hour, minute, second

    def to_gregorian_vector(self) -> tuple[int, int, int, float]:
        """Return ``(year, month, day, fraction of civil day)``."""
        jdn, seconds = self._civil()
        year, month, day = jdn_to_gregorian(jdn)
        return year, month, day, seconds / SECONDS_PER_DAY

    def to_packed_gregorian(self) -> float:
        """Return the date packed as ``YYYYMMDD.f`` (see :meth:`from_packed_gregorian`)."""
        year, month, day, fraction = self.to_gregorian_vector()
        if year < 0:
            raise OutOfRangeError(f"Year {year} cannot be packed as YYYYMMDD")
        return year * 10000.0 + month * 100.0 + day + fraction

    def seconds_since_midnight(self, utc_offset: float = 0.0) -> float:
        """Seconds since the last civil midnight.

        Args:
            utc_offset: Local offset from UTC in hours (daylight saving
                included).  Default: 0.0, i.e. UTC midnight.
        """
        return (self + utc_offset * 3600.0)._civil()[1]

    def time_of_day(self, utc_offset: float = 0.0) -> float:
        """Local clock time packed as ``HHMMSS.s``, e.g. ``183015.5`` for 18:30:15.5."""
        seconds = self.seconds_since_midnight(utc_offset)
        hour = int(seconds // 3600.0)
        minute = int((seconds - hour * 3600.0) // 60.0)
        return hour * 10000.0 + minute * 100.0 + (seconds - hour * 3600.0 - minute * 60.0)

    def to_datetime(self) -> datetime.datetime:
        """Timezone-aware UTC :class:`datetime.datetime` (years 1-9999)."""
        year, month, day, hour, minute, second = self.to_gregorian()
        whole = int(second)
        micro = int(round((second - whole) * 1e6))
        if micro == 1_000_000:
            whole, micro = whole + 1, 0
        base = datetime.datetime(year, month, day, hour, minute, tzinfo=datetime.timezone.utc)
        return base + datetime.timedelta(seconds=whole, microseconds=micro)

    # -- time scales ---------------------------------------------------------

    def tt_jd(self) -> tuple[float, float]:
        """Two-part Terrestrial Time Julian Date."""
        return sofa.utc_to_tt(*self.jd_parts())

    def ut1_jd(self, dut1: float = 0.0) -> tuple[float, float]:
        """Two-part UT1 Julian Date for a UT1-UTC offset *dut1* [s]."""
        return sofa.utc_to_ut1(*self.jd_parts(), dut1)

    def tdb_jd(self) -> tuple[float, float]:
        """Two-part Barycentric Dynamical Time Julian Date (geocentre)."""
        tt1, tt2 = self.tt_jd()
        return sofa.tt_to_tdb(tt1, tt2)

    def sidereal_time(
        self,
        kind: SiderealKind | str = SiderealKind.APPARENT,
        corrections: EarthOrientationTable | None = None,
        longitude: Angle | float | None = None,
    ) -> Angle:
        """Sidereal time at this instant.

        Args:
            kind: ``MEAN``, ``APPARENT`` or ``LOCAL``.
            corrections: Table supplying ΔUT1 and the nutation offsets.
                Without one, UT1 is taken equal to UTC and no offsets are
                applied.
            longitude: East longitude (Angle, or radians), required for
                ``LOCAL``.

        Returns:
            Sidereal time as an Angle in ``[0, 2π)``.

        Raises:
            InvalidObserverStateError: If ``LOCAL`` is requested without a
                longitude.
            OutOfRangeError: If the table's boundary policy rejects the epoch.
        """
        kind = SiderealKind(kind)
        dut1 = dpsi = deps = 0.0
        if corrections is not None:
            record = corrections.lookup(self)
            dut1, dpsi, deps = record.dut1, record.dpsi * AS2RAD, record.deps * AS2RAD

        ut11, ut12 = self.ut1_jd(dut1)
        tt1, tt2 = self.tt_jd()
        if kind is SiderealKind.MEAN:
            return Angle(sofa.mean_sidereal_time(ut11, ut12, tt1, tt2))

        gast = sofa.apparent_sidereal_time(ut11, ut12, tt1, tt2, dpsi, deps)
        if kind is SiderealKind.APPARENT:
            return Angle(gast)
        if longitude is None:
            raise InvalidObserverStateError("Local sidereal time requires a longitude")
        return Angle(gast + as_angle(longitude).radians).wrapped()

    # -- arithmetic and comparison ---------------------------------------------

    def __add__(self, seconds: float) -> TimeValue:
        if isinstance(seconds, TimeValue):
            return NotImplemented
        whole_days, rem = divmod(float(seconds), SECONDS_PER_DAY)
        return TimeValue(self._day + int(whole_days), self._frac + rem / SECONDS_PER_DAY)

    def __sub__(self, other):
        if isinstance(other, TimeValue):
            return (self._day - other._day) * SECONDS_PER_DAY + (
                self._frac - other._frac
            ) * SECONDS_PER_DAY
        return self + (-float(other))

    def _key(self) -> tuple[int, float]:
        return self._day, self._frac

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeValue):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: TimeValue) -> bool:
        return self._key() < other._key()

    def __le__(self, other: TimeValue) -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: TimeValue) -> bool:
        return self._key() > other._key()

    def __ge__(self, other: TimeValue) -> bool:
        return self._key() >= other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        year, month, day, hour, minute, second = self.to_gregorian()
        return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:06.3f}Z"

    def __repr__(self) -> str:
        return f"TimeValue(jd={self.jd!r})"
