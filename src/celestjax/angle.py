"""Angle value type with sexagesimal parsing and formatting.

An :class:`Angle` always stores radians.  Degrees, hours and arcseconds
are views computed on demand, and sexagesimal forms (``HH:MM:SS.sss`` or
``+DD:MM:SS.ss``) are produced by rounding the seconds field to a fixed
number of decimals and carrying any overflow into minutes and
hours/degrees.

Strings are split on a configurable delimiter.  When no delimiter is
given, ``":"`` is tried first and whitespace second.  A leading sign
applies to the whole value, so ``"-00:30:00"`` is minus half a degree.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from celestjax.constants import (
    DEG2RAD,
    HOUR2RAD,
    RAD2AS,
    RAD2DEG,
    RAD2HOUR,
)
from celestjax.exceptions import AngleFormatError

_TWO_PI = 2.0 * math.pi
_DEFAULT_DELIMITERS = (":", " ")


def _split_fields(text: str, delimiter: str | None) -> list[str]:
    text = text.strip()
    if not text:
        raise AngleFormatError("Empty angle string")
    if delimiter is not None:
        fields = text.split() if delimiter.isspace() else text.split(delimiter)
        return [f.strip() for f in fields]
    for candidate in _DEFAULT_DELIMITERS:
        fields = text.split() if candidate == " " else text.split(candidate)
        if len(fields) > 1:
            return [f.strip() for f in fields]
    return [text]


def _sexagesimal_to_units(value: str | Sequence[float], delimiter: str | None) -> float:
    """Convert a sexagesimal string or vector to hours/degrees."""
    if isinstance(value, str):
        fields = _split_fields(value, delimiter)
        if not 1 <= len(fields) <= 3:
            raise AngleFormatError(f"Expected 1-3 sexagesimal fields, got {value!r}")
        negative = fields[0].startswith("-")
        try:
            numbers = [float(f) for f in fields]
        except ValueError as err:
            raise AngleFormatError(f"Malformed sexagesimal angle {value!r}") from err
        sign = -1.0 if negative else 1.0
    else:
        numbers = [float(v) for v in value]
        if len(numbers) == 4:
            sign = -1.0 if numbers[0] < 0 else 1.0
            numbers = numbers[1:]
        elif 1 <= len(numbers) <= 3:
            sign = math.copysign(1.0, numbers[0])
        else:
            raise AngleFormatError(f"Expected 1-4 sexagesimal components, got {len(numbers)}")

    if any(not math.isfinite(n) for n in numbers):
        raise AngleFormatError(f"Non-finite sexagesimal component in {value!r}")
    for n in numbers[1:]:
        if not 0.0 <= n < 60.0:
            raise AngleFormatError(
                f"Minutes and seconds must lie in [0, 60), got {n} in {value!r}"
            )

    total = abs(numbers[0])
    for power, n in enumerate(numbers[1:], start=1):
        total += n / 60.0**power
    return sign * total


def _round_sexagesimal(units: float, ndp: int) -> tuple[int, int, int, float]:
    """Split hours/degrees into ``(sign, whole, minutes, seconds)``.

    Seconds are rounded to *ndp* decimals on an integer grid so that a
    rounded value of 60 s carries into the minutes field.
    """
    if ndp < 0:
        raise ValueError(f"Number of decimal places must be non-negative, got {ndp}")
    sign = -1 if units < 0 else 1
    scale = 10**ndp
    ticks = round(abs(units) * 3600.0 * scale)
    whole_seconds, frac_ticks = divmod(ticks, scale)
    minutes_total, seconds = divmod(whole_seconds, 60)
    whole, minutes = divmod(minutes_total, 60)
    return sign, whole, minutes, seconds + frac_ticks / scale


def _format_sexagesimal(
    parts: tuple[int, int, int, float], delimiter: str, ndp: int, plus_sign: bool
) -> str:
    sign, whole, minutes, seconds = parts
    if sign < 0:
        prefix = "-"
    else:
        prefix = "+" if plus_sign else ""
    width = ndp + 3 if ndp > 0 else 2
    return (
        f"{prefix}{whole:02d}{delimiter}{minutes:02d}{delimiter}"
        f"{seconds:0{width}.{ndp}f}"
    )


class Angle:
    """Scalar angle stored in radians.

    Angles are immutable.  Equality compares the stored radians exactly,
    use :meth:`isclose` for tolerance-based comparison.

    Args:
        radians: Angle value in radians.

    Examples:
        ```python
        from celestjax import Angle
        ra = Angle.from_hms("10:00:00")
        ra.degrees            # 150.0
        ra.to_hms_string()    # '10:00:00.000'
        ```
    """

    __slots__ = ("_rad",)

    def __init__(self, radians: float) -> None:
        self._rad = float(radians)

    @classmethod
    def from_radians(cls, value: float) -> Angle:
        return cls(value)

    @classmethod
    def from_degrees(cls, value: float) -> Angle:
        return cls(float(value) * DEG2RAD)

    @classmethod
    def from_hours(cls, value: float) -> Angle:
        return cls(float(value) * HOUR2RAD)

    @classmethod
    def from_arcseconds(cls, value: float) -> Angle:
        return cls(float(value) / RAD2AS)

    @classmethod
    def from_hms(
        cls, value: str | Sequence[float], delimiter: str | None = None
    ) -> Angle:
        """Parse hours, minutes, seconds.

        Args:
            value: String such as ``"10:30:15.5"`` or ``"10 30 15.5"``, or a
                vector ``(h, m, s)`` / ``(sign, h, m, s)``.
            delimiter: Field separator.  ``None`` tries ``":"`` then
                whitespace.

        Returns:
            Parsed angle.

        Raises:
            AngleFormatError: If the value is malformed or minutes/seconds
                fall outside ``[0, 60)``.
        """
        return cls.from_hours(_sexagesimal_to_units(value, delimiter))

    @classmethod
    def from_dms(
        cls, value: str | Sequence[float], delimiter: str | None = None
    ) -> Angle:
        """Parse degrees, arcminutes, arcseconds.

        Same rules as :meth:`from_hms`, with the first field in degrees.
        """
        return cls.from_degrees(_sexagesimal_to_units(value, delimiter))

    @property
    def radians(self) -> float:
        return self._rad

    @property
    def degrees(self) -> float:
        return self._rad * RAD2DEG

    @property
    def hours(self) -> float:
        return self._rad * RAD2HOUR

    @property
    def arcseconds(self) -> float:
        return self._rad * RAD2AS

    def wrapped(self) -> Angle:
        """Return the angle normalised to ``[0, 2π)``."""
        wrapped = math.fmod(self._rad, _TWO_PI)
        if wrapped < 0.0:
            wrapped += _TWO_PI
        # fmod of a tiny negative value can round up to exactly 2π
        if wrapped >= _TWO_PI:
            wrapped = 0.0
        return Angle(wrapped)

    def hms_vector(self, ndp: int = 3) -> tuple[int, int, int, float]:
        """Return ``(sign, hours, minutes, seconds)`` with rounded seconds."""
        return _round_sexagesimal(self.hours, ndp)

    def dms_vector(self, ndp: int = 2) -> tuple[int, int, int, float]:
        """Return ``(sign, degrees, arcminutes, arcseconds)`` with rounded seconds."""
        return _round_sexagesimal(self.degrees, ndp)

    def to_hms_string(self, delimiter: str = ":", ndp: int = 3) -> str:
        return _format_sexagesimal(self.hms_vector(ndp), delimiter, ndp, plus_sign=False)

    def to_dms_string(self, delimiter: str = ":", ndp: int = 2) -> str:
        return _format_sexagesimal(self.dms_vector(ndp), delimiter, ndp, plus_sign=True)

    def isclose(self, other: Angle | float, abs_tol: float = 1e-12) -> bool:
        return math.isclose(self._rad, float(other), rel_tol=0.0, abs_tol=abs_tol)

    def __float__(self) -> float:
        return self._rad

    def __neg__(self) -> Angle:
        return Angle(-self._rad)

    def __add__(self, other: Angle) -> Angle:
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._rad + other._rad)

    def __sub__(self, other: Angle) -> Angle:
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._rad - other._rad)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Angle):
            return NotImplemented
        return self._rad == other._rad

    def __hash__(self) -> int:
        return hash(self._rad)

    def __repr__(self) -> str:
        return f"Angle({self._rad!r})"

    def __str__(self) -> str:
        return f"{self.degrees:.9f} deg"


def as_angle(value: Angle | float, degrees: bool = False) -> Angle:
    """Coerce *value* to an :class:`Angle`.

    Plain numbers are interpreted as radians unless *degrees* is ``True``.
    """
    if isinstance(value, Angle):
        return value
    return Angle.from_degrees(value) if degrees else Angle(value)
