"""Frame tags and the sky-position value type.

A :class:`SkyPosition` is a pair of angles tagged with the
:class:`Frame` they are expressed in.  For the equatorial and galactic
frames the pair is (longitude, latitude): right ascension/declination or
galactic l/b.  For :attr:`Frame.OBSERVED` it is (azimuth, zenith
distance) with azimuth measured from north through east.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from celestjax import sofa
from celestjax.angle import Angle, as_angle
from celestjax.exceptions import UnsupportedTransformError


class Frame(enum.Enum):
    """Celestial reference frames supported by the transform engine.

    Attributes:
        ICRS: International Celestial Reference System (catalog frame).
        CIRS: Celestial Intermediate Reference System of the epoch.
        GALACTIC: Galactic longitude/latitude.
        OBSERVED: Topocentric azimuth/zenith distance including refraction.
    """

    ICRS = "icrs"
    CIRS = "cirs"
    GALACTIC = "galactic"
    OBSERVED = "observed"


@dataclass(frozen=True)
class SkyPosition:
    """Immutable direction on the sky in a named frame.

    Attributes:
        x: Longitude-like coordinate (RA, galactic l, or azimuth).
        y: Latitude-like coordinate (Dec, galactic b), or zenith distance
            for the observed frame.
        frame: Frame the coordinates are expressed in.

    Examples:
        ```python
        from celestjax import Frame, SkyPosition
        vega = SkyPosition.from_degrees(279.2347, 38.7837, Frame.ICRS)
        vega.x.to_hms_string()   # '18:36:56.328'
        ```
    """

    x: Angle
    y: Angle
    frame: Frame

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", as_angle(self.x))
        object.__setattr__(self, "y", as_angle(self.y))
        object.__setattr__(self, "frame", Frame(self.frame))
        y = self.y.radians
        if self.frame is Frame.OBSERVED:
            if not 0.0 <= y <= math.pi:
                raise ValueError(f"Zenith distance must lie in [0, pi], got {y}")
        elif not -math.pi / 2.0 <= y <= math.pi / 2.0:
            raise ValueError(f"Latitude must lie in [-pi/2, pi/2], got {y}")

    @classmethod
    def from_radians(cls, x: float, y: float, frame: Frame) -> SkyPosition:
        return cls(Angle(x), Angle(y), frame)

    @classmethod
    def from_degrees(cls, x: float, y: float, frame: Frame) -> SkyPosition:
        return cls(Angle.from_degrees(x), Angle.from_degrees(y), frame)

    def _spherical(self) -> tuple[float, float]:
        """Longitude/latitude, with zenith distance turned into altitude."""
        if self.frame is Frame.OBSERVED:
            return self.x.radians, math.pi / 2.0 - self.y.radians
        return self.x.radians, self.y.radians

    def separation(self, other: SkyPosition) -> Angle:
        """Great-circle angle between two positions in the same frame.

        Raises:
            UnsupportedTransformError: If the frames differ.
        """
        if other.frame is not self.frame:
            raise UnsupportedTransformError(
                f"Separation needs positions in one frame, got {self.frame.name} "
                f"and {other.frame.name}"
            )
        return Angle(sofa.angular_separation(*self._spherical(), *other._spherical()))

    def __str__(self) -> str:
        return f"{self.frame.name}({self.x.degrees:.9f}, {self.y.degrees:.9f}) deg"
