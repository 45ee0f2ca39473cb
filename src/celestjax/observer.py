"""Ground observer state and observing conditions.

:class:`ObserverState` is the mutable description of a site: geodetic
position plus the atmosphere used by the refraction step of the observed
frame.  Fields that are never set explicitly follow a standard
atmosphere: the pressure is derived from the elevation with an
isothermal barometric formula, and the temperature is the sea-level
value.  Setting a field pins it; setting the pressure back to the ``-1.0``
sentinel (or ``None``) returns it to the derived value.

:class:`ObservingConditions` is the frozen configuration handed to the
frame engine.  It can be built from an observer plus a correction table,
or directly from raw parameters; both paths feed the same conversion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from celestjax.angle import Angle, as_angle
from celestjax.constants import (
    AS2RAD,
    BAROMETRIC_SCALE,
    CELSIUS_TO_KELVIN,
    DEFAULT_LATITUDE_DEG,
    DEFAULT_WAVELENGTH_UM,
    SEA_LEVEL_PRESSURE_HPA,
    SEA_LEVEL_TEMP_K,
)
from celestjax.eop import EarthOrientationRecord, EarthOrientationTable, EOPExtrapolation
from celestjax.exceptions import InvalidObserverStateError

PRESSURE_UNSET = -1.0
"""Sentinel pressure meaning "derive from elevation"."""

SEA_LEVEL_TEMP_C = SEA_LEVEL_TEMP_K - CELSIUS_TO_KELVIN
"""Sea-level temperature of the standard atmosphere [deg C]."""


def estimate_pressure_hpa(elevation: float) -> float:
    """Standard-atmosphere pressure at *elevation* metres [hPa].

    Uses ``p = p0 * exp(-h / (29.3 * T0))`` with ``p0 = 1013.25 hPa`` and
    ``T0 = 288.2 K``.
    """
    return SEA_LEVEL_PRESSURE_HPA * math.exp(-elevation / (BAROMETRIC_SCALE * SEA_LEVEL_TEMP_K))


def _check_latitude(latitude: Angle) -> Angle:
    if not -math.pi / 2.0 <= latitude.radians <= math.pi / 2.0:
        raise InvalidObserverStateError(
            f"Latitude must lie within [-90, 90] degrees, got {latitude.degrees}"
        )
    return latitude


def _check_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise InvalidObserverStateError(f"{name} must be finite, got {value}")
    return value


def _check_humidity(value: float) -> float:
    value = _check_finite("Relative humidity", value)
    if not 0.0 <= value <= 1.0:
        raise InvalidObserverStateError(f"Relative humidity must lie in [0, 1], got {value}")
    return value


def _check_temperature(value: float) -> float:
    value = _check_finite("Temperature", value)
    if value < -CELSIUS_TO_KELVIN:
        raise InvalidObserverStateError(f"Temperature below absolute zero: {value} C")
    return value


def _check_wavelength(value: float) -> float:
    value = _check_finite("Wavelength", value)
    if value <= 0.0:
        raise InvalidObserverStateError(f"Wavelength must be positive, got {value} um")
    return value


def _check_pressure(value: float | None) -> float | None:
    if value is None or value == PRESSURE_UNSET:
        return None
    value = _check_finite("Pressure", value)
    if value < 0.0:
        raise InvalidObserverStateError(f"Pressure must be non-negative, got {value} hPa")
    return value


class ObserverState:
    """A ground observer: geodetic position and local atmosphere.

    Args:
        longitude: East longitude (degrees by default, or an Angle).
        latitude: Geodetic latitude (degrees by default, or an Angle).
        elevation: Height above the ellipsoid [m].
        pressure_hpa: Pressure [hPa].  ``-1.0`` or ``None`` derives it from
            the elevation.
        temperature_c: Temperature [deg C].  ``None`` uses the sea-level
            standard temperature.
        relative_humidity: Relative humidity in ``[0, 1]``.
        wavelength_um: Observing wavelength [um].
        degrees: Interpret plain-number longitude/latitude as degrees.

    Raises:
        InvalidObserverStateError: If any field is outside its domain.

    Examples:
        ```python
        from celestjax import ObserverState
        obs = ObserverState(-70.0, -30.0, 2000.0)
        obs.pressure_hpa        # ~801 hPa, derived from elevation
        obs.set_pressure(780.0)
        ```
    """

    def __init__(
        self,
        longitude: Angle | float = 0.0,
        latitude: Angle | float = DEFAULT_LATITUDE_DEG,
        elevation: float = 0.0,
        *,
        pressure_hpa: float | None = PRESSURE_UNSET,
        temperature_c: float | None = None,
        relative_humidity: float = 0.0,
        wavelength_um: float = DEFAULT_WAVELENGTH_UM,
        degrees: bool = True,
    ) -> None:
        self._longitude = as_angle(longitude, degrees)
        self._latitude = _check_latitude(as_angle(latitude, degrees))
        self._elevation = _check_finite("Elevation", elevation)
        self._pressure = _check_pressure(pressure_hpa)
        self._temperature = None if temperature_c is None else _check_temperature(temperature_c)
        self._humidity = _check_humidity(relative_humidity)
        self._wavelength = _check_wavelength(wavelength_um)

    @classmethod
    def from_radians(
        cls, longitude: float, latitude: float, elevation: float = 0.0, **atmosphere
    ) -> ObserverState:
        """Construct from longitude/latitude given in radians."""
        return cls(longitude, latitude, elevation, degrees=False, **atmosphere)

    # -- getters -------------------------------------------------------------

    @property
    def longitude(self) -> Angle:
        return self._longitude

    @property
    def latitude(self) -> Angle:
        return self._latitude

    @property
    def elevation(self) -> float:
        return self._elevation

    @property
    def pressure_hpa(self) -> float:
        if self._pressure is None:
            return estimate_pressure_hpa(self._elevation)
        return self._pressure

    @property
    def pressure_is_derived(self) -> bool:
        return self._pressure is None

    @property
    def temperature_c(self) -> float:
        return SEA_LEVEL_TEMP_C if self._temperature is None else self._temperature

    @property
    def temperature_k(self) -> float:
        return self.temperature_c + CELSIUS_TO_KELVIN

    @property
    def temperature_f(self) -> float:
        return self.temperature_c * 9.0 / 5.0 + 32.0

    @property
    def relative_humidity(self) -> float:
        return self._humidity

    @property
    def wavelength_um(self) -> float:
        return self._wavelength

    # -- mutators ------------------------------------------------------------

    def set_longitude(self, longitude: Angle | float, degrees: bool = True) -> None:
        self._longitude = as_angle(longitude, degrees)

    def set_latitude(self, latitude: Angle | float, degrees: bool = True) -> None:
        self._latitude = _check_latitude(as_angle(latitude, degrees))

    def set_elevation(self, elevation: float) -> None:
        self._elevation = _check_finite("Elevation", elevation)

    def set_pressure(self, pressure_hpa: float | None) -> None:
        self._pressure = _check_pressure(pressure_hpa)

    def set_temperature_c(self, temperature: float | None) -> None:
        self._temperature = None if temperature is None else _check_temperature(temperature)

    def set_temperature_k(self, temperature: float) -> None:
        self.set_temperature_c(temperature - CELSIUS_TO_KELVIN)

    def set_temperature_f(self, temperature: float) -> None:
        self.set_temperature_c((temperature - 32.0) * 5.0 / 9.0)

    def set_relative_humidity(self, humidity: float) -> None:
        self._humidity = _check_humidity(humidity)

    def set_wavelength_um(self, wavelength: float) -> None:
        self._wavelength = _check_wavelength(wavelength)

    def __repr__(self) -> str:
        return (
            f"ObserverState(longitude={self._longitude.degrees:.6f}, "
            f"latitude={self._latitude.degrees:.6f}, elevation={self._elevation}, "
            f"pressure_hpa={self.pressure_hpa:.2f}, temperature_c={self.temperature_c:.2f}, "
            f"relative_humidity={self._humidity}, wavelength_um={self._wavelength})"
        )


@dataclass(frozen=True)
class ObservingConditions:
    """Everything the CIRS <-> observed conversion needs besides the epoch.

    Attributes:
        longitude: East longitude [rad].
        latitude: Geodetic latitude [rad].
        elevation: Height above the ellipsoid [m].
        pressure_hpa: Pressure [hPa].  Zero disables refraction.
        temperature_c: Temperature [deg C].
        relative_humidity: Relative humidity in ``[0, 1]``.
        wavelength_um: Observing wavelength [um].
        dut1: UT1-UTC [s].
        xp: Polar motion x [arcsec].
        yp: Polar motion y [arcsec].
    """

    longitude: float
    latitude: float
    elevation: float = 0.0
    pressure_hpa: float = SEA_LEVEL_PRESSURE_HPA
    temperature_c: float = SEA_LEVEL_TEMP_C
    relative_humidity: float = 0.0
    wavelength_um: float = DEFAULT_WAVELENGTH_UM
    dut1: float = 0.0
    xp: float = 0.0
    yp: float = 0.0

    def __post_init__(self) -> None:
        _check_latitude(Angle(self.latitude))
        if _check_pressure(self.pressure_hpa) is None:
            raise InvalidObserverStateError("ObservingConditions needs an explicit pressure")
        _check_temperature(self.temperature_c)
        _check_humidity(self.relative_humidity)
        _check_wavelength(self.wavelength_um)
        for name in ("longitude", "elevation", "dut1", "xp", "yp"):
            _check_finite(name, getattr(self, name))

    @classmethod
    def from_parameters(
        cls,
        longitude: Angle | float,
        latitude: Angle | float,
        elevation: float = 0.0,
        *,
        pressure_hpa: float | None = PRESSURE_UNSET,
        temperature_c: float | None = None,
        relative_humidity: float = 0.0,
        wavelength_um: float = DEFAULT_WAVELENGTH_UM,
        dut1: float = 0.0,
        xp: float = 0.0,
        yp: float = 0.0,
        degrees: bool = False,
    ) -> ObservingConditions:
        """Build conditions from raw values, applying the standard atmosphere.

        Longitude and latitude are radians unless *degrees* is ``True``;
        Angles are accepted either way.
        """
        pressure = _check_pressure(pressure_hpa)
        return cls(
            longitude=as_angle(longitude, degrees).radians,
            latitude=as_angle(latitude, degrees).radians,
            elevation=float(elevation),
            pressure_hpa=estimate_pressure_hpa(elevation) if pressure is None else pressure,
            temperature_c=SEA_LEVEL_TEMP_C if temperature_c is None else float(temperature_c),
            relative_humidity=float(relative_humidity),
            wavelength_um=float(wavelength_um),
            dut1=float(dut1),
            xp=float(xp),
            yp=float(yp),
        )

    @classmethod
    def from_observer(
        cls,
        observer: ObserverState,
        epoch,
        corrections: EarthOrientationTable | None = None,
        extrapolation: EOPExtrapolation | str | None = None,
    ) -> ObservingConditions:
        """Build conditions from an observer and the corrections at *epoch*.

        Args:
            observer: Site and atmosphere.
            epoch: TimeValue (or UTC MJD) used to look up the corrections.
            corrections: Table supplying ΔUT1 and polar motion.  ``None``
                means zero corrections.
            extrapolation: Overrides the table's boundary policy.

        Raises:
            OutOfRangeError: If the table's policy rejects *epoch*.
        """
        record = None if corrections is None else corrections.lookup(epoch, extrapolation)
        return cls.from_observer_record(observer, record)

    @classmethod
    def from_observer_record(
        cls, observer: ObserverState, record: EarthOrientationRecord | None
    ) -> ObservingConditions:
        """Build conditions from an observer and an already looked-up record.

        ``None`` means zero corrections.
        """
        dut1 = xp = yp = 0.0
        if record is not None:
            dut1, xp, yp = record.dut1, record.xp, record.yp
        return cls(
            longitude=observer.longitude.radians,
            latitude=observer.latitude.radians,
            elevation=observer.elevation,
            pressure_hpa=observer.pressure_hpa,
            temperature_c=observer.temperature_c,
            relative_humidity=observer.relative_humidity,
            wavelength_um=observer.wavelength_um,
            dut1=dut1,
            xp=xp,
            yp=yp,
        )

    @property
    def polar_motion_rad(self) -> tuple[float, float]:
        return self.xp * AS2RAD, self.yp * AS2RAD
