"""Orchestration of IAU SOFA/ERFA primitives.

Thin wrappers around `pyerfa <https://github.com/liberfa/pyerfa>`_ that
take and return two-part Julian Dates and radians, and translate ERFA
status failures into :class:`~celestjax.exceptions.OutOfRangeError`.
Matrices intended for composition with the frame rotations are returned
as JAX arrays in the configured dtype.

The IAU 2006/2000A precession-nutation model is used throughout.
Observed nutation offsets (Δψ, Δε) are added to the ``nut06a`` series
before the bias-precession-nutation (NPB) matrix is formed, so the CIP
coordinates, the CIO locator and the equation of the equinoxes all see
the same corrected pole.

References:
    1. IAU SOFA Board, *IAU SOFA Software Collection*,
       https://www.iausofa.org
    2. G. Petit and B. Luzum, *IERS Conventions (2010)*,
       IERS Technical Note 36, 2010.
"""

from __future__ import annotations

import erfa
import jax.numpy as jnp
import numpy as np
from jax import Array

from celestjax.config import get_dtype
from celestjax.exceptions import OutOfRangeError


def _checked(func, *args):
    """Call an ERFA routine, mapping unacceptable dates to OutOfRangeError."""
    try:
        return func(*args)
    except erfa.ErfaError as err:
        raise OutOfRangeError(f"{func.__name__} rejected its inputs: {err}") from err


def utc_to_tt(utc1: float, utc2: float) -> tuple[float, float]:
    """Convert a two-part UTC Julian Date to TT, applying leap seconds."""
    tai1, tai2 = _checked(erfa.utctai, utc1, utc2)
    tt1, tt2 = _checked(erfa.taitt, tai1, tai2)
    return float(tt1), float(tt2)


def utc_to_ut1(utc1: float, utc2: float, dut1: float) -> tuple[float, float]:
    """Convert a two-part UTC Julian Date to UT1.

    Args:
        utc1: First part of the UTC Julian Date.
        utc2: Second part of the UTC Julian Date.
        dut1: UT1-UTC offset [s].

    Returns:
        Two-part UT1 Julian Date.
    """
    ut11, ut12 = _checked(erfa.utcut1, utc1, utc2, dut1)
    return float(ut11), float(ut12)


def tt_to_tdb(tt1: float, tt2: float, ut1_fraction: float = 0.0) -> tuple[float, float]:
    """Convert TT to TDB at the geocentre using ``erfa.dtdb``."""
    dtr = float(erfa.dtdb(tt1, tt2, ut1_fraction, 0.0, 0.0, 0.0))
    return tt1, tt2 + dtr / 86400.0


def npb_matrix(tt1: float, tt2: float, dpsi: float = 0.0, deps: float = 0.0) -> np.ndarray:
    """Bias-precession-nutation matrix with corrected nutation.

    Args:
        tt1: First part of the TT Julian Date.
        tt2: Second part of the TT Julian Date.
        dpsi: Correction to nutation in longitude [rad].
        deps: Correction to nutation in obliquity [rad].

    Returns:
        3x3 NPB matrix (GCRS -> true equator and equinox of date).
    """
    dpsi_model, deps_model = erfa.nut06a(tt1, tt2)
    return erfa.pn06(tt1, tt2, dpsi_model + dpsi, deps_model + deps)[5]


def celestial_to_intermediate(
    tt1: float, tt2: float, dpsi: float = 0.0, deps: float = 0.0
) -> Array:
    """Rotation matrix from ICRS (GCRS) to CIRS for the given TT.

    Builds the CIP coordinates ``X, Y`` from the corrected NPB matrix, the
    CIO locator ``s`` from ``erfa.s06`` and combines them with
    ``erfa.c2ixys``.

    Args:
        tt1: First part of the TT Julian Date.
        tt2: Second part of the TT Julian Date.
        dpsi: Correction to nutation in longitude [rad].
        deps: Correction to nutation in obliquity [rad].

    Returns:
        3x3 rotation matrix (ICRS -> CIRS).
    """
    rbpn = npb_matrix(tt1, tt2, dpsi, deps)
    x, y = erfa.bpn2xy(rbpn)
    s = erfa.s06(tt1, tt2, x, y)
    return jnp.asarray(erfa.c2ixys(x, y, s), dtype=get_dtype())


def mean_sidereal_time(ut11: float, ut12: float, tt1: float, tt2: float) -> float:
    """Greenwich mean sidereal time (IAU 2006) [rad]."""
    return float(erfa.gmst06(ut11, ut12, tt1, tt2))


def apparent_sidereal_time(
    ut11: float, ut12: float, tt1: float, tt2: float, dpsi: float = 0.0, deps: float = 0.0
) -> float:
    """Greenwich apparent sidereal time from the corrected NPB matrix [rad]."""
    rbpn = npb_matrix(tt1, tt2, dpsi, deps)
    return float(erfa.gst06(ut11, ut12, tt1, tt2, rbpn))


def site_context(
    utc1: float,
    utc2: float,
    dut1: float,
    elong: float,
    phi: float,
    height: float,
    xp: float,
    yp: float,
    pressure_hpa: float,
    temperature_c: float,
    relative_humidity: float,
    wavelength_um: float,
) -> dict[str, float]:
    """Earth-rotation and site context for CIRS <-> observed conversions.

    Wraps ``erfa.apio13``, which folds in the Earth rotation angle, the TIO
    locator, polar motion, the site's geocentric velocity (diurnal
    aberration) and the refraction constants from ``erfa.refco``.

    Args:
        utc1: First part of the UTC Julian Date.
        utc2: Second part of the UTC Julian Date.
        dut1: UT1-UTC [s].
        elong: Longitude, east positive [rad].
        phi: Geodetic latitude [rad].
        height: Height above the ellipsoid [m].
        xp: Polar motion x [rad].
        yp: Polar motion y [rad].
        pressure_hpa: Pressure at the observer [hPa].
        temperature_c: Ambient temperature [deg C].
        relative_humidity: Relative humidity in ``[0, 1]``.
        wavelength_um: Observing wavelength [um].

    Returns:
        Mapping with keys ``eral`` (local Earth rotation angle), ``xpl``,
        ``ypl`` (polar motion locators), ``sphi``, ``cphi``, ``diurab``,
        ``refa`` and ``refb``.

    Raises:
        OutOfRangeError: If ERFA rejects the date.
    """
    astrom = _checked(
        erfa.apio13,
        utc1,
        utc2,
        dut1,
        elong,
        phi,
        height,
        xp,
        yp,
        pressure_hpa,
        temperature_c,
        relative_humidity,
        wavelength_um,
    )
    return {
        key: float(astrom[key])
        for key in ("eral", "xpl", "ypl", "sphi", "cphi", "diurab", "refa", "refb")
    }


def angular_separation(a1: float, b1: float, a2: float, b2: float) -> float:
    """Angular separation between two spherical positions [rad]."""
    return float(erfa.seps(a1, b1, a2, b2))


def galactic_to_icrs(l_rad: float, b_rad: float) -> tuple[float, float]:
    """Galactic longitude/latitude to ICRS RA/Dec using the Hipparcos pole."""
    ra, dec = erfa.g2icrs(l_rad, b_rad)
    return float(ra), float(dec)
