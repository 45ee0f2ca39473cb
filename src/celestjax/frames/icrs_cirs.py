"""ICRS <-> CIRS transformations.

The Celestial Intermediate Reference System is reached from the ICRS by
the IAU 2006/2000A bias-precession-nutation rotation, expressed through
the CIP coordinates ``X, Y`` and the CIO locator ``s``.  Observed nutation
offsets (Δψ, Δε) from an Earth orientation table are folded into the
nutation before the matrix is formed.

Only the rotation is applied, so CIRS -> ICRS is the exact transpose and
a round trip reproduces the input to floating-point precision.

References:
    1. G. Petit and B. Luzum, *IERS Conventions (2010)*, IERS Technical
       Note 36, 2010, ch. 5.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from celestjax import sofa
from celestjax.constants import AS2RAD
from celestjax.frames._rotations import spherical_to_unit, unit_to_spherical


def rotation_icrs_to_cirs(epoch, dpsi: float = 0.0, deps: float = 0.0) -> Array:
    """ICRS -> CIRS rotation matrix at *epoch*.

    Args:
        epoch: UTC instant (:class:`~celestjax.timevalue.TimeValue`).
        dpsi: Correction to nutation in longitude [arcsec].
        deps: Correction to nutation in obliquity [arcsec].

    Returns:
        3x3 rotation matrix (ICRS -> CIRS).

    Examples:
        ```python
        from celestjax import TimeValue
        from celestjax.frames import rotation_icrs_to_cirs
        R = rotation_icrs_to_cirs(TimeValue.from_jd(2459000.5))
        ```
    """
    tt1, tt2 = epoch.tt_jd()
    return sofa.celestial_to_intermediate(tt1, tt2, dpsi * AS2RAD, deps * AS2RAD)


def rotation_cirs_to_icrs(epoch, dpsi: float = 0.0, deps: float = 0.0) -> Array:
    """CIRS -> ICRS rotation matrix, the transpose of :func:`rotation_icrs_to_cirs`."""
    return rotation_icrs_to_cirs(epoch, dpsi, deps).T


def rotate_spherical(matrix: ArrayLike, lon: ArrayLike, lat: ArrayLike) -> tuple[Array, Array]:
    """Apply *matrix* to the direction ``(lon, lat)`` [rad]."""
    return unit_to_spherical(jnp.asarray(matrix) @ spherical_to_unit(lon, lat))
