"""CIRS <-> observed (azimuth, zenith distance) transformations.

The site context (local Earth rotation angle, polar-motion locators,
diurnal aberration and refraction coefficients) is obtained once per call
from ``erfa.apio13`` via :func:`~celestjax.sofa.site_context`.  The
geometric chain then runs in JAX, following the same sequence as
``iauAtioq``::

    CIRS  --Rz(ERA + λ)-->  (-HA, Dec)
          --Rx(-y) Ry(-x)-->  polar motion
          --diurnal aberration-->
          --Ry(π/2 - φ)-->  (azimuth, elevation) with S = 0, E = 90°
          --refraction-->  observed

Azimuth is reported from north through east.  The inverse removes
diurnal aberration exactly (rather than to first order), and refraction
is removed in closed form (see :mod:`celestjax.frames.refraction`), so a
forward/backward round trip is limited only by floating-point rounding.

Both directions also report the observed hour angle and the apparent
(refraction-shifted) line of sight expressed as CIRS right ascension and
declination, matching the ``hob``/``rob``/``dob`` outputs of SOFA.

References:
    1. IAU SOFA Board, *SOFA Tools for Earth Attitude*, 2021.
"""

from __future__ import annotations

from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from celestjax.frames._rotations import Rx, Ry, Rz, unit_to_spherical, wrap_two_pi
from celestjax.frames.refraction import apply_refraction, remove_refraction


class SiteGeometry(NamedTuple):
    """Per-call site context used by the observed-frame kernels (radians).

    Attributes:
        eral: Local Earth rotation angle (ERA + east longitude + s').
        xpl: Polar motion x, relative to the local meridian.
        ypl: Polar motion y, relative to the local meridian.
        latitude: Geodetic latitude.
        diurab: Diurnal aberration magnitude (site speed / c).
        refa: Refraction coefficient ``A``.
        refb: Refraction coefficient ``B``.
        z_limit: Zenith distance beyond which refraction is not applied.
    """

    eral: ArrayLike
    xpl: ArrayLike
    ypl: ArrayLike
    latitude: ArrayLike
    diurab: ArrayLike
    refa: ArrayLike
    refb: ArrayLike
    z_limit: ArrayLike


class ObservedSolution(NamedTuple):
    """Result of an observed-frame kernel (radians)."""

    cirs_ra: Array
    cirs_dec: Array
    azimuth: Array
    zenith: Array
    hour_angle: Array
    apparent_ra: Array
    apparent_dec: Array


def _horizon_rotation(site: SiteGeometry) -> Array:
    return Ry(jnp.pi / 2.0 - site.latitude)


def _polar_motion(site: SiteGeometry) -> Array:
    return Rx(-site.ypl) @ Ry(-site.xpl)


def _horizon_vector(azimuth: ArrayLike, zenith: ArrayLike) -> Array:
    sin_z = jnp.sin(zenith)
    return jnp.stack([-jnp.cos(azimuth) * sin_z, jnp.sin(azimuth) * sin_z, jnp.cos(zenith)])


def _azimuth_zenith(v: ArrayLike) -> tuple[Array, Array]:
    rho = jnp.hypot(v[0], v[1])
    azimuth = jnp.where(rho > 0.0, jnp.arctan2(v[1], -v[0]), 0.0)
    return wrap_two_pi(azimuth), jnp.arctan2(rho, v[2])


def _apparent(site: SiteGeometry, azimuth: Array, z_obs: Array) -> tuple[Array, Array, Array]:
    """Observed hour angle and CIRS RA/Dec of the refracted line of sight."""
    v = _horizon_rotation(site).T @ _horizon_vector(azimuth, z_obs)
    minus_ha, dec = unit_to_spherical(v)
    ha = jnp.arctan2(jnp.sin(-minus_ha), jnp.cos(-minus_ha))
    return ha, wrap_two_pi(site.eral + minus_ha), dec


@jax.jit
def cirs_to_observed(ra: ArrayLike, dec: ArrayLike, site: SiteGeometry) -> ObservedSolution:
    """CIRS right ascension/declination to observed azimuth/zenith distance.

    Args:
        ra: CIRS right ascension [rad].
        dec: CIRS declination [rad].
        site: Site context for the epoch and observer.

    Returns:
        Observed azimuth and zenith distance with the auxiliary outputs.
    """
    cos_dec = jnp.cos(dec)
    v = jnp.stack([cos_dec * jnp.cos(ra), cos_dec * jnp.sin(ra), jnp.sin(dec)])
    v = _polar_motion(site) @ (Rz(site.eral) @ v)

    # Diurnal aberration
    f = 1.0 - site.diurab * v[1]
    v = f * (v + jnp.array([0.0, 1.0, 0.0]) * site.diurab)

    azimuth, z_true = _azimuth_zenith(_horizon_rotation(site) @ v)
    z_obs = apply_refraction(z_true, site.refa, site.refb, site.z_limit)
    ha, apparent_ra, apparent_dec = _apparent(site, azimuth, z_obs)
    return ObservedSolution(
        jnp.asarray(ra), jnp.asarray(dec), azimuth, z_obs, ha, apparent_ra, apparent_dec
    )


@jax.jit
def observed_to_cirs(azimuth: ArrayLike, zenith: ArrayLike, site: SiteGeometry) -> ObservedSolution:
    """Observed azimuth/zenith distance to CIRS right ascension/declination.

    Args:
        azimuth: Observed azimuth, north through east [rad].
        zenith: Observed (refracted) zenith distance [rad].
        site: Site context for the epoch and observer.

    Returns:
        CIRS coordinates with the auxiliary outputs.
    """
    azimuth = wrap_two_pi(azimuth)
    zenith = jnp.asarray(zenith)
    z_true = remove_refraction(zenith, site.refa, site.refb, site.z_limit)
    u = _horizon_rotation(site).T @ _horizon_vector(azimuth, z_true)

    # Exact inverse of the aberration step: find k with |k u - d e_y| = 1
    d = site.diurab
    k = d * u[1] + jnp.sqrt(1.0 - d * d + d * d * u[1] * u[1])
    v = k * u - jnp.array([0.0, 1.0, 0.0]) * d

    v = Rz(site.eral).T @ (_polar_motion(site).T @ v)
    ra, dec = unit_to_spherical(v)
    ha, apparent_ra, apparent_dec = _apparent(site, azimuth, zenith)
    return ObservedSolution(ra, dec, azimuth, zenith, ha, apparent_ra, apparent_dec)
