"""Atmospheric refraction in zenith distance.

The model is the two-coefficient form used by SOFA/ERFA::

    z_true = z_obs + A tan(z_obs) + B tan^3(z_obs)

with ``A`` and ``B`` from ``erfa.refco`` (pressure, temperature, humidity
and wavelength dependent; both zero when the pressure is zero).  The
tangent is evaluated with ``cos z`` floored at 0.05, which caps the
correction from about 87° zenith distance down to and below the horizon
instead of letting it diverge.

Boundary behaviour: below the horizon the correction is scaled down
linearly, from its full value at 90° to zero at ``z_limit`` (normally 90°
plus :data:`~celestjax.constants.REFRACTION_HORIZON_MARGIN`).  Past
``z_limit`` observed equals true.  The taper keeps ``z -> z_true`` continuous
and strictly increasing, so every observed zenith distance has exactly
one true counterpart and :func:`remove_refraction` inverts
:func:`apply_refraction` to rounding over the whole ``[0, π]`` range.
A zero margin degenerates to a hard cutoff at the horizon; observed
zenith distances just short of 90° then have no true counterpart and are
returned unchanged by :func:`remove_refraction`.

References:
    1. IAU SOFA Board, *SOFA Tools for Earth Attitude*, 2021, section on
       ``iauRefco`` and ``iauAtioq``.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

_COS_Z_FLOOR = 0.05
_NEWTON_ITERATIONS = 6
_MIN_TAPER = 1e-12


def refraction_offset(z_obs: ArrayLike, refa: ArrayLike, refb: ArrayLike) -> Array:
    """True minus observed zenith distance for observed zenith *z_obs* [rad]."""
    tan_z = jnp.sin(z_obs) / jnp.maximum(jnp.cos(z_obs), _COS_Z_FLOOR)
    return (refa + refb * tan_z * tan_z) * tan_z


def horizon_taper(z: ArrayLike, z_limit: ArrayLike) -> Array:
    """Weight of the refraction correction: 1 above the horizon, 0 past *z_limit*."""
    width = jnp.maximum(z_limit - jnp.pi / 2.0, _MIN_TAPER)
    ramp = jnp.clip((z_limit - z) / width, 0.0, 1.0)
    return jnp.where(z <= jnp.pi / 2.0, 1.0, ramp)


def _applied_offset(z_obs, refa, refb, z_limit):
    return refraction_offset(z_obs, refa, refb) * horizon_taper(z_obs, z_limit)


_applied_slope = jnp.vectorize(jax.grad(_applied_offset))


@jax.jit
def apply_refraction(
    z_true: ArrayLike, refa: ArrayLike, refb: ArrayLike, z_limit: ArrayLike
) -> Array:
    """Observed zenith distance for a true (unrefracted) zenith distance.

    Solves ``z + offset(z) = z_true`` by Newton iteration starting from
    ``z_true - offset(z_true)``.

    Args:
        z_true: True zenith distance [rad].
        refa: ``A`` refraction coefficient [rad].
        refb: ``B`` refraction coefficient [rad].
        z_limit: Zenith distance beyond which refraction is not applied [rad].

    Returns:
        Observed zenith distance [rad].
    """
    z_true = jnp.asarray(z_true)

    def step(_, z):
        residual = z + _applied_offset(z, refa, refb, z_limit) - z_true
        return z - residual / (1.0 + _applied_slope(z, refa, refb, z_limit))

    z_obs = jax.lax.fori_loop(
        0,
        _NEWTON_ITERATIONS,
        step,
        z_true - _applied_offset(z_true, refa, refb, z_limit),
    )
    return jnp.where(z_true > z_limit, z_true, z_obs)


@jax.jit
def remove_refraction(
    z_obs: ArrayLike, refa: ArrayLike, refb: ArrayLike, z_limit: ArrayLike
) -> Array:
    """True zenith distance for an observed zenith distance.

    Args:
        z_obs: Observed zenith distance [rad].
        refa: ``A`` refraction coefficient [rad].
        refb: ``B`` refraction coefficient [rad].
        z_limit: Zenith distance beyond which refraction is not applied [rad].

    Returns:
        True zenith distance [rad].
    """
    z_obs = jnp.asarray(z_obs)
    z_true = z_obs + _applied_offset(z_obs, refa, refb, z_limit)
    return jnp.where(z_true > z_limit, z_obs, z_true)
