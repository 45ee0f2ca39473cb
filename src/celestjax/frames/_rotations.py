"""Elementary frame rotations and spherical/cartesian helpers.

The ``Rx``, ``Ry`` and ``Rz`` matrices are *frame* rotations: applied to
a vector's components they return the components of the same vector in
axes rotated counter-clockwise by ``angle`` about the named axis.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods and
       Applications*, 2012, p. 27.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def Rx(angle: ArrayLike) -> Array:
    """Frame rotation about the x-axis by *angle* [rad]."""
    c, s = jnp.cos(angle), jnp.sin(angle)
    one, zero = jnp.ones_like(c), jnp.zeros_like(c)
    return jnp.stack(
        [
            jnp.stack([one, zero, zero]),
            jnp.stack([zero, c, s]),
            jnp.stack([zero, -s, c]),
        ]
    )


def Ry(angle: ArrayLike) -> Array:
    """Frame rotation about the y-axis by *angle* [rad]."""
    c, s = jnp.cos(angle), jnp.sin(angle)
    one, zero = jnp.ones_like(c), jnp.zeros_like(c)
    return jnp.stack(
        [
            jnp.stack([c, zero, -s]),
            jnp.stack([zero, one, zero]),
            jnp.stack([s, zero, c]),
        ]
    )


def Rz(angle: ArrayLike) -> Array:
    """Frame rotation about the z-axis by *angle* [rad]."""
    c, s = jnp.cos(angle), jnp.sin(angle)
    one, zero = jnp.ones_like(c), jnp.zeros_like(c)
    return jnp.stack(
        [
            jnp.stack([c, s, zero]),
            jnp.stack([-s, c, zero]),
            jnp.stack([zero, zero, one]),
        ]
    )


def spherical_to_unit(lon: ArrayLike, lat: ArrayLike) -> Array:
    """Unit vector for longitude/latitude [rad]."""
    cos_lat = jnp.cos(lat)
    return jnp.stack([cos_lat * jnp.cos(lon), cos_lat * jnp.sin(lon), jnp.sin(lat)])


def unit_to_spherical(v: ArrayLike) -> tuple[Array, Array]:
    """Longitude in ``[0, 2π)`` and latitude of a (not necessarily unit) vector.

    The longitude of a vector on the polar axis is returned as 0.
    """
    x, y, z = v[0], v[1], v[2]
    rho = jnp.hypot(x, y)
    lon = jnp.where(rho > 0.0, jnp.arctan2(y, x), 0.0)
    return wrap_two_pi(lon), jnp.arctan2(z, rho)


def wrap_two_pi(angle: ArrayLike) -> Array:
    """Normalise *angle* to ``[0, 2π)``."""
    wrapped = jnp.mod(angle, 2.0 * jnp.pi)
    return jnp.where(wrapped >= 2.0 * jnp.pi, 0.0, wrapped)
