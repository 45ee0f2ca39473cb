"""Galactic frame alignment.

The galactic system is tied to the ICRS by a fixed rotation: its axes
point at the galactic centre (l = 0, b = 0), along the galactic plane at
l = 90° and at the north galactic pole.  The matrix is assembled from
``erfa.g2icrs``, which uses the Hipparcos definition of the galactic
pole, so there is no epoch dependence between ICRS and galactic axes.

Positions in CIRS reach the galactic frame through the CIRS -> ICRS
rotation of their epoch followed by this fixed matrix.  The composite is
an orthogonal matrix, so CIRS -> GALACTIC -> CIRS at a fixed epoch is
lossless.

References:
    1. ESA, *The Hipparcos and Tycho Catalogues*, ESA SP-1200, Vol. 1,
       Section 1.5.3, 1997.
"""

from __future__ import annotations

import math
from functools import lru_cache

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from celestjax import sofa
from celestjax.config import get_dtype

_GALACTIC_AXES = ((0.0, 0.0), (math.pi / 2.0, 0.0), (0.0, math.pi / 2.0))


@lru_cache(maxsize=1)
def _galactic_axes_in_icrs() -> np.ndarray:
    rows = []
    for l_rad, b_rad in _GALACTIC_AXES:
        ra, dec = sofa.galactic_to_icrs(l_rad, b_rad)
        rows.append([math.cos(dec) * math.cos(ra), math.cos(dec) * math.sin(ra), math.sin(dec)])
    return np.array(rows)


def rotation_icrs_to_galactic() -> Array:
    """Fixed 3x3 rotation matrix from ICRS to galactic axes.

    Each row is a galactic basis vector expressed in ICRS.

    Returns:
        3x3 rotation matrix (ICRS -> GALACTIC).
    """
    return jnp.asarray(_galactic_axes_in_icrs(), dtype=get_dtype())


def rotation_galactic_to_icrs() -> Array:
    """Transpose of :func:`rotation_icrs_to_galactic`."""
    return rotation_icrs_to_galactic().T


def rotation_cirs_to_galactic(icrs_to_cirs: ArrayLike) -> Array:
    """CIRS -> GALACTIC rotation for the epoch of *icrs_to_cirs*.

    Args:
        icrs_to_cirs: The ICRS -> CIRS matrix of the conversion epoch.

    Returns:
        3x3 rotation matrix (CIRS -> GALACTIC).
    """
    return rotation_icrs_to_galactic() @ jnp.asarray(icrs_to_cirs).T
