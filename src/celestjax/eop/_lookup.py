"""JIT-compatible interpolation over an :class:`EOPSnapshot`.

The lookup uses only JAX primitives (``jnp.searchsorted``, array indexing,
``jnp.where``), so it also works inside ``jax.vmap`` over arrays of epochs.
Range handling is left to the caller: indices are clamped to the table,
which is exactly nearest-neighbour extrapolation.
"""

from __future__ import annotations

from functools import partial

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from celestjax.eop._types import EOPSnapshot


@partial(jax.jit, static_argnames=("interpolate",))
def interpolate_values(
    snapshot: EOPSnapshot,
    mjd: ArrayLike,
    interpolate: bool = True,
) -> Array:
    """Correction values at *mjd*, linearly interpolated between records.

    Uses ``jnp.searchsorted`` for O(log n) bracketing.  At a tabulated
    epoch the interpolation fraction is exactly zero, so the stored record
    is returned unchanged.

    Args:
        snapshot: Table contents with strictly increasing epochs.
        mjd: Scalar MJD to query.
        interpolate: When ``False``, return the record at or before *mjd*
            instead of interpolating.

    Returns:
        Array of shape ``(5,)`` in :data:`~celestjax.eop._types.FIELDS` order.
    """
    n = snapshot.mjd.shape[0]
    mjd = jnp.asarray(mjd, dtype=snapshot.mjd.dtype)

    idx = jnp.searchsorted(snapshot.mjd, mjd, side="right")
    idx_lo = jnp.clip(idx - 1, 0, n - 1)
    idx_hi = jnp.clip(idx, 0, n - 1)

    val_lo = snapshot.values[idx_lo]
    if not interpolate:
        return val_lo

    mjd_lo = snapshot.mjd[idx_lo]
    mjd_hi = snapshot.mjd[idx_hi]
    val_hi = snapshot.values[idx_hi]

    # Safe division: outside the span both brackets collapse onto one record
    dmjd = mjd_hi - mjd_lo
    frac = jnp.where(dmjd > 0.0, (mjd - mjd_lo) / jnp.where(dmjd > 0.0, dmjd, 1.0), 0.0)
    return val_lo + frac * (val_hi - val_lo)
