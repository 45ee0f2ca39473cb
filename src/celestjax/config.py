"""Module-wide precision and correction-table configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
for celestjax array math.  Sky positions need sub-milliarcsecond
resolution, so the default is ``jnp.float64`` and JAX's 64-bit mode
(``jax_enable_x64``) is switched on when this module is imported.

Call ``set_dtype`` **before** any JIT compilation.  Under JIT,
``get_dtype()`` runs during tracing and its result is baked into the
compiled program.

:class:`CorrectionsConfig` gathers the policy knobs for the Earth
orientation table (file locations, refresh behaviour and boundary
policy) so applications can describe their data supply in one value.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)

_VALID_DTYPES = (jnp.float32, jnp.float64)

_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for celestjax.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is (re-)enabled via
    ``jax.config.update("jax_enable_x64", True)``.  ``float32`` is accepted
    for experimentation but cannot meet the round-trip tolerances of the
    frame transforms.

    Args:
        dtype: ``jnp.float32`` or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


@dataclass(frozen=True)
class CorrectionsConfig:
    """Policy knobs for supplying Earth orientation corrections.

    Attributes:
        historical_path: Local IERS ``finals`` file holding observed values.
            When ``None`` the cached download is used.
        predicted_path: Optional separate file of predictions.  Its records
            are only used after the last historical epoch.
        url: Source URL for the cached download.  ``None`` selects the
            IERS default.
        auto_refresh: Download a fresh copy when the cached file is older
            than *max_age_days*.
        max_age_days: Maximum age of the cached file in days.
        extrapolation: Boundary policy name (``"hold"``, ``"zero"`` or
            ``"error"``) or an ``EOPExtrapolation`` member.
        interpolate: Linear interpolation between records when ``True``,
            otherwise the record at or before the query epoch.
    """

    historical_path: str | Path | None = None
    predicted_path: str | Path | None = None
    url: str | None = None
    auto_refresh: bool = True
    max_age_days: float = 7.0
    extrapolation: object = "hold"
    interpolate: bool = True
