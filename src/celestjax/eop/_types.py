"""Type definitions for Earth orientation corrections.

Provides the core data types for correction storage and lookup:

- :class:`EarthOrientationRecord`: one tabulated epoch of corrections.
- :class:`EOPSnapshot`: immutable, array-backed table contents used for
  interpolation via ``jnp.searchsorted``.
- :class:`EOPExtrapolation`: behaviour when querying outside the span.
- :class:`TableCoverage` and :class:`CorrectionQuery`: the explicit result
  of a range-aware query.

``EOPSnapshot`` is a :class:`~typing.NamedTuple`, which JAX treats as a
pytree, and is never modified after construction.  A table swaps whole
snapshots when it is refreshed.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

from jax import Array

FIELDS: tuple[str, ...] = ("dut1", "xp", "yp", "dpsi", "deps")
"""Correction fields of a record, in storage column order."""


class EarthOrientationRecord(NamedTuple):
    """Earth orientation corrections at one epoch.

    Attributes:
        mjd: Epoch as a UTC Modified Julian Date.
        dut1: UT1-UTC [s].
        xp: Polar motion x-component [arcsec].
        yp: Polar motion y-component [arcsec].
        dpsi: Correction to nutation in longitude [arcsec].
        deps: Correction to nutation in obliquity [arcsec].
    """

    mjd: float
    dut1: float = 0.0
    xp: float = 0.0
    yp: float = 0.0
    dpsi: float = 0.0
    deps: float = 0.0


class EOPSnapshot(NamedTuple):
    """Array-backed contents of an :class:`EarthOrientationTable`.

    Attributes:
        mjd: Strictly increasing epochs, shape ``(N,)``.
        values: Corrections in :data:`FIELDS` order, shape ``(N, 5)``.
        last_observed_mjd: Last epoch backed by observed (non-predicted)
            data.  Equal to the final epoch when no predictions were merged.
    """

    mjd: Array
    values: Array
    last_observed_mjd: float

    @property
    def size(self) -> int:
        return int(self.mjd.shape[0])


class EOPExtrapolation(enum.Enum):
    """Policy for correction queries outside the tabulated span.

    Attributes:
        HOLD: Nearest-neighbour extrapolation (clamp to the boundary record).
        ZERO: Return an all-zero correction record.
        ERROR: Raise :class:`~celestjax.exceptions.OutOfRangeError`.
    """

    HOLD = "hold"
    ZERO = "zero"
    ERROR = "error"


class TableCoverage(enum.Enum):
    """Which part of a table covers an epoch.

    Attributes:
        OBSERVED: Inside the span of observed (historical) records.
        PREDICTED: After the last observed record, inside the predictions.
        OUT_OF_RANGE: Before the first or after the last record.
    """

    OBSERVED = "observed"
    PREDICTED = "predicted"
    OUT_OF_RANGE = "out_of_range"


class CorrectionQuery(NamedTuple):
    """Result of :meth:`EarthOrientationTable.query`.

    ``record`` is ``None`` exactly when ``coverage`` is
    :attr:`TableCoverage.OUT_OF_RANGE`; callers then decide whether to fall
    back to zero corrections or to reject the epoch.
    """

    record: EarthOrientationRecord | None
    coverage: TableCoverage

    @property
    def in_range(self) -> bool:
        return self.coverage is not TableCoverage.OUT_OF_RANGE
