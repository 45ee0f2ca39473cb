"""The process-wide Earth orientation correction table.

:class:`EarthOrientationTable` owns an immutable :class:`EOPSnapshot` and
replaces it wholesale on :meth:`~EarthOrientationTable.load` or
:meth:`~EarthOrientationTable.refresh`.  Readers take a single reference
to the current snapshot, so a lookup running concurrently with a refresh
sees either the old table or the new one in full.  Writers are serialised
with a :class:`threading.Lock`; validation happens before the swap, so a
rejected load leaves the previous contents in place.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Iterable, Sequence

import jax.numpy as jnp
import numpy as np

from celestjax.config import get_dtype
from celestjax.eop._lookup import interpolate_values
from celestjax.eop._types import (
    FIELDS,
    CorrectionQuery,
    EarthOrientationRecord,
    EOPExtrapolation,
    EOPSnapshot,
    TableCoverage,
)
from celestjax.exceptions import InvalidTableError, OutOfRangeError

logger = logging.getLogger(__name__)

_ZERO_FIELDS = dict.fromkeys(FIELDS, 0.0)


def _epoch_to_mjd(epoch) -> float:
    """Accept a TimeValue (anything with ``to_mjd``) or a plain MJD."""
    to_mjd = getattr(epoch, "to_mjd", None)
    return float(to_mjd()) if to_mjd is not None else float(epoch)


def _coerce_record(record) -> EarthOrientationRecord:
    if isinstance(record, EarthOrientationRecord):
        return record
    try:
        return EarthOrientationRecord(*(float(v) for v in record))
    except (TypeError, ValueError) as err:
        raise InvalidTableError(f"Malformed correction record {record!r}") from err


def validate_records(
    records: Iterable[EarthOrientationRecord | Sequence[float]],
    label: str = "records",
) -> list[EarthOrientationRecord]:
    """Check that records are finite and strictly increasing in epoch.

    Args:
        records: Records (or plain 6-tuples) in epoch order.
        label: Name used in error messages.

    Returns:
        The records as a list of :class:`EarthOrientationRecord`.

    Raises:
        InvalidTableError: On a malformed record, a non-finite value, or an
            epoch that does not strictly increase.
    """
    checked = [_coerce_record(r) for r in records]
    for i, record in enumerate(checked):
        if not all(math.isfinite(v) for v in record):
            raise InvalidTableError(f"Non-finite value in {label}[{i}]: {record}")
        if i > 0 and record.mjd <= checked[i - 1].mjd:
            raise InvalidTableError(
                f"Epochs in {label} must strictly increase: MJD {record.mjd} "
                f"at index {i} follows MJD {checked[i - 1].mjd}"
            )
    return checked


def merge_records(
    historical: Sequence[EarthOrientationRecord],
    predicted: Sequence[EarthOrientationRecord],
) -> list[EarthOrientationRecord]:
    """Merge observed and predicted records, observed values taking precedence.

    Predicted records at or before the last historical epoch overlap the
    observed span and are discarded.  Both inputs must already be sorted.
    """
    if not historical:
        return list(predicted)
    last = historical[-1].mjd
    return list(historical) + [r for r in predicted if r.mjd > last]


def _build_snapshot(
    records: Sequence[EarthOrientationRecord], last_observed_mjd: float
) -> EOPSnapshot:
    dtype = get_dtype()
    return EOPSnapshot(
        mjd=jnp.array([r.mjd for r in records], dtype=dtype),
        values=jnp.array([[getattr(r, f) for f in FIELDS] for r in records], dtype=dtype),
        last_observed_mjd=last_observed_mjd,
    )


class EarthOrientationTable:
    """Tabulated UT1-UTC, polar motion and nutation corrections.

    Args:
        records: Historical (observed) records sorted by epoch.
        predicted: Optional predicted records, merged after the last
            historical epoch.
        extrapolation: Default policy for epochs outside the span.
        interpolate: Interpolate linearly between records (``True``) or
            return the record at or before the epoch (``False``).

    Raises:
        InvalidTableError: If the initial records are rejected.

    Examples:
        ```python
        from celestjax.eop import EarthOrientationRecord, EarthOrientationTable
        table = EarthOrientationTable([
            EarthOrientationRecord(59000.0, dut1=-0.21),
            EarthOrientationRecord(59001.0, dut1=-0.22),
        ])
        table.lookup(59000.5).dut1   # -0.215
        ```
    """

    def __init__(
        self,
        records: Iterable[EarthOrientationRecord] = (),
        *,
        predicted: Iterable[EarthOrientationRecord] = (),
        extrapolation: EOPExtrapolation | str = EOPExtrapolation.HOLD,
        interpolate: bool = True,
    ) -> None:
        self.extrapolation = EOPExtrapolation(extrapolation)
        self.interpolate = interpolate
        self._lock = threading.Lock()
        self._snapshot: EOPSnapshot | None = None
        records = list(records)
        predicted = list(predicted)
        if records or predicted:
            self.load(records, predicted=predicted)

    # -- writing -------------------------------------------------------------

    def load(
        self,
        records: Iterable[EarthOrientationRecord],
        *,
        predicted: Iterable[EarthOrientationRecord] = (),
    ) -> None:
        """Replace the table contents with validated *records*.

        Args:
            records: Historical records sorted by strictly increasing epoch.
            predicted: Predicted records sorted by strictly increasing epoch.
                Only those after the last historical epoch are kept.

        Raises:
            InvalidTableError: If either sequence is malformed, unordered, or
                the merged table is empty.  The current contents are kept.
        """
        historical = validate_records(records, "historical records")
        predictions = validate_records(predicted, "predicted records")
        merged = merge_records(historical, predictions)
        if not merged:
            raise InvalidTableError("Cannot load an empty correction table")
        last_observed = historical[-1].mjd if historical else merged[0].mjd - 1.0
        snapshot = _build_snapshot(merged, last_observed)

        with self._lock:
            self._snapshot = snapshot

        logger.info(
            "Loaded %d correction records spanning MJD %.2f to %.2f (%d predicted)",
            len(merged),
            merged[0].mjd,
            merged[-1].mjd,
            len(merged) - len(historical),
        )

    def refresh(
        self,
        records: Iterable[EarthOrientationRecord],
        *,
        predicted: Iterable[EarthOrientationRecord] = (),
    ) -> None:
        """Atomically replace the contents with newly supplied records.

        Identical to :meth:`load`; lookups running concurrently observe
        either the previous table or the new one, never a mixture.
        """
        previous = self.mjd_max if self._snapshot is not None else None
        self.load(records, predicted=predicted)
        if previous is not None and self.mjd_max != previous:
            logger.info("Correction table end moved from MJD %.2f to %.2f", previous, self.mjd_max)

    # -- reading -------------------------------------------------------------

    def _current(self) -> EOPSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise OutOfRangeError("Correction table is empty")
        return snapshot

    def _record_from(self, snapshot: EOPSnapshot, mjd: float) -> EarthOrientationRecord:
        values = interpolate_values(snapshot, mjd, interpolate=self.interpolate)
        return EarthOrientationRecord(mjd, *(float(v) for v in values))

    @staticmethod
    def _coverage_of(snapshot: EOPSnapshot, mjd: float) -> TableCoverage:
        if mjd < float(snapshot.mjd[0]) or mjd > float(snapshot.mjd[-1]):
            return TableCoverage.OUT_OF_RANGE
        if mjd <= snapshot.last_observed_mjd:
            return TableCoverage.OBSERVED
        return TableCoverage.PREDICTED

    def coverage(self, epoch) -> TableCoverage:
        """Report whether *epoch* is observed, predicted or out of range."""
        snapshot = self._snapshot
        if snapshot is None:
            return TableCoverage.OUT_OF_RANGE
        return self._coverage_of(snapshot, _epoch_to_mjd(epoch))

    def query(self, epoch) -> CorrectionQuery:
        """Range-aware lookup that never applies an extrapolation policy.

        Args:
            epoch: TimeValue or UTC MJD.

        Returns:
            The interpolated record with its coverage, or ``record=None``
            with :attr:`TableCoverage.OUT_OF_RANGE`.
        """
        mjd = _epoch_to_mjd(epoch)
        snapshot = self._snapshot
        if snapshot is None:
            return CorrectionQuery(None, TableCoverage.OUT_OF_RANGE)
        coverage = self._coverage_of(snapshot, mjd)
        if coverage is TableCoverage.OUT_OF_RANGE:
            return CorrectionQuery(None, coverage)
        return CorrectionQuery(self._record_from(snapshot, mjd), coverage)

    def lookup(
        self,
        epoch,
        extrapolation: EOPExtrapolation | str | None = None,
    ) -> EarthOrientationRecord:
        """Corrections at *epoch* with the boundary policy applied.

        Args:
            epoch: TimeValue or UTC MJD.
            extrapolation: Overrides the table's default policy.

        Returns:
            Interpolated record (or the HOLD/ZERO substitute outside the span).

        Raises:
            OutOfRangeError: Outside the span under ``ERROR``, or when the
                table is empty under ``HOLD`` or ``ERROR``.
        """
        policy = self.extrapolation if extrapolation is None else EOPExtrapolation(extrapolation)
        mjd = _epoch_to_mjd(epoch)
        snapshot = self._snapshot

        if snapshot is not None and self._coverage_of(snapshot, mjd) is not TableCoverage.OUT_OF_RANGE:
            return self._record_from(snapshot, mjd)

        if policy is EOPExtrapolation.ZERO:
            logger.debug("MJD %.5f outside correction table; using zero corrections", mjd)
            return EarthOrientationRecord(mjd, **_ZERO_FIELDS)
        if snapshot is None:
            raise OutOfRangeError("Correction table is empty")
        if policy is EOPExtrapolation.ERROR:
            raise OutOfRangeError(
                f"MJD {mjd} is outside the correction table span "
                f"[{self.mjd_min}, {self.mjd_max}]"
            )
        logger.debug("MJD %.5f outside correction table; holding boundary record", mjd)
        return self._record_from(snapshot, mjd)

    # -- inspection ----------------------------------------------------------

    @property
    def mjd_min(self) -> float:
        return float(self._current().mjd[0])

    @property
    def mjd_max(self) -> float:
        return float(self._current().mjd[-1])

    @property
    def last_observed_mjd(self) -> float:
        return self._current().last_observed_mjd

    def records(self) -> tuple[EarthOrientationRecord, ...]:
        """The merged records currently loaded."""
        snapshot = self._snapshot
        if snapshot is None:
            return ()
        mjds = np.asarray(snapshot.mjd).tolist()
        rows = np.asarray(snapshot.values).tolist()
        return tuple(EarthOrientationRecord(m, *row) for m, row in zip(mjds, rows))

    def __len__(self) -> int:
        snapshot = self._snapshot
        return 0 if snapshot is None else snapshot.size

    def __repr__(self) -> str:
        if self._snapshot is None:
            return "EarthOrientationTable(empty)"
        return (
            f"EarthOrientationTable({len(self)} records, "
            f"MJD {self.mjd_min:.2f}-{self.mjd_max:.2f}, {self.extrapolation.value})"
        )
