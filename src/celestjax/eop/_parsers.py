"""Parsers for IERS ``finals`` Earth orientation files.

Supports the fixed-column IERS standard format (``finals.all``,
``finals.data``, ``finals.daily``) with IAU 1980 nutation offsets
(Δψ, Δε).  Each line carries Bulletin A values and, for older epochs,
the final Bulletin B values; Bulletin B is preferred when present.

The I/P flag in column 58 marks whether UT1-UTC is an IERS observed
value (``I``) or a prediction (``P``), which splits a file into the
historical and predicted halves of a table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

from celestjax.eop._types import EarthOrientationRecord
from celestjax.exceptions import InvalidTableError

logger = logging.getLogger(__name__)

# Column ranges for the IERS standard format (0-indexed Python slices)
_MJD_RANGE = slice(6, 15)
_UT1_FLAG = 57
_PM_X_RANGE = slice(17, 27)
_PM_Y_RANGE = slice(36, 46)
_UT1_UTC_RANGE = slice(58, 68)
_DPSI_RANGE = slice(96, 106)
_DEPS_RANGE = slice(115, 125)
_B_PM_X_RANGE = slice(134, 144)
_B_PM_Y_RANGE = slice(144, 154)
_B_UT1_UTC_RANGE = slice(154, 165)
_B_DPSI_RANGE = slice(165, 175)
_B_DEPS_RANGE = slice(175, 185)
_STANDARD_LINE_LENGTH = 187

_MAS_TO_AS = 1.0e-3


class FinalsEntry(NamedTuple):
    """One parsed ``finals`` line: its record and whether it is a prediction."""

    record: EarthOrientationRecord
    predicted: bool


class ParsedFinals(NamedTuple):
    """Records of a ``finals`` file split into observed and predicted halves."""

    historical: list[EarthOrientationRecord]
    predicted: list[EarthOrientationRecord]


def _field(line: str, columns: slice) -> float | None:
    text = line[columns].strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_finals_line(line: str) -> FinalsEntry | None:
    """Parse a single line from an IERS ``finals`` file.

    Lines shorter than 187 characters are padded with spaces (prediction
    lines have trailing fields omitted).  Lines longer than 187 characters,
    or lines whose MJD, polar motion or UT1-UTC cannot be parsed, are
    skipped (returns ``None``).  Missing nutation offsets become 0.0.

    Args:
        line: A single line from the file.

    Returns:
        The parsed entry (record in seconds/arcsec plus the prediction
        flag), or ``None`` if the line cannot be parsed.
    """
    if len(line) > _STANDARD_LINE_LENGTH:
        return None
    line = line.ljust(_STANDARD_LINE_LENGTH)

    mjd = _field(line, _MJD_RANGE)
    if mjd is None:
        return None

    # Bulletin B first, Bulletin A as the fallback
    xp = _field(line, _B_PM_X_RANGE)
    yp = _field(line, _B_PM_Y_RANGE)
    dut1 = _field(line, _B_UT1_UTC_RANGE)
    dpsi = _field(line, _B_DPSI_RANGE)
    deps = _field(line, _B_DEPS_RANGE)
    if xp is None or yp is None or dut1 is None:
        xp = _field(line, _PM_X_RANGE)
        yp = _field(line, _PM_Y_RANGE)
        dut1 = _field(line, _UT1_UTC_RANGE)
        dpsi = _field(line, _DPSI_RANGE)
        deps = _field(line, _DEPS_RANGE)
    if xp is None or yp is None or dut1 is None:
        return None

    record = EarthOrientationRecord(
        mjd=mjd,
        dut1=dut1,
        xp=xp,
        yp=yp,
        dpsi=(dpsi or 0.0) * _MAS_TO_AS,
        deps=(deps or 0.0) * _MAS_TO_AS,
    )
    return FinalsEntry(record, line[_UT1_FLAG] == "P")


def parse_finals_file(filepath: str | Path, split_predictions: bool = True) -> ParsedFinals:
    """Parse an entire IERS ``finals`` file.

    Lines that cannot be parsed (headers, blank trailing prediction lines)
    are skipped.

    Args:
        filepath: Path to the file.
        split_predictions: When ``True`` lines flagged ``P`` go to
            ``predicted``; otherwise every record is treated as historical.

    Returns:
        The parsed records split into historical and predicted lists.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidTableError: If no valid lines were found.
    """
    historical: list[EarthOrientationRecord] = []
    predicted: list[EarthOrientationRecord] = []

    with open(filepath, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            entry = parse_finals_line(line.rstrip("\n"))
            if entry is None:
                logger.debug("Skipping unparsable line %d of %s", lineno, filepath)
                continue
            if split_predictions and entry.predicted:
                predicted.append(entry.record)
            else:
                historical.append(entry.record)

    if not historical and not predicted:
        raise InvalidTableError(f"No valid Earth orientation data found in {filepath}")

    return ParsedFinals(historical, predicted)
