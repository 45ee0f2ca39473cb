"""Factory functions for creating EarthOrientationTable instances.

These functions are the I/O boundary of the correction subsystem.  They
are called by the surrounding application at startup (or on a refresh
schedule), never implicitly during a frame conversion.

- :func:`static_table`: constant corrections over a fixed MJD span
  (useful for testing or when specific values are known).
- :func:`zero_table`: all-zero corrections.
- :func:`load_table_from_file`: load an IERS ``finals`` file.
- :func:`load_table_from_files`: separate historical and predicted files.
- :func:`load_cached_table`: load from a local cache, downloading fresh
  data from IERS when stale.
- :func:`load_table_from_config`: build a table from a
  :class:`~celestjax.config.CorrectionsConfig`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from celestjax.config import CorrectionsConfig
from celestjax.eop._cache import DEFAULT_MAX_AGE_DAYS, FinalsCache
from celestjax.eop._download import IERS_FINALS_URL, download_finals_file
from celestjax.eop._parsers import parse_finals_file
from celestjax.eop._table import EarthOrientationTable
from celestjax.eop._types import EarthOrientationRecord, EOPExtrapolation

logger = logging.getLogger(__name__)

def static_table(
    dut1: float = 0.0,
    xp: float = 0.0,
    yp: float = 0.0,
    dpsi: float = 0.0,
    deps: float = 0.0,
    mjd_min: float = 0.0,
    mjd_max: float = 99999.0,
    extrapolation: EOPExtrapolation | str = EOPExtrapolation.HOLD,
) -> EarthOrientationTable:
    """Create a table with constant corrections across ``[mjd_min, mjd_max]``.

    The table holds two identical records at the span ends, so any lookup
    inside the span returns the constants.

    Args:
        dut1: UT1-UTC [s]. Default: 0.0.
        xp: Polar motion x [arcsec]. Default: 0.0.
        yp: Polar motion y [arcsec]. Default: 0.0.
        dpsi: Nutation correction in longitude [arcsec]. Default: 0.0.
        deps: Nutation correction in obliquity [arcsec]. Default: 0.0.
        mjd_min: Start of the span. Default: 0.0.
        mjd_max: End of the span. Default: 99999.0.
        extrapolation: Boundary policy. Default: HOLD.

    Returns:
        Table with constant values.

    Examples:
        ```python
        from celestjax.eop import static_table
        table = static_table(dut1=-0.1, xp=0.1, yp=0.35)
        table.lookup(59000.0).dut1   # -0.1
        ```
    """
    return EarthOrientationTable(
        [
            EarthOrientationRecord(mjd_min, dut1, xp, yp, dpsi, deps),
            EarthOrientationRecord(mjd_max, dut1, xp, yp, dpsi, deps),
        ],
        extrapolation=extrapolation,
    )


def zero_table() -> EarthOrientationTable:
    """Create a table of zero corrections (UT1 = UTC, no polar motion).

    Returns:
        Table with all values set to zero.
    """
    return static_table()


def load_table_from_file(
    filepath: str | Path,
    *,
    split_predictions: bool = True,
    extrapolation: EOPExtrapolation | str = EOPExtrapolation.HOLD,
    interpolate: bool = True,
) -> EarthOrientationTable:
    """Load a table from an IERS ``finals`` file.

    Args:
        filepath: Path to an IERS standard format file
            (e.g. ``finals.all.iau1980.txt``).
        split_predictions: Treat lines flagged as predictions as the
            predicted half of the table.
        extrapolation: Boundary policy of the returned table.
        interpolate: Interpolation mode of the returned table.

    Returns:
        A loaded :class:`EarthOrientationTable`.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidTableError: If the file holds no valid or ordered data.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Earth orientation file not found: {filepath}")

    parsed = parse_finals_file(filepath, split_predictions=split_predictions)
    return EarthOrientationTable(
        parsed.historical,
        predicted=parsed.predicted,
        extrapolation=extrapolation,
        interpolate=interpolate,
    )


def load_table_from_files(
    historical_path: str | Path,
    predicted_path: str | Path | None = None,
    *,
    extrapolation: EOPExtrapolation | str = EOPExtrapolation.HOLD,
    interpolate: bool = True,
) -> EarthOrientationTable:
    """Load a table from separate historical and predicted files.

    Every record of *historical_path* is treated as observed.  Records of
    *predicted_path* are appended only after the last historical epoch.

    Raises:
        FileNotFoundError: If either file does not exist.
        InvalidTableError: If either file holds no valid or ordered data.
    """
    historical_path = Path(historical_path)
    if not historical_path.exists():
        raise FileNotFoundError(f"Earth orientation file not found: {historical_path}")
    historical = parse_finals_file(historical_path, split_predictions=False).historical

    predicted: list[EarthOrientationRecord] = []
    if predicted_path is not None:
        predicted_path = Path(predicted_path)
        if not predicted_path.exists():
            raise FileNotFoundError(f"Earth orientation file not found: {predicted_path}")
        predicted = parse_finals_file(predicted_path, split_predictions=False).historical

    return EarthOrientationTable(
        historical,
        predicted=predicted,
        extrapolation=extrapolation,
        interpolate=interpolate,
    )


def load_cached_table(
    filepath: str | Path | None = None,
    *,
    max_age_days: float = DEFAULT_MAX_AGE_DAYS,
    auto_refresh: bool = True,
    url: str = IERS_FINALS_URL,
    extrapolation: EOPExtrapolation | str = EOPExtrapolation.HOLD,
    interpolate: bool = True,
) -> EarthOrientationTable:
    """Load corrections from a local cache, downloading fresh data when stale.

    If the cached file is missing or older than *max_age_days* and
    *auto_refresh* is enabled, a fresh copy is downloaded.  A failed
    download falls back to the existing (stale) cache file when there is
    one; otherwise the error is raised.

    Args:
        filepath: Path to the cached file.  When ``None`` (the default),
            uses ``<cache_root>/eop/finals.all.iau1980.txt``.
        max_age_days: Maximum acceptable age of the cached file in days.
        auto_refresh: Download when the cache is missing or stale.
        url: Source URL for downloads.
        extrapolation: Boundary policy of the returned table.
        interpolate: Interpolation mode of the returned table.

    Returns:
        Table loaded from the cached (or freshly downloaded) file.

    Raises:
        FileNotFoundError: If there is no cached file and *auto_refresh*
            is disabled.
        httpx.HTTPError: If the download fails and no cached file exists.
        InvalidTableError: If the download holds no finals records and no
            cached file exists, or the cached file cannot be parsed.

    Examples:
        ```python
        from celestjax.eop import load_cached_table

        # Uses default cache location and 7-day refresh
        table = load_cached_table()

        # Custom path and 1-day refresh
        table = load_cached_table("/tmp/eop_cache/finals.txt", max_age_days=1.0)
        ```
    """
    if filepath is None:
        cache = FinalsCache.default(max_age_days)
    else:
        cache = FinalsCache(Path(filepath), max_age_days)

    if auto_refresh and cache.is_stale():
        try:
            download_finals_file(cache.path, url=url)
        except Exception:
            age = cache.age_days()
            if age is None:
                raise
            logger.warning(
                "Failed to download Earth orientation data; using stale cache %s (%.1f days old).",
                cache.path,
                age,
                exc_info=True,
            )

    return load_table_from_file(
        cache.path, extrapolation=extrapolation, interpolate=interpolate
    )


def load_table_from_config(config: CorrectionsConfig) -> EarthOrientationTable:
    """Build a table from the policy knobs in *config*.

    Local files take precedence: with a ``historical_path`` the table is
    read from it (plus ``predicted_path`` when given) and nothing is
    downloaded.  Otherwise the cached IERS download is used.
    """
    extrapolation = EOPExtrapolation(config.extrapolation)
    if config.historical_path is not None:
        if config.predicted_path is None:
            return load_table_from_file(
                config.historical_path,
                extrapolation=extrapolation,
                interpolate=config.interpolate,
            )
        return load_table_from_files(
            config.historical_path,
            config.predicted_path,
            extrapolation=extrapolation,
            interpolate=config.interpolate,
        )
    return load_cached_table(
        max_age_days=config.max_age_days,
        auto_refresh=config.auto_refresh,
        url=config.url or IERS_FINALS_URL,
        extrapolation=extrapolation,
        interpolate=config.interpolate,
    )
