"""Earth orientation corrections (UT1-UTC, polar motion, nutation offsets).

Provides a thread-safe, atomically refreshable table of tabulated
corrections with JAX-backed interpolation, plus providers that read IERS
``finals`` files or a cached download.

Typical usage::

    from celestjax.eop import load_cached_table
    table = load_cached_table()
    record = table.lookup(59000.5)
"""

from celestjax.eop._cache import CACHE_ENV_VAR, FINALS_FILENAME, FinalsCache, cache_root
from celestjax.eop._download import IERS_FINALS_URL, download_finals_file, fetch_finals_text
from celestjax.eop._lookup import interpolate_values
from celestjax.eop._parsers import (
    FinalsEntry,
    ParsedFinals,
    parse_finals_file,
    parse_finals_line,
)
from celestjax.eop._providers import (
    load_cached_table,
    load_table_from_config,
    load_table_from_file,
    load_table_from_files,
    static_table,
    zero_table,
)
from celestjax.eop._table import EarthOrientationTable, merge_records, validate_records
from celestjax.eop._types import (
    CorrectionQuery,
    EarthOrientationRecord,
    EOPExtrapolation,
    EOPSnapshot,
    TableCoverage,
)

__all__ = [
    "CACHE_ENV_VAR",
    "FINALS_FILENAME",
    "IERS_FINALS_URL",
    "CorrectionQuery",
    "EOPExtrapolation",
    "EOPSnapshot",
    "EarthOrientationRecord",
    "EarthOrientationTable",
    "FinalsCache",
    "FinalsEntry",
    "ParsedFinals",
    "TableCoverage",
    "cache_root",
    "download_finals_file",
    "fetch_finals_text",
    "interpolate_values",
    "load_cached_table",
    "load_table_from_config",
    "load_table_from_file",
    "load_table_from_files",
    "merge_records",
    "parse_finals_file",
    "parse_finals_line",
    "static_table",
    "validate_records",
    "zero_table",
]
