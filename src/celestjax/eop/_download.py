"""Fetch the IERS finals file (IAU 1980 nutation offsets) over HTTP.

A response is accepted only when at least one of its lines parses as a
finals record, so an error page served with status 200 never replaces a
good cached file.  HTTP and network errors propagate to the caller;
:func:`~celestjax.eop.load_cached_table` decides on the fallback.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from celestjax.eop._cache import FinalsCache
from celestjax.eop._parsers import parse_finals_line
from celestjax.exceptions import InvalidTableError

logger = logging.getLogger(__name__)

IERS_FINALS_URL = "https://datacenter.iers.org/data/latestVersion/finals.all.iau1980.txt"

_TIMEOUT = httpx.Timeout(120.0, connect=15.0)


def fetch_finals_text(
    url: str = IERS_FINALS_URL, *, timeout: httpx.Timeout | float = _TIMEOUT
) -> str:
    """Download a finals file and return its text.

    Raises:
        httpx.HTTPStatusError: If the server answers with a non-2xx status.
        httpx.TransportError: On network failures (DNS, refused, timeout).
        InvalidTableError: If the body holds no parsable finals record.
    """
    logger.info("Fetching Earth orientation data from %s", url)
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    text = response.text

    records = sum(1 for line in text.splitlines() if parse_finals_line(line) is not None)
    if records == 0:
        raise InvalidTableError(f"{url} returned no IERS finals records")
    logger.debug("Fetched %d finals records from %s", records, url)
    return text


def download_finals_file(
    filepath: str | Path,
    *,
    url: str = IERS_FINALS_URL,
    timeout: httpx.Timeout | float = _TIMEOUT,
) -> Path:
    """Fetch a finals file and store it at *filepath*.

    Parent directories are created.  The existing file is replaced only
    after a complete, valid download.

    Returns:
        Resolved path of the stored file.
    """
    text = fetch_finals_text(url, timeout=timeout)
    return FinalsCache(Path(filepath)).store(text)
