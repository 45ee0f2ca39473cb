"""On-disk cache of the IERS finals file.

The cache root is ``$CELESTJAX_CACHE`` when set, otherwise
``$XDG_CACHE_HOME/celestjax``, otherwise ``~/.cache/celestjax``.  Finals
files live in its ``eop`` subdirectory.  Nothing is created until a file
is stored.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from celestjax.constants import SECONDS_PER_DAY

logger = logging.getLogger(__name__)

CACHE_ENV_VAR = "CELESTJAX_CACHE"

FINALS_FILENAME = "finals.all.iau1980.txt"

DEFAULT_MAX_AGE_DAYS = 7.0


def cache_root() -> Path:
    """Directory under which celestjax keeps downloaded data."""
    override = os.environ.get(CACHE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "celestjax"


@dataclass(frozen=True)
class FinalsCache:
    """A cached finals file and the age past which it is due for refresh.

    Attributes:
        path: Location of the cached file.
        max_age_days: Age in days beyond which :meth:`is_stale` is true.
    """

    path: Path
    max_age_days: float = DEFAULT_MAX_AGE_DAYS

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if math.isnan(self.max_age_days) or self.max_age_days < 0.0:
            raise ValueError(f"max_age_days must be non-negative, got {self.max_age_days}")

    @classmethod
    def default(cls, max_age_days: float = DEFAULT_MAX_AGE_DAYS) -> FinalsCache:
        """The cache at ``<cache_root>/eop/finals.all.iau1980.txt``."""
        return cls(cache_root() / "eop" / FINALS_FILENAME, max_age_days)

    def age_days(self) -> float | None:
        """Days since the file was written, or ``None`` when it is absent."""
        try:
            written = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        # clock skew can put the mtime in the future
        return max(0.0, time.time() - written) / SECONDS_PER_DAY

    def is_stale(self) -> bool:
        age = self.age_days()
        return age is None or age > self.max_age_days

    def store(self, text: str) -> Path:
        """Replace the cached file with *text* in one rename.

        A reader sees either the previous file or the new one.  If writing
        fails, the previous file is left as it was.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, scratch = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".part"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(scratch, self.path)
        except Exception:
            Path(scratch).unlink(missing_ok=True)
            raise
        logger.info("Stored %d bytes of Earth orientation data in %s", len(text), self.path)
        return self.path.resolve()
