"""Exception types raised by celestjax.

All errors derive from :class:`CelestError`, itself a ``ValueError``, so
callers that already guard numeric input with ``except ValueError`` keep
working.
"""

from __future__ import annotations


class CelestError(ValueError):
    """Base class for celestjax errors."""


class OutOfRangeError(CelestError):
    """An epoch lies outside the calendar floor or a correction table's span."""


class InvalidTableError(CelestError):
    """Correction data was rejected at load time (ordering, duplicates, NaN)."""


class UnsupportedTransformError(CelestError):
    """No conversion route exists between the requested frames."""


class InvalidObserverStateError(CelestError):
    """An observer or observing-condition field is outside its valid domain."""


class AngleFormatError(InvalidObserverStateError):
    """A sexagesimal angle string or vector could not be parsed."""
