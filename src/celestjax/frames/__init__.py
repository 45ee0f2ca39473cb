"""Primitive frame transformations.

Provides the rotation and refraction building blocks composed by
:class:`~celestjax.transform.FrameTransformEngine`:

- ICRS <-> CIRS: epoch-dependent bias-precession-nutation rotation.
- CIRS <-> GALACTIC: fixed galactic alignment composed with the epoch's
  CIRS -> ICRS rotation.
- CIRS <-> OBSERVED: Earth rotation, polar motion, diurnal aberration,
  horizon rotation and atmospheric refraction.
"""

from celestjax.frames._rotations import (
    Rx,
    Ry,
    Rz,
    spherical_to_unit,
    unit_to_spherical,
    wrap_two_pi,
)
from celestjax.frames.galactic import (
    rotation_cirs_to_galactic,
    rotation_galactic_to_icrs,
    rotation_icrs_to_galactic,
)
from celestjax.frames.icrs_cirs import (
    rotate_spherical,
    rotation_cirs_to_icrs,
    rotation_icrs_to_cirs,
)
from celestjax.frames.observed import (
    ObservedSolution,
    SiteGeometry,
    cirs_to_observed,
    observed_to_cirs,
)
from celestjax.frames.refraction import (
    apply_refraction,
    horizon_taper,
    refraction_offset,
    remove_refraction,
)

__all__ = [
    "ObservedSolution",
    "Rx",
    "Ry",
    "Rz",
    "SiteGeometry",
    "apply_refraction",
    "horizon_taper",
    "cirs_to_observed",
    "observed_to_cirs",
    "refraction_offset",
    "remove_refraction",
    "rotate_spherical",
    "rotation_cirs_to_galactic",
    "rotation_cirs_to_icrs",
    "rotation_galactic_to_icrs",
    "rotation_icrs_to_cirs",
    "rotation_icrs_to_galactic",
    "spherical_to_unit",
    "unit_to_spherical",
    "wrap_two_pi",
]
