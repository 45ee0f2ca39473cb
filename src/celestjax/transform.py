"""Frame conversion engine.

Conversions are directed edges in the four-node graph ICRS, CIRS,
GALACTIC and OBSERVED.  Six edges are primitive (ICRS <-> CIRS,
CIRS <-> GALACTIC, CIRS <-> OBSERVED); every other ordered pair is routed
through CIRS.  Both tables are explicit module-level dictionaries keyed
by frame, so an unknown pair is detected before any computation starts.

Everything a conversion needs for one epoch (the ICRS -> CIRS matrix,
the observing conditions and the ERFA site context) is evaluated lazily
on a per-call context and reused by every edge of the route.  The
correction table is read exactly once per call; the nutation offsets,
ΔUT1 and polar motion all come from that one record, so a concurrent
:meth:`~celestjax.eop.EarthOrientationTable.refresh` yields a result
computed entirely from either the old or the new table.
"""

from __future__ import annotations

import logging
import math
from functools import cached_property
from typing import NamedTuple

import jax.numpy as jnp

from celestjax import sofa
from celestjax.angle import Angle
from celestjax.constants import REFRACTION_HORIZON_MARGIN
from celestjax.coordinates import Frame, SkyPosition
from celestjax.eop import EarthOrientationRecord, EarthOrientationTable, EOPExtrapolation
from celestjax.exceptions import InvalidObserverStateError, UnsupportedTransformError
from celestjax.frames import (
    ObservedSolution,
    SiteGeometry,
    cirs_to_observed,
    observed_to_cirs,
    rotate_spherical,
    rotation_cirs_to_galactic,
    rotation_icrs_to_cirs,
)
from celestjax.observer import ObserverState, ObservingConditions
from celestjax.timevalue import TimeValue

logger = logging.getLogger(__name__)


class TransformResult(NamedTuple):
    """Output of :meth:`FrameTransformEngine.transform`.

    Attributes:
        position: The converted position, tagged with the target frame.
        hour_angle: Observed hour angle, for routes touching OBSERVED.
        apparent: Refraction-shifted line of sight, for routes touching
            OBSERVED, expressed in the route's non-observed endpoint frame.
    """

    position: SkyPosition
    hour_angle: Angle | None = None
    apparent: SkyPosition | None = None


def _as_epoch(epoch: TimeValue | float | str) -> TimeValue:
    if isinstance(epoch, TimeValue):
        return epoch
    if isinstance(epoch, str):
        return TimeValue.from_string(epoch)
    return TimeValue.from_jd(float(epoch))


class _ConversionContext:
    """Per-call quantities shared by the edges of one route."""

    def __init__(
        self,
        epoch: TimeValue,
        corrections: EarthOrientationTable | None,
        extrapolation: EOPExtrapolation | str | None,
        observer: ObserverState | ObservingConditions | None,
        refraction_margin: float,
    ) -> None:
        self.epoch = epoch
        self.corrections = corrections
        self.extrapolation = extrapolation
        self.observer = observer
        self.refraction_margin = refraction_margin
        self.solution: ObservedSolution | None = None

    @cached_property
    def record(self) -> EarthOrientationRecord | None:
        """The single correction record every edge of this call reads."""
        if self.corrections is None:
            return None
        return self.corrections.lookup(self.epoch, self.extrapolation)

    @cached_property
    def icrs_to_cirs(self):
        record = self.record
        if record is None:
            return rotation_icrs_to_cirs(self.epoch)
        return rotation_icrs_to_cirs(self.epoch, record.dpsi, record.deps)

    @cached_property
    def cirs_to_galactic(self):
        return rotation_cirs_to_galactic(self.icrs_to_cirs)

    @cached_property
    def conditions(self) -> ObservingConditions:
        if self.observer is None:
            raise InvalidObserverStateError("Conversions involving OBSERVED need an observer")
        if isinstance(self.observer, ObservingConditions):
            return self.observer
        return ObservingConditions.from_observer_record(self.observer, self.record)

    @cached_property
    def site(self) -> SiteGeometry:
        cond = self.conditions
        xp, yp = cond.polar_motion_rad
        ctx = sofa.site_context(
            *self.epoch.jd_parts(),
            cond.dut1,
            cond.longitude,
            cond.latitude,
            cond.elevation,
            xp,
            yp,
            cond.pressure_hpa,
            cond.temperature_c,
            cond.relative_humidity,
            cond.wavelength_um,
        )
        return SiteGeometry(
            eral=ctx["eral"],
            xpl=ctx["xpl"],
            ypl=ctx["ypl"],
            latitude=cond.latitude,
            diurab=ctx["diurab"],
            refa=ctx["refa"],
            refb=ctx["refb"],
            z_limit=math.pi / 2.0 + self.refraction_margin,
        )


def _icrs_to_cirs(ctx: _ConversionContext, x, y):
    return rotate_spherical(ctx.icrs_to_cirs, x, y)


def _cirs_to_icrs(ctx: _ConversionContext, x, y):
    return rotate_spherical(ctx.icrs_to_cirs.T, x, y)


def _cirs_to_galactic(ctx: _ConversionContext, x, y):
    return rotate_spherical(ctx.cirs_to_galactic, x, y)


def _galactic_to_cirs(ctx: _ConversionContext, x, y):
    return rotate_spherical(ctx.cirs_to_galactic.T, x, y)


def _cirs_to_observed(ctx: _ConversionContext, x, y):
    ctx.solution = cirs_to_observed(x, y, ctx.site)
    return ctx.solution.azimuth, ctx.solution.zenith


def _observed_to_cirs(ctx: _ConversionContext, x, y):
    ctx.solution = observed_to_cirs(x, y, ctx.site)
    return ctx.solution.cirs_ra, ctx.solution.cirs_dec


_EDGES = {
    (Frame.ICRS, Frame.CIRS): _icrs_to_cirs,
    (Frame.CIRS, Frame.ICRS): _cirs_to_icrs,
    (Frame.CIRS, Frame.GALACTIC): _cirs_to_galactic,
    (Frame.GALACTIC, Frame.CIRS): _galactic_to_cirs,
    (Frame.CIRS, Frame.OBSERVED): _cirs_to_observed,
    (Frame.OBSERVED, Frame.CIRS): _observed_to_cirs,
}

_ROUTES = {
    (Frame.ICRS, Frame.CIRS): (Frame.ICRS, Frame.CIRS),
    (Frame.CIRS, Frame.ICRS): (Frame.CIRS, Frame.ICRS),
    (Frame.CIRS, Frame.GALACTIC): (Frame.CIRS, Frame.GALACTIC),
    (Frame.GALACTIC, Frame.CIRS): (Frame.GALACTIC, Frame.CIRS),
    (Frame.CIRS, Frame.OBSERVED): (Frame.CIRS, Frame.OBSERVED),
    (Frame.OBSERVED, Frame.CIRS): (Frame.OBSERVED, Frame.CIRS),
    (Frame.ICRS, Frame.GALACTIC): (Frame.ICRS, Frame.CIRS, Frame.GALACTIC),
    (Frame.GALACTIC, Frame.ICRS): (Frame.GALACTIC, Frame.CIRS, Frame.ICRS),
    (Frame.ICRS, Frame.OBSERVED): (Frame.ICRS, Frame.CIRS, Frame.OBSERVED),
    (Frame.OBSERVED, Frame.ICRS): (Frame.OBSERVED, Frame.CIRS, Frame.ICRS),
    (Frame.GALACTIC, Frame.OBSERVED): (Frame.GALACTIC, Frame.CIRS, Frame.OBSERVED),
    (Frame.OBSERVED, Frame.GALACTIC): (Frame.OBSERVED, Frame.CIRS, Frame.GALACTIC),
}


def _route(source: Frame, target: Frame) -> tuple[Frame, ...]:
    try:
        return _ROUTES[(source, target)]
    except KeyError:
        raise UnsupportedTransformError(
            f"No conversion from {source.name} to {target.name}"
        ) from None


def _walk(ctx: _ConversionContext, path: tuple[Frame, ...], x, y):
    for step in zip(path[:-1], path[1:]):
        x, y = _EDGES[step](ctx, x, y)
    return x, y


class FrameTransformEngine:
    """Converts sky positions between frames at a given epoch.

    The engine holds no mutable state of its own.  The correction table
    is injected, so tests can use synthetic tables and applications can
    share one process-wide table that is refreshed elsewhere.

    Args:
        corrections: Earth orientation table supplying ΔUT1, polar motion
            and nutation offsets.  ``None`` applies zero corrections.
        extrapolation: Overrides the table's boundary policy for lookups
            made by this engine.
        refraction_margin: How far below the horizon [rad] refraction is
            still applied.  Beyond ``90° + margin`` zenith distance the
            observed position equals the unrefracted one.

    Examples:
        ```python
        from celestjax import Frame, FrameTransformEngine, ObserverState, SkyPosition

        engine = FrameTransformEngine()
        star = SkyPosition.from_degrees(150.0, 45.0, Frame.ICRS)
        site = ObserverState(-70.0, -30.0, 2000.0)
        result = engine.transform(star, Frame.OBSERVED, 2459000.5, site)
        result.position.x.degrees, result.hour_angle.hours
        ```
    """

    def __init__(
        self,
        corrections: EarthOrientationTable | None = None,
        *,
        extrapolation: EOPExtrapolation | str | None = None,
        refraction_margin: float = REFRACTION_HORIZON_MARGIN,
    ) -> None:
        if not math.isfinite(refraction_margin) or refraction_margin < 0.0:
            raise ValueError(f"Refraction margin must be non-negative, got {refraction_margin}")
        self.corrections = corrections
        self.extrapolation = None if extrapolation is None else EOPExtrapolation(extrapolation)
        self.refraction_margin = float(refraction_margin)

    def transform(
        self,
        position: SkyPosition,
        target: Frame | str,
        epoch: TimeValue | float | str,
        observer: ObserverState | ObservingConditions | None = None,
    ) -> TransformResult:
        """Convert *position* to *target* with auxiliary outputs.

        Args:
            position: Input position; its frame is the route's source.
            target: Frame to convert to.
            epoch: UTC instant, as a TimeValue, a Julian Date or an ISO
                string.
            observer: Site for routes touching OBSERVED, either an
                :class:`ObserverState` (corrections come from the table) or
                a ready :class:`ObservingConditions`.

        Returns:
            The converted position.  Routes through OBSERVED also carry
            the observed hour angle and the apparent position.

        Raises:
            UnsupportedTransformError: If no route joins the two frames.
            InvalidObserverStateError: If an OBSERVED route has no observer.
            OutOfRangeError: If the epoch is rejected by ERFA or by the
                table's ERROR policy.
        """
        try:
            target = Frame(target)
        except ValueError:
            raise UnsupportedTransformError(f"Unknown target frame {target!r}") from None
        if position.frame is target:
            return TransformResult(position)

        path = _route(position.frame, target)
        ctx = _ConversionContext(
            _as_epoch(epoch), self.corrections, self.extrapolation, observer, self.refraction_margin
        )
        logger.debug("Converting %s via %s", position, " -> ".join(f.name for f in path))
        x, y = _walk(ctx, path, jnp.asarray(position.x.radians), jnp.asarray(position.y.radians))
        result = SkyPosition.from_radians(float(x), float(y), target)

        if ctx.solution is None:
            return TransformResult(result)

        # Apparent direction comes back in CIRS; move it to the other endpoint.
        endpoint = position.frame if target is Frame.OBSERVED else target
        ax, ay = ctx.solution.apparent_ra, ctx.solution.apparent_dec
        if endpoint is not Frame.CIRS:
            ax, ay = _walk(ctx, _ROUTES[(Frame.CIRS, endpoint)], ax, ay)
        return TransformResult(
            result,
            hour_angle=Angle(float(ctx.solution.hour_angle)),
            apparent=SkyPosition.from_radians(float(ax), float(ay), endpoint),
        )

    def convert(
        self,
        position: SkyPosition,
        target: Frame | str,
        epoch: TimeValue | float | str,
        observer: ObserverState | ObservingConditions | None = None,
    ) -> SkyPosition:
        """Convert *position* to *target*, returning only the position."""
        return self.transform(position, target, epoch, observer).position


def convert(
    position: SkyPosition,
    target: Frame | str,
    epoch: TimeValue | float | str,
    observer: ObserverState | ObservingConditions | None = None,
    corrections: EarthOrientationTable | None = None,
) -> SkyPosition:
    """Convert *position* with a one-off :class:`FrameTransformEngine`."""
    return FrameTransformEngine(corrections).convert(position, target, epoch, observer)
