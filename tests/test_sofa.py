"""Tests for the ERFA orchestration layer.

Reference values come from ERFA itself or from the SOFA cookbook example
"Tools for Earth Attitude", section 5.5 (2007 April 5, 12h UTC).
"""

import math

import erfa
import numpy as np
import pytest

from celestjax import sofa
from celestjax.exceptions import OutOfRangeError

_UTC1, _UTC2 = 2454195.5, 0.5  # 2007-04-05 12:00:00 UTC


class TestChecked:
    def test_erfa_error_becomes_out_of_range(self):
        with pytest.raises(OutOfRangeError, match="cal2jd"):
            sofa._checked(erfa.cal2jd, 2020, 13, 1)

    def test_passes_results_through(self):
        assert sofa._checked(erfa.cal2jd, 2020, 5, 31) == (2400000.5, 59000.0)


class TestTimeScales:
    def test_utc_to_tt(self):
        tt1, tt2 = sofa.utc_to_tt(_UTC1, _UTC2)
        assert ((tt1 - _UTC1) + (tt2 - _UTC2)) * 86400.0 == pytest.approx(33.0 + 32.184, abs=1e-6)

    def test_utc_to_ut1(self):
        ut11, ut12 = sofa.utc_to_ut1(_UTC1, _UTC2, -0.072073685)
        assert ((ut11 - _UTC1) + (ut12 - _UTC2)) * 86400.0 == pytest.approx(-0.072073685, abs=1e-6)


class TestPrecessionNutation:
    def test_matches_c2i06a_without_corrections(self):
        tt1, tt2 = sofa.utc_to_tt(_UTC1, _UTC2)
        ours = np.asarray(sofa.celestial_to_intermediate(tt1, tt2))
        reference = erfa.c2i06a(tt1, tt2)
        np.testing.assert_allclose(ours, reference, atol=1e-10)

    def test_is_rotation(self):
        tt1, tt2 = sofa.utc_to_tt(_UTC1, _UTC2)
        m = np.asarray(sofa.celestial_to_intermediate(tt1, tt2, 1e-9, -2e-9))
        np.testing.assert_allclose(m @ m.T, np.eye(3), atol=1e-14)
        assert np.linalg.det(m) == pytest.approx(1.0, abs=1e-14)

    def test_nutation_offsets_move_the_pole(self):
        tt1, tt2 = sofa.utc_to_tt(_UTC1, _UTC2)
        plain = np.asarray(sofa.celestial_to_intermediate(tt1, tt2))
        corrected = np.asarray(sofa.celestial_to_intermediate(tt1, tt2, 1e-7, 1e-7))
        shift = np.abs(corrected - plain).max()
        assert 1e-9 < shift < 1e-6

    def test_apparent_minus_mean_sidereal_time(self):
        tt1, tt2 = sofa.utc_to_tt(_UTC1, _UTC2)
        gmst = sofa.mean_sidereal_time(_UTC1, _UTC2, tt1, tt2)
        gast = sofa.apparent_sidereal_time(_UTC1, _UTC2, tt1, tt2)
        ee = math.remainder(gast - gmst, 2.0 * math.pi)
        assert ee == pytest.approx(erfa.ee06a(tt1, tt2), abs=1e-12)


class TestSiteContext:
    def _context(self, pressure_hpa: float) -> dict[str, float]:
        return sofa.site_context(
            _UTC1, _UTC2, -0.072073685,
            math.radians(9.712156), math.radians(52.385639), 200.0,
            2.55060238e-7, 1.860359247e-6,
            pressure_hpa, 10.0, 0.5, 0.55,
        )

    def test_keys(self):
        ctx = self._context(1000.0)
        assert set(ctx) == {"eral", "xpl", "ypl", "sphi", "cphi", "diurab", "refa", "refb"}
        assert all(isinstance(v, float) for v in ctx.values())

    def test_refraction_constants(self):
        ctx = self._context(1000.0)
        refa, refb = erfa.refco(1000.0, 10.0, 0.5, 0.55)
        assert ctx["refa"] == pytest.approx(refa, abs=1e-15)
        assert ctx["refb"] == pytest.approx(refb, abs=1e-15)
        assert 2e-4 < ctx["refa"] < 4e-4

    def test_zero_pressure_disables_refraction(self):
        ctx = self._context(0.0)
        assert ctx["refa"] == 0.0
        assert ctx["refb"] == 0.0

    def test_diurnal_aberration_magnitude(self):
        # Equatorial rotation speed is about 465 m/s, so diurab < 1.6e-6
        assert 0.0 < self._context(1000.0)["diurab"] < 1.6e-6


class TestGeometry:
    def test_angular_separation(self):
        assert sofa.angular_separation(0.0, 0.0, math.pi / 2, 0.0) == pytest.approx(math.pi / 2)

    def test_galactic_centre(self):
        ra, dec = sofa.galactic_to_icrs(0.0, 0.0)
        assert math.degrees(ra) == pytest.approx(266.40499, abs=1e-4)
        assert math.degrees(dec) == pytest.approx(-28.93617, abs=1e-4)
