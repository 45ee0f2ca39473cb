"""Tests for the Angle value type."""

from __future__ import annotations

import math

import pytest

from celestjax.angle import Angle, as_angle
from celestjax.exceptions import AngleFormatError, InvalidObserverStateError


class TestConstruction:
    def test_unit_views(self):
        angle = Angle.from_degrees(180.0)
        assert angle.radians == pytest.approx(math.pi, abs=1e-15)
        assert angle.hours == pytest.approx(12.0, abs=1e-12)
        assert angle.arcseconds == pytest.approx(648000.0, abs=1e-8)

    def test_from_hours(self):
        assert Angle.from_hours(6.0).degrees == pytest.approx(90.0, abs=1e-12)

    def test_from_arcseconds(self):
        assert Angle.from_arcseconds(3600.0).degrees == pytest.approx(1.0, abs=1e-12)

    def test_as_angle(self):
        angle = Angle(1.0)
        assert as_angle(angle) is angle
        assert as_angle(0.5).radians == 0.5
        assert as_angle(90.0, degrees=True).radians == pytest.approx(math.pi / 2, abs=1e-15)


class TestSexagesimalParsing:
    def test_hms_colon(self):
        assert Angle.from_hms("10:00:00").degrees == pytest.approx(150.0, abs=1e-12)

    def test_hms_whitespace(self):
        assert Angle.from_hms("10 30 15.5").hours == pytest.approx(10.5043055555, abs=1e-9)

    def test_custom_delimiter(self):
        assert Angle.from_dms("45|30|00", delimiter="|").degrees == pytest.approx(45.5, abs=1e-12)

    def test_negative_zero_degrees(self):
        """A leading minus sign applies even when the degrees field is zero."""
        assert Angle.from_dms("-00:30:00").degrees == pytest.approx(-0.5, abs=1e-12)

    def test_vector_forms(self):
        assert Angle.from_dms((12, 30, 0)).degrees == pytest.approx(12.5, abs=1e-12)
        assert Angle.from_dms((-1, 0, 30, 0)).degrees == pytest.approx(-0.5, abs=1e-12)

    def test_single_field(self):
        assert Angle.from_dms("-12.25").degrees == pytest.approx(-12.25, abs=1e-12)

    @pytest.mark.parametrize(
        "text",
        ["10:61:00", "10:00:60", "ab:cd:ef", "", "1:2:3:4"],
    )
    def test_malformed_rejected(self, text):
        with pytest.raises(AngleFormatError):
            Angle.from_hms(text)

    def test_format_error_is_observer_state_error(self):
        with pytest.raises(InvalidObserverStateError):
            Angle.from_dms("not an angle")


class TestSexagesimalFormatting:
    def test_hms_string(self):
        assert Angle.from_hours(10.5).to_hms_string() == "10:30:00.000"

    def test_dms_string_has_sign(self):
        assert Angle.from_degrees(45.0).to_dms_string() == "+45:00:00.00"
        assert Angle.from_degrees(-0.5).to_dms_string() == "-00:30:00.00"

    def test_rounding_carries(self):
        assert Angle.from_hms("01:59:59.9996").to_hms_string() == "02:00:00.000"

    def test_delimiter_and_precision(self):
        assert Angle.from_degrees(12.5).to_dms_string(delimiter=" ", ndp=0) == "+12 30 00"

    def test_vectors(self):
        assert Angle.from_hours(-1.5).hms_vector() == (-1, 1, 30, 0.0)
        assert Angle.from_degrees(30.25).dms_vector() == (1, 30, 15, 0.0)

    @pytest.mark.parametrize("text", ["18:36:56.336", "00:00:00.001", "23:59:59.999"])
    def test_hms_round_trip(self, text):
        assert Angle.from_hms(text).to_hms_string() == text

    @pytest.mark.parametrize("text", ["+38:47:01.28", "-89:59:59.99", "+00:00:00.01"])
    def test_dms_round_trip(self, text):
        assert Angle.from_dms(text).to_dms_string() == text

    def test_negative_ndp_rejected(self):
        with pytest.raises(ValueError):
            Angle(1.0).to_hms_string(ndp=-1)


class TestArithmetic:
    def test_wrapped(self):
        assert Angle(-0.1).wrapped().radians == pytest.approx(2 * math.pi - 0.1, abs=1e-15)
        assert Angle(4 * math.pi).wrapped().radians == pytest.approx(0.0, abs=1e-15)
        assert 0.0 <= Angle(-1e-300).wrapped().radians < 2 * math.pi

    def test_operators(self):
        a, b = Angle(1.0), Angle(0.25)
        assert (a + b).radians == 1.25
        assert (a - b).radians == 0.75
        assert (-a).radians == -1.0
        assert float(a) == 1.0

    def test_equality_and_hash(self):
        assert Angle(1.0) == Angle(1.0)
        assert Angle(1.0) != Angle(1.0 + 1e-12)
        assert Angle(1.0).isclose(Angle(1.0 + 1e-13))
        assert len({Angle(1.0), Angle(1.0)}) == 1

    def test_repr(self):
        assert repr(Angle(0.5)) == "Angle(0.5)"
