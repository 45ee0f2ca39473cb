import jax.numpy as jnp
import pytest

from celestjax.config import set_dtype
from celestjax.eop import EarthOrientationRecord, EarthOrientationTable


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    test_config.py switches to float32 in a few tests; this fixture makes
    sure every other test starts from the library default.
    """
    set_dtype(jnp.float64)


class FakeWallClock:
    """Manually advanced monotonic seconds source."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def wall():
    return FakeWallClock()


@pytest.fixture
def synthetic_records() -> list[EarthOrientationRecord]:
    """Three consecutive daily records with distinct, easy-to-average values."""
    return [
        EarthOrientationRecord(59000.0, dut1=-0.20, xp=0.10, yp=0.30, dpsi=-0.050, deps=-0.008),
        EarthOrientationRecord(59001.0, dut1=-0.22, xp=0.12, yp=0.34, dpsi=-0.054, deps=-0.006),
        EarthOrientationRecord(59002.0, dut1=-0.26, xp=0.16, yp=0.36, dpsi=-0.052, deps=-0.004),
    ]


@pytest.fixture
def synthetic_table(synthetic_records) -> EarthOrientationTable:
    return EarthOrientationTable(synthetic_records)


def _put(chars: list[str], columns: slice, text: str) -> None:
    width = columns.stop - columns.start
    assert len(text) <= width, f"{text!r} does not fit in {width} columns"
    chars[columns] = list(text.rjust(width))


def build_finals_line(
    mjd: float,
    xp: float,
    yp: float,
    dut1: float,
    dpsi_mas: float | None = None,
    deps_mas: float | None = None,
    *,
    flag: str = "I",
    bulletin_b: tuple[float, float, float, float, float] | None = None,
) -> str:
    """Lay out one IERS finals (IAU 1980) line with the given values."""
    chars = [" "] * 187
    _put(chars, slice(6, 15), f"{mjd:.2f}")
    _put(chars, slice(17, 27), f"{xp:.6f}")
    _put(chars, slice(36, 46), f"{yp:.6f}")
    chars[57] = flag
    _put(chars, slice(58, 68), f"{dut1:.7f}")
    if dpsi_mas is not None:
        _put(chars, slice(96, 106), f"{dpsi_mas:.3f}")
    if deps_mas is not None:
        _put(chars, slice(115, 125), f"{deps_mas:.3f}")
    if bulletin_b is not None:
        b_xp, b_yp, b_dut1, b_dpsi, b_deps = bulletin_b
        _put(chars, slice(134, 144), f"{b_xp:.6f}")
        _put(chars, slice(144, 154), f"{b_yp:.6f}")
        _put(chars, slice(154, 165), f"{b_dut1:.7f}")
        _put(chars, slice(165, 175), f"{b_dpsi:.3f}")
        _put(chars, slice(175, 185), f"{b_deps:.3f}")
    return "".join(chars).rstrip()


@pytest.fixture
def finals_line():
    """Factory fixture producing IERS finals lines."""
    return build_finals_line


@pytest.fixture
def finals_text() -> str:
    """A small finals file: a header, three observed lines and two predictions."""
    lines = [
        "IERS finals.all (IAU1980) test excerpt",
        build_finals_line(
            59000.0, 0.10, 0.30, -0.20, -50.0, -8.0,
            bulletin_b=(0.11, 0.31, -0.21, -51.0, -9.0),
        ),
        build_finals_line(59001.0, 0.12, 0.34, -0.22, -54.0, -6.0),
        build_finals_line(59002.0, 0.16, 0.36, -0.26, -52.0, -4.0),
        build_finals_line(59003.0, 0.18, 0.38, -0.28, flag="P"),
        build_finals_line(59004.0, 0.20, 0.40, -0.30, flag="P"),
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def finals_file(tmp_path, finals_text):
    path = tmp_path / "finals.all.iau1980.txt"
    path.write_text(finals_text, encoding="utf-8")
    return path
