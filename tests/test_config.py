"""Tests for the celestjax.config module."""

import dataclasses

import jax.numpy as jnp
import pytest

from celestjax.config import CorrectionsConfig, get_dtype, set_dtype
from celestjax.eop import EOPExtrapolation, static_table


@pytest.fixture(autouse=True)
def restore_dtype():
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float64

    def test_x64_enabled(self):
        assert jnp.zeros(1).dtype == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_roundtrip(self):
        for dtype in (jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_half_precision_rejected(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.float16)

    def test_table_arrays_follow_dtype(self):
        set_dtype(jnp.float32)
        table = static_table(dut1=0.25)
        assert table._snapshot.values.dtype == jnp.float32
        assert table.lookup(59000.0).dut1 == pytest.approx(0.25)


class TestCorrectionsConfig:
    def test_defaults(self):
        config = CorrectionsConfig()
        assert config.historical_path is None
        assert config.predicted_path is None
        assert config.url is None
        assert config.auto_refresh is True
        assert config.max_age_days == 7.0
        assert EOPExtrapolation(config.extrapolation) is EOPExtrapolation.HOLD
        assert config.interpolate is True

    def test_frozen(self):
        config = CorrectionsConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.auto_refresh = False
