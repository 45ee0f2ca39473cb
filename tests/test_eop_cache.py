"""Tests for the on-disk finals cache."""

from __future__ import annotations

import math
import os
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from celestjax.eop import CACHE_ENV_VAR, FINALS_FILENAME, FinalsCache, cache_root


def _backdate(path: Path, days: float) -> None:
    then = time.time() - days * 86400.0
    os.utime(path, (then, then))


class TestCacheRoot:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CACHE_ENV_VAR, str(tmp_path / "mine"))
        assert cache_root() == tmp_path / "mine"

    def test_xdg_cache_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv(CACHE_ENV_VAR, raising=False)
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))
        assert cache_root() == tmp_path / "xdg" / "celestjax"

    def test_home_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv(CACHE_ENV_VAR, raising=False)
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setattr(Path, "home", staticmethod(lambda: tmp_path))
        assert cache_root() == tmp_path / ".cache" / "celestjax"

    def test_nothing_created_until_stored(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CACHE_ENV_VAR, str(tmp_path / "lazy"))
        cache = FinalsCache.default()
        assert cache.path == tmp_path / "lazy" / "eop" / FINALS_FILENAME
        assert not (tmp_path / "lazy").exists()


class TestFinalsCache:
    def test_missing_file_is_stale(self, tmp_path):
        cache = FinalsCache(tmp_path / "absent.txt")
        assert cache.age_days() is None
        assert cache.is_stale()

    def test_age_and_staleness(self, tmp_path):
        path = tmp_path / "finals.txt"
        path.write_text("x", encoding="utf-8")
        _backdate(path, 3.0)
        assert FinalsCache(path).age_days() == pytest.approx(3.0, abs=0.01)
        assert not FinalsCache(path, max_age_days=7.0).is_stale()
        assert FinalsCache(path, max_age_days=1.0).is_stale()

    def test_future_mtime_counts_as_fresh(self, tmp_path):
        path = tmp_path / "finals.txt"
        path.write_text("x", encoding="utf-8")
        _backdate(path, -2.0)
        assert FinalsCache(path).age_days() == 0.0

    @pytest.mark.parametrize("bad", [-1.0, math.nan])
    def test_bad_max_age_rejected(self, tmp_path, bad):
        with pytest.raises(ValueError):
            FinalsCache(tmp_path / "f.txt", max_age_days=bad)

    def test_store_creates_directories(self, tmp_path):
        cache = FinalsCache(tmp_path / "a" / "b" / "finals.txt")
        result = cache.store("payload\n")
        assert result == cache.path.resolve()
        assert cache.path.read_text(encoding="utf-8") == "payload\n"
        assert [p.name for p in cache.path.parent.iterdir()] == ["finals.txt"]

    def test_failed_store_keeps_previous_file(self, tmp_path):
        cache = FinalsCache(tmp_path / "finals.txt")
        cache.store("good\n")
        with patch("celestjax.eop._cache.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                cache.store("bad\n")
        assert cache.path.read_text(encoding="utf-8") == "good\n"
        assert [p.name for p in tmp_path.iterdir()] == ["finals.txt"]
