"""Tests for src/dicey/config.py."""
from __future__ import annotations

import pytest

from dicey.config import DEFAULT_LIMITS, Limits, limits_from_config, load_config


class TestLoadConfig:
    def test_missing_default_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == {}

    def test_missing_explicit_file(self, tmp_path):
        assert load_config(tmp_path / "nope.toml") == {}

    def test_reads_toml(self, tmp_path):
        path = tmp_path / "dicey.toml"
        path.write_text('[engine]\nmax_dice = 20\n\n[display]\nverbosity = "short"\n')
        assert load_config(path) == {"engine": {"max_dice": 20}, "display": {"verbosity": "short"}}


class TestLimitsFromConfig:
    def test_defaults(self):
        assert limits_from_config({}) == DEFAULT_LIMITS
        assert DEFAULT_LIMITS == Limits(1000, 5000, 100, 100, 100)

    def test_overrides(self):
        limits = limits_from_config({"engine": {"max_dice": 10, "max_iterations": 5}})
        assert limits.max_dice == 10
        assert limits.max_iterations == 5
        assert limits.max_input_length == 1000

    def test_unknown_keys_ignored(self):
        assert limits_from_config({"engine": {"turbo": True}}) == DEFAULT_LIMITS

    @pytest.mark.parametrize("value", ["10", 2.5, True, [1]])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ValueError, match="must be an integer"):
            limits_from_config({"engine": {"max_dice": value}})

    @pytest.mark.parametrize("value", [0, -3])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValueError, match="max_repeat"):
            limits_from_config({"engine": {"max_repeat": value}})
