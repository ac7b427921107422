"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from washflow.config import (
    AppConfig,
    BackendConfig,
    BookingConfig,
    BroadcastConfig,
    _optional_int,
    _safe_float,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_default_broadcast_timings(self):
        config = BroadcastConfig()
        assert config.resolution_delay_sec > 0
        assert config.tick_interval_sec > 0

    def test_zero_resolution_delay(self):
        config = replace(AppConfig(), broadcast=BroadcastConfig(resolution_delay_sec=0))
        with pytest.raises(ValueError, match="BROADCAST_RESOLUTION_DELAY_SEC"):
            _validate_config(config)

    def test_negative_tick_interval(self):
        config = replace(AppConfig(), broadcast=BroadcastConfig(tick_interval_sec=-1))
        with pytest.raises(ValueError, match="BROADCAST_TICK_INTERVAL_SEC"):
            _validate_config(config)

    def test_negative_price(self):
        config = replace(AppConfig(), booking=BookingConfig(default_wash_price=-5))
        with pytest.raises(ValueError, match="DEFAULT_WASH_PRICE"):
            _validate_config(config)

    def test_blank_currency(self):
        config = replace(AppConfig(), booking=BookingConfig(currency="  "))
        with pytest.raises(ValueError, match="CURRENCY"):
            _validate_config(config)

    def test_negative_cache(self):
        config = replace(AppConfig(), backend=BackendConfig(center_cache_sec=-1))
        with pytest.raises(ValueError, match="CENTER_CACHE_SEC"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_parsing(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_float_parsing(self):
        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("WASHFLOW_TEST_INT", "seven")
        with pytest.raises(ValueError, match="WASHFLOW_TEST_INT"):
            _safe_int("WASHFLOW_TEST_INT", "1")

    def test_optional_int_unset(self, monkeypatch):
        monkeypatch.delenv("WASHFLOW_TEST_SEED", raising=False)
        assert _optional_int("WASHFLOW_TEST_SEED") is None

    def test_optional_int_blank(self, monkeypatch):
        monkeypatch.setenv("WASHFLOW_TEST_SEED", " ")
        assert _optional_int("WASHFLOW_TEST_SEED") is None

    def test_optional_int_set(self, monkeypatch):
        monkeypatch.setenv("WASHFLOW_TEST_SEED", "1234")
        assert _optional_int("WASHFLOW_TEST_SEED") == 1234
