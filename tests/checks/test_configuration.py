"""Tests for jsaudit.checks.configuration - unit-aware tunables."""

from __future__ import annotations

import pytest

from jsaudit.checks.configuration import CheckConfiguration, ConfigurationUnit, configuration_name
from jsaudit.core.errors import ConfigError, InvalidConfigurationValueError


def _cfg(unit: ConfigurationUnit, default: float = 0) -> CheckConfiguration:
    return CheckConfiguration(key="threshold", check="META_003", description="a threshold", default=default, unit=unit)


class TestValue:
    def test_default_until_set(self):
        cfg = _cfg(ConfigurationUnit.UINT, default=1000)
        assert cfg.value == 1000
        cfg.set("25")
        assert cfg.value == 25
        cfg.reset()
        assert cfg.value == 1000

    def test_name(self):
        assert _cfg(ConfigurationUnit.INT).name == "meta_003_threshold"
        assert configuration_name("META_001", "lag") == "meta_001_lag"


class TestPercentage:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("75%", 0.75),
            ("75", 0.75),
            ("0.75", 0.75),
            ("1", 1.0),
            ("1%", 1.0),
            ("0.5%", 0.5),
            ("2%", 0.02),
            ("100", 1.0),
            (" 40 % ", 0.4),
        ],
    )
    def test_parse(self, raw, expected):
        cfg = _cfg(ConfigurationUnit.PERCENTAGE)
        cfg.set(raw)
        assert cfg.value == pytest.approx(expected)

    def test_suffix_keeps_fractions(self):
        cfg = _cfg(ConfigurationUnit.PERCENTAGE)
        cfg.set("0.5%")
        assert cfg.value == pytest.approx(0.5)
        cfg.set("50%")
        assert cfg.value == pytest.approx(0.5)

    @pytest.mark.parametrize("raw", ["-5", "101", "150%", "abc", "nan", "inf", ""])
    def test_rejects(self, raw):
        cfg = _cfg(ConfigurationUnit.PERCENTAGE, default=0.9)
        with pytest.raises(InvalidConfigurationValueError):
            cfg.set(raw)
        assert cfg.value == 0.9

    def test_str(self):
        cfg = _cfg(ConfigurationUnit.PERCENTAGE, default=0.9)
        assert str(cfg) == "90%"


class TestIntegers:
    def test_int_accepts_negative(self):
        cfg = _cfg(ConfigurationUnit.INT)
        cfg.set("-20")
        assert cfg.value == -20

    def test_uint_rejects_negative(self):
        cfg = _cfg(ConfigurationUnit.UINT, default=5)
        with pytest.raises(InvalidConfigurationValueError):
            cfg.set("-1")
        assert cfg.value == 5

    @pytest.mark.parametrize("raw", ["1.5", "ten", ""])
    def test_rejects_non_integers(self, raw):
        with pytest.raises(InvalidConfigurationValueError):
            _cfg(ConfigurationUnit.UINT).set(raw)

    def test_str_groups_thousands(self):
        assert str(_cfg(ConfigurationUnit.UINT, default=1_000_000)) == "1,000,000"

    def test_error_is_config_error(self):
        assert issubclass(InvalidConfigurationValueError, ConfigError)


class TestSerialization:
    def test_round_trip(self):
        cfg = _cfg(ConfigurationUnit.PERCENTAGE, default=0.9)
        cfg.set("50%")
        loaded = CheckConfiguration.model_validate_json(cfg.model_dump_json())
        assert loaded == cfg
        assert loaded.unit is ConfigurationUnit.PERCENTAGE
