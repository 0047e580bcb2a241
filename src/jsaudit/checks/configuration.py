"""
Tunable configuration values owned by checks.

A check declares its tunables (thresholds, limits) as CheckConfiguration
items. Operators override them from the CLI or code with ``set()``,
which parses and validates a string according to the item's unit.

Manifesto:
    - **Effective value:** the override when set, otherwise the default
    - **Unit-aware parsing:** percentages, signed and unsigned integers
    - **Normalized percentages:** stored as a 0-1 fraction, accepted as
      ``"NN%"``, ``"NN"`` (when above 1) or ``"0.NN"``
    - **Loud validation:** bad input raises InvalidConfigurationValueError
      and leaves the current value untouched

Examples:
    >>> cfg = CheckConfiguration(key="lag", description="max lag", default=1000, unit=ConfigurationUnit.UINT)
    >>> cfg.value
    1000.0
    >>> cfg.set("250")
    >>> cfg.value
    250.0
    >>> pct = CheckConfiguration(key="usage", description="usage", default=0.9, unit=ConfigurationUnit.PERCENTAGE)
    >>> pct.set("75%")
    >>> pct.value
    0.75

Tags:
    configuration, thresholds, check-tunables, jsaudit
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, Field

from jsaudit.core.errors import InvalidConfigurationValueError


class ConfigurationUnit(str, Enum):
    PERCENTAGE = "%"
    INT = "int"
    UINT = "uint"


class CheckConfiguration(BaseModel):
    """
    One tunable value of a check.

    Attributes:
        key: Name of the value, unique within its check
        check: Code of the owning check (filled in on registration)
        description: Operator-facing help text
        default: Value used when no override is set
        unit: How ``set()`` parses input
        set_value: Operator override, if any
    """

    key: str
    check: str = ""
    description: str
    default: float
    unit: ConfigurationUnit
    set_value: float | None = Field(default=None)

    @property
    def value(self) -> float:
        """The override when present, else the default."""
        if self.set_value is not None:
            return self.set_value
        return self.default

    @property
    def name(self) -> str:
        """Registry-wide name: lower-cased check code and key."""
        return configuration_name(self.check, self.key)

    def set(self, raw: str) -> None:
        """
        Parse ``raw`` according to ``unit`` and store it as the override.

        Raises:
            InvalidConfigurationValueError: unparseable, negative where not
                allowed, or a percentage above 100
        """
        text = raw.strip()

        if self.unit == ConfigurationUnit.PERCENTAGE:
            number = self._parse_float(text.removesuffix("%").strip())
            if number < 0:
                raise InvalidConfigurationValueError(self.key, raw, "percentage values must be positive")
            if number > 100:
                raise InvalidConfigurationValueError(self.key, raw, "percentage values may not exceed 100")
            # values up to 1 are already fractions, with or without "%"
            if number > 1:
                number = number / 100
        else:
            try:
                number = float(int(text))
            except ValueError:
                raise InvalidConfigurationValueError(self.key, raw, f"{raw!r} is not an integer") from None

            if self.unit == ConfigurationUnit.UINT and number < 0:
                raise InvalidConfigurationValueError(self.key, raw, "value must be positive")

        self.set_value = number

    def reset(self) -> None:
        """Drop the override."""
        self.set_value = None

    def _parse_float(self, text: str) -> float:
        try:
            number = float(text)
        except ValueError:
            raise InvalidConfigurationValueError(self.key, text, f"{text!r} is not a number") from None
        if not math.isfinite(number):
            raise InvalidConfigurationValueError(self.key, text, "value must be finite")
        return number

    def __str__(self) -> str:
        value = self.value
        if self.unit == ConfigurationUnit.PERCENTAGE:
            return f"{value * 100:g}%"
        if float(value).is_integer():
            return f"{int(value):,}"
        return f"{value:,}"


def configuration_name(code: str, key: str) -> str:
    """Composite name used to index configuration across all checks."""
    return f"{code.lower()}_{key}"


__all__ = ["ConfigurationUnit", "CheckConfiguration", "configuration_name"]
