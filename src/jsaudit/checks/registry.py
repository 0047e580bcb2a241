"""Catalog of available checks and their tunable configuration.

Manifesto:
    A registry value, owned by the host process, lets built-in suites and
    plugins add checks at startup without import-time coupling. Bad
    registrations are reported, not fatal: ``register`` raises a
    RegistrationError listing every rejected check and leaves the catalog
    unchanged for that batch.

Tags:
    jsaudit, checks, registry, plugin-registration

Doc-Types:
    api-reference
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Iterable

from jsaudit.checks.check import Check
from jsaudit.checks.configuration import CheckConfiguration, configuration_name
from jsaudit.core.errors import ConfigError, RegistrationError, RegistrationFailure
from jsaudit.core.logging import get_logger

logger = get_logger(__name__)


class CheckRegistry:
    """Thread-safe catalog of checks.

    Registration happens at startup; afterwards the registry is only read.
    One lock serializes registration and snapshots.
    """

    def __init__(self):
        self._checks: dict[str, Check] = {}
        # lower-cased, matching configuration names and skip lists
        self._codes: set[str] = set()
        self._configuration: dict[str, CheckConfiguration] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._checks)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code.lower() in self._codes

    def register(self, *checks: Check) -> None:
        """
        Add checks to the catalog.

        The batch is atomic: every check is validated first, and if any is
        rejected nothing is added.

        Raises:
            RegistrationError: listing each invalid or duplicate check
        """
        with self._lock:
            failures = self._validate(checks)
            if failures:
                for failure in failures:
                    logger.error("check.registration_failed", check=failure.check, reason=failure.reason)
                raise RegistrationError(failures)

            for check in checks:
                for cfg in check.configuration.values():
                    cfg.check = check.code
                    self._configuration[configuration_name(check.code, cfg.key)] = cfg

                self._checks[check.name] = check
                self._codes.add(check.code.lower())
                logger.debug("check.registered", code=check.code, suite=check.suite, name=check.name)

    def _validate(self, checks: Iterable[Check]) -> list[RegistrationFailure]:
        """Collect every problem in a batch (caller must hold lock)."""
        failures: list[RegistrationFailure] = []
        batch_names: set[str] = set()
        batch_codes: set[str] = set()

        for position, check in enumerate(checks):
            reasons: list[str] = []
            fail = reasons.append

            if not check.code:
                fail("check code is required")
            if not check.name:
                fail("check name is required")
            if not check.description:
                fail("check description is required")
            if check.handler is None or not callable(check.handler):
                fail("check implementation is required")

            if check.name:
                if check.name in self._checks or check.name in batch_names:
                    fail(f"check {check.name!r} already registered")
                batch_names.add(check.name)
            if check.code:
                code = check.code.lower()
                if code in self._codes or code in batch_codes:
                    fail(f"check code {check.code!r} already registered")
                batch_codes.add(code)

            if check.configuration is None:
                check.configuration = {}
            for name, cfg in check.configuration.items():
                if not cfg.key:
                    fail(f"configuration {name!r}: key is required")
                if not cfg.description:
                    fail(f"configuration {cfg.key or name!r}: description is required")

            ident = check.code or check.name or f"#{position}"
            failures.extend(RegistrationFailure(ident, reason) for reason in reasons)

        return failures

    def default_checks(self, suites: Iterable[str] | None = None) -> list[Check]:
        """Snapshot of the catalog sorted by code, optionally limited to ``suites``."""
        wanted = {s.lower() for s in suites} if suites else None
        with self._lock:
            checks = [_snapshot(c) for c in self._checks.values() if wanted is None or c.suite.lower() in wanted]
        return sorted(checks, key=lambda c: c.code)

    def get(self, code: str) -> Check:
        """Look a check up by code (case-insensitive)."""
        with self._lock:
            for check in self._checks.values():
                if check.code.lower() == code.lower():
                    return check
        raise KeyError(f"Check '{code}' not found")

    def suites(self) -> list[str]:
        with self._lock:
            return sorted({c.suite for c in self._checks.values()})

    def configuration_items(self) -> list[CheckConfiguration]:
        """Copies of every tunable, sorted by key then owning check."""
        with self._lock:
            items = [item.model_copy() for item in self._configuration.values()]
        return sorted(items, key=lambda c: (c.key, c.check))

    def configuration_item(self, name: str) -> CheckConfiguration:
        """
        Look up a tunable by its composite ``code_key`` name.

        Raises:
            ConfigError: no such configuration item
        """
        with self._lock:
            item = self._configuration.get(name) or self._configuration.get(name.lower())
            if item is None:
                known = ", ".join(sorted(self._configuration)) or "<none>"
                raise ConfigError(f"unknown configuration {name!r}, known: {known}")
            return item

    def set_configuration(self, name: str, value: str) -> CheckConfiguration:
        """Parse and apply an operator override. Returns the updated item."""
        with self._lock:
            item = self.configuration_item(name)
            item.set(value)
        logger.info("check.configured", name=item.name, value=str(item))
        return item


def _snapshot(check: Check) -> Check:
    return dataclasses.replace(check, configuration={k: v.model_copy() for k, v in check.configuration.items()})


def default_registry() -> CheckRegistry:
    """A registry holding every built-in check suite."""
    from jsaudit.checks.meta import register_meta_checks

    registry = CheckRegistry()
    register_meta_checks(registry)
    return registry


__all__ = ["CheckRegistry", "default_registry"]
