"""
Check definition and single-check execution.

A check is a named, versioned rule: a pure function from (configuration,
Reader) to an Outcome plus bounded supporting examples.

Manifesto:
    Checks should be:
    - **Named:** stable ``code`` for skip lists and configuration,
      unique human ``name`` for reports
    - **Grouped:** ``suite`` collects related checks (``meta``, ...)
    - **Pure:** same archive + configuration → same outcome and examples
    - **Contained:** a raising handler becomes SKIPPED with the error
      text captured; it never aborts the run

Architecture:
    ::

        run_check(check, reader, limit)
            examples = ExamplesCollection(limit=limit)
            outcome  = check.handler(check, reader, examples, log)
                       └─ raises → SKIPPED, examples.error = str(err)
            return outcome, examples

Examples:
    >>> def always_pass(check, reader, examples, log):
    ...     return Outcome.PASS
    >>> check = Check(code="DEMO_001", suite="demo", name="Demo",
    ...               description="Always passes", handler=always_pass)
    >>> run_check(check, reader, limit=5)
    (<Outcome.PASS: 0>, ExamplesCollection(examples=[], limit=5, total=0, error=None, dropped=0))

Tags:
    check, rule, handler, execution, jsaudit

Doc-Types:
    - API Reference
    - Writing Checks Guide
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, Field

from jsaudit.archive.reader import Reader
from jsaudit.checks.configuration import CheckConfiguration
from jsaudit.checks.examples import ExamplesCollection
from jsaudit.checks.outcome import Outcome
from jsaudit.core.errors import CheckCancelledError, UnknownOutcomeError
from jsaudit.core.logging import get_logger

logger = get_logger(__name__)


class CheckHandler(Protocol):
    """Implementation of a check.

    Return the outcome; raise to signal that the check could not run.
    Handlers returning FAIL or PASS_WITH_ISSUES must have added at least
    one example.
    """

    def __call__(self, check: Check, reader: Reader, examples: ExamplesCollection, log: Any) -> Outcome: ...


@dataclass
class Check:
    """
    The basic unit of analysis run against an archive.

    Attributes:
        code: Stable identifier, used by skip lists and configuration names
        suite: Group of related checks
        name: Unique human-readable name
        description: What a passing check means
        handler: The rule implementation
        configuration: Tunables by key
    """

    code: str
    suite: str
    name: str
    description: str
    handler: CheckHandler | None
    configuration: dict[str, CheckConfiguration] = field(default_factory=dict)

    def config_value(self, key: str) -> float:
        """Effective value of one of this check's tunables."""
        return self.configuration[key].value

    def describe(self) -> CheckDescriptor:
        """Snapshot of the serializable part of this check."""
        return CheckDescriptor(
            code=self.code,
            suite=self.suite,
            name=self.name,
            description=self.description,
            configuration={k: v.model_copy() for k, v in self.configuration.items()},
        )


class CheckDescriptor(BaseModel):
    """A check as it appears in a saved report: everything but the handler."""

    code: str
    suite: str = ""
    name: str
    description: str
    configuration: dict[str, CheckConfiguration] = Field(default_factory=dict)


def run_check(
    check: Check,
    reader: Reader,
    limit: int,
    cancel: threading.Event | None = None,
) -> tuple[Outcome, ExamplesCollection]:
    """
    Run one check, handling setup and errors.

    Args:
        check: The check to run
        reader: Archive to run against
        limit: Max examples stored (0 = unbounded)
        cancel: Optional run-wide cancellation signal; archive loads
            raise once it is set

    Returns:
        The outcome and the examples the handler recorded. Any exception
        from the handler yields SKIPPED with the error text in
        ``examples.error``.
    """
    examples = ExamplesCollection(limit=limit)
    log = logger.bind(check=check.code)

    if cancel is not None and cancel.is_set():
        examples.error = str(CheckCancelledError())
        log.warning("check.cancelled", started=False)
        return Outcome.SKIPPED, examples

    if check.handler is None:
        examples.error = f"check {check.code} has no implementation"
        log.error("check.no_handler")
        return Outcome.SKIPPED, examples

    try:
        outcome = check.handler(check, reader.with_cancel(cancel), examples, log)
        if not isinstance(outcome, Outcome):
            outcome = Outcome.from_code(outcome)
    except CheckCancelledError as e:
        examples.error = str(e)
        log.warning("check.cancelled", started=True)
        return Outcome.SKIPPED, examples
    except UnknownOutcomeError as e:
        examples.error = str(e)
        log.error("check.bad_outcome", error=str(e))
        return Outcome.SKIPPED, examples
    except Exception as e:  # noqa: BLE001
        examples.error = str(e) or type(e).__name__
        log.error("check.error", error=examples.error, error_type=type(e).__name__)
        return Outcome.SKIPPED, examples

    log.debug("check.completed", outcome=outcome.label, examples=examples.count())
    return outcome, examples


__all__ = ["Check", "CheckDescriptor", "CheckHandler", "run_check"]
