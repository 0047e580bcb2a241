"""
Outcome of running one check against an archive.

Manifesto:
    Four states, each with a fixed 4-letter label used in reports:

    - **PASS:** no issues detected
    - **WARN:** non-critical problems (PassWithIssues)
    - **FAIL:** a bad state was detected
    - **SKIP:** the check did not produce a verdict (skipped, no data,
      runtime error, cancelled)

    The integer values are stable wire codes, not a severity ranking.
    Parsing is exhaustive: an unknown label or code is an error, never a
    silent default, so report-format drift is caught on load.

Examples:
    >>> Outcome.PASS_WITH_ISSUES.label
    'WARN'
    >>> Outcome.from_label("fail")
    <Outcome.FAIL: 2>
    >>> Outcome.from_label("BOGUS")
    Traceback (most recent call last):
    ...
    UnknownOutcomeError: unknown outcome label 'BOGUS'

Tags:
    outcome, enum, report, jsaudit
"""

from __future__ import annotations

from enum import IntEnum

from jsaudit.core.errors import UnknownOutcomeError


class Outcome(IntEnum):
    PASS = 0
    PASS_WITH_ISSUES = 1
    FAIL = 2
    SKIPPED = 3

    @property
    def label(self) -> str:
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_label(cls, label: str) -> Outcome:
        """Parse a 4-letter label (case-insensitive)."""
        try:
            return _BY_LABEL[label.strip().upper()]
        except (KeyError, AttributeError):
            raise UnknownOutcomeError(f"unknown outcome label {label!r}") from None

    @classmethod
    def from_code(cls, code: int) -> Outcome:
        try:
            return cls(code)
        except ValueError:
            raise UnknownOutcomeError(f"unknown outcome code {code!r}") from None


_LABELS = {
    Outcome.PASS: "PASS",
    Outcome.PASS_WITH_ISSUES: "WARN",
    Outcome.FAIL: "FAIL",
    Outcome.SKIPPED: "SKIP",
}
_BY_LABEL = {label: outcome for outcome, label in _LABELS.items()}

# Report order for outcome tallies
OUTCOMES: tuple[Outcome, ...] = tuple(Outcome)
OUTCOME_LABELS: tuple[str, ...] = tuple(o.label for o in OUTCOMES)


__all__ = ["Outcome", "OUTCOMES", "OUTCOME_LABELS"]
