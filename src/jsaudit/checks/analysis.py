"""
Analysis report: the aggregate result of running a check set on an archive.

Manifesto:
    The report is the persisted contract of an audit run. It is saved as
    JSON, reloaded later for display or comparison, and a reload must
    reproduce exactly the structure that was saved.

    - **Self-describing:** ``type`` names the report format version
    - **Exhaustive:** every requested check appears once in ``checks``
    - **Strict on load:** unknown outcome labels are rejected, and an
      ``outcome`` code must agree with its ``outcome_string``

Architecture:
    ::

        {
          "type": "io.nats.audit.v1.analysis",
          "time": "2026-10-17T10:00:00Z",
          "metadata": {...},                 gather metadata
          "skipped": ["META_003"],
          "checks": [                        one CheckResult per check
            {"check": {...}, "outcome": 2, "outcome_string": "FAIL",
             "examples": {"examples": [...], "limit": 10, "total": 1}}
          ],
          "outcomes": {"PASS": 1, "WARN": 0, "FAIL": 1, "SKIP": 1}
        }

Examples:
    >>> save_analysis(analysis, "report.json")
    >>> load_analysis("report.json") == analysis
    True

Tags:
    analysis, report, persistence, round-trip, jsaudit

Doc-Types:
    - API Reference
    - Report Format Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from jsaudit.archive.models import AuditMetadata
from jsaudit.checks.check import CheckDescriptor
from jsaudit.checks.examples import ExamplesCollection
from jsaudit.checks.outcome import OUTCOME_LABELS, Outcome
from jsaudit.core.errors import UnknownOutcomeError
from jsaudit.core.timestamps import to_rfc3339, utc_now

ANALYSIS_TYPE = "io.nats.audit.v1.analysis"


class CheckResult(BaseModel):
    """Outcome of one check's execution against one archive."""

    check: CheckDescriptor
    outcome: Outcome
    outcome_string: str = ""
    examples: ExamplesCollection = Field(default_factory=ExamplesCollection)

    @field_validator("outcome", mode="before")
    @classmethod
    def _parse_outcome(cls, value):
        if isinstance(value, Outcome):
            return value
        if isinstance(value, str) and not value.lstrip("-").isdigit():
            return Outcome.from_label(value)
        try:
            code = int(value)
        except (TypeError, ValueError):
            raise UnknownOutcomeError(f"invalid outcome {value!r}") from None
        return Outcome.from_code(code)

    @model_validator(mode="after")
    def _sync_label(self) -> CheckResult:
        if self.outcome_string and Outcome.from_label(self.outcome_string) != self.outcome:
            raise UnknownOutcomeError(
                f"outcome {int(self.outcome)} does not match outcome_string {self.outcome_string!r}"
            )
        self.outcome_string = self.outcome.label
        return self

    @field_serializer("outcome")
    def _dump_outcome(self, outcome: Outcome) -> int:
        return int(outcome)


class Analysis(BaseModel):
    """The report of every check result for one archive."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = ANALYSIS_TYPE
    time: datetime = Field(default_factory=utc_now)
    metadata: AuditMetadata = Field(default_factory=AuditMetadata)
    skipped: list[str] = Field(default_factory=list)
    results: list[CheckResult] = Field(default_factory=list, alias="checks")
    outcomes: dict[str, int] = Field(default_factory=lambda: dict.fromkeys(OUTCOME_LABELS, 0))

    @field_validator("outcomes")
    @classmethod
    def _known_labels(cls, value: dict[str, int]) -> dict[str, int]:
        for label in value:
            if label not in OUTCOME_LABELS:
                raise UnknownOutcomeError(f"unknown outcome label {label!r}")
        return {label: value.get(label, 0) for label in OUTCOME_LABELS}

    @field_serializer("time")
    def _dump_time(self, value: datetime) -> str:
        return to_rfc3339(value)

    def count(self, outcome: Outcome) -> int:
        return self.outcomes.get(outcome.label, 0)

    @property
    def failed(self) -> bool:
        return self.count(Outcome.FAIL) > 0

    def result(self, code: str) -> CheckResult:
        """Result for a check code (case-insensitive)."""
        for res in self.results:
            if res.check.code.lower() == code.lower():
                return res
        raise KeyError(f"no result for check '{code}'")

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> Analysis:
        return cls.model_validate_json(data)


def save_analysis(analysis: Analysis, path: str | Path) -> Path:
    """Write ``analysis`` as JSON to ``path``."""
    path = Path(path)
    path.write_text(analysis.to_json(), encoding="utf-8")
    return path


def load_analysis(path: str | Path) -> Analysis:
    """
    Load an analysis report previously written by ``save_analysis``.

    Raises:
        OSError: the file cannot be read
        pydantic.ValidationError: the content is not a valid report,
            including unknown outcome labels
    """
    return Analysis.from_json(Path(path).read_bytes())


# ── Comparison ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class OutcomeChange:
    """A check whose outcome differs between two analyses.

    ``before``/``after`` is None when the check is absent on that side.
    """

    code: str
    name: str
    before: Outcome | None
    after: Outcome | None

    def __str__(self) -> str:
        before = self.before.label if self.before is not None else "----"
        after = self.after.label if self.after is not None else "----"
        return f"{self.code} {before} -> {after}"


def diff_analyses(before: Analysis, after: Analysis) -> list[OutcomeChange]:
    """Outcome changes between two analyses, sorted by check code."""
    old = {r.check.code: r for r in before.results}
    new = {r.check.code: r for r in after.results}

    changes = []
    for code in sorted(old.keys() | new.keys()):
        a, b = old.get(code), new.get(code)
        a_outcome = a.outcome if a else None
        b_outcome = b.outcome if b else None
        if a_outcome != b_outcome:
            name = (b or a).check.name
            changes.append(OutcomeChange(code, name, a_outcome, b_outcome))
    return changes


__all__ = [
    "ANALYSIS_TYPE",
    "Analysis",
    "CheckResult",
    "OutcomeChange",
    "diff_analyses",
    "load_analysis",
    "save_analysis",
]
