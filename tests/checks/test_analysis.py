"""Tests for jsaudit.checks.analysis - report persistence and comparison."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from jsaudit.archive import ArchiveBuilder, Reader
from jsaudit.checks.analysis import (
    ANALYSIS_TYPE,
    Analysis,
    CheckResult,
    diff_analyses,
    load_analysis,
    save_analysis,
)
from jsaudit.checks.check import Check, CheckDescriptor
from jsaudit.checks.configuration import CheckConfiguration, ConfigurationUnit
from jsaudit.checks.outcome import Outcome
from jsaudit.checks.runner import run_checks


def _descriptor(code: str) -> CheckDescriptor:
    return CheckDescriptor(code=code, suite="demo", name=f"Check {code}", description="demo")


def _result(code: str, outcome: Outcome) -> CheckResult:
    return CheckResult(check=_descriptor(code), outcome=outcome)


@pytest.fixture()
def analysis() -> Analysis:
    def failing(check, reader, examples, log):
        for i in range(3):
            examples.add("%s problem %d", check.code, i)
        return Outcome.FAIL

    def passing(check, reader, examples, log):
        return Outcome.PASS

    lag = CheckConfiguration(key="lag", description="lag", default=1000, unit=ConfigurationUnit.UINT)
    lag.set("250")
    checks = [
        Check("DEMO_001", "demo", "Failing", "Always fails", failing),
        Check("DEMO_002", "demo", "Passing", "Always passes", passing, {"lag": lag}),
        Check("DEMO_003", "demo", "Skipped", "Never runs", passing),
    ]
    return run_checks(checks, Reader(ArchiveBuilder().build()), limit=2, skip=["DEMO_003"])


# ── Round trip ───────────────────────────────────────────────────────────


class TestRoundTrip:
    def test_save_then_load_equal(self, analysis, tmp_path):
        path = save_analysis(analysis, tmp_path / "report.json")
        assert load_analysis(path) == analysis

    def test_json_shape(self, analysis):
        data = json.loads(analysis.to_json())

        assert data["type"] == ANALYSIS_TYPE == "io.nats.audit.v1.analysis"
        assert data["time"].endswith("Z")
        assert data["skipped"] == ["DEMO_003"]
        assert data["outcomes"] == {"PASS": 1, "WARN": 0, "FAIL": 1, "SKIP": 1}

        failing = data["checks"][0]
        assert failing["outcome"] == 2
        assert failing["outcome_string"] == "FAIL"
        assert failing["examples"]["examples"] == ["DEMO_001 problem 0", "DEMO_001 problem 1"]
        assert failing["examples"]["total"] == 3
        assert "error" not in failing["examples"]

        configured = data["checks"][1]["check"]["configuration"]["lag"]
        assert configured["check"] == ""
        assert configured["set_value"] == 250

    def test_loaded_config_keeps_override(self, analysis):
        loaded = Analysis.from_json(analysis.to_json())
        assert loaded.result("DEMO_002").check.configuration["lag"].value == 250


# ── Strict loading ───────────────────────────────────────────────────────


class TestStrictLoading:
    def _payload(self, analysis: Analysis) -> dict:
        return json.loads(analysis.to_json())

    def test_unknown_outcome_label_in_tallies(self, analysis):
        payload = self._payload(analysis)
        payload["outcomes"]["MAYBE"] = 1
        with pytest.raises(ValidationError):
            Analysis.model_validate(payload)

    def test_unknown_outcome_string(self, analysis):
        payload = self._payload(analysis)
        payload["checks"][0]["outcome_string"] = "MAYBE"
        with pytest.raises(ValidationError):
            Analysis.model_validate(payload)

    def test_mismatched_outcome_and_label(self, analysis):
        payload = self._payload(analysis)
        payload["checks"][0]["outcome_string"] = "PASS"
        with pytest.raises(ValidationError):
            Analysis.model_validate(payload)

    def test_unknown_outcome_code(self, analysis):
        payload = self._payload(analysis)
        payload["checks"][0]["outcome"] = 9
        with pytest.raises(ValidationError):
            Analysis.model_validate(payload)

    @pytest.mark.parametrize("outcome", [None, [], {}])
    def test_outcome_of_wrong_type(self, analysis, outcome):
        payload = self._payload(analysis)
        payload["checks"][0]["outcome"] = outcome
        with pytest.raises(ValidationError):
            Analysis.model_validate(payload)

    def test_load_null_outcome(self, analysis, tmp_path):
        payload = self._payload(analysis)
        payload["checks"][0]["outcome"] = None
        path = tmp_path / "report.json"
        path.write_text(json.dumps(payload))
        with pytest.raises(ValidationError, match="invalid outcome None"):
            load_analysis(path)

    def test_outcome_given_as_label(self):
        result = CheckResult.model_validate({"check": _descriptor("DEMO_001").model_dump(), "outcome": "warn"})
        assert result.outcome is Outcome.PASS_WITH_ISSUES
        assert result.outcome_string == "WARN"

    def test_missing_tallies_filled(self):
        analysis = Analysis.model_validate({"checks": [], "outcomes": {"FAIL": 2}})
        assert analysis.outcomes == {"PASS": 0, "WARN": 0, "FAIL": 2, "SKIP": 0}

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_analysis(tmp_path / "absent.json")


# ── Accessors ────────────────────────────────────────────────────────────


class TestAccessors:
    def test_failed(self, analysis):
        assert analysis.failed
        assert analysis.count(Outcome.SKIPPED) == 1

    def test_result_lookup(self, analysis):
        assert analysis.result("demo_002").check.name == "Passing"
        with pytest.raises(KeyError):
            analysis.result("DEMO_999")


# ── Diff ─────────────────────────────────────────────────────────────────


class TestDiff:
    def test_changes_sorted_by_code(self):
        before = Analysis(
            results=[_result("B_001", Outcome.PASS), _result("A_001", Outcome.FAIL), _result("C_001", Outcome.PASS)]
        )
        after = Analysis(
            results=[_result("A_001", Outcome.PASS), _result("B_001", Outcome.PASS), _result("D_001", Outcome.SKIPPED)]
        )

        changes = diff_analyses(before, after)

        assert [(c.code, c.before, c.after) for c in changes] == [
            ("A_001", Outcome.FAIL, Outcome.PASS),
            ("C_001", Outcome.PASS, None),
            ("D_001", None, Outcome.SKIPPED),
        ]
        assert str(changes[0]) == "A_001 FAIL -> PASS"
        assert str(changes[1]) == "C_001 PASS -> ----"

    def test_identical_analyses(self, analysis):
        assert diff_analyses(analysis, analysis) == []
