"""
Tests for the jsaudit CLI: analyze, checks, config, report, diff.
"""

from __future__ import annotations

import json

import pytest
import structlog
from typer.testing import CliRunner

from jsaudit.archive import ArchiveBuilder, tag_audit_gather_metadata, tag_cluster, tag_server, tag_server_jetstream
from jsaudit.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def _write_archive(path, jsz_payload, peer, *, offline: bool = False):
    builder = ArchiveBuilder().add(
        "capture/metadata.json",
        {"capture_timestamp": "2026-10-17T09:00:00Z", "connected_server_name": "srv1"},
        tag_audit_gather_metadata(),
    )
    for server in ("srv1", "srv2", "srv3"):
        replicas = [peer(p, offline=offline and p == "srv3") for p in ("srv1", "srv2", "srv3") if p != server]
        builder.add(
            f"capture/clusters/C1/{server}/jsz.json",
            jsz_payload(server, leader="srv1", replicas=replicas),
            tag_cluster("C1"),
            tag_server(server),
            tag_server_jetstream(),
        )
    return builder.write_zip(path)


@pytest.fixture()
def healthy_zip(tmp_path, jsz_payload, peer):
    return _write_archive(tmp_path / "healthy.zip", jsz_payload, peer)


@pytest.fixture()
def failing_zip(tmp_path, jsz_payload, peer):
    return _write_archive(tmp_path / "failing.zip", jsz_payload, peer, offline=True)


class TestRootApp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("jsaudit ")

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)


class TestAnalyze:
    def test_healthy_archive(self, healthy_zip):
        result = runner.invoke(app, ["--log-level", "WARNING", "analyze", str(healthy_zip)])
        assert result.exit_code == 0, result.output
        assert "META_001" in result.output
        assert "PASS: 3" in result.output

    def test_failing_archive_exits_one(self, failing_zip):
        result = runner.invoke(app, ["analyze", str(failing_zip), "--json"])
        assert result.exit_code == 1

        data = json.loads(result.stdout)
        assert data["outcomes"] == {"PASS": 2, "WARN": 0, "FAIL": 1, "SKIP": 0}
        assert data["metadata"]["connected_server_name"] == "srv1"
        offline = next(c for c in data["checks"] if c["check"]["code"] == "META_001")
        assert offline["examples"]["examples"] == [
            "C1 - srv1 reports peer srv3 as offline",
            "C1 - srv2 reports peer srv3 as offline",
        ]

    def test_skip_option(self, failing_zip):
        result = runner.invoke(app, ["analyze", str(failing_zip), "--skip", "meta_001", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["skipped"] == ["meta_001"]
        assert data["outcomes"]["SKIP"] == 1

    def test_skip_from_environment(self, failing_zip, monkeypatch):
        monkeypatch.setenv("JSAUDIT_SKIP", "META_001")
        result = runner.invoke(app, ["analyze", str(failing_zip), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["skipped"] == ["META_001"]

    def test_limit_option(self, failing_zip):
        result = runner.invoke(app, ["analyze", str(failing_zip), "--limit", "1", "--json"])
        offline = next(c for c in json.loads(result.stdout)["checks"] if c["check"]["code"] == "META_001")
        assert offline["examples"]["examples"] == ["C1 - srv1 reports peer srv3 as offline"]
        assert offline["examples"]["total"] == 2

    def test_suite_filter(self, healthy_zip):
        result = runner.invoke(app, ["analyze", str(healthy_zip), "--suite", "nothing", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["checks"] == []

    def test_config_override(self, healthy_zip):
        result = runner.invoke(app, ["analyze", str(healthy_zip), "--config", "meta_003_lag=0", "--json"])
        assert result.exit_code == 0
        lag = next(c for c in json.loads(result.stdout)["checks"] if c["check"]["code"] == "META_003")
        assert lag["check"]["configuration"]["lag"]["set_value"] == 0

    def test_bad_config_override(self, healthy_zip):
        result = runner.invoke(app, ["analyze", str(healthy_zip), "--config", "meta_003_lag=-5"])
        assert result.exit_code == 2
        assert "Error" in result.output

    def test_malformed_config_override(self, healthy_zip):
        result = runner.invoke(app, ["analyze", str(healthy_zip), "--config", "meta_003_lag"])
        assert result.exit_code == 2

    def test_missing_archive(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "absent.zip")])
        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_parallel_workers(self, failing_zip):
        result = runner.invoke(app, ["analyze", str(failing_zip), "--workers", "3", "--json"])
        codes = [c["check"]["code"] for c in json.loads(result.stdout)["checks"]]
        assert codes == ["META_001", "META_002", "META_003"]


class TestCatalog:
    def test_checks_json(self):
        result = runner.invoke(app, ["checks", "--json"])
        assert result.exit_code == 0
        assert [c["code"] for c in json.loads(result.stdout)] == ["META_001", "META_002", "META_003"]

    def test_checks_table(self):
        result = runner.invoke(app, ["checks"])
        assert result.exit_code == 0
        assert "META_002" in result.output

    def test_config_json(self):
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        (item,) = json.loads(result.stdout)
        assert item["name"] == "meta_003_lag"
        assert item["value"] == 1000
        assert item["unit"] == "uint"

    def test_config_preview_override(self):
        result = runner.invoke(app, ["config", "--config", "META_003_lag=42", "--json"])
        assert json.loads(result.stdout)[0]["value"] == 42

    def test_unknown_config_name(self):
        result = runner.invoke(app, ["config", "--config", "meta_009_lag=1"])
        assert result.exit_code == 2
        assert "unknown configuration" in result.output


class TestSavedReports:
    def test_save_report_and_diff(self, healthy_zip, failing_zip, tmp_path):
        before = tmp_path / "before.json"
        after = tmp_path / "after.json"
        assert runner.invoke(app, ["analyze", str(healthy_zip), "--save", str(before)]).exit_code == 0
        assert runner.invoke(app, ["analyze", str(failing_zip), "--save", str(after)]).exit_code == 1

        report = runner.invoke(app, ["report", str(after), "--json"])
        assert report.exit_code == 0
        assert json.loads(report.stdout) == json.loads(after.read_text())

        rendered = runner.invoke(app, ["report", str(after)])
        assert "C1 - srv1 reports peer srv3 as offline" in rendered.output

        diff = runner.invoke(app, ["diff", str(before), str(after), "--json"])
        assert diff.exit_code == 0
        assert json.loads(diff.stdout) == [
            {"code": "META_001", "name": "Meta cluster offline replicas", "before": "PASS", "after": "FAIL"}
        ]

    def test_report_invalid_file(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text(json.dumps({"checks": [], "outcomes": {"MAYBE": 1}}))
        result = runner.invoke(app, ["report", str(path)])
        assert result.exit_code == 2
        assert "cannot load analysis" in result.output
