"""
Root Typer application for the jsaudit CLI.

    jsaudit analyze audit.zip --skip META_003 --config meta_003_lag=5000 --save report.json
    jsaudit report report.json
    jsaudit diff yesterday.json report.json
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from typer import Typer

from jsaudit.archive.reader import Reader
from jsaudit.archive.store import ArchiveStore
from jsaudit.checks.analysis import diff_analyses, load_analysis, save_analysis
from jsaudit.checks.registry import CheckRegistry, default_registry
from jsaudit.checks.runner import run_checks
from jsaudit.cli.utils import (
    console,
    fail,
    output_json,
    print_analysis,
    print_checks,
    print_configuration,
    print_diff,
)
from jsaudit.core.errors import ArchiveError, ConfigError
from jsaudit.core.logging import LogContext, configure_logging, get_logger
from jsaudit.core.settings import get_settings

logger = get_logger(__name__)

app = Typer(
    name="jsaudit",
    help="jsaudit - health audits of NATS JetStream diagnostic archives.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("jsaudit")
        except PackageNotFoundError:
            from jsaudit import __version__ as v
        typer.echo(f"jsaudit {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (default from JSAUDIT_LOG_LEVEL)."),
    json_logs: bool | None = typer.Option(
        None, "--json-logs/--console-logs", help="Force JSON or console logs (default: JSON unless a TTY)."
    ),
) -> None:
    """jsaudit CLI - run checks against archives, inspect and compare reports."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=json_logs if json_logs is not None else settings.json_logs,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _apply_configuration(registry: CheckRegistry, overrides: list[str]) -> None:
    for override in overrides:
        name, sep, value = override.partition("=")
        if not sep or not name.strip():
            fail(f"invalid --config {override!r}, expected NAME=VALUE")
        try:
            registry.set_configuration(name.strip(), value)
        except ConfigError as e:
            fail(str(e))


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("analyze")
def analyze(
    archive: Path = typer.Argument(..., help="Archive zip to analyze."),
    skip: list[str] | None = typer.Option(None, "--skip", "-s", help="Check code to skip (repeatable)."),
    suite: list[str] | None = typer.Option(None, "--suite", help="Only run checks of this suite (repeatable)."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, help="Max examples per check (0 = unbounded)."),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Checks run concurrently."),
    config: list[str] | None = typer.Option(None, "--config", "-c", help="Override a tunable, NAME=VALUE."),
    save: Path | None = typer.Option(None, "--save", help="Write the analysis JSON to this path."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run checks against an archive. Exits 1 when any check fails."""
    settings = get_settings()
    registry = default_registry()
    _apply_configuration(registry, config or [])

    try:
        store = ArchiveStore.from_zip(archive)
    except (ArchiveError, OSError) as e:
        fail(str(e))

    checks = registry.default_checks(suite or None)
    skipped = list(skip) if skip else list(settings.skip)

    with LogContext(archive=str(archive)):
        analysis = run_checks(
            checks,
            Reader(store),
            limit=settings.example_limit if limit is None else limit,
            skip=skipped,
            workers=workers or settings.workers,
        )

    if save is not None:
        save_analysis(analysis, save)
        logger.info("cli.analysis_saved", path=str(save))

    if json_out:
        output_json(analysis.to_json())
    else:
        print_analysis(analysis)
        if save is not None:
            console.print(f"[dim]Saved to {save}[/dim]")

    if analysis.failed:
        raise typer.Exit(code=1)


@app.command("checks")
def list_checks(
    suite: list[str] | None = typer.Option(None, "--suite", help="Only list checks of this suite (repeatable)."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the check catalog."""
    checks = default_registry().default_checks(suite or None)
    if json_out:
        output_json([c.describe().model_dump(mode="json") for c in checks])
        return
    print_checks(checks)


@app.command("config")
def list_configuration(
    config: list[str] | None = typer.Option(None, "--config", "-c", help="Preview an override, NAME=VALUE."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List check tunables with their effective values."""
    registry = default_registry()
    _apply_configuration(registry, config or [])
    items = registry.configuration_items()

    if json_out:
        output_json(
            [
                {
                    "name": item.name,
                    "check": item.check,
                    "key": item.key,
                    "unit": item.unit.value,
                    "default": item.default,
                    "value": item.value,
                    "description": item.description,
                }
                for item in items
            ]
        )
        return
    print_configuration(items)


@app.command("report")
def report(
    path: Path = typer.Argument(..., help="Saved analysis JSON."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Render a saved analysis."""
    try:
        analysis = load_analysis(path)
    except (OSError, ValidationError) as e:
        fail(f"cannot load analysis {path}: {e}")

    if json_out:
        output_json(analysis.to_json())
        return
    print_analysis(analysis)


@app.command("diff")
def diff(
    before: Path = typer.Argument(..., help="Earlier analysis JSON."),
    after: Path = typer.Argument(..., help="Later analysis JSON."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show checks whose outcome changed between two analyses."""
    try:
        old, new = load_analysis(before), load_analysis(after)
    except (OSError, ValidationError) as e:
        fail(f"cannot load analysis: {e}")

    changes = diff_analyses(old, new)
    if json_out:
        output_json(
            [
                {
                    "code": c.code,
                    "name": c.name,
                    "before": c.before.label if c.before is not None else None,
                    "after": c.after.label if c.after is not None else None,
                }
                for c in changes
            ]
        )
        return
    print_diff(changes)
