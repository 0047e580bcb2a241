"""
CLI utility helpers: output formatting for checks, configuration and analyses.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jsaudit.checks.analysis import Analysis, OutcomeChange
from jsaudit.checks.check import Check
from jsaudit.checks.configuration import CheckConfiguration
from jsaudit.checks.outcome import Outcome

console = Console()
err_console = Console(stderr=True)

_OUTCOME_STYLES = {
    Outcome.PASS: "green",
    Outcome.PASS_WITH_ISSUES: "yellow",
    Outcome.FAIL: "bold red",
    Outcome.SKIPPED: "dim",
}


# ── Errors ───────────────────────────────────────────────────────────────


def fail(message: str, code: int = 2) -> None:
    """Print an error and exit."""
    err_console.print(f"[bold red]Error[/bold red]: {escape(message)}", soft_wrap=True, highlight=False)
    raise typer.Exit(code=code)


# ── Output helpers ───────────────────────────────────────────────────────


def output_json(payload: Any) -> None:
    """Write machine-readable JSON to stdout, unstyled."""
    if isinstance(payload, str):
        typer.echo(payload)
    else:
        typer.echo(json.dumps(payload, indent=2, default=str))


def outcome_text(outcome: Outcome) -> str:
    return f"[{_OUTCOME_STYLES[outcome]}]{outcome.label}[/]"


def print_checks(checks: list[Check]) -> None:
    """Render the check catalog as a table."""
    if not checks:
        console.print("[dim]No checks registered.[/dim]")
        return

    table = Table(title="Checks", show_lines=False, pad_edge=False)
    table.add_column("Code", no_wrap=True)
    table.add_column("Suite", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description", overflow="fold")
    for check in checks:
        table.add_row(check.code, check.suite, check.name, check.description)
    console.print(table)


def print_configuration(items: list[CheckConfiguration]) -> None:
    """Render check tunables with their effective values."""
    if not items:
        console.print("[dim]No configuration items.[/dim]")
        return

    table = Table(title="Configuration", show_lines=False, pad_edge=False)
    table.add_column("Name", no_wrap=True)
    table.add_column("Value", no_wrap=True, justify="right")
    table.add_column("Unit", no_wrap=True)
    table.add_column("Description", overflow="fold")
    for item in items:
        value = str(item) if item.set_value is None else f"[bold]{item}[/bold]"
        table.add_row(item.name, value, item.unit.value, item.description)
    console.print(table)


def print_analysis(analysis: Analysis) -> None:
    """Render an analysis: one row per check, examples beneath, then totals."""
    meta = analysis.metadata
    if meta.connected_server_name or meta.capture_timestamp:
        captured = meta.capture_timestamp.isoformat() if meta.capture_timestamp else "unknown"
        console.print(f"[dim]Captured {captured} via {meta.connected_server_name or 'unknown server'}[/dim]")

    for result in analysis.results:
        check = result.check
        console.print(f"{outcome_text(result.outcome)} {check.code} {escape(check.name)}", highlight=False)

        examples = result.examples
        if examples.error:
            console.print(f"     [red]error:[/red] {escape(examples.error)}", highlight=False, soft_wrap=True)
        for example in examples.examples:
            console.print(f"     - {example}", highlight=False, markup=False, soft_wrap=True)
        if examples.dropped:
            console.print(f"     [dim]... {examples.dropped} more[/dim]")

    totals = ", ".join(f"{label}: {count}" for label, count in analysis.outcomes.items())
    console.print(f"\n[bold]Outcomes[/bold] {totals}", highlight=False)


def print_diff(changes: list[OutcomeChange]) -> None:
    if not changes:
        console.print("[dim]No outcome changes.[/dim]")
        return

    table = Table(title="Outcome changes", show_lines=False, pad_edge=False)
    table.add_column("Code", no_wrap=True)
    table.add_column("Name")
    table.add_column("Before", no_wrap=True)
    table.add_column("After", no_wrap=True)
    for change in changes:
        before = outcome_text(change.before) if change.before is not None else "----"
        after = outcome_text(change.after) if change.after is not None else "----"
        table.add_row(change.code, change.name, before, after)
    console.print(table)
