"""
Analysis runner: execute a check set against an archive.

Manifesto:
    Every requested check is accounted for exactly once, in exactly one
    outcome bucket, whatever happens while it runs:

    - **Skip list:** codes matched case-insensitively → SKIPPED, no examples
    - **Contained failures:** handler errors → SKIPPED with the error text
    - **Cancellable:** a set cancel event turns unfinished checks into
      SKIPPED instead of dropping them
    - **Order preserved:** results follow the input order even when
      checks run on a worker pool

Architecture:
    ::

        run_checks(checks, reader, limit, skip, workers=4)
        ┌────────────────────────────────────────────────────────┐
        │ metadata ← reader.load(AuditMetadata, special:…)       │
        │            (absent → zero value)                       │
        │                                                        │
        │ for each check (pool of `workers` threads):            │
        │   skipped?  → SKIPPED                                  │
        │   else      → run_check(check, reader, limit, cancel)  │
        │                                                        │
        │ results[i] reassembled by input index                  │
        │ outcomes = {PASS, WARN, FAIL, SKIP} tallies            │
        └────────────────────────────────────────────────────────┘

Examples:
    >>> registry = default_registry()
    >>> analysis = run_checks(registry.default_checks(), Reader(store), limit=10, skip=["meta_003"])
    >>> analysis.outcomes
    {'PASS': 2, 'WARN': 0, 'FAIL': 0, 'SKIP': 1}

Tags:
    runner, analysis, aggregation, thread-pool, jsaudit

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from jsaudit.archive.models import AuditMetadata
from jsaudit.archive.reader import Reader
from jsaudit.archive.tags import tag_audit_gather_metadata
from jsaudit.checks.analysis import ANALYSIS_TYPE, Analysis, CheckResult
from jsaudit.checks.check import Check, run_check
from jsaudit.checks.examples import ExamplesCollection
from jsaudit.checks.outcome import OUTCOME_LABELS, Outcome
from jsaudit.core.errors import ArtifactDecodeError, NoMatchesError
from jsaudit.core.logging import get_logger
from jsaudit.core.timestamps import utc_now

logger = get_logger(__name__)


def run_checks(
    checks: Sequence[Check],
    reader: Reader,
    limit: int,
    skip: Iterable[str] | None = None,
    *,
    workers: int = 1,
    cancel: threading.Event | None = None,
) -> Analysis:
    """
    Run ``checks`` against the archive behind ``reader``.

    Args:
        checks: Checks to run, in report order
        reader: Archive reader
        limit: Max examples stored per check (0 = unbounded)
        skip: Check codes to skip (case-insensitive)
        workers: Checks executed concurrently
        cancel: Optional signal; once set, checks not yet finished are
            reported as SKIPPED

    Returns:
        Analysis with one result per check, in input order
    """
    checks = list(checks)
    skipped = list(skip or [])
    skip_codes = {s.lower() for s in skipped}
    started = time.monotonic()

    logger.info("runner.started", checks=len(checks), skipped=len(skipped), workers=workers)

    analysis_time = utc_now()
    metadata = _load_metadata(reader)

    executions: list[tuple[Outcome, ExamplesCollection] | None] = [None] * len(checks)
    pending: list[int] = []
    for index, check in enumerate(checks):
        if check.code.lower() in skip_codes:
            logger.info("runner.check_skipped", check=check.code, reason="skip_list")
            executions[index] = (Outcome.SKIPPED, ExamplesCollection(limit=limit))
        else:
            pending.append(index)

    if workers <= 1 or len(pending) <= 1:
        for index in pending:
            executions[index] = run_check(checks[index], reader, limit, cancel)
    else:
        _run_parallel(checks, pending, executions, reader, limit, workers, cancel)

    results: list[CheckResult] = []
    outcomes = dict.fromkeys(OUTCOME_LABELS, 0)
    for check, execution in zip(checks, executions, strict=True):
        outcome, examples = execution
        results.append(
            CheckResult(
                check=check.describe(),
                outcome=outcome,
                outcome_string=outcome.label,
                examples=examples,
            )
        )
        outcomes[outcome.label] += 1

    analysis = Analysis(
        type=ANALYSIS_TYPE,
        time=analysis_time,
        metadata=metadata,
        skipped=skipped,
        results=results,
        outcomes=outcomes,
    )

    logger.info(
        "runner.completed",
        duration_ms=round((time.monotonic() - started) * 1000, 2),
        **analysis.outcomes,
    )
    return analysis


def _run_parallel(
    checks: list[Check],
    pending: list[int],
    executions: list[tuple[Outcome, ExamplesCollection] | None],
    reader: Reader,
    limit: int,
    workers: int,
    cancel: threading.Event | None,
) -> None:
    """Run ``pending`` checks on a thread pool, storing results by input index."""
    max_workers = min(workers, len(pending))

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="jsaudit-check") as executor:
        futures: dict[Future, int] = {
            executor.submit(run_check, checks[index], reader, limit, cancel): index for index in pending
        }

        logger.debug("runner.parallel.submitted", futures=len(futures), workers=max_workers)

        for future in as_completed(futures):
            index = futures[future]
            try:
                executions[index] = future.result()
            except Exception as e:  # noqa: BLE001
                # run_check contains handler errors; this only sees failures around it
                logger.error("runner.parallel.check_crashed", check=checks[index].code, error=str(e))
                examples = ExamplesCollection(limit=limit, error=str(e) or type(e).__name__)
                executions[index] = (Outcome.SKIPPED, examples)


def _load_metadata(reader: Reader) -> AuditMetadata:
    """Gather metadata from the archive; the zero value when absent or unreadable."""
    try:
        return reader.load(AuditMetadata, tag_audit_gather_metadata())
    except NoMatchesError:
        logger.warning("runner.metadata_missing")
    except ArtifactDecodeError as e:
        logger.error("runner.metadata_invalid", error=str(e))
    return AuditMetadata()


__all__ = ["run_checks"]
