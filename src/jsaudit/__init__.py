"""
jsaudit - offline health audits of NATS JetStream diagnostic archives.

An archive is a tagged collection of monitoring snapshots captured from
every server of a deployment. jsaudit runs a catalog of checks against
it and produces an Analysis: one outcome per check plus bounded
examples explaining it.

Examples:
    >>> from jsaudit import ArchiveStore, Reader, default_registry, run_checks
    >>> store = ArchiveStore.from_zip("audit.zip")
    >>> analysis = run_checks(default_registry().default_checks(), Reader(store), limit=10)
    >>> analysis.outcomes
    {'PASS': 3, 'WARN': 0, 'FAIL': 0, 'SKIP': 0}
"""

from jsaudit.archive import ArchiveBuilder, ArchiveStore, Reader
from jsaudit.checks import (
    Analysis,
    Check,
    CheckRegistry,
    ExamplesCollection,
    Outcome,
    default_registry,
    diff_analyses,
    load_analysis,
    run_checks,
    save_analysis,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ArchiveBuilder",
    "ArchiveStore",
    "Reader",
    "Analysis",
    "Check",
    "CheckRegistry",
    "ExamplesCollection",
    "Outcome",
    "default_registry",
    "diff_analyses",
    "load_analysis",
    "run_checks",
    "save_analysis",
]
