"""
jsaudit.checks - check model, registry, runner and the built-in suites.
"""

from jsaudit.checks.analysis import (
    ANALYSIS_TYPE,
    Analysis,
    CheckResult,
    OutcomeChange,
    diff_analyses,
    load_analysis,
    save_analysis,
)
from jsaudit.checks.check import Check, CheckDescriptor, CheckHandler, run_check
from jsaudit.checks.configuration import CheckConfiguration, ConfigurationUnit, configuration_name
from jsaudit.checks.examples import ExamplesCollection
from jsaudit.checks.outcome import OUTCOME_LABELS, OUTCOMES, Outcome
from jsaudit.checks.registry import CheckRegistry, default_registry
from jsaudit.checks.runner import run_checks

__all__ = [
    "ANALYSIS_TYPE",
    "Analysis",
    "CheckResult",
    "OutcomeChange",
    "diff_analyses",
    "load_analysis",
    "save_analysis",
    "Check",
    "CheckDescriptor",
    "CheckHandler",
    "run_check",
    "CheckConfiguration",
    "ConfigurationUnit",
    "configuration_name",
    "ExamplesCollection",
    "OUTCOME_LABELS",
    "OUTCOMES",
    "Outcome",
    "CheckRegistry",
    "default_registry",
    "run_checks",
]
