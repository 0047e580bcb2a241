"""
Structured logging for jsaudit.

Manifesto:
    Audit runs are read by operators at a terminal and by log pipelines
    in CI. Reports go to stdout; every diagnostic goes through structlog
    to stderr so the two never interleave.

    - **Structured:** dotted event names (``runner.completed``) with
      key/value fields, JSON when stderr is not a terminal
    - **Correlated:** check code, cluster and server travel as bound
      context instead of being formatted into messages
    - **Searchable:** JSON output uses ECS field names so it lands in
      Elasticsearch without a mapping step

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="jsaudit")
            │
            ├── _processors(service, json_format)
            │     TimeStamper(iso) → merge_contextvars → add_log_level
            │     → add_logger_name → service metadata
            │     → [ECS renames]  (JSON only)
            │     → JSONRenderer | ConsoleRenderer
            │
            └── stdlib root logger → stderr

        run_check(...)  log = get_logger(__name__).bind(check="META_001")
        {"@timestamp": "...", "log.level": "warning", "log.logger": "jsaudit.checks.meta",
         "service.name": "jsaudit", "event": "meta.jsz_missing", "check": "META_001",
         "cluster": "C1", "server": "n2"}

Examples:
    >>> from jsaudit.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> log = get_logger(__name__)
    >>> with LogContext(archive="audit.zip"):
    ...     log.warning("archive.ambiguous_match", matches=2)

Tags:
    logging, structlog, observability, ecs, jsaudit

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# structlog key -> ECS field name
_ECS_FIELDS = {
    "timestamp": "@timestamp",
    "level": "log.level",
    "logger": "log.logger",
}


def _service_metadata(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename structlog's standard keys to their ECS equivalents."""
    for key, ecs_key in _ECS_FIELDS.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def _processors(service: str, json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _service_metadata(service),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, _ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(level: str = "INFO", json_format: bool | None = None, service: str = "jsaudit") -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None to pick JSON
            unless stderr is a terminal
        service: Value of the ``service.name`` field
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if json_format is None:
        json_format = not sys.stderr.isatty()

    structlog.configure(
        processors=_processors(service, json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Reports go to stdout, diagnostics to stderr
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields into every later log call on this thread/task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scoped log context; previous values are restored on exit.

    Example:
        with LogContext(archive="audit.zip"):
            log.info("runner.started")
    """

    def __init__(self, **kwargs: Any):
        self._fields = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._fields)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
