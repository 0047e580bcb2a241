"""
Structured error types for jsaudit.

Provides a small hierarchy of typed errors so the audit engine can tell
"data was never captured" apart from "data is broken" and from
"the check catalog is misconfigured". Each error carries a category,
structured context, and an optional chained cause.

Manifesto:
    - **Absence is not failure:** NoMatchesError is expected and recoverable
    - **Malformed is loud:** ArtifactDecodeError propagates out of a check
    - **Registration is recoverable:** RegistrationError lists every failure
      instead of aborting the host process
    - **Error chaining:** Preserve the original exception as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        AuditError                            │
        │             (category, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ArchiveError        ConfigError          RegistrationError  │
        │  (ARCHIVE)           (CONFIG)             (REGISTRATION)     │
        │     │                    │                                   │
        │  NoMatchesError      InvalidConfigurationValueError          │
        │  ArtifactDecodeError                                         │
        │  ArchiveFormatError  CheckCancelledError  UnknownOutcomeError│
        │                      (CHECK)              (VALIDATION)       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = NoMatchesError.for_tags([tag_cluster("C1"), tag_server("n1")])
    >>> err.category
    <ErrorCategory.ARCHIVE: 'ARCHIVE'>

    >>> try:
    ...     json.loads("{")
    ... except ValueError as e:
    ...     raise ArtifactDecodeError("bad jsz", cause=e)
    Traceback (most recent call last):
    ...
    ArtifactDecodeError: bad jsz

Tags:
    error-handling, exception-hierarchy, error-context, jsaudit

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    ARCHIVE = "ARCHIVE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    REGISTRATION = "REGISTRATION"
    CHECK = "CHECK"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured context attached to an AuditError.

    Attributes:
        check: Code of the check that was running
        cluster: Cluster name the error relates to
        server: Server name the error relates to
        path: Archive file or member path
        metadata: Anything else worth logging
    """

    check: str | None = None
    cluster: str | None = None
    server: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            k: v
            for k, v in (
                ("check", self.check),
                ("cluster", self.cluster),
                ("server", self.server),
                ("path", self.path),
            )
            if v is not None
        }
        result.update(self.metadata)
        return result


class AuditError(Exception):
    """
    Base exception for all jsaudit errors.

    Subclasses set ``default_category`` to classify themselves.

    Examples:
        >>> error = AuditError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(check="META_001").context.check
        'META_001'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> AuditError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ArchiveFormatError("bad manifest").with_context(path="audit.zip")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ARCHIVE ERRORS
# =============================================================================


class ArchiveError(AuditError):
    """Error reading or querying a diagnostic archive."""

    default_category = ErrorCategory.ARCHIVE


class NoMatchesError(ArchiveError):
    """
    No artifact matched the requested tag-set.

    This is the "data absent" signal: the server never answered during
    gathering, or the artifact type was not collected. Checks log a
    warning and carry on with reduced coverage.
    """

    def __init__(self, message: str = "no matching artifacts", *, tags: Iterable[Any] = (), **kwargs: Any):
        super().__init__(message, **kwargs)
        self.tags = tuple(tags)

    @classmethod
    def for_tags(cls, tags: Iterable[Any]) -> NoMatchesError:
        tags = tuple(tags)
        rendered = ", ".join(str(t) for t in tags) or "<none>"
        return cls(f"no artifacts match tags [{rendered}]", tags=tags)


class ArtifactDecodeError(ArchiveError):
    """An artifact exists but does not deserialize into the expected shape."""

    default_category = ErrorCategory.PARSE


class ArchiveFormatError(ArchiveError):
    """The archive container itself is unreadable (bad zip, bad manifest)."""


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(AuditError):
    """Unknown or invalid check configuration."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigurationValueError(ConfigError):
    """A configuration override failed to parse or validate."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"invalid value {value!r} for {key}")


# =============================================================================
# REGISTRATION ERRORS
# =============================================================================


@dataclass(frozen=True)
class RegistrationFailure:
    """One rejected check in a registration batch."""

    check: str
    reason: str

    def __str__(self) -> str:
        return f"{self.check}: {self.reason}"


class RegistrationError(AuditError):
    """
    One or more checks in a registration batch were rejected.

    The batch is atomic: when this is raised nothing from the batch was
    added to the registry. ``failures`` lists every problem found.
    """

    default_category = ErrorCategory.REGISTRATION

    def __init__(self, failures: Iterable[RegistrationFailure]):
        self.failures = list(failures)
        summary = "; ".join(str(f) for f in self.failures)
        super().__init__(f"check registration failed: {summary}")


# =============================================================================
# CHECK EXECUTION ERRORS
# =============================================================================


class CheckCancelledError(AuditError):
    """The analysis run was cancelled while a check was executing."""

    default_category = ErrorCategory.CHECK

    def __init__(self, message: str = "check cancelled", **kwargs: Any):
        super().__init__(message, **kwargs)


class UnknownOutcomeError(AuditError, ValueError):
    """A report contained an outcome label or code outside the known set."""

    default_category = ErrorCategory.VALIDATION


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "AuditError",
    # Archive
    "ArchiveError",
    "NoMatchesError",
    "ArtifactDecodeError",
    "ArchiveFormatError",
    # Config
    "ConfigError",
    "InvalidConfigurationValueError",
    # Registration
    "RegistrationFailure",
    "RegistrationError",
    # Execution
    "CheckCancelledError",
    "UnknownOutcomeError",
]
