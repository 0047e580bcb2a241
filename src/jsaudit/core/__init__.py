"""
jsaudit.core - shared primitives: errors, logging, settings, timestamps.
"""

from jsaudit.core.errors import (
    ArchiveError,
    ArchiveFormatError,
    ArtifactDecodeError,
    AuditError,
    CheckCancelledError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigurationValueError,
    NoMatchesError,
    RegistrationError,
    RegistrationFailure,
    UnknownOutcomeError,
)
from jsaudit.core.logging import LogContext, configure_logging, get_logger
from jsaudit.core.timestamps import from_rfc3339, to_rfc3339, utc_now

__all__ = [
    "ArchiveError",
    "ArchiveFormatError",
    "ArtifactDecodeError",
    "AuditError",
    "CheckCancelledError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigurationValueError",
    "NoMatchesError",
    "RegistrationError",
    "RegistrationFailure",
    "UnknownOutcomeError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "from_rfc3339",
    "to_rfc3339",
    "utc_now",
]
