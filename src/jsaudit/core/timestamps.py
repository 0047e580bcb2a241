"""
UTC timestamp utilities (stdlib-only).

Analysis reports carry a single RFC 3339 timestamp; everything else in a
report is derived from the archive and must not depend on wall-clock time.

STDLIB ONLY - NO PYDANTIC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_rfc3339(dt: datetime | None) -> str | None:
    """Render a datetime as RFC 3339, using ``Z`` for UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def from_rfc3339(s: str | None) -> datetime | None:
    """Parse an RFC 3339 string (``Z`` suffix accepted) to an aware datetime."""
    if s is None:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))
