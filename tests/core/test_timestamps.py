"""Tests for jsaudit.core.timestamps."""

from datetime import UTC, datetime, timedelta, timezone

from jsaudit.core.timestamps import from_rfc3339, to_rfc3339, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is UTC


def test_to_rfc3339_uses_z():
    assert to_rfc3339(datetime(2026, 10, 17, 9, 30, tzinfo=UTC)) == "2026-10-17T09:30:00Z"


def test_to_rfc3339_converts_offsets():
    dt = datetime(2026, 10, 17, 11, 30, tzinfo=timezone(timedelta(hours=2)))
    assert to_rfc3339(dt) == "2026-10-17T09:30:00Z"


def test_naive_treated_as_utc():
    assert to_rfc3339(datetime(2026, 1, 1)) == "2026-01-01T00:00:00Z"


def test_round_trip():
    dt = datetime(2026, 10, 17, 9, 30, 12, 345678, tzinfo=UTC)
    assert from_rfc3339(to_rfc3339(dt)) == dt


def test_none_passthrough():
    assert to_rfc3339(None) is None
    assert from_rfc3339(None) is None
