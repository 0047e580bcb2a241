"""
Shared pytest fixtures for jsaudit tests.

This module provides:
- An in-memory archive builder
- A JSZ payload factory shaped like real ``/jsz`` responses
- Helpers to place per-server artifacts under the right tags
- Settings cache isolation

Usage:
    def test_leader(archive, jsz_payload, add_jsz):
        add_jsz("C1", "n1", jsz_payload("n1", leader="n1"))
        reader = Reader(archive.build())
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from jsaudit.archive import (
    ArchiveBuilder,
    tag_cluster,
    tag_server,
    tag_server_jetstream,
    tag_server_vars,
)
from jsaudit.core.settings import get_settings

# =============================================================================
# Payload factories
# =============================================================================


def make_peer(name: str, *, offline: bool = False, current: bool = True, lag: int = 0) -> dict[str, Any]:
    return {"name": name, "current": current, "offline": offline, "active": 250_000_000, "lag": lag, "peer": name[:8]}


def make_jsz(
    server: str,
    *,
    cluster: str = "C1",
    leader: str = "n1",
    replicas: list[dict[str, Any]] | None = None,
    disabled: bool = False,
    meta: bool = True,
) -> dict[str, Any]:
    """A ``/jsz`` response as gathered from ``server``."""
    data: dict[str, Any] = {
        "server_id": f"ID_{server.upper()}",
        "now": "2026-10-17T09:30:00Z",
        "disabled": disabled,
        "streams": 4,
        "consumers": 9,
        "messages": 1200,
    }
    if meta:
        data["meta_cluster"] = {
            "name": cluster,
            "leader": leader,
            "peer": f"P_{server}",
            "cluster_size": 3,
            "replicas": replicas or [],
        }
    return {
        "server": {"name": server, "host": "0.0.0.0", "id": f"ID_{server.upper()}", "cluster": cluster, "ver": "2.10.22"},
        "data": data,
    }


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture()
def archive() -> ArchiveBuilder:
    """Empty in-memory archive builder."""
    return ArchiveBuilder()


@pytest.fixture()
def jsz_payload() -> Callable[..., dict[str, Any]]:
    return make_jsz


@pytest.fixture()
def peer() -> Callable[..., dict[str, Any]]:
    return make_peer


@pytest.fixture()
def add_jsz(archive: ArchiveBuilder) -> Callable[[str, str, Any], ArchiveBuilder]:
    """Add a JSZ artifact for (cluster, server) to ``archive``."""

    def _add(cluster: str, server: str, payload: Any) -> ArchiveBuilder:
        return archive.add(
            f"capture/clusters/{cluster}/{server}/jsz.json",
            payload,
            tag_cluster(cluster),
            tag_server(server),
            tag_server_jetstream(),
        )

    return _add


@pytest.fixture()
def add_varz(archive: ArchiveBuilder) -> Callable[[str, str], ArchiveBuilder]:
    """Add a VARZ artifact so a server is known without JetStream data."""

    def _add(cluster: str, server: str) -> ArchiveBuilder:
        return archive.add(
            f"capture/clusters/{cluster}/{server}/varz.json",
            {"server_name": server, "cluster": {"name": cluster}},
            tag_cluster(cluster),
            tag_server(server),
            tag_server_vars(),
        )

    return _add


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Each test reads settings from its own environment."""
    for var in ("JSAUDIT_EXAMPLE_LIMIT", "JSAUDIT_WORKERS", "JSAUDIT_SKIP", "JSAUDIT_LOG_LEVEL", "JSAUDIT_JSON_LOGS"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
