"""Typed views of captured server payloads.

Only the fields the built-in checks read are modelled. Everything else in
a payload is ignored, so newer server versions adding fields keep loading.
Field names follow the server's JSON (``meta_cluster``, ``ver``, ...).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ── JetStream (/jsz) ─────────────────────────────────────────────────────


class PeerInfo(_Payload):
    """One replica of a raft group as seen by the reporting server."""

    name: str
    current: bool = False
    offline: bool = False
    # Nanoseconds since last heard from
    active: int = 0
    lag: int = 0
    peer: str = ""


class MetaClusterInfo(_Payload):
    """The reporting server's view of the meta group."""

    name: str = ""
    leader: str = ""
    peer: str = ""
    replicas: list[PeerInfo] = Field(default_factory=list)
    cluster_size: int = 0
    pending: int = 0


class JetStreamInfo(_Payload):
    server_id: str = ""
    now: datetime | None = None
    disabled: bool = False
    meta: MetaClusterInfo | None = Field(default=None, alias="meta_cluster")
    streams: int = 0
    consumers: int = 0
    messages: int = 0


class ServerInfo(_Payload):
    """Identity block every server monitoring response starts with."""

    name: str = ""
    host: str = ""
    id: str = ""
    cluster: str = ""
    domain: str = ""
    version: str = Field(default="", alias="ver")
    jetstream: bool = False


class ApiError(_Payload):
    code: int = 0
    description: str = ""


class JszResponse(_Payload):
    """A server's answer to the JetStream details request."""

    server: ServerInfo = Field(default_factory=ServerInfo)
    data: JetStreamInfo | None = None
    error: ApiError | None = None


# ── Archive metadata ─────────────────────────────────────────────────────


class AuditMetadata(_Payload):
    """Describes how and where the archive was gathered.

    All fields are optional: an archive without metadata yields the zero value.
    """

    capture_timestamp: datetime | None = None
    connected_server_name: str = ""
    connected_server_version: str = ""
    connect_url: str = ""
    user_name: str = ""
    cli_version: str = ""
