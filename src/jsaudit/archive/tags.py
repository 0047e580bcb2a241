"""Tag model for indexing captured diagnostic artifacts.

Every artifact in an audit archive is filed under a set of tags. A tag is
one ``(dimension, value)`` pair: which cluster, which server, which
artifact type, or a "special" archive-wide category such as the gather
metadata. Queries are conjunctions of tags.

Manifesto:
    Archive queries must be reproducible. Tags are frozen, hashable and
    totally ordered by ``(dimension, value)`` so that every listing built
    from them comes out in the same order on every run.

Architecture:
    ::

        Artifact "servers/n1/jsz.json"
        ├── Tag(cluster, "C1")
        ├── Tag(server, "n1")
        └── Tag(type, "jsz")

        reader.load(JszResponse, tag_cluster("C1"), tag_server("n1"),
                    tag_server_jetstream())

Examples:
    >>> tag_cluster("C1")
    Tag(dimension=<TagDimension.CLUSTER: 'cluster'>, value='C1')
    >>> str(tag_server("n1"))
    'server:n1'
    >>> sorted([tag_server("b"), tag_cluster("z"), tag_server("a")])[0]
    Tag(dimension=<TagDimension.CLUSTER: 'cluster'>, value='z')

Tags:
    tagging, archive, index, jsaudit
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from jsaudit.core.errors import ArchiveFormatError

# ============================================================================
# ENUMS
# ============================================================================


class TagDimension(str, Enum):
    """
    Axes an artifact can be filed under.

    Each dimension is orthogonal: an artifact usually has one value for
    cluster, server and type, but any combination is legal.
    """

    CLUSTER = "cluster"
    SERVER = "server"
    ACCOUNT = "account"
    STREAM = "stream"
    # Artifact type / subsystem (jsz, varz, healthz, ...)
    TYPE = "type"
    # Archive-wide categories (gather metadata, ...)
    SPECIAL = "special"


# Artifact type values for per-server monitoring endpoints
JETSTREAM_TYPE = "jsz"
VARS_TYPE = "varz"
HEALTH_TYPE = "healthz"

# Special categories
AUDIT_GATHER_METADATA = "audit-gather-metadata"


# ============================================================================
# TAG
# ============================================================================


@dataclass(frozen=True, order=True, slots=True)
class Tag:
    """
    A single ``(dimension, value)`` label.

    Attributes:
        dimension: Which axis this tag belongs to
        value: The value on that axis (cluster name, server name, ...)
    """

    dimension: TagDimension
    value: str

    def __str__(self) -> str:
        return f"{self.dimension.value}:{self.value}"

    def to_dict(self) -> dict[str, str]:
        """Serialize to the archive manifest form."""
        return {"name": self.dimension.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        """Deserialize from the archive manifest form."""
        if not isinstance(data, dict):
            raise ArchiveFormatError(f"tag must be an object, got {data!r}")
        try:
            dimension = TagDimension(data["name"])
        except (KeyError, TypeError, ValueError) as e:
            raise ArchiveFormatError(f"invalid tag {data!r}", cause=e) from e
        value = data.get("value")
        if not isinstance(value, str):
            raise ArchiveFormatError(f"tag {dimension.value} has no string value")
        return cls(dimension, value)


# ============================================================================
# CONSTRUCTORS
# ============================================================================


def tag_cluster(name: str) -> Tag:
    return Tag(TagDimension.CLUSTER, name)


def tag_server(name: str) -> Tag:
    return Tag(TagDimension.SERVER, name)


def tag_account(name: str) -> Tag:
    return Tag(TagDimension.ACCOUNT, name)


def tag_stream(name: str) -> Tag:
    return Tag(TagDimension.STREAM, name)


def tag_special(name: str) -> Tag:
    return Tag(TagDimension.SPECIAL, name)


def tag_artifact_type(name: str) -> Tag:
    return Tag(TagDimension.TYPE, name)


def tag_server_jetstream() -> Tag:
    """Per-server JetStream details (``/jsz``)."""
    return tag_artifact_type(JETSTREAM_TYPE)


def tag_server_vars() -> Tag:
    """Per-server general variables (``/varz``)."""
    return tag_artifact_type(VARS_TYPE)


def tag_server_health() -> Tag:
    """Per-server health report (``/healthz``)."""
    return tag_artifact_type(HEALTH_TYPE)


def tag_audit_gather_metadata() -> Tag:
    """The archive-wide metadata describing how the archive was gathered."""
    return tag_special(AUDIT_GATHER_METADATA)


__all__ = [
    "TagDimension",
    "Tag",
    "JETSTREAM_TYPE",
    "VARS_TYPE",
    "HEALTH_TYPE",
    "AUDIT_GATHER_METADATA",
    "tag_cluster",
    "tag_server",
    "tag_account",
    "tag_stream",
    "tag_special",
    "tag_artifact_type",
    "tag_server_jetstream",
    "tag_server_vars",
    "tag_server_health",
    "tag_audit_gather_metadata",
]
