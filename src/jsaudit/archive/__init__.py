"""
jsaudit.archive - tagged artifact store and the Reader checks query it through.
"""

from jsaudit.archive.artifact import Artifact
from jsaudit.archive.models import (
    AuditMetadata,
    JetStreamInfo,
    JszResponse,
    MetaClusterInfo,
    PeerInfo,
    ServerInfo,
)
from jsaudit.archive.reader import Reader, ServerVisitor
from jsaudit.archive.store import ArchiveBuilder, ArchiveStore
from jsaudit.archive.tags import (
    AUDIT_GATHER_METADATA,
    Tag,
    TagDimension,
    tag_account,
    tag_artifact_type,
    tag_audit_gather_metadata,
    tag_cluster,
    tag_server,
    tag_server_health,
    tag_server_jetstream,
    tag_server_vars,
    tag_special,
    tag_stream,
)

__all__ = [
    "Artifact",
    "ArchiveBuilder",
    "ArchiveStore",
    "Reader",
    "ServerVisitor",
    "AuditMetadata",
    "JetStreamInfo",
    "JszResponse",
    "MetaClusterInfo",
    "PeerInfo",
    "ServerInfo",
    "AUDIT_GATHER_METADATA",
    "Tag",
    "TagDimension",
    "tag_account",
    "tag_artifact_type",
    "tag_audit_gather_metadata",
    "tag_cluster",
    "tag_server",
    "tag_server_health",
    "tag_server_jetstream",
    "tag_server_vars",
    "tag_special",
    "tag_stream",
]
