"""Checks for the JetStream meta group (suite ``meta``).

The meta group is the raft group every JetStream server in a cluster
joins to agree on cluster-wide assignments. These checks compare what
each server reported about it in its ``/jsz`` snapshot.
"""

from __future__ import annotations

from typing import Any

from jsaudit.archive.models import JszResponse
from jsaudit.archive.reader import Reader
from jsaudit.archive.tags import Tag, tag_cluster, tag_server, tag_server_jetstream
from jsaudit.checks.check import Check
from jsaudit.checks.configuration import CheckConfiguration, ConfigurationUnit
from jsaudit.checks.examples import ExamplesCollection
from jsaudit.checks.outcome import Outcome
from jsaudit.checks.registry import CheckRegistry
from jsaudit.core.errors import ArtifactDecodeError, NoMatchesError

NO_LEADER = "NO_LEADER"

DEFAULT_LAG_THRESHOLD = 1000


def register_meta_checks(registry: CheckRegistry) -> None:
    """Register the meta suite. Raises RegistrationError like ``registry.register``."""
    registry.register(
        Check(
            code="META_001",
            suite="meta",
            name="Meta cluster offline replicas",
            description="All nodes part of the meta group are online",
            handler=check_meta_cluster_offline_replicas,
        ),
        Check(
            code="META_002",
            suite="meta",
            name="Meta cluster leader",
            description="All nodes part of the meta group agree on the meta cluster leader",
            handler=check_meta_cluster_leader,
        ),
        Check(
            code="META_003",
            suite="meta",
            name="Meta cluster replica lag",
            description="No meta group replica lags behind the leader by more than the threshold",
            handler=check_meta_cluster_replica_lag,
            configuration={
                "lag": CheckConfiguration(
                    key="lag",
                    description="Operations a meta replica may lag behind before warning",
                    default=DEFAULT_LAG_THRESHOLD,
                    unit=ConfigurationUnit.UINT,
                ),
            },
        ),
    )


def _meta_info(cluster_tag: Tag, server_tag: Tag, jsz: JszResponse, log: Any):
    """The server's meta group view, or None when it has nothing to contribute."""
    if jsz.data is None:
        log.warning("meta.jsz_without_data", cluster=cluster_tag.value, server=server_tag.value)
        return None
    if jsz.data.disabled:
        return None
    if jsz.data.meta is None:
        log.warning("meta.no_meta_group_info", cluster=cluster_tag.value, server=server_tag.value)
        return None
    return jsz.data.meta


def check_meta_cluster_offline_replicas(
    check: Check, reader: Reader, examples: ExamplesCollection, log: Any
) -> Outcome:
    """Every meta group peer is online, as seen by each server."""

    def visit(cluster_tag: Tag, server_tag: Tag, err: Exception | None, jsz: JszResponse | None) -> None:
        if isinstance(err, NoMatchesError):
            log.warning("meta.jsz_missing", cluster=cluster_tag.value, server=server_tag.value)
            return
        if err is not None:
            raise ArtifactDecodeError(f"failed to load JSZ for server {server_tag.value}: {err}", cause=err)

        meta = _meta_info(cluster_tag, server_tag, jsz, log)
        if meta is None:
            return

        for peer in meta.replicas:
            if peer.offline:
                examples.add("%s - %s reports peer %s as offline", cluster_tag.value, server_tag.value, peer.name)

    reader.each_cluster_server_jsz(visit)

    if examples.count() > 0:
        log.error("meta.offline_replicas", count=examples.count())
        return Outcome.FAIL

    return Outcome.PASS


def check_meta_cluster_leader(check: Check, reader: Reader, examples: ExamplesCollection, log: Any) -> Outcome:
    """All servers of each cluster agree on the meta group leader."""
    jetstream = tag_server_jetstream()

    for cluster in reader.cluster_names():
        cluster_tag = tag_cluster(cluster)
        leader_followers: dict[str, list[str]] = {}

        for server in reader.cluster_server_names(cluster):
            server_tag = tag_server(server)
            try:
                jsz = reader.load(JszResponse, cluster_tag, server_tag, jetstream)
            except NoMatchesError:
                log.warning("meta.jsz_missing", cluster=cluster, server=server)
                continue

            meta = _meta_info(cluster_tag, server_tag, jsz, log)
            if meta is None:
                continue

            leader = meta.leader or NO_LEADER
            leader_followers.setdefault(leader, []).append(server)

        if len(leader_followers) > 1:
            groups = ", ".join(
                f"{leader}: [{', '.join(sorted(servers))}]" for leader, servers in sorted(leader_followers.items())
            )
            examples.add("Members of %s disagree on meta leader (%s)", cluster, groups)

    if examples.count() > 0:
        log.error("meta.leader_disagreement", count=examples.count())
        return Outcome.FAIL

    return Outcome.PASS


def check_meta_cluster_replica_lag(check: Check, reader: Reader, examples: ExamplesCollection, log: Any) -> Outcome:
    """No meta replica lags more than the configured number of operations."""
    threshold = check.config_value("lag")

    def visit(cluster_tag: Tag, server_tag: Tag, err: Exception | None, jsz: JszResponse | None) -> None:
        if isinstance(err, NoMatchesError):
            log.warning("meta.jsz_missing", cluster=cluster_tag.value, server=server_tag.value)
            return
        if err is not None:
            raise ArtifactDecodeError(f"failed to load JSZ for server {server_tag.value}: {err}", cause=err)

        meta = _meta_info(cluster_tag, server_tag, jsz, log)
        if meta is None:
            return

        for peer in meta.replicas:
            if peer.lag > threshold:
                examples.add(
                    "%s - %s reports peer %s lagging by %d operations",
                    cluster_tag.value,
                    server_tag.value,
                    peer.name,
                    peer.lag,
                )

    reader.each_cluster_server_jsz(visit)

    if examples.count() > 0:
        log.warning("meta.replicas_lagging", count=examples.count(), threshold=threshold)
        return Outcome.PASS_WITH_ISSUES

    return Outcome.PASS


__all__ = [
    "NO_LEADER",
    "register_meta_checks",
    "check_meta_cluster_leader",
    "check_meta_cluster_offline_replicas",
    "check_meta_cluster_replica_lag",
]
