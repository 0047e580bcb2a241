"""
Query façade over an ArchiveStore.

Checks never touch the store directly. They ask the Reader for one typed
artifact matching a tag-set, or walk every (cluster, server) pair with
one of the iteration helpers.

Manifesto:
    - **Typed loads:** payloads are validated into pydantic models, so a
      malformed artifact fails loudly as ArtifactDecodeError
    - **Absence is explicit:** nothing matched → NoMatchesError, which
      callers treat as "not captured"
    - **Deterministic:** several matches → the first in archive insertion
      order, every time; listings are sorted
    - **Per-server resilience:** the walk helpers hand load errors to the
      callback so one missing server never hides the rest

Examples:
    >>> reader = Reader(store)
    >>> jsz = reader.load(JszResponse, tag_cluster("C1"), tag_server("n1"), tag_server_jetstream())
    >>> reader.cluster_names()
    ['C1', 'C2']

    >>> def visit(cluster_tag, server_tag, err, jsz):
    ...     if err is not None:
    ...         return
    ...     print(server_tag.value, jsz.data.meta.leader)
    >>> reader.each_cluster_server_jsz(visit)

Tags:
    archive, reader, query, jsaudit

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from jsaudit.archive.artifact import Artifact
from jsaudit.archive.models import JszResponse
from jsaudit.archive.store import ArchiveStore
from jsaudit.archive.tags import Tag, TagDimension, tag_cluster, tag_server, tag_server_jetstream
from jsaudit.core.errors import ArchiveError, ArtifactDecodeError, CheckCancelledError, NoMatchesError
from jsaudit.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# callback(cluster_tag, server_tag, load_error, payload)
ServerVisitor = Callable[[Tag, Tag, Exception | None, Any], None]


@lru_cache(maxsize=64)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


class Reader:
    """Read-only query interface over an archive."""

    def __init__(self, store: ArchiveStore, cancel: threading.Event | None = None):
        self._store = store
        self._cancel = cancel

    @property
    def store(self) -> ArchiveStore:
        return self._store

    def with_cancel(self, cancel: threading.Event | None) -> Reader:
        """A Reader over the same store whose loads stop once ``cancel`` is set."""
        return Reader(self._store, cancel=cancel)

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise CheckCancelledError()

    # ------------------------------------------------------------------
    # Single artifact loads
    # ------------------------------------------------------------------

    def load(self, model: type[T], *tags: Tag) -> T:
        """
        Deserialize the artifact matching ``tags`` into ``model``.

        ``model`` is anything pydantic can validate: a BaseModel subclass,
        ``dict``, ``list[...]`` and so on.

        When several artifacts match, the first one in archive insertion
        order is used.

        Raises:
            NoMatchesError: nothing in the archive carries all ``tags``
            ArtifactDecodeError: the artifact does not fit ``model``
            CheckCancelledError: the run was cancelled
        """
        self._check_cancelled()

        matches = self._store.query(*tags)
        if not matches:
            raise NoMatchesError.for_tags(tags)

        if len(matches) > 1:
            logger.debug(
                "archive.ambiguous_match",
                tags=[str(t) for t in tags],
                matches=len(matches),
                selected=matches[0].name,
            )

        return self._decode(matches[0], model)

    def load_all(self, model: type[T], *tags: Tag) -> list[T]:
        """Deserialize every artifact matching ``tags``, in insertion order."""
        self._check_cancelled()
        return [self._decode(a, model) for a in self._store.query(*tags)]

    def _decode(self, artifact: Artifact, model: type[T]) -> T:
        try:
            return _adapter(model).validate_json(artifact.payload)
        except ValidationError as e:
            raise ArtifactDecodeError(
                f"artifact {artifact.name} does not match {getattr(model, '__name__', model)}: "
                f"{e.error_count()} validation error(s)",
                cause=e,
            ).with_context(path=artifact.name) from e

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def cluster_names(self) -> list[str]:
        """Distinct cluster names in the archive, sorted."""
        return self._store.tag_values(TagDimension.CLUSTER)

    def cluster_server_names(self, cluster: str) -> list[str]:
        """Servers captured under ``cluster``, sorted."""
        return self._store.tag_values(TagDimension.SERVER, tag_cluster(cluster))

    def server_names(self) -> list[str]:
        """Every server in the archive regardless of cluster, sorted."""
        return self._store.tag_values(TagDimension.SERVER)

    # ------------------------------------------------------------------
    # Walks
    # ------------------------------------------------------------------

    def each_cluster_server(self, model: type[T], type_tag: Tag, callback: ServerVisitor) -> dict[str, dict[str, T]]:
        """
        Load ``type_tag`` artifacts for every (cluster, server) pair.

        The callback receives ``(cluster_tag, server_tag, err, payload)``.
        Archive errors for one server (absent or malformed data) are passed
        as ``err`` with ``payload=None`` instead of being raised. The
        callback aborts the walk by raising.

        Returns:
            cluster -> server -> payload for every artifact that loaded
        """
        loaded: dict[str, dict[str, T]] = {}

        for cluster in self.cluster_names():
            cluster_tag = tag_cluster(cluster)
            for server in self.cluster_server_names(cluster):
                server_tag = tag_server(server)

                payload: T | None = None
                err: Exception | None = None
                try:
                    payload = self.load(model, cluster_tag, server_tag, type_tag)
                except ArchiveError as e:
                    err = e
                else:
                    loaded.setdefault(cluster, {})[server] = payload

                callback(cluster_tag, server_tag, err, payload)

        return loaded

    def each_cluster_server_jsz(self, callback: ServerVisitor) -> dict[str, dict[str, JszResponse]]:
        """``each_cluster_server`` over the JetStream details artifact."""
        return self.each_cluster_server(JszResponse, tag_server_jetstream(), callback)


__all__ = ["Reader", "ServerVisitor"]
