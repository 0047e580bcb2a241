"""
Immutable, queryable store of captured artifacts.

The store is built once, either from an archive file on disk or from
in-memory artifacts, and is read-only for the lifetime of an analysis.
Queries are conjunctions of tags; an artifact matches when its tag-set
is a superset of the query.

Manifesto:
    - **Immutable:** no mutation after construction, so concurrent checks
      may read without locks
    - **Deterministic:** query results come back in archive insertion
      order; value listings come back sorted
    - **Indexed:** one posting list per tag, queries intersect them

Architecture:
    ::

        ArchiveStore
        ├── _artifacts: tuple[Artifact, ...]        insertion order
        └── _index: dict[Tag, tuple[int, ...]]     tag -> positions

        query(cluster:C1, type:jsz)
            → positions(cluster:C1) ∩ positions(type:jsz)
            → sorted positions → artifacts

    On-disk format (zip)::

        audit.zip
        ├── manifest.json   {"<member>": [{"name": "cluster", "value": "C1"}, ...]}
        ├── <member>        payload bytes
        └── ...

Examples:
    >>> store = (
    ...     ArchiveBuilder()
    ...     .add("n1/jsz.json", {"data": {}}, tag_cluster("C1"), tag_server("n1"), tag_server_jetstream())
    ...     .build()
    ... )
    >>> len(store.query(tag_cluster("C1")))
    1

Tags:
    archive, storage, index, immutable, jsaudit

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import json
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from jsaudit.archive.artifact import Artifact
from jsaudit.archive.tags import Tag, TagDimension
from jsaudit.core.errors import ArchiveFormatError
from jsaudit.core.logging import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"


class ArchiveStore:
    """Read-only collection of artifacts addressable by tag conjunctions."""

    def __init__(self, artifacts: Iterable[Artifact] = ()):
        self._artifacts: tuple[Artifact, ...] = tuple(artifacts)

        index: dict[Tag, list[int]] = {}
        for position, artifact in enumerate(self._artifacts):
            for tag in artifact.tags:
                index.setdefault(tag, []).append(position)
        self._index: dict[Tag, tuple[int, ...]] = {tag: tuple(p) for tag, p in index.items()}

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._artifacts)

    @property
    def tags(self) -> list[Tag]:
        """Every distinct tag in the archive, sorted."""
        return sorted(self._index)

    def query(self, *tags: Tag) -> tuple[Artifact, ...]:
        """Return every artifact carrying all ``tags``, in insertion order.

        An empty query matches every artifact.
        """
        if not tags:
            return self._artifacts

        postings = []
        for tag in tags:
            positions = self._index.get(tag)
            if not positions:
                return ()
            postings.append(positions)

        postings.sort(key=len)
        matched = set(postings[0])
        for positions in postings[1:]:
            matched.intersection_update(positions)
            if not matched:
                return ()

        return tuple(self._artifacts[p] for p in sorted(matched))

    def tag_values(self, dimension: TagDimension, *within: Tag) -> list[str]:
        """Sorted distinct values of ``dimension`` among artifacts matching ``within``."""
        values = {
            tag.value
            for artifact in self.query(*within)
            for tag in artifact.tags
            if tag.dimension == dimension
        }
        return sorted(values)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_zip(cls, path: str | Path) -> ArchiveStore:
        """
        Load an archive written by the gathering tool.

        Raises:
            ArchiveFormatError: the file is not a zip, lacks a manifest,
                or the manifest references members that do not exist
        """
        path = Path(path)
        try:
            with zipfile.ZipFile(path) as zf:
                manifest = _read_manifest(zf, path)
                members = set(zf.namelist())
                artifacts = []
                for member, raw_tags in manifest.items():
                    if member not in members:
                        raise ArchiveFormatError(f"manifest references missing member {member}").with_context(
                            path=str(path)
                        )
                    if not isinstance(raw_tags, list):
                        raise ArchiveFormatError(f"tags for {member} must be a list").with_context(path=str(path))
                    tags = frozenset(Tag.from_dict(t) for t in raw_tags)
                    artifacts.append(Artifact(name=member, payload=zf.read(member), tags=tags))
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(f"{path} is not a zip archive", cause=e).with_context(path=str(path)) from e
        except FileNotFoundError as e:
            raise ArchiveFormatError(f"{path} does not exist", cause=e).with_context(path=str(path)) from e

        logger.debug("archive.loaded", path=str(path), artifacts=len(artifacts))
        return cls(artifacts)


def _read_manifest(zf: zipfile.ZipFile, path: Path) -> dict[str, Any]:
    try:
        raw = zf.read(MANIFEST_NAME)
    except KeyError as e:
        raise ArchiveFormatError(f"{path} has no {MANIFEST_NAME}", cause=e).with_context(path=str(path)) from e

    try:
        manifest = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ArchiveFormatError(f"{MANIFEST_NAME} is not valid JSON", cause=e).with_context(path=str(path)) from e

    if not isinstance(manifest, dict):
        raise ArchiveFormatError(f"{MANIFEST_NAME} must be an object").with_context(path=str(path))
    return manifest


class ArchiveBuilder:
    """
    Assemble an archive in memory.

    Used by tests and tooling that already hold captured payloads. It does
    not talk to live servers.
    """

    def __init__(self):
        self._artifacts: list[Artifact] = []

    def add(self, name: str, payload: Any, *tags: Tag) -> ArchiveBuilder:
        """Add an artifact. Returns self for chaining."""
        self._artifacts.append(Artifact.create(name, payload, tags))
        return self

    def build(self) -> ArchiveStore:
        return ArchiveStore(self._artifacts)

    def write_zip(self, path: str | Path) -> Path:
        """Write the artifacts in the on-disk format ``ArchiveStore.from_zip`` reads."""
        path = Path(path)
        manifest = {a.name: [t.to_dict() for t in a.sorted_tags()] for a in self._artifacts}
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for artifact in self._artifacts:
                zf.writestr(artifact.name, artifact.payload)
            zf.writestr(MANIFEST_NAME, json.dumps(manifest, indent=2))
        return path
