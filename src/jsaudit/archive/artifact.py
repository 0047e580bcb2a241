"""Artifact: one immutable captured payload and the tags it was filed under."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from jsaudit.archive.tags import Tag
from jsaudit.core.errors import ArtifactDecodeError


@dataclass(frozen=True, slots=True)
class Artifact:
    """
    A serialized diagnostic payload plus its tag-set.

    Attributes:
        name: Archive member name (for error messages and logs)
        payload: Raw bytes as captured, typically JSON
        tags: Tags the artifact was stored under
    """

    name: str
    payload: bytes
    tags: frozenset[Tag] = field(default_factory=frozenset)

    @classmethod
    def create(cls, name: str, payload: bytes | str | Any, tags: Iterable[Tag]) -> Artifact:
        """Build an artifact, JSON-encoding ``payload`` unless it is already bytes/str."""
        if isinstance(payload, str):
            raw = payload.encode("utf-8")
        elif isinstance(payload, bytes):
            raw = payload
        else:
            raw = json.dumps(payload).encode("utf-8")
        return cls(name=name, payload=raw, tags=frozenset(tags))

    def matches(self, tags: Iterable[Tag]) -> bool:
        """True when this artifact carries every one of ``tags``."""
        return self.tags.issuperset(tags)

    def sorted_tags(self) -> list[Tag]:
        return sorted(self.tags)

    def decode(self) -> Any:
        """Parse the payload as JSON."""
        try:
            return json.loads(self.payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ArtifactDecodeError(f"artifact {self.name} is not valid JSON: {e}", cause=e).with_context(
                path=self.name
            ) from e
