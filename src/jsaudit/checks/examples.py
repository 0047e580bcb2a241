"""Bounded evidence buffer attached to one check execution."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, computed_field, model_validator


class ExamplesCollection(BaseModel):
    """
    Formatted examples a check records to justify its outcome.

    At most ``limit`` examples are stored (``0`` means unbounded). Every
    offered example is counted in ``total`` so a report can say how many
    were dropped. ``error`` holds the handler error text when the check
    could not run.
    """

    examples: list[str] = Field(default_factory=list)
    limit: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    error: str | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> ExamplesCollection:
        if self.limit and len(self.examples) > self.limit:
            raise ValueError(f"{len(self.examples)} examples exceed limit {self.limit}")
        if self.total < len(self.examples):
            raise ValueError(f"total {self.total} is less than the {len(self.examples)} stored examples")
        return self

    def add(self, message: str, *args: Any) -> None:
        """Record an example, ``%``-formatting ``args`` into ``message`` like logging does."""
        self.total += 1
        if self.limit and len(self.examples) >= self.limit:
            return
        self.examples.append(message % args if args else message)

    def count(self) -> int:
        """Number of examples offered, stored or not."""
        return self.total

    @computed_field
    @property
    def dropped(self) -> int:
        return self.total - len(self.examples)

    @property
    def truncated(self) -> bool:
        return self.dropped > 0
