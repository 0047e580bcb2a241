"""Runtime settings for jsaudit.

``AuditSettings`` holds the operator-facing knobs of an analysis run
(example limit, worker count, default skip list, logging). Values come
from ``JSAUDIT_*`` environment variables or a ``.env`` file; CLI flags
override them.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box

Examples:
    >>> import os
    >>> os.environ["JSAUDIT_WORKERS"] = "4"
    >>> AuditSettings().workers
    4

Tags:
    settings, configuration, pydantic, environment, jsaudit
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AuditSettings(BaseSettings):
    """Settings shared by the CLI and library callers.

    Fields
    ──────
    example_limit : Max examples stored per check (0 = unbounded)
    workers       : Checks executed concurrently
    skip          : Check codes skipped by default (comma separated in env)
    log_level     : Structlog log level
    json_logs     : Force JSON logs (None = auto-detect TTY)
    """

    model_config = SettingsConfigDict(
        env_prefix="JSAUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Analysis ─────────────────────────────────────────────────
    example_limit: int = Field(default=10, ge=0)
    workers: int = Field(default=1, ge=1)
    skip: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("skip", mode="before")
    @classmethod
    def _split_skip(cls, value):
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> AuditSettings:
    """Process-wide settings, read once."""
    return AuditSettings()
