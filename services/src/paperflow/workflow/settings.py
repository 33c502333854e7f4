"""Pydantic settings for the document workflow engine."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _default_storage_dir() -> Path:
    """Determine a sensible default storage directory."""

    return Path.cwd() / "paperflow_data"


class WorkflowSettings(BaseSettings):
    """Runtime configuration, read from ``PAPERFLOW_*`` variables or ``.env``."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="PAPERFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_dir: Path = Field(
        default_factory=_default_storage_dir,
        description="Directory holding paper, schedule and template documents.",
    )
    extraction_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Maximum time a document parser may run before the check fails.",
    )
    durable_writes: bool = Field(
        default=True,
        description="fsync persisted documents before the atomic rename.",
    )
    coverage_min_sentence_words: int = Field(
        default=20,
        ge=1,
        description="Minimum sentence length counted by the sentence coverage diagnostic.",
    )

    @field_validator("storage_dir")
    @classmethod
    def _reject_file_path(cls, value: Path) -> Path:
        if value.exists() and not value.is_dir():
            raise ValueError(f"Storage path is not a directory: {value}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> WorkflowSettings:
    """Return a cached settings instance."""

    settings = WorkflowSettings()
    logger.debug("Loaded workflow settings from %s", settings.storage_dir)
    return settings


__all__ = ["WorkflowSettings", "get_settings"]
