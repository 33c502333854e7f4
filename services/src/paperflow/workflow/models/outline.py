"""Pydantic models for paper outlines and their review history."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..normalization import count_words
from ._timestamps import ensure_utc


class ApprovalStatus(str, Enum):
    """Review state of a section or of a whole paper."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    APPROVED = "APPROVED"


# Older outlines stored the short revision label.
_LEGACY_STATUSES = {"REVISION": ApprovalStatus.REVISION_REQUESTED.value}


def _coerce_legacy_status(value: Any) -> Any:
    if isinstance(value, str):
        return _LEGACY_STATUSES.get(value, value)
    return value


class FeedbackEntry(BaseModel):
    """One immutable entry of a section's review timeline."""

    model_config = ConfigDict(frozen=True)

    status: ApprovalStatus
    feedback: str | None = None
    timestamp: datetime
    reviewer_id: str = Field(min_length=1)

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status(cls, value: Any) -> Any:
        return _coerce_legacy_status(value)

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)  # type: ignore[return-value]


class OutlineSection(BaseModel):
    """A chapter or subsection of a paper with its authored content."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str
    min_word_count: int = Field(default=0, ge=0)
    content: str = ""
    instructions: str | None = None
    children: list[OutlineSection] = Field(default_factory=list)
    approval_status: ApprovalStatus = ApprovalStatus.DRAFT
    feedback: str | None = None
    feedback_history: list[FeedbackEntry] = Field(default_factory=list)

    @field_validator("approval_status", mode="before")
    @classmethod
    def _legacy_status(cls, value: Any) -> Any:
        return _coerce_legacy_status(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def current_word_count(self) -> int:
        return count_words(self.content)

    def walk(self) -> Iterator[OutlineSection]:
        """Yield this section and all descendants depth first."""

        yield self
        for child in self.children:
            yield from child.walk()


def iter_sections(structure: list[OutlineSection]) -> Iterator[OutlineSection]:
    """Yield every section of ``structure`` depth first in document order."""

    for section in structure:
        yield from section.walk()


__all__ = ["ApprovalStatus", "FeedbackEntry", "OutlineSection", "iter_sections"]
