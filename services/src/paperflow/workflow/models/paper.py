"""Models for papers, their final document and consistency verdicts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._timestamps import ensure_utc
from .outline import ApprovalStatus, OutlineSection


class VerdictStatus(str, Enum):
    """State of the automated consistency evidence for a final document."""

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    CHECK_ERROR = "CHECK_ERROR"


class FinalApprovalStatus(str, Enum):
    """Review state of the uploaded final file, separate from content approval."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REVISION_REQUESTED = "REVISION_REQUESTED"


class ConsistencyVerdict(BaseModel):
    """Result of one verification run. Replaced whole, never edited."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(default=0.0, ge=0.0, le=100.0)
    status: VerdictStatus
    checked_at: datetime
    editor_text_length: int = Field(default=0, ge=0)
    extracted_text_length: int = Field(default=0, ge=0)
    sentence_coverage: float | None = Field(default=None, ge=0.0, le=100.0)
    mime_type: str | None = None
    file_size: int | None = Field(default=None, ge=0)
    error: str | None = None

    @field_validator("checked_at")
    @classmethod
    def _checked_at_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)  # type: ignore[return-value]


class FinalDocument(BaseModel):
    """Metadata for the final file; the bytes live in collaborator storage."""

    ref: str = Field(min_length=1)
    file_name: str
    file_size: int = Field(ge=0)
    mime_type: str
    uploaded_at: datetime
    approval_status: FinalApprovalStatus = FinalApprovalStatus.PENDING
    feedback: str | None = None
    decided_by: str | None = None
    decided_at: datetime | None = None

    @field_validator("uploaded_at", "decided_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class Paper(BaseModel):
    """A student's paper for one assignment."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    assignment_id: str = Field(min_length=1)
    author_id: str = Field(min_length=1)
    title: str = ""
    content: str = ""
    structure: list[OutlineSection] = Field(default_factory=list)
    overall_approval_status: ApprovalStatus = ApprovalStatus.DRAFT
    final_document: FinalDocument | None = None
    consistency_verdict: ConsistencyVerdict | None = None
    last_feedback: str | None = None
    last_reviewed_by: str | None = None
    last_reviewed_at: datetime | None = None
    version: int = Field(default=0, ge=0)
    updated_at: datetime | None = None

    @field_validator("last_reviewed_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def final_document_ref(self) -> str | None:
        return self.final_document.ref if self.final_document else None


__all__ = [
    "ConsistencyVerdict",
    "FinalApprovalStatus",
    "FinalDocument",
    "Paper",
    "VerdictStatus",
]
