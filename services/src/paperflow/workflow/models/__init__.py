"""Pydantic models for the document workflow engine."""

from __future__ import annotations

from .errors import ErrorResponse
from .outline import ApprovalStatus, FeedbackEntry, OutlineSection, iter_sections
from .paper import ConsistencyVerdict, FinalApprovalStatus, FinalDocument, Paper, VerdictStatus
from .schedule import ChapterSchedule
from .template import TemplateOutline, TemplatePage

__all__ = [
    "ApprovalStatus",
    "ChapterSchedule",
    "ConsistencyVerdict",
    "ErrorResponse",
    "FeedbackEntry",
    "FinalApprovalStatus",
    "FinalDocument",
    "OutlineSection",
    "Paper",
    "TemplateOutline",
    "TemplatePage",
    "VerdictStatus",
    "iter_sections",
]
