"""Central workflow error definitions and helper exception types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


ERROR_DEFINITIONS: Dict[str, ErrorDefinition] = {
    "INTERNAL": ErrorDefinition("INTERNAL", "Internal server error.", status.HTTP_500_INTERNAL_SERVER_ERROR),
    "VALIDATION": ErrorDefinition("VALIDATION", "Validation failed.", status.HTTP_400_BAD_REQUEST),
    "INVALID_DECISION": ErrorDefinition("INVALID_DECISION", "Decision is not allowed.", status.HTTP_400_BAD_REQUEST),
    "UNSUPPORTED_FORMAT": ErrorDefinition("UNSUPPORTED_FORMAT", "Unsupported document format.", status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
    "EXTRACTION_FAILED": ErrorDefinition("EXTRACTION_FAILED", "Failed to extract document text.", status.HTTP_400_BAD_REQUEST),
    "EXTRACTION_TIMEOUT": ErrorDefinition("EXTRACTION_TIMEOUT", "Document text extraction timed out.", status.HTTP_504_GATEWAY_TIMEOUT),
    "PAPER_NOT_FOUND": ErrorDefinition("PAPER_NOT_FOUND", "Paper not found.", status.HTTP_404_NOT_FOUND),
    "SECTION_NOT_FOUND": ErrorDefinition("SECTION_NOT_FOUND", "Outline section not found.", status.HTTP_404_NOT_FOUND),
    "SCHEDULE_NOT_FOUND": ErrorDefinition("SCHEDULE_NOT_FOUND", "Chapter schedule not found.", status.HTTP_404_NOT_FOUND),
    "SECTION_CLOSED": ErrorDefinition("SECTION_CLOSED", "Section is not open for editing.", status.HTTP_423_LOCKED),
    "CONFLICT": ErrorDefinition("CONFLICT", "Conflict occurred.", status.HTTP_409_CONFLICT),
    "STORAGE_FAILURE": ErrorDefinition("STORAGE_FAILURE", "Storage operation failed.", status.HTTP_500_INTERNAL_SERVER_ERROR),
}

DEFAULT_ERROR_DEFINITION = ErrorDefinition(
    "UNEXPECTED_ERROR",
    "Unexpected error occurred.",
    status.HTTP_500_INTERNAL_SERVER_ERROR,
)


class WorkflowError(Exception):
    """Structured error raised by the document workflow engine."""

    code: ClassVar[str] = "INTERNAL"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        definition = ERROR_DEFINITIONS.get(self.code, DEFAULT_ERROR_DEFINITION)
        self.message = message or definition.message
        super().__init__(self.message)
        self.details = details or {}

    @property
    def definition(self) -> ErrorDefinition:
        return ERROR_DEFINITIONS.get(self.code, DEFAULT_ERROR_DEFINITION)

    @property
    def status_code(self) -> int:
        return self.definition.status_code


class ExtractionError(WorkflowError):
    """Raised when a document cannot be turned into plain text."""

    code = "EXTRACTION_FAILED"


class UnsupportedFormatError(ExtractionError):
    """Raised before parsing when the declared MIME type is not accepted."""

    code = "UNSUPPORTED_FORMAT"


class ExtractionTimeoutError(ExtractionError):
    """Raised when a document parser exceeds the configured time budget."""

    code = "EXTRACTION_TIMEOUT"


class PaperNotFoundError(WorkflowError):
    code = "PAPER_NOT_FOUND"


class SectionNotFoundError(WorkflowError):
    code = "SECTION_NOT_FOUND"


class ScheduleNotFoundError(WorkflowError):
    code = "SCHEDULE_NOT_FOUND"


class SectionClosedError(WorkflowError):
    """Raised when a section is edited outside its schedule window."""

    code = "SECTION_CLOSED"


class InvalidDecisionError(WorkflowError):
    code = "INVALID_DECISION"


class InvalidScheduleError(WorkflowError):
    code = "VALIDATION"


class StorageError(WorkflowError):
    """Collaborator-originated storage failure. Always propagated."""

    code = "STORAGE_FAILURE"


class ConcurrentModificationError(WorkflowError):
    """Raised when a stale paper version is written back."""

    code = "CONFLICT"


__all__ = [
    "DEFAULT_ERROR_DEFINITION",
    "ERROR_DEFINITIONS",
    "ConcurrentModificationError",
    "ErrorDefinition",
    "ExtractionError",
    "ExtractionTimeoutError",
    "InvalidDecisionError",
    "InvalidScheduleError",
    "PaperNotFoundError",
    "ScheduleNotFoundError",
    "SectionClosedError",
    "SectionNotFoundError",
    "StorageError",
    "UnsupportedFormatError",
    "WorkflowError",
]
