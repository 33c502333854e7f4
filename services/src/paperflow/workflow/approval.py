"""Section review decisions and the derived whole-paper approval status."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from .models._timestamps import ensure_utc
from .models.outline import ApprovalStatus, FeedbackEntry, OutlineSection
from .models.paper import FinalApprovalStatus, FinalDocument, Paper
from .service_errors import InvalidDecisionError, SectionNotFoundError

LOGGER = logging.getLogger(__name__)

SECTION_DECISIONS: frozenset[ApprovalStatus] = frozenset(
    {ApprovalStatus.SUBMITTED, ApprovalStatus.APPROVED, ApprovalStatus.REVISION_REQUESTED}
)
FINAL_DECISIONS: frozenset[FinalApprovalStatus] = frozenset(
    {FinalApprovalStatus.APPROVED, FinalApprovalStatus.REVISION_REQUESTED}
)


def _coerce_decision(decision: ApprovalStatus | str) -> ApprovalStatus:
    try:
        status = ApprovalStatus(decision)
    except ValueError as exc:
        raise InvalidDecisionError(
            f"Unknown decision: {decision}.", details={"decision": str(decision)}
        ) from exc
    if status not in SECTION_DECISIONS:
        raise InvalidDecisionError(
            f"{status.value} cannot be applied as a review decision.",
            details={"decision": status.value},
        )
    return status


def compute_overall_status(
    sections: Iterable[OutlineSection],
    previous: ApprovalStatus,
) -> ApprovalStatus:
    """Derive the paper status from its top-level sections.

    Precedence: no sections is DRAFT; any revision request wins; unanimous
    approval is APPROVED; a paper that was APPROVED and no longer qualifies
    falls back to SUBMITTED; otherwise the previous status stands.
    """

    statuses = [section.approval_status for section in sections]
    if not statuses:
        return ApprovalStatus.DRAFT
    if ApprovalStatus.REVISION_REQUESTED in statuses:
        return ApprovalStatus.REVISION_REQUESTED
    if all(status is ApprovalStatus.APPROVED for status in statuses):
        return ApprovalStatus.APPROVED
    if previous is ApprovalStatus.APPROVED:
        return ApprovalStatus.SUBMITTED
    return previous


def _reset_final_approval(
    document: FinalDocument | None,
    overall: ApprovalStatus,
) -> FinalDocument | None:
    if document is None or overall is ApprovalStatus.APPROVED:
        return document
    if document.approval_status is FinalApprovalStatus.PENDING:
        return document
    return document.model_copy(
        update={
            "approval_status": FinalApprovalStatus.PENDING,
            "decided_by": None,
            "decided_at": None,
        }
    )


def apply_decision(
    paper: Paper,
    section_id: str,
    decision: ApprovalStatus | str,
    feedback: str | None,
    reviewer_id: str,
    now: datetime,
) -> Paper:
    """Record a review decision on one top-level section and return the new paper.

    The section's history gains one entry, its status and latest feedback are
    replaced, and the overall status is recomputed across every top-level
    section. When the paper is no longer APPROVED, a decided final document
    drops back to PENDING so the file is reviewed again.
    """

    status = _coerce_decision(decision)
    if not reviewer_id:
        raise InvalidDecisionError("A reviewer is required to record a decision.")
    timestamp = ensure_utc(now)

    index = next(
        (position for position, section in enumerate(paper.structure) if section.id == section_id),
        None,
    )
    if index is None:
        raise SectionNotFoundError(
            f"Section {section_id} is not part of paper {paper.id}.",
            details={"paper_id": paper.id, "section_id": section_id},
        )

    section = paper.structure[index]
    entry = FeedbackEntry(status=status, feedback=feedback, timestamp=timestamp, reviewer_id=reviewer_id)
    structure = list(paper.structure)
    structure[index] = section.model_copy(
        update={
            "approval_status": status,
            "feedback": feedback,
            "feedback_history": [*section.feedback_history, entry],
        }
    )

    overall = compute_overall_status(structure, paper.overall_approval_status)
    final_document = _reset_final_approval(paper.final_document, overall)

    LOGGER.info(
        "approval.decision_applied",
        extra={
            "extra_payload": {
                "paper_id": paper.id,
                "section_id": section_id,
                "decision": status.value,
                "overall": overall.value,
                "final_reset": final_document is not paper.final_document,
            }
        },
    )
    return paper.model_copy(
        update={
            "structure": structure,
            "overall_approval_status": overall,
            "final_document": final_document,
            "last_feedback": feedback,
            "last_reviewed_by": reviewer_id,
            "last_reviewed_at": timestamp,
        }
    )


def attach_final_document(paper: Paper, document: FinalDocument) -> Paper:
    """Record a newly uploaded final file; any earlier file decision is discarded."""

    pending = document.model_copy(
        update={
            "approval_status": FinalApprovalStatus.PENDING,
            "feedback": None,
            "decided_by": None,
            "decided_at": None,
        }
    )
    return paper.model_copy(update={"final_document": pending})


def detach_final_document(paper: Paper) -> Paper:
    return paper.model_copy(update={"final_document": None})


def apply_final_decision(
    paper: Paper,
    decision: FinalApprovalStatus | str,
    feedback: str | None,
    reviewer_id: str,
    now: datetime,
) -> Paper:
    """Approve or send back the final file.

    The file can only be approved while the content itself is APPROVED.
    """

    try:
        status = FinalApprovalStatus(decision)
    except ValueError as exc:
        raise InvalidDecisionError(
            f"Unknown final decision: {decision}.", details={"decision": str(decision)}
        ) from exc
    if status not in FINAL_DECISIONS:
        raise InvalidDecisionError(
            f"{status.value} cannot be applied to a final document.",
            details={"decision": status.value},
        )
    if not reviewer_id:
        raise InvalidDecisionError("A reviewer is required to record a decision.")
    if paper.final_document is None:
        raise InvalidDecisionError(
            "Paper has no final document to review.", details={"paper_id": paper.id}
        )
    if status is FinalApprovalStatus.APPROVED and paper.overall_approval_status is not ApprovalStatus.APPROVED:
        raise InvalidDecisionError(
            "Final document cannot be approved before the content is approved.",
            details={"paper_id": paper.id, "overall": paper.overall_approval_status.value},
        )

    document = paper.final_document.model_copy(
        update={
            "approval_status": status,
            "feedback": feedback,
            "decided_by": reviewer_id,
            "decided_at": ensure_utc(now),
        }
    )
    return paper.model_copy(update={"final_document": document})


__all__ = [
    "FINAL_DECISIONS",
    "SECTION_DECISIONS",
    "apply_decision",
    "apply_final_decision",
    "attach_final_document",
    "compute_overall_status",
    "detach_final_document",
]
