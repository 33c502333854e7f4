"""Tests for section decisions and overall approval derivation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from paperflow.workflow.approval import (
    apply_decision,
    apply_final_decision,
    attach_final_document,
    compute_overall_status,
    detach_final_document,
)
from paperflow.workflow.models import (
    ApprovalStatus,
    ConsistencyVerdict,
    FinalApprovalStatus,
    FinalDocument,
    OutlineSection,
    Paper,
    VerdictStatus,
)
from paperflow.workflow.service_errors import InvalidDecisionError, SectionNotFoundError


def _paper(*statuses: ApprovalStatus, overall: ApprovalStatus = ApprovalStatus.DRAFT) -> Paper:
    return Paper(
        id="p1",
        assignment_id="a1",
        author_id="student",
        structure=[
            OutlineSection(id=f"s{index}", title=f"Section {index}", approval_status=status)
            for index, status in enumerate(statuses, start=1)
        ],
        overall_approval_status=overall,
    )


def _document(now: datetime) -> FinalDocument:
    return FinalDocument(
        ref="files/p1.pdf",
        file_name="thesis.pdf",
        file_size=10,
        mime_type="application/pdf",
        uploaded_at=now,
    )


def test_approving_every_section_approves_paper(now: datetime) -> None:
    paper = _paper(ApprovalStatus.APPROVED, ApprovalStatus.SUBMITTED, overall=ApprovalStatus.SUBMITTED)

    updated = apply_decision(paper, "s2", "APPROVED", "Well done", "advisor", now)

    assert updated.overall_approval_status is ApprovalStatus.APPROVED
    assert updated.last_feedback == "Well done"
    assert updated.last_reviewed_by == "advisor"
    assert updated.last_reviewed_at == now
    section = updated.structure[1]
    assert section.approval_status is ApprovalStatus.APPROVED
    assert section.feedback == "Well done"
    assert [entry.status for entry in section.feedback_history] == [ApprovalStatus.APPROVED]
    assert paper.structure[1].approval_status is ApprovalStatus.SUBMITTED


def test_revision_on_approved_paper_resets_final_approval(now: datetime) -> None:
    paper = _paper(ApprovalStatus.APPROVED, ApprovalStatus.APPROVED, overall=ApprovalStatus.APPROVED)
    document = _document(now).model_copy(
        update={"approval_status": FinalApprovalStatus.APPROVED, "decided_by": "advisor", "decided_at": now}
    )
    paper = paper.model_copy(update={"final_document": document})

    updated = apply_decision(paper, "s1", ApprovalStatus.REVISION_REQUESTED, "Expand", "advisor", now)

    assert updated.overall_approval_status is ApprovalStatus.REVISION_REQUESTED
    assert updated.final_document is not None
    assert updated.final_document.approval_status is FinalApprovalStatus.PENDING
    assert updated.final_document.decided_by is None
    assert updated.final_document.ref == "files/p1.pdf"


def test_approved_paper_falls_back_to_submitted(now: datetime) -> None:
    paper = _paper(ApprovalStatus.APPROVED, ApprovalStatus.APPROVED, overall=ApprovalStatus.APPROVED)

    updated = apply_decision(paper, "s2", ApprovalStatus.SUBMITTED, None, "advisor", now)

    assert updated.overall_approval_status is ApprovalStatus.SUBMITTED


def test_history_accumulates_in_order(now: datetime) -> None:
    paper = _paper(ApprovalStatus.SUBMITTED)

    paper = apply_decision(paper, "s1", "REVISION_REQUESTED", "More data", "advisor", now)
    paper = apply_decision(paper, "s1", "APPROVED", None, "advisor", now + timedelta(days=1))

    history = paper.structure[0].feedback_history
    assert [entry.status for entry in history] == [ApprovalStatus.REVISION_REQUESTED, ApprovalStatus.APPROVED]
    assert history[1].timestamp == now + timedelta(days=1)
    assert paper.structure[0].feedback is None


def test_unknown_section_raises(now: datetime) -> None:
    with pytest.raises(SectionNotFoundError):
        apply_decision(_paper(ApprovalStatus.DRAFT), "missing", "APPROVED", None, "advisor", now)


def test_nested_section_is_not_a_decision_target(now: datetime) -> None:
    paper = Paper(
        id="p1",
        assignment_id="a1",
        author_id="student",
        structure=[OutlineSection(id="s1", title="One", children=[OutlineSection(id="s1a", title="Sub")])],
    )

    with pytest.raises(SectionNotFoundError):
        apply_decision(paper, "s1a", "APPROVED", None, "advisor", now)


@pytest.mark.parametrize("decision", ["DRAFT", "REJECTED", ""])
def test_invalid_decisions_raise(decision: str, now: datetime) -> None:
    with pytest.raises(InvalidDecisionError):
        apply_decision(_paper(ApprovalStatus.SUBMITTED), "s1", decision, None, "advisor", now)


def test_compute_overall_status_precedence() -> None:
    approved = OutlineSection(title="a", approval_status=ApprovalStatus.APPROVED)
    revision = OutlineSection(title="b", approval_status=ApprovalStatus.REVISION_REQUESTED)
    draft = OutlineSection(title="c", approval_status=ApprovalStatus.DRAFT)

    assert compute_overall_status([], ApprovalStatus.APPROVED) is ApprovalStatus.DRAFT
    assert compute_overall_status([approved, revision], ApprovalStatus.APPROVED) is ApprovalStatus.REVISION_REQUESTED
    assert compute_overall_status([approved], ApprovalStatus.DRAFT) is ApprovalStatus.APPROVED
    assert compute_overall_status([approved, draft], ApprovalStatus.APPROVED) is ApprovalStatus.SUBMITTED
    assert compute_overall_status([approved, draft], ApprovalStatus.SUBMITTED) is ApprovalStatus.SUBMITTED


def test_legacy_revision_status_is_read_as_revision_requested() -> None:
    section = OutlineSection.model_validate({"title": "x", "approval_status": "REVISION"})

    assert section.approval_status is ApprovalStatus.REVISION_REQUESTED


def test_attach_resets_final_approval_but_keeps_verdict(now: datetime) -> None:
    verdict = ConsistencyVerdict(score=88.0, status=VerdictStatus.PENDING_VERIFICATION, checked_at=now)
    previous = _document(now).model_copy(
        update={"approval_status": FinalApprovalStatus.REVISION_REQUESTED, "feedback": "Fix margins"}
    )
    paper = _paper(ApprovalStatus.APPROVED).model_copy(
        update={"final_document": previous, "consistency_verdict": verdict}
    )
    replacement = _document(now).model_copy(
        update={"ref": "files/p1-v2.pdf", "approval_status": FinalApprovalStatus.APPROVED}
    )

    updated = attach_final_document(paper, replacement)

    assert updated.final_document_ref == "files/p1-v2.pdf"
    assert updated.final_document.approval_status is FinalApprovalStatus.PENDING
    assert updated.final_document.feedback is None
    assert updated.consistency_verdict == verdict


def test_detach_final_document(now: datetime) -> None:
    paper = _paper(ApprovalStatus.APPROVED).model_copy(update={"final_document": _document(now)})

    assert detach_final_document(paper).final_document is None


def test_final_approval_requires_approved_content(now: datetime) -> None:
    paper = _paper(ApprovalStatus.SUBMITTED, overall=ApprovalStatus.SUBMITTED).model_copy(
        update={"final_document": _document(now)}
    )

    with pytest.raises(InvalidDecisionError):
        apply_final_decision(paper, "APPROVED", None, "advisor", now)

    sent_back = apply_final_decision(paper, "REVISION_REQUESTED", "Wrong file", "advisor", now)
    assert sent_back.final_document.approval_status is FinalApprovalStatus.REVISION_REQUESTED
    assert sent_back.final_document.feedback == "Wrong file"
    assert sent_back.final_document.decided_at == now


def test_final_decision_without_document_raises(now: datetime) -> None:
    with pytest.raises(InvalidDecisionError):
        apply_final_decision(_paper(ApprovalStatus.APPROVED, overall=ApprovalStatus.APPROVED), "APPROVED", None, "a", now)


def test_final_approval_on_approved_paper(now: datetime) -> None:
    paper = _paper(ApprovalStatus.APPROVED, overall=ApprovalStatus.APPROVED).model_copy(
        update={"final_document": _document(now)}
    )

    approved = apply_final_decision(paper, FinalApprovalStatus.APPROVED, None, "advisor", now)

    assert approved.final_document.approval_status is FinalApprovalStatus.APPROVED
    assert approved.final_document.decided_by == "advisor"


def test_naive_timestamps_are_stored_as_utc() -> None:
    naive = datetime(2026, 1, 5, 9, 30)

    updated = apply_decision(_paper(ApprovalStatus.SUBMITTED), "s1", "APPROVED", None, "advisor", naive)

    assert updated.last_reviewed_at == naive.replace(tzinfo=timezone.utc)
