"""Workflow facade wiring the engine components to their storage collaborators."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Sequence

from .approval import apply_decision, apply_final_decision, attach_final_document, detach_final_document
from .consistency import ConsistencyVerifier
from .models._timestamps import ensure_utc, utc_now
from .models.outline import ApprovalStatus, OutlineSection
from .models.paper import ConsistencyVerdict, FinalApprovalStatus, FinalDocument, Paper
from .models.schedule import ChapterSchedule
from .outline_sync import flatten_template, synchronize
from .schedule import (
    BulkAction,
    OverrideMode,
    apply_bulk_action,
    is_open,
    reschedule,
    seed_schedules,
    set_override,
    top_level_section_id,
)
from .service_errors import ScheduleNotFoundError, SectionClosedError, SectionNotFoundError
from .settings import WorkflowSettings, get_settings
from .storage import PaperStore, ScheduleStore, TemplateStore, open_file_storage

LOGGER = logging.getLogger(__name__)


def _replace_content(
    sections: Sequence[OutlineSection],
    section_id: str,
    content: str,
) -> tuple[list[OutlineSection], bool]:
    replaced = False
    result: list[OutlineSection] = []
    for section in sections:
        if not replaced and section.id == section_id:
            result.append(section.model_copy(update={"content": content}))
            replaced = True
            continue
        if not replaced and section.children:
            children, replaced = _replace_content(section.children, section_id, content)
            if replaced:
                section = section.model_copy(update={"children": children})
        result.append(section)
    return result, replaced


class PaperWorkflowService:
    """Entry point used by the host application for every paper mutation."""

    def __init__(
        self,
        papers: PaperStore,
        schedules: ScheduleStore,
        templates: TemplateStore,
        verifier: ConsistencyVerifier,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._papers = papers
        self._schedules = schedules
        self._templates = templates
        self._verifier = verifier
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: WorkflowSettings | None = None) -> "PaperWorkflowService":
        resolved = settings or get_settings()
        storage = open_file_storage(resolved)
        verifier = ConsistencyVerifier.from_settings(storage.papers, resolved)
        return cls(storage.papers, storage.schedules, storage.templates, verifier)

    def _now(self, now: datetime | None) -> datetime:
        return ensure_utc(now) or self._clock()

    # Outline ---------------------------------------------------------------

    def master_outline(self, assignment_id: str) -> list[OutlineSection]:
        template = self._templates.load(assignment_id)
        if template is None:
            return []
        return flatten_template(template)

    def load_paper(self, paper_id: str) -> Paper:
        """Load a paper with its outline reconciled against the current template."""

        paper = self._papers.load(paper_id)
        master = self.master_outline(paper.assignment_id)
        if not master or not synchronize(master, paper.structure).changed:
            return paper

        def _sync(current: Paper) -> Paper:
            result = synchronize(master, current.structure)
            return current.model_copy(update={"structure": result.outline}) if result.changed else current

        stored = self._papers.update(paper_id, _sync)
        LOGGER.info(
            "outline.synchronized",
            extra={"extra_payload": {"paper_id": paper_id, "sections": len(stored.structure)}},
        )
        return stored

    def ensure_section_writable(self, paper: Paper, section_id: str, now: datetime | None = None) -> None:
        """Raise unless ``section_id`` may be edited at ``now``.

        Subsections follow the schedule of their top-level section; a section
        without a schedule is closed.
        """

        root_id = top_level_section_id(paper.structure, section_id)
        if root_id is None:
            raise SectionNotFoundError(
                f"Section {section_id} is not part of paper {paper.id}.",
                details={"paper_id": paper.id, "section_id": section_id},
            )
        schedule = self._find_schedule(self._schedules.load_all(paper.assignment_id), root_id)
        if schedule is None or not is_open(schedule, self._now(now)):
            raise SectionClosedError(
                f"Section {section_id} is closed for editing.",
                details={"paper_id": paper.id, "section_id": section_id, "scheduled": schedule is not None},
            )

    def update_section_content(
        self,
        paper_id: str,
        section_id: str,
        content: str,
        now: datetime | None = None,
    ) -> Paper:
        paper = self.load_paper(paper_id)
        self.ensure_section_writable(paper, section_id, now)

        def _write(current: Paper) -> Paper:
            structure, replaced = _replace_content(current.structure, section_id, content)
            if not replaced:
                raise SectionNotFoundError(
                    f"Section {section_id} is not part of paper {paper_id}.",
                    details={"paper_id": paper_id, "section_id": section_id},
                )
            return current.model_copy(update={"structure": structure})

        return self._papers.update(paper_id, _write)

    # Approval --------------------------------------------------------------

    def submit_decision(
        self,
        paper_id: str,
        section_id: str,
        decision: ApprovalStatus | str,
        feedback: str | None,
        reviewer_id: str,
        now: datetime | None = None,
    ) -> Paper:
        moment = self._now(now)
        return self._papers.update(
            paper_id,
            lambda current: apply_decision(current, section_id, decision, feedback, reviewer_id, moment),
        )

    # Final document ----------------------------------------------------------

    def upload_final_document(
        self,
        paper_id: str,
        ref: str,
        file_name: str,
        data: bytes,
        mime_type: str | None,
        now: datetime | None = None,
    ) -> ConsistencyVerdict:
        """Record the uploaded file, then attach consistency evidence to it.

        The file is recorded even when the check itself fails; the verdict
        then reads CHECK_ERROR.
        """

        document = FinalDocument(
            ref=ref,
            file_name=file_name,
            file_size=len(data),
            mime_type=mime_type or "",
            uploaded_at=self._now(now),
        )
        self._papers.update(paper_id, lambda current: attach_final_document(current, document))
        return self._verifier.verify(paper_id, data, mime_type)

    def remove_final_document(self, paper_id: str) -> Paper:
        return self._papers.update(paper_id, detach_final_document)

    def decide_final_document(
        self,
        paper_id: str,
        decision: FinalApprovalStatus | str,
        feedback: str | None,
        reviewer_id: str,
        now: datetime | None = None,
    ) -> Paper:
        moment = self._now(now)
        return self._papers.update(
            paper_id,
            lambda current: apply_final_decision(current, decision, feedback, reviewer_id, moment),
        )

    # Schedules -------------------------------------------------------------

    @staticmethod
    def _find_schedule(schedules: Sequence[ChapterSchedule], section_id: str) -> ChapterSchedule | None:
        return next((schedule for schedule in schedules if schedule.section_id == section_id), None)

    def schedules_for(self, assignment_id: str) -> list[ChapterSchedule]:
        """Return the assignment's schedules, creating closed ones for new template sections."""

        existing = self._schedules.load_all(assignment_id)
        master = self.master_outline(assignment_id)
        _, added = seed_schedules(assignment_id, master, existing)
        if not added:
            return existing
        return self._schedules.update(
            assignment_id,
            lambda current: seed_schedules(assignment_id, master, current)[0],
        )

    def _modify_schedule(
        self,
        assignment_id: str,
        section_id: str,
        change: Callable[[ChapterSchedule], ChapterSchedule],
    ) -> ChapterSchedule:
        self.schedules_for(assignment_id)

        changed: list[ChapterSchedule] = []

        def _apply(current: list[ChapterSchedule]) -> list[ChapterSchedule]:
            for index, schedule in enumerate(current):
                if schedule.section_id == section_id:
                    updated = list(current)
                    updated[index] = change(schedule)
                    changed.append(updated[index])
                    return updated
            raise ScheduleNotFoundError(
                f"No schedule for section {section_id}.",
                details={"assignment_id": assignment_id, "section_id": section_id},
            )

        self._schedules.update(assignment_id, _apply)
        return changed[-1]

    def set_override(
        self,
        assignment_id: str,
        section_id: str,
        mode: OverrideMode | str,
        now: datetime | None = None,
    ) -> ChapterSchedule:
        moment = self._now(now)
        return self._modify_schedule(assignment_id, section_id, lambda schedule: set_override(schedule, mode, moment))

    def reschedule_section(
        self,
        assignment_id: str,
        section_id: str,
        opens_at: datetime | None,
        closes_at: datetime | None,
        now: datetime | None = None,
    ) -> ChapterSchedule:
        moment = self._now(now)
        return self._modify_schedule(
            assignment_id,
            section_id,
            lambda schedule: reschedule(schedule, opens_at, closes_at, moment),
        )

    def bulk_override(
        self,
        assignment_id: str,
        action: BulkAction | str,
        now: datetime | None = None,
    ) -> list[ChapterSchedule]:
        moment = self._now(now)
        self.schedules_for(assignment_id)
        return self._schedules.update(assignment_id, lambda current: apply_bulk_action(current, action, moment))

    def is_section_open(self, assignment_id: str, section_id: str, now: datetime | None = None) -> bool:
        schedule = self._find_schedule(self._schedules.load_all(assignment_id), section_id)
        return schedule is not None and is_open(schedule, self._now(now))


__all__ = ["PaperWorkflowService"]
