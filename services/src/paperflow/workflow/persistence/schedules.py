"""File-backed chapter schedule store, one document per assignment."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from pydantic import TypeAdapter, ValidationError

from ..models._identifiers import validate_identifier
from ..models.schedule import ChapterSchedule
from ..service_errors import StorageError
from ..settings import WorkflowSettings
from .atomic import locked_path, read_json, write_json_atomic

_SCHEDULES = TypeAdapter(list[ChapterSchedule])


@dataclass
class ScheduleFileStore:
    """Persist the schedules of an assignment as a single replaceable document."""

    root: Path
    durable_writes: bool = True

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> "ScheduleFileStore":
        return cls(root=settings.storage_dir / "schedules", durable_writes=settings.durable_writes)

    def path_for(self, assignment_id: str) -> Path:
        try:
            validate_identifier(assignment_id, label="Assignment ID")
        except ValueError as exc:
            raise StorageError(str(exc), details={"assignment_id": assignment_id}) from exc
        return self.root / f"{assignment_id}.json"

    def load_all(self, assignment_id: str) -> list[ChapterSchedule]:
        """Return the stored schedules; an assignment without a document has none."""

        path = self.path_for(assignment_id)
        if not path.exists():
            return []
        payload = read_json(path)
        if isinstance(payload, dict):
            payload = payload.get("schedules", [])
        try:
            schedules = _SCHEDULES.validate_python(payload)
        except ValidationError as exc:
            raise StorageError(
                f"Stored schedules for {assignment_id} are malformed.",
                details={"path": str(path), "errors": exc.errors(include_url=False, include_context=False)},
            ) from exc
        foreign = [schedule.section_id for schedule in schedules if schedule.assignment_id != assignment_id]
        if foreign:
            raise StorageError(
                f"Stored schedules for {assignment_id} reference another assignment.",
                details={"path": str(path), "section_ids": foreign},
            )
        return schedules

    def save_all(self, assignment_id: str, schedules: Sequence[ChapterSchedule]) -> list[ChapterSchedule]:
        path = self.path_for(assignment_id)
        document = {
            "assignment_id": assignment_id,
            "schedules": _SCHEDULES.dump_python(list(schedules), mode="json"),
        }
        with locked_path(path):
            write_json_atomic(path, document, durable=self.durable_writes)
        return list(schedules)

    def update(
        self,
        assignment_id: str,
        mutate: Callable[[list[ChapterSchedule]], list[ChapterSchedule]],
    ) -> list[ChapterSchedule]:
        """Apply ``mutate`` to the stored schedules while holding the document lock."""

        path = self.path_for(assignment_id)
        with locked_path(path):
            return self.save_all(assignment_id, mutate(self.load_all(assignment_id)))


__all__ = ["ScheduleFileStore"]
