"""Read access to assignment templates stored as JSON documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from ..models._identifiers import validate_identifier
from ..models.template import TemplateOutline
from ..service_errors import StorageError
from ..settings import WorkflowSettings
from .atomic import read_json, write_json_atomic


@dataclass
class TemplateFileStore:
    root: Path
    durable_writes: bool = True

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> "TemplateFileStore":
        return cls(root=settings.storage_dir / "templates", durable_writes=settings.durable_writes)

    def path_for(self, assignment_id: str) -> Path:
        try:
            validate_identifier(assignment_id, label="Assignment ID")
        except ValueError as exc:
            raise StorageError(str(exc), details={"assignment_id": assignment_id}) from exc
        return self.root / f"{assignment_id}.json"

    def load(self, assignment_id: str) -> TemplateOutline | None:
        """Return the assignment's template, or ``None`` when it has none."""

        path = self.path_for(assignment_id)
        if not path.exists():
            return None
        try:
            return TemplateOutline.model_validate(read_json(path))
        except ValidationError as exc:
            raise StorageError(
                f"Stored template for {assignment_id} is malformed.",
                details={"path": str(path), "errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    def save(self, template: TemplateOutline) -> None:
        path = self.path_for(template.assignment_id)
        write_json_atomic(path, template.model_dump(mode="json"), durable=self.durable_writes)


__all__ = ["TemplateFileStore"]
