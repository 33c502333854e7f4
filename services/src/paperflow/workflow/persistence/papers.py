"""File-backed paper store with per-paper serialisation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from ..models._identifiers import validate_identifier
from ..models._timestamps import utc_now
from ..models.paper import Paper
from ..service_errors import ConcurrentModificationError, PaperNotFoundError, StorageError
from ..settings import WorkflowSettings
from .atomic import locked_path, read_json, write_json_atomic

LOGGER = logging.getLogger(__name__)


@dataclass
class PaperFileStore:
    """Persist each paper as one JSON document replaced atomically.

    Writes are guarded by a per-paper lock and an optimistic ``version``
    check, so a stale copy can never overwrite a newer one.
    """

    root: Path
    durable_writes: bool = True

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> "PaperFileStore":
        return cls(root=settings.storage_dir / "papers", durable_writes=settings.durable_writes)

    def path_for(self, paper_id: str) -> Path:
        try:
            validate_identifier(paper_id, label="Paper ID")
        except ValueError as exc:
            raise StorageError(str(exc), details={"paper_id": paper_id}) from exc
        return self.root / f"{paper_id}.json"

    def load(self, paper_id: str) -> Paper:
        path = self.path_for(paper_id)
        if not path.exists():
            raise PaperNotFoundError(f"Paper {paper_id} not found.", details={"paper_id": paper_id})
        return self._read(path)

    def save(self, paper: Paper) -> Paper:
        """Write ``paper`` if its version matches the stored one; return the stored copy."""

        path = self.path_for(paper.id)
        with locked_path(path):
            if path.exists():
                stored_version = self._read(path).version
                if stored_version != paper.version:
                    raise ConcurrentModificationError(
                        f"Paper {paper.id} changed since it was read.",
                        details={
                            "paper_id": paper.id,
                            "expected_version": paper.version,
                            "stored_version": stored_version,
                        },
                    )
            stored = paper.model_copy(update={"version": paper.version + 1, "updated_at": utc_now()})
            write_json_atomic(path, stored.model_dump(mode="json"), durable=self.durable_writes)
        LOGGER.debug(
            "storage.paper_saved",
            extra={"extra_payload": {"paper_id": paper.id, "version": stored.version}},
        )
        return stored

    def update(self, paper_id: str, mutate: Callable[[Paper], Paper]) -> Paper:
        """Apply ``mutate`` to the latest stored paper while holding its lock."""

        path = self.path_for(paper_id)
        with locked_path(path):
            current = self.load(paper_id)
            return self.save(mutate(current))

    def _read(self, path: Path) -> Paper:
        payload = read_json(path)
        try:
            return Paper.model_validate(payload)
        except ValidationError as exc:
            LOGGER.error("Paper document %s is malformed: %s", path, exc)
            raise StorageError(
                f"Stored paper {path.stem} is malformed.",
                details={"path": str(path), "errors": exc.errors(include_url=False, include_context=False)},
            ) from exc


__all__ = ["PaperFileStore"]
