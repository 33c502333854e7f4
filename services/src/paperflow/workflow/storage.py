"""Storage collaborator contracts and the default file-backed wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from .models.paper import Paper
from .models.schedule import ChapterSchedule
from .models.template import TemplateOutline
from .persistence import PaperFileStore, ScheduleFileStore, TemplateFileStore
from .settings import WorkflowSettings


class PaperStore(Protocol):
    """Whole-object paper persistence.

    ``update`` must hold off concurrent writers to the same paper for the
    duration of ``mutate`` and replace the stored document atomically.
    """

    def load(self, paper_id: str) -> Paper: ...

    def save(self, paper: Paper) -> Paper: ...

    def update(self, paper_id: str, mutate: Callable[[Paper], Paper]) -> Paper: ...


class ScheduleStore(Protocol):
    def load_all(self, assignment_id: str) -> list[ChapterSchedule]: ...

    def save_all(self, assignment_id: str, schedules: Sequence[ChapterSchedule]) -> list[ChapterSchedule]: ...

    def update(
        self,
        assignment_id: str,
        mutate: Callable[[list[ChapterSchedule]], list[ChapterSchedule]],
    ) -> list[ChapterSchedule]: ...


class TemplateStore(Protocol):
    def load(self, assignment_id: str) -> TemplateOutline | None: ...


@dataclass(frozen=True)
class FileStorage:
    papers: PaperFileStore
    schedules: ScheduleFileStore
    templates: TemplateFileStore


def open_file_storage(settings: WorkflowSettings) -> FileStorage:
    """Build the file stores rooted at ``settings.storage_dir``."""

    return FileStorage(
        papers=PaperFileStore.from_settings(settings),
        schedules=ScheduleFileStore.from_settings(settings),
        templates=TemplateFileStore.from_settings(settings),
    )


__all__ = [
    "FileStorage",
    "PaperStore",
    "ScheduleStore",
    "TemplateStore",
    "open_file_storage",
]
