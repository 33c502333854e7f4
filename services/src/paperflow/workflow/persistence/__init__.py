"""Convenience exports for persistence helpers."""

from __future__ import annotations

from .atomic import locked_path, read_json, write_json_atomic
from .papers import PaperFileStore
from .schedules import ScheduleFileStore
from .templates import TemplateFileStore

__all__ = [
    "PaperFileStore",
    "ScheduleFileStore",
    "TemplateFileStore",
    "locked_path",
    "read_json",
    "write_json_atomic",
]
