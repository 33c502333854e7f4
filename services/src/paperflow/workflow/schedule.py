"""Time-window and manual-override gate for outline sections."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, Sequence

from .models._timestamps import ensure_utc
from .models.outline import OutlineSection
from .models.schedule import ChapterSchedule
from .service_errors import InvalidScheduleError

LOGGER = logging.getLogger(__name__)


class OverrideMode(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    NONE = "none"


class BulkAction(str, Enum):
    OPEN_ALL = "open-all"
    CLOSE_ALL = "close-all"


def is_open(schedule: ChapterSchedule, now: datetime) -> bool:
    """Return whether the section governed by ``schedule`` accepts edits at ``now``.

    A manual open beats everything, a manual close beats the window, and a
    schedule with no opening time is closed.
    """

    if schedule.manual_override_open:
        return True
    if schedule.manual_override_close:
        return False
    if schedule.scheduled_open is None:
        return False

    moment = ensure_utc(now)
    if moment is None:
        raise InvalidScheduleError("A point in time is required to evaluate a schedule.")
    if moment < schedule.scheduled_open:
        return False
    return schedule.scheduled_close is None or moment <= schedule.scheduled_close


def set_override(schedule: ChapterSchedule, mode: OverrideMode | str, now: datetime) -> ChapterSchedule:
    """Return a copy with the requested override; setting one clears the other."""

    try:
        resolved = OverrideMode(mode)
    except ValueError as exc:
        raise InvalidScheduleError(f"Invalid override mode: {mode}.", details={"mode": str(mode)}) from exc
    updated = schedule.model_copy(
        update={
            "manual_override_open": resolved is OverrideMode.OPEN,
            "manual_override_close": resolved is OverrideMode.CLOSE,
            "updated_at": ensure_utc(now),
        }
    )
    LOGGER.info(
        "schedule.override_changed",
        extra={
            "extra_payload": {
                "assignment_id": schedule.assignment_id,
                "section_id": schedule.section_id,
                "mode": resolved.value,
            }
        },
    )
    return updated


def force_open(schedule: ChapterSchedule, now: datetime) -> ChapterSchedule:
    return set_override(schedule, OverrideMode.OPEN, now)


def force_close(schedule: ChapterSchedule, now: datetime) -> ChapterSchedule:
    return set_override(schedule, OverrideMode.CLOSE, now)


def clear_override(schedule: ChapterSchedule, now: datetime) -> ChapterSchedule:
    return set_override(schedule, OverrideMode.NONE, now)


def toggle_manual_open(schedule: ChapterSchedule, now: datetime) -> ChapterSchedule:
    if schedule.manual_override_open:
        return clear_override(schedule, now)
    return force_open(schedule, now)


def toggle_manual_close(schedule: ChapterSchedule, now: datetime) -> ChapterSchedule:
    if schedule.manual_override_close:
        return clear_override(schedule, now)
    return force_close(schedule, now)


def reschedule(
    schedule: ChapterSchedule,
    opens_at: datetime | None,
    closes_at: datetime | None,
    now: datetime,
) -> ChapterSchedule:
    """Replace the writing window. Overrides are left as they are."""

    opens = ensure_utc(opens_at)
    closes = ensure_utc(closes_at)
    if opens is not None and closes is not None and closes < opens:
        raise InvalidScheduleError(
            "Schedule closes before it opens.",
            details={"section_id": schedule.section_id},
        )
    return schedule.model_copy(
        update={"scheduled_open": opens, "scheduled_close": closes, "updated_at": ensure_utc(now)}
    )


def apply_bulk_action(
    schedules: Iterable[ChapterSchedule],
    action: BulkAction | str,
    now: datetime,
) -> list[ChapterSchedule]:
    """Force every schedule of an assignment open or closed."""

    try:
        resolved = BulkAction(action)
    except ValueError as exc:
        raise InvalidScheduleError(f"Invalid bulk action: {action}.", details={"action": str(action)}) from exc
    mode = OverrideMode.OPEN if resolved is BulkAction.OPEN_ALL else OverrideMode.CLOSE
    return [set_override(schedule, mode, now) for schedule in schedules]


def seed_schedules(
    assignment_id: str,
    master: Sequence[OutlineSection],
    existing: Sequence[ChapterSchedule],
) -> tuple[list[ChapterSchedule], bool]:
    """Add a closed schedule for every top-level template section without one.

    Returns the full schedule list and whether anything was added.
    """

    known = {schedule.section_id for schedule in existing}
    schedules = list(existing)
    for section in master:
        if section.id is None or section.id in known:
            continue
        schedules.append(ChapterSchedule(assignment_id=assignment_id, section_id=section.id, title=section.title))
        known.add(section.id)
    return schedules, len(schedules) != len(existing)


def top_level_section_id(structure: Sequence[OutlineSection], section_id: str) -> str | None:
    """Return the id of the top-level section containing ``section_id``."""

    for root in structure:
        if any(section.id == section_id for section in root.walk()):
            return root.id
    return None


__all__ = [
    "BulkAction",
    "OverrideMode",
    "apply_bulk_action",
    "clear_override",
    "force_close",
    "force_open",
    "is_open",
    "reschedule",
    "seed_schedules",
    "set_override",
    "toggle_manual_close",
    "toggle_manual_open",
    "top_level_section_id",
]
