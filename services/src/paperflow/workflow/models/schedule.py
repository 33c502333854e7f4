"""Chapter schedule model controlling when students may edit a section."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ._timestamps import ensure_utc


class ChapterSchedule(BaseModel):
    """Writing window for one top-level section of an assignment."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    assignment_id: str = Field(min_length=1)
    section_id: str = Field(min_length=1)
    title: str = ""
    scheduled_open: datetime | None = None
    scheduled_close: datetime | None = None
    manual_override_open: bool = False
    manual_override_close: bool = False
    updated_at: datetime | None = None

    @field_validator("scheduled_open", "scheduled_close", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _validate_overrides(self) -> "ChapterSchedule":
        if self.manual_override_open and self.manual_override_close:
            msg = "A schedule cannot be manually opened and closed at the same time."
            raise ValueError(msg)
        return self


__all__ = ["ChapterSchedule"]
