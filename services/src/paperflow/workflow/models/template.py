"""Assignment template models supplying the required outline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .outline import OutlineSection


class TemplatePage(BaseModel):
    """A page of the template; content pages carry an outline structure."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    structure: list[OutlineSection] | None = None


class TemplateOutline(BaseModel):
    """Template attached to an assignment."""

    model_config = ConfigDict(extra="ignore")

    assignment_id: str = Field(min_length=1)
    pages: list[TemplatePage] = Field(default_factory=list)


__all__ = ["TemplateOutline", "TemplatePage"]
