"""Reconcile a paper's outline with the current assignment template."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models.outline import OutlineSection
from .models.template import TemplateOutline

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a synchronization pass."""

    outline: list[OutlineSection]
    changed: bool
    appended: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()


def flatten_template(template: TemplateOutline) -> list[OutlineSection]:
    """Concatenate the outline of every content page in page order.

    A section without a title takes the name of the page it sits on.
    """

    master: list[OutlineSection] = []
    for page in template.pages:
        if page.structure is None:
            continue
        for section in page.structure:
            if not section.title and page.name:
                section = section.model_copy(update={"title": page.name})
            master.append(section)
    return master


def _fresh_section(template_section: OutlineSection) -> OutlineSection:
    return OutlineSection(
        id=template_section.id,
        title=template_section.title,
        min_word_count=template_section.min_word_count,
        instructions=template_section.instructions,
        children=[_fresh_section(child) for child in template_section.children],
    )


def _match(
    template_section: OutlineSection,
    outline: Sequence[OutlineSection],
    claimed: set[int],
) -> int | None:
    if template_section.id is not None:
        for index, section in enumerate(outline):
            if index not in claimed and section.id == template_section.id:
                return index

    # Title is only a key for legacy sections that predate stable ids.
    for index, section in enumerate(outline):
        if index in claimed or section.title != template_section.title:
            continue
        if template_section.id is None or section.id is None:
            return index
    return None


def synchronize(
    master: Sequence[OutlineSection],
    outline: Sequence[OutlineSection],
) -> SyncResult:
    """Merge ``master`` into ``outline`` without touching authored work.

    Matched sections only ever have ``min_word_count`` rewritten. Template
    sections with no counterpart are appended after all existing sections,
    and sections the template no longer lists are kept.
    """

    existing = list(outline)
    merged = list(outline)
    claimed: set[int] = set()
    appended: list[str] = []
    updated: list[str] = []

    for template_section in master:
        index = _match(template_section, existing, claimed)
        if index is None:
            merged.append(_fresh_section(template_section))
            appended.append(template_section.id or template_section.title)
            continue

        claimed.add(index)
        current = merged[index]
        if current.min_word_count != template_section.min_word_count:
            merged[index] = current.model_copy(update={"min_word_count": template_section.min_word_count})
            updated.append(current.id or current.title)

    changed = bool(appended or updated)
    if changed:
        LOGGER.debug(
            "outline.sync_changes",
            extra={"extra_payload": {"appended": appended, "updated": updated}},
        )
    return SyncResult(outline=merged, changed=changed, appended=tuple(appended), updated=tuple(updated))


__all__ = ["SyncResult", "flatten_template", "synchronize"]
