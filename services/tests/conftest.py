"""Pytest configuration for the workflow test suite."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    """Add the services src directory to ``sys.path`` for imports."""

    src_dir = Path(__file__).resolve().parent.parent / "src"
    src_path = str(src_dir)
    if src_dir.is_dir() and src_path not in sys.path:
        sys.path.insert(0, src_path)


_ensure_src_on_path()

from paperflow.workflow.models import (  # noqa: E402
    OutlineSection,
    Paper,
    TemplateOutline,
    TemplatePage,
)
from paperflow.workflow.persistence import (  # noqa: E402
    PaperFileStore,
    ScheduleFileStore,
    TemplateFileStore,
)
from paperflow.workflow.settings import get_settings  # noqa: E402

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def paper_store(tmp_path: Path) -> PaperFileStore:
    return PaperFileStore(root=tmp_path / "papers", durable_writes=False)


@pytest.fixture()
def schedule_store(tmp_path: Path) -> ScheduleFileStore:
    return ScheduleFileStore(root=tmp_path / "schedules", durable_writes=False)


@pytest.fixture()
def template_store(tmp_path: Path) -> TemplateFileStore:
    return TemplateFileStore(root=tmp_path / "templates", durable_writes=False)


@pytest.fixture()
def template() -> TemplateOutline:
    """Two-section template: an introduction page and a methods page."""

    return TemplateOutline(
        assignment_id="thesis-2026",
        pages=[
            TemplatePage(name="Cover"),
            TemplatePage(
                name="Introduction",
                structure=[OutlineSection(id="s1", title="Introduction", min_word_count=200)],
            ),
            TemplatePage(
                name="Methods",
                structure=[
                    OutlineSection(
                        id="s2",
                        title="Methods",
                        min_word_count=300,
                        children=[OutlineSection(id="s2a", title="Data collection", min_word_count=100)],
                    )
                ],
            ),
        ],
    )


@pytest.fixture()
def paper() -> Paper:
    return Paper(
        id="paper-1",
        assignment_id="thesis-2026",
        author_id="student-7",
        title="Soil moisture in urban parks",
        structure=[
            OutlineSection(id="s1", title="Introduction", min_word_count=200, content="<p>Parks matter.</p>"),
        ],
    )
