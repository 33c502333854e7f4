"""Tests for workflow configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from paperflow.workflow.settings import WorkflowSettings, get_settings


def test_environment_overrides_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAPERFLOW_STORAGE_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("PAPERFLOW_EXTRACTION_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("PAPERFLOW_DURABLE_WRITES", "false")

    settings = WorkflowSettings()

    assert settings.storage_dir == tmp_path / "store"
    assert settings.extraction_timeout_seconds == 2.5
    assert settings.durable_writes is False
    assert settings.coverage_min_sentence_words == 20


def test_dotenv_file_is_read(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PAPERFLOW_STORAGE_DIR", raising=False)
    (tmp_path / ".env").write_text(
        'PAPERFLOW_STORAGE_DIR="{}"\n'.format(tmp_path / "from-dotenv"),
        encoding="utf-8",
    )

    assert WorkflowSettings().storage_dir == tmp_path / "from-dotenv"


def test_default_storage_dir_is_under_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PAPERFLOW_STORAGE_DIR", raising=False)

    assert WorkflowSettings().storage_dir == tmp_path / "paperflow_data"


def test_storage_dir_must_not_be_a_file(tmp_path: Path) -> None:
    target = tmp_path / "occupied"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(ValidationError):
        WorkflowSettings(storage_dir=target)


def test_timeout_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        WorkflowSettings(storage_dir=tmp_path, extraction_timeout_seconds=0)


def test_get_settings_is_cached(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAPERFLOW_STORAGE_DIR", str(tmp_path))

    assert get_settings() is get_settings()
