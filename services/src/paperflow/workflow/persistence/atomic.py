"""Whole-document JSON storage primitives shared by the file stores."""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Iterator
from uuid import uuid4

from ..service_errors import StorageError

LOGGER = logging.getLogger(__name__)

_DOCUMENT_LOCKS: dict[Path, RLock] = {}
_REGISTRY_GUARD = Lock()


def _lock_for(document: Path) -> RLock:
    key = document.absolute()
    with _REGISTRY_GUARD:
        return _DOCUMENT_LOCKS.setdefault(key, RLock())


@contextmanager
def locked_path(document: Path) -> Iterator[None]:
    """Hold the in-process lock for ``document``; re-entrant for the owning thread."""

    with _lock_for(document):
        yield


def _sync_directory(directory: Path) -> None:
    if os.name == "nt":
        return
    descriptor = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(descriptor)
    finally:
        os.close(descriptor)


def swap_into_place(staged: Path, document: Path) -> None:
    os.replace(staged, document)


def write_json_atomic(path: Path, payload: Any, *, durable: bool = True) -> None:
    """Replace ``path`` with ``payload``; readers see the old or the new document, never a mix."""

    staged = path.with_name(f".{path.name}.{uuid4().hex}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with locked_path(path):
            try:
                with staged.open("w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2, ensure_ascii=False)
                    handle.flush()
                    if durable:
                        os.fsync(handle.fileno())
                swap_into_place(staged, path)
                if durable:
                    _sync_directory(path.parent)
            finally:
                staged.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.error(
            "storage.write_failed",
            extra={"extra_payload": {"path": str(path), "error": str(exc)}},
        )
        raise StorageError(f"Could not write {path.name}: {exc}", details={"path": str(path)}) from exc


def read_json(path: Path) -> Any:
    """Load a stored document; unreadable or corrupt files are storage failures."""

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise StorageError(f"Could not read {path.name}: {exc}", details={"path": str(path)}) from exc


__all__ = ["locked_path", "read_json", "swap_into_place", "write_json_atomic"]
