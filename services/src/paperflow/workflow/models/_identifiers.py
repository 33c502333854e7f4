"""Identifier validation for ids that become file names."""

from __future__ import annotations

import os
from pathlib import Path


def validate_identifier(value: str, *, label: str = "Identifier") -> str:
    """Ensure an identifier is a safe single path segment."""

    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string.")

    if value.strip() != value:
        raise ValueError(f"{label} must not contain leading or trailing whitespace.")

    if value == "":
        raise ValueError(f"{label} must not be empty.")

    if value in {".", ".."}:
        raise ValueError(f"{label} is invalid.")

    separators = {os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in value for sep in separators):
        raise ValueError(f"{label} must not contain path separators.")

    if any(ord(char) < 32 for char in value):
        raise ValueError(f"{label} contains invalid control characters.")

    if Path(value).is_absolute():
        raise ValueError(f"{label} must be a relative name.")

    return value


__all__ = ["validate_identifier"]
