"""Task identifier generation."""

from __future__ import annotations

import uuid


def new_task_id() -> str:
    """Return a fresh random UUID4 string."""
    return str(uuid.uuid4())


def is_valid_task_id(value: object) -> bool:
    """True when value is usable as a task id (a non-empty string)."""
    return isinstance(value, str) and len(value) > 0
