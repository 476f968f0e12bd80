"""In-memory task storage with filtering, sorting, and pagination.

Beginner terms:
- Protocol: the set of methods any storage backend must provide.
- Lock: one ``threading.Lock`` guards the dict so FastAPI worker threads
  never observe a half-applied change.
- Absence is returned as ``None``/``False``; storage never raises for unknown ids.
"""

from __future__ import annotations

import locale
import logging
import math
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Protocol

from .ids import new_task_id
from .models import (
    PRIORITY_RANK,
    PaginatedTasks,
    PaginationMeta,
    PaginationOptions,
    Task,
    TaskFilter,
    TaskSort,
    task_adapter,
)

logger = logging.getLogger(__name__)

_MIN_DUE = datetime.min.replace(tzinfo=UTC)
_MAX_DUE = datetime.max.replace(tzinfo=UTC)


class TaskStorage(Protocol):
    def create(self, fields: dict[str, Any]) -> Task: ...

    def find_by_id(self, task_id: str) -> Task | None: ...

    def find_all(self) -> list[Task]: ...

    def update(self, task_id: str, fields: dict[str, Any]) -> Task | None: ...

    def delete(self, task_id: str) -> bool: ...

    def find_by_filter(
        self, task_filter: TaskFilter, sort: TaskSort | None = None
    ) -> list[Task]: ...

    def find_paginated(
        self,
        task_filter: TaskFilter,
        pagination: PaginationOptions,
        sort: TaskSort | None = None,
    ) -> PaginatedTasks: ...


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _title_key(task: Task) -> str:
    return locale.strxfrm(task.title.casefold())


# Sort key per field; both wire (camelCase) and attribute spellings are accepted.
_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "createdAt": lambda task: task.created_at,
    "created_at": lambda task: task.created_at,
    "updatedAt": lambda task: task.updated_at,
    "updated_at": lambda task: task.updated_at,
    "priority": lambda task: PRIORITY_RANK.get(task.priority, 0),
    "title": _title_key,
}


def _as_set(value: str | list[str]) -> set[str]:
    if isinstance(value, str):
        return {value}
    return set(value)


def _matches(task: Task, task_filter: TaskFilter) -> bool:
    """Return True when task satisfies every criterion present in task_filter."""
    if task_filter.status is not None and task.status not in _as_set(task_filter.status):
        return False
    if task_filter.priority is not None and task.priority not in _as_set(task_filter.priority):
        return False
    if task_filter.type is not None and task.type not in _as_set(task_filter.type):
        return False

    if task_filter.search:
        needle = task_filter.search.lower()
        in_title = needle in task.title.lower()
        in_description = task.description is not None and needle in task.description.lower()
        if not (in_title or in_description):
            return False

    if task_filter.due_date_range is not None:
        # Only standard tasks carrying a due date can fall inside a range.
        due_date = getattr(task, "due_date", None)
        if task.type != "standard" or due_date is None:
            return False
        start = task_filter.due_date_range.start or _MIN_DUE
        end = task_filter.due_date_range.end or _MAX_DUE
        if not start <= due_date <= end:
            return False

    return True


def sort_tasks(tasks: Iterable[Task], sort: TaskSort) -> list[Task]:
    """Return tasks ordered by sort.field; unknown fields keep the incoming order."""
    key = _SORT_KEYS.get(sort.field)
    if key is None:
        logger.debug("sort_tasks event=unknown_field field=%s", sort.field)
        return list(tasks)
    # sorted() is stable in both directions, so ties keep their incoming order.
    return sorted(tasks, key=key, reverse=sort.order != "asc")


class InMemoryTaskStorage:
    """Thread-safe dict-backed storage for Task records.

    Tasks are frozen models, so the stored instances are returned directly.
    Iteration follows insertion order, which keeps query results deterministic.
    """

    def __init__(
        self,
        *,
        id_factory: Callable[[], str] = new_task_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._tasks: dict[str, Task] = {}
        # Lock guards every read and write of self._tasks.
        self._lock = threading.Lock()
        self._id_factory = id_factory
        self._clock = clock

    def create(self, fields: dict[str, Any]) -> Task:
        """Assign id and timestamps, store the task, and return it."""
        with self._lock:
            task_id = self._id_factory()
            while task_id in self._tasks:
                task_id = self._id_factory()
            now = self._clock()
            task = task_adapter.validate_python(
                {**fields, "id": task_id, "created_at": now, "updated_at": now}
            )
            self._tasks[task_id] = task
        logger.debug("storage event=create task_id=%s type=%s", task.id, task.type)
        return task

    def find_by_id(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def find_all(self) -> list[Task]:
        with self._lock:
            return list(self._tasks.values())

    def update(self, task_id: str, fields: dict[str, Any]) -> Task | None:
        """Merge fields into the stored task and refresh updated_at."""
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                return None
            protected = {"id", "created_at", "type"}
            changes = {key: value for key, value in fields.items() if key not in protected}
            # Rebuilt through the adapter so merged values are validated like on create.
            updated = task_adapter.validate_python(
                {**current.model_dump(), **changes, "updated_at": self._clock()}
            )
            self._tasks[task_id] = updated
        return updated

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def find_by_filter(self, task_filter: TaskFilter, sort: TaskSort | None = None) -> list[Task]:
        results = [task for task in self.find_all() if _matches(task, task_filter)]
        if sort is not None:
            results = sort_tasks(results, sort)
        return results

    def find_paginated(
        self,
        task_filter: TaskFilter,
        pagination: PaginationOptions,
        sort: TaskSort | None = None,
    ) -> PaginatedTasks:
        matches = self.find_by_filter(task_filter, sort)
        total = len(matches)
        total_pages = math.ceil(total / pagination.limit)
        start = (pagination.page - 1) * pagination.limit
        return PaginatedTasks(
            data=matches[start : start + pagination.limit],
            pagination=PaginationMeta(
                page=pagination.page,
                limit=pagination.limit,
                total=total,
                total_pages=total_pages,
                has_next=pagination.page < total_pages,
                has_prev=pagination.page > 1,
            ),
        )
