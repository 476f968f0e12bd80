"""Task service: input validation and lifecycle rules in front of storage.

Every mutating operation returns a ``Result``: ``Success`` with the stored
task, or ``Failure`` with a code and a client-facing message. Reads delegate
straight to storage.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, get_args

from pydantic import ValidationError

from .ids import is_valid_task_id
from .models import (
    PaginatedTasks,
    PaginationOptions,
    Recurrence,
    Task,
    TaskEvent,
    TaskEventType,
    TaskFilter,
    TaskPriority,
    TaskSort,
    TaskStatistics,
    TaskStatus,
    TaskType,
    as_utc,
)
from .result import ErrorCode, Failure, Result, Success
from .storage import TaskStorage

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000

TaskListener = Callable[[TaskEvent], None]

_NOT_FOUND = Failure(code="not_found", message="Task not found")


def _check_title(title: str | None, *, empty_message: str) -> Failure | None:
    if not title or not title.strip():
        return Failure(code="empty_title", message=empty_message)
    if len(title) > MAX_TITLE_LENGTH:
        return Failure(
            code="title_too_long",
            message=f"Title cannot exceed {MAX_TITLE_LENGTH} characters",
        )
    return None


def _check_description(description: str | None) -> Failure | None:
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        return Failure(
            code="description_too_long",
            message=f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
        )
    return None


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return description.strip() or None


def _check_choice(
    value: object, choices: Any, *, code: ErrorCode, label: str
) -> Failure | None:
    if value is not None and value not in get_args(choices):
        return Failure(code=code, message=f"Invalid {label}: {value}")
    return None


def _parse_recurrence(
    recurrence: Recurrence | dict[str, Any],
) -> Recurrence | Failure:
    try:
        return Recurrence.model_validate(recurrence)
    except ValidationError as exc:
        problem = exc.errors()[0]
        where = ".".join(str(part) for part in problem["loc"]) or "recurrence"
        return Failure(
            code="invalid_recurrence",
            message=f"Invalid recurrence configuration: {where}: {problem['msg']}",
        )


class TaskService:
    """Validating facade over a TaskStorage.

    A re-entrant lock serializes each check-then-act sequence (for example
    "no subtasks reference this id, so delete it") across worker threads.
    """

    def __init__(self, storage: TaskStorage) -> None:
        self.storage = storage
        self._lock = threading.RLock()
        self._listeners: list[TaskListener] = []

    def subscribe(self, listener: TaskListener) -> Callable[[], None]:
        """Register listener for lifecycle events; returns a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def create_task(
        self,
        title: str,
        *,
        description: str | None = None,
        priority: TaskPriority | None = None,
        task_type: TaskType | None = None,
        due_date: datetime | None = None,
        recurrence: Recurrence | dict[str, Any] | None = None,
        parent_task_id: str | None = None,
    ) -> Result[Task]:
        failure = (
            _check_title(title, empty_message="Title is required")
            or _check_description(description)
            or _check_choice(priority, TaskPriority, code="invalid_priority", label="priority")
            or _check_choice(task_type, TaskType, code="invalid_type", label="task type")
        )
        if failure is not None:
            return failure

        resolved_type: TaskType = task_type or "standard"
        with self._lock:
            if resolved_type == "subtask":
                if not is_valid_task_id(parent_task_id):
                    return Failure(
                        code="missing_parent",
                        message="Subtasks must have a parent task id",
                    )
                if self.storage.find_by_id(parent_task_id) is None:
                    return Failure(code="parent_not_found", message="Parent task not found")

            if resolved_type == "recurring" and recurrence is None:
                return Failure(
                    code="missing_recurrence",
                    message="Recurring tasks must have a recurrence configuration",
                )
            if resolved_type == "recurring":
                parsed = _parse_recurrence(recurrence)
                if isinstance(parsed, Failure):
                    return parsed
                recurrence = parsed

            fields: dict[str, Any] = {
                "title": title.strip(),
                "description": _clean_description(description),
                "priority": priority or "medium",
                "status": "pending",
                "type": resolved_type,
            }
            # Variant-specific fields are kept only on the variant they belong to.
            if resolved_type == "standard":
                fields["due_date"] = due_date
            elif resolved_type == "recurring":
                fields["recurrence"] = recurrence
            else:
                fields["parent_task_id"] = parent_task_id

            task = self.storage.create(fields)
            self._emit("task.created", task.id, {"type": task.type, "priority": task.priority})
        return Success(task)

    def get_task(self, task_id: str) -> Task | None:
        return self.storage.find_by_id(task_id)

    def update_task_status(self, task_id: str, status: TaskStatus) -> Result[Task]:
        failure = _check_choice(status, TaskStatus, code="invalid_status", label="status")
        if failure is not None:
            return failure
        with self._lock:
            task = self.storage.find_by_id(task_id)
            if task is None:
                return _NOT_FOUND
            if task.status == "completed" and status != "completed":
                return Failure(
                    code="terminal_completed",
                    message="Cannot change the status of a completed task",
                )
            if task.status == "cancelled" and status != "cancelled":
                return Failure(
                    code="terminal_cancelled",
                    message="Cannot change the status of a cancelled task",
                )

            updated = self.storage.update(task_id, {"status": status})
            if updated is None:
                return _NOT_FOUND
            if task.status != status:
                self._emit("task.status-changed", task_id, {"from": task.status, "to": status})
                if status == "completed":
                    self._emit("task.completed", task_id)
        return Success(updated)

    def complete_task(self, task_id: str) -> Result[Task]:
        return self.update_task_status(task_id, "completed")

    def cancel_task(self, task_id: str) -> Result[Task]:
        return self.update_task_status(task_id, "cancelled")

    def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        priority: TaskPriority | None = None,
        due_date: datetime | None = None,
    ) -> Result[Task]:
        """Update the supplied fields of a non-terminal task.

        ``None`` means "leave unchanged". ``due_date`` only applies to
        standard tasks and is ignored for the other variants.
        """
        with self._lock:
            task = self.storage.find_by_id(task_id)
            if task is None:
                return _NOT_FOUND
            if task.status == "completed":
                return Failure(code="terminal_completed", message="Cannot update a completed task")
            if task.status == "cancelled":
                return Failure(code="terminal_cancelled", message="Cannot update a cancelled task")

            if title is not None:
                failure = _check_title(title, empty_message="Title cannot be empty")
                if failure is not None:
                    return failure
            failure = _check_description(description) or _check_choice(
                priority, TaskPriority, code="invalid_priority", label="priority"
            )
            if failure is not None:
                return failure

            changes: dict[str, Any] = {}
            if title is not None:
                changes["title"] = title.strip()
            if description is not None:
                changes["description"] = _clean_description(description)
            if priority is not None:
                changes["priority"] = priority
            if due_date is not None and task.type == "standard":
                changes["due_date"] = as_utc(due_date)

            updated = self.storage.update(task_id, changes)
            if updated is None:
                return _NOT_FOUND
            self._emit("task.updated", task_id, {"fields": sorted(changes)})
        return Success(updated)

    def delete_task(self, task_id: str) -> Result[bool]:
        with self._lock:
            if self.storage.find_by_id(task_id) is None:
                return _NOT_FOUND
            subtasks = self.storage.find_by_filter(TaskFilter(type="subtask"))
            if any(getattr(sub, "parent_task_id", None) == task_id for sub in subtasks):
                return Failure(
                    code="has_subtasks",
                    message="Cannot delete a task that has subtasks",
                )
            if not self.storage.delete(task_id):
                return _NOT_FOUND
            self._emit("task.deleted", task_id)
        return Success(True)

    def find_tasks(
        self,
        task_filter: TaskFilter | None = None,
        sort: TaskSort | None = None,
    ) -> list[Task]:
        return self.storage.find_by_filter(task_filter or TaskFilter(), sort)

    def find_tasks_paginated(
        self,
        task_filter: TaskFilter | None = None,
        pagination: PaginationOptions | None = None,
        sort: TaskSort | None = None,
    ) -> PaginatedTasks:
        return self.storage.find_paginated(
            task_filter or TaskFilter(),
            pagination or PaginationOptions(),
            sort,
        )

    def get_statistics(self) -> TaskStatistics:
        """Count all tasks by status, priority, and type; every bucket starts at zero."""
        tasks = self.storage.find_all()
        by_status = dict.fromkeys(get_args(TaskStatus), 0)
        by_priority = dict.fromkeys(get_args(TaskPriority), 0)
        by_type = dict.fromkeys(get_args(TaskType), 0)
        for task in tasks:
            by_status[task.status] += 1
            by_priority[task.priority] += 1
            by_type[task.type] += 1
        return TaskStatistics(
            total=len(tasks),
            by_status=by_status,
            by_priority=by_priority,
            by_type=by_type,
        )

    def _emit(
        self,
        event_type: TaskEventType,
        task_id: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        event = TaskEvent(
            type=event_type,
            task_id=task_id,
            timestamp=datetime.now(tz=UTC),
            data=data or {},
        )
        logger.info("task_event event=%s task_id=%s data=%s", event.type, task_id, event.data)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "task_event listener failed event=%s task_id=%s", event.type, task_id
                )
