"""Pydantic models shared across API, service, and storage.

Beginner terms used in this file:
- Discriminated union: ``Task`` is one of three models, chosen by the ``type`` field.
- Alias: the camelCase name used on the wire (``createdAt``) for a snake_case attribute.
- Frozen model: instances cannot be changed in place; updates build a copy.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskType = Literal["standard", "recurring", "subtask"]
RecurrencePattern = Literal["daily", "weekly", "monthly"]
SortField = Literal["createdAt", "updatedAt", "priority", "title"]
SortOrder = Literal["asc", "desc"]
TaskEventType = Literal[
    "task.created",
    "task.updated",
    "task.deleted",
    "task.completed",
    "task.status-changed",
]

# Higher rank sorts later in ascending order.
PRIORITY_RANK: dict[str, int] = {"urgent": 4, "high": 3, "medium": 2, "low": 1}


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so every comparison is between aware values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base for models exchanged with API clients (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Recurrence(CamelModel):
    model_config = ConfigDict(frozen=True)

    pattern: RecurrencePattern
    interval: int = Field(ge=1)
    end_date: UtcDatetime | None = None


class TaskBase(CamelModel):
    """Fields common to every task variant."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str | None = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    created_at: UtcDatetime
    updated_at: UtcDatetime


class StandardTask(TaskBase):
    type: Literal["standard"] = "standard"
    due_date: UtcDatetime | None = None


class RecurringTask(TaskBase):
    type: Literal["recurring"] = "recurring"
    recurrence: Recurrence


class SubtaskTask(TaskBase):
    type: Literal["subtask"] = "subtask"
    parent_task_id: str


Task = Annotated[StandardTask | RecurringTask | SubtaskTask, Field(discriminator="type")]
task_adapter: TypeAdapter[Task] = TypeAdapter(Task)


class DueDateRange(CamelModel):
    """Inclusive due-date bounds; an omitted side is unbounded."""

    start: UtcDatetime | None = None
    end: UtcDatetime | None = None


class TaskFilter(CamelModel):
    """Query criteria. Every supplied field must match (logical AND).

    ``status``, ``priority`` and ``type`` take one value or a list of values.
    ``None`` means "not filtered"; an empty list matches nothing.
    """

    status: TaskStatus | list[TaskStatus] | None = None
    priority: TaskPriority | list[TaskPriority] | None = None
    type: TaskType | list[TaskType] | None = None
    search: str | None = None
    due_date_range: DueDateRange | None = None


class TaskSort(CamelModel):
    # Not restricted to SortField: unknown fields leave the order untouched.
    field: str
    order: SortOrder = "asc"


class PaginationOptions(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedTasks(CamelModel):
    data: list[Task]
    pagination: PaginationMeta


class TaskStatistics(CamelModel):
    total: int
    by_status: dict[TaskStatus, int]
    by_priority: dict[TaskPriority, int]
    by_type: dict[TaskType, int]


class TaskEvent(CamelModel):
    """Lifecycle notification emitted by the service after a successful mutation."""

    model_config = ConfigDict(frozen=True)

    type: TaskEventType
    task_id: str
    timestamp: UtcDatetime
    data: dict[str, Any] = Field(default_factory=dict)


class CreateTaskRequest(CamelModel):
    """Request body for POST /api/tasks.

    Title rules are enforced by the service so clients get its error messages.
    """

    title: str = ""
    description: str | None = None
    priority: TaskPriority | None = None
    type: TaskType | None = None
    due_date: UtcDatetime | None = None
    recurrence: Recurrence | None = None
    parent_task_id: str | None = None


class UpdateTaskRequest(CamelModel):
    """Request body for PATCH /api/tasks/{id}; ``status`` selects a status transition."""

    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    due_date: UtcDatetime | None = None
    status: TaskStatus | None = None
