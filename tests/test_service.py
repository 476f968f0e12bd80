from __future__ import annotations

import threading
from datetime import UTC, datetime

import pytest

from task_manager_api.app.models import (
    PaginationOptions,
    RecurringTask,
    StandardTask,
    SubtaskTask,
    Task,
    TaskEvent,
    TaskFilter,
    TaskSort,
)
from task_manager_api.app.result import Failure, Result, Success
from task_manager_api.app.service import TaskService


def _created(result: Result[Task]) -> Task:
    assert isinstance(result, Success), result
    return result.value


def _failure(result: Result[object]) -> Failure:
    assert isinstance(result, Failure), result
    return result


def test_create_standard_task_with_defaults(service: TaskService) -> None:
    task = _created(service.create_task("  New task  ", description="  Details  "))

    assert isinstance(task, StandardTask)
    assert task.id
    assert task.title == "New task"
    assert task.description == "Details"
    assert task.priority == "medium"
    assert task.status == "pending"
    assert task.type == "standard"


def test_created_ids_are_unique(service: TaskService) -> None:
    ids = {_created(service.create_task(f"task {index}")).id for index in range(50)}
    assert len(ids) == 50


def test_create_task_round_trips_through_storage(service: TaskService) -> None:
    task = _created(
        service.create_task(
            "Ship release",
            priority="urgent",
            due_date=datetime(2026, 5, 1, 12, 0),
        )
    )

    assert service.get_task(task.id) == task
    assert isinstance(task, StandardTask)
    assert task.due_date == datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize("title", ["", "   ", "\n\t"])
def test_create_rejects_empty_title(service: TaskService, title: str) -> None:
    failure = _failure(service.create_task(title))
    assert failure.code == "empty_title"
    assert failure.message == "Title is required"


def test_create_rejects_long_title(service: TaskService) -> None:
    assert _created(service.create_task("a" * 200)).title == "a" * 200

    failure = _failure(service.create_task("a" * 201))
    assert failure.code == "title_too_long"
    assert failure.message == "Title cannot exceed 200 characters"


def test_create_rejects_long_description(service: TaskService) -> None:
    failure = _failure(service.create_task("Title", description="d" * 1001))
    assert failure.code == "description_too_long"


def test_create_blank_description_is_stored_as_none(service: TaskService) -> None:
    assert _created(service.create_task("Title", description="   ")).description is None


def test_create_subtask_requires_parent(service: TaskService) -> None:
    missing = _failure(service.create_task("Child", task_type="subtask"))
    assert missing.code == "missing_parent"

    unknown = _failure(service.create_task("Child", task_type="subtask", parent_task_id="nope"))
    assert unknown.code == "parent_not_found"

    parent = _created(service.create_task("Parent"))
    child = _created(service.create_task("Child", task_type="subtask", parent_task_id=parent.id))
    assert isinstance(child, SubtaskTask)
    assert child.parent_task_id == parent.id


def test_create_recurring_requires_recurrence(service: TaskService) -> None:
    failure = _failure(service.create_task("Stand-up", task_type="recurring"))
    assert failure.code == "missing_recurrence"

    task = _created(
        service.create_task(
            "Stand-up",
            task_type="recurring",
            recurrence={"pattern": "daily", "interval": 1},
        )
    )
    assert isinstance(task, RecurringTask)
    assert task.recurrence.pattern == "daily"
    assert task.recurrence.interval == 1


def test_create_drops_fields_of_other_variants(service: TaskService) -> None:
    parent = _created(service.create_task("Parent"))
    task = _created(
        service.create_task(
            "Plain",
            task_type="standard",
            parent_task_id=parent.id,
            recurrence={"pattern": "weekly", "interval": 2},
        )
    )
    assert isinstance(task, StandardTask)
    assert "parent_task_id" not in task.model_dump()


def test_update_status(service: TaskService) -> None:
    task = _created(service.create_task("Work"))

    updated = _created(service.update_task_status(task.id, "in-progress"))

    assert updated.status == "in-progress"
    assert updated.updated_at > task.updated_at


def test_update_status_unknown_task(service: TaskService) -> None:
    failure = _failure(service.update_task_status("missing", "completed"))
    assert failure.code == "not_found"
    assert failure.message == "Task not found"


def test_completed_task_is_terminal(service: TaskService) -> None:
    task = _created(service.create_task("Finish"))
    _created(service.complete_task(task.id))

    status_failure = _failure(service.update_task_status(task.id, "in-progress"))
    assert status_failure.code == "terminal_completed"

    update_failure = _failure(service.update_task(task.id, title="Renamed"))
    assert update_failure.code == "terminal_completed"

    # Re-applying the same terminal status is allowed.
    assert _created(service.complete_task(task.id)).status == "completed"


def test_cancelled_task_is_terminal(service: TaskService) -> None:
    task = _created(service.create_task("Drop"))
    _created(service.cancel_task(task.id))

    assert _failure(service.complete_task(task.id)).code == "terminal_cancelled"
    assert _failure(service.update_task(task.id, priority="high")).code == "terminal_cancelled"
    assert _created(service.cancel_task(task.id)).status == "cancelled"


def test_update_task_changes_only_supplied_fields(service: TaskService) -> None:
    task = _created(service.create_task("Draft", description="keep me", priority="low"))

    updated = _created(service.update_task(task.id, title="  Final  ", priority="high"))

    assert updated.title == "Final"
    assert updated.priority == "high"
    assert updated.description == "keep me"


def test_update_task_validates_title_and_description(service: TaskService) -> None:
    task = _created(service.create_task("Draft"))

    empty = _failure(service.update_task(task.id, title="   "))
    assert empty.code == "empty_title"
    assert empty.message == "Title cannot be empty"
    assert _failure(service.update_task(task.id, title="x" * 201)).code == "title_too_long"
    assert (
        _failure(service.update_task(task.id, description="x" * 1001)).code
        == "description_too_long"
    )
    assert service.get_task(task.id) == task


def test_update_task_due_date_only_applies_to_standard_tasks(service: TaskService) -> None:
    standard = _created(service.create_task("Standard"))
    recurring = _created(
        service.create_task(
            "Recurring",
            task_type="recurring",
            recurrence={"pattern": "monthly", "interval": 1},
        )
    )
    due = datetime(2026, 7, 1)

    updated_standard = _created(service.update_task(standard.id, due_date=due))
    updated_recurring = _created(service.update_task(recurring.id, due_date=due))

    assert isinstance(updated_standard, StandardTask)
    assert updated_standard.due_date == datetime(2026, 7, 1, tzinfo=UTC)
    assert "due_date" not in updated_recurring.model_dump()


def test_update_task_unknown_id(service: TaskService) -> None:
    assert _failure(service.update_task("missing", title="x")).code == "not_found"


def test_delete_task_with_subtasks_is_rejected(service: TaskService) -> None:
    parent = _created(service.create_task("Parent"))
    child = _created(service.create_task("Child", task_type="subtask", parent_task_id=parent.id))

    failure = _failure(service.delete_task(parent.id))
    assert failure.code == "has_subtasks"

    assert service.delete_task(child.id) == Success(True)
    assert service.delete_task(parent.id) == Success(True)
    assert service.get_task(parent.id) is None


def test_delete_unknown_task(service: TaskService) -> None:
    assert _failure(service.delete_task("missing")).code == "not_found"


def test_find_tasks_by_priority(service: TaskService) -> None:
    for title, priority in [("a", "high"), ("b", "low"), ("c", "high"), ("d", "medium")]:
        _created(service.create_task(title, priority=priority))

    high = service.find_tasks(TaskFilter(priority="high"))
    high_or_low = service.find_tasks(TaskFilter(priority=["high", "low"]))

    assert [task.title for task in high] == ["a", "c"]
    assert [task.title for task in high_or_low] == ["a", "b", "c"]
    assert len(service.find_tasks()) == 4


def test_find_tasks_paginated(service: TaskService) -> None:
    for index in range(15):
        _created(service.create_task(f"task {index}"))

    first = service.find_tasks_paginated(TaskFilter(), PaginationOptions(page=1, limit=5))
    third = service.find_tasks_paginated(
        TaskFilter(),
        PaginationOptions(page=3, limit=5),
        TaskSort(field="createdAt", order="asc"),
    )

    assert first.pagination.total == 15
    assert first.pagination.total_pages == 3
    assert first.pagination.has_next is True
    assert first.pagination.has_prev is False
    assert third.pagination.has_next is False
    assert [task.title for task in third.data] == [f"task {index}" for index in range(10, 15)]


def test_statistics(service: TaskService) -> None:
    _created(service.create_task("one", priority="high"))
    _created(service.create_task("two", priority="medium"))
    done = _created(service.create_task("three", priority="low"))
    _created(service.complete_task(done.id))

    stats = service.get_statistics()

    assert stats.total == 3
    assert stats.by_status == {"pending": 2, "in-progress": 0, "completed": 1, "cancelled": 0}
    assert stats.by_priority == {"low": 1, "medium": 1, "high": 1, "urgent": 0}
    assert stats.by_type == {"standard": 3, "recurring": 0, "subtask": 0}


def test_statistics_on_empty_store_has_zeroed_buckets(service: TaskService) -> None:
    stats = service.get_statistics()
    assert stats.total == 0
    assert set(stats.by_status.values()) == {0}
    assert len(stats.by_status) == 4
    assert len(stats.by_priority) == 4
    assert len(stats.by_type) == 3


def test_lifecycle_events_reach_subscribers(service: TaskService) -> None:
    events: list[TaskEvent] = []
    unsubscribe = service.subscribe(events.append)

    task = _created(service.create_task("Observed"))
    _created(service.update_task(task.id, description="more"))
    _created(service.complete_task(task.id))
    service.delete_task(task.id)
    unsubscribe()
    _created(service.create_task("Unobserved"))

    assert [event.type for event in events] == [
        "task.created",
        "task.updated",
        "task.status-changed",
        "task.completed",
        "task.deleted",
    ]
    assert all(event.task_id == task.id for event in events)
    assert events[2].data == {"from": "pending", "to": "completed"}


def test_failing_listener_does_not_break_the_operation(service: TaskService) -> None:
    def broken(_: TaskEvent) -> None:
        raise RuntimeError("listener boom")

    service.subscribe(broken)

    assert isinstance(service.create_task("Still created"), Success)


def test_rejected_operations_emit_no_events(service: TaskService) -> None:
    events: list[TaskEvent] = []
    service.subscribe(events.append)

    service.create_task("")
    service.delete_task("missing")

    assert events == []


def test_result_ok_flags() -> None:
    assert Success(1).ok is True
    assert Failure(code="not_found", message="Task not found").ok is False


def test_create_rejects_invalid_recurrence(service: TaskService) -> None:
    failure = _failure(
        service.create_task(
            "Stand-up",
            task_type="recurring",
            recurrence={"pattern": "daily", "interval": 0},
        )
    )

    assert failure.code == "invalid_recurrence"
    assert "interval" in failure.message
    assert service.find_tasks() == []


def test_create_rejects_unknown_recurrence_pattern(service: TaskService) -> None:
    failure = _failure(
        service.create_task(
            "Stand-up",
            task_type="recurring",
            recurrence={"pattern": "hourly", "interval": 1},
        )
    )
    assert failure.code == "invalid_recurrence"


def test_create_rejects_unknown_priority_and_type(service: TaskService) -> None:
    priority = _failure(service.create_task("Title", priority="critical"))  # type: ignore[arg-type]
    task_type = _failure(service.create_task("Title", task_type="epic"))  # type: ignore[arg-type]

    assert priority.code == "invalid_priority"
    assert task_type.code == "invalid_type"
    assert service.find_tasks() == []


def test_update_status_rejects_unknown_status(service: TaskService) -> None:
    task = _created(service.create_task("Work"))

    failure = _failure(service.update_task_status(task.id, "done"))  # type: ignore[arg-type]

    assert failure.code == "invalid_status"
    assert service.get_task(task.id) == task
    assert service.get_statistics().by_status["pending"] == 1


def test_update_task_rejects_unknown_priority(service: TaskService) -> None:
    task = _created(service.create_task("Work"))

    failure = _failure(service.update_task(task.id, priority="critical"))  # type: ignore[arg-type]

    assert failure.code == "invalid_priority"
    assert service.get_task(task.id) == task


def test_subscribe_and_unsubscribe_from_many_threads(service: TaskService) -> None:
    received: list[TaskEvent] = []

    def churn() -> None:
        for _ in range(50):
            unsubscribe = service.subscribe(received.append)
            unsubscribe()

    threads = [threading.Thread(target=churn) for _ in range(8)]
    for thread in threads:
        thread.start()
    for index in range(20):
        _created(service.create_task(f"task {index}"))
    for thread in threads:
        thread.join()

    keep: list[TaskEvent] = []
    service.subscribe(keep.append)
    _created(service.create_task("after"))

    assert [event.type for event in keep] == ["task.created"]
