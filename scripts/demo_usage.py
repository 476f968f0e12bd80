from __future__ import annotations

import argparse
import json

from task_manager_api.app.models import PaginationOptions, TaskFilter, TaskSort
from task_manager_api.app.result import Failure
from task_manager_api.app.service import TaskService
from task_manager_api.app.storage import InMemoryTaskStorage
from task_manager_api.config.logging import configure_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Walk through the in-process task service: create, update, query."
    )
    parser.add_argument("--page-size", type=int, default=2, help="Page size for the paged query.")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON output instead of human-readable output.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log task lifecycle events.")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    configure_logging("INFO" if args.verbose else "WARNING")
    service = TaskService(InMemoryTaskStorage())

    results = [
        service.create_task(
            "Implement authentication",
            description="Add JWT based sign-in",
            priority="high",
        ),
        service.create_task(
            "Review code",
            description="Go through the open pull requests",
            task_type="standard",
        ),
        service.create_task(
            "Daily stand-up",
            description="Team sync meeting",
            priority="low",
            task_type="recurring",
            recurrence={"pattern": "daily", "interval": 1},
        ),
    ]
    for result in results:
        if isinstance(result, Failure):
            print(f"error: {result.message}")
        else:
            print(f"created: {result.value.title}")

    review = results[1]
    if not isinstance(review, Failure):
        status = service.update_task_status(review.value.id, "in-progress")
        if not isinstance(status, Failure):
            print(f"  status -> {status.value.status}")
        subtask = service.create_task(
            "Review PR #123",
            task_type="subtask",
            parent_task_id=review.value.id,
        )
        if not isinstance(subtask, Failure):
            print(f"  subtask created: {subtask.value.title}")

    stats = service.get_statistics()
    high_priority = service.find_tasks(TaskFilter(priority="high"))
    page = service.find_tasks_paginated(
        TaskFilter(),
        PaginationOptions(page=1, limit=args.page_size),
        TaskSort(field="createdAt", order="desc"),
    )

    if args.json:
        print(
            json.dumps(
                {
                    "statistics": stats.model_dump(mode="json", by_alias=True),
                    "high_priority": [task.title for task in high_priority],
                    "page": page.model_dump(mode="json", by_alias=True, exclude_none=True),
                },
                indent=2,
            )
        )
        return

    print(f"\ntotal tasks: {stats.total}")
    print(f"by status: {stats.by_status}")
    print(f"by priority: {stats.by_priority}")
    print(f"by type: {stats.by_type}")
    print(f"\nhigh priority tasks: {len(high_priority)}")
    for task in high_priority:
        print(f"  - {task.title} ({task.status})")
    meta = page.pagination
    print(f"\npage {meta.page} of {meta.total_pages} (total {meta.total})")
    for task in page.data:
        print(f"  - {task.title}")


if __name__ == "__main__":
    main()
