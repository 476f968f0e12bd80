"""FastAPI application wiring for the task manager.

Beginner terms used in this file:
- Envelope: every JSON response is ``{"success": bool, "data"?: ..., "error"?: str}``.
- Dependency: a function FastAPI calls to turn query parameters into a typed object.
- app.state: where the shared TaskService lives so every route reuses it.

Status codes: business-rule failures and malformed input are 400, a missing
task on GET is 404, anything unexpected is 500.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .app.models import (
    CreateTaskRequest,
    DueDateRange,
    PaginationOptions,
    SortOrder,
    TaskFilter,
    TaskPriority,
    TaskSort,
    TaskStatus,
    TaskType,
    UpdateTaskRequest,
)
from .app.result import Failure, Result
from .app.service import TaskService
from .app.storage import InMemoryTaskStorage, TaskStorage
from .app.ui import render_homepage
from .config.logging import configure_logging
from .config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    *,
    storage: TaskStorage | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    """Application factory.

    Tests pass their own storage and settings so each one gets a fresh app.
    """
    settings = settings_override or get_settings()
    service = TaskService(storage or InMemoryTaskStorage())
    if settings.seed_examples:
        _seed_examples(service)

    app = FastAPI(title=settings.app_name, version=__version__, debug=settings.app_debug)
    app.state.settings = settings
    app.state.service = service

    @app.exception_handler(RequestValidationError)
    async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(_describe_validation_error(exc), status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "api event=unhandled_error method=%s path=%s", request.method, request.url.path
        )
        return _error("Internal server error", status_code=500)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/api/tasks")
    def list_tasks(
        request: Request,
        task_filter: Annotated[TaskFilter, Depends(_task_filter)],
        sort: Annotated[TaskSort | None, Depends(_task_sort)],
    ) -> JSONResponse:
        return _ok(_service(request).find_tasks(task_filter, sort))

    @app.get("/api/tasks/paginated")
    def list_tasks_paginated(
        request: Request,
        task_filter: Annotated[TaskFilter, Depends(_task_filter)],
        pagination: Annotated[PaginationOptions, Depends(_pagination)],
        sort: Annotated[TaskSort | None, Depends(_task_sort)],
    ) -> JSONResponse:
        return _ok(_service(request).find_tasks_paginated(task_filter, pagination, sort))

    @app.post("/api/tasks")
    def create_task(payload: CreateTaskRequest, request: Request) -> JSONResponse:
        result = _service(request).create_task(
            payload.title,
            description=payload.description,
            priority=payload.priority,
            task_type=payload.type,
            due_date=payload.due_date,
            recurrence=payload.recurrence,
            parent_task_id=payload.parent_task_id,
        )
        return _from_result(result)

    @app.get("/api/tasks/{task_id}")
    def get_task(task_id: str, request: Request) -> JSONResponse:
        task = _service(request).get_task(task_id)
        if task is None:
            return _error("Task not found", status_code=404)
        return _ok(task)

    @app.patch("/api/tasks/{task_id}")
    def update_task(task_id: str, payload: UpdateTaskRequest, request: Request) -> JSONResponse:
        service = _service(request)
        # A status in the body means a status transition; other fields are ignored then.
        if payload.status is not None:
            return _from_result(service.update_task_status(task_id, payload.status))
        result = service.update_task(
            task_id,
            title=payload.title,
            description=payload.description,
            priority=payload.priority,
            due_date=payload.due_date,
        )
        return _from_result(result)

    @app.delete("/api/tasks/{task_id}")
    def delete_task(task_id: str, request: Request) -> JSONResponse:
        return _from_result(_service(request).delete_task(task_id))

    @app.get("/api/statistics")
    def statistics(request: Request) -> JSONResponse:
        return _ok(_service(request).get_statistics())

    @app.get("/", response_class=HTMLResponse)
    def home() -> str:
        return render_homepage(app_name=settings.app_name)

    # Must stay last: every other GET path serves the UI, except unknown API paths.
    @app.get("/{full_path:path}", response_class=HTMLResponse, response_model=None)
    def spa_fallback(full_path: str) -> str | JSONResponse:
        if full_path == "api" or full_path.startswith("api/"):
            return _error("Not found", status_code=404)
        return render_homepage(app_name=settings.app_name)

    return app


def _service(request: Request) -> TaskService:
    return request.app.state.service


def _task_filter(
    status: Annotated[list[TaskStatus] | None, Query()] = None,
    priority: Annotated[list[TaskPriority] | None, Query()] = None,
    task_type: Annotated[list[TaskType] | None, Query(alias="type")] = None,
    search: Annotated[str | None, Query()] = None,
    due_from: Annotated[datetime | None, Query(alias="dueFrom")] = None,
    due_to: Annotated[datetime | None, Query(alias="dueTo")] = None,
) -> TaskFilter:
    """Build a TaskFilter from query parameters; repeated parameters form a list."""
    due_date_range = None
    if due_from is not None or due_to is not None:
        due_date_range = DueDateRange(start=due_from, end=due_to)
    return TaskFilter(
        status=status,
        priority=priority,
        type=task_type,
        search=search or None,
        due_date_range=due_date_range,
    )


def _task_sort(
    sort_field: Annotated[str | None, Query(alias="sortField")] = None,
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = "desc",
) -> TaskSort | None:
    if not sort_field:
        return None
    return TaskSort(field=sort_field, order=sort_order)


def _pagination(
    request: Request,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> PaginationOptions:
    if limit is None:
        limit = request.app.state.settings.default_page_size
    return PaginationOptions(page=page, limit=limit)


def _ok(data: Any) -> JSONResponse:
    return JSONResponse(
        content={"success": True, "data": jsonable_encoder(data, by_alias=True, exclude_none=True)}
    )


def _error(message: str, *, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _from_result(result: Result[Any]) -> JSONResponse:
    """Map a service Result to the envelope: Success -> 200, Failure -> 400."""
    if isinstance(result, Failure):
        logger.info("api event=rejected code=%s message=%s", result.code, result.message)
        return _error(result.message, status_code=400)
    return _ok(result.value)


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one line such as ``body.priority: Input should be ...``."""
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def _seed_examples(service: TaskService) -> None:
    """Create the welcome tasks shown on a fresh start."""
    service.create_task(
        "Welcome to the task manager",
        description="This task was created automatically as an example",
        priority="high",
    )
    service.create_task(
        "Explore the features",
        description="Try creating, editing, and deleting tasks",
        priority="medium",
    )
    logger.info("seed event=completed tasks=2")


def serve() -> None:
    """Console entry point: run the API with uvicorn using Settings."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "serve event=start host=%s port=%s env=%s", settings.host, settings.port, settings.app_env
    )
    uvicorn.run(
        "task_manager_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# Module-level app for `uvicorn task_manager_api.main:app`.
app = create_app()
