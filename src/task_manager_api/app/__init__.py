"""Core task tracking: models, storage, and the validating service layer."""

from task_manager_api.app.result import Failure, Result, Success
from task_manager_api.app.service import TaskService
from task_manager_api.app.storage import InMemoryTaskStorage, TaskStorage

__all__ = [
    "Failure",
    "InMemoryTaskStorage",
    "Result",
    "Success",
    "TaskService",
    "TaskStorage",
]
