from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from task_manager_api.app.service import TaskService
from task_manager_api.app.storage import InMemoryTaskStorage
from task_manager_api.config.settings import Settings
from task_manager_api.main import create_app


class FakeClock:
    """Test-only clock: every call returns a time one step after the previous one."""

    def __init__(self, start: datetime | None = None, step: timedelta | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 9, 0, tzinfo=UTC)
        self.step = step or timedelta(seconds=1)

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(clock: FakeClock) -> InMemoryTaskStorage:
    return InMemoryTaskStorage(clock=clock)


@pytest.fixture
def service(storage: InMemoryTaskStorage) -> TaskService:
    return TaskService(storage)


@pytest.fixture
def settings() -> Settings:
    return Settings(seed_examples=False)


@pytest.fixture
def client(storage: InMemoryTaskStorage, settings: Settings) -> Iterator[TestClient]:
    app = create_app(storage=storage, settings_override=settings)
    with TestClient(app) as test_client:
        yield test_client
