from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from task_manager.main import create_app
from task_manager.models import TaskFilter
from task_manager.settings import Settings
from task_manager.store import TaskStore

from fakes import FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock)


@pytest.fixture()
def settings() -> Settings:
    # Built directly so tests do not depend on the caller's environment.
    return Settings(cors_allow_origins=["*"], log_level=logging.INFO, default_filter=TaskFilter.ALL)


@pytest.fixture()
def client(store: TaskStore, settings: Settings) -> TestClient:
    """Fresh app per test, serving the `store` fixture."""
    return TestClient(create_app(store=store, settings=settings))
