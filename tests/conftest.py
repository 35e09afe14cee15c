from __future__ import annotations

import os
from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

os.environ["APP_ENV"] = "testing"

from src.task_tracker.task_tracker.auth.tokens import TokenService  # noqa: E402
from src.task_tracker.task_tracker.container import wire_container  # noqa: E402
from src.task_tracker.task_tracker.main import create_app  # noqa: E402
from src.task_tracker.task_tracker.notifications.broadcaster import Broadcaster  # noqa: E402
from src.task_tracker.task_tracker.tasks.service import TaskService  # noqa: E402

from tests.fakes import (  # noqa: E402
    ADMIN,
    DEV,
    OTHER_DEV,
    FakeConnection,
    InMemoryTasks,
    InMemoryUsers,
    RecordingPublisher,
)

TEST_SECRET = "test-secret-key-for-signing-tokens-0123456789"
PASSWORD = "secret1"


@pytest.fixture()
def now() -> datetime:
    return datetime(2026, 3, 10, 9, 30)


@pytest.fixture()
def users() -> InMemoryUsers:
    repo = InMemoryUsers()
    for p in (ADMIN, DEV, OTHER_DEV):
        repo.create(name=p.name, email=p.email, password_hash=generate_password_hash(PASSWORD), role=p.role)
    return repo


@pytest.fixture()
def tasks() -> InMemoryTasks:
    return InMemoryTasks()


@pytest.fixture()
def events() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def task_service(tasks, users, events, now) -> TaskService:
    return TaskService(tasks, users, events, clock=lambda: now)


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(TEST_SECRET, ttl_minutes=60)


@pytest.fixture()
def broadcaster() -> Broadcaster:
    return Broadcaster(queue_size=10)


@pytest.fixture()
def container(users, tasks, tokens, broadcaster, now):
    return wire_container(
        conn=FakeConnection(),
        users_repo=users,
        tasks_repo=tasks,
        tokens=tokens,
        broadcaster=broadcaster,
        retention_days=7,
        cleanup_interval_seconds=60,
        clock=lambda: now,
    )


@pytest.fixture()
def app(container):
    app = create_app(container)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers(tokens):
    def make(principal) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(principal)}"}

    return make
