from __future__ import annotations

import threading
from datetime import datetime
from types import SimpleNamespace

from src.task_tracker.task_tracker.container import build_container, wire_container
from src.task_tracker.task_tracker.tasks.cleanup import CleanupScheduler, TaskCleanupService, retention_cutoff
from src.task_tracker.task_tracker.tasks.model import Task
from src.task_tracker.task_tracker.notifications.broadcaster import TASKS_CLEANED

from tests.fakes import FakeConnection


def _plant(tasks, title, created_at):
    return tasks.put(Task(task_id=None, title=title, details="d", created_at=created_at, updated_at=created_at))


def test_retention_cutoff_truncates_to_midnight():
    assert retention_cutoff(datetime(2026, 3, 10, 15, 45, 12), 7) == datetime(2026, 3, 3, 0, 0)


def test_cleanup_deletes_strictly_older_than_cutoff(tasks, events):
    now = datetime(2026, 3, 10, 15, 0)
    _plant(tasks, "old", datetime(2026, 3, 2, 23, 59))
    boundary = _plant(tasks, "boundary", datetime(2026, 3, 3, 0, 0))
    fresh = _plant(tasks, "fresh", datetime(2026, 3, 9, 10, 0))

    service = TaskCleanupService(tasks, events, retention_days=7)

    assert service.run(now) == 1
    assert {t.task_id for t in tasks.list()} == {boundary.task_id, fresh.task_id}
    assert events.events == [(TASKS_CLEANED, {"deletedCount": 1})]


def test_second_run_is_a_noop_and_publishes_nothing(tasks, events):
    now = datetime(2026, 3, 10, 15, 0)
    _plant(tasks, "old", datetime(2026, 1, 1))
    service = TaskCleanupService(tasks, events, retention_days=7, clock=lambda: now)

    assert service.run() == 1
    assert service.run() == 0
    assert events.names() == [TASKS_CLEANED]


class _ExplodingService:
    def __init__(self):
        self.calls = 0
        self.second_call = threading.Event()

    def run(self):
        self.calls += 1
        if self.calls >= 2:
            self.second_call.set()
        raise RuntimeError("database went away")


def test_run_once_contains_errors():
    scheduler = CleanupScheduler(_ExplodingService(), interval_seconds=60)
    assert scheduler.run_once() is None


def test_scheduler_keeps_running_after_a_failed_run():
    service = _ExplodingService()
    scheduler = CleanupScheduler(service, interval_seconds=0.01)

    scheduler.start()
    try:
        assert service.second_call.wait(2.0)
        assert scheduler.running
    finally:
        scheduler.stop(timeout=2.0)

    assert not scheduler.running


def test_sweep_uses_the_store_clock_not_the_app_clock(users, tasks, tokens):
    store = FakeConnection(now=datetime(2026, 3, 10, 1, 0))
    container = wire_container(
        conn=store,
        users_repo=users,
        tasks_repo=tasks,
        tokens=tokens,
        retention_days=7,
        # app clock already on the next day
        clock=lambda: datetime(2026, 3, 11, 9, 0),
        store_clock=store.ping,
    )
    _plant(tasks, "edge", datetime(2026, 3, 3, 12, 0))

    assert container.cleanup_service.run() == 0
    assert [t.title for t in tasks.list()] == ["edge"]


def test_production_wiring_sweeps_on_database_time():
    settings = SimpleNamespace(
        DB_CONFIG={"host": "db", "user": "u", "password": "p", "database": "taskmanager"},
        SECRET_KEY="test-secret-key-for-signing-tokens-0123456789",
    )

    container = build_container(settings)

    assert container.cleanup_service._clock == container.conn.ping
