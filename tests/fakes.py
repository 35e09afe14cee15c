from __future__ import annotations

import dataclasses
import itertools
from datetime import date, datetime, timedelta
from typing import Any, Optional

from src.task_tracker.task_tracker.auth.tokens import Principal
from src.task_tracker.task_tracker.core.enums import Attendance, Role, TaskStatus
from src.task_tracker.task_tracker.core.exceptions import DuplicateRecordError, NotFoundError
from src.task_tracker.task_tracker.tasks.model import Task
from src.task_tracker.task_tracker.users.model import User


class TickingClock:
    """Deterministic clock: each call advances by ``step``."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self._step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self._step
        return current


class InMemoryUsers:
    def __init__(self, clock=None):
        self._by_id: dict[int, User] = {}
        self._ids = itertools.count(1)
        self._clock = clock or TickingClock(datetime(2026, 1, 1, 8, 0))
        self.saves = 0

    def find_by_email(self, email: str) -> Optional[User]:
        for u in self._by_id.values():
            if u.email == email:
                return u
        return None

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(int(user_id))

    def list(self, *, role=None, email=None, sort=None):
        items = [
            u
            for u in self._by_id.values()
            if (role is None or u.role == role) and (email is None or u.email == email)
        ]
        if sort == "name":
            return sorted(items, key=lambda u: u.name)
        if sort == "-name":
            return sorted(items, key=lambda u: u.name, reverse=True)
        return sorted(items, key=lambda u: (u.created_at, u.user_id), reverse=True)

    def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.DEVELOPER,
        attendance: Attendance = Attendance.ABSENT,
        last_attendance_update=None,
    ) -> User:
        return self.save(
            User(
                user_id=None,
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                attendance=attendance,
                last_attendance_update=last_attendance_update,
            )
        )

    def save(self, user: User) -> User:
        self.saves += 1
        now = self._clock()
        if user.user_id is None:
            if self.find_by_email(user.email):
                raise DuplicateRecordError("Record violates a unique constraint")
            user = dataclasses.replace(user, user_id=next(self._ids), created_at=now, updated_at=now)
        elif user.user_id not in self._by_id:
            raise NotFoundError("User not found")
        else:
            user = dataclasses.replace(user, updated_at=now)
        self._by_id[user.user_id] = user
        return user


class InMemoryTasks:
    def __init__(self, clock=None):
        self._by_id: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._clock = clock or TickingClock(datetime(2026, 1, 1, 9, 0))
        self.saves = 0

    def find_by_id(self, task_id: int) -> Optional[Task]:
        return self._by_id.get(int(task_id))

    def list(self, *, assignee_email=None, newest_first: bool = True):
        items = [t for t in self._by_id.values() if assignee_email is None or t.assignee_email == assignee_email]
        return sorted(items, key=lambda t: (t.created_at, t.task_id), reverse=newest_first)

    def create(
        self,
        *,
        title: str,
        details: str,
        owner_email,
        status: TaskStatus = TaskStatus.TODO,
        priority: str = "medium",
        assignee_email=None,
        due_date: Optional[date] = None,
    ) -> Task:
        return self.save(
            Task(
                task_id=None,
                title=title,
                details=details,
                status=status,
                priority=priority,
                assignee_email=assignee_email,
                owner_email=owner_email,
                due_date=due_date,
            )
        )

    def save(self, task: Task) -> Task:
        self.saves += 1
        now = self._clock()
        if task.task_id is None:
            task = dataclasses.replace(task, task_id=next(self._ids), created_at=now, updated_at=now)
        elif task.task_id not in self._by_id:
            raise NotFoundError("Task not found")
        else:
            task = dataclasses.replace(task, updated_at=now)
        self._by_id[task.task_id] = task
        return task

    def put(self, task: Task) -> Task:
        """Insert a task as-is (used to plant rows with a given created_at)."""
        if task.task_id is None:
            task = dataclasses.replace(task, task_id=next(self._ids))
        self._by_id[task.task_id] = task
        return task

    def delete_by_id(self, task_id: int) -> Optional[Task]:
        return self._by_id.pop(int(task_id), None)

    def delete_older_than(self, cutoff: datetime) -> int:
        stale = [tid for tid, t in self._by_id.items() if t.created_at < cutoff]
        for tid in stale:
            del self._by_id[tid]
        return len(stale)


class RecordingPublisher:
    def __init__(self):
        self.events: list[tuple[str, Any]] = []

    def publish(self, event: str, payload: Any) -> int:
        self.events.append((event, payload))
        return 0

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FailingPublisher:
    def publish(self, event: str, payload: Any) -> int:
        raise RuntimeError("channel down")


class FakeConnection:
    """Stands in for DatabaseConnection in the health check."""

    def __init__(self, now: Optional[datetime] = None, error: Optional[Exception] = None):
        self._now = now or datetime(2026, 1, 1, 12, 0)
        self._error = error

    def ping(self) -> datetime:
        if self._error is not None:
            raise self._error
        return self._now


ADMIN = Principal(email="admin@x.com", name="Admin", role=Role.ADMIN)
DEV = Principal(email="dev@x.com", name="Dev", role=Role.DEVELOPER)
OTHER_DEV = Principal(email="other@x.com", name="Other", role=Role.DEVELOPER)
