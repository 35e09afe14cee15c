from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_PRIORITY
from ..core.enums import TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def find_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list(self, *, assignee_email: Optional[str] = None, newest_first: bool = True) -> Sequence[Task]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        details: str,
        owner_email: Optional[str],
        status: TaskStatus = TaskStatus.TODO,
        priority: str = DEFAULT_PRIORITY,
        assignee_email: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> Task:
        raise NotImplementedError

    def save(self, task: Task) -> Task:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> Optional[Task]:
        """Delete and return the removed task, or None if it did not exist."""
        raise NotImplementedError

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete tasks created strictly before ``cutoff``; return the count."""
        raise NotImplementedError
