from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_PRIORITY
from ..core.enums import TaskStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import RecordStore, TableSpec, as_date
from .model import Task
from .repository import TaskRepository

TASKS_TABLE = TableSpec(
    name="tasks",
    columns=(
        "id",
        "title",
        "details",
        "status",
        "priority",
        "assignee_email",
        "owner_email",
        "due_date",
        "created_at",
        "updated_at",
    ),
    writable=("title", "details", "status", "priority", "assignee_email", "owner_email", "due_date"),
)


def _row_to_task(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(row["id"]),
        title=row["title"],
        details=row["details"],
        status=TaskStatus(row["status"]),
        priority=row.get("priority") or DEFAULT_PRIORITY,
        assignee_email=row.get("assignee_email"),
        owner_email=row.get("owner_email"),
        due_date=as_date(row.get("due_date")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _task_to_values(task: Task) -> Dict[str, Any]:
    return {
        "title": task.title,
        "details": task.details,
        "status": task.status.value,
        "priority": task.priority or DEFAULT_PRIORITY,
        "assignee_email": task.assignee_email or None,
        "owner_email": task.owner_email or None,
        "due_date": task.due_date,
    }


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._store = RecordStore(conn_factory, TASKS_TABLE)

    def find_by_id(self, task_id: int) -> Optional[Task]:
        row = self._store.find_by_id(int(task_id))
        return _row_to_task(row) if row else None

    def list(self, *, assignee_email: Optional[str] = None, newest_first: bool = True) -> Sequence[Task]:
        order = (("created_at", newest_first), ("id", newest_first))
        rows = self._store.find({"assignee_email": assignee_email}, order_by=order)
        return [_row_to_task(r) for r in rows]

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
        row = self._store.save(_task_to_values(task), record_id=task.task_id)
        if row is None:
            raise NotFoundError("Task not found")
        return _row_to_task(row)

    def delete_by_id(self, task_id: int) -> Optional[Task]:
        row = self._store.delete_by_id(int(task_id))
        return _row_to_task(row) if row else None

    def delete_older_than(self, cutoff: datetime) -> int:
        return self._store.delete_where("created_at", "<", cutoff)
