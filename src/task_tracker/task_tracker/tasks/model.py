from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..common.datetime_utils import isoformat_or_none
from ..core.constants import DEFAULT_PRIORITY
from ..core.enums import TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: Task.

    Load, change fields with dataclasses.replace(), then persist through
    TaskRepository.save(). ``task_id is None`` means not yet persisted.
    """

    task_id: Optional[int]
    title: str
    details: str
    status: TaskStatus = TaskStatus.TODO
    priority: str = DEFAULT_PRIORITY
    assignee_email: Optional[str] = None
    owner_email: Optional[str] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # No attachment subsystem yet; always empty.
    attachments: Tuple[str, ...] = ()

    def to_public(self) -> dict:
        return {
            "_id": str(self.task_id) if self.task_id is not None else None,
            "id": self.task_id,
            "title": self.title,
            "details": self.details,
            "status": self.status.value,
            "priority": self.priority,
            "assigneeEmail": self.assignee_email,
            "ownerEmail": self.owner_email,
            "dueDate": isoformat_or_none(self.due_date),
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
            "attachments": list(self.attachments),
        }
