from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Any, Callable, List, Optional

from ..auth.tokens import Principal
from ..common.datetime_utils import now_local, parse_calendar_day
from ..common.validators import blank_to_none, require_choice, require_non_empty, text_or_none
from ..core.constants import DEFAULT_PRIORITY
from ..core.enums import Role, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.broadcaster import TASK_CREATED, TASK_DELETED, TASK_UPDATED, EventPublisher, safe_publish
from ..users.repository import UserRepository
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)

INVALID_STATUS = "Invalid status. Must be 'todo', 'in-progress', or 'done'"


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


class TaskService:
    """Use cases: create, edit, assign, transition and delete tasks.

    Every mutation runs the same steps in order: structural validation,
    assignee check, ownership check, deadline check, persistence, then a
    broadcast. A failure in the checks never reaches a write.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        events: EventPublisher,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tasks = tasks
        self._users = users
        self._events = events
        self._clock = clock

    # -- reads -------------------------------------------------------------

    def list_tasks(self) -> List[Task]:
        return list(self._tasks.list())

    def get_task(self, task_id: int) -> Task:
        task = self._tasks.find_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    # -- checks ------------------------------------------------------------

    def _require_developer(self, email: str) -> str:
        user = self._users.find_by_email(email)
        if not user or user.role != Role.DEVELOPER:
            raise ValidationError("Invalid developer email")
        return user.email

    def _check_deadline(self, raw: Any, past_message: str) -> date:
        day = parse_calendar_day(raw)
        if day < self._clock().date():
            raise ValidationError(past_message)
        return day

    # -- mutations ---------------------------------------------------------

    def create_task(
        self,
        principal: Principal,
        *,
        title: Optional[str],
        details: Optional[str],
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_email: Optional[str] = None,
        due_date: Any = None,
    ) -> Task:
        title, details = text_or_none(title), text_or_none(details)
        if not title or not details:
            raise ValidationError("Title and details are required")
        task_status = require_choice(status, TaskStatus, INVALID_STATUS) if status else TaskStatus.TODO

        assignee = blank_to_none(assignee_email)
        if assignee:
            assignee = self._require_developer(assignee)

        due = None
        if not _is_blank(due_date):
            due = self._check_deadline(due_date, "Cannot create task with a deadline in the past")

        task = self._tasks.create(
            title=title,
            details=details,
            status=task_status,
            priority=blank_to_none(priority) or DEFAULT_PRIORITY,
            assignee_email=assignee,
            owner_email=principal.email,
            due_date=due,
        )
        logger.info("Task %s created by %s (due=%s, assignee=%s)", task.task_id, principal.email, due, assignee)

        safe_publish(self._events, TASK_CREATED, task.to_public())
        return task

    def update_task(
        self,
        task_id: int,
        *,
        title: Optional[str] = None,
        details: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_email: Optional[str] = None,
        due_date: Any = None,
    ) -> Task:
        """Full admin update.

        ``None`` leaves a field unchanged. An empty string clears the
        assignee or the deadline.
        """
        changes: dict = {}
        if title is not None:
            changes["title"] = require_non_empty(title, "Title")
        if details is not None:
            changes["details"] = require_non_empty(details, "Details")
        if status is not None:
            changes["status"] = require_choice(status, TaskStatus, INVALID_STATUS)
        if not _is_blank(priority):
            changes["priority"] = str(priority).strip()

        task = self.get_task(task_id)

        if assignee_email is not None:
            assignee = blank_to_none(assignee_email)
            changes["assignee_email"] = self._require_developer(assignee) if assignee else None

        if due_date is not None:
            changes["due_date"] = (
                None if _is_blank(due_date) else self._check_deadline(due_date, "Cannot set deadline to a past date")
            )

        saved = self._tasks.save(dataclasses.replace(task, **changes))
        logger.info("Task %s updated fields=%s", saved.task_id, sorted(changes))

        safe_publish(self._events, TASK_UPDATED, saved.to_public())
        return saved

    def assign_task(self, task_id: int, assignee_email: Optional[str]) -> Task:
        task = self.get_task(task_id)

        assignee = blank_to_none(assignee_email)
        if assignee:
            assignee = self._require_developer(assignee)

        saved = self._tasks.save(dataclasses.replace(task, assignee_email=assignee))
        logger.info("Task %s assigned to %s", saved.task_id, assignee)

        safe_publish(self._events, TASK_UPDATED, saved.to_public())
        return saved

    def change_status(self, principal: Principal, task_id: int, status: Optional[str]) -> Task:
        new_status = require_choice(status, TaskStatus, INVALID_STATUS)

        task = self.get_task(task_id)

        if principal.role == Role.DEVELOPER:
            if not task.assignee_email:
                raise AuthorizationError("This task is not assigned to anyone")
            if task.assignee_email != principal.email:
                raise AuthorizationError(
                    "You can only update tasks assigned to you. "
                    f"This task is assigned to {task.assignee_email}"
                )

        saved = self._tasks.save(dataclasses.replace(task, status=new_status))
        logger.info(
            "Task %s status %s -> %s by %s",
            saved.task_id,
            task.status.value,
            new_status.value,
            principal.email,
        )

        safe_publish(self._events, TASK_UPDATED, saved.to_public())
        return saved

    def delete_task(self, task_id: int) -> Task:
        removed = self._tasks.delete_by_id(task_id)
        if not removed:
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted", removed.task_id)

        safe_publish(self._events, TASK_DELETED, {"id": removed.task_id})
        return removed
