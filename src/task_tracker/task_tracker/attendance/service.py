from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Callable, List

from ..common.datetime_utils import now_local
from ..common.validators import require_choice
from ..core.enums import Attendance, Role
from ..core.exceptions import NotFoundError
from ..notifications.broadcaster import ATTENDANCE_UPDATED, EventPublisher, safe_publish
from ..users.model import User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases: developers report attendance, admins review it."""

    def __init__(
        self,
        users: UserRepository,
        events: EventPublisher,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._events = events
        self._clock = clock

    def list_developers(self) -> List[User]:
        return list(self._users.list(role=Role.DEVELOPER))

    def get_attendance(self, email: str) -> User:
        user = self._users.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return user

    def mark_attendance(self, email: str, status) -> User:
        attendance = require_choice(
            status, Attendance, "Invalid attendance status. Must be 'present' or 'absent'"
        )

        user = self.get_attendance(email)
        saved = self._users.save(
            dataclasses.replace(user, attendance=attendance, last_attendance_update=self._clock())
        )
        logger.info("Attendance updated: %s -> %s", saved.email, attendance.value)

        safe_publish(self._events, ATTENDANCE_UPDATED, {"email": saved.email, "attendance": attendance.value})
        return saved
