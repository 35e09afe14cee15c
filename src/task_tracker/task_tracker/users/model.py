from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import Attendance, Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; persistence goes through UserRepository.save().
    """

    user_id: Optional[int]
    name: str
    email: str
    password_hash: str
    role: Role = Role.DEVELOPER
    attendance: Attendance = Attendance.ABSENT
    last_attendance_update: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_attendance_view(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "attendance": self.attendance.value,
            "lastAttendanceUpdate": isoformat_or_none(self.last_attendance_update),
        }
