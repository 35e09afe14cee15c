from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Attendance, Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def find_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list(
        self,
        *,
        role: Optional[Role] = None,
        email: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Sequence[User]:
        """Newest-created first unless ``sort`` is "name" or "-name"."""
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role = Role.DEVELOPER,
        attendance: Attendance = Attendance.ABSENT,
        last_attendance_update: Optional[datetime] = None,
    ) -> User:
        raise NotImplementedError

    def save(self, user: User) -> User:
        raise NotImplementedError
