from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Attendance, Role
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import RecordStore, TableSpec
from .model import User
from .repository import UserRepository

USERS_TABLE = TableSpec(
    name="users",
    columns=(
        "id",
        "name",
        "email",
        "password",
        "role",
        "attendance",
        "last_attendance_update",
        "created_at",
        "updated_at",
    ),
    writable=("name", "email", "password", "role", "attendance", "last_attendance_update"),
)

_SORTS = {
    "name": (("name", False),),
    "-name": (("name", True),),
}


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password"],
        role=Role(row["role"]),
        attendance=Attendance(row["attendance"]),
        last_attendance_update=row.get("last_attendance_update"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _user_to_values(user: User) -> Dict[str, Any]:
    return {
        "name": user.name,
        "email": user.email,
        "password": user.password_hash,
        "role": user.role.value,
        "attendance": user.attendance.value,
        "last_attendance_update": user.last_attendance_update,
    }


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._store = RecordStore(conn_factory, USERS_TABLE)

    def find_by_email(self, email: str) -> Optional[User]:
        rows = self._store.find({"email": email})
        return _row_to_user(rows[0]) if rows else None

    def find_by_id(self, user_id: int) -> Optional[User]:
        row = self._store.find_by_id(int(user_id))
        return _row_to_user(row) if row else None

    def list(
        self,
        *,
        role: Optional[Role] = None,
        email: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Sequence[User]:
        if sort is not None and sort not in _SORTS:
            raise ValueError(f"Unsupported user sort {sort!r}")
        rows = self._store.find(
            {"role": role.value if role else None, "email": email},
            order_by=_SORTS.get(sort) if sort else None,
        )
        return [_row_to_user(r) for r in rows]

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
        row = self._store.save(_user_to_values(user), record_id=user.user_id)
        if row is None:
            raise NotFoundError("User not found")
        return _row_to_user(row)
