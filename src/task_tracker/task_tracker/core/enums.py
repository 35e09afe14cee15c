from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization checks."""

    ADMIN = "admin"
    DEVELOPER = "developer"


class Attendance(str, Enum):
    """Self-reported attendance of a developer."""

    PRESENT = "present"
    ABSENT = "absent"


class TaskStatus(str, Enum):
    """Task workflow status. Any status may move to any other."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
