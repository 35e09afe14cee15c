from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.service import AttendanceService
from .auth.tokens import TokenService
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .notifications.broadcaster import Broadcaster
from .tasks.cleanup import CleanupScheduler, TaskCleanupService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    """Lifetime-scoped resources shared by every request handler."""

    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    tasks_repo: TaskRepository

    broadcaster: Broadcaster
    tokens: TokenService

    auth_service: AuthService
    attendance_service: AttendanceService
    task_service: TaskService
    cleanup_service: TaskCleanupService
    scheduler: CleanupScheduler


def wire_container(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    tasks_repo: TaskRepository,
    tokens: TokenService,
    broadcaster: Optional[Broadcaster] = None,
    retention_days: int = constants.DEFAULT_RETENTION_DAYS,
    cleanup_interval_seconds: float = constants.DEFAULT_CLEANUP_INTERVAL_SECONDS,
    clock=None,
    store_clock=None,
) -> Container:
    """Wire services over the given repositories.

    ``store_clock`` drives the retention sweep; its cutoff is compared with
    ``created_at``, which the store stamps in its own session time zone.
    """
    broadcaster = broadcaster or Broadcaster()
    clock_kw = {"clock": clock} if clock else {}
    sweep_clock = store_clock or clock
    sweep_kw = {"clock": sweep_clock} if sweep_clock else {}

    cleanup_service = TaskCleanupService(tasks_repo, broadcaster, retention_days=retention_days, **sweep_kw)

    return Container(
        conn=conn,
        users_repo=users_repo,
        tasks_repo=tasks_repo,
        broadcaster=broadcaster,
        tokens=tokens,
        auth_service=AuthService(users_repo, tokens),
        attendance_service=AttendanceService(users_repo, broadcaster, **clock_kw),
        task_service=TaskService(tasks_repo, users_repo, broadcaster, **clock_kw),
        cleanup_service=cleanup_service,
        scheduler=CleanupScheduler(cleanup_service, interval_seconds=cleanup_interval_seconds),
    )


def build_container(settings: Any) -> Container:
    """Build the production container from a settings module."""
    db_config = dict(settings.DB_CONFIG)
    conn = DatabaseConnection(
        DBConfig.from_dict(
            db_config,
            pool_size=int(getattr(settings, "DB_POOL_SIZE", constants.DEFAULT_POOL_SIZE)),
            pool_timeout=float(getattr(settings, "DB_POOL_TIMEOUT", constants.DEFAULT_POOL_TIMEOUT_SECONDS)),
            connect_timeout=int(getattr(settings, "DB_CONNECT_TIMEOUT", constants.DEFAULT_CONNECT_TIMEOUT_SECONDS)),
        )
    )

    tokens = TokenService(
        str(settings.SECRET_KEY),
        ttl_minutes=int(getattr(settings, "TOKEN_TTL_MINUTES", constants.DEFAULT_TOKEN_TTL_MINUTES)),
    )

    return wire_container(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        tokens=tokens,
        store_clock=conn.ping,
        broadcaster=Broadcaster(int(getattr(settings, "SSE_QUEUE_SIZE", constants.DEFAULT_SSE_QUEUE_SIZE))),
        retention_days=int(getattr(settings, "TASK_RETENTION_DAYS", constants.DEFAULT_RETENTION_DAYS)),
        cleanup_interval_seconds=float(
            getattr(settings, "CLEANUP_INTERVAL_SECONDS", constants.DEFAULT_CLEANUP_INTERVAL_SECONDS)
        ),
    )
