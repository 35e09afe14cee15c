from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_CLEANUP_INTERVAL_SECONDS, DEFAULT_RETENTION_DAYS
from ..notifications.broadcaster import TASKS_CLEANED, EventPublisher, safe_publish
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def retention_cutoff(now: datetime, days: int = DEFAULT_RETENTION_DAYS) -> datetime:
    """``now`` minus ``days``, truncated to the start of that day."""
    return (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)


class TaskCleanupService:
    """Bulk-delete tasks that outlived the retention window."""

    def __init__(
        self,
        tasks: TaskRepository,
        events: EventPublisher,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tasks = tasks
        self._events = events
        self._retention_days = int(retention_days)
        self._clock = clock

    def run(self, now: Optional[datetime] = None) -> int:
        cutoff = retention_cutoff(now or self._clock(), self._retention_days)
        logger.info("Checking for tasks older than %s", cutoff.isoformat())

        deleted = self._tasks.delete_older_than(cutoff)
        if deleted > 0:
            logger.info("Deleted %s task(s) older than %s day(s)", deleted, self._retention_days)
            safe_publish(self._events, TASKS_CLEANED, {"deletedCount": deleted})
        else:
            logger.info("No tasks older than %s day(s) found", self._retention_days)
        return deleted


class CleanupScheduler:
    """Runs the cleanup once at start, then every ``interval_seconds``.

    Lives on its own daemon thread; a failed run is logged and the next one
    proceeds on schedule.
    """

    def __init__(self, service: TaskCleanupService, *, interval_seconds: float = DEFAULT_CLEANUP_INTERVAL_SECONDS):
        self._service = service
        self._interval = max(0.01, float(interval_seconds))
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[int]:
        try:
            return self._service.run()
        except Exception:
            logger.exception("Scheduled task cleanup failed")
            return None

    def _loop(self) -> None:
        self.run_once()
        while not self._stop.wait(self._interval):
            self.run_once()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._loop, name="task-cleanup", daemon=True)
            self._thread.start()
        logger.info("Task cleanup scheduled every %ss", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._thread
            self._stop.set()
            self._thread = None
        if thread is not None:
            thread.join(timeout)
