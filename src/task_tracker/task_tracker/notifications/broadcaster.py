from __future__ import annotations

import itertools
import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..core.constants import DEFAULT_SSE_QUEUE_SIZE

logger = logging.getLogger(__name__)

TASK_CREATED = "taskCreated"
TASK_UPDATED = "taskUpdated"
TASK_DELETED = "taskDeleted"
ATTENDANCE_UPDATED = "attendanceUpdated"
TASKS_CLEANED = "tasksCleaned"


class EventPublisher(Protocol):
    def publish(self, event: str, payload: Any) -> int:
        """Fan ``event`` out to every live client; return how many got it."""
        raise NotImplementedError


@dataclass(frozen=True)
class Event:
    name: str
    payload: Any


@dataclass(eq=False)
class Subscription:
    sub_id: int
    events: "queue.Queue[Event]" = field(repr=False)

    def get(self, timeout: float) -> Event:
        return self.events.get(timeout=timeout)


class Broadcaster(EventPublisher):
    """In-process fan-out to every connected real-time client.

    Delivery is best-effort and at most once: a client whose buffer is full
    misses the event and catches up on its next full fetch.
    """

    def __init__(self, queue_size: int = DEFAULT_SSE_QUEUE_SIZE):
        self._queue_size = int(queue_size)
        self._subs: dict[int, Subscription] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._subs)

    def subscribe(self) -> Subscription:
        sub = Subscription(sub_id=next(self._ids), events=queue.Queue(maxsize=self._queue_size))
        with self._lock:
            self._subs[sub.sub_id] = sub
        logger.info("Client %s connected (clients=%s)", sub.sub_id, self.client_count)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            removed = self._subs.pop(sub.sub_id, None)
        if removed is not None:
            logger.info("Client %s disconnected (clients=%s)", sub.sub_id, self.client_count)

    def publish(self, event: str, payload: Any) -> int:
        with self._lock:
            targets = list(self._subs.values())

        delivered = 0
        message = Event(name=event, payload=payload)
        for sub in targets:
            try:
                sub.events.put_nowait(message)
                delivered += 1
            except queue.Full:
                logger.warning("Dropped %s for slow client %s", event, sub.sub_id)
        logger.debug("Published %s to %s/%s clients", event, delivered, len(targets))
        return delivered


def format_sse(event: Event) -> str:
    # SSE: each event ends with a blank line
    data = json.dumps(event.payload, ensure_ascii=False, default=str)
    return f"event: {event.name}\ndata: {data}\n\n"


def safe_publish(publisher: EventPublisher, event: str, payload: Any) -> None:
    """Fire-and-forget publish: a failing publisher never fails the caller."""
    try:
        publisher.publish(event, payload)
    except Exception:
        logger.exception("Failed to publish %s", event)
