"""
In-process notification channel.

Replaces the front-end's global toast: components publish short notices for a
recipient, subscribers (e.g. a websocket bridge or tests) are called
synchronously, and notices stay readable through ``pending`` until they are
dismissed or their TTL runs out.
"""
from collections import deque
from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Callable
from uuid import uuid4

from ..config import NOTIFICATION_MAX_PER_RECIPIENT, NOTIFICATION_TTL_SECONDS

logger = logging.getLogger(__name__)

LEVELS = ("success", "info", "error")


@dataclass(frozen=True)
class Notification:
    recipient_id: str
    message: str
    level: str = "info"
    kind: str = "general"
    created_at: float = 0.0
    expires_at: float = 0.0
    id: str = field(default_factory=lambda: uuid4().hex)

    def public_view(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "level": self.level,
            "kind": self.kind,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
        }


Subscriber = Callable[[Notification], None]


class NotificationService:
    def __init__(
        self,
        ttl_seconds: float = NOTIFICATION_TTL_SECONDS,
        max_per_recipient: int = NOTIFICATION_MAX_PER_RECIPIENT,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = float(ttl_seconds)
        self.max_per_recipient = int(max_per_recipient)
        self._clock = clock
        self._lock = threading.Lock()
        self._queues: dict[str, deque[Notification]] = {}
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for every published notice; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, recipient_id: str, message: str, *, level: str = "info", kind: str = "general") -> Notification:
        if level not in LEVELS:
            level = "info"
        now = self._clock()
        notice = Notification(
            recipient_id=str(recipient_id),
            message=message,
            level=level,
            kind=kind,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            queue = self._queues.setdefault(notice.recipient_id, deque(maxlen=self.max_per_recipient))
            queue.append(notice)
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(notice)
            except Exception:
                # A broken listener must not fail the action that produced the notice.
                logger.exception("Notification subscriber %r failed", callback)
        return notice

    def pending(self, recipient_id: str) -> list[Notification]:
        """Live notices for ``recipient_id``, oldest first. Expired ones are dropped."""
        now = self._clock()
        with self._lock:
            queue = self._queues.get(str(recipient_id))
            if queue is None:
                return []
            live = [n for n in queue if n.expires_at > now]
            if not live:
                del self._queues[str(recipient_id)]
                return []
            queue.clear()
            queue.extend(live)
            return list(live)

    def dismiss(self, recipient_id: str, notification_id: str) -> bool:
        with self._lock:
            queue = self._queues.get(str(recipient_id))
            if not queue:
                return False
            for notice in list(queue):
                if notice.id == notification_id:
                    queue.remove(notice)
                    if not queue:
                        del self._queues[str(recipient_id)]
                    return True
            return False
