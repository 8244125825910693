from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional, Protocol

from .model import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationQueue(Protocol):
    def enqueue(self, event: NotificationEvent) -> None:
        raise NotImplementedError


def enqueue_safely(notifications: NotificationQueue, event: NotificationEvent) -> bool:
    """Hand an event to the queue after the write has committed.

    A queue failure is logged and swallowed: the caller's mutation already succeeded.
    """
    try:
        notifications.enqueue(event)
        return True
    except Exception:
        logger.exception("could not enqueue %s for entity %s", event.kind.value, event.entity_id)
        return False


_STOP = object()


class InProcessNotificationQueue(NotificationQueue):
    """queue.Queue drained by one daemon worker thread."""

    def __init__(self, handler: Callable[[NotificationEvent], Any], *, name: str = "notification-worker"):
        self._handler = handler
        self._name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def enqueue(self, event: NotificationEvent) -> None:
        self._queue.put(event)
        self.start()

    def join(self) -> None:
        """Block until every event enqueued so far has been handled."""
        self._queue.join()

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread and thread.is_alive():
            self._queue.put(_STOP)
            thread.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._handler(item)
            except Exception:
                logger.exception("notification handler failed for %s", item)
            finally:
                self._queue.task_done()
