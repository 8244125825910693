from __future__ import annotations

from .model import NotificationEvent
from .queue import NotificationQueue
from .tasks import handle_event


class CeleryNotificationQueue(NotificationQueue):
    """Publishes events to the Celery broker; a worker process handles them."""

    def __init__(self, task=handle_event):
        self._task = task

    def enqueue(self, event: NotificationEvent) -> None:
        self._task.delay(event.to_dict())
