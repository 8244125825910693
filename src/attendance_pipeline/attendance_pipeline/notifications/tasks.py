"""Celery application and the notification task.

Run a worker with:

    celery -A attendance_pipeline.notifications.tasks worker --loglevel=info
"""

from __future__ import annotations

import importlib
import logging

from celery import Celery

from config import get_settings_module

from .model import NotificationEvent

logger = logging.getLogger(__name__)

celery_app = Celery("attendance_pipeline")
celery_app.config_from_object(get_settings_module(), namespace="CELERY")

_service = None


def _notification_service():
    # Built once per worker process from the same settings as the web app.
    global _service
    if _service is None:
        from ..container import build_notification_service

        settings = importlib.import_module(get_settings_module())
        _service = build_notification_service(settings)
    return _service


@celery_app.task(name="notifications.handle_event", ignore_result=False)
def handle_event(event_data: dict) -> dict:
    event = NotificationEvent.from_dict(event_data)
    report = _notification_service().handle(event)
    logger.info("%s %s: %s/%s delivered", event.kind.value, event.entity_id, report.success_count, report.total_count)
    return {"success_count": report.success_count, "total_count": report.total_count}
