import pytest

from conftest import make_directory
from attendance_pipeline.container import build_container
from attendance_pipeline.notifications.queue import InProcessNotificationQueue


def test_celery_notifications_refuse_memory_storage():
    with pytest.raises(ValueError, match="STORAGE_BACKEND=memory"):
        build_container(storage_backend="memory", notification_backend="celery", directory=make_directory())


def test_unknown_notification_backend():
    with pytest.raises(ValueError, match="NOTIFICATION_BACKEND"):
        build_container(storage_backend="memory", notification_backend="carrier-pigeon")


def test_memory_storage_defaults_to_inprocess_queue():
    container = build_container(storage_backend="memory", directory=make_directory())

    assert isinstance(container.notification_queue, InProcessNotificationQueue)
