from __future__ import annotations

from datetime import datetime

import pytest

from attendance_pipeline.container import build_container
from attendance_pipeline.core.enums import ProfileStatus, Role
from attendance_pipeline.core.exceptions import NotificationError
from attendance_pipeline.directory.memory_directory import InMemoryProfileDirectory
from attendance_pipeline.directory.model import Caller, Profile, Subject
from attendance_pipeline.notifications.model import ChannelResponse

ADMIN_ID = 1
TEACHER_ID = 2
STUDENT_ID = 3
OTHER_STUDENT_ID = 4
OTHER_TEACHER_ID = 5
NO_PARENT_STUDENT_ID = 6
PENDING_STUDENT_ID = 7

SUBJECT_ID = 1
OTHER_SUBJECT_ID = 2


class FakeQueue:
    """Records events instead of handling them."""

    def __init__(self):
        self.events = []

    def enqueue(self, event):
        self.events.append(event)

    def kinds(self):
        return [e.kind.value for e in self.events]


class BrokenQueue:
    def enqueue(self, event):
        raise RuntimeError("broker down")


class RecordingChannel:
    def __init__(self, name="email", *, reject=(), explode=()):
        self.name = name
        self.sent = []
        self._reject = set(reject)
        self._explode = set(explode)

    def send(self, recipient, template_key, data):
        self.sent.append((recipient, template_key, data))
        if recipient in self._explode:
            raise NotificationError(f"smtp refused {recipient}")
        if recipient in self._reject:
            return ChannelResponse(success=False, error="mailbox full")
        return ChannelResponse(success=True, message_id=f"msg-{len(self.sent)}")

    def recipients(self):
        return [r for r, _, _ in self.sent]


def make_directory() -> InMemoryProfileDirectory:
    return InMemoryProfileDirectory(
        profiles=[
            Profile(ADMIN_ID, "Ada Admin", Role.ADMIN, ProfileStatus.APPROVED, email="admin@school.test"),
            Profile(TEACHER_ID, "Tom Teacher", Role.TEACHER, ProfileStatus.APPROVED, email="tom@school.test"),
            Profile(
                STUDENT_ID,
                "Sam Student",
                Role.STUDENT,
                ProfileStatus.APPROVED,
                email="sam@school.test",
                parent_email="sam.parent@home.test",
                student_number="S-003",
                department="CS",
            ),
            Profile(
                OTHER_STUDENT_ID,
                "Olivia Other",
                Role.STUDENT,
                ProfileStatus.APPROVED,
                parent_email="olivia.parent@home.test",
                student_number="S-004",
                department="CS",
            ),
            Profile(OTHER_TEACHER_ID, "Una Other", Role.TEACHER, ProfileStatus.APPROVED, email="una@school.test"),
            Profile(NO_PARENT_STUDENT_ID, "Nia Noparent", Role.STUDENT, ProfileStatus.APPROVED, student_number="S-006"),
            Profile(PENDING_STUDENT_ID, "Pat Pending", Role.STUDENT, ProfileStatus.PENDING),
        ],
        subjects=[
            Subject(SUBJECT_ID, "CS101", "Programming", teacher_id=TEACHER_ID, department="CS"),
            Subject(OTHER_SUBJECT_ID, "MA101", "Calculus", teacher_id=OTHER_TEACHER_ID, department="Math"),
        ],
    )


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def directory():
    return make_directory()


@pytest.fixture
def queue():
    return FakeQueue()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def container(directory, queue, channel):
    return build_container(
        storage_backend="memory",
        directory=directory,
        notification_queue=queue,
        channels=[channel],
    )


@pytest.fixture
def admin():
    return Caller(ADMIN_ID, Role.ADMIN, "Ada Admin")


@pytest.fixture
def teacher():
    return Caller(TEACHER_ID, Role.TEACHER, "Tom Teacher")


@pytest.fixture
def other_teacher():
    return Caller(OTHER_TEACHER_ID, Role.TEACHER, "Una Other")


@pytest.fixture
def student():
    return Caller(STUDENT_ID, Role.STUDENT, "Sam Student")


@pytest.fixture
def other_student():
    return Caller(OTHER_STUDENT_ID, Role.STUDENT, "Olivia Other")


@pytest.fixture
def session_id(container, teacher, fixed_now):
    return container.session_service.create_session(
        caller=teacher, subject_id=SUBJECT_ID, label="Lecture 1", mode="auto_recognition", now=fixed_now
    )
