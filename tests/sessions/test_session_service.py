from datetime import timedelta

import pytest

from conftest import OTHER_SUBJECT_ID, SUBJECT_ID, TEACHER_ID
from attendance_pipeline.core.enums import SessionMode
from attendance_pipeline.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


def test_create_session_starts_active(container, teacher, fixed_now):
    sid = container.session_service.create_session(
        caller=teacher, subject_id=SUBJECT_ID, label="  Lecture 1 ", location="Room 4", now=fixed_now
    )

    session = container.session_service.get_session(session_id=sid, caller=teacher)
    assert session.active is True
    assert session.label == "Lecture 1"
    assert session.teacher_id == TEACHER_ID
    assert session.mode == SessionMode.MANUAL
    assert session.started_at == fixed_now
    assert session.ended_at is None


def test_only_the_subject_teacher_can_create(container, teacher, other_teacher, student):
    with pytest.raises(PermissionDeniedError):
        container.session_service.create_session(caller=other_teacher, subject_id=SUBJECT_ID, label="x")
    with pytest.raises(PermissionDeniedError):
        container.session_service.create_session(caller=student, subject_id=SUBJECT_ID, label="x")
    with pytest.raises(PermissionDeniedError):
        container.session_service.create_session(caller=teacher, subject_id=OTHER_SUBJECT_ID, label="x")


def test_create_validates_subject_label_and_mode(container, teacher):
    with pytest.raises(NotFoundError):
        container.session_service.create_session(caller=teacher, subject_id=99, label="x")
    with pytest.raises(ValidationError):
        container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="   ")
    with pytest.raises(ValidationError):
        container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="x", mode="telepathy")


def test_end_after_end_never_reactivates(container, teacher, session_id, fixed_now):
    ended_at = fixed_now + timedelta(hours=1)
    container.session_service.end_session(session_id=session_id, caller=teacher, now=ended_at)

    with pytest.raises(InvalidTransitionError):
        container.session_service.end_session(session_id=session_id, caller=teacher, now=ended_at + timedelta(hours=1))

    session = container.session_service.get_session(session_id=session_id, caller=teacher)
    assert session.active is False
    assert session.ended_at == ended_at


def test_end_requires_owner(container, other_teacher, admin, session_id):
    for caller in (other_teacher, admin):
        with pytest.raises(PermissionDeniedError):
            container.session_service.end_session(session_id=session_id, caller=caller)
    with pytest.raises(NotFoundError):
        container.session_service.end_session(session_id=12345, caller=other_teacher)


def test_list_active_shows_only_running_sessions(container, teacher, fixed_now):
    first = container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="A", now=fixed_now)
    second = container.session_service.create_session(
        caller=teacher, subject_id=SUBJECT_ID, label="B", now=fixed_now + timedelta(minutes=5)
    )
    container.session_service.end_session(session_id=first, caller=teacher)

    assert [s.session_id for s in container.session_service.list_active(caller=teacher)] == [second]
