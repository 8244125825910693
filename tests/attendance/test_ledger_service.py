import threading
from datetime import date, timedelta

import pytest

from conftest import BrokenQueue, OTHER_STUDENT_ID, OTHER_SUBJECT_ID, STUDENT_ID, SUBJECT_ID, TEACHER_ID
from attendance_pipeline.attendance.memory_ledger_repository import InMemoryLedgerRepository
from attendance_pipeline.attendance.model import LedgerKey, RecognitionData
from attendance_pipeline.attendance.service import AttendanceLedgerService
from attendance_pipeline.core.enums import AttendanceMode, AttendanceStatus, NotificationKind
from attendance_pipeline.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError


def test_marking_same_key_twice_keeps_one_record_with_latest_status(container, queue, teacher, session_id):
    first = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="absent", caller=teacher
    )
    second = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="late", caller=teacher
    )

    assert first == second
    records = container.repos.ledger.list_for_session(session_id)
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.LATE
    assert queue.kinds() == ["attendance_marked", "attendance_marked"]


def test_notes_are_kept_unless_replaced(container, teacher, session_id):
    rid = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="late", caller=teacher, notes="bus delay"
    )
    container.ledger_service.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="present", caller=teacher)

    assert container.repos.ledger.get(rid).notes == "bus delay"

    container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="present", caller=teacher, notes="arrived"
    )
    assert container.repos.ledger.get(rid).notes == "arrived"


def test_record_takes_teacher_and_subject_from_session(container, teacher, student, session_id):
    rid = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="present", caller=student
    )

    record = container.repos.ledger.get(rid)
    assert record.teacher_id == TEACHER_ID
    assert record.subject_id == SUBJECT_ID
    assert record.mode == AttendanceMode.MANUAL
    assert record.parent_notified is False


def test_on_leave_is_stored_as_given(container, teacher, session_id):
    rid = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="on_leave", caller=teacher
    )

    assert container.repos.ledger.get(rid).status == AttendanceStatus.ON_LEAVE


def test_student_can_only_mark_self_in_active_session(container, teacher, student, session_id):
    with pytest.raises(PermissionDeniedError):
        container.ledger_service.mark_attendance(
            session_id=session_id, student_id=OTHER_STUDENT_ID, status="present", caller=student
        )

    container.session_service.end_session(session_id=session_id, caller=teacher)
    with pytest.raises(PermissionDeniedError):
        container.ledger_service.mark_attendance(
            session_id=session_id, student_id=STUDENT_ID, status="present", caller=student
        )

    # The owning teacher may still correct the roster after the session ends.
    container.ledger_service.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="absent", caller=teacher)


def test_other_teacher_cannot_mark(container, other_teacher, session_id):
    with pytest.raises(PermissionDeniedError):
        container.ledger_service.mark_attendance(
            session_id=session_id, student_id=STUDENT_ID, status="present", caller=other_teacher
        )


def test_unknown_session_student_or_status(container, teacher, session_id):
    with pytest.raises(NotFoundError):
        container.ledger_service.mark_attendance(session_id=404, student_id=STUDENT_ID, status="present", caller=teacher)
    with pytest.raises(NotFoundError):
        container.ledger_service.mark_attendance(session_id=session_id, student_id=TEACHER_ID, status="present", caller=teacher)
    with pytest.raises(ValidationError):
        container.ledger_service.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="sleeping", caller=teacher)


def test_queue_failure_never_fails_the_write(container, directory, teacher, session_id):
    ledger = AttendanceLedgerService(container.repos.ledger, container.repos.sessions, directory, BrokenQueue())

    rid = ledger.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="present", caller=teacher)

    assert container.repos.ledger.get(rid).status == AttendanceStatus.PRESENT


def test_student_history_is_own_records_newest_first(container, teacher, other_teacher, student, fixed_now):
    first = container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="L1", now=fixed_now)
    second = container.session_service.create_session(
        caller=other_teacher, subject_id=OTHER_SUBJECT_ID, label="C1", now=fixed_now
    )
    container.ledger_service.mark_attendance(
        session_id=first, student_id=STUDENT_ID, status="present", caller=teacher, now=fixed_now
    )
    container.ledger_service.mark_attendance(
        session_id=second, student_id=STUDENT_ID, status="late", caller=other_teacher, now=fixed_now + timedelta(days=1)
    )
    container.ledger_service.mark_attendance(
        session_id=first, student_id=OTHER_STUDENT_ID, status="present", caller=teacher, now=fixed_now
    )

    history = container.ledger_service.student_history(caller=student)
    assert [r.session_id for r in history] == [second, first]

    only_cs = container.ledger_service.student_history(caller=student, subject_id=SUBJECT_ID)
    assert [r.session_id for r in only_cs] == [first]

    day_one = container.ledger_service.student_history(caller=student, start=date(2026, 3, 2), end=date(2026, 3, 2))
    assert [r.session_id for r in day_one] == [first]


def test_session_records_for_owner_only(container, teacher, other_teacher, session_id):
    container.ledger_service.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="present", caller=teacher)

    assert len(container.ledger_service.session_records(session_id=session_id, caller=teacher)) == 1
    with pytest.raises(PermissionDeniedError):
        container.ledger_service.session_records(session_id=session_id, caller=other_teacher)


def test_concurrent_upserts_on_one_key_leave_one_record(fixed_now):
    repo = InMemoryLedgerRepository()
    key = LedgerKey(session_id=1, student_id=3)

    def mark(status):
        repo.upsert(key, teacher_id=2, subject_id=1, status=status, mode=AttendanceMode.MANUAL, now=fixed_now)

    threads = [
        threading.Thread(target=mark, args=(AttendanceStatus.PRESENT if i % 2 else AttendanceStatus.LATE,))
        for i in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(repo.list_for_session(1)) == 1


def test_event_carries_record_id(container, queue, teacher, session_id):
    rid = container.ledger_service.mark_attendance(session_id=session_id, student_id=STUDENT_ID, status="present", caller=teacher)

    assert queue.events[-1].kind == NotificationKind.ATTENDANCE_MARKED
    assert queue.events[-1].entity_id == rid


def test_face_scan_needs_recognition_data(container, teacher, student, session_id):
    own = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=STUDENT_ID, status="present", caller=student, mode="face_scan"
    )
    bare = container.ledger_service.mark_attendance(
        session_id=session_id, student_id=OTHER_STUDENT_ID, status="present", caller=teacher, mode="face_scan"
    )

    assert container.repos.ledger.get(own).mode == AttendanceMode.MANUAL
    assert container.repos.ledger.get(bare).mode == AttendanceMode.MANUAL


def test_face_scan_kept_with_recognition_data(container, teacher, session_id):
    rid = container.ledger_service.mark_attendance(
        session_id=session_id,
        student_id=STUDENT_ID,
        status="present",
        caller=teacher,
        mode="face_scan",
        recognition=RecognitionData(confidence=0.97, liveness=0.9, auto_processed=True),
    )

    assert container.repos.ledger.get(rid).mode == AttendanceMode.FACE_SCAN
