from datetime import date, timedelta

import pytest

from conftest import OTHER_STUDENT_ID, OTHER_SUBJECT_ID, STUDENT_ID, SUBJECT_ID, FakeQueue, RecordingChannel, make_directory
from attendance_pipeline.container import build_container
from attendance_pipeline.core.enums import ReportType
from attendance_pipeline.core.exceptions import PermissionDeniedError, ValidationError
from attendance_pipeline.reports.export import NO_DATA, report_to_csv
from attendance_pipeline.reports.model import ReportFilters


@pytest.fixture
def marked(container, teacher, other_teacher, fixed_now):
    cs = container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="CS-1", now=fixed_now)
    ma = container.session_service.create_session(
        caller=other_teacher, subject_id=OTHER_SUBJECT_ID, label="MA-1", now=fixed_now + timedelta(days=1)
    )
    mark = container.ledger_service.mark_attendance
    mark(session_id=cs, student_id=STUDENT_ID, status="present", caller=teacher, now=fixed_now)
    mark(session_id=cs, student_id=OTHER_STUDENT_ID, status="absent", caller=teacher, now=fixed_now)
    mark(session_id=ma, student_id=STUDENT_ID, status="late", caller=other_teacher, now=fixed_now + timedelta(days=1))
    mark(session_id=ma, student_id=OTHER_STUDENT_ID, status="on_leave", caller=other_teacher, now=fixed_now + timedelta(days=1))
    return cs, ma


def test_summary(container, admin, marked, fixed_now):
    report = container.report_service.generate(caller=admin, report_type="summary", now=fixed_now)

    assert report.type == ReportType.SUMMARY
    assert report.generated_at == fixed_now
    assert report.data == {
        "total_sessions": 2,
        "total_students": 2,
        "total_records": 4,
        "present_count": 1,
        "late_count": 1,
        "absent_count": 1,
        "on_leave_count": 1,
        "attendance_rate": 50.0,
    }


def test_summary_without_records_has_zero_rate(container, admin):
    report = container.report_service.generate(caller=admin, report_type="summary")

    assert report.data["total_sessions"] == 0
    assert report.data["attendance_rate"] == 0.0


def test_rate_rounds_to_two_decimals(container, teacher, fixed_now, admin):
    sid = container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label="R", now=fixed_now)
    container.ledger_service.mark_attendance(session_id=sid, student_id=STUDENT_ID, status="present", caller=teacher)
    container.ledger_service.mark_attendance(session_id=sid, student_id=OTHER_STUDENT_ID, status="absent", caller=teacher)
    container.ledger_service.mark_attendance(session_id=sid, student_id=6, status="absent", caller=teacher)

    report = container.report_service.generate(caller=admin, report_type="summary")

    assert report.data["attendance_rate"] == 33.33


def test_detailed_rows(container, admin, marked):
    report = container.report_service.generate(caller=admin, report_type="detailed")

    assert len(report.data) == 4
    first = report.data[0]
    assert first["student_name"] == "Sam Student"
    assert first["subject_code"] == "CS101"
    assert first["session_name"] == "CS-1"
    assert first["status"] == "present"
    assert first["mode"] == "manual"
    assert first["confidence"] is None


def test_student_wise(container, admin, marked):
    report = container.report_service.generate(caller=admin, report_type="student_wise")

    rows = {r["student_id"]: r for r in report.data}
    assert rows[STUDENT_ID]["attendance_rate"] == 100.0
    assert rows[STUDENT_ID]["subjects"] == "Programming, Calculus"
    assert rows[OTHER_STUDENT_ID]["attendance_rate"] == 0.0
    assert rows[OTHER_STUDENT_ID]["absent_count"] == 1
    assert rows[OTHER_STUDENT_ID]["on_leave_count"] == 1


def test_subject_wise_counts_every_record(container, admin, marked):
    report = container.report_service.generate(caller=admin, report_type="subject_wise")

    rows = {r["subject_id"]: r for r in report.data}
    assert rows[SUBJECT_ID]["total_sessions"] == 1
    assert rows[SUBJECT_ID]["total_students"] == 2
    assert rows[SUBJECT_ID]["total_records"] == 2
    assert rows[SUBJECT_ID]["attendance_rate"] == 50.0
    assert rows[OTHER_SUBJECT_ID]["attendance_rate"] == 50.0


def test_filters(container, admin, marked, fixed_now):
    by_subject = container.report_service.generate(
        caller=admin, report_type="detailed", filters=ReportFilters(subject_id=OTHER_SUBJECT_ID)
    )
    assert {r["subject_code"] for r in by_subject.data} == {"MA101"}

    by_student = container.report_service.generate(
        caller=admin, report_type="detailed", filters=ReportFilters(student_id=OTHER_STUDENT_ID)
    )
    assert {r["student_id"] for r in by_student.data} == {OTHER_STUDENT_ID}

    first_day = container.report_service.generate(
        caller=admin, report_type="summary", filters=ReportFilters(start=fixed_now.date(), end=fixed_now.date())
    )
    assert first_day.data["total_records"] == 2

    with pytest.raises(ValidationError):
        container.report_service.generate(
            caller=admin, report_type="summary", filters=ReportFilters(start=date(2026, 3, 5), end=date(2026, 3, 1))
        )


def test_students_only_see_their_own_rows(container, student, marked):
    report = container.report_service.generate(
        caller=student, report_type="detailed", filters=ReportFilters(student_id=OTHER_STUDENT_ID)
    )

    assert {r["student_id"] for r in report.data} == {STUDENT_ID}


def test_records_of_missing_sessions_are_dropped(container, admin, marked):
    cs, _ = marked
    container.repos.sessions.delete(cs)

    report = container.report_service.generate(caller=admin, report_type="summary")

    assert report.data["total_records"] == 2


def test_unknown_report_type(container, admin):
    with pytest.raises(ValidationError):
        container.report_service.generate(caller=admin, report_type="weekly")


def test_csv_export(container, admin, marked):
    report = container.report_service.generate(caller=admin, report_type="student_wise")

    lines = report_to_csv(report).splitlines()

    assert lines[0].startswith("student_id,student_name,student_number,department,total_sessions")
    assert len(lines) == 3
    assert '"Programming, Calculus"' in report_to_csv(report)


def test_csv_export_of_empty_report(container, admin):
    report = container.report_service.generate(caller=admin, report_type="detailed")

    assert report_to_csv(report).strip() == NO_DATA


def test_recognition_stats(container, teacher, student, session_id):
    process = container.recognition_service.process_attempt
    process(session_id=session_id, student_id=STUDENT_ID, image_ref="a", confidence=0.95, liveness=0.90, caller=teacher)
    process(session_id=session_id, student_id=STUDENT_ID, image_ref="b", confidence=0.85, liveness=0.70, caller=teacher)

    stats = container.report_service.recognition_stats(caller=teacher)
    assert stats["total_attempts"] == 2
    assert stats["successful_recognitions"] == 1
    assert stats["auto_processed"] == 1
    assert stats["success_rate"] == 50.0
    assert stats["avg_confidence"] == 90.0
    assert stats["avg_liveness"] == 80.0

    assert container.report_service.recognition_stats(caller=teacher, subject_id=OTHER_SUBJECT_ID)["total_attempts"] == 0
    with pytest.raises(PermissionDeniedError):
        container.report_service.recognition_stats(caller=student)


def test_email_report_sends_each_recipient_once(admin, fixed_now):
    channel = RecordingChannel(explode={"b@school.test"})
    container = build_container(
        storage_backend="memory", directory=make_directory(), notification_queue=FakeQueue(), channels=[channel]
    )

    result = container.report_service.email_report(
        caller=admin,
        report_type="summary",
        recipients=["a@school.test", "b@school.test", "c@school.test"],
        subject="Weekly attendance",
        message="See attached",
        now=fixed_now,
    )

    assert result["success_count"] == 2
    assert result["total_count"] == 3
    assert result["message"] == "Sent 2 of 3 emails successfully"
    assert [r["success"] for r in result["results"]] == [True, False, True]
    assert result["results"][1]["error"] == "smtp refused b@school.test"
    assert channel.recipients() == ["a@school.test", "b@school.test", "c@school.test"]

    _, template, data = channel.sent[0]
    assert template == "report.email"
    assert data["subject"] == "Weekly attendance"
    assert data["file_name"] == "attendance_summary_20260302_090000.csv"
    assert data["file_content"].startswith("total_sessions,total_students")


def test_email_report_validation(container, admin, teacher, student):
    with pytest.raises(PermissionDeniedError):
        container.report_service.email_report(caller=student, report_type="summary", recipients=["a@x.test"], subject="s")
    with pytest.raises(ValidationError):
        container.report_service.email_report(caller=teacher, report_type="summary", recipients=[], subject="s")
    with pytest.raises(ValidationError):
        container.report_service.email_report(caller=teacher, report_type="summary", recipients=["a@x.test"], subject=" ")
    with pytest.raises(ValidationError):
        container.report_service.email_report(caller=admin, report_type="weekly", recipients=["a@x.test"], subject="s")


def test_email_report_drops_duplicate_recipients(container, channel, admin):
    result = container.report_service.email_report(
        caller=admin, report_type="detailed", recipients=["a@x.test", " a@x.test", "b@x.test"], subject="s"
    )

    assert result["total_count"] == 2
    assert channel.recipients() == ["a@x.test", "b@x.test"]
