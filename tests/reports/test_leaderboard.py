from datetime import timedelta

import pytest

from conftest import NO_PARENT_STUDENT_ID, OTHER_STUDENT_ID, PENDING_STUDENT_ID, STUDENT_ID, SUBJECT_ID
from attendance_pipeline.core.constants import LEADERBOARD_LIMIT
from attendance_pipeline.core.enums import ProfileStatus, Role
from attendance_pipeline.core.exceptions import ValidationError
from attendance_pipeline.directory.model import Profile
from attendance_pipeline.reports.factory import ScoringStrategyFactory
from attendance_pipeline.reports.scoring.attendance_score import AttendanceScore
from attendance_pipeline.reports.scoring.consistency_score import ConsistencyScore
from attendance_pipeline.reports.scoring.punctuality_score import PunctualityScore


def _sessions_with(container, teacher, start, statuses_by_student):
    """One session per day; statuses_by_student maps student -> list of statuses, oldest first."""
    days = max(len(v) for v in statuses_by_student.values())
    for day in range(days):
        when = start + timedelta(days=day)
        sid = container.session_service.create_session(caller=teacher, subject_id=SUBJECT_ID, label=f"D{day}", now=when)
        for student_id, statuses in statuses_by_student.items():
            if day < len(statuses):
                container.ledger_service.mark_attendance(
                    session_id=sid, student_id=student_id, status=statuses[day], caller=teacher, now=when
                )


def test_factory_picks_strategy_per_category():
    factory = ScoringStrategyFactory()

    assert isinstance(factory.for_category("attendance"), AttendanceScore)
    assert isinstance(factory.for_category("punctuality"), PunctualityScore)
    assert isinstance(factory.for_category("consistency"), ConsistencyScore)
    with pytest.raises(ValidationError):
        factory.for_category("charisma")


def test_attendance_and_punctuality_scores(container, teacher, fixed_now):
    _sessions_with(
        container,
        teacher,
        fixed_now - timedelta(days=3),
        {STUDENT_ID: ["present", "late", "absent"], OTHER_STUDENT_ID: ["present", "present", "present"]},
    )

    attendance = container.leaderboard_service.leaderboard(caller=teacher, timeframe="week", now=fixed_now)
    scores = {e.student_id: e.score for e in attendance}
    assert scores[OTHER_STUDENT_ID] == 100
    assert scores[STUDENT_ID] == 67

    punctuality = container.leaderboard_service.leaderboard(
        caller=teacher, timeframe="week", category="punctuality", now=fixed_now
    )
    assert {e.student_id: e.score for e in punctuality}[STUDENT_ID] == 33


def test_zero_record_students_listed_with_zero_and_pending_excluded(container, teacher, fixed_now):
    _sessions_with(container, teacher, fixed_now - timedelta(days=1), {STUDENT_ID: ["present"]})

    entries = container.leaderboard_service.leaderboard(caller=teacher, timeframe="week", now=fixed_now)

    by_id = {e.student_id: e for e in entries}
    assert set(by_id) == {STUDENT_ID, OTHER_STUDENT_ID, NO_PARENT_STUDENT_ID}
    assert PENDING_STUDENT_ID not in by_id
    assert by_id[OTHER_STUDENT_ID].score == 0
    assert by_id[OTHER_STUDENT_ID].total_classes == 0
    assert entries[0].student_id == STUDENT_ID
    assert [e.rank for e in entries] == [1, 2, 3]
    assert all(isinstance(e.score, int) and 0 <= e.score <= 100 for e in entries)


def test_ties_keep_directory_order(container, teacher, fixed_now):
    entries = container.leaderboard_service.leaderboard(caller=teacher, timeframe="week", now=fixed_now)

    assert [e.student_id for e in entries] == [STUDENT_ID, OTHER_STUDENT_ID, NO_PARENT_STUDENT_ID]


def test_window_excludes_older_records(container, teacher, fixed_now):
    _sessions_with(container, teacher, fixed_now - timedelta(days=20), {STUDENT_ID: ["present"]})

    week = container.leaderboard_service.leaderboard(caller=teacher, timeframe="week", now=fixed_now)
    month = container.leaderboard_service.leaderboard(caller=teacher, timeframe="month", now=fixed_now)

    assert {e.student_id: e.total_classes for e in week}[STUDENT_ID] == 0
    assert {e.student_id: e.total_classes for e in month}[STUDENT_ID] == 1


def test_consistency_uses_last_ten_records(container, teacher, fixed_now):
    statuses = ["absent"] * 5 + ["present"] * 10
    _sessions_with(container, teacher, fixed_now - timedelta(days=20), {STUDENT_ID: statuses})

    consistency = container.leaderboard_service.leaderboard(
        caller=teacher, timeframe="month", category="consistency", now=fixed_now
    )
    attendance = container.leaderboard_service.leaderboard(caller=teacher, timeframe="month", now=fixed_now)

    assert {e.student_id: e.score for e in consistency}[STUDENT_ID] == 100
    assert {e.student_id: e.score for e in attendance}[STUDENT_ID] == 67


def test_unknown_timeframe(container, teacher):
    with pytest.raises(ValidationError):
        container.leaderboard_service.leaderboard(caller=teacher, timeframe="decade")


def test_list_is_capped_at_fifty(container, directory, teacher, fixed_now):
    extra = range(100, 164)
    for i in extra:
        directory.add_profile(Profile(i, f"Student {i}", Role.STUDENT, ProfileStatus.APPROVED))
    _sessions_with(
        container,
        teacher,
        fixed_now - timedelta(days=2),
        {i: ["present", "late"] if i % 3 == 0 else ["present", "absent"] if i % 3 == 1 else ["absent", "absent"] for i in extra},
    )

    entries = container.leaderboard_service.leaderboard(caller=teacher, timeframe="week", now=fixed_now)

    assert LEADERBOARD_LIMIT == 50
    assert len(entries) == 50
    assert [e.rank for e in entries] == list(range(1, 51))
    scores = [e.score for e in entries]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] == 100
    assert 50 in scores
