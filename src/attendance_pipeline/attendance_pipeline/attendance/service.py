from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from .. import policy
from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..common.validators import optional_text
from ..core.enums import AttendanceMode, AttendanceStatus, NotificationKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from ..notifications.model import NotificationEvent
from ..notifications.queue import NotificationQueue, enqueue_safely
from ..sessions.repository import SessionRepository
from .model import AttendanceRecord, LedgerKey, RecognitionData
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


def _parse_status(value: AttendanceStatus | str) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value}")


def _parse_mode(value: AttendanceMode | str) -> AttendanceMode:
    try:
        return AttendanceMode(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance mode: {value}")


class AttendanceLedgerService:
    """Single write path into the ledger for manual marks and recognitions."""

    def __init__(
        self,
        ledger: LedgerRepository,
        sessions: SessionRepository,
        directory: ProfileDirectory,
        notifications: NotificationQueue,
    ):
        self._ledger = ledger
        self._sessions = sessions
        self._directory = directory
        self._notifications = notifications

    def mark_attendance(
        self,
        *,
        session_id: int,
        student_id: int,
        status: AttendanceStatus | str,
        caller: Caller,
        mode: AttendanceMode | str = AttendanceMode.MANUAL,
        notes: Optional[str] = None,
        recognition: Optional[RecognitionData] = None,
        now: datetime | None = None,
    ) -> int:
        session = self._sessions.get(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        policy.can_mark(
            caller,
            session_teacher_id=session.teacher_id,
            student_id=int(student_id),
            session_active=session.active,
        )

        student = self._directory.get_profile(int(student_id))
        if not student or student.role != Role.STUDENT:
            raise NotFoundError("Student not found")

        status = _parse_status(status)
        mode = _parse_mode(mode)
        if mode == AttendanceMode.FACE_SCAN and (recognition is None or caller.role == Role.STUDENT):
            # Only the recognition path may record a face scan.
            mode = AttendanceMode.MANUAL
        now = now or now_local()

        # teacher and subject come from the session, never from the caller.
        result = self._ledger.upsert(
            LedgerKey(session.session_id, student.profile_id),
            teacher_id=session.teacher_id,
            subject_id=session.subject_id,
            status=status,
            mode=mode,
            now=now,
            notes=optional_text(notes),
            recognition=recognition,
        )
        logger.info(
            "attendance %s: session=%s student=%s status=%s mode=%s",
            "created" if result.created else "updated",
            session.session_id,
            student.profile_id,
            status.value,
            mode.value,
        )

        enqueue_safely(
            self._notifications,
            NotificationEvent(kind=NotificationKind.ATTENDANCE_MARKED, entity_id=result.record_id, occurred_at=now),
        )
        return result.record_id

    def student_history(
        self,
        *,
        caller: Caller,
        subject_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        if start and end and end < start:
            raise ValidationError("end must be on or after start")
        records = self._ledger.list_records(
            start=start_of_day(start) if start else None,
            end=end_of_day(end) if end else None,
            student_id=caller.profile_id,
            subject_id=subject_id,
        )
        return list(reversed(records))

    def session_records(self, *, session_id: int, caller: Caller) -> Sequence[AttendanceRecord]:
        session = self._sessions.get(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        policy.can_manage_session(caller, session_teacher_id=session.teacher_id)
        return self._ledger.list_for_session(session.session_id)
