"""Expands a NotificationEvent into per-recipient jobs.

Template keys and their payload fields:

    attendance.parent_notice   student_name, subject_name, session_name, teacher_name, status, date, notes
    attendance.absence_alert   subject, message, student_name, session_name, subject_name, date
    leave.submitted.teacher    student_name, teacher_name, subject_name, start_date, end_date, reason, description, submitted_at
    leave.submitted.parent     student_name, subject_name, start_date, end_date, reason, description, submitted_at
    leave.reviewed.parent      student_name, subject_name, start_date, end_date, reason, status, reviewer_name, review_notes, reviewed_at
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..attendance.repository import LedgerRepository
from ..core.constants import EMAIL_CHANNEL
from ..core.enums import AttendanceStatus, Audience, NotificationKind
from ..directory.model import Profile
from ..directory.repository import ProfileDirectory
from ..leave.repository import LeaveRepository
from ..sessions.repository import SessionRepository
from .model import NotificationEvent, NotificationJob

logger = logging.getLogger(__name__)

UNKNOWN_SUBJECT = "Unknown Subject"
GENERAL_SUBJECT = "General"


def _email(profile: Optional[Profile], attr: str = "email") -> Optional[str]:
    if not profile:
        return None
    value = (getattr(profile, attr) or "").strip()
    return value or None


class NotificationPlanner:
    def __init__(
        self,
        directory: ProfileDirectory,
        sessions: SessionRepository,
        ledger: LedgerRepository,
        leaves: LeaveRepository,
        *,
        channel: str = EMAIL_CHANNEL,
    ):
        self._directory = directory
        self._sessions = sessions
        self._ledger = ledger
        self._leaves = leaves
        self._channel = channel

    def plan(self, event: NotificationEvent) -> Optional[List[NotificationJob]]:
        """Jobs for the event, or None when the entity it refers to is gone."""
        if event.kind == NotificationKind.ATTENDANCE_MARKED:
            return self._attendance_marked(event.entity_id)
        if event.kind == NotificationKind.LEAVE_SUBMITTED:
            return self._leave_submitted(event.entity_id)
        if event.kind == NotificationKind.LEAVE_REVIEWED:
            return self._leave_reviewed(event.entity_id)
        logger.warning("no plan for event kind %s", event.kind)
        return []

    def _job(self, recipient: str, template_key: str, audience: Audience, payload: dict) -> NotificationJob:
        return NotificationJob(
            channel=self._channel,
            recipient=recipient,
            template_key=template_key,
            audience=audience,
            payload=payload,
        )

    def _subject_name(self, subject_id: Optional[int], default: str) -> str:
        subject = self._directory.get_subject(subject_id) if subject_id is not None else None
        return subject.name if subject else default

    def _attendance_marked(self, record_id: int) -> Optional[List[NotificationJob]]:
        record = self._ledger.get(record_id)
        if not record:
            logger.error("attendance record %s not found", record_id)
            return None
        student = self._directory.get_profile(record.student_id)
        teacher = self._directory.get_profile(record.teacher_id)
        session = self._sessions.get(record.session_id)
        if not student or not teacher or not session:
            logger.error(
                "attendance record %s is missing its student, teacher or session", record_id
            )
            return None

        subject_name = self._subject_name(record.subject_id, UNKNOWN_SUBJECT)
        date_label = record.marked_at.strftime("%Y-%m-%d")
        jobs: List[NotificationJob] = []

        parent_email = _email(student, "parent_email")
        if parent_email:
            jobs.append(
                self._job(
                    parent_email,
                    "attendance.parent_notice",
                    Audience.PARENT,
                    {
                        "student_name": student.name,
                        "subject_name": subject_name,
                        "session_name": session.label,
                        "teacher_name": teacher.name,
                        "status": record.status.value,
                        "date": date_label,
                        "notes": record.notes or "",
                    },
                )
            )

        teacher_email = _email(teacher)
        if record.status == AttendanceStatus.ABSENT and teacher_email:
            message = f"{student.name} was marked as absent for {session.label} in {subject_name} on {date_label}."
            if record.notes:
                message += f" Notes: {record.notes}"
            jobs.append(
                self._job(
                    teacher_email,
                    "attendance.absence_alert",
                    Audience.TEACHER,
                    {
                        "subject": f"Student Absence Alert: {student.name}",
                        "message": message,
                        "student_name": student.name,
                        "session_name": session.label,
                        "subject_name": subject_name,
                        "date": date_label,
                    },
                )
            )
        return jobs

    def _leave_submitted(self, request_id: int) -> Optional[List[NotificationJob]]:
        req = self._leaves.get(request_id)
        if not req:
            logger.error("leave request %s not found", request_id)
            return None
        student = self._directory.get_profile(req.student_id)
        if not student:
            logger.error("student %s of leave request %s not found", req.student_id, request_id)
            return None

        base = {
            "student_name": student.name,
            "subject_name": self._subject_name(req.subject_id, GENERAL_SUBJECT),
            "start_date": req.start_date.strftime("%Y-%m-%d"),
            "end_date": req.end_date.strftime("%Y-%m-%d"),
            "reason": req.reason,
            "description": req.description or "",
            "submitted_at": req.submitted_at.strftime("%Y-%m-%d %H:%M"),
        }
        jobs: List[NotificationJob] = []

        teacher = self._directory.get_profile(req.teacher_id) if req.teacher_id is not None else None
        teacher_email = _email(teacher)
        if teacher_email:
            jobs.append(
                self._job(teacher_email, "leave.submitted.teacher", Audience.TEACHER, {**base, "teacher_name": teacher.name})
            )

        parent_email = _email(student, "parent_email")
        if parent_email:
            jobs.append(self._job(parent_email, "leave.submitted.parent", Audience.PARENT, dict(base)))
        else:
            logger.info("no parent email for student %s", student.profile_id)
        return jobs

    def _leave_reviewed(self, request_id: int) -> Optional[List[NotificationJob]]:
        req = self._leaves.get(request_id)
        if not req:
            logger.error("leave request %s not found", request_id)
            return None
        student = self._directory.get_profile(req.student_id)
        if not student:
            logger.error("student %s of leave request %s not found", req.student_id, request_id)
            return None

        parent_email = _email(student, "parent_email")
        if not parent_email:
            logger.info("no parent email for student %s", student.profile_id)
            return []

        reviewer = self._directory.get_profile(req.reviewed_by) if req.reviewed_by is not None else None
        return [
            self._job(
                parent_email,
                "leave.reviewed.parent",
                Audience.PARENT,
                {
                    "student_name": student.name,
                    "subject_name": self._subject_name(req.subject_id, GENERAL_SUBJECT),
                    "start_date": req.start_date.strftime("%Y-%m-%d"),
                    "end_date": req.end_date.strftime("%Y-%m-%d"),
                    "reason": req.reason,
                    "status": req.status.value,
                    "reviewer_name": reviewer.name if reviewer else "Administrator",
                    "review_notes": req.review_notes or "",
                    "reviewed_at": req.reviewed_at.strftime("%Y-%m-%d %H:%M") if req.reviewed_at else "",
                },
            )
        ]
