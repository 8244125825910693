from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .. import policy
from ..attendance.model import AttendanceRecord
from ..attendance.repository import LedgerRepository
from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..common.rounding import percent2, round_half_up
from ..common.validators import optional_text, require_non_empty
from ..core.constants import EMAIL_CHANNEL
from ..core.enums import AttendanceStatus, Audience, ReportType, Role
from ..core.exceptions import ValidationError
from ..directory.model import Caller, Profile, Subject
from ..directory.repository import ProfileDirectory
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import NotificationJob
from ..recognition.repository import RecognitionAttemptRepository
from ..sessions.model import AttendanceSession
from ..sessions.repository import SessionRepository
from .export import report_filename, report_to_csv
from .model import Report, ReportFilters

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"
REPORT_EMAIL_TEMPLATE = "report.email"


def _counts(records: Iterable[AttendanceRecord]) -> Dict[str, int]:
    counts = {s: 0 for s in AttendanceStatus}
    for r in records:
        counts[r.status] += 1
    return {
        "present_count": counts[AttendanceStatus.PRESENT],
        "late_count": counts[AttendanceStatus.LATE],
        "absent_count": counts[AttendanceStatus.ABSENT],
        "on_leave_count": counts[AttendanceStatus.ON_LEAVE],
    }


def _rate(counts: Dict[str, int], total: int) -> float:
    return percent2(counts["present_count"] + counts["late_count"], total)


class ReportService:
    """Tabular reports over the ledger, recomputed on demand."""

    def __init__(
        self,
        ledger: LedgerRepository,
        sessions: SessionRepository,
        directory: ProfileDirectory,
        attempts: RecognitionAttemptRepository,
        dispatcher: NotificationDispatcher,
        *,
        channel: str = EMAIL_CHANNEL,
    ):
        self._ledger = ledger
        self._sessions = sessions
        self._directory = directory
        self._attempts = attempts
        self._dispatcher = dispatcher
        self._channel = channel

    def generate(
        self,
        *,
        caller: Caller,
        report_type: ReportType | str,
        filters: ReportFilters | None = None,
        now: datetime | None = None,
    ) -> Report:
        try:
            report_type = ReportType(report_type)
        except ValueError:
            raise ValidationError(f"Unknown report type: {report_type}")

        filters = filters or ReportFilters()
        if caller.role == Role.STUDENT:
            # Students only ever see their own rows.
            filters = ReportFilters(
                subject_id=filters.subject_id,
                student_id=caller.profile_id,
                start=filters.start,
                end=filters.end,
            )

        records, sessions = self._filtered_records(filters)
        now = now or now_local()

        if report_type == ReportType.DETAILED:
            data = self._detailed(records, sessions)
        elif report_type == ReportType.STUDENT_WISE:
            data = self._student_wise(records)
        elif report_type == ReportType.SUBJECT_WISE:
            data = self._subject_wise(records, sessions)
        else:
            data = self._summary(records)
        return Report(type=report_type, generated_at=now, data=data)

    def email_report(
        self,
        *,
        caller: Caller,
        report_type: ReportType | str,
        recipients: Sequence[str],
        subject: str,
        message: Optional[str] = None,
        filters: ReportFilters | None = None,
        now: datetime | None = None,
    ) -> dict:
        """Generate a report and send it as a CSV attachment, one send per recipient.

        Sends are independent: a failed recipient does not stop the others, and the
        result carries per-recipient outcomes plus the success/total counts.
        """
        policy.can_email_report(caller)
        if isinstance(recipients, str) or not recipients:
            raise ValidationError("recipients must be a non-empty list")
        addresses: List[str] = []
        for r in recipients:
            address = require_non_empty(r if isinstance(r, str) else None, "recipient")
            if address not in addresses:
                addresses.append(address)
        subject = require_non_empty(subject, "subject")

        report = self.generate(caller=caller, report_type=report_type, filters=filters, now=now)
        payload = {
            "subject": subject,
            "message": optional_text(message) or "",
            "report_type": report.type.value,
            "generated_at": report.generated_at.isoformat(),
            "row_count": len(report.data) if isinstance(report.data, list) else 1,
            "file_name": report_filename(report),
            "file_format": "csv",
            "file_content": report_to_csv(report),
        }
        jobs = [
            NotificationJob(self._channel, address, REPORT_EMAIL_TEMPLATE, Audience.STAFF, payload)
            for address in addresses
        ]

        sent = self._dispatcher.dispatch(jobs)
        return {
            "success_count": sent.success_count,
            "total_count": sent.total_count,
            "message": f"Sent {sent.success_count} of {sent.total_count} emails successfully",
            "results": [r.to_dict() for r in sent.results],
        }

    def recognition_stats(
        self,
        *,
        caller: Caller,
        subject_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict:
        policy.can_view_recognition_stats(caller)
        attempts = list(
            self._attempts.list_between(
                start=start_of_day(start) if start else None,
                end=end_of_day(end) if end else None,
            )
        )
        if subject_id is not None:
            sessions = self._sessions.get_many(a.session_id for a in attempts)
            attempts = [
                a for a in attempts if a.session_id in sessions and sessions[a.session_id].subject_id == int(subject_id)
            ]

        total = len(attempts)
        successful = sum(1 for a in attempts if a.success)
        # Every accepted attempt marks the student present without a human step.
        auto_processed = successful
        avg_confidence = sum(a.confidence for a in attempts) / total if total else 0.0
        avg_liveness = sum(a.liveness for a in attempts) / total if total else 0.0
        return {
            "total_attempts": total,
            "successful_recognitions": successful,
            "auto_processed": auto_processed,
            "success_rate": percent2(successful, total),
            "auto_processing_rate": percent2(auto_processed, total),
            "avg_confidence": round_half_up(avg_confidence * 100, 2),
            "avg_liveness": round_half_up(avg_liveness * 100, 2),
            "date_range": {
                "start": start.strftime("%Y-%m-%d") if start else None,
                "end": end.strftime("%Y-%m-%d") if end else None,
            },
        }

    # -------- internals --------
    def _filtered_records(
        self, filters: ReportFilters
    ) -> tuple[List[AttendanceRecord], Dict[int, AttendanceSession]]:
        if filters.start and filters.end and filters.end < filters.start:
            raise ValidationError("end must be on or after start")

        records = self._ledger.list_records(
            start=start_of_day(filters.start) if filters.start else None,
            end=end_of_day(filters.end) if filters.end else None,
            student_id=filters.student_id,
        )
        sessions = self._sessions.get_many(r.session_id for r in records)

        out: List[AttendanceRecord] = []
        for r in records:
            session = sessions.get(r.session_id)
            if not session:
                continue
            if filters.subject_id is not None and session.subject_id != int(filters.subject_id):
                continue
            out.append(r)
        return out, sessions

    def _profiles(self, ids: Iterable[int]) -> Dict[int, Optional[Profile]]:
        return {i: self._directory.get_profile(i) for i in set(ids)}

    def _subjects(self, ids: Iterable[int]) -> Dict[int, Optional[Subject]]:
        return {i: self._directory.get_subject(i) for i in set(ids)}

    def _summary(self, records: Sequence[AttendanceRecord]) -> dict:
        total_sessions = len({r.session_id for r in records})
        counts = _counts(records)
        return {
            "total_sessions": total_sessions,
            "total_students": len({r.student_id for r in records}),
            "total_records": len(records),
            **counts,
            "attendance_rate": _rate(counts, len(records)) if total_sessions else 0.0,
        }

    def _detailed(self, records: Sequence[AttendanceRecord], sessions: Dict[int, AttendanceSession]) -> List[dict]:
        profiles = self._profiles(r.student_id for r in records)
        subjects = self._subjects(sessions[r.session_id].subject_id for r in records)
        rows: List[dict] = []
        for r in records:
            session = sessions[r.session_id]
            student = profiles.get(r.student_id)
            subject = subjects.get(session.subject_id)
            rows.append(
                {
                    "student_id": r.student_id,
                    "student_name": student.name if student else UNKNOWN,
                    "student_number": (student.student_number if student else None) or NOT_AVAILABLE,
                    "subject_code": subject.code if subject else NOT_AVAILABLE,
                    "subject_name": subject.name if subject else UNKNOWN,
                    "session_name": session.label,
                    "date": session.started_at.strftime("%Y-%m-%d"),
                    "time": session.started_at.strftime("%H:%M"),
                    "status": r.status.value,
                    "mode": r.mode.value,
                    "confidence": r.recognition.confidence if r.recognition else None,
                    "timestamp": r.marked_at.strftime("%Y-%m-%d %H:%M:%S"),
                }
            )
        return rows

    def _student_wise(self, records: Sequence[AttendanceRecord]) -> List[dict]:
        grouped: Dict[int, List[AttendanceRecord]] = defaultdict(list)
        for r in records:
            grouped[r.student_id].append(r)

        profiles = self._profiles(grouped)
        subjects = self._subjects(r.subject_id for r in records)
        rows: List[dict] = []
        for student_id, items in grouped.items():
            student = profiles.get(student_id)
            counts = _counts(items)
            subject_names: List[str] = []
            for r in items:
                subject = subjects.get(r.subject_id)
                if subject and subject.name not in subject_names:
                    subject_names.append(subject.name)
            rows.append(
                {
                    "student_id": student_id,
                    "student_name": student.name if student else UNKNOWN,
                    "student_number": (student.student_number if student else None) or NOT_AVAILABLE,
                    "department": (student.department if student else None) or NOT_AVAILABLE,
                    "total_sessions": len(items),
                    **counts,
                    "subjects": ", ".join(subject_names),
                    "attendance_rate": _rate(counts, len(items)),
                }
            )
        return rows

    def _subject_wise(self, records: Sequence[AttendanceRecord], sessions: Dict[int, AttendanceSession]) -> List[dict]:
        grouped: Dict[int, List[AttendanceRecord]] = defaultdict(list)
        for r in records:
            grouped[sessions[r.session_id].subject_id].append(r)

        subjects = self._subjects(grouped)
        rows: List[dict] = []
        for subject_id, items in grouped.items():
            subject = subjects.get(subject_id)
            if not subject:
                continue
            counts = _counts(items)
            rows.append(
                {
                    "subject_id": subject_id,
                    "subject_code": subject.code,
                    "subject_name": subject.name,
                    "department": subject.department or NOT_AVAILABLE,
                    "total_sessions": len({r.session_id for r in items}),
                    "total_students": len({r.student_id for r in items}),
                    "total_records": len(items),
                    **counts,
                    "attendance_rate": _rate(counts, len(items)),
                }
            )
        return rows
