from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class ProfileStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SessionMode(str, Enum):
    """How a session takes attendance."""

    MANUAL = "manual"
    AUTO_RECOGNITION = "auto_recognition"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the ledger."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    ON_LEAVE = "on_leave"


class AttendanceMode(str, Enum):
    """How a single record was produced."""

    MANUAL = "manual"
    FACE_SCAN = "face_scan"


class LeaveStatus(str, Enum):
    """Leave approval workflow states (approved/rejected are terminal)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationKind(str, Enum):
    ATTENDANCE_MARKED = "attendance_marked"
    LEAVE_SUBMITTED = "leave_submitted"
    LEAVE_REVIEWED = "leave_reviewed"


class Audience(str, Enum):
    PARENT = "parent"
    TEACHER = "teacher"
    STAFF = "staff"


class Timeframe(str, Enum):
    WEEK = "week"
    MONTH = "month"
    SEMESTER = "semester"


class LeaderboardCategory(str, Enum):
    ATTENDANCE = "attendance"
    PUNCTUALITY = "punctuality"
    CONSISTENCY = "consistency"


class ReportType(str, Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"
    STUDENT_WISE = "student_wise"
    SUBJECT_WISE = "subject_wise"
