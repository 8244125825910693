from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    student_id: int
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    submitted_at: datetime
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    description: Optional[str] = None
    reviewed_by: Optional[int] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    teacher_notified: bool = False
    parent_notified: bool = False

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "teacher_id": self.teacher_id,
            "start_date": self.start_date.strftime("%Y-%m-%d"),
            "end_date": self.end_date.strftime("%Y-%m-%d"),
            "reason": self.reason,
            "description": self.description,
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat(),
            "reviewed_by": self.reviewed_by,
            "review_notes": self.review_notes,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "teacher_notified": self.teacher_notified,
            "parent_notified": self.parent_notified,
        }
