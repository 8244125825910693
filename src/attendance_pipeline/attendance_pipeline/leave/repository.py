from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        subject_id: Optional[int],
        teacher_id: Optional[int],
        start_date: date,
        end_date: date,
        reason: str,
        description: Optional[str],
        now: datetime,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        review_notes: Optional[str],
        now: datetime,
    ) -> bool:
        """Compare-and-set out of `pending`. False when the request was already decided."""

        raise NotImplementedError

    def set_notified(
        self, *, request_id: int, teacher: Optional[bool] = None, parent: Optional[bool] = None
    ) -> bool:
        raise NotImplementedError

    def list_for_student(self, *, student_id: int, limit: int = 50) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_for_teacher(
        self, *, teacher_id: int, status: Optional[LeaveStatus] = None, limit: int = 50
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
