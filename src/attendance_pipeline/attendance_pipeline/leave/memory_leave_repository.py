from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Optional, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest
from .repository import LeaveRepository


class InMemoryLeaveRepository(LeaveRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._rows: Dict[int, LeaveRequest] = {}

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
        with self._lock:
            rid = self._next_id
            self._next_id += 1
            self._rows[rid] = LeaveRequest(
                request_id=rid,
                student_id=int(student_id),
                start_date=start_date,
                end_date=end_date,
                reason=reason,
                status=LeaveStatus.PENDING,
                submitted_at=now,
                subject_id=subject_id,
                teacher_id=teacher_id,
                description=description,
            )
            return rid

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        return self._rows.get(int(request_id))

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        review_notes: Optional[str],
        now: datetime,
    ) -> bool:
        with self._lock:
            req = self._rows.get(int(request_id))
            if not req or req.status != LeaveStatus.PENDING:
                return False
            self._rows[req.request_id] = replace(
                req,
                status=status,
                reviewed_by=int(reviewed_by),
                review_notes=review_notes,
                reviewed_at=now,
            )
            return True

    def set_notified(
        self, *, request_id: int, teacher: Optional[bool] = None, parent: Optional[bool] = None
    ) -> bool:
        with self._lock:
            req = self._rows.get(int(request_id))
            if not req:
                return False
            self._rows[req.request_id] = replace(
                req,
                teacher_notified=req.teacher_notified if teacher is None else teacher,
                parent_notified=req.parent_notified if parent is None else parent,
            )
            return True

    def list_for_student(self, *, student_id: int, limit: int = 50) -> Sequence[LeaveRequest]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.student_id == int(student_id)]
        rows.sort(key=lambda r: (r.submitted_at, r.request_id), reverse=True)
        return rows[: int(limit)]

    def list_for_teacher(
        self, *, teacher_id: int, status: Optional[LeaveStatus] = None, limit: int = 50
    ) -> Sequence[LeaveRequest]:
        with self._lock:
            rows = [
                r
                for r in self._rows.values()
                if r.teacher_id == int(teacher_id) and (status is None or r.status == status)
            ]
        rows.sort(key=lambda r: (r.submitted_at, r.request_id), reverse=True)
        return rows[: int(limit)]
