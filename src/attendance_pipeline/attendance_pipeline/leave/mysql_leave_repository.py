from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, student_id, subject_id, teacher_id, start_date, end_date, reason, description,
    status, submitted_at, reviewed_by, review_notes, reviewed_at, teacher_notified, parent_notified
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        submitted_at=r["submitted_at"],
        subject_id=r.get("subject_id"),
        teacher_id=r.get("teacher_id"),
        description=r.get("description"),
        reviewed_by=r.get("reviewed_by"),
        review_notes=r.get("review_notes"),
        reviewed_at=r.get("reviewed_at"),
        teacher_notified=as_bool(r.get("teacher_notified")),
        parent_notified=as_bool(r.get("parent_notified")),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    student_id, subject_id, teacher_id, start_date, end_date,
                    reason, description, status, submitted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    subject_id,
                    teacher_id,
                    start_date,
                    end_date,
                    reason,
                    description,
                    LeaveStatus.PENDING.value,
                    now,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        review_notes: Optional[str],
        now: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, reviewed_by=%s, review_notes=%s, reviewed_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    review_notes,
                    now,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1

    def set_notified(
        self, *, request_id: int, teacher: Optional[bool] = None, parent: Optional[bool] = None
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        if teacher is not None:
            sets.append("teacher_notified=%s")
            params.append(1 if teacher else 0)
        if parent is not None:
            sets.append("parent_notified=%s")
            params.append(1 if parent else 0)
        if not sets:
            return False

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_requests SET {', '.join(sets)} WHERE request_id=%s",
                tuple(params + [int(request_id)]),
            )
            return cur.rowcount == 1

    def list_for_student(self, *, student_id: int, limit: int = 50) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE student_id=%s
                ORDER BY submitted_at DESC, request_id DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_for_teacher(
        self, *, teacher_id: int, status: Optional[LeaveStatus] = None, limit: int = 50
    ) -> Sequence[LeaveRequest]:
        clauses = ["teacher_id=%s"]
        params: list[object] = [int(teacher_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {" AND ".join(clauses)}
                ORDER BY submitted_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]
