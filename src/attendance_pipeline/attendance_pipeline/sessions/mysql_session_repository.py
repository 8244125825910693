from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Optional, Sequence

from ..core.enums import SessionMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, in_clause
from ..recognition.gate import RecognitionThresholds
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, subject_id, teacher_id, label, mode, location, active,
    confidence_threshold, liveness_threshold, quality_threshold,
    created_at, started_at, ended_at
"""


def _to_session(r: dict) -> AttendanceSession:
    thresholds = None
    if r.get("confidence_threshold") is not None:
        thresholds = RecognitionThresholds(
            confidence=float(r["confidence_threshold"]),
            liveness=float(r["liveness_threshold"]),
            quality=float(r["quality_threshold"]),
        )
    return AttendanceSession(
        session_id=int(r["session_id"]),
        subject_id=int(r["subject_id"]),
        teacher_id=int(r["teacher_id"]),
        label=r["label"],
        mode=SessionMode(r["mode"]),
        created_at=r["created_at"],
        started_at=r["started_at"],
        active=as_bool(r["active"]),
        ended_at=r.get("ended_at"),
        location=r.get("location"),
        thresholds=thresholds,
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        subject_id: int,
        teacher_id: int,
        label: str,
        mode: SessionMode,
        location: Optional[str],
        thresholds: Optional[RecognitionThresholds],
        now: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    subject_id, teacher_id, label, mode, location, active,
                    confidence_threshold, liveness_threshold, quality_threshold,
                    created_at, started_at
                )
                VALUES(%s,%s,%s,%s,%s,1,%s,%s,%s,%s,%s)
                """,
                (
                    int(subject_id),
                    int(teacher_id),
                    label,
                    mode.value,
                    location,
                    thresholds.confidence if thresholds else None,
                    thresholds.liveness if thresholds else None,
                    thresholds.quality if thresholds else None,
                    now,
                    now,
                ),
            )
            return int(cur.lastrowid)

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_many(self, session_ids: Iterable[int]) -> Dict[int, AttendanceSession]:
        ids = sorted({int(i) for i in session_ids})
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            return {s.session_id: s for s in (_to_session(r) for r in fetchall(cur))}

    def end(self, *, session_id: int, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET active=0, ended_at=%s
                WHERE session_id=%s AND active=1
                """,
                (now, int(session_id)),
            )
            return cur.rowcount == 1

    def list_active_for_teacher(self, *, teacher_id: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE teacher_id=%s AND active=1
                ORDER BY started_at DESC
                """,
                (int(teacher_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]
