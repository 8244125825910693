from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceMode, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_optional_float, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, LedgerKey, RecognitionData, UpsertResult
from .repository import LedgerRepository

_COLUMNS = """
    record_id, session_id, student_id, teacher_id, subject_id, status, mode, notes,
    confidence, liveness, quality, image_ref, auto_processed,
    parent_notified, parent_notified_at, marked_at, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    recognition = None
    if r.get("confidence") is not None:
        recognition = RecognitionData(
            confidence=float(r["confidence"]),
            liveness=float(r["liveness"]),
            quality=as_optional_float(r.get("quality")),
            image_ref=r.get("image_ref"),
            auto_processed=as_bool(r.get("auto_processed")),
        )
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        teacher_id=int(r["teacher_id"]),
        subject_id=int(r["subject_id"]),
        status=AttendanceStatus(r["status"]),
        mode=AttendanceMode(r["mode"]),
        marked_at=r["marked_at"],
        updated_at=r["updated_at"],
        notes=r.get("notes"),
        recognition=recognition,
        parent_notified=as_bool(r.get("parent_notified")),
        parent_notified_at=r.get("parent_notified_at"),
    )


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(
        self,
        key: LedgerKey,
        *,
        teacher_id: int,
        subject_id: int,
        status: AttendanceStatus,
        mode: AttendanceMode,
        now: datetime,
        notes: Optional[str] = None,
        recognition: Optional[RecognitionData] = None,
    ) -> UpsertResult:
        has_recognition = 1 if recognition else 0
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(session_id, student_id) makes this a single atomic upsert.
            # LAST_INSERT_ID(record_id) exposes the existing id through lastrowid.
            cur.execute(
                """
                INSERT INTO attendance_records(
                    session_id, student_id, teacher_id, subject_id, status, mode, notes,
                    confidence, liveness, quality, image_ref, auto_processed,
                    parent_notified, marked_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0,%s,%s)
                ON DUPLICATE KEY UPDATE
                    record_id=LAST_INSERT_ID(record_id),
                    status=VALUES(status),
                    mode=VALUES(mode),
                    notes=COALESCE(VALUES(notes), notes),
                    confidence=IF(%s, VALUES(confidence), confidence),
                    liveness=IF(%s, VALUES(liveness), liveness),
                    quality=IF(%s, VALUES(quality), quality),
                    image_ref=IF(%s, VALUES(image_ref), image_ref),
                    auto_processed=IF(%s, VALUES(auto_processed), auto_processed),
                    updated_at=VALUES(updated_at)
                """,
                (
                    int(key.session_id),
                    int(key.student_id),
                    int(teacher_id),
                    int(subject_id),
                    status.value,
                    mode.value,
                    notes,
                    recognition.confidence if recognition else None,
                    recognition.liveness if recognition else None,
                    recognition.quality if recognition else None,
                    recognition.image_ref if recognition else None,
                    1 if recognition and recognition.auto_processed else 0,
                    now,
                    now,
                    has_recognition,
                    has_recognition,
                    has_recognition,
                    has_recognition,
                    has_recognition,
                ),
            )
            # rowcount: 1 inserted, 2 updated, 0 updated with identical values.
            return UpsertResult(record_id=int(cur.lastrowid), created=cur.rowcount == 1)

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_key(self, key: LedgerKey) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s AND student_id=%s",
                (int(key.session_id), int(key.student_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def mark_parent_notified(self, *, record_id: int, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET parent_notified=1, parent_notified_at=%s
                WHERE record_id=%s
                """,
                (now, int(record_id)),
            )
            return cur.rowcount == 1

    def list_records(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        student_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if start is not None:
            clauses.append("marked_at >= %s")
            params.append(start)
        if end is not None:
            clauses.append("marked_at <= %s")
            params.append(end)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        if subject_id is not None:
            clauses.append("subject_id=%s")
            params.append(int(subject_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY marked_at ASC, record_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE session_id=%s
                ORDER BY marked_at ASC, record_id ASC
                """,
                (int(session_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]
