from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Sequence

from ..core.enums import AttendanceMode, AttendanceStatus
from .model import AttendanceRecord, LedgerKey, RecognitionData, UpsertResult
from .repository import LedgerRepository


class InMemoryLedgerRepository(LedgerRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._rows: Dict[int, AttendanceRecord] = {}
        self._by_key: Dict[LedgerKey, int] = {}

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
        with self._lock:
            existing_id = self._by_key.get(key)
            if existing_id is not None:
                current = self._rows[existing_id]
                self._rows[existing_id] = replace(
                    current,
                    status=status,
                    mode=mode,
                    notes=notes if notes is not None else current.notes,
                    recognition=recognition if recognition is not None else current.recognition,
                    updated_at=now,
                )
                return UpsertResult(record_id=existing_id, created=False)

            rid = self._next_id
            self._next_id += 1
            self._rows[rid] = AttendanceRecord(
                record_id=rid,
                session_id=key.session_id,
                student_id=key.student_id,
                teacher_id=int(teacher_id),
                subject_id=int(subject_id),
                status=status,
                mode=mode,
                marked_at=now,
                updated_at=now,
                notes=notes,
                recognition=recognition,
            )
            self._by_key[key] = rid
            return UpsertResult(record_id=rid, created=True)

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(int(record_id))

    def get_by_key(self, key: LedgerKey) -> Optional[AttendanceRecord]:
        with self._lock:
            rid = self._by_key.get(key)
            return self._rows.get(rid) if rid is not None else None

    def mark_parent_notified(self, *, record_id: int, now: datetime) -> bool:
        with self._lock:
            current = self._rows.get(int(record_id))
            if not current:
                return False
            self._rows[current.record_id] = replace(current, parent_notified=True, parent_notified_at=now)
            return True

    def list_records(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        student_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        with self._lock:
            rows = list(self._rows.values())
        out = [
            r
            for r in rows
            if (start is None or r.marked_at >= start)
            and (end is None or r.marked_at <= end)
            and (student_id is None or r.student_id == int(student_id))
            and (subject_id is None or r.subject_id == int(subject_id))
        ]
        return sorted(out, key=lambda r: (r.marked_at, r.record_id))

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.session_id == int(session_id)]
        return sorted(rows, key=lambda r: (r.marked_at, r.record_id))
