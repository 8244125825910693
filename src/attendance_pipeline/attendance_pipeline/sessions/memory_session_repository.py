from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, Optional, Sequence

from ..core.enums import SessionMode
from ..recognition.gate import RecognitionThresholds
from .model import AttendanceSession
from .repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._rows: Dict[int, AttendanceSession] = {}

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
        with self._lock:
            sid = self._next_id
            self._next_id += 1
            self._rows[sid] = AttendanceSession(
                session_id=sid,
                subject_id=int(subject_id),
                teacher_id=int(teacher_id),
                label=label,
                mode=mode,
                created_at=now,
                started_at=now,
                location=location,
                thresholds=thresholds,
            )
            return sid

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        return self._rows.get(int(session_id))

    def get_many(self, session_ids: Iterable[int]) -> Dict[int, AttendanceSession]:
        with self._lock:
            return {int(i): self._rows[int(i)] for i in session_ids if int(i) in self._rows}

    def end(self, *, session_id: int, now: datetime) -> bool:
        with self._lock:
            s = self._rows.get(int(session_id))
            if not s or not s.active:
                return False
            self._rows[s.session_id] = replace(s, active=False, ended_at=now)
            return True

    def list_active_for_teacher(self, *, teacher_id: int) -> Sequence[AttendanceSession]:
        with self._lock:
            rows = [s for s in self._rows.values() if s.teacher_id == int(teacher_id) and s.active]
        return sorted(rows, key=lambda s: s.started_at, reverse=True)

    def delete(self, session_id: int) -> None:
        """Only used to model a session removed outside the pipeline."""
        with self._lock:
            self._rows.pop(int(session_id), None)
