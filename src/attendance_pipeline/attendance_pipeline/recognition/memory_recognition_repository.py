from __future__ import annotations

import threading
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .gate import RecognitionThresholds, ThresholdCheck
from .model import RecognitionAttempt
from .repository import RecognitionAttemptRepository


class InMemoryRecognitionAttemptRepository(RecognitionAttemptRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: List[RecognitionAttempt] = []

    def append(
        self,
        *,
        session_id: int,
        student_id: int,
        image_ref: str,
        success: bool,
        confidence: float,
        liveness: float,
        quality: Optional[float],
        thresholds: RecognitionThresholds,
        checks: Tuple[ThresholdCheck, ...],
        now: datetime,
    ) -> int:
        with self._lock:
            attempt_id = len(self._rows) + 1
            self._rows.append(
                RecognitionAttempt(
                    attempt_id=attempt_id,
                    session_id=int(session_id),
                    student_id=int(student_id),
                    image_ref=image_ref,
                    success=success,
                    confidence=confidence,
                    liveness=liveness,
                    quality=quality,
                    thresholds=thresholds,
                    checks=tuple(checks),
                    attempted_at=now,
                )
            )
            return attempt_id

    def list_for_session(self, session_id: int, *, include_failures: bool = False) -> Sequence[RecognitionAttempt]:
        with self._lock:
            rows = [
                a
                for a in self._rows
                if a.session_id == int(session_id) and (include_failures or a.success)
            ]
        return sorted(rows, key=lambda a: (a.attempted_at, a.attempt_id), reverse=True)

    def list_between(
        self, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Sequence[RecognitionAttempt]:
        with self._lock:
            rows = list(self._rows)
        return [
            a
            for a in rows
            if (start is None or a.attempted_at >= start) and (end is None or a.attempted_at <= end)
        ]
