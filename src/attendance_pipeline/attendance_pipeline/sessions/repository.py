from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Optional, Protocol, Sequence

from ..core.enums import SessionMode
from ..recognition.gate import RecognitionThresholds
from .model import AttendanceSession


class SessionRepository(Protocol):
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
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_many(self, session_ids: Iterable[int]) -> Dict[int, AttendanceSession]:
        raise NotImplementedError

    def end(self, *, session_id: int, now: datetime) -> bool:
        """Flip active -> ended. Returns False when the session was not active."""

        raise NotImplementedError

    def list_active_for_teacher(self, *, teacher_id: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError
