from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMode, AttendanceStatus
from .model import AttendanceRecord, LedgerKey, RecognitionData, UpsertResult


class LedgerRepository(Protocol):
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
        """Insert or patch the record for `key` atomically.

        On an existing record, status and mode are overwritten; notes and
        recognition only when given. parent_notified is never reset.
        """

        raise NotImplementedError

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_key(self, key: LedgerKey) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def mark_parent_notified(self, *, record_id: int, now: datetime) -> bool:
        raise NotImplementedError

    def list_records(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        student_id: Optional[int] = None,
        subject_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records by marked_at ascending; `start`/`end` are inclusive bounds."""

        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
