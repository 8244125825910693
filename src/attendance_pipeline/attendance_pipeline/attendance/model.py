from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceMode, AttendanceStatus


@dataclass(frozen=True)
class LedgerKey:
    """Composite identity of a record: one per student per session."""

    session_id: int
    student_id: int


@dataclass(frozen=True)
class RecognitionData:
    confidence: float
    liveness: float
    quality: Optional[float] = None
    image_ref: Optional[str] = None
    auto_processed: bool = False


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: int
    session_id: int
    student_id: int
    teacher_id: int
    subject_id: int
    status: AttendanceStatus
    mode: AttendanceMode
    marked_at: datetime
    updated_at: datetime
    notes: Optional[str] = None
    recognition: Optional[RecognitionData] = None
    parent_notified: bool = False
    parent_notified_at: Optional[datetime] = None

    @property
    def key(self) -> LedgerKey:
        return LedgerKey(self.session_id, self.student_id)

    def to_dict(self) -> dict:
        rec = self.recognition
        return {
            "record_id": self.record_id,
            "session_id": self.session_id,
            "student_id": self.student_id,
            "teacher_id": self.teacher_id,
            "subject_id": self.subject_id,
            "status": self.status.value,
            "mode": self.mode.value,
            "notes": self.notes,
            "confidence": rec.confidence if rec else None,
            "liveness": rec.liveness if rec else None,
            "quality": rec.quality if rec else None,
            "image_ref": rec.image_ref if rec else None,
            "auto_processed": rec.auto_processed if rec else False,
            "parent_notified": self.parent_notified,
            "parent_notified_at": self.parent_notified_at.isoformat() if self.parent_notified_at else None,
            "marked_at": self.marked_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class UpsertResult:
    record_id: int
    created: bool
