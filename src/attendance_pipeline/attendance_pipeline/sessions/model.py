from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SessionMode
from ..recognition.gate import RecognitionThresholds


@dataclass(frozen=True)
class AttendanceSession:
    session_id: int
    subject_id: int
    teacher_id: int
    label: str
    mode: SessionMode
    created_at: datetime
    started_at: datetime
    active: bool = True
    ended_at: Optional[datetime] = None
    location: Optional[str] = None
    thresholds: Optional[RecognitionThresholds] = None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "subject_id": self.subject_id,
            "teacher_id": self.teacher_id,
            "label": self.label,
            "mode": self.mode.value,
            "location": self.location,
            "active": self.active,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "thresholds": self.thresholds.to_dict() if self.thresholds else None,
        }
