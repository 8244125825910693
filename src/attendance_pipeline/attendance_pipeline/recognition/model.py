from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .gate import RecognitionThresholds, ThresholdCheck


@dataclass(frozen=True)
class RecognitionAttempt:
    """One row of the append-only attempt log."""

    attempt_id: int
    session_id: int
    student_id: int
    image_ref: str
    success: bool
    confidence: float
    liveness: float
    quality: Optional[float]
    thresholds: RecognitionThresholds
    checks: Tuple[ThresholdCheck, ...]
    attempted_at: datetime

    def to_dict(self) -> dict:
        return {
            "attempt_id": self.attempt_id,
            "session_id": self.session_id,
            "student_id": self.student_id,
            "image_ref": self.image_ref,
            "success": self.success,
            "confidence": self.confidence,
            "liveness": self.liveness,
            "quality": self.quality,
            "thresholds": self.thresholds.to_dict(),
            "checks": [
                {"name": c.name, "measured": c.measured, "required": c.required, "passed": c.passed}
                for c in self.checks
            ],
            "attempted_at": self.attempted_at.isoformat(),
        }


@dataclass(frozen=True)
class RecognitionOutcome:
    success: bool
    message: str
    confidence: float
    auto_processed: bool
    attempt_id: int
    record_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "confidence": self.confidence,
            "auto_processed": self.auto_processed,
            "attempt_id": self.attempt_id,
            "record_id": self.record_id,
        }
