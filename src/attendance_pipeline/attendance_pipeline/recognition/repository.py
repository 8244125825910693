from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from .gate import RecognitionThresholds, ThresholdCheck
from .model import RecognitionAttempt


class RecognitionAttemptRepository(Protocol):
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
        raise NotImplementedError

    def list_for_session(self, session_id: int, *, include_failures: bool = False) -> Sequence[RecognitionAttempt]:
        """Newest first."""

        raise NotImplementedError

    def list_between(
        self, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Sequence[RecognitionAttempt]:
        raise NotImplementedError
