from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...common.rounding import percent
from ...core.enums import AttendanceStatus
from .base import ScoringStrategy


class PunctualityScore(ScoringStrategy):
    """Share of classes attended on time."""

    def score(self, records: Sequence[AttendanceRecord]) -> int:
        return percent(sum(1 for r in records if r.status == AttendanceStatus.PRESENT), len(records))
