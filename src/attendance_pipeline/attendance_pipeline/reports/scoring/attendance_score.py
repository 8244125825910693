from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from .base import ScoringStrategy, attended_percent


class AttendanceScore(ScoringStrategy):
    """Share of classes attended, late included."""

    def score(self, records: Sequence[AttendanceRecord]) -> int:
        return attended_percent(records)
