from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...core.constants import CONSISTENCY_WINDOW
from .base import ScoringStrategy, attended_percent


class ConsistencyScore(ScoringStrategy):
    """Attendance over the most recent classes only."""

    def __init__(self, window: int = CONSISTENCY_WINDOW):
        self._window = window

    def score(self, records: Sequence[AttendanceRecord]) -> int:
        return attended_percent(list(records)[-self._window :])
