from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...common.rounding import percent
from ...core.enums import AttendanceStatus

ATTENDED = {AttendanceStatus.PRESENT, AttendanceStatus.LATE}


def attended_percent(records: Sequence[AttendanceRecord]) -> int:
    return percent(sum(1 for r in records if r.status in ATTENDED), len(records))


class ScoringStrategy(ABC):
    """Strategy Pattern: one leaderboard category, one way to score a student.

    `records` are the student's records in the window, oldest first.
    Scores are whole numbers in [0, 100]; no records scores 0.
    """

    @abstractmethod
    def score(self, records: Sequence[AttendanceRecord]) -> int:
        raise NotImplementedError
