from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import LedgerRepository
from ..common.datetime_utils import now_local
from ..core.constants import LEADERBOARD_LIMIT, TIMEFRAME_DAYS
from ..core.enums import LeaderboardCategory, Timeframe
from ..core.exceptions import ValidationError
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from .factory import ScoringStrategyFactory
from .model import LeaderboardEntry


class LeaderboardService:
    """Ranks approved students over a rolling window. Recomputed on every call."""

    def __init__(
        self,
        ledger: LedgerRepository,
        directory: ProfileDirectory,
        *,
        strategy_factory: ScoringStrategyFactory | None = None,
        limit: int = LEADERBOARD_LIMIT,
    ):
        self._ledger = ledger
        self._directory = directory
        self._factory = strategy_factory or ScoringStrategyFactory()
        self._limit = limit

    @staticmethod
    def window_start(timeframe: Timeframe | str, now: datetime) -> datetime:
        try:
            timeframe = Timeframe(timeframe)
        except ValueError:
            raise ValidationError(f"Unknown timeframe: {timeframe}")
        return now - timedelta(days=TIMEFRAME_DAYS[timeframe.value])

    def leaderboard(
        self,
        *,
        caller: Caller,
        timeframe: Timeframe | str = Timeframe.MONTH,
        category: LeaderboardCategory | str = LeaderboardCategory.ATTENDANCE,
        now: datetime | None = None,
    ) -> Sequence[LeaderboardEntry]:
        now = now or now_local()
        start = self.window_start(timeframe, now)
        strategy = self._factory.for_category(category)

        by_student: Dict[int, List[AttendanceRecord]] = defaultdict(list)
        for r in self._ledger.list_records(start=start):
            by_student[r.student_id].append(r)

        scored = []
        for student in self._directory.list_students():
            records = by_student.get(student.profile_id, [])
            scored.append((student, strategy.score(records), len(records)))

        # sorted() is stable: ties keep directory order.
        scored.sort(key=lambda item: item[1], reverse=True)
        return [
            LeaderboardEntry(
                rank=i + 1,
                student_id=student.profile_id,
                name=student.name,
                student_number=student.student_number,
                department=student.department,
                score=score,
                total_classes=total,
            )
            for i, (student, score, total) in enumerate(scored[: self._limit])
        ]
