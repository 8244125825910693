from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import LeaderboardCategory
from ..core.exceptions import ValidationError
from .scoring.attendance_score import AttendanceScore
from .scoring.base import ScoringStrategy
from .scoring.consistency_score import ConsistencyScore
from .scoring.punctuality_score import PunctualityScore


@dataclass
class ScoringStrategyFactory:
    """Factory Pattern: choose the scoring strategy for a leaderboard category."""

    def for_category(self, category: LeaderboardCategory | str) -> ScoringStrategy:
        try:
            category = LeaderboardCategory(category)
        except ValueError:
            raise ValidationError(f"Unknown leaderboard category: {category}")

        if category == LeaderboardCategory.PUNCTUALITY:
            return PunctualityScore()
        if category == LeaderboardCategory.CONSISTENCY:
            return ConsistencyScore()
        return AttendanceScore()
