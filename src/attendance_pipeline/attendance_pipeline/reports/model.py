from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from ..core.enums import ReportType


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    student_id: int
    name: str
    student_number: Optional[str]
    department: Optional[str]
    score: int
    total_classes: int

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "student_id": self.student_id,
            "name": self.name,
            "student_number": self.student_number,
            "department": self.department,
            "score": self.score,
            "total_classes": self.total_classes,
        }


@dataclass(frozen=True)
class ReportFilters:
    subject_id: Optional[int] = None
    student_id: Optional[int] = None
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class Report:
    """`data` is one dict for summary reports, a list of rows otherwise."""

    type: ReportType
    generated_at: datetime
    data: Union[Dict[str, Any], List[Dict[str, Any]]]

    @property
    def rows(self) -> List[Dict[str, Any]]:
        if isinstance(self.data, dict):
            return [self.data]
        return list(self.data)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "generated_at": self.generated_at.isoformat(), "data": self.data}
