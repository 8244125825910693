from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_optional_float, db_cursor, fetchall
from .gate import RecognitionThresholds, ThresholdCheck
from .model import RecognitionAttempt
from .repository import RecognitionAttemptRepository

_COLUMNS = """
    attempt_id, session_id, student_id, image_ref, success, confidence, liveness, quality,
    confidence_threshold, liveness_threshold, quality_threshold,
    confidence_passed, liveness_passed, quality_passed, attempted_at
"""


def _to_attempt(r: dict) -> RecognitionAttempt:
    thresholds = RecognitionThresholds(
        confidence=float(r["confidence_threshold"]),
        liveness=float(r["liveness_threshold"]),
        quality=float(r["quality_threshold"]),
    )
    confidence = float(r["confidence"])
    liveness = float(r["liveness"])
    quality = as_optional_float(r.get("quality"))
    return RecognitionAttempt(
        attempt_id=int(r["attempt_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        image_ref=r["image_ref"],
        success=as_bool(r["success"]),
        confidence=confidence,
        liveness=liveness,
        quality=quality,
        thresholds=thresholds,
        checks=(
            ThresholdCheck("Confidence", confidence, thresholds.confidence, as_bool(r["confidence_passed"])),
            ThresholdCheck("Liveness", liveness, thresholds.liveness, as_bool(r["liveness_passed"])),
            ThresholdCheck("Quality", quality, thresholds.quality, as_bool(r["quality_passed"])),
        ),
        attempted_at=r["attempted_at"],
    )


class MySQLRecognitionAttemptRepository(RecognitionAttemptRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        passed = {c.name: c.passed for c in checks}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO recognition_attempts(
                    session_id, student_id, image_ref, success, confidence, liveness, quality,
                    confidence_threshold, liveness_threshold, quality_threshold,
                    confidence_passed, liveness_passed, quality_passed, attempted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(session_id),
                    int(student_id),
                    image_ref,
                    1 if success else 0,
                    confidence,
                    liveness,
                    quality,
                    thresholds.confidence,
                    thresholds.liveness,
                    thresholds.quality,
                    1 if passed.get("Confidence") else 0,
                    1 if passed.get("Liveness") else 0,
                    1 if passed.get("Quality") else 0,
                    now,
                ),
            )
            return int(cur.lastrowid)

    def list_for_session(self, session_id: int, *, include_failures: bool = False) -> Sequence[RecognitionAttempt]:
        where = "session_id=%s" if include_failures else "session_id=%s AND success=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM recognition_attempts
                WHERE {where}
                ORDER BY attempted_at DESC, attempt_id DESC
                """,
                (int(session_id),),
            )
            return [_to_attempt(r) for r in fetchall(cur)]

    def list_between(
        self, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Sequence[RecognitionAttempt]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("attempted_at >= %s")
            params.append(start)
        if end is not None:
            clauses.append("attempted_at <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM recognition_attempts
                WHERE {" AND ".join(clauses)}
                ORDER BY attempted_at ASC, attempt_id ASC
                """,
                tuple(params),
            )
            return [_to_attempt(r) for r in fetchall(cur)]
