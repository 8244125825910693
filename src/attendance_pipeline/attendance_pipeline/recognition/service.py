from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from .. import policy
from ..attendance.model import RecognitionData
from ..attendance.service import AttendanceLedgerService
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import AttendanceMode, AttendanceStatus, Role
from ..core.exceptions import NotFoundError
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from ..sessions.repository import SessionRepository
from .gate import DEFAULT_THRESHOLDS, RecognitionThresholds, decide
from .model import RecognitionAttempt, RecognitionOutcome
from .repository import RecognitionAttemptRepository

logger = logging.getLogger(__name__)


class RecognitionService:
    """Runs scored recognition attempts through the gate and into the ledger.

    The scores come from an external face-matching model; this service only
    decides, logs the attempt, and marks the student present on acceptance.
    """

    def __init__(
        self,
        attempts: RecognitionAttemptRepository,
        sessions: SessionRepository,
        directory: ProfileDirectory,
        ledger: AttendanceLedgerService,
        *,
        default_thresholds: RecognitionThresholds = DEFAULT_THRESHOLDS,
    ):
        self._attempts = attempts
        self._sessions = sessions
        self._directory = directory
        self._ledger = ledger
        self._default_thresholds = default_thresholds

    def process_attempt(
        self,
        *,
        session_id: int,
        student_id: int,
        image_ref: str,
        confidence: float,
        liveness: float,
        quality: Optional[float] = None,
        caller: Caller,
        now: datetime | None = None,
    ) -> RecognitionOutcome:
        session = self._sessions.get(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        policy.can_manage_session(caller, session_teacher_id=session.teacher_id)

        student = self._directory.get_profile(int(student_id))
        if not student or student.role != Role.STUDENT:
            raise NotFoundError("Student not found")

        image_ref = require_non_empty(image_ref, "image_ref")
        thresholds = session.thresholds or self._default_thresholds
        decision = decide(confidence, liveness, quality, thresholds)
        now = now or now_local()

        # Scores are validated by decide(); read them back from the checks.
        confidence = decision.check("Confidence").measured
        liveness = decision.check("Liveness").measured
        quality = decision.check("Quality").measured

        attempt_id = self._attempts.append(
            session_id=session.session_id,
            student_id=student.profile_id,
            image_ref=image_ref,
            success=decision.accept,
            confidence=confidence,
            liveness=liveness,
            quality=quality,
            thresholds=thresholds,
            checks=decision.checks,
            now=now,
        )

        if not decision.accept:
            logger.info("recognition rejected: session=%s student=%s %s", session.session_id, student.profile_id, decision.reason)
            return RecognitionOutcome(
                success=False,
                message=decision.reason,
                confidence=confidence,
                auto_processed=False,
                attempt_id=attempt_id,
            )

        record_id = self._ledger.mark_attendance(
            session_id=session.session_id,
            student_id=student.profile_id,
            status=AttendanceStatus.PRESENT,
            caller=caller,
            mode=AttendanceMode.FACE_SCAN,
            recognition=RecognitionData(
                confidence=confidence,
                liveness=liveness,
                quality=quality,
                image_ref=image_ref,
                auto_processed=True,
            ),
            now=now,
        )
        return RecognitionOutcome(
            success=True,
            message=f"{student.name} automatically marked present",
            confidence=confidence,
            auto_processed=True,
            attempt_id=attempt_id,
            record_id=record_id,
        )

    def list_attempts(
        self, *, session_id: int, caller: Caller, include_failures: bool = False
    ) -> Sequence[RecognitionAttempt]:
        session = self._sessions.get(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        policy.can_manage_session(caller, session_teacher_id=session.teacher_id)
        return self._attempts.list_for_session(session.session_id, include_failures=include_failures)
