from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from .. import policy
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import Role, SessionMode
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from ..recognition.gate import RecognitionThresholds
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    """Attendance session lifecycle: Active -> Ended, one way."""

    def __init__(self, sessions: SessionRepository, directory: ProfileDirectory):
        self._sessions = sessions
        self._directory = directory

    def create_session(
        self,
        *,
        caller: Caller,
        subject_id: int,
        label: str,
        mode: SessionMode | str = SessionMode.MANUAL,
        location: Optional[str] = None,
        thresholds: Optional[RecognitionThresholds] = None,
        now: datetime | None = None,
    ) -> int:
        policy.require_role(caller, {Role.TEACHER}, "Only teachers can create sessions")
        subject = self._directory.get_subject(int(subject_id))
        if not subject:
            raise NotFoundError("Subject not found")
        policy.can_create_session(caller, subject_teacher_id=subject.teacher_id)

        label = require_non_empty(label, "label")
        try:
            mode = SessionMode(mode)
        except ValueError:
            raise ValidationError(f"Unknown session mode: {mode}")

        now = now or now_local()
        session_id = self._sessions.create(
            subject_id=subject.subject_id,
            teacher_id=caller.profile_id,
            label=label,
            mode=mode,
            location=optional_text(location),
            thresholds=thresholds,
            now=now,
        )
        logger.info("session %s created for subject %s by teacher %s", session_id, subject.subject_id, caller.profile_id)
        return session_id

    def end_session(self, *, session_id: int, caller: Caller, now: datetime | None = None) -> int:
        session = self.get_session(session_id=session_id, caller=caller)
        if not session.active:
            raise InvalidTransitionError("Session has already ended")

        if not self._sessions.end(session_id=session.session_id, now=now or now_local()):
            # Lost a race with a concurrent end.
            raise InvalidTransitionError("Session has already ended")
        logger.info("session %s ended by teacher %s", session.session_id, caller.profile_id)
        return session.session_id

    def get_session(self, *, session_id: int, caller: Caller) -> AttendanceSession:
        session = self._sessions.get(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        policy.can_manage_session(caller, session_teacher_id=session.teacher_id)
        return session

    def list_active(self, *, caller: Caller) -> Sequence[AttendanceSession]:
        policy.require_role(caller, {Role.TEACHER}, "Only teachers have sessions")
        return self._sessions.list_active_for_teacher(teacher_id=caller.profile_id)
