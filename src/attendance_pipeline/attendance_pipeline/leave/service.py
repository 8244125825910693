from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from .. import policy
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, NotificationKind, Role
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..directory.model import Caller
from ..directory.repository import ProfileDirectory
from ..notifications.model import NotificationEvent
from ..notifications.queue import NotificationQueue, enqueue_safely
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave approval workflow: pending -> approved | rejected, never back."""

    def __init__(self, leaves: LeaveRepository, directory: ProfileDirectory, notifications: NotificationQueue):
        self._leaves = leaves
        self._directory = directory
        self._notifications = notifications

    def submit(
        self,
        *,
        caller: Caller,
        start_date: date,
        end_date: date,
        reason: str,
        description: Optional[str] = None,
        subject_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> int:
        policy.can_submit_leave(caller)

        reason = require_non_empty(reason, "reason")
        if end_date <= start_date:
            raise ValidationError("end_date must be after start_date")

        if subject_id is not None:
            subject = self._directory.get_subject(int(subject_id))
            if not subject:
                raise NotFoundError("Subject not found")
            if teacher_id is None:
                teacher_id = subject.teacher_id

        if teacher_id is not None:
            teacher = self._directory.get_profile(int(teacher_id))
            if not teacher or teacher.role != Role.TEACHER:
                raise NotFoundError("Teacher not found")

        now = now or now_local()
        request_id = self._leaves.create(
            student_id=caller.profile_id,
            subject_id=int(subject_id) if subject_id is not None else None,
            teacher_id=int(teacher_id) if teacher_id is not None else None,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            description=optional_text(description),
            now=now,
        )
        logger.info("leave request %s submitted by student %s", request_id, caller.profile_id)

        enqueue_safely(
            self._notifications,
            NotificationEvent(kind=NotificationKind.LEAVE_SUBMITTED, entity_id=request_id, occurred_at=now),
        )
        return request_id

    def review(
        self,
        *,
        request_id: int,
        status: LeaveStatus | str,
        caller: Caller,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> int:
        req = self._leaves.get(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        policy.can_review_leave(caller, assigned_teacher_id=req.teacher_id)

        try:
            status = LeaveStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown leave status: {status}")
        if status == LeaveStatus.PENDING:
            raise ValidationError("A review must approve or reject")

        if req.status != LeaveStatus.PENDING:
            raise InvalidTransitionError(f"Leave request already {req.status.value}")

        now = now or now_local()
        decided = self._leaves.decide(
            request_id=req.request_id,
            status=status,
            reviewed_by=caller.profile_id,
            review_notes=optional_text(notes),
            now=now,
        )
        if not decided:
            raise InvalidTransitionError("Leave request was reviewed concurrently")
        logger.info("leave request %s %s by %s", req.request_id, status.value, caller.profile_id)

        enqueue_safely(
            self._notifications,
            NotificationEvent(kind=NotificationKind.LEAVE_REVIEWED, entity_id=req.request_id, occurred_at=now),
        )
        return req.request_id

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        return self._leaves.get(int(request_id))

    def list_mine(self, *, caller: Caller, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        policy.can_submit_leave(caller)
        return self._leaves.list_for_student(student_id=caller.profile_id, limit=limit)

    def list_assigned(
        self,
        *,
        caller: Caller,
        status: LeaveStatus | str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        policy.require_role(caller, {Role.TEACHER}, "Only teachers have assigned leave requests")
        if status is not None:
            try:
                status = LeaveStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown leave status: {status}")
        return self._leaves.list_for_teacher(teacher_id=caller.profile_id, status=status, limit=limit)
