"""Capability checks shared by the manual and recognition paths.

Every check takes the resolved Caller and raises PermissionDeniedError when the
action is not allowed, so services can call them as one-line guards.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .core.enums import Role
from .core.exceptions import PermissionDeniedError
from .directory.model import Caller


def require_role(caller: Caller, roles: Iterable[Role], message: str = "You do not have permission") -> None:
    if caller.role not in set(roles):
        raise PermissionDeniedError(message)


def can_create_session(caller: Caller, *, subject_teacher_id: int) -> None:
    require_role(caller, {Role.TEACHER}, "Only teachers can create sessions")
    if caller.profile_id != subject_teacher_id:
        raise PermissionDeniedError("You do not teach this subject")


def can_manage_session(caller: Caller, *, session_teacher_id: int) -> None:
    """Owning teacher only: end, process recognitions, read attempts and roster."""
    if caller.role != Role.TEACHER or caller.profile_id != session_teacher_id:
        raise PermissionDeniedError("Only the teacher who owns this session can do that")


def can_mark(caller: Caller, *, session_teacher_id: int, student_id: int, session_active: bool) -> None:
    if caller.role == Role.TEACHER and caller.profile_id == session_teacher_id:
        return
    if caller.role == Role.STUDENT and caller.profile_id == student_id:
        if not session_active:
            raise PermissionDeniedError("Session is no longer active")
        return
    raise PermissionDeniedError("You cannot mark attendance for this student")


def can_submit_leave(caller: Caller) -> None:
    require_role(caller, {Role.STUDENT}, "Only students can submit leave requests")


def can_review_leave(caller: Caller, *, assigned_teacher_id: Optional[int]) -> None:
    if caller.role == Role.ADMIN:
        return
    if caller.role == Role.TEACHER and assigned_teacher_id is not None and caller.profile_id == assigned_teacher_id:
        return
    raise PermissionDeniedError("You cannot review this leave request")


def can_view_recognition_stats(caller: Caller) -> None:
    require_role(caller, {Role.TEACHER, Role.ADMIN}, "Only teachers and admins can view recognition statistics")


def can_email_report(caller: Caller) -> None:
    require_role(caller, {Role.TEACHER, Role.ADMIN}, "Only teachers and admins can email reports")
