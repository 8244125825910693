from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ProfileStatus, Role


@dataclass(frozen=True)
class Profile:
    profile_id: int
    name: str
    role: Role
    status: ProfileStatus
    email: Optional[str] = None
    parent_email: Optional[str] = None
    student_number: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class Subject:
    subject_id: int
    code: str
    name: str
    teacher_id: int
    department: Optional[str] = None


@dataclass(frozen=True)
class Caller:
    """Authenticated principal for one request."""

    profile_id: int
    role: Role
    name: str = ""
