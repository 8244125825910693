from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ProfileStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Caller, Profile, Subject
from .repository import ProfileDirectory

_PROFILE_COLUMNS = "profile_id, name, email, role, status, student_number, department, parent_email"


def _to_profile(r: dict) -> Profile:
    return Profile(
        profile_id=int(r["profile_id"]),
        name=r["name"],
        role=Role(r["role"]),
        status=ProfileStatus(r["status"]),
        email=r.get("email"),
        parent_email=r.get("parent_email"),
        student_number=r.get("student_number"),
        department=r.get("department"),
    )


class MySQLProfileDirectory(ProfileDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE profile_id=%s",
                (int(profile_id),),
            )
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, code, name, teacher_id, department
                FROM subjects
                WHERE subject_id=%s AND is_active=1
                """,
                (int(subject_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Subject(
                subject_id=int(r["subject_id"]),
                code=r["code"],
                name=r["name"],
                teacher_id=int(r["teacher_id"]),
                department=r.get("department"),
            )

    def list_students(self, *, status: Optional[ProfileStatus] = ProfileStatus.APPROVED) -> Sequence[Profile]:
        clauses = ["role=%s"]
        params: list[object] = [Role.STUDENT.value]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PROFILE_COLUMNS}
                FROM user_profiles
                WHERE {" AND ".join(clauses)}
                ORDER BY profile_id
                """,
                tuple(params),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def resolve_caller(self, profile_id: int) -> Optional[Caller]:
        profile = self.get_profile(profile_id)
        if not profile:
            return None
        return Caller(profile_id=profile.profile_id, role=profile.role, name=profile.name)
