from __future__ import annotations

import threading
from typing import Dict, Optional, Sequence

from ..core.enums import ProfileStatus, Role
from .model import Caller, Profile, Subject
from .repository import ProfileDirectory


class InMemoryProfileDirectory(ProfileDirectory):
    """Dict-backed directory for demos, tests and STORAGE_BACKEND=memory."""

    def __init__(self, profiles: Sequence[Profile] = (), subjects: Sequence[Subject] = ()):
        self._lock = threading.Lock()
        self._profiles: Dict[int, Profile] = {p.profile_id: p for p in profiles}
        self._subjects: Dict[int, Subject] = {s.subject_id: s for s in subjects}

    def add_profile(self, profile: Profile) -> Profile:
        with self._lock:
            self._profiles[profile.profile_id] = profile
        return profile

    def add_subject(self, subject: Subject) -> Subject:
        with self._lock:
            self._subjects[subject.subject_id] = subject
        return subject

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        return self._profiles.get(int(profile_id))

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        return self._subjects.get(int(subject_id))

    def list_students(self, *, status: Optional[ProfileStatus] = ProfileStatus.APPROVED) -> Sequence[Profile]:
        with self._lock:
            profiles = sorted(self._profiles.values(), key=lambda p: p.profile_id)
        return [
            p
            for p in profiles
            if p.role == Role.STUDENT and (status is None or p.status == status)
        ]

    def resolve_caller(self, profile_id: int) -> Optional[Caller]:
        profile = self.get_profile(profile_id)
        if not profile:
            return None
        return Caller(profile_id=profile.profile_id, role=profile.role, name=profile.name)


def demo_directory() -> InMemoryProfileDirectory:
    """Same people as database/seed.sql, for STORAGE_BACKEND=memory."""
    return InMemoryProfileDirectory(
        profiles=[
            Profile(1, "Admin Demo", Role.ADMIN, ProfileStatus.APPROVED, email="admin@example.com"),
            Profile(2, "Teacher Demo", Role.TEACHER, ProfileStatus.APPROVED, email="teacher@example.com", department="Computer Science"),
            Profile(
                3,
                "Student A",
                Role.STUDENT,
                ProfileStatus.APPROVED,
                email="student.a@example.com",
                parent_email="parent.a@example.com",
                student_number="S-0001",
                department="Computer Science",
            ),
            Profile(
                4,
                "Student B",
                Role.STUDENT,
                ProfileStatus.APPROVED,
                email="student.b@example.com",
                parent_email="parent.b@example.com",
                student_number="S-0002",
                department="Computer Science",
            ),
        ],
        subjects=[Subject(1, "CS101", "Introduction to Programming", teacher_id=2, department="Computer Science")],
    )
