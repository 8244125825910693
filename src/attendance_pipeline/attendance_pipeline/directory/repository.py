from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ProfileStatus
from .model import Caller, Profile, Subject


class ProfileDirectory(Protocol):
    """Read-only view over profiles and subjects owned by the identity system."""

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def list_students(self, *, status: Optional[ProfileStatus] = ProfileStatus.APPROVED) -> Sequence[Profile]:
        raise NotImplementedError

    def resolve_caller(self, profile_id: int) -> Optional[Caller]:
        raise NotImplementedError
