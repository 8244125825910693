from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..core.enums import Audience, NotificationKind


@dataclass(frozen=True)
class NotificationEvent:
    """What a committed mutation hands to the queue: one per mutation."""

    kind: NotificationKind
    entity_id: int
    occurred_at: datetime

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "entity_id": self.entity_id,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationEvent":
        return cls(
            kind=NotificationKind(data["kind"]),
            entity_id=int(data["entity_id"]),
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
        )


@dataclass(frozen=True)
class NotificationJob:
    channel: str
    recipient: str
    template_key: str
    audience: Audience
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChannelResponse:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class DeliveryResult:
    recipient: str
    success: bool
    audience: Audience
    reason: Optional[str] = None
    message_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "recipient": self.recipient,
            "success": self.success,
            "message_id": self.message_id,
            "error": self.reason,
        }


@dataclass(frozen=True)
class DispatchReport:
    results: Tuple[DeliveryResult, ...] = ()

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def total_count(self) -> int:
        return len(self.results)

    def delivered_to(self, audience: Audience) -> bool:
        return any(r.success and r.audience == audience for r in self.results)
