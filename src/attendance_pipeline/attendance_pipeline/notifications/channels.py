from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Protocol

from ..core.constants import EMAIL_CHANNEL
from .model import ChannelResponse

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Transport boundary. Implementations may raise NotificationError or return success=False."""

    name: str

    def send(self, recipient: str, template_key: str, data: Dict[str, Any]) -> ChannelResponse:
        raise NotImplementedError


class LoggingChannel(NotificationChannel):
    """Writes the message contract to the log instead of delivering it.

    Stands in for the email transport, which lives outside this service.
    """

    def __init__(self, name: str = EMAIL_CHANNEL):
        self.name = name

    def send(self, recipient: str, template_key: str, data: Dict[str, Any]) -> ChannelResponse:
        message_id = uuid.uuid4().hex
        logger.info(
            "[%s] %s -> %s (%s): %s",
            self.name,
            template_key,
            recipient,
            message_id,
            json.dumps(data, default=str, sort_keys=True),
        )
        return ChannelResponse(success=True, message_id=message_id)
