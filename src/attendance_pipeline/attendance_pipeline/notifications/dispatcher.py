from __future__ import annotations

import logging
from typing import Dict, Iterable, Sequence

from .channels import NotificationChannel
from .model import DeliveryResult, DispatchReport, NotificationJob

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Best-effort fan-out: every job gets exactly one attempt.

    A failure (raised or reported) is recorded against that job only and is
    never retried or re-queued.
    """

    def __init__(self, channels: Iterable[NotificationChannel]):
        self._channels: Dict[str, NotificationChannel] = {c.name: c for c in channels}

    def dispatch(self, jobs: Sequence[NotificationJob]) -> DispatchReport:
        results = tuple(self._send_one(job) for job in jobs)
        report = DispatchReport(results=results)
        if jobs:
            logger.info("dispatched %s/%s notifications", report.success_count, report.total_count)
        return report

    def _send_one(self, job: NotificationJob) -> DeliveryResult:
        channel = self._channels.get(job.channel)
        if channel is None:
            logger.warning("no channel %r for %s -> %s", job.channel, job.template_key, job.recipient)
            return DeliveryResult(
                recipient=job.recipient,
                success=False,
                audience=job.audience,
                reason=f"Unknown channel: {job.channel}",
            )

        try:
            response = channel.send(job.recipient, job.template_key, dict(job.payload))
        except Exception as e:
            logger.exception("send failed: %s -> %s", job.template_key, job.recipient)
            return DeliveryResult(recipient=job.recipient, success=False, audience=job.audience, reason=str(e) or type(e).__name__)

        if not response.success:
            logger.warning("send rejected: %s -> %s: %s", job.template_key, job.recipient, response.error)
            return DeliveryResult(
                recipient=job.recipient,
                success=False,
                audience=job.audience,
                reason=response.error or "Channel reported failure",
            )
        return DeliveryResult(
            recipient=job.recipient,
            success=True,
            audience=job.audience,
            message_id=response.message_id,
        )
