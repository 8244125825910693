from __future__ import annotations

import logging
from datetime import datetime

from ..attendance.repository import LedgerRepository
from ..common.datetime_utils import now_local
from ..core.enums import Audience, NotificationKind
from ..leave.repository import LeaveRepository
from .dispatcher import NotificationDispatcher
from .model import DispatchReport, NotificationEvent
from .planner import NotificationPlanner

logger = logging.getLogger(__name__)


class NotificationService:
    """Worker-side handler: plan, dispatch, then record who was reached.

    Runs after the triggering write has committed. It never raises, so a broken
    notification can never surface in the mutation that caused it.
    """

    def __init__(
        self,
        planner: NotificationPlanner,
        dispatcher: NotificationDispatcher,
        ledger: LedgerRepository,
        leaves: LeaveRepository,
    ):
        self._planner = planner
        self._dispatcher = dispatcher
        self._ledger = ledger
        self._leaves = leaves

    def handle(self, event: NotificationEvent, *, now: datetime | None = None) -> DispatchReport:
        try:
            jobs = self._planner.plan(event)
            if jobs is None:
                return DispatchReport()
            report = self._dispatcher.dispatch(jobs)
            self._record_delivery(event, report, now=now or now_local())
            return report
        except Exception:
            logger.exception("notification handling failed for %s %s", event.kind.value, event.entity_id)
            return DispatchReport()

    def _record_delivery(self, event: NotificationEvent, report: DispatchReport, *, now: datetime) -> None:
        if event.kind == NotificationKind.ATTENDANCE_MARKED:
            if report.delivered_to(Audience.PARENT):
                self._ledger.mark_parent_notified(record_id=event.entity_id, now=now)
        elif event.kind == NotificationKind.LEAVE_SUBMITTED:
            teacher = report.delivered_to(Audience.TEACHER)
            parent = report.delivered_to(Audience.PARENT)
            if teacher or parent:
                self._leaves.set_notified(
                    request_id=event.entity_id,
                    teacher=True if teacher else None,
                    parent=True if parent else None,
                )
        # leave_reviewed: delivery is logged only; the submission flags stay as they are.
