from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .attendance.memory_ledger_repository import InMemoryLedgerRepository
from .attendance.mysql_ledger_repository import MySQLLedgerRepository
from .attendance.repository import LedgerRepository
from .attendance.service import AttendanceLedgerService
from .database.connection import DBConfig, DatabaseConnection
from .directory.memory_directory import demo_directory
from .directory.mysql_directory import MySQLProfileDirectory
from .directory.repository import ProfileDirectory
from .leave.memory_leave_repository import InMemoryLeaveRepository
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .notifications.channels import LoggingChannel, NotificationChannel
from .notifications.dispatcher import NotificationDispatcher
from .notifications.planner import NotificationPlanner
from .notifications.queue import InProcessNotificationQueue, NotificationQueue
from .notifications.service import NotificationService
from .recognition.gate import DEFAULT_THRESHOLDS, RecognitionThresholds
from .recognition.memory_recognition_repository import InMemoryRecognitionAttemptRepository
from .recognition.mysql_recognition_repository import MySQLRecognitionAttemptRepository
from .recognition.repository import RecognitionAttemptRepository
from .recognition.service import RecognitionService
from .reports.leaderboard import LeaderboardService
from .reports.service import ReportService
from .sessions.memory_session_repository import InMemorySessionRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = {"mysql", "memory"}
NOTIFICATION_BACKENDS = {"inprocess", "celery"}


@dataclass(frozen=True)
class Repositories:
    directory: ProfileDirectory
    sessions: SessionRepository
    ledger: LedgerRepository
    attempts: RecognitionAttemptRepository
    leaves: LeaveRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    notification_queue: NotificationQueue
    notification_service: NotificationService

    session_service: SessionService
    ledger_service: AttendanceLedgerService
    recognition_service: RecognitionService
    leave_service: LeaveService
    leaderboard_service: LeaderboardService
    report_service: ReportService

    @property
    def directory(self) -> ProfileDirectory:
        return self.repos.directory


def build_repositories(
    *,
    storage_backend: str = "mysql",
    db_config: Optional[dict] = None,
    directory: Optional[ProfileDirectory] = None,
) -> Repositories:
    if storage_backend not in STORAGE_BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {sorted(STORAGE_BACKENDS)}, got {storage_backend!r}")

    if storage_backend == "memory":
        return Repositories(
            directory=directory or demo_directory(),
            sessions=InMemorySessionRepository(),
            ledger=InMemoryLedgerRepository(),
            attempts=InMemoryRecognitionAttemptRepository(),
            leaves=InMemoryLeaveRepository(),
        )

    if not db_config:
        raise ValueError("DB_CONFIG is required for the mysql storage backend")
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return Repositories(
        directory=directory or MySQLProfileDirectory(conn),
        sessions=MySQLSessionRepository(conn),
        ledger=MySQLLedgerRepository(conn),
        attempts=MySQLRecognitionAttemptRepository(conn),
        leaves=MySQLLeaveRepository(conn),
    )


def _dispatcher(channels: Optional[Iterable[NotificationChannel]]) -> NotificationDispatcher:
    return NotificationDispatcher(list(channels) if channels is not None else [LoggingChannel()])


def _notification_service(repos: Repositories, dispatcher: NotificationDispatcher) -> NotificationService:
    planner = NotificationPlanner(repos.directory, repos.sessions, repos.ledger, repos.leaves)
    return NotificationService(planner, dispatcher, repos.ledger, repos.leaves)


def build_notification_service(settings: Any, *, channels: Optional[Iterable[NotificationChannel]] = None) -> NotificationService:
    """Worker-side wiring, used by the Celery task process."""
    repos = build_repositories(
        storage_backend=getattr(settings, "STORAGE_BACKEND", "mysql"),
        db_config=getattr(settings, "DB_CONFIG", None),
    )
    return _notification_service(repos, _dispatcher(channels))


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage_backend: str = "mysql",
    notification_backend: str = "inprocess",
    thresholds: Optional[RecognitionThresholds] = None,
    directory: Optional[ProfileDirectory] = None,
    channels: Optional[Iterable[NotificationChannel]] = None,
    notification_queue: Optional[NotificationQueue] = None,
) -> Container:
    repos = build_repositories(storage_backend=storage_backend, db_config=db_config, directory=directory)
    dispatcher = _dispatcher(channels)
    notification_service = _notification_service(repos, dispatcher)

    if notification_queue is None:
        if notification_backend not in NOTIFICATION_BACKENDS:
            raise ValueError(
                f"NOTIFICATION_BACKEND must be one of {sorted(NOTIFICATION_BACKENDS)}, got {notification_backend!r}"
            )
        if notification_backend == "celery" and storage_backend == "memory":
            raise ValueError("NOTIFICATION_BACKEND=celery needs shared storage; STORAGE_BACKEND=memory is not visible to workers")
        if notification_backend == "celery":
            # Imported here so the web process only needs a broker when it is configured.
            from .notifications.celery_queue import CeleryNotificationQueue

            notification_queue = CeleryNotificationQueue()
        else:
            notification_queue = InProcessNotificationQueue(notification_service.handle)

    session_service = SessionService(repos.sessions, repos.directory)
    ledger_service = AttendanceLedgerService(repos.ledger, repos.sessions, repos.directory, notification_queue)
    recognition_service = RecognitionService(
        repos.attempts,
        repos.sessions,
        repos.directory,
        ledger_service,
        default_thresholds=thresholds or DEFAULT_THRESHOLDS,
    )
    leave_service = LeaveService(repos.leaves, repos.directory, notification_queue)
    leaderboard_service = LeaderboardService(repos.ledger, repos.directory)
    report_service = ReportService(repos.ledger, repos.sessions, repos.directory, repos.attempts, dispatcher)

    logger.info("container ready: storage=%s notifications=%s", storage_backend, type(notification_queue).__name__)
    return Container(
        repos=repos,
        notification_queue=notification_queue,
        notification_service=notification_service,
        session_service=session_service,
        ledger_service=ledger_service,
        recognition_service=recognition_service,
        leave_service=leave_service,
        leaderboard_service=leaderboard_service,
        report_service=report_service,
    )
