from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .attendance.ledger import AttendanceLedger
from .attendance.mysql_event_repository import MySQLEventRepository
from .attendance.repository import EventRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_FACE_THRESHOLD,
    DEFAULT_NOTIFY_MAX_PENDING,
    DEFAULT_NOTIFY_MAX_WORKERS,
    DEFAULT_NOTIFY_TIMEOUT_SECONDS,
)
from .database.connection import DatabaseConnection, DBConfig
from .matching.matcher import DescriptorMatcher
from .notifications.notifier import Notifier
from .notifications.transport import TelegramTransport, Transport
from .subscriptions.mysql_subscription_repository import MySQLAllowListRepository, MySQLSubscriptionRepository
from .subscriptions.service import SubscriptionRegistry
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.repository import WorkerRepository
from .workers.service import WorkerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    workers_repo: WorkerRepository
    events_repo: EventRepository

    matcher: DescriptorMatcher
    subscription_registry: SubscriptionRegistry
    transport: Optional[Transport]
    notifier: Optional[Notifier]

    worker_service: WorkerService
    attendance_service: AttendanceService

    def close(self) -> None:
        if self.notifier is not None:
            self.notifier.shutdown(wait=True)
        close_transport = getattr(self.transport, "close", None)
        if close_transport is not None:
            close_transport()


def build_container(
    *,
    db_config: dict,
    face_threshold: float = DEFAULT_FACE_THRESHOLD,
    telegram_bot_token: Optional[str] = None,
    notify_max_workers: int = DEFAULT_NOTIFY_MAX_WORKERS,
    notify_timeout_seconds: float = DEFAULT_NOTIFY_TIMEOUT_SECONDS,
    notify_max_pending: int = DEFAULT_NOTIFY_MAX_PENDING,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    workers_repo = MySQLWorkerRepository(conn)
    events_repo = MySQLEventRepository(conn)
    registry = SubscriptionRegistry(MySQLAllowListRepository(conn), MySQLSubscriptionRepository(conn))

    transport: Optional[Transport] = None
    notifier: Optional[Notifier] = None
    if telegram_bot_token:
        transport = TelegramTransport(telegram_bot_token, timeout=notify_timeout_seconds)
        notifier = Notifier(
            registry,
            transport,
            max_workers=notify_max_workers,
            max_pending=notify_max_pending,
        )
    else:
        logger.warning("TELEGRAM_BOT_TOKEN is not set; notifications are disabled")

    matcher = DescriptorMatcher(face_threshold)
    ledger = AttendanceLedger(events_repo, matcher)

    return Container(
        conn=conn,
        workers_repo=workers_repo,
        events_repo=events_repo,
        matcher=matcher,
        subscription_registry=registry,
        transport=transport,
        notifier=notifier,
        worker_service=WorkerService(workers_repo),
        attendance_service=AttendanceService(workers_repo, events_repo, ledger, notifier),
    )
