from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_RECENT_EVENTS_LIMIT
from ..core.enums import EventOutcome
from ..core.exceptions import NotFoundError
from ..notifications.notifier import Notifier
from ..workers.repository import WorkerRepository
from .ledger import AttendanceLedger
from .model import AttendanceEvent, AttendanceSubmission, LedgerDecision, SubmissionResult
from .repository import EventRepository

logger = logging.getLogger(__name__)


def format_event_message(submission: AttendanceSubmission, decision: LedgerDecision, when: datetime) -> str:
    return (
        "Attendance notification\n"
        f"Worker: {submission.name} {submission.surname}\n"
        f"Role: {submission.role}\n"
        f"Site: {submission.site}\n"
        f"Event: {decision.kind.value}\n"
        f"Status: {decision.outcome.value}\n"
        f"Note: {decision.reason or '-'}\n"
        f"Time: {when.strftime('%Y-%m-%d %H:%M:%S')}"
    )


class AttendanceService:
    """Use case: record a face-gated check-in/check-out and announce it.

    The event is persisted before any notification is attempted; the
    notification runs in the background and cannot change the result.
    """

    def __init__(
        self,
        workers: WorkerRepository,
        events: EventRepository,
        ledger: AttendanceLedger,
        notifier: Optional[Notifier] = None,
    ):
        self._workers = workers
        self._events = events
        self._ledger = ledger
        self._notifier = notifier

    def submit(self, submission: AttendanceSubmission, *, now: Optional[datetime] = None) -> SubmissionResult:
        now = now or now_local()

        worker = self._workers.find_by_identity(submission.name, submission.surname, submission.role)
        decision = self._ledger.screen(worker, submission.descriptor)

        # PersistenceError propagates: nothing was recorded, nothing is announced.
        if decision.outcome is EventOutcome.OK:
            matched = decision
            event_id, decision = self._events.append_for_day(
                worker_id=worker.worker_id,
                work_date=now.date(),
                settle=lambda kinds: self._ledger.settle(matched, kinds),
                site=submission.site,
                image_ref=submission.image_ref,
                name=submission.name,
                surname=submission.surname,
                role=submission.role,
                created_at=now,
            )
        else:
            event_id = self._events.append(
                worker_id=worker.worker_id if worker else None,
                site=submission.site,
                kind=decision.kind,
                outcome=decision.outcome,
                reason=decision.reason,
                image_ref=submission.image_ref,
                name=submission.name,
                surname=submission.surname,
                role=submission.role,
                created_at=now,
            )
        logger.info(
            "Event %s recorded: worker=%s site=%s kind=%s outcome=%s reason=%s",
            event_id,
            worker.worker_id if worker else None,
            submission.site,
            decision.kind.value,
            decision.outcome.value,
            decision.reason,
        )

        if self._notifier is not None:
            self._notifier.notify_async(format_event_message(submission, decision, now), submission.image_ref)
        else:
            logger.debug("No notifier configured; event %s not announced", event_id)

        return SubmissionResult(
            event_id=event_id,
            outcome=decision.outcome,
            kind=decision.kind,
            reason=decision.reason,
            image_ref=submission.image_ref,
        )

    def recent_events(self, limit: int = DEFAULT_RECENT_EVENTS_LIMIT) -> Sequence[AttendanceEvent]:
        return self._events.list_recent(limit)

    def delete_event(self, event_id: int) -> None:
        if not self._events.delete_by_id(event_id):
            raise NotFoundError("event not found")
