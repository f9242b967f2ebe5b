from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional

from ..core.constants import (
    REASON_DAILY_LIMIT,
    REASON_DESCRIPTOR_FORMAT,
    REASON_FACE_MISMATCH,
    REASON_NO_REFERENCE,
    REASON_WORKER_INACTIVE,
    REASON_WORKER_NOT_FOUND,
)
from ..core.enums import EventKind, EventOutcome
from ..core.exceptions import DistanceError
from ..matching.matcher import DescriptorMatcher
from ..workers.model import Worker
from .model import LedgerDecision
from .repository import EventRepository

logger = logging.getLogger(__name__)


def next_kind(today_kinds: Iterable[EventKind]) -> LedgerDecision:
    """Daily state machine: NoEvents -> HasEntry -> HasEntryAndExit.

    ``today_kinds`` are the kinds of today's accepted events for one worker.
    """

    kinds = set(today_kinds)
    if EventKind.ENTRY not in kinds:
        return LedgerDecision(kind=EventKind.ENTRY, outcome=EventOutcome.OK)
    if EventKind.EXIT not in kinds:
        return LedgerDecision(kind=EventKind.EXIT, outcome=EventOutcome.OK)
    return LedgerDecision(kind=EventKind.EXIT, outcome=EventOutcome.LIMIT_REACHED, reason=REASON_DAILY_LIMIT)


def _rejected(reason: str, distance: Optional[float] = None) -> LedgerDecision:
    return LedgerDecision(kind=EventKind.ENTRY, outcome=EventOutcome.REJECTED, reason=reason, distance=distance)


class AttendanceLedger:
    """Decides kind and outcome of one submission.

    Checks run in a fixed order; the first failing check wins. Only a
    face match reaches the daily state machine.
    """

    def __init__(self, events: EventRepository, matcher: DescriptorMatcher):
        self._events = events
        self._matcher = matcher

    def screen(self, worker: Optional[Worker], descriptor: Any) -> LedgerDecision:
        """Identity and face checks only.

        A rejection is final. An OK result is provisional until ``settle``
        has seen the worker's accepted events for the day.
        """

        if worker is None:
            return _rejected(REASON_WORKER_NOT_FOUND)
        if not worker.is_active:
            return _rejected(REASON_WORKER_INACTIVE)
        if not worker.reference_descriptor:
            return _rejected(REASON_NO_REFERENCE)

        try:
            distance = self._matcher.distance(descriptor, worker.reference_descriptor)
        except DistanceError as e:
            logger.info("Descriptor rejected for worker %s: %s", worker.worker_id, e)
            return _rejected(REASON_DESCRIPTOR_FORMAT)

        logger.debug(
            "Face check worker=%s dist=%.4f threshold=%.3f",
            worker.worker_id,
            distance,
            self._matcher.threshold,
        )
        if not self._matcher.is_match(distance):
            return _rejected(REASON_FACE_MISMATCH.format(distance=distance), distance)
        return LedgerDecision(kind=EventKind.ENTRY, outcome=EventOutcome.OK, distance=distance)

    @staticmethod
    def settle(matched: LedgerDecision, today_kinds: Iterable[EventKind]) -> LedgerDecision:
        decision = next_kind(today_kinds)
        return LedgerDecision(
            kind=decision.kind,
            outcome=decision.outcome,
            reason=decision.reason,
            distance=matched.distance,
        )

    def decide(self, worker: Optional[Worker], descriptor: Any, *, work_date: date) -> LedgerDecision:
        """``screen`` then ``settle`` with a plain read of today's events (no lock)."""

        decision = self.screen(worker, descriptor)
        if decision.outcome is not EventOutcome.OK:
            return decision
        return self.settle(decision, self._events.kinds_for_worker_on_date(worker.worker_id, work_date))
