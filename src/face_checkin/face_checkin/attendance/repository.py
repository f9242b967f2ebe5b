from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence, Tuple

from ..core.enums import EventKind, EventOutcome
from .model import AttendanceEvent, LedgerDecision


class EventRepository(Protocol):
    """Append-only event log; one row per submission."""

    def append(
        self,
        *,
        worker_id: Optional[int],
        site: str,
        kind: EventKind,
        outcome: EventOutcome,
        reason: Optional[str],
        image_ref: str,
        name: str,
        surname: str,
        role: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def append_for_day(
        self,
        *,
        worker_id: int,
        work_date: date,
        settle: Callable[[Sequence[EventKind]], LedgerDecision],
        site: str,
        image_ref: str,
        name: str,
        surname: str,
        role: str,
        created_at: datetime,
    ) -> Tuple[int, LedgerDecision]:
        """Append the event ``settle`` derives from the worker's accepted kinds for ``work_date``.

        Reading the kinds and appending happen atomically per worker.
        """
        raise NotImplementedError

    def kinds_for_worker_on_date(
        self,
        worker_id: int,
        work_date: date,
        *,
        outcome: EventOutcome = EventOutcome.OK,
    ) -> Sequence[EventKind]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def delete_by_id(self, event_id: int) -> bool:
        raise NotImplementedError
