from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence, Tuple

from ..core.enums import EventKind, EventOutcome
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceEvent, LedgerDecision
from .repository import EventRepository


def _insert_event(
    cur,
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
    cur.execute(
        """
        INSERT INTO attendance_events
            (worker_id, site, kind, outcome, reason, image_ref, name, surname, role, created_at)
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (worker_id, site, kind.value, outcome.value, reason, image_ref, name, surname, role, created_at),
    )
    return int(cur.lastrowid)


def _select_kinds(cur, worker_id: int, work_date: date, outcome: EventOutcome) -> list[EventKind]:
    day_start = datetime.combine(work_date, datetime.min.time())
    # Range predicate keeps ix_events_worker_day usable.
    cur.execute(
        """
        SELECT kind
        FROM attendance_events
        WHERE worker_id=%s AND outcome=%s AND created_at >= %s AND created_at < %s
        ORDER BY created_at
        """,
        (int(worker_id), outcome.value, day_start, day_start + timedelta(days=1)),
    )
    return [EventKind(r["kind"]) for r in fetchall(cur)]


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert_event(
                cur,
                worker_id=worker_id,
                site=site,
                kind=kind,
                outcome=outcome,
                reason=reason,
                image_ref=image_ref,
                name=name,
                surname=surname,
                role=role,
                created_at=created_at,
            )

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
        with db_cursor(self._conn_factory) as (_, cur):
            # The worker row lock serializes concurrent submissions for one worker.
            cur.execute("SELECT worker_id FROM workers WHERE worker_id=%s FOR UPDATE", (int(worker_id),))
            fetchall(cur)
            decision = settle(_select_kinds(cur, worker_id, work_date, EventOutcome.OK))
            event_id = _insert_event(
                cur,
                worker_id=worker_id,
                kind=decision.kind,
                outcome=decision.outcome,
                reason=decision.reason,
                image_ref=image_ref,
                site=site,
                name=name,
                surname=surname,
                role=role,
                created_at=created_at,
            )
        return event_id, decision

    def kinds_for_worker_on_date(
        self,
        worker_id: int,
        work_date: date,
        *,
        outcome: EventOutcome = EventOutcome.OK,
    ) -> Sequence[EventKind]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _select_kinds(cur, worker_id, work_date, outcome)

    def list_recent(self, limit: int) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, worker_id, site, kind, outcome, reason, image_ref,
                       name, surname, role, created_at
                FROM attendance_events
                ORDER BY created_at DESC, event_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                AttendanceEvent(
                    event_id=int(r["event_id"]),
                    worker_id=r.get("worker_id"),
                    site=r["site"],
                    kind=EventKind(r["kind"]),
                    outcome=EventOutcome(r["outcome"]),
                    reason=r.get("reason"),
                    image_ref=r["image_ref"],
                    name=r["name"],
                    surname=r["surname"],
                    role=r["role"],
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def delete_by_id(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
