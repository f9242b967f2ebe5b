from __future__ import annotations

import threading
from datetime import date, datetime
from typing import Optional

import pytest

from src.face_checkin.face_checkin.attendance.model import AttendanceEvent
from src.face_checkin.face_checkin.core.enums import EventKind, EventOutcome
from src.face_checkin.face_checkin.notifications.model import DeliveryResult
from src.face_checkin.face_checkin.subscriptions.model import AllowedPhone, Subscription
from src.face_checkin.face_checkin.workers.model import Worker


class InMemoryWorkers:
    def __init__(self):
        self.by_id: dict[int, Worker] = {}
        self._id = 0

    def add(self, name, surname, role, *, descriptor=None, is_active=True) -> Worker:
        self._id += 1
        worker = Worker(
            worker_id=self._id,
            name=name,
            surname=surname,
            role=role,
            is_active=is_active,
            reference_descriptor=descriptor,
        )
        self.by_id[worker.worker_id] = worker
        return worker

    def find_by_identity(self, name: str, surname: str, role: str) -> Optional[Worker]:
        key = (name.strip().lower(), surname.strip().lower(), role.strip().lower())
        for w in self.by_id.values():
            if (w.name.lower(), w.surname.lower(), w.role.lower()) == key:
                return w
        return None

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        return self.by_id.get(worker_id)

    def create_worker(self, *, name: str, surname: str, role: str) -> int:
        return self.add(name, surname, role).worker_id

    def set_reference(self, worker_id: int, *, descriptor, image_url) -> bool:
        w = self.by_id.get(worker_id)
        if not w:
            return False
        self.by_id[worker_id] = Worker(
            worker_id=w.worker_id,
            name=w.name,
            surname=w.surname,
            role=w.role,
            is_active=w.is_active,
            reference_descriptor=descriptor,
            reference_image_url=image_url or w.reference_image_url,
        )
        return True

    def set_active(self, worker_id: int, *, is_active: bool) -> bool:
        w = self.by_id.get(worker_id)
        if not w:
            return False
        self.by_id[worker_id] = Worker(
            worker_id=w.worker_id,
            name=w.name,
            surname=w.surname,
            role=w.role,
            is_active=is_active,
            reference_descriptor=w.reference_descriptor,
        )
        return True

    def delete_with_events(self, worker_id: int) -> bool:
        return self.by_id.pop(worker_id, None) is not None

    def list_admin_view(self, limit: int = 200):
        return [
            {"worker_id": w.worker_id, "name": w.name, "surname": w.surname, "role": w.role, "is_active": w.is_active}
            for w in sorted(self.by_id.values(), key=lambda w: w.worker_id, reverse=True)
        ][:limit]


class InMemoryEvents:
    def __init__(self):
        self.events: list[AttendanceEvent] = []
        self.fail_next_append = None
        self._day_lock = threading.Lock()

    def append(self, *, worker_id, site, kind, outcome, reason, image_ref, name, surname, role, created_at) -> int:
        if self.fail_next_append is not None:
            error, self.fail_next_append = self.fail_next_append, None
            raise error
        event = AttendanceEvent(
            event_id=len(self.events) + 1,
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
        self.events.append(event)
        return event.event_id

    def append_for_day(self, *, worker_id, work_date, settle, **fields):
        with self._day_lock:
            decision = settle(self.kinds_for_worker_on_date(worker_id, work_date))
            event_id = self.append(
                worker_id=worker_id,
                kind=decision.kind,
                outcome=decision.outcome,
                reason=decision.reason,
                **fields,
            )
        return event_id, decision

    def kinds_for_worker_on_date(self, worker_id: int, work_date: date, *, outcome=EventOutcome.OK):
        return [
            e.kind
            for e in self.events
            if e.worker_id == worker_id and e.created_at.date() == work_date and e.outcome == outcome
        ]

    def list_recent(self, limit: int):
        return sorted(self.events, key=lambda e: (e.created_at, e.event_id), reverse=True)[:limit]

    def delete_by_id(self, event_id: int) -> bool:
        before = len(self.events)
        self.events = [e for e in self.events if e.event_id != event_id]
        return len(self.events) < before


class InMemoryAllowList:
    def __init__(self):
        self.rows: dict[int, AllowedPhone] = {}
        self._id = 0

    def exists(self, phone: str) -> bool:
        return any(p.phone == phone for p in self.rows.values())

    def add(self, phone: str) -> int:
        self._id += 1
        self.rows[self._id] = AllowedPhone(phone_id=self._id, phone=phone)
        return self._id

    def list_all(self, limit: int = 500):
        return sorted(self.rows.values(), key=lambda p: p.phone_id, reverse=True)[:limit]

    def delete_by_id(self, phone_id: int) -> bool:
        return self.rows.pop(phone_id, None) is not None


class InMemorySubscriptions:
    def __init__(self):
        self.rows: dict[str, Subscription] = {}

    def upsert(self, chat_id: str, *, phone, is_active: bool) -> None:
        self.rows[str(chat_id)] = Subscription(chat_id=str(chat_id), phone=phone, is_active=is_active)

    def active_chat_ids(self):
        return [s.chat_id for s in self.rows.values() if s.is_active]


class FakeTransport:
    """Records calls; chats listed in ``fail_image`` / ``fail_text`` fail."""

    def __init__(self, *, fail_image=(), fail_text=(), raise_for=()):
        self.fail_image = set(fail_image)
        self.fail_text = set(fail_text)
        self.raise_for = set(raise_for)
        self.calls: list[tuple] = []
        self._lock = threading.Lock()

    def send_text(self, chat_id, text, *, reply_markup=None):
        with self._lock:
            self.calls.append(("text", chat_id, text, reply_markup))
        if chat_id in self.raise_for:
            raise RuntimeError("boom")
        if chat_id in self.fail_text:
            return DeliveryResult.failure("text failed")
        return DeliveryResult.success()

    def send_image_with_caption(self, chat_id, image_ref, caption):
        with self._lock:
            self.calls.append(("image", chat_id, image_ref, caption))
        if chat_id in self.raise_for:
            raise RuntimeError("boom")
        if chat_id in self.fail_image:
            return DeliveryResult.failure("image failed")
        return DeliveryResult.success()


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 0, 0)


@pytest.fixture()
def workers_repo() -> InMemoryWorkers:
    return InMemoryWorkers()


@pytest.fixture()
def events_repo() -> InMemoryEvents:
    return InMemoryEvents()


@pytest.fixture()
def allow_list_repo() -> InMemoryAllowList:
    return InMemoryAllowList()


@pytest.fixture()
def subscriptions_repo() -> InMemorySubscriptions:
    return InMemorySubscriptions()


@pytest.fixture()
def make_transport():
    return FakeTransport
