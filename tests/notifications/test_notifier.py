from __future__ import annotations

import threading

import pytest

from src.face_checkin.face_checkin.core.enums import DeliveryStatus
from src.face_checkin.face_checkin.core.exceptions import PersistenceError
from src.face_checkin.face_checkin.notifications.notifier import Notifier


class StaticSubscribers:
    def __init__(self, chat_ids, error=None):
        self._chat_ids = list(chat_ids)
        self._error = error

    def active_subscribers(self):
        if self._error is not None:
            raise self._error
        return self._chat_ids


@pytest.fixture()
def build():
    notifiers = []

    def _build(chat_ids, transport, **kwargs):
        notifier = Notifier(StaticSubscribers(chat_ids, **kwargs), transport, max_workers=3)
        notifiers.append(notifier)
        return notifier

    yield _build
    for n in notifiers:
        n.shutdown()


def test_no_subscribers_is_a_noop(build, make_transport):
    transport = make_transport()
    result = build([], transport).notify("hello", "/tmp/a.jpg")

    assert result.deliveries == ()
    assert result.success_count == 0
    assert transport.calls == []


def test_one_failing_subscriber_is_isolated(build, make_transport):
    transport = make_transport(fail_image={"3"}, fail_text={"3"})
    result = build(["1", "2", "3", "4"], transport).notify("event", "/tmp/a.jpg")

    assert result.success_count == 3
    assert result.failure_count == 1
    assert [d.chat_id for d in result.failed] == ["3"]
    assert "image failed" in result.failed[0].error


def test_image_failure_falls_back_to_text(build, make_transport):
    transport = make_transport(fail_image={"1"})
    result = build(["1"], transport).notify("event text", "/tmp/a.jpg")

    assert result.deliveries[0].status == DeliveryStatus.SENT_TEXT_FALLBACK
    kinds = [c[0] for c in transport.calls]
    assert kinds == ["image", "text"]
    fallback_text = transport.calls[1][2]
    assert fallback_text.startswith("event text")
    assert fallback_text.endswith("(image could not be attached)")


def test_text_only_message_is_sent_once(build, make_transport):
    transport = make_transport()
    result = build(["1", "2"], transport).notify("plain")

    assert {d.status for d in result.deliveries} == {DeliveryStatus.SENT}
    assert sorted(c[1] for c in transport.calls) == ["1", "2"]
    assert all(c[0] == "text" and c[2] == "plain" for c in transport.calls)


def test_raising_transport_does_not_escape(build, make_transport):
    transport = make_transport(raise_for={"2"})
    result = build(["1", "2"], transport).notify("event", "/tmp/a.jpg")

    assert result.success_count == 1
    assert result.failed[0].chat_id == "2"
    assert result.failed[0].status == DeliveryStatus.FAILED


def test_duplicate_chat_ids_are_delivered_once(build, make_transport):
    transport = make_transport()
    result = build(["1", "1", "2"], transport).notify("event")

    assert len(result.deliveries) == 2
    assert len(transport.calls) == 2


def test_subscriber_store_failure_is_swallowed(build, make_transport):
    transport = make_transport()
    result = build(["1"], transport, error=PersistenceError("down")).notify("event")

    assert result.deliveries == ()
    assert transport.calls == []


def test_notify_async_runs_in_background(build, make_transport):
    transport = make_transport()
    future = build(["1", "2"], transport).notify_async("event", None)

    result = future.result(timeout=5)
    assert result.success_count == 2


def test_notify_async_after_shutdown_returns_none(make_transport):
    notifier = Notifier(StaticSubscribers(["1"]), make_transport())
    notifier.shutdown()

    assert notifier.notify_async("late") is None


class GatedTransport:
    def __init__(self, inner):
        self.inner = inner
        self.gate = threading.Event()

    def send_text(self, chat_id, text, *, reply_markup=None):
        self.gate.wait(timeout=5)
        return self.inner.send_text(chat_id, text, reply_markup=reply_markup)

    def send_image_with_caption(self, chat_id, image_ref, caption):
        self.gate.wait(timeout=5)
        return self.inner.send_image_with_caption(chat_id, image_ref, caption)


def test_notify_async_drops_messages_beyond_backlog(make_transport):
    transport = GatedTransport(make_transport())
    notifier = Notifier(StaticSubscribers(["1"]), transport, max_pending=2)
    try:
        first = notifier.notify_async("one")
        second = notifier.notify_async("two")
        dropped = notifier.notify_async("three")

        assert first is not None and second is not None
        assert dropped is None

        transport.gate.set()
        assert first.result(timeout=5).success_count == 1
        assert second.result(timeout=5).success_count == 1

        later = notifier.notify_async("four")
        assert later is not None
        assert later.result(timeout=5).success_count == 1
        assert [c[2] for c in transport.inner.calls] == ["one", "two", "four"]
    finally:
        notifier.shutdown()
