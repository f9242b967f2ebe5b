from __future__ import annotations

import base64
import io

import pytest

from src.face_checkin.face_checkin.attendance.ledger import AttendanceLedger
from src.face_checkin.face_checkin.attendance.service import AttendanceService
from src.face_checkin.face_checkin.container import Container
from src.face_checkin.face_checkin.main import create_app
from src.face_checkin.face_checkin.matching.matcher import DescriptorMatcher
from src.face_checkin.face_checkin.subscriptions.service import SubscriptionRegistry
from src.face_checkin.face_checkin.workers.service import WorkerService

ADMIN = {"Authorization": "Basic " + base64.b64encode(b"admin:secret").decode()}


@pytest.fixture()
def transport(make_transport):
    return make_transport()


@pytest.fixture()
def app(tmp_path, workers_repo, events_repo, allow_list_repo, subscriptions_repo, transport):
    matcher = DescriptorMatcher(0.55)
    container = Container(
        conn=None,
        workers_repo=workers_repo,
        events_repo=events_repo,
        matcher=matcher,
        subscription_registry=SubscriptionRegistry(allow_list_repo, subscriptions_repo),
        transport=transport,
        notifier=None,
        worker_service=WorkerService(workers_repo),
        attendance_service=AttendanceService(workers_repo, events_repo, AttendanceLedger(events_repo, matcher)),
    )
    app = create_app(container, settings_module="config.testing")
    app.config["UPLOAD_DIR"] = str(tmp_path)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _attendance_form(**overrides):
    form = {
        "name": "Ali",
        "surname": "Veli",
        "role": "Guard",
        "site": "Gate A",
        "descriptor": "[0, 0, 0]",
        "photo": (io.BytesIO(b"\xff\xd8fake"), "capture.jpg"),
    }
    form.update(overrides)
    return form


def test_submit_attendance_records_entry(client, workers_repo, events_repo, tmp_path):
    workers_repo.add("Ali", "Veli", "Guard", descriptor=[0.0, 0.0, 0.0])

    resp = client.post("/api/attendance", data=_attendance_form(), content_type="multipart/form-data")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert body["outcome"] == "OK"
    assert body["kind"] == "ENTRY"
    assert body["image_url"].startswith("/uploads/events/event_")
    assert len(events_repo.events) == 1
    assert list((tmp_path / "events").iterdir())


def test_submit_attendance_without_descriptor_is_rejected_early(client, events_repo, tmp_path):
    resp = client.post(
        "/api/attendance",
        data=_attendance_form(descriptor=""),
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert "descriptor" in resp.get_json()["error"]
    assert events_repo.events == []
    assert list((tmp_path / "events").iterdir()) == []


def test_submit_attendance_without_photo(client, events_repo):
    form = _attendance_form()
    form.pop("photo")

    resp = client.post("/api/attendance", data=form, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert events_repo.events == []


def test_admin_endpoints_require_basic_auth(client):
    resp = client.get("/api/admin/workers")

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"].startswith("Basic")

    wrong = {"Authorization": "Basic " + base64.b64encode(b"admin:nope").decode()}
    assert client.get("/api/admin/workers", headers=wrong).status_code == 401


def test_admin_enrolls_worker_and_rejects_duplicate(client):
    first = client.post("/api/admin/workers", json={"name": "Ali", "surname": "Veli", "role": "Guard"}, headers=ADMIN)
    dup = client.post("/api/admin/workers", json={"name": "ALI", "surname": "veli", "role": "guard"}, headers=ADMIN)

    assert first.status_code == 200
    assert dup.status_code == 409
    listed = client.get("/api/admin/workers", headers=ADMIN).get_json()
    assert [w["name"] for w in listed] == ["Ali"]


def test_admin_updates_reference_and_toggles_active(client, workers_repo):
    worker = workers_repo.add("Ali", "Veli", "Guard")

    ref = client.post(
        f"/api/admin/workers/{worker.worker_id}/reference",
        data={"descriptor": "[0.1, 0.2]"},
        headers=ADMIN,
    )
    off = client.post(f"/api/admin/workers/{worker.worker_id}/active", json={"active": False}, headers=ADMIN)
    missing = client.post("/api/admin/workers/999/active", json={"active": True}, headers=ADMIN)

    assert ref.status_code == 200
    assert workers_repo.get_by_id(worker.worker_id).reference_descriptor == [0.1, 0.2]
    assert off.status_code == 200
    assert workers_repo.get_by_id(worker.worker_id).is_active is False
    assert missing.status_code == 404


def test_admin_allowed_phones(client):
    added = client.post("/api/admin/telegram/allowed", json={"phone": "0099123456"}, headers=ADMIN)
    dup = client.post("/api/admin/telegram/allowed", json={"phone": "+99123456"}, headers=ADMIN)
    listed = client.get("/api/admin/telegram/allowed", headers=ADMIN).get_json()

    assert added.get_json()["phone"] == "+99123456"
    assert dup.status_code == 409
    assert [p["phone"] for p in listed] == ["+99123456"]

    removed = client.delete(f"/api/admin/telegram/allowed/{added.get_json()['id']}", headers=ADMIN)
    assert removed.status_code == 200


def test_webhook_start_requests_contact(client, transport, subscriptions_repo):
    resp = client.post("/telegram/webhook", json={"message": {"chat": {"id": 77}, "text": "/start"}})

    assert resp.get_json() == {"ok": True}
    kind, chat_id, _text, markup = transport.calls[0]
    assert (kind, chat_id) == ("text", "77")
    assert markup["keyboard"][0][0]["request_contact"] is True
    assert subscriptions_repo.rows == {}


def test_webhook_contact_subscribes_allowed_phone(client, transport, allow_list_repo, subscriptions_repo):
    allow_list_repo.add("+994501234567")

    resp = client.post(
        "/telegram/webhook",
        json={"message": {"chat": {"id": 77}, "contact": {"phone_number": "994501234567"}}},
    )

    assert resp.get_json() == {"ok": True}
    assert subscriptions_repo.rows["77"].is_active is True
    assert transport.calls[-1][3] == {"remove_keyboard": True}


def test_webhook_acknowledges_garbage(client, transport):
    resp = client.post("/telegram/webhook", data="not json", content_type="text/plain")

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}
    assert transport.calls == []


def test_admin_lists_and_deletes_events(client, workers_repo):
    workers_repo.add("Ali", "Veli", "Guard", descriptor=[0.0, 0.0, 0.0])
    client.post("/api/attendance", data=_attendance_form(), content_type="multipart/form-data")

    events = client.get("/api/admin/events", headers=ADMIN).get_json()

    assert len(events) == 1
    assert events[0]["kind"] == "ENTRY"
    assert events[0]["image_url"].startswith("/uploads/events/")

    assert client.delete(f"/api/admin/events/{events[0]['event_id']}", headers=ADMIN).status_code == 200
    assert client.delete(f"/api/admin/events/{events[0]['event_id']}", headers=ADMIN).status_code == 404


def test_admin_reference_rejects_non_vector_and_drops_image(client, workers_repo, tmp_path):
    worker = workers_repo.add("Ali", "Veli", "Guard")

    resp = client.post(
        f"/api/admin/workers/{worker.worker_id}/reference",
        data={"descriptor": '"abc"', "reference": (io.BytesIO(b"\xff\xd8ref"), "ref.jpg")},
        content_type="multipart/form-data",
        headers=ADMIN,
    )

    assert resp.status_code == 400
    assert workers_repo.get_by_id(worker.worker_id).reference_descriptor is None
    assert list((tmp_path / "ref").iterdir()) == []


def test_unexpected_failure_drops_saved_capture(app, client, workers_repo, monkeypatch, tmp_path):
    workers_repo.add("Ali", "Veli", "Guard", descriptor=[0.0, 0.0, 0.0])

    def explode(submission, now=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(app.extensions["face_checkin"].attendance_service, "submit", explode)

    resp = client.post("/api/attendance", data=_attendance_form(), content_type="multipart/form-data")

    assert resp.status_code == 500
    assert list((tmp_path / "events").iterdir()) == []
