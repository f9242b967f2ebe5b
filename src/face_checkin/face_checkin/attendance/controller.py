from __future__ import annotations

import logging

from flask import Flask, jsonify, request, send_from_directory

from ..common.auth import admin_required
from ..common.http import json_error
from ..common.uploads import save_upload, upload_url
from ..core.constants import DEFAULT_RECENT_EVENTS_LIMIT
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from ..container import Container
from .model import AttendanceSubmission

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _upload_dir() -> str:
        return str(app.config["UPLOAD_DIR"])

    @app.route("/api/attendance", methods=["POST"], endpoint="submit_attendance")
    def submit_attendance():
        photo = request.files.get("photo")
        stored = None
        try:
            if photo is not None and photo.filename:
                stored = save_upload(photo, upload_dir=_upload_dir(), subdir="events", prefix="event")

            submission = AttendanceSubmission.from_fields(
                name=request.form.get("name"),
                surname=request.form.get("surname"),
                role=request.form.get("role"),
                site=request.form.get("site"),
                descriptor=request.form.get("descriptor"),
                image_ref=stored.path if stored else None,
            )
            result = container.attendance_service.submit(submission)
        except ValidationError as e:
            if stored is not None:
                stored.discard()
            return json_error(str(e), 400)
        except PersistenceError:
            logger.exception("Attendance event could not be recorded")
            if stored is not None:
                stored.discard()
            return json_error("event could not be recorded", 500)
        except Exception:
            logger.exception("Unexpected error while recording attendance")
            if stored is not None:
                stored.discard()
            return json_error("system error while recording attendance", 500)

        body = result.to_dict()
        body["ok"] = True
        body["image_url"] = stored.url if stored else None
        return jsonify(body)

    @app.route("/uploads/<path:filename>", endpoint="uploaded_file")
    def uploaded_file(filename: str):
        return send_from_directory(_upload_dir(), filename)

    @app.route("/health/db", endpoint="health_db")
    def health_db():
        if container.conn is None:
            return jsonify({"ok": True, "database": "not configured"})
        try:
            container.conn.ping()
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True})

    @app.route("/api/admin/events", endpoint="admin_events")
    @admin_required
    def admin_events():
        limit = request.args.get("limit", default=DEFAULT_RECENT_EVENTS_LIMIT, type=int)
        try:
            events = container.attendance_service.recent_events(max(1, min(limit, 500)))
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify(
            [
                {
                    "event_id": ev.event_id,
                    "worker_id": ev.worker_id,
                    "created_at": ev.created_at.isoformat() if ev.created_at else None,
                    "kind": ev.kind.value,
                    "outcome": ev.outcome.value,
                    "site": ev.site,
                    "name": ev.name,
                    "surname": ev.surname,
                    "role": ev.role,
                    "reason": ev.reason,
                    "image_url": upload_url(ev.image_ref, _upload_dir()),
                }
                for ev in events
            ]
        )

    @app.route("/api/admin/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    @admin_required
    def delete_event(event_id: int):
        try:
            container.attendance_service.delete_event(event_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True})
