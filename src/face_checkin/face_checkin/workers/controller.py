from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.auth import admin_required
from ..common.http import json_error, request_data
from ..common.uploads import save_upload
from ..common.validators import parse_descriptor
from ..core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/workers", methods=["GET"], endpoint="admin_workers")
    @admin_required
    def admin_workers():
        try:
            return jsonify(list(container.worker_service.list_workers()))
        except PersistenceError as e:
            return json_error(str(e), 500)

    @app.route("/api/admin/workers", methods=["POST"], endpoint="add_worker")
    @admin_required
    def add_worker():
        data = request_data()
        try:
            worker_id = container.worker_service.enroll(
                name=data.get("name", ""),
                surname=data.get("surname", ""),
                role=data.get("role", ""),
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except ConflictError as e:
            return json_error(str(e), 409)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True, "id": worker_id})

    @app.route("/api/admin/workers/<int:worker_id>", methods=["DELETE"], endpoint="delete_worker")
    @admin_required
    def delete_worker(worker_id: int):
        try:
            container.worker_service.delete_worker(worker_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True})

    @app.route("/api/admin/workers/<int:worker_id>/reference", methods=["POST"], endpoint="update_reference")
    @admin_required
    def update_reference(worker_id: int):
        data = request_data()
        image = request.files.get("reference")
        stored = None
        try:
            descriptor = parse_descriptor(data.get("descriptor"))
            if image is not None and image.filename:
                stored = save_upload(image, upload_dir=str(app.config["UPLOAD_DIR"]), subdir="ref", prefix="ref")
            container.worker_service.update_reference(
                worker_id,
                descriptor=descriptor,
                image_url=stored.url if stored else None,
            )
        except ValidationError as e:
            if stored is not None:
                stored.discard()
            return json_error(str(e), 400)
        except NotFoundError as e:
            if stored is not None:
                stored.discard()
            return json_error(str(e), 404)
        except PersistenceError as e:
            if stored is not None:
                stored.discard()
            return json_error(str(e), 500)
        return jsonify({"ok": True, "ref_image_url": stored.url if stored else None})

    @app.route("/api/admin/workers/<int:worker_id>/active", methods=["POST"], endpoint="set_worker_active")
    @admin_required
    def set_worker_active(worker_id: int):
        data = request_data()
        if "active" not in data:
            return json_error("active flag missing", 400)
        active = _as_bool(data.get("active"))
        try:
            container.worker_service.set_active(worker_id, is_active=active)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True, "active": active})
