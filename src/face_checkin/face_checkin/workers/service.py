from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.validators import require_non_empty
from ..core.exceptions import ConflictError, NotFoundError, ShapeMismatch, ValidationError
from ..matching.matcher import validate_descriptor
from .repository import WorkerRepository

logger = logging.getLogger(__name__)


class WorkerService:
    """Use case: enroll and manage workers (admin)."""

    def __init__(self, workers: WorkerRepository):
        self._workers = workers

    def list_workers(self):
        return self._workers.list_admin_view()

    def enroll(self, *, name: str, surname: str, role: str) -> int:
        name = require_non_empty(name, "name")
        surname = require_non_empty(surname, "surname")
        role = require_non_empty(role, "role")

        if self._workers.find_by_identity(name, surname, role):
            raise ConflictError("worker already exists")

        worker_id = self._workers.create_worker(name=name, surname=surname, role=role)
        logger.info("Enrolled worker %s (%s %s, %s)", worker_id, name, surname, role)
        return worker_id

    def update_reference(self, worker_id: int, *, descriptor: Any, image_url: Optional[str] = None) -> None:
        """Replace the stored reference descriptor (and image, when given)."""

        if descriptor is None:
            raise ValidationError("descriptor missing")
        try:
            vector = validate_descriptor(descriptor, "reference descriptor")
        except ShapeMismatch as e:
            raise ValidationError(str(e)) from e
        if not self._workers.set_reference(worker_id, descriptor=vector, image_url=image_url):
            raise NotFoundError("worker not found")

    def set_active(self, worker_id: int, *, is_active: bool) -> None:
        if not self._workers.set_active(worker_id, is_active=is_active):
            raise NotFoundError("worker not found")
        logger.info("Worker %s %s", worker_id, "activated" if is_active else "deactivated")

    def delete_worker(self, worker_id: int) -> None:
        if not self._workers.delete_with_events(worker_id):
            raise NotFoundError("worker not found")
        logger.info("Deleted worker %s and its events", worker_id)
