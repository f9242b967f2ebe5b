from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Worker


class WorkerRepository(Protocol):
    """Worker store used by the attendance service and admin endpoints."""

    def find_by_identity(self, name: str, surname: str, role: str) -> Optional[Worker]:
        """Case-insensitive lookup on trimmed (name, surname, role)."""

        raise NotImplementedError

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        raise NotImplementedError

    def create_worker(self, *, name: str, surname: str, role: str) -> int:
        raise NotImplementedError

    def set_reference(self, worker_id: int, *, descriptor: Any, image_url: Optional[str]) -> bool:
        raise NotImplementedError

    def set_active(self, worker_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_with_events(self, worker_id: int) -> bool:
        """Delete the worker and every event that references it, atomically."""

        raise NotImplementedError

    def list_admin_view(self, limit: int = 200) -> Sequence[dict]:
        raise NotImplementedError
